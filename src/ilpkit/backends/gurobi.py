"""
Gurobi backend through gurobipy.

Each solve opens its own Gurobi environment and model in ``with`` blocks, so
the native session is released on every exit path, including errors.
License and engine failures surface as ``BackendError``.

Hooks are called as ``hook(model, var_index)`` with the live
``gurobipy.Model``; ``model.getVars()[var_index[v]]`` is the Gurobi variable
of ``v``.
"""

import logging
from typing import Dict, Hashable, List, Optional

try:
    import gurobipy as gp
    from gurobipy import GRB
except ImportError as exc:
    raise ImportError(
        "gurobipy is required for the gurobi backend. "
        "Install with: pip install ilpkit[gurobi]"
    ) from exc

from ilpkit.backends.common import build_index, effective_bounds, extract_result, run_hooks
from ilpkit.constraint import Operator
from ilpkit.errors import BackendError
from ilpkit.factory import HookRegistry, ParameterBag
from ilpkit.problem import OptType, Problem, VarType
from ilpkit.result import Result
from ilpkit.solver import SolverConfig, SolveStatus

logger = logging.getLogger(__name__)

_VTYPES = {
    VarType.REAL: GRB.CONTINUOUS,
    VarType.INT: GRB.INTEGER,
    VarType.BOOL: GRB.BINARY,
}

_SENSES = {
    Operator.LE: GRB.LESS_EQUAL,
    Operator.GE: GRB.GREATER_EQUAL,
    Operator.EQ: GRB.EQUAL,
}

_STATUS = {
    GRB.OPTIMAL: SolveStatus.OPTIMAL,
    GRB.SUBOPTIMAL: SolveStatus.FEASIBLE,
    GRB.INFEASIBLE: SolveStatus.INFEASIBLE,
    GRB.INF_OR_UNBD: SolveStatus.INFEASIBLE,
    GRB.UNBOUNDED: SolveStatus.UNBOUNDED,
    GRB.CUTOFF: SolveStatus.INFEASIBLE,
    GRB.TIME_LIMIT: SolveStatus.TIME_LIMIT,
    GRB.ITERATION_LIMIT: SolveStatus.TIME_LIMIT,
    GRB.NODE_LIMIT: SolveStatus.TIME_LIMIT,
    GRB.SOLUTION_LIMIT: SolveStatus.TIME_LIMIT,
    GRB.INTERRUPTED: SolveStatus.TIME_LIMIT,
}


class GurobiSolver(ParameterBag, HookRegistry):
    """Solver adapter for Gurobi."""

    name = "gurobi"

    def __init__(self):
        ParameterBag.__init__(self)
        HookRegistry.__init__(self)
        self.last_status: Optional[SolveStatus] = None

    def solve(self, problem: Problem) -> Optional[Result]:
        """
        Solve ``problem`` with Gurobi.

        Returns:
            The Result, or None if no solution exists or none was found in
            time.

        Raises:
            BackendError: On license problems or engine failures.
        """
        config = self.freeze(self.name)
        self.last_status = None
        var_index = build_index(problem)

        try:
            with gp.Env(empty=True) as env:
                env.setParam("OutputFlag", 1 if config.verbose >= 2 else 0)
                env.start()
                with gp.Model(env=env) as model:
                    grb_vars = self._build_model(model, problem, var_index)
                    self._apply_config(model, config)
                    run_hooks(self._hooks, model, var_index)
                    model.optimize()
                    return self._extract(model, problem, var_index, grb_vars)
        except gp.GurobiError as exc:
            self.last_status = SolveStatus.ERROR
            raise BackendError(f"Gurobi failed: {exc}", backend=self.name) from exc

    # =========================================================================
    # Model
    # =========================================================================

    @staticmethod
    def _build_model(model: "gp.Model", problem: Problem, var_index: Dict[Hashable, int]) -> List["gp.Var"]:
        grb_vars = []
        for variable, j in var_index.items():
            lb, ub = effective_bounds(problem, variable)
            grb_vars.append(
                model.addVar(
                    lb=-GRB.INFINITY if lb is None else float(lb),
                    ub=GRB.INFINITY if ub is None else float(ub),
                    vtype=_VTYPES[problem.get_var_type(variable)],
                    name=f"x{j}",
                )
            )

        for i, constraint in enumerate(problem.constraints):
            expr = gp.LinExpr(
                [float(c) for c in constraint.lhs.coefficients],
                [grb_vars[var_index[v]] for v in constraint.lhs.variables],
            )
            model.addLConstr(expr, _SENSES[constraint.operator], float(constraint.rhs), name=f"c{i}")

        if problem.objective is not None:
            objective = gp.LinExpr(
                [float(c) for c in problem.objective.coefficients],
                [grb_vars[var_index[v]] for v in problem.objective.variables],
            )
            sense = GRB.MAXIMIZE if problem.opt_type is OptType.MAX else GRB.MINIMIZE
            model.setObjective(objective, sense)

        model.update()
        return grb_vars

    def _apply_config(self, model: "gp.Model", config: SolverConfig) -> None:
        if config.time_limit is not None:
            model.setParam("TimeLimit", config.time_limit)
        if config.gap is not None:
            model.setParam("MIPGap", config.gap)
        if config.threads is not None:
            model.setParam("Threads", config.threads)
        if config.verbose >= 3:
            model.setParam("DisplayInterval", 1)
        if config.postsolve is not None:
            logger.debug("POSTSOLVE has no Gurobi counterpart (ignored)")
        for key, value in config.options.items():
            model.setParam(key, value)

    def _extract(
        self,
        model: "gp.Model",
        problem: Problem,
        var_index: Dict[Hashable, int],
        grb_vars: List["gp.Var"],
    ) -> Optional[Result]:
        status = _STATUS.get(model.Status)
        if status is None:
            self.last_status = SolveStatus.ERROR
            raise BackendError(f"Gurobi terminated with status code {model.Status}", backend=self.name)
        if status is SolveStatus.TIME_LIMIT and model.SolCount > 0:
            status = SolveStatus.FEASIBLE
        self.last_status = status
        logger.debug("Gurobi finished with status %s", status)

        if not status.has_solution:
            return None

        values = {variable: grb_vars[j].X for variable, j in var_index.items()}
        objective_value = model.ObjVal if problem.objective is not None else None

        duals = None
        if not model.IsMIP:
            duals = {variable: grb_vars[j].RC for variable, j in var_index.items()}
            for constraint, row in zip(problem.constraints, model.getConstrs()):
                duals[constraint.name] = row.Pi

        return extract_result(problem, values, objective_value=objective_value, duals=duals)

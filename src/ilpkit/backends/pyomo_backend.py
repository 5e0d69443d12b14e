"""
Pyomo backend.

Builds a Pyomo ``ConcreteModel`` and solves it with any solver reachable
through ``pyomo.environ.SolverFactory`` (glpk, cbc, scip, cplex, ...).
Switching solvers is just a different name; the model is the same.

Model layout:
    model.x[j]      one variable per problem variable (column j)
    model.rows[i]   one constraint per problem constraint, in order
    model.obj       objective (constant 0 for feasibility problems)
    model.dual      IMPORT suffix for pure LPs

Hooks are called as ``hook(model, var_index)`` before the solver is
invoked.
"""

import logging
from typing import Dict, Hashable, Optional

from pyomo.common.errors import ApplicationError
from pyomo.environ import (
    Binary,
    ConcreteModel,
    Constraint,
    Integers,
    Objective,
    Reals,
    SolverFactory,
    Suffix,
    TerminationCondition,
    Var,
    maximize,
    minimize,
    value,
)

from ilpkit.backends.common import (
    build_index,
    effective_bounds,
    extract_result,
    row_bounds,
    run_hooks,
    trivially_satisfied,
)
from ilpkit.constraint import Operator
from ilpkit.errors import BackendError, SolverUnavailableError
from ilpkit.factory import HookRegistry, ParameterBag
from ilpkit.problem import OptType, Problem, VarType
from ilpkit.result import Result
from ilpkit.solver import SolveStatus, get_available_solvers, get_pyomo_solver_name

logger = logging.getLogger(__name__)

_DOMAINS = {
    VarType.REAL: Reals,
    VarType.INT: Integers,
    VarType.BOOL: Binary,
}

_TERMINATION = {
    TerminationCondition.optimal: SolveStatus.OPTIMAL,
    TerminationCondition.globallyOptimal: SolveStatus.OPTIMAL,
    TerminationCondition.locallyOptimal: SolveStatus.OPTIMAL,
    TerminationCondition.feasible: SolveStatus.FEASIBLE,
    TerminationCondition.maxTimeLimit: SolveStatus.TIME_LIMIT,
    TerminationCondition.maxIterations: SolveStatus.TIME_LIMIT,
    TerminationCondition.maxEvaluations: SolveStatus.TIME_LIMIT,
    TerminationCondition.minStepLength: SolveStatus.TIME_LIMIT,
    TerminationCondition.intermediateNonInteger: SolveStatus.TIME_LIMIT,
    TerminationCondition.userInterrupt: SolveStatus.TIME_LIMIT,
    TerminationCondition.infeasible: SolveStatus.INFEASIBLE,
    TerminationCondition.infeasibleOrUnbounded: SolveStatus.INFEASIBLE,
    TerminationCondition.unbounded: SolveStatus.UNBOUNDED,
    TerminationCondition.noSolution: SolveStatus.UNKNOWN,
}


class PyomoSolver(ParameterBag, HookRegistry):
    """
    Solver adapter for solvers driven through Pyomo.

    Args:
        solver_name: Backend name ("glpk", "cbc", "scip", "cplex") or any
            other Pyomo SolverFactory name.
    """

    def __init__(self, solver_name: str = "glpk"):
        ParameterBag.__init__(self)
        HookRegistry.__init__(self)
        self.name = solver_name.lower()
        self.last_status: Optional[SolveStatus] = None

    def solve(self, problem: Problem) -> Optional[Result]:
        """
        Build and solve the Pyomo model.

        Returns:
            The Result, or None if no solution exists or none was found in
            time.

        Raises:
            SolverUnavailableError: If the solver executable is missing.
            BackendError: If the solver fails.
        """
        config = self.freeze(self.name)
        self.last_status = None

        var_index = build_index(problem)
        model = self._build_model(problem, var_index)
        if model is None:
            # a constraint without terms is violated
            self.last_status = SolveStatus.INFEASIBLE
            return None

        run_hooks(self._hooks, model, var_index)
        if not var_index:
            # Pyomo solvers refuse models without variables
            self.last_status = SolveStatus.OPTIMAL
            return extract_result(problem, {})

        solver = SolverFactory(get_pyomo_solver_name(self.name))
        if not solver.available(exception_flag=False):
            raise SolverUnavailableError(
                f"Solver '{self.name}' is not available. "
                f"Available solvers: {get_available_solvers()}",
                backend=self.name,
            )

        for key, val in config.to_pyomo_options().items():
            solver.options[key] = val
        if config.postsolve is not None:
            logger.debug("POSTSOLVE has no Pyomo counterpart (ignored)")

        try:
            results = solver.solve(model, tee=config.verbose >= 2, load_solutions=False)
        except ApplicationError as exc:
            self.last_status = SolveStatus.ERROR
            raise BackendError(f"Solver '{self.name}' failed: {exc}", backend=self.name) from exc

        condition = results.solver.termination_condition
        status = _TERMINATION.get(condition)
        if status is None:
            self.last_status = SolveStatus.ERROR
            raise BackendError(
                f"Solver terminated with status {condition}", backend=self.name
            )
        has_solution = len(getattr(results, "solution", ())) > 0
        if status is SolveStatus.TIME_LIMIT and has_solution:
            status = SolveStatus.FEASIBLE
        self.last_status = status
        logger.debug("Pyomo/%s finished with status %s", self.name, status)

        if not status.has_solution:
            return None

        model.solutions.load_from(results)
        return self._extract(problem, var_index, model)

    # =========================================================================
    # Model
    # =========================================================================

    def _build_model(self, problem: Problem, var_index: Dict[Hashable, int]) -> Optional[ConcreteModel]:
        variables = problem.variables
        model = ConcreteModel()

        def domain_rule(model, j):
            return _DOMAINS[problem.get_var_type(variables[j])]

        def bounds_rule(model, j):
            return effective_bounds(problem, variables[j])

        model.x = Var(range(len(variables)), domain=domain_rule, bounds=bounds_rule)

        for constraint in problem.constraints:
            if len(constraint.lhs) == 0 and not trivially_satisfied(constraint):
                return None

        def row_rule(model, i):
            constraint = problem.constraints[i]
            if len(constraint.lhs) == 0:
                return Constraint.Skip
            expr = sum(
                coefficient * model.x[var_index[variable]]
                for variable, coefficient in constraint.lhs
            )
            lo, hi = row_bounds(constraint)
            if constraint.operator is Operator.LE:
                return expr <= hi
            if constraint.operator is Operator.GE:
                return expr >= lo
            return expr == hi

        model.rows = Constraint(range(len(problem.constraints)), rule=row_rule)

        if problem.objective is not None and len(problem.objective) > 0:
            model.obj = Objective(
                expr=sum(
                    coefficient * model.x[var_index[variable]]
                    for variable, coefficient in problem.objective
                ),
                sense=maximize if problem.opt_type is OptType.MAX else minimize,
            )
        else:
            model.obj = Objective(expr=0, sense=minimize)

        if not any(problem.get_var_type(v).is_int for v in variables):
            model.dual = Suffix(direction=Suffix.IMPORT)
        return model

    def _extract(self, problem: Problem, var_index: Dict[Hashable, int], model: ConcreteModel) -> Result:
        values = {}
        for variable, j in var_index.items():
            raw = value(model.x[j], exception=False)
            if raw is None:
                # not referenced by any row, so the solver never saw it
                raw = _value_within_bounds(model.x[j].lb, model.x[j].ub)
            values[variable] = raw

        objective_value = None
        if problem.objective is not None:
            objective_value = value(model.obj, exception=False)

        duals = None
        if hasattr(model, "dual") and len(model.dual) > 0:
            duals = {}
            for i, constraint in enumerate(problem.constraints):
                if i in model.rows and model.rows[i] in model.dual:
                    duals[constraint.name] = model.dual[model.rows[i]]

        return extract_result(problem, values, objective_value=objective_value, duals=duals)


def _value_within_bounds(lb, ub) -> float:
    raw = 0.0
    if lb is not None:
        raw = max(raw, lb)
    if ub is not None:
        raw = min(raw, ub)
    return raw

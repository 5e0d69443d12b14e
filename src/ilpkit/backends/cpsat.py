"""
Pseudo-boolean backend on OR-Tools CP-SAT.

CP-SAT is used here as a pure feasibility engine over 0/1 variables with
integer coefficients: the objective is never handed to it. Optimization runs
through the incremental-cut loop in ``ilpkit.backends.cuts``, which adds one
strict-improvement constraint per incumbent until the model becomes
infeasible or the time budget is spent.

Before any model is built, the problem is checked:
    - every variable must be BOOL (DomainViolationError)
    - every coefficient and right-hand side must be integral
      (CoefficientDomainError)

Hooks are called once, before the first feasibility call, as
``hook(context, var_index)`` with a ``CpSatModel``.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Hashable, List, Optional, Tuple

from ortools.sat.python import cp_model

from ilpkit.backends.common import (
    build_index,
    check_boolean_domain,
    check_integral_coefficients,
    effective_bounds,
    extract_result,
    int_terms,
    run_hooks,
    to_int,
)
from ilpkit.backends.cuts import optimize_with_cuts
from ilpkit.constraint import Operator
from ilpkit.errors import BackendError
from ilpkit.factory import HookRegistry, ParameterBag
from ilpkit.problem import OptType, Problem
from ilpkit.result import Result
from ilpkit.solver import SolverConfig, SolveStatus

logger = logging.getLogger(__name__)


@dataclass
class CpSatModel:
    """Native context handed to hooks: the CP-SAT model and one literal per column."""

    model: cp_model.CpModel
    literals: List[cp_model.IntVar]


def _weighted_sum(literals, indices: List[int], coefficients: List[int]):
    return sum(c * literals[j] for j, c in zip(indices, coefficients))


class CpSatSolver(ParameterBag, HookRegistry):
    """Solver adapter for 0-1 problems on OR-Tools CP-SAT."""

    name = "cpsat"

    def __init__(self):
        ParameterBag.__init__(self)
        HookRegistry.__init__(self)
        self.last_status: Optional[SolveStatus] = None
        self.last_history: List[int] = []

    def solve(self, problem: Problem) -> Optional[Result]:
        """
        Solve a 0-1 problem.

        Returns:
            The best assignment found with its objective value, or None if
            the problem is infeasible or nothing was found in time.

        Raises:
            DomainViolationError: If a variable is not BOOL.
            CoefficientDomainError: If a coefficient or rhs is not integral.
            BackendError: If CP-SAT rejects the model.
        """
        check_boolean_domain(problem, self.name)
        check_integral_coefficients(problem, self.name)

        config = self.freeze(self.name)
        self.last_status = None
        self.last_history = []

        var_index = build_index(problem)
        context = self._build_model(problem, var_index)
        run_hooks(self._hooks, context, var_index)

        objective_expr = None
        if problem.objective is not None:
            indices, coefficients = int_terms(problem.objective, var_index, self.name)
            objective_expr = _weighted_sum(context.literals, indices, coefficients)
        maximize = problem.opt_type is OptType.MAX

        def decide(remaining: Optional[float]) -> Tuple[SolveStatus, Optional[Dict[Hashable, int]]]:
            return self._decide(context, var_index, config, remaining)

        def add_cut(bound: int) -> None:
            if maximize:
                context.model.Add(objective_expr >= bound)
            else:
                context.model.Add(objective_expr <= bound)

        try:
            outcome = optimize_with_cuts(
                decide,
                add_cut,
                problem.objective,
                problem.opt_type,
                time_limit=config.time_limit,
            )
        except BackendError:
            self.last_status = SolveStatus.ERROR
            raise
        self.last_status = outcome.status
        self.last_history = outcome.history

        if outcome.assignment is None:
            logger.info("No feasible solution found (%s)", outcome.status)
            return None
        return extract_result(problem, outcome.assignment, objective_value=outcome.objective_value)

    # =========================================================================
    # Model
    # =========================================================================

    def _build_model(self, problem: Problem, var_index: Dict[Hashable, int]) -> CpSatModel:
        model = cp_model.CpModel()
        literals = [model.NewBoolVar(f"x{j}") for j in range(len(var_index))]

        for variable, j in var_index.items():
            lb, ub = effective_bounds(problem, variable)
            if lb == 1:
                model.Add(literals[j] == 1)
            if ub == 0:
                model.Add(literals[j] == 0)

        for constraint in problem.constraints:
            indices, coefficients = int_terms(constraint.lhs, var_index, self.name)
            expr = _weighted_sum(literals, indices, coefficients)
            rhs = to_int(constraint.rhs, self.name, "right-hand side")
            if constraint.operator is Operator.LE:
                ct = model.Add(expr <= rhs)
            elif constraint.operator is Operator.GE:
                ct = model.Add(expr >= rhs)
            else:
                ct = model.Add(expr == rhs)
            ct.WithName(constraint.name)

        return CpSatModel(model=model, literals=literals)

    # =========================================================================
    # Feasibility oracle
    # =========================================================================

    def _decide(
        self,
        context: CpSatModel,
        var_index: Dict[Hashable, int],
        config: SolverConfig,
        remaining: Optional[float],
    ) -> Tuple[SolveStatus, Optional[Dict[Hashable, int]]]:
        solver = cp_model.CpSolver()
        self._apply_config(solver, config, remaining)

        status = solver.Solve(context.model)
        if status in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            assignment = {
                variable: int(solver.BooleanValue(context.literals[j]))
                for variable, j in var_index.items()
            }
            return SolveStatus.FEASIBLE, assignment
        if status == cp_model.INFEASIBLE:
            return SolveStatus.INFEASIBLE, None
        if status == cp_model.UNKNOWN:
            return SolveStatus.TIME_LIMIT, None
        raise BackendError(
            f"CP-SAT rejected the model: {context.model.Validate() or solver.StatusName(status)}",
            backend=self.name,
        )

    def _apply_config(self, solver: "cp_model.CpSolver", config: SolverConfig, remaining: Optional[float]) -> None:
        if remaining is not None:
            solver.parameters.max_time_in_seconds = float(remaining)
        if config.threads is not None:
            solver.parameters.num_search_workers = int(config.threads)
        solver.parameters.log_search_progress = config.verbose >= 2
        for key, value in config.options.items():
            try:
                setattr(solver.parameters, key, value)
            except (AttributeError, TypeError, ValueError) as exc:
                logger.warning("CP-SAT rejected option %s=%r (ignored): %s", key, value, exc)

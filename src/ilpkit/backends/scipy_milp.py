"""
SciPy backend.

Problems with integer or boolean variables go to ``scipy.optimize.milp``.
Pure LPs go to ``scipy.optimize.linprog`` (HiGHS method), which also reports
dual values. Both wrap HiGHS, so SciPy alone is a complete backend.

Hooks receive a mutable ``ScipyModel`` with the arrays that will be passed
to SciPy, and may edit them in place or replace them.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Optional

import numpy as np
from scipy.optimize import Bounds, LinearConstraint, linprog, milp
from scipy.sparse import csr_matrix, vstack

from ilpkit.backends.common import (
    build_index,
    column_arrays,
    constraint_matrix,
    constraint_names,
    empty_problem_status,
    extract_result,
    is_maximize,
    objective_vector,
    run_hooks,
    values_from_array,
)
from ilpkit.errors import BackendError
from ilpkit.factory import HookRegistry, ParameterBag
from ilpkit.problem import Problem
from ilpkit.result import Result
from ilpkit.solver import SolverConfig, SolveStatus

logger = logging.getLogger(__name__)

# scipy status code -> outcome
_STATUS = {
    0: SolveStatus.OPTIMAL,
    1: SolveStatus.TIME_LIMIT,
    2: SolveStatus.INFEASIBLE,
    3: SolveStatus.UNBOUNDED,
}


@dataclass
class ScipyModel:
    """
    Arrays handed to SciPy, in minimization form.

    Attributes:
        c: Objective coefficients (negated for MAX problems)
        A: Sparse constraint matrix, one row per constraint
        row_lower: Row lower bounds (-inf if none)
        row_upper: Row upper bounds (+inf if none)
        lower: Column lower bounds (-inf if none)
        upper: Column upper bounds (+inf if none)
        integrality: 1 for integer columns, 0 for continuous
        maximize: True if ``c`` was negated
        options: Options passed to milp/linprog
    """

    c: np.ndarray
    A: csr_matrix
    row_lower: np.ndarray
    row_upper: np.ndarray
    lower: np.ndarray
    upper: np.ndarray
    integrality: np.ndarray
    maximize: bool = False
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_mip(self) -> bool:
        return bool(np.any(self.integrality))


class ScipySolver(ParameterBag, HookRegistry):
    """
    Solver adapter for scipy.optimize.

    Hooks are called as ``hook(model, var_index)`` with the ``ScipyModel``.
    """

    name = "scipy"

    def __init__(self):
        ParameterBag.__init__(self)
        HookRegistry.__init__(self)
        self.last_status: Optional[SolveStatus] = None

    def solve(self, problem: Problem) -> Optional[Result]:
        """
        Solve ``problem`` with SciPy.

        Returns:
            The Result, or None if no solution exists or none was found in
            time.

        Raises:
            BackendError: On numerical failure or invalid input arrays.
        """
        config = self.freeze(self.name)
        self.last_status = None

        var_index = build_index(problem)
        model = self._build_model(problem, var_index, config)
        run_hooks(self._hooks, model, var_index)

        if not var_index:
            # nothing for SciPy to solve; it rejects zero-length arrays
            return self._solve_empty(problem)

        try:
            if model.is_mip:
                status, x, fun, duals = self._solve_milp(model)
            else:
                status, x, fun, duals = self._solve_lp(problem, var_index, model)
        except ValueError as exc:
            self.last_status = SolveStatus.ERROR
            raise BackendError(f"SciPy rejected the model: {exc}", backend=self.name) from exc
        except BackendError:
            self.last_status = SolveStatus.ERROR
            raise

        self.last_status = status
        logger.debug("SciPy finished with status %s", status)
        if not status.has_solution:
            return None

        objective_value = None
        if problem.objective is not None and fun is not None:
            objective_value = -fun if model.maximize else fun
        values = values_from_array(var_index, x)
        return extract_result(problem, values, objective_value=objective_value, duals=duals)

    def _solve_empty(self, problem: Problem) -> Optional[Result]:
        self.last_status = empty_problem_status(problem)
        logger.debug("Problem has no variables; status %s", self.last_status)
        if not self.last_status.has_solution:
            return None
        return extract_result(problem, {})

    # =========================================================================
    # Model
    # =========================================================================

    def _build_model(
        self,
        problem: Problem,
        var_index: Dict[Hashable, int],
        config: SolverConfig,
    ) -> ScipyModel:
        lower, upper, integrality = column_arrays(problem, var_index)
        A, row_lower, row_upper = constraint_matrix(problem, var_index)
        maximize = is_maximize(problem)
        c = objective_vector(problem, var_index)
        if maximize:
            c = -c

        options: Dict[str, Any] = {"disp": config.verbose >= 2}
        if config.time_limit is not None:
            options["time_limit"] = config.time_limit
        if config.postsolve is not None:
            logger.debug("POSTSOLVE has no SciPy counterpart (ignored)")
        if config.gap is not None:
            if integrality.any():
                options["mip_rel_gap"] = config.gap
            else:
                logger.debug("GAP is ignored for pure LPs")
        if config.threads is not None:
            logger.debug("THREADS is not supported by SciPy (ignored)")
        options.update(config.options)

        return ScipyModel(
            c=c,
            A=A,
            row_lower=row_lower,
            row_upper=row_upper,
            lower=lower,
            upper=upper,
            integrality=integrality,
            maximize=maximize,
            options=options,
        )

    # =========================================================================
    # MILP
    # =========================================================================

    def _solve_milp(self, model: ScipyModel):
        constraints = None
        if model.A.shape[0] > 0:
            constraints = LinearConstraint(model.A, model.row_lower, model.row_upper)
        res = milp(
            model.c,
            integrality=model.integrality,
            bounds=Bounds(model.lower, model.upper),
            constraints=constraints,
            options=model.options,
        )
        status = _classify(res.status, res.x)
        return status, res.x, res.fun, None

    # =========================================================================
    # LP (with duals)
    # =========================================================================

    def _solve_lp(self, problem: Problem, var_index: Dict[Hashable, int], model: ScipyModel):
        A = model.A.tocsr()
        lo, hi = model.row_lower, model.row_upper
        equal = np.isfinite(lo) & (lo == hi)
        upper_rows = np.flatnonzero(~equal & np.isfinite(hi))
        lower_rows = np.flatnonzero(~equal & np.isfinite(lo))
        eq_rows = np.flatnonzero(equal)

        # lhs <= hi and -lhs <= -lo
        A_ub = b_ub = None
        if len(upper_rows) or len(lower_rows):
            A_ub = vstack([A[upper_rows], -A[lower_rows]]).tocsr()
            b_ub = np.concatenate([hi[upper_rows], -lo[lower_rows]])
        A_eq = b_eq = None
        if len(eq_rows):
            A_eq = A[eq_rows]
            b_eq = hi[eq_rows]

        bounds = [
            (None if np.isinf(lb) else lb, None if np.isinf(ub) else ub)
            for lb, ub in zip(model.lower, model.upper)
        ]
        options = dict(model.options)
        options.pop("mip_rel_gap", None)
        res = linprog(
            model.c,
            A_ub=A_ub,
            b_ub=b_ub,
            A_eq=A_eq,
            b_eq=b_eq,
            bounds=bounds,
            method="highs",
            options=options,
        )
        status = _classify(res.status, res.x)
        if not status.has_solution:
            return status, None, None, None

        duals = self._lp_duals(problem, var_index, model, res, upper_rows, lower_rows, eq_rows)
        return status, res.x, res.fun, duals

    @staticmethod
    def _lp_duals(problem, var_index, model, res, upper_rows, lower_rows, eq_rows):
        sign = -1.0 if model.maximize else 1.0
        names: List[str] = constraint_names(problem)
        row_dual = np.zeros(len(names))

        if res.ineqlin is not None and len(res.ineqlin.marginals):
            marginals = np.asarray(res.ineqlin.marginals)
            k = len(upper_rows)
            row_dual[upper_rows] += marginals[:k]
            row_dual[lower_rows] -= marginals[k:]
        if res.eqlin is not None and len(res.eqlin.marginals):
            row_dual[eq_rows] += np.asarray(res.eqlin.marginals)

        col_dual = np.zeros(len(var_index))
        if res.lower is not None:
            col_dual += np.asarray(res.lower.marginals)
        if res.upper is not None:
            col_dual += np.asarray(res.upper.marginals)

        duals: Dict[Hashable, float] = {}
        for variable, j in var_index.items():
            duals[variable] = sign * col_dual[j]
        for name, value in zip(names, row_dual):
            duals[name] = sign * value
        return duals


def _classify(code: int, x) -> SolveStatus:
    status = _STATUS.get(code)
    if status is None:
        raise BackendError(f"SciPy solver failed with status {code}", backend="scipy")
    if status is SolveStatus.TIME_LIMIT and x is not None:
        return SolveStatus.FEASIBLE
    return status

"""
HiGHS backend through highspy.

The problem is packed into a ``highspy.HighsLp`` (column-wise sparse
matrix, ranged rows, integrality per column) and handed to a fresh
``highspy.Highs`` instance. Hooks receive that instance after the model has
been passed and before ``run()``, so they can change options or the model.

Row duals and column reduced costs are reported for pure LPs.
"""

import logging
from typing import Dict, Hashable, Optional

import numpy as np
import highspy

from ilpkit.backends.common import (
    build_index,
    column_arrays,
    constraint_matrix,
    constraint_names,
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

_MODEL_STATUS = {
    highspy.HighsModelStatus.kOptimal: SolveStatus.OPTIMAL,
    highspy.HighsModelStatus.kModelEmpty: SolveStatus.OPTIMAL,
    highspy.HighsModelStatus.kInfeasible: SolveStatus.INFEASIBLE,
    # presolve could not tell which one
    highspy.HighsModelStatus.kUnboundedOrInfeasible: SolveStatus.INFEASIBLE,
    highspy.HighsModelStatus.kUnbounded: SolveStatus.UNBOUNDED,
    highspy.HighsModelStatus.kTimeLimit: SolveStatus.TIME_LIMIT,
    highspy.HighsModelStatus.kIterationLimit: SolveStatus.TIME_LIMIT,
    highspy.HighsModelStatus.kSolutionLimit: SolveStatus.TIME_LIMIT,
    highspy.HighsModelStatus.kInterrupt: SolveStatus.TIME_LIMIT,
    highspy.HighsModelStatus.kObjectiveBound: SolveStatus.TIME_LIMIT,
    highspy.HighsModelStatus.kObjectiveTarget: SolveStatus.TIME_LIMIT,
}

# HighsSolutionStatus value for a feasible primal solution
_SOLUTION_FEASIBLE = 2


class HighsSolver(ParameterBag, HookRegistry):
    """
    Solver adapter for HiGHS.

    Hooks are called as ``hook(highs, var_index)`` with the live
    ``highspy.Highs`` instance and the variable -> column map.
    """

    name = "highs"

    def __init__(self):
        ParameterBag.__init__(self)
        HookRegistry.__init__(self)
        self.last_status: Optional[SolveStatus] = None

    def solve(self, problem: Problem) -> Optional[Result]:
        """
        Solve ``problem`` with HiGHS.

        Returns:
            The Result, or None if the problem is infeasible, unbounded or
            no solution was found within the time limit.

        Raises:
            BackendError: If HiGHS reports an error.
        """
        config = self.freeze(self.name)
        self.last_status = None

        # BUILD / ENCODE
        var_index = build_index(problem)
        lp = self._build_lp(problem, var_index)

        highs = highspy.Highs()
        self._apply_config(highs, config)
        if highs.passModel(lp) == highspy.HighsStatus.kError:
            self.last_status = SolveStatus.ERROR
            raise BackendError("HiGHS rejected the model", backend=self.name)

        # HOOKS
        run_hooks(self._hooks, highs, var_index)

        # SOLVE
        logger.debug(
            "Solving with HiGHS: %d columns, %d rows",
            len(var_index),
            len(problem.constraints),
        )
        run_status = highs.run()
        model_status = highs.getModelStatus()
        if run_status == highspy.HighsStatus.kError:
            self.last_status = SolveStatus.ERROR
            raise BackendError(
                f"HiGHS failed with model status {highs.modelStatusToString(model_status)}",
                backend=self.name,
            )

        # EXTRACT
        info = highs.getInfo()
        status = _MODEL_STATUS.get(model_status)
        if status is None:
            self.last_status = SolveStatus.ERROR
            raise BackendError(
                f"HiGHS terminated with status {highs.modelStatusToString(model_status)}",
                backend=self.name,
            )
        if status is SolveStatus.TIME_LIMIT and info.primal_solution_status == _SOLUTION_FEASIBLE:
            status = SolveStatus.FEASIBLE
        self.last_status = status
        logger.debug("HiGHS finished with status %s", status)

        if not status.has_solution:
            return None

        solution = highs.getSolution()
        values = values_from_array(var_index, solution.col_value)
        objective_value = info.objective_function_value if problem.objective is not None else None

        duals = None
        has_integers = any(problem.get_var_type(v).is_int for v in var_index)
        if not has_integers and solution.dual_valid:
            duals = self._duals(problem, var_index, solution)

        return extract_result(problem, values, objective_value=objective_value, duals=duals)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _build_lp(self, problem: Problem, var_index: Dict[Hashable, int]) -> "highspy.HighsLp":
        col_lower, col_upper, integrality = column_arrays(problem, var_index)
        A, row_lower, row_upper = constraint_matrix(problem, var_index)
        A = A.tocsc()

        lp = highspy.HighsLp()
        lp.num_col_ = len(var_index)
        lp.num_row_ = len(problem.constraints)
        lp.col_cost_ = objective_vector(problem, var_index)
        lp.col_lower_ = col_lower
        lp.col_upper_ = col_upper
        lp.row_lower_ = row_lower
        lp.row_upper_ = row_upper
        lp.a_matrix_.format_ = highspy.MatrixFormat.kColwise
        lp.a_matrix_.start_ = A.indptr
        lp.a_matrix_.index_ = A.indices
        lp.a_matrix_.value_ = A.data
        if np.any(integrality):
            lp.integrality_ = [
                highspy.HighsVarType.kInteger if flag else highspy.HighsVarType.kContinuous
                for flag in integrality
            ]
        if is_maximize(problem):
            lp.sense_ = highspy.ObjSense.kMaximize
        return lp

    def _apply_config(self, highs: "highspy.Highs", config: SolverConfig) -> None:
        verbose = config.verbose
        highs.setOptionValue("output_flag", verbose >= 2)
        if verbose >= 3:
            highs.setOptionValue("log_dev_level", 1)
        if config.time_limit is not None:
            highs.setOptionValue("time_limit", config.time_limit)
        if config.gap is not None:
            highs.setOptionValue("mip_rel_gap", config.gap)
        if config.threads is not None:
            highs.setOptionValue("threads", config.threads)
        if config.postsolve is not None:
            logger.debug("POSTSOLVE has no HiGHS counterpart (ignored)")
        for key, value in config.options.items():
            if highs.setOptionValue(key, value) == highspy.HighsStatus.kError:
                logger.warning("HiGHS rejected option %s=%r (ignored)", key, value)

    @staticmethod
    def _duals(problem: Problem, var_index: Dict[Hashable, int], solution) -> Dict[Hashable, float]:
        duals: Dict[Hashable, float] = {}
        for variable, j in var_index.items():
            duals[variable] = solution.col_dual[j]
        for name, value in zip(constraint_names(problem), solution.row_dual):
            duals[name] = value
        return duals

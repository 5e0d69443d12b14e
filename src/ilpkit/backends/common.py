"""
Translation rules shared by all backend adapters.

Adapters do not inherit from each other. Each one composes these helpers
for the stages of a solve:

    BUILD    build_index
    ENCODE   effective_bounds, column_arrays, row_bounds, constraint_matrix,
             objective_vector
    CHECK    check_boolean_domain, check_integral_coefficients (0/1 engines)
    HOOKS    run_hooks
    EXTRACT  extract_result
"""

import logging
import math
from typing import Any, Callable, Dict, Hashable, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
from scipy.sparse import csr_matrix

from ilpkit.constraint import Constraint, Operator
from ilpkit.errors import CoefficientDomainError, DomainViolationError
from ilpkit.linear import Linear, Number
from ilpkit.problem import OptType, Problem, VarType
from ilpkit.result import Result
from ilpkit.solver import SolveStatus

logger = logging.getLogger(__name__)

INF = math.inf

# hook(native, var_index)
Hook = Callable[[Any, Dict[Hashable, int]], None]


# =============================================================================
# BUILD
# =============================================================================


def build_index(problem: Problem) -> Dict[Hashable, int]:
    """Assign each problem variable a 0-based column index in registration order."""
    return {variable: i for i, variable in enumerate(problem.variables)}


# =============================================================================
# ENCODE
# =============================================================================


def effective_bounds(
    problem: Problem, variable: Hashable
) -> Tuple[Optional[Number], Optional[Number]]:
    """
    Bounds of a variable as they are sent to a backend.

    ``None`` means unbounded on that side. BOOL variables are clamped to
    ``[0, 1]``: an explicit lower bound above 0 forces the variable to 1,
    an explicit upper bound below 1 forces it to 0.
    """
    lower = problem.get_var_lower_bound(variable)
    upper = problem.get_var_upper_bound(variable)
    if problem.get_var_type(variable) is VarType.BOOL:
        lb = 1 if lower is not None and lower > 0 else 0
        ub = 0 if upper is not None and upper < 1 else 1
        return lb, ub
    return lower, upper


def column_arrays(
    problem: Problem, var_index: Mapping[Hashable, int]
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Column lower bounds, upper bounds and integrality flags.

    Absent bounds become -inf / +inf. Integrality is 1 for INT and BOOL.
    """
    n = len(var_index)
    lower = np.full(n, -INF)
    upper = np.full(n, INF)
    integrality = np.zeros(n, dtype=np.uint8)

    for variable, j in var_index.items():
        lb, ub = effective_bounds(problem, variable)
        if lb is not None:
            lower[j] = float(lb)
        if ub is not None:
            upper[j] = float(ub)
        if problem.get_var_type(variable).is_int:
            integrality[j] = 1
    return lower, upper, integrality


def row_bounds(constraint: Constraint) -> Tuple[float, float]:
    """Map ``lhs op rhs`` to the ranged row ``lo <= lhs <= hi``."""
    rhs = float(constraint.rhs)
    if constraint.operator is Operator.LE:
        return -INF, rhs
    if constraint.operator is Operator.GE:
        return rhs, INF
    return rhs, rhs


def trivially_satisfied(constraint: Constraint) -> bool:
    """True if a constraint without terms holds, i.e. ``lo <= 0 <= hi``."""
    lo, hi = row_bounds(constraint)
    return lo <= 0 <= hi


def empty_problem_status(problem: Problem) -> SolveStatus:
    """
    Outcome of a problem without variables, decided without an engine.

    Every constraint of such a problem has an empty left-hand side.
    """
    if all(trivially_satisfied(c) for c in problem.constraints):
        return SolveStatus.OPTIMAL
    return SolveStatus.INFEASIBLE


def constraint_matrix(
    problem: Problem, var_index: Mapping[Hashable, int]
) -> Tuple[csr_matrix, np.ndarray, np.ndarray]:
    """
    Sparse constraint matrix with row bounds, in constraint order.

    Repeated variables within a row are summed.

    Returns:
        (A, row_lower, row_upper) with A of shape (m, n).
    """
    m = len(problem.constraints)
    n = len(var_index)
    rows: List[int] = []
    cols: List[int] = []
    data: List[float] = []
    row_lower = np.empty(m)
    row_upper = np.empty(m)

    for i, constraint in enumerate(problem.constraints):
        for variable, coefficient in constraint.lhs:
            rows.append(i)
            cols.append(var_index[variable])
            data.append(float(coefficient))
        row_lower[i], row_upper[i] = row_bounds(constraint)

    A = csr_matrix((data, (rows, cols)), shape=(m, n))
    A.sum_duplicates()
    return A, row_lower, row_upper


def objective_vector(
    problem: Problem, var_index: Mapping[Hashable, int]
) -> np.ndarray:
    """Dense objective coefficients (zeros when there is no objective)."""
    c = np.zeros(len(var_index))
    if problem.objective is not None:
        for variable, coefficient in problem.objective:
            c[var_index[variable]] += float(coefficient)
    return c


def is_maximize(problem: Problem) -> bool:
    return problem.objective is not None and problem.opt_type is OptType.MAX


# =============================================================================
# 0/1 backend checks
# =============================================================================


def check_boolean_domain(problem: Problem, backend: str) -> None:
    """
    Raise DomainViolationError unless every variable is BOOL.

    Raises:
        DomainViolationError: On the first non-BOOL variable.
    """
    for variable in problem.variables:
        var_type = problem.get_var_type(variable)
        if var_type is not VarType.BOOL:
            raise DomainViolationError(variable, var_type, backend)


def to_int(value: Number, backend: str, where: str = "coefficient") -> int:
    """
    Convert an integral number to ``int``.

    Raises:
        CoefficientDomainError: If ``value`` has a fractional part.
    """
    as_float = float(value)
    if not math.isfinite(as_float) or as_float != round(as_float):
        raise CoefficientDomainError(value, backend, where)
    return int(round(as_float))


def check_integral_coefficients(problem: Problem, backend: str) -> None:
    """
    Raise CoefficientDomainError unless all coefficients and rhs are integral.

    Covers the objective and every constraint.
    """
    if problem.objective is not None:
        for _, coefficient in problem.objective:
            to_int(coefficient, backend, "objective coefficient")
    for constraint in problem.constraints:
        for _, coefficient in constraint.lhs:
            to_int(coefficient, backend, f"coefficient in constraint {constraint.name!r}")
        to_int(constraint.rhs, backend, f"right-hand side of constraint {constraint.name!r}")


def int_terms(
    linear: Linear, var_index: Mapping[Hashable, int], backend: str
) -> Tuple[List[int], List[int]]:
    """Indices and integer coefficients of an already validated expression."""
    indices = [var_index[variable] for variable in linear.variables]
    coefficients = [to_int(c, backend) for c in linear.coefficients]
    return indices, coefficients


# =============================================================================
# HOOKS
# =============================================================================


def run_hooks(hooks: Iterable[Hook], native: Any, var_index: Dict[Hashable, int]) -> None:
    """Call every hook in registration order on the live native model."""
    for hook in hooks:
        logger.debug("Running hook %r", hook)
        hook(native, var_index)


# =============================================================================
# EXTRACT
# =============================================================================


def round_value(problem: Problem, variable: Hashable, raw: Number) -> Number:
    """
    Round INT and BOOL values to the nearest integer, halves upward.

    REAL values pass through as floats.
    """
    if problem.get_var_type(variable).is_int:
        return int(math.floor(float(raw) + 0.5))
    return float(raw)


def extract_result(
    problem: Problem,
    values: Mapping[Hashable, Number],
    objective_value: Optional[Number] = None,
    duals: Optional[Mapping[Hashable, Number]] = None,
) -> Result:
    """
    Build a Result from raw primal values.

    Args:
        problem: The solved problem
        values: Raw primal value per variable
        objective_value: Objective reported by the backend, if any. When
            absent, the Result evaluates the objective lazily.
        duals: Dual values keyed by variable or constraint name

    Returns:
        A populated Result.
    """
    result = Result(objective_value=objective_value, objective_expr=problem.objective)
    for variable in problem.variables:
        result.put_primal_value(variable, round_value(problem, variable, values[variable]))
    if duals:
        for key, value in duals.items():
            result.put_dual_value(key, float(value))
    return result


def values_from_array(
    var_index: Mapping[Hashable, int], x: Sequence[float]
) -> Dict[Hashable, float]:
    return {variable: x[j] for variable, j in var_index.items()}


def constraint_names(problem: Problem) -> List[str]:
    return [constraint.name for constraint in problem.constraints]

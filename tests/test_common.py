"""Tests for the translation helpers shared by backend adapters."""

import math

import numpy as np
import pytest

from ilpkit import (
    CoefficientDomainError,
    Constraint,
    DomainViolationError,
    Linear,
    Problem,
    VarType,
)
from ilpkit.backends.common import (
    build_index,
    check_boolean_domain,
    check_integral_coefficients,
    column_arrays,
    constraint_matrix,
    effective_bounds,
    empty_problem_status,
    extract_result,
    objective_vector,
    round_value,
    row_bounds,
    run_hooks,
    to_int,
    trivially_satisfied,
)
from ilpkit.solver import SolveStatus


def test_build_index_follows_registration_order(production_problem):
    assert build_index(production_problem) == {"x": 0, "y": 1}


@pytest.mark.parametrize(
    "lower, upper, expected",
    [
        (None, None, (0, 1)),
        (0.5, None, (1, 1)),
        (None, 0.5, (0, 0)),
        (-3, 7, (0, 1)),
        (1, 1, (1, 1)),
    ],
)
def test_boolean_bounds_are_clamped(lower, upper, expected):
    problem = Problem()
    problem.set_var_bounds_and_type(lower, "b", upper, bool)
    assert effective_bounds(problem, "b") == expected


def test_real_bounds_pass_through():
    problem = Problem()
    problem.set_var_bounds(-2.5, "x", None)
    assert effective_bounds(problem, "x") == (-2.5, None)


def test_column_arrays():
    problem = Problem()
    problem.set_var_bounds(0, "x", None)
    problem.set_var_bounds_and_type(None, "n", 4, int)
    problem.set_var_type("b", bool)
    lower, upper, integrality = column_arrays(problem, build_index(problem))
    np.testing.assert_array_equal(lower, [0, -math.inf, 0])
    np.testing.assert_array_equal(upper, [math.inf, 4, 1])
    np.testing.assert_array_equal(integrality, [0, 1, 1])


def test_row_bounds(lp_problem):
    assert row_bounds(lp_problem.constraints[0]) == (4.0, math.inf)
    problem = Problem()
    le = problem.add(Linear([1], ["x"]), "<=", 3)
    eq = problem.add(Linear([1], ["x"]), "=", 2)
    assert row_bounds(le) == (-math.inf, 3.0)
    assert row_bounds(eq) == (2.0, 2.0)


def test_constraint_matrix_sums_repeated_variables():
    problem = Problem()
    problem.add(Linear([1, 2, 3], ["x", "y", "x"]), "<=", 10)
    problem.add(Linear([5], ["y"]), ">=", 1)
    A, row_lower, row_upper = constraint_matrix(problem, build_index(problem))
    np.testing.assert_array_equal(A.toarray(), [[4, 2], [0, 5]])
    np.testing.assert_array_equal(row_lower, [-math.inf, 1])
    np.testing.assert_array_equal(row_upper, [10, math.inf])


def test_objective_vector_without_objective():
    problem = Problem()
    problem.add(Linear([1], ["x"]), "<=", 1)
    np.testing.assert_array_equal(objective_vector(problem, build_index(problem)), [0])


def test_check_boolean_domain_reports_first_offender(production_problem):
    with pytest.raises(DomainViolationError) as excinfo:
        check_boolean_domain(production_problem, "cpsat")
    assert excinfo.value.variable == "x"
    assert excinfo.value.var_type is VarType.INT
    assert excinfo.value.backend == "cpsat"


def test_check_integral_coefficients(knapsack_problem):
    check_integral_coefficients(knapsack_problem, "cpsat")
    knapsack_problem.add(Linear([0.5], ["a"]), "<=", 1)
    with pytest.raises(CoefficientDomainError):
        check_integral_coefficients(knapsack_problem, "cpsat")


def test_check_integral_right_hand_side(knapsack_problem):
    knapsack_problem.add(Linear([1], ["a"]), "<=", 0.5)
    with pytest.raises(CoefficientDomainError, match="right-hand side"):
        check_integral_coefficients(knapsack_problem, "cpsat")


def test_to_int():
    assert to_int(3.0, "cpsat") == 3
    assert to_int(np.int64(-2), "cpsat") == -2
    with pytest.raises(CoefficientDomainError):
        to_int(1.25, "cpsat")
    with pytest.raises(CoefficientDomainError):
        to_int(math.inf, "cpsat")


def test_run_hooks_in_registration_order():
    calls = []
    hooks = [lambda native, index: calls.append(("first", native)), lambda native, index: calls.append(("second", index))]
    run_hooks(hooks, "model", {"x": 0})
    assert calls == [("first", "model"), ("second", {"x": 0})]


def test_extract_result_rounds_integer_variables():
    problem = Problem()
    problem.set_objective(Linear([1, 1, 1], ["n", "b", "r"]))
    problem.set_var_type("n", int)
    problem.set_var_type("b", bool)
    result = extract_result(problem, {"n": 2.9999999, "b": 1e-9, "r": 0.25})
    assert result["n"] == 3 and isinstance(result["n"], int)
    assert result["b"] == 0
    assert result["r"] == 0.25
    assert result.objective == pytest.approx(3.25)


def test_round_value_rounds_halves_up():
    problem = Problem()
    problem.set_var_type("n", int)
    assert round_value(problem, "n", 2.5) == 3
    assert round_value(problem, "n", -2.5) == -2
    assert round_value(problem, "n", 0.5) == 1
    assert round_value(problem, "n", 2.4999) == 2
    assert round_value(problem, "x", 2.5) == 2.5


@pytest.mark.parametrize(
    "operator, rhs, expected",
    [("<=", 0, True), (">=", 0, True), ("=", 0, True), (">=", 1, False), ("<=", -1, False)],
)
def test_trivially_satisfied(operator, rhs, expected):
    assert trivially_satisfied(Constraint(Linear(), operator, rhs)) is expected


def test_empty_problem_status():
    problem = Problem()
    assert empty_problem_status(problem) is SolveStatus.OPTIMAL
    problem.add("fine", Linear(), "<=", 3)
    assert empty_problem_status(problem) is SolveStatus.OPTIMAL
    problem.add("broken", Linear(), ">=", 1)
    assert empty_problem_status(problem) is SolveStatus.INFEASIBLE


def test_extract_result_stores_duals():
    problem = Problem()
    problem.add("row", Linear([1], ["x"]), "<=", 1)
    result = extract_result(problem, {"x": 1.0}, duals={"row": 2, "x": 0})
    assert result.get_dual_value("row") == 2.0
    assert result.get_dual_value("x") == 0.0

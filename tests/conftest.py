"""Pytest configuration and fixtures."""

import pytest

from ilpkit import Linear, Problem


@pytest.fixture
def production_problem():
    """Integer production plan with optimum 6266 at x=22, y=52."""
    problem = Problem()
    problem.set_objective(Linear([143, 60], ["x", "y"]), "max")
    problem.add(Linear([120, 210], ["x", "y"]), "<=", 15000)
    problem.add(Linear([110, 30], ["x", "y"]), "<=", 4000)
    problem.add(Linear([1, 1], ["x", "y"]), "<=", 75)
    problem.set_var_type("x", int)
    problem.set_var_type("y", int)
    return problem


@pytest.fixture
def bounded_production_problem(production_problem):
    """The production plan with x, y >= 0; same optimum."""
    production_problem.set_var_lower_bound("x", 0)
    production_problem.set_var_lower_bound("y", 0)
    return production_problem


@pytest.fixture
def infeasible_boolean_problem():
    """Ten booleans whose sum must be both 5 and 6."""
    names = [f"b{i}" for i in range(10)]
    problem = Problem()
    problem.set_objective(Linear([1] * 10, names), "min")
    problem.add(Linear([1] * 10, names), "=", 5)
    problem.add(Linear([1] * 10, names), "=", 6)
    for name in names:
        problem.set_var_type(name, bool)
    return problem


@pytest.fixture
def knapsack_problem():
    """0-1 knapsack: best value 15 with items a, c and d (weight 9)."""
    problem = Problem()
    problem.set_objective(Linear([5, 4, 3, 7], ["a", "b", "c", "d"]), "max")
    problem.add("capacity", Linear([2, 5, 3, 4], ["a", "b", "c", "d"]), "<=", 9)
    for name in "abcd":
        problem.set_var_type(name, bool)
    return problem


@pytest.fixture
def lp_problem():
    """Continuous LP: min x + y with x + 2y >= 4, 3x + y >= 6; optimum 2.8."""
    problem = Problem()
    problem.set_objective(Linear([1, 1], ["x", "y"]), "min")
    problem.add("r1", Linear([1, 2], ["x", "y"]), ">=", 4)
    problem.add("r2", Linear([3, 1], ["x", "y"]), ">=", 6)
    problem.set_var_lower_bound("x", 0)
    problem.set_var_lower_bound("y", 0)
    return problem

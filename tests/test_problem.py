"""Tests for Problem construction, variable metadata and Result."""

import logging

import pytest

from ilpkit import (
    Constraint,
    Linear,
    MalformedOperatorError,
    OptType,
    Problem,
    Result,
    VarType,
)


def test_variables_registered_in_order():
    problem = Problem()
    problem.add(Linear([1, 1], ["b", "a"]), "<=", 1)
    problem.set_objective(Linear([1, 1], ["c", "a"]))
    problem.set_var_type("d", int)
    problem.set_var_lower_bound("e", 0)
    assert problem.variables == ["b", "a", "c", "d", "e"]
    assert problem.variables_count == 5


def test_default_type_and_bounds():
    problem = Problem()
    problem.add(Linear([1], ["x"]), "<=", 1)
    assert problem.get_var_type("x") is VarType.REAL
    assert problem.get_var_lower_bound("x") is None
    assert problem.get_var_upper_bound("x") is None


@pytest.mark.parametrize(
    "py_type, expected",
    [(int, VarType.INT), (bool, VarType.BOOL), (float, VarType.REAL), (VarType.BOOL, VarType.BOOL)],
)
def test_set_var_type_accepts_python_types(py_type, expected):
    problem = Problem()
    problem.set_var_type("x", py_type)
    assert problem.get_var_type("x") is expected


def test_set_var_type_unknown_type_is_ignored(caplog):
    problem = Problem()
    problem.set_var_type("x", int)
    with caplog.at_level(logging.WARNING, logger="ilpkit"):
        problem.set_var_type("x", str)
    assert problem.get_var_type("x") is VarType.INT
    assert "unknown variable type" in caplog.text


def test_set_and_clear_bounds():
    problem = Problem()
    problem.set_var_bounds(-3, "x", 7)
    assert problem.get_var_lower_bound("x") == -3
    assert problem.get_var_upper_bound("x") == 7
    problem.set_var_upper_bound("x", None)
    assert problem.get_var_upper_bound("x") is None
    assert problem.variables == ["x"]


def test_set_var_bounds_and_type():
    problem = Problem()
    problem.set_var_bounds_and_type(0, "n", 10, int)
    assert problem.get_var_type("n") is VarType.INT
    assert (problem.get_var_lower_bound("n"), problem.get_var_upper_bound("n")) == (0, 10)


def test_optimization_type_from_strings():
    problem = Problem()
    assert problem.opt_type is OptType.MIN
    problem.set_objective(Linear([1], ["x"]), "MAX")
    assert problem.opt_type is OptType.MAX
    problem.set_optimization_type("min")
    assert problem.opt_type is OptType.MIN


def test_unknown_optimization_type_keeps_current(caplog):
    problem = Problem()
    problem.set_optimization_type(OptType.MAX)
    with caplog.at_level(logging.WARNING, logger="ilpkit"):
        problem.set_optimization_type("maximise")
    assert problem.opt_type is OptType.MAX
    assert "Unknown optimization type" in caplog.text


def test_objective_is_copied():
    problem = Problem()
    objective = Linear([1], ["x"])
    problem.set_objective(objective)
    objective.add(1, "y")
    assert len(problem.objective) == 1
    assert problem.variables == ["x"]


def test_add_forms():
    problem = Problem()
    lhs = Linear([1, 1], ["x", "y"])
    first = problem.add(lhs, "<=", 4)
    second = problem.add("named", lhs, ">=", 1)
    third = problem.add(Constraint(Linear([1], ["z"]), "=", 2, name="fixed"))
    keyword = problem.add(lhs, "=", 3, name="kw")

    assert problem.constraints_count == 4
    assert first.name == "1*x + 1*y <= 4"
    assert second.name == "named"
    assert third.name == "fixed"
    assert keyword.name == "kw"
    assert problem.variables == ["x", "y", "z"]


def test_add_constraint_with_name_keyword():
    problem = Problem()
    original = Constraint(Linear([1], ["z"]), "<=", 2, name="old")
    stored = problem.add(original, name="renamed")

    assert stored.name == "renamed"
    assert problem.constraints[0] is stored
    assert original.name == "old"
    assert (stored.operator, stored.rhs) == (original.operator, 2)
    assert stored.lhs is not original.lhs
    assert problem.add(original).name == "old"


def test_add_rejects_name_given_twice():
    problem = Problem()
    with pytest.raises(TypeError, match="twice"):
        problem.add("positional", Linear([1], ["x"]), "<=", 1, name="keyword")
    assert problem.constraints_count == 0


def test_add_copies_lhs():
    problem = Problem()
    lhs = Linear([1], ["x"])
    constraint = problem.add(lhs, "<=", 1)
    lhs.add(1, "y")
    assert len(constraint.lhs) == 1


def test_add_rejects_bad_operator():
    problem = Problem()
    with pytest.raises(MalformedOperatorError):
        problem.add(Linear([1], ["x"]), "<>", 1)
    assert problem.constraints_count == 0


def test_add_rejects_wrong_arity():
    with pytest.raises(TypeError):
        Problem().add(Linear([1], ["x"]), "<=")


def test_str_rendering(production_problem):
    text = str(production_problem)
    lines = text.splitlines()
    assert lines[0] == "MAX"
    assert lines[1] == " 143*x + 60*y"
    assert "Subject To" in lines
    assert " 120*x + 210*y <= 15000" in lines
    assert "Bounds" in lines
    assert lines[-2:] == [" x INT", " y INT"]


def test_str_feasibility_problem_and_bounds():
    problem = Problem()
    problem.add(Linear([1], ["x"]), ">=", 1)
    problem.set_var_bounds(0, "x", 5)
    problem.set_var_upper_bound("y", 2)
    lines = str(problem).splitlines()
    assert lines[0] == "Find one solution"
    assert " 0 <= x <= 5" in lines
    assert " y <= 2" in lines


def test_result_lazy_objective():
    result = Result(objective_expr=Linear([2, 3], ["x", "y"]))
    result.put_primal_value("x", 1)
    result.put("y", 2)
    assert result.objective == 8
    assert result.objective_value == 8


def test_result_reported_objective_wins():
    result = Result(objective_value=10.5, objective_expr=Linear([1], ["x"]))
    result.put("x", 1)
    assert result.objective == 10.5


def test_result_accessors():
    result = Result()
    result.put_primal_value("b", 1)
    result.put_dual_value("row", -0.5)
    assert result.get_boolean("b") is True
    assert result["b"] == 1
    assert "b" in result
    assert result.contains_var("b")
    assert result.get("missing") is None
    assert result.get_dual_value("row") == -0.5
    assert result.get_dual_value("other") is None
    assert result.objective is None

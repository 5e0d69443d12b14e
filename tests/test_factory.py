"""Tests for SolverFactory, parameters and hooks."""

import sys

import pytest

import ilpkit.factory as factory_module
from ilpkit import Parameter, SolverFactory, SolverUnavailableError, create_solver
from ilpkit.factory import HookRegistry, ParameterBag
from ilpkit.solver import get_available_solvers


def _require(name):
    if name not in get_available_solvers():
        pytest.skip(f"{name} solver not available")


def test_factory_copies_parameters_into_solver():
    _require("scipy")
    factory = SolverFactory("scipy")
    factory.set_parameter(Parameter.TIMEOUT, 100)
    factory.set_parameter(Parameter.VERBOSE, 0)
    factory.set_parameter("presolve", True)

    solver = factory.get()
    assert solver.name == "scipy"
    assert solver.parameters == {Parameter.TIMEOUT: 100, Parameter.VERBOSE: 0, "presolve": True}

    # later changes on either side stay local
    solver.set_parameter(Parameter.TIMEOUT, 5)
    factory.set_parameter(Parameter.GAP, 0.1)
    assert factory.parameters[Parameter.TIMEOUT] == 100
    assert Parameter.GAP not in solver.parameters


def test_factory_options_are_native_parameters():
    factory = SolverFactory("scipy", presolve=False)
    assert factory.parameters == {"presolve": False}
    assert "scipy" in repr(factory)


def test_factory_name_is_case_insensitive():
    assert SolverFactory("HiGHS").name == "highs"


def test_factory_uses_default_solver(monkeypatch):
    monkeypatch.setattr(factory_module, "get_default_solver", lambda: "scipy")
    assert SolverFactory().name == "scipy"


def test_unknown_solver_raises():
    with pytest.raises(SolverUnavailableError, match="Unknown solver"):
        create_solver("simplex9000")
    with pytest.raises(SolverUnavailableError):
        SolverFactory("simplex9000").get()


def test_missing_backend_library_raises(monkeypatch):
    # a None entry makes the import fail
    monkeypatch.setitem(sys.modules, "ilpkit.backends.highs", None)
    with pytest.raises(SolverUnavailableError, match="not available"):
        create_solver("highs")


def test_pyomo_names_create_pyomo_adapter():
    pytest.importorskip("pyomo")
    solver = create_solver("glpk")
    assert type(solver).__name__ == "PyomoSolver"
    assert solver.name == "glpk"

    plugin = create_solver("pyomo:appsi_highs")
    assert type(plugin).__name__ == "PyomoSolver"
    assert plugin.name == "appsi_highs"


def test_parameter_bag_freeze():
    bag = ParameterBag({Parameter.THREADS: 2})
    bag.set_parameter(Parameter.GAP, 0.5)
    config = bag.freeze("highs")
    assert config.threads == 2
    assert config.gap == 0.5


def test_hook_registry_order_and_removal():
    registry = HookRegistry()

    def first(native, index):
        pass

    def second(native, index):
        pass

    registry.add_hook(first)
    registry.add_hook(second)
    registry.add_hook(first)
    assert registry.hooks == [first, second]

    registry.remove_hook(first)
    registry.remove_hook(first)
    assert registry.hooks == [second]

    # the property returns a copy
    registry.hooks.clear()
    assert registry.hooks == [second]

"""Tests for parameters, SolverConfig and backend discovery."""

import logging

import pytest

import ilpkit.solver as solver_module
from ilpkit import Parameter, SolverConfig
from ilpkit.solver import get_default_solver


def test_from_parameters_maps_well_known_keys():
    config = SolverConfig.from_parameters(
        "highs",
        {
            Parameter.TIMEOUT: 10,
            Parameter.VERBOSE: 2,
            Parameter.GAP: 0.01,
            Parameter.THREADS: 4,
            Parameter.POSTSOLVE: 1,
            "presolve": "off",
        },
    )
    assert config.name == "highs"
    assert config.time_limit == 10.0
    assert config.verbose == 2
    assert config.gap == 0.01
    assert config.threads == 4
    assert config.postsolve == 1
    assert config.options == {"presolve": "off"}


def test_from_parameters_accepts_integer_keys():
    config = SolverConfig.from_parameters("scipy", {0: 5, 4: 2})
    assert config.time_limit == 5.0
    assert config.threads == 2


def test_from_parameters_defaults():
    config = SolverConfig.from_parameters("highs", {})
    assert config.time_limit is None
    assert config.gap is None
    assert config.threads is None
    assert config.verbose == 0
    assert config.options == {}


@pytest.mark.parametrize(
    "key, value",
    [
        (Parameter.TIMEOUT, "fast"),
        (Parameter.TIMEOUT, -1),
        (Parameter.GAP, "tight"),
        (Parameter.THREADS, 2.5),
        (Parameter.VERBOSE, "loud"),
    ],
)
def test_from_parameters_ignores_wrong_types(caplog, key, value):
    with caplog.at_level(logging.WARNING, logger="ilpkit"):
        config = SolverConfig.from_parameters("highs", {key: value})
    assert config == SolverConfig(name="highs")
    assert key.name in caplog.text


def test_from_parameters_ignores_unknown_integer_key(caplog):
    with caplog.at_level(logging.WARNING, logger="ilpkit"):
        config = SolverConfig.from_parameters("highs", {42: 1})
    assert config == SolverConfig(name="highs")
    assert "unknown parameter" in caplog.text


@pytest.mark.parametrize(
    "name, expected",
    [
        ("highs", {"time_limit": 60.0, "mip_rel_gap": 0.01, "threads": 2}),
        ("gurobi", {"TimeLimit": 60.0, "MIPGap": 0.01, "Threads": 2}),
        ("cplex", {"timelimit": 60.0, "mip_tolerances_mipgap": 0.01, "threads": 2}),
        ("cbc", {"seconds": 60.0, "ratioGap": 0.01, "threads": 2}),
        ("glpk", {"tmlim": 60.0}),
        ("scip", {"limits/time": 60.0, "limits/gap": 0.01, "parallel/maxnthreads": 2}),
    ],
)
def test_to_pyomo_options(name, expected):
    config = SolverConfig(name=name, time_limit=60.0, gap=0.01, threads=2)
    assert config.to_pyomo_options() == expected


def test_to_pyomo_options_native_options_override():
    config = SolverConfig(name="cbc", time_limit=60.0, options={"seconds": 5, "cuts": "off"})
    assert config.to_pyomo_options() == {"seconds": 5, "cuts": "off"}


def test_default_solver_prefers_highs(monkeypatch):
    monkeypatch.setattr(solver_module, "get_available_solvers", lambda: ["scipy", "highs"])
    assert get_default_solver() == "highs"


def test_default_solver_first_available(monkeypatch):
    monkeypatch.setattr(solver_module, "get_available_solvers", lambda: ["cbc", "glpk"])
    assert get_default_solver() == "cbc"


def test_default_solver_none_available(monkeypatch):
    monkeypatch.setattr(solver_module, "get_available_solvers", lambda: [])
    with pytest.raises(RuntimeError, match="No solver available"):
        get_default_solver()


def test_available_solvers_lists_native_modules(monkeypatch):
    monkeypatch.setattr(solver_module, "_module_available", lambda module: module == "highspy")
    monkeypatch.setattr(solver_module, "_pyomo_available", lambda name: name == "cbc")
    assert solver_module.get_available_solvers() == ["highs", "cbc"]

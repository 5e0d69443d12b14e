"""
Solver contract and factory.

Every backend adapter satisfies the ``Solver`` protocol: a parameter
dictionary, a list of hooks and one operation, ``solve(problem)``, that
returns a ``Result`` or ``None`` when no solution exists.

Adapters do not derive from each other. They share the ``ParameterBag`` and
``HookRegistry`` helpers below and the translation functions in
``ilpkit.backends.common``.

Example:
    >>> factory = SolverFactory("highs")
    >>> factory.set_parameter(Parameter.TIMEOUT, 100)
    >>> factory.set_parameter(Parameter.VERBOSE, 0)
    >>> solver = factory.get()
    >>> result = solver.solve(problem)
"""

import importlib
import logging
from typing import Any, Callable, Dict, Hashable, List, Optional, Protocol

from ilpkit.backends.common import Hook
from ilpkit.errors import SolverUnavailableError
from ilpkit.problem import Problem
from ilpkit.result import Result
from ilpkit.solver import (
    NATIVE_BACKENDS,
    PYOMO_BACKENDS,
    Parameter,
    SolverConfig,
    SolveStatus,
    get_default_solver,
)

logger = logging.getLogger(__name__)


class Solver(Protocol):
    """Contract implemented by every backend adapter."""

    name: str
    last_status: Optional[SolveStatus]

    def set_parameter(self, key: Hashable, value: Any) -> None:
        ...

    @property
    def parameters(self) -> Dict[Hashable, Any]:
        ...

    def add_hook(self, hook: Hook) -> None:
        ...

    def remove_hook(self, hook: Hook) -> None:
        ...

    def solve(self, problem: Problem) -> Optional[Result]:
        ...


class ParameterBag:
    """Parameter dictionary shared by factories and solvers."""

    def __init__(self, parameters: Optional[Dict[Hashable, Any]] = None):
        self._parameters: Dict[Hashable, Any] = dict(parameters or {})

    @property
    def parameters(self) -> Dict[Hashable, Any]:
        return self._parameters

    def set_parameter(self, key: Hashable, value: Any) -> None:
        """
        Set a parameter.

        Args:
            key: A ``Parameter`` member (or its integer value), or a string
                naming a native solver option.
            value: The value. Values of the wrong type are ignored, with a
                warning, when the solve starts.
        """
        self._parameters[key] = value

    def freeze(self, name: str) -> SolverConfig:
        """Snapshot the current parameters for one solve."""
        return SolverConfig.from_parameters(name, self._parameters)


class HookRegistry:
    """Ordered list of hooks run after model construction, before solving."""

    def __init__(self):
        self._hooks: List[Hook] = []

    @property
    def hooks(self) -> List[Hook]:
        return list(self._hooks)

    def add_hook(self, hook: Hook) -> None:
        if hook not in self._hooks:
            self._hooks.append(hook)

    def remove_hook(self, hook: Hook) -> None:
        if hook in self._hooks:
            self._hooks.remove(hook)


# =============================================================================
# Backend registry
# =============================================================================

# name -> (module, class)
_ADAPTERS = {
    "highs": ("ilpkit.backends.highs", "HighsSolver"),
    "scipy": ("ilpkit.backends.scipy_milp", "ScipySolver"),
    "cpsat": ("ilpkit.backends.cpsat", "CpSatSolver"),
    "gurobi": ("ilpkit.backends.gurobi", "GurobiSolver"),
}
_PYOMO_ADAPTER = ("ilpkit.backends.pyomo_backend", "PyomoSolver")


def _adapter_class(name: str) -> Callable[..., Solver]:
    if name in _ADAPTERS:
        module_name, class_name = _ADAPTERS[name]
    elif name in PYOMO_BACKENDS or name.startswith("pyomo:"):
        module_name, class_name = _PYOMO_ADAPTER
    else:
        raise SolverUnavailableError(
            f"Unknown solver '{name}'. "
            f"Known solvers: {sorted(set(NATIVE_BACKENDS) | set(PYOMO_BACKENDS))}",
            backend=name,
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise SolverUnavailableError(
            f"Solver '{name}' is not available: {exc}", backend=name
        ) from exc
    return getattr(module, class_name)


def create_solver(name: str) -> Solver:
    """
    Create an unconfigured adapter for backend ``name``.

    Any Pyomo SolverFactory plugin can be reached as ``"pyomo:<plugin>"``,
    for example ``"pyomo:appsi_highs"``.

    Raises:
        SolverUnavailableError: If the name is unknown or the backend
            library cannot be imported.
    """
    name = name.lower()
    cls = _adapter_class(name)
    if name.startswith("pyomo:"):
        return cls(name.split(":", 1)[1])
    if name in PYOMO_BACKENDS:
        return cls(name)
    return cls()


class SolverFactory(ParameterBag):
    """
    Produces configured solver instances.

    Parameters set on the factory are copied into every solver it creates.
    Parameters set on a solver afterwards affect only that solver.

    Args:
        name: Backend name ("highs", "scipy", "cpsat", "gurobi", "glpk",
            "cbc", "scip", "cplex"). Default is "highs" if available.
        **options: Native solver options, stored as string parameters.
    """

    def __init__(self, name: str = None, **options):
        super().__init__(options)
        if name is None:
            name = get_default_solver()
        self.name = name.lower()

    def get(self) -> Solver:
        """Create a solver carrying a copy of the factory parameters."""
        solver = create_solver(self.name)
        for key, value in self._parameters.items():
            solver.set_parameter(key, value)
        logger.debug("Created %s solver with parameters %s", self.name, self._parameters)
        return solver

    def __repr__(self) -> str:
        return f"<SolverFactory: solver={self.name}, {len(self._parameters)} parameters>"


__all__ = [
    "Solver",
    "SolverFactory",
    "ParameterBag",
    "HookRegistry",
    "Parameter",
    "create_solver",
]

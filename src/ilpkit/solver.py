"""
Solver parameters, configuration and backend discovery.

Parameters are stored as a plain dictionary on factories and solvers. The
well-known keys are the ``Parameter`` members; any string key is forwarded
verbatim to the native engine as a solver-specific option. When a solve
starts, the dictionary is frozen into a ``SolverConfig``.

Backends:
    - highs: HiGHS through highspy (default)
    - scipy: scipy.optimize (milp / linprog)
    - cpsat: OR-Tools CP-SAT, 0/1 problems only
    - gurobi: Gurobi through gurobipy (requires license)
    - glpk, cbc, scip, cplex: executables driven through Pyomo
"""

import importlib.util
import logging
import numbers
import shutil
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Hashable, List, Mapping, Optional

logger = logging.getLogger(__name__)


class Parameter(IntEnum):
    """Well-known parameter keys."""

    TIMEOUT = 0  # seconds
    VERBOSE = 1  # 0 silent, 1 errors, 2 normal, >=3 full diagnostics
    POSTSOLVE = 2  # reserved, backend-defined
    GAP = 3  # relative MIP gap
    THREADS = 4


class SolveStatus(Enum):
    """Outcome of the last solve of a solver instance."""

    OPTIMAL = "optimal"
    FEASIBLE = "feasible"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    TIME_LIMIT = "time_limit"
    ERROR = "error"
    UNKNOWN = "unknown"

    @property
    def has_solution(self) -> bool:
        return self in (SolveStatus.OPTIMAL, SolveStatus.FEASIBLE)

    def __str__(self) -> str:
        return self.value


# Backends driven through their Python bindings: name -> importable module
NATIVE_BACKENDS = {
    "highs": "highspy",
    "scipy": "scipy.optimize",
    "cpsat": "ortools.sat.python.cp_model",
    "gurobi": "gurobipy",
}

# Backends driven through Pyomo: name -> executable
PYOMO_BACKENDS = {
    "glpk": "glpsol",
    "cbc": "cbc",
    "scip": "scip",
    "cplex": "cplex",
}

# Preferred order when choosing a default
SOLVER_ORDER = ["highs", "scipy", "gurobi", "scip", "cbc", "glpk", "cplex", "cpsat"]


@dataclass(frozen=True)
class SolverConfig:
    """
    Parameter snapshot for one solve.

    Attributes:
        name: Backend name
        time_limit: Maximum solving time in seconds
        gap: Relative MIP gap tolerance
        threads: Number of threads (solver-dependent)
        verbose: 0 silent, 1 errors only, 2 normal, >=3 full diagnostics
        postsolve: Reserved, backend-defined
        options: Native solver options, passed through unchanged
    """

    name: str = "highs"
    time_limit: Optional[float] = None
    gap: Optional[float] = None
    threads: Optional[int] = None
    verbose: int = 0
    postsolve: Any = None
    options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_parameters(
        cls,
        name: str,
        parameters: Mapping[Hashable, Any],
    ) -> "SolverConfig":
        """
        Freeze a parameter dictionary.

        Values of an unexpected type are logged and ignored; they never
        abort the solve.
        """
        values: Dict[str, Any] = {}
        options: Dict[str, Any] = {}

        for key, value in parameters.items():
            if isinstance(key, str):
                options[key] = value
                continue
            try:
                key = Parameter(key)
            except ValueError:
                logger.warning("Ignoring unknown parameter %r", key)
                continue

            if value is None:
                continue
            if key is Parameter.TIMEOUT:
                if _is_real(value) and value >= 0:
                    values["time_limit"] = float(value)
                    continue
            elif key is Parameter.VERBOSE:
                if isinstance(value, numbers.Real):
                    values["verbose"] = int(value)
                    continue
            elif key is Parameter.GAP:
                if _is_real(value) and value >= 0:
                    values["gap"] = float(value)
                    continue
            elif key is Parameter.THREADS:
                if isinstance(value, numbers.Integral) and not isinstance(value, bool):
                    values["threads"] = int(value)
                    continue
            else:
                values["postsolve"] = value
                continue
            logger.warning(
                "Ignoring parameter %s with unexpected value %r", key.name, value
            )

        return cls(name=name, options=options, **values)

    def to_pyomo_options(self) -> Dict[str, Any]:
        """Convert to the option names of the Pyomo solver plugin."""
        options: Dict[str, Any] = {}
        name = self.name

        if name == "highs":
            if self.time_limit is not None:
                options["time_limit"] = self.time_limit
            if self.gap is not None:
                options["mip_rel_gap"] = self.gap
            if self.threads is not None:
                options["threads"] = self.threads
        elif name == "gurobi":
            if self.time_limit is not None:
                options["TimeLimit"] = self.time_limit
            if self.gap is not None:
                options["MIPGap"] = self.gap
            if self.threads is not None:
                options["Threads"] = self.threads
        elif name == "cplex":
            if self.time_limit is not None:
                options["timelimit"] = self.time_limit
            if self.gap is not None:
                options["mip_tolerances_mipgap"] = self.gap
            if self.threads is not None:
                options["threads"] = self.threads
        elif name == "cbc":
            if self.time_limit is not None:
                options["seconds"] = self.time_limit
            if self.gap is not None:
                options["ratioGap"] = self.gap
            if self.threads is not None:
                options["threads"] = self.threads
        elif name == "glpk":
            if self.time_limit is not None:
                options["tmlim"] = self.time_limit
        elif name == "scip":
            if self.time_limit is not None:
                options["limits/time"] = self.time_limit
            if self.gap is not None:
                options["limits/gap"] = self.gap
            if self.threads is not None:
                options["parallel/maxnthreads"] = self.threads

        options.update(self.options)
        return options


def _is_real(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


# =============================================================================
# Backend discovery
# =============================================================================


def _module_available(module: str) -> bool:
    try:
        return importlib.util.find_spec(module) is not None
    except ModuleNotFoundError:
        # parent package missing
        return False


def _pyomo_available(name: str) -> bool:
    if shutil.which(PYOMO_BACKENDS[name]):
        return True
    import pyomo.environ as pe

    try:
        return bool(pe.SolverFactory(name).available(exception_flag=False))
    except (RuntimeError, OSError) as exc:
        logger.debug("Pyomo solver %s not usable: %s", name, exc)
        return False


def get_available_solvers() -> List[str]:
    """
    List backends usable in this environment, in preference order.

    Returns:
        Backend names, e.g. ``["highs", "scipy", "cbc", "cpsat"]``.
    """
    available = []
    for name in SOLVER_ORDER:
        if name in NATIVE_BACKENDS:
            if _module_available(NATIVE_BACKENDS[name]):
                available.append(name)
        elif _pyomo_available(name):
            available.append(name)
    return available


def get_default_solver() -> str:
    """
    Get the default backend name.

    Returns "highs" if available, else the first available backend.

    Raises:
        RuntimeError: If no backend is available.
    """
    available = get_available_solvers()
    if "highs" in available:
        return "highs"
    if available:
        return available[0]
    raise RuntimeError(
        "No solver available. Install one of: highspy, scipy, ortools, "
        "gurobipy, or a Pyomo-supported executable (glpk, cbc, scip, cplex)."
    )


def get_pyomo_solver_name(name: str) -> str:
    """
    Map a backend name to the Pyomo SolverFactory name.

    Pyomo exposes some solvers through persistent interfaces (for example
    ``appsi_highs``); those are preferred when usable.
    """
    import pyomo.environ as pe

    preferred = {"highs": "appsi_highs"}.get(name)
    if preferred is not None:
        try:
            if pe.SolverFactory(preferred).available(exception_flag=False):
                return preferred
        except (RuntimeError, OSError) as exc:
            logger.debug("Pyomo solver %s not usable: %s", preferred, exc)
    return name

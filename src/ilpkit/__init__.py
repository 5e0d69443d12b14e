"""
ilpkit: solver-agnostic mixed-integer linear programming.

Write the model once, then hand it to any backend:

Example:
    >>> from ilpkit import Linear, Problem, SolverFactory, Parameter
    >>>
    >>> problem = Problem()
    >>> problem.set_objective(Linear([143, 60], ["x", "y"]), "max")
    >>> problem.add(Linear([120, 210], ["x", "y"]), "<=", 15000)
    >>> problem.add(Linear([110, 30], ["x", "y"]), "<=", 4000)
    >>> problem.add(Linear([1, 1], ["x", "y"]), "<=", 75)
    >>> problem.set_var_bounds_and_type(0, "x", None, int)
    >>> problem.set_var_bounds_and_type(0, "y", None, int)
    >>>
    >>> factory = SolverFactory("highs")
    >>> factory.set_parameter(Parameter.TIMEOUT, 100)
    >>> result = factory.get().solve(problem)
    >>> result.objective  # 6266 at x=22, y=52

Supported Solvers:
    - highs: HiGHS through highspy (default)
    - scipy: scipy.optimize.milp / linprog
    - cpsat: OR-Tools CP-SAT, 0-1 problems only
    - gurobi: Gurobi (requires license, pip install ilpkit[gurobi])
    - glpk, cbc, scip, cplex: through Pyomo
"""

import logging

from ilpkit.constraint import Constraint, Operator
from ilpkit.errors import (
    BackendError,
    CoefficientDomainError,
    DomainViolationError,
    IlpError,
    MalformedOperatorError,
    MissingVariableEvaluationError,
    SolverUnavailableError,
    VariableCountMismatchError,
)
from ilpkit.factory import Solver, SolverFactory, create_solver
from ilpkit.linear import Linear, Term
from ilpkit.problem import OptType, Problem, VarType
from ilpkit.result import Result
from ilpkit.solver import (
    Parameter,
    SolverConfig,
    SolveStatus,
    get_available_solvers,
    get_default_solver,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "Linear",
    "Term",
    "Constraint",
    "Operator",
    "Problem",
    "OptType",
    "VarType",
    "Result",
    "Solver",
    "SolverFactory",
    "create_solver",
    "Parameter",
    "SolverConfig",
    "SolveStatus",
    "get_available_solvers",
    "get_default_solver",
    "IlpError",
    "MalformedOperatorError",
    "VariableCountMismatchError",
    "MissingVariableEvaluationError",
    "DomainViolationError",
    "CoefficientDomainError",
    "BackendError",
    "SolverUnavailableError",
]

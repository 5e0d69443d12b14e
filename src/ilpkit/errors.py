"""
Exception hierarchy for ilpkit.

Model errors (malformed operators, count mismatches, domain and coefficient
violations) are raised while the problem is being built or validated, before
any backend is touched. A problem without a solution is not an error:
``solve`` returns ``None`` for it. ``BackendError`` is reserved for engines
that actually fail.
"""


class IlpError(Exception):
    """Base class for every error raised by ilpkit."""


class MalformedOperatorError(IlpError, ValueError):
    """Relational symbol is not one of ``<=``, ``=`` or ``>=``."""

    def __init__(self, operator):
        super().__init__(f"Unknown relational operator: {operator!r}")
        self.operator = operator


class VariableCountMismatchError(IlpError, ValueError):
    """Coefficient and variable lists differ in length."""

    def __init__(self, num_coefficients: int, num_variables: int):
        super().__init__(
            "The number of coefficients and variables must be equal "
            f"(got {num_coefficients} coefficients and {num_variables} variables)"
        )
        self.num_coefficients = num_coefficients
        self.num_variables = num_variables


class MissingVariableEvaluationError(IlpError, KeyError):
    """A variable of the expression has no value in the assignment."""

    def __init__(self, variable):
        super().__init__(variable)
        self.variable = variable

    def __str__(self) -> str:
        return f"The variable {self.variable!r} is missing in the given assignment"


class DomainViolationError(IlpError, ValueError):
    """A non-boolean variable was handed to a 0/1-only backend."""

    def __init__(self, variable, var_type, backend: str):
        super().__init__(
            f"Variable {variable!r} is of type {var_type.name}; "
            f"backend '{backend}' can only solve 0-1 problems"
        )
        self.variable = variable
        self.var_type = var_type
        self.backend = backend


class CoefficientDomainError(IlpError, ValueError):
    """A non-integral coefficient or right-hand side on an integer-only backend."""

    def __init__(self, value, backend: str, where: str = "coefficient"):
        super().__init__(
            f"Backend '{backend}' requires integer coefficients; "
            f"found {where} {value!r}"
        )
        self.value = value
        self.backend = backend
        self.where = where


class BackendError(IlpError, RuntimeError):
    """The native engine failed (licensing, resources, numerical breakdown)."""

    def __init__(self, message: str, backend: str = None):
        super().__init__(message)
        self.backend = backend


class SolverUnavailableError(BackendError):
    """The requested backend is unknown or its library is not installed."""

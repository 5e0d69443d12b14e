"""
Solver-agnostic problem representation.

A ``Problem`` holds an optional objective and its sense, an ordered list of
constraints, and per-variable metadata (type, lower and upper bound). The
set of variables is derived: every variable that appears in the objective,
in a constraint, or in the type and bound maps is registered in insertion
order, which gives backends a deterministic column order.

Example:
    >>> problem = Problem()
    >>> problem.set_objective(Linear([143, 60], ["x", "y"]), "max")
    >>> problem.add(Linear([120, 210], ["x", "y"]), "<=", 15000)
    >>> problem.add("capacity", Linear([110, 30], ["x", "y"]), "<=", 4000)
    >>> problem.set_var_type("x", int)
"""

import logging
from enum import Enum
from typing import Dict, Hashable, List, Optional, Union

from ilpkit.constraint import Constraint, Operator
from ilpkit.linear import Linear, Number

logger = logging.getLogger(__name__)


class OptType(Enum):
    """Optimization sense."""

    MIN = "min"
    MAX = "max"

    def __str__(self) -> str:
        return self.name


class VarType(Enum):
    """Variable domain."""

    REAL = "real"
    INT = "int"
    BOOL = "bool"

    @property
    def is_int(self) -> bool:
        """True for domains whose values are integers (INT and BOOL)."""
        return self is not VarType.REAL

    def __str__(self) -> str:
        return self.name


# Python types accepted by Problem.set_var_type
_PY_TYPES = {
    int: VarType.INT,
    bool: VarType.BOOL,
    float: VarType.REAL,
}


class Problem:
    """
    Mixed-integer linear program.

    The problem is mutated only by its owner while it is being built. Solvers
    treat it as read-only.
    """

    def __init__(self):
        self.objective: Optional[Linear] = None
        self.opt_type: OptType = OptType.MIN
        self.constraints: List[Constraint] = []
        # dict keys keep insertion order
        self._variables: Dict[Hashable, None] = {}
        self._var_type: Dict[Hashable, VarType] = {}
        self._var_lower_bound: Dict[Hashable, Number] = {}
        self._var_upper_bound: Dict[Hashable, Number] = {}

    # =========================================================================
    # Objective
    # =========================================================================

    def set_objective(
        self,
        objective: Linear,
        opt_type: Union[OptType, str, None] = None,
    ) -> None:
        """
        Replace the objective function.

        A copy of ``objective`` is stored and all of its variables are
        registered.

        Args:
            objective: The linear objective
            opt_type: ``OptType`` or ``"min"``/``"max"``. If None, the
                current sense is kept.
        """
        self._register(objective)
        self.objective = Linear(objective)
        if opt_type is not None:
            self.set_optimization_type(opt_type)

    def set_optimization_type(self, opt_type: Union[OptType, str]) -> None:
        if isinstance(opt_type, OptType):
            self.opt_type = opt_type
            return
        try:
            self.opt_type = OptType(str(opt_type).lower())
        except ValueError:
            logger.warning(
                "Unknown optimization type %r (current optimization type is %s)",
                opt_type,
                self.opt_type,
            )

    # =========================================================================
    # Constraints
    # =========================================================================

    def add(self, *args, name: Optional[str] = None) -> Constraint:
        """
        Append a constraint.

        Accepted forms:
            add(constraint)
            add(lhs, operator, rhs)
            add(name, lhs, operator, rhs)

        ``operator`` is an ``Operator`` or one of ``"<="``, ``"="``, ``">="``.
        The left-hand side is copied, so later changes to the caller's
        ``Linear`` do not affect the problem. A ``name`` keyword renames the
        stored constraint; a Constraint passed in is then copied, not changed.

        Returns:
            The stored Constraint.

        Raises:
            MalformedOperatorError: If the operator string is unknown.
            TypeError: On any other argument layout.
        """
        if len(args) == 1 and isinstance(args[0], Constraint):
            constraint = args[0]
            if name is not None:
                constraint = Constraint(
                    Linear(constraint.lhs), constraint.operator, constraint.rhs, name=name
                )
        elif len(args) == 3:
            lhs, operator, rhs = args
            constraint = Constraint(Linear(lhs), operator, rhs, name=name)
        elif len(args) == 4:
            if name is not None:
                raise TypeError("add() got the constraint name twice")
            name, lhs, operator, rhs = args
            constraint = Constraint(Linear(lhs), operator, rhs, name=name)
        else:
            raise TypeError(
                "add() expects (constraint), (lhs, operator, rhs) "
                "or (name, lhs, operator, rhs)"
            )

        self._register(constraint.lhs)
        self.constraints.append(constraint)
        return constraint

    @property
    def constraints_count(self) -> int:
        return len(self.constraints)

    # =========================================================================
    # Variables
    # =========================================================================

    @property
    def variables(self) -> List[Hashable]:
        """All registered variables in registration order."""
        return list(self._variables)

    @property
    def variables_count(self) -> int:
        return len(self._variables)

    def get_var_type(self, variable: Hashable) -> VarType:
        return self._var_type.get(variable, VarType.REAL)

    def set_var_type(self, variable: Hashable, var_type: Union[VarType, type]) -> None:
        """
        Set the domain of a variable.

        Args:
            variable: The variable
            var_type: A ``VarType``, or one of the Python types ``int``,
                ``bool`` and ``float``. Other types are logged and ignored.
        """
        if not isinstance(var_type, VarType):
            mapped = _PY_TYPES.get(var_type)
            if mapped is None:
                logger.warning("%r is an unknown variable type (ignored)", var_type)
                return
            var_type = mapped
        self._variables.setdefault(variable, None)
        self._var_type[variable] = var_type

    def get_var_lower_bound(self, variable: Hashable) -> Optional[Number]:
        return self._var_lower_bound.get(variable)

    def get_var_upper_bound(self, variable: Hashable) -> Optional[Number]:
        return self._var_upper_bound.get(variable)

    def set_var_lower_bound(self, variable: Hashable, value: Optional[Number]) -> None:
        self._set_bound(self._var_lower_bound, variable, value)

    def set_var_upper_bound(self, variable: Hashable, value: Optional[Number]) -> None:
        self._set_bound(self._var_upper_bound, variable, value)

    def set_var_bounds(
        self,
        lower: Optional[Number],
        variable: Hashable,
        upper: Optional[Number],
    ) -> None:
        """Set both bounds. ``None`` means unbounded on that side."""
        self.set_var_lower_bound(variable, lower)
        self.set_var_upper_bound(variable, upper)

    def set_var_bounds_and_type(
        self,
        lower: Optional[Number],
        variable: Hashable,
        upper: Optional[Number],
        var_type: Union[VarType, type],
    ) -> None:
        self.set_var_bounds(lower, variable, upper)
        self.set_var_type(variable, var_type)

    def _set_bound(self, bounds: Dict[Hashable, Number], variable, value) -> None:
        self._variables.setdefault(variable, None)
        if value is None:
            bounds.pop(variable, None)
        else:
            bounds[variable] = value

    def _register(self, linear: Linear) -> None:
        for term in linear:
            self._variables.setdefault(term.variable, None)

    # =========================================================================
    # Rendering
    # =========================================================================

    def __str__(self) -> str:
        lines = []
        if self.objective is not None:
            lines.append(str(self.opt_type))
            lines.append(f" {self.objective}")
        else:
            lines.append("Find one solution")

        lines.append("Subject To")
        for constraint in self.constraints:
            lines.append(f" {constraint}")

        lines.append("Bounds")
        for variable in self._variables:
            lb = self.get_var_lower_bound(variable)
            ub = self.get_var_upper_bound(variable)
            if lb is None and ub is None:
                continue
            text = f"{variable}"
            if lb is not None:
                text = f"{lb} <= {text}"
            if ub is not None:
                text = f"{text} <= {ub}"
            lines.append(f" {text}")

        lines.append("Variables")
        for variable in self._variables:
            lines.append(f" {variable} {self.get_var_type(variable)}")
        return "\n".join(lines) + "\n"

    def __repr__(self) -> str:
        return (
            f"<Problem: {self.variables_count} variables, "
            f"{self.constraints_count} constraints, "
            f"objective={'set' if self.objective is not None else 'none'}>"
        )

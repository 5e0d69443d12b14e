"""Relational constraints over linear expressions."""

from enum import Enum
from typing import Optional, Union

from ilpkit.errors import MalformedOperatorError
from ilpkit.linear import Linear, Number


class Operator(Enum):
    """Relation between the left-hand side and the right-hand side."""

    LE = "<="
    EQ = "="
    GE = ">="

    @classmethod
    def parse(cls, operator: Union["Operator", str]) -> "Operator":
        """
        Convert ``"<="``, ``"="`` or ``">="`` to an Operator.

        Raises:
            MalformedOperatorError: For any other value.
        """
        if isinstance(operator, Operator):
            return operator
        try:
            return cls(operator)
        except ValueError:
            raise MalformedOperatorError(operator) from None

    def __str__(self) -> str:
        return self.value


class Constraint:
    """
    Named statement ``lhs <operator> rhs``.

    If no name is given, the rendered constraint string becomes the name.
    It is computed once, so duals can be looked up by it later.
    """

    def __init__(
        self,
        lhs: Linear,
        operator: Union[Operator, str],
        rhs: Number,
        name: Optional[str] = None,
    ):
        self.lhs = lhs
        self.operator = Operator.parse(operator)
        self.rhs = rhs
        self.name = name if name is not None else str(self)

    def size(self) -> int:
        return len(self.lhs)

    def __len__(self) -> int:
        return len(self.lhs)

    def __str__(self) -> str:
        return f"{self.lhs} {self.operator} {self.rhs}"

    def __repr__(self) -> str:
        return f"<Constraint {self.name!r}: {len(self.lhs)} terms {self.operator} {self.rhs}>"

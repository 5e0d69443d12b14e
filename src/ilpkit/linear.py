"""
Linear expressions over opaque variables.

A ``Linear`` is an ordered list of ``Term`` objects. Variables can be any
hashable value supplied by the caller; the same variable may appear in
several terms, and terms are never merged.

Example:
    >>> x = Linear([143, 60], ["x", "y"])
    >>> x.evaluate({"x": 21, "y": 52})
    6123
    >>> str(x)
    '143*x + 60*y'
"""

import numbers
from typing import Any, Hashable, Iterable, Iterator, List, Mapping, NamedTuple, Optional, Sequence, Union

from ilpkit.errors import MissingVariableEvaluationError, VariableCountMismatchError

Number = Union[int, float]

# A line break is inserted into the rendered string after this many terms.
TERMS_PER_LINE = 100


class Term(NamedTuple):
    """One (variable, coefficient) pair."""

    variable: Hashable
    coefficient: Number

    def __str__(self) -> str:
        return f"{self.coefficient}*{self.variable}"


def is_integral_type(value: Any) -> bool:
    """True for Python and NumPy integers (and booleans)."""
    return isinstance(value, numbers.Integral)


class Linear:
    """
    Weighted sum of variables.

    Construction:
        Linear()                          # empty
        Linear(terms)                     # from an iterable of Term
        Linear(coefficients, variables)   # bulk, parallel sequences
    """

    def __init__(
        self,
        coefficients: Optional[Union[Iterable[Term], Sequence[Number]]] = None,
        variables: Optional[Sequence[Hashable]] = None,
    ):
        self._terms: List[Term] = []
        if coefficients is None:
            if variables is not None:
                raise VariableCountMismatchError(0, len(variables))
            return
        if variables is None:
            # Iterable of terms (or another Linear)
            for term in coefficients:
                self.add_terms(term)
            return

        coefficients = list(coefficients)
        variables = list(variables)
        if len(coefficients) != len(variables):
            raise VariableCountMismatchError(len(coefficients), len(variables))
        for coefficient, variable in zip(coefficients, variables):
            self.add(coefficient, variable)

    # =========================================================================
    # Mutation
    # =========================================================================

    def add(self, coefficient: Number, variable: Hashable) -> "Linear":
        """Append ``coefficient * variable``. Returns self for chaining."""
        self._terms.append(Term(variable, coefficient))
        return self

    def add_terms(self, *terms: Term) -> "Linear":
        for term in terms:
            if not isinstance(term, Term):
                term = Term(*term)
            self._terms.append(term)
        return self

    def clear(self) -> None:
        self._terms.clear()

    def copy(self) -> "Linear":
        return Linear(self._terms)

    # =========================================================================
    # Access
    # =========================================================================

    @property
    def coefficients(self) -> List[Number]:
        return [term.coefficient for term in self._terms]

    @property
    def variables(self) -> List[Hashable]:
        return [term.variable for term in self._terms]

    def size(self) -> int:
        return len(self._terms)

    def __len__(self) -> int:
        return len(self._terms)

    def __iter__(self) -> Iterator[Term]:
        return iter(self._terms)

    def __getitem__(self, index: int) -> Term:
        return self._terms[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Linear):
            return NotImplemented
        return self._terms == other._terms

    __hash__ = None

    # =========================================================================
    # Evaluation
    # =========================================================================

    def evaluate(
        self,
        assignment: Mapping[Hashable, Number],
        ignore_missing: bool = False,
    ) -> Number:
        """
        Evaluate the expression for a variable assignment.

        The sum is accumulated in floating point. It is returned as an
        ``int`` only when every coefficient and every looked-up value is an
        integer type; otherwise it is returned as a ``float``.

        Args:
            assignment: Mapping from variable to value
            ignore_missing: If True, variables absent from ``assignment``
                contribute 0 instead of raising.

        Returns:
            The value of the expression.

        Raises:
            MissingVariableEvaluationError: If a variable has no value and
                ``ignore_missing`` is False.
        """
        total = 0.0
        as_float = False

        for variable, coefficient in self._terms:
            try:
                value = assignment[variable]
            except KeyError:
                value = None
            if value is None:
                if not ignore_missing:
                    raise MissingVariableEvaluationError(variable)
                continue
            if not (is_integral_type(coefficient) and is_integral_type(value)):
                as_float = True
            total += float(coefficient) * float(value)

        if as_float:
            return total
        return int(total)

    # =========================================================================
    # Rendering
    # =========================================================================

    def __str__(self) -> str:
        parts = []
        last = len(self._terms) - 1
        for i, term in enumerate(self._terms):
            parts.append(str(term))
            if i < last:
                if (i + 1) % TERMS_PER_LINE == 0:
                    parts.append("\n")
                parts.append(" + ")
        return "".join(parts)

    def __repr__(self) -> str:
        return f"<Linear: {len(self._terms)} terms>"

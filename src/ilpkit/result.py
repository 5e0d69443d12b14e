"""Solution container returned by every backend."""

from typing import Dict, Hashable, Optional

from ilpkit.linear import Linear, Number


class Result:
    """
    Primal and dual values of a solved problem.

    Primal values are keyed by variable. Dual values are keyed by variable
    (reduced costs) and by constraint name (row duals); they are only filled
    by backends that report them.

    The objective value is either set by the backend or computed on first
    access by evaluating the objective expression over the primal values.
    """

    def __init__(
        self,
        objective_value: Optional[Number] = None,
        objective_expr: Optional[Linear] = None,
    ):
        self.primal: Dict[Hashable, Number] = {}
        self.dual: Dict[Hashable, Number] = {}
        self.objective_value = objective_value
        self.objective_expr = objective_expr

    @property
    def objective(self) -> Optional[Number]:
        if self.objective_value is None and self.objective_expr is not None:
            self.objective_value = self.objective_expr.evaluate(self.primal)
        return self.objective_value

    def get(self, variable: Hashable) -> Optional[Number]:
        return self.primal.get(variable)

    def get_boolean(self, variable: Hashable) -> bool:
        return self.primal[variable] != 0

    def put(self, variable: Hashable, value: Number) -> None:
        self.primal[variable] = value

    def get_primal_value(self, variable: Hashable) -> Optional[Number]:
        return self.primal.get(variable)

    def put_primal_value(self, variable: Hashable, value: Number) -> None:
        self.primal[variable] = value

    def get_dual_value(self, key: Hashable) -> Optional[Number]:
        return self.dual.get(key)

    def put_dual_value(self, key: Hashable, value: Number) -> None:
        self.dual[key] = value

    def contains_var(self, variable: Hashable) -> bool:
        return variable in self.primal

    def __contains__(self, variable: Hashable) -> bool:
        return variable in self.primal

    def __getitem__(self, variable: Hashable) -> Number:
        return self.primal[variable]

    def __str__(self) -> str:
        return f"Objective: {self.objective} {self.primal}"

    def __repr__(self) -> str:
        return f"<Result: objective={self.objective}, {len(self.primal)} values>"

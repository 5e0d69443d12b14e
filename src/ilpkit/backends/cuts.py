"""
Optimization on top of a feasibility-only engine.

Pseudo-boolean engines answer "is there an assignment?" but have no
objective. ``optimize_with_cuts`` turns such an engine into an optimizer:

    1. Decide feasibility under the remaining time budget.
    2. Infeasible: the previous assignment (if any) is optimal. Stop.
    3. Feasible: evaluate the objective, record it as the incumbent, and add
       a cut that requires the next assignment to be strictly better
       (``obj <= best - 1`` for MIN, ``obj >= best + 1`` for MAX).
    4. Subtract elapsed time from the budget and repeat.

All coefficients are integral, so the objective takes integer values and the
"- 1" / "+ 1" cuts are exact. The loop runs at most once per distinct
attainable objective value (plus the final infeasible call).
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Hashable, List, Optional, Tuple

from ilpkit.linear import Linear
from ilpkit.problem import OptType
from ilpkit.solver import SolveStatus

logger = logging.getLogger(__name__)

Assignment = Dict[Hashable, int]

# decide(remaining_seconds) -> (status, assignment or None)
Decide = Callable[[Optional[float]], Tuple[SolveStatus, Optional[Assignment]]]

# add_cut(bound): require objective <= bound (MIN) or >= bound (MAX)
AddCut = Callable[[int], None]


@dataclass
class CutLoopOutcome:
    """Final state of the incremental-cut loop."""

    status: SolveStatus
    assignment: Optional[Assignment] = None
    objective_value: Optional[int] = None
    history: List[int] = field(default_factory=list)
    iterations: int = 0


def optimize_with_cuts(
    decide: Decide,
    add_cut: AddCut,
    objective: Optional[Linear],
    opt_type: OptType,
    time_limit: Optional[float] = None,
    clock: Callable[[], float] = time.monotonic,
) -> CutLoopOutcome:
    """
    Run the incremental-cut loop.

    Args:
        decide: Feasibility oracle. Called with the remaining budget in
            seconds (None if unlimited). Returns a status and, for
            OPTIMAL/FEASIBLE, a 0/1 assignment of every variable.
        add_cut: Adds ``objective <= bound`` (MIN) or ``objective >= bound``
            (MAX) to the engine.
        objective: Objective expression, or None for a feasibility search.
        opt_type: Optimization sense
        time_limit: Total budget in seconds, or None
        clock: Monotonic clock (injectable for tests)

    Returns:
        CutLoopOutcome. ``status`` is OPTIMAL when the last incumbent was
        proven optimal, FEASIBLE when the budget ran out with an incumbent,
        and INFEASIBLE or TIME_LIMIT when nothing was found.
    """
    start = clock()
    outcome = CutLoopOutcome(status=SolveStatus.UNKNOWN)
    maximize = opt_type is OptType.MAX

    while True:
        remaining = None
        if time_limit is not None:
            remaining = max(time_limit - (clock() - start), 0.0)
            if remaining <= 0:
                status = SolveStatus.TIME_LIMIT
                break

        status, assignment = decide(remaining)
        outcome.iterations += 1
        if not status.has_solution:
            break

        outcome.assignment = dict(assignment)
        if objective is None:
            break

        value = int(round(objective.evaluate(assignment)))
        outcome.objective_value = value
        outcome.history.append(value)
        logger.info("Found new solution: %s", value)

        add_cut(value + 1 if maximize else value - 1)

    if outcome.assignment is None:
        outcome.status = status
    elif status is SolveStatus.INFEASIBLE or objective is None:
        outcome.status = SolveStatus.OPTIMAL
    else:
        outcome.status = SolveStatus.FEASIBLE

    logger.debug(
        "Cut loop finished after %d iterations with status %s",
        outcome.iterations,
        outcome.status,
    )
    return outcome

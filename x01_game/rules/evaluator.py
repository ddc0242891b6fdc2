"""Rules Evaluator: classify a submitted visit as a bust or a valid score."""

from __future__ import annotations

from dataclasses import dataclass

from ..state.models import OutRule
from .checkout import has_single_dart_finish

MIN_VISIT_SCORE = 0
MAX_VISIT_SCORE = 180
BULLSEYE = 50
MAX_SINGLE_DOUBLE = 40


@dataclass(frozen=True, slots=True)
class TurnOutcome:
    is_bust: bool
    after: int


def is_valid_entry(entered: int) -> bool:
    return MIN_VISIT_SCORE <= entered <= MAX_VISIT_SCORE


def is_valid_finish(before: int, entered: int, out_rule: OutRule) -> bool:
    """Check whether reducing ``before`` to zero with ``entered`` is a legal finish.

    Master-out shares the double-out check: the visit must be a single dart
    on a double or the bull. Multi-dart table checkouts are
    suggestions only.
    """

    if out_rule is OutRule.STRAIGHT:
        return True
    if entered != before:
        return False
    if has_single_dart_finish(before):
        return True
    if before == BULLSEYE and entered == BULLSEYE:
        return True
    return before <= MAX_SINGLE_DOUBLE and before % 2 == 0 and entered == before


def evaluate(before: int, entered: int, out_rule: OutRule) -> TurnOutcome:
    """Return whether the visit busts and the remaining score after it."""

    bust = TurnOutcome(is_bust=True, after=before)
    if not is_valid_entry(entered):
        return bust
    if entered > before:
        return bust
    proposed = before - entered
    if proposed < 0:
        return bust
    if proposed == 1:
        return bust
    if out_rule is not OutRule.STRAIGHT and proposed == 0:
        if not is_valid_finish(before, entered, out_rule):
            return bust
    return TurnOutcome(is_bust=False, after=proposed)


__all__ = [
    "MAX_VISIT_SCORE",
    "MIN_VISIT_SCORE",
    "TurnOutcome",
    "evaluate",
    "is_valid_entry",
    "is_valid_finish",
]

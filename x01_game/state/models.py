"""Dataclasses describing players, turns and the phase of an X01 leg."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OutRule(str, Enum):
    """Constraint on how a leg may be finished."""

    STRAIGHT = "straight"
    DOUBLE = "double"
    MASTER = "master"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class PhaseKind(str, Enum):
    SETUP = "setup"
    IN_GAME = "in_game"
    FINISHED = "finished"


@dataclass(frozen=True, slots=True)
class Phase:
    """Current lifecycle phase; ``winner_index`` is only set when finished."""

    kind: PhaseKind
    winner_index: Optional[int] = None

    @classmethod
    def setup(cls) -> "Phase":
        return cls(PhaseKind.SETUP)

    @classmethod
    def in_game(cls) -> "Phase":
        return cls(PhaseKind.IN_GAME)

    @classmethod
    def finished(cls, winner_index: int) -> "Phase":
        return cls(PhaseKind.FINISHED, winner_index)

    @property
    def is_setup(self) -> bool:
        return self.kind is PhaseKind.SETUP

    @property
    def is_in_game(self) -> bool:
        return self.kind is PhaseKind.IN_GAME

    @property
    def is_finished(self) -> bool:
        return self.kind is PhaseKind.FINISHED


@dataclass(frozen=True, slots=True)
class Turn:
    """Immutable record of one submitted visit.

    ``after`` equals ``before`` for a bust. ``sequence`` is unique per game
    engine so that two otherwise identical visits never compare equal.
    """

    entered: int
    before: int
    after: int
    is_bust: bool
    sequence: int
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True)
class Player:
    """A participant; ``turns`` is ordered most-recent-first."""

    player_id: int
    name: str
    remaining: int
    turns: List[Turn] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.name.strip()


@dataclass(frozen=True, slots=True)
class GameAction:
    """Undo log entry pairing a player index with the turn it produced."""

    player_index: int
    turn: Turn

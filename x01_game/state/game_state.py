"""The X01 game engine: roster, lifecycle, pending input and the undo log."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from ..rules.checkout import finish_segments
from ..rules.evaluator import MAX_VISIT_SCORE, evaluate, is_valid_entry
from ..services.stats import average
from .models import GameAction, OutRule, Phase, Player, Turn

LOGGER = logging.getLogger(__name__)

DEFAULT_START_SCORE = 501
START_SCORE_OPTIONS = (301, 501, 701)
MAX_INPUT_DIGITS = 3
DEFAULT_PLAYER_COUNT = 2


class X01Game:
    """Single-session X01 scorekeeper.

    Commands never raise for invalid requests. A rejected command returns
    ``False`` or ``None`` and leaves the state untouched.
    """

    def __init__(
        self,
        *,
        start_score: int = DEFAULT_START_SCORE,
        out_rule: OutRule = OutRule.STRAIGHT,
        player_names: Optional[List[str]] = None,
    ) -> None:
        self.start_score = start_score if start_score > 0 else DEFAULT_START_SCORE
        self.out_rule = out_rule
        self.phase = Phase.setup()
        self.players: List[Player] = []
        self.current_player_index = 0
        self.starting_player_index = 0
        self.score_input = ""
        self._actions: List[GameAction] = []
        self.started_at: Optional[datetime] = None
        self._next_player_id = 1
        self._next_turn_sequence = 1
        names = player_names
        if names is None:
            names = [f"Player {number}" for number in range(1, DEFAULT_PLAYER_COUNT + 1)]
        for name in names:
            self._append_player(name)

    # Queries ----------------------------------------------------------
    @property
    def can_start(self) -> bool:
        return len(self.players) >= 1 and all(player.name.strip() for player in self.players)

    @property
    def current_player(self) -> Optional[Player]:
        if 0 <= self.current_player_index < len(self.players):
            return self.players[self.current_player_index]
        return None

    @property
    def winner(self) -> Optional[Player]:
        if not self.phase.is_finished or self.phase.winner_index is None:
            return None
        return self.players[self.phase.winner_index]

    @property
    def pending_value(self) -> Optional[int]:
        if not self.score_input.isdigit():
            return None
        return int(self.score_input)

    @property
    def is_valid_score_input(self) -> bool:
        value = self.pending_value
        return value is not None and is_valid_entry(value)

    @property
    def actions(self) -> Tuple[GameAction, ...]:
        return tuple(self._actions)

    @property
    def can_undo(self) -> bool:
        return bool(self._actions)

    def average(self, index: int) -> float:
        """Per-visit average of the player at ``index`` (0 when out of range)."""

        if not 0 <= index < len(self.players):
            return 0.0
        return average(self.players[index])

    def finish_segments(self, remaining: Optional[int] = None) -> List[str]:
        """Checkout hint for ``remaining`` or for the current player."""

        if remaining is None:
            player = self.current_player
            if player is None:
                return []
            remaining = player.remaining
        return finish_segments(remaining, self.out_rule)

    # Setup commands ---------------------------------------------------
    def add_player(self, name: Optional[str] = None) -> Optional[Player]:
        if not self.phase.is_setup:
            return None
        if name is None:
            name = f"Player {len(self.players) + 1}"
        return self._append_player(name)

    def remove_player(self, index: int) -> bool:
        if not self.phase.is_setup or not 0 <= index < len(self.players):
            return False
        removed = self.players.pop(index)
        LOGGER.debug("Removed player %s", removed.name)
        return True

    def reorder_players(self, source: int, destination: int) -> bool:
        count = len(self.players)
        if not self.phase.is_setup:
            return False
        if not (0 <= source < count and 0 <= destination < count):
            return False
        if source == destination:
            return True
        player = self.players.pop(source)
        self.players.insert(destination, player)
        return True

    def set_player_name(self, index: int, value: str) -> bool:
        if not 0 <= index < len(self.players):
            return False
        self.players[index].name = value
        return True

    def set_start_score(self, value: int) -> bool:
        if value <= 0:
            return False
        self.start_score = value
        if self.phase.is_setup:
            for player in self.players:
                player.remaining = value
        return True

    def set_out_rule(self, out_rule: OutRule) -> bool:
        if not self.phase.is_setup:
            return False
        self.out_rule = out_rule
        return True

    # Lifecycle --------------------------------------------------------
    def start_game(self) -> bool:
        """Begin a new leg; a restart after a finished leg rotates the starter."""

        if not self.can_start:
            return False
        if self.phase.is_finished:
            self.starting_player_index = (self.starting_player_index + 1) % len(self.players)
        elif self.starting_player_index >= len(self.players):
            self.starting_player_index = 0
        self._actions.clear()
        self.score_input = ""
        self._reset_players()
        self.current_player_index = self.starting_player_index
        self.phase = Phase.in_game()
        self.started_at = datetime.now(timezone.utc)
        LOGGER.info(
            "Started %s (%s out) with %d players, %s throws first",
            self.start_score,
            self.out_rule.value,
            len(self.players),
            self.players[self.current_player_index].name,
        )
        return True

    def reset_to_setup(self) -> None:
        self.phase = Phase.setup()
        self.score_input = ""
        self._actions.clear()
        self.current_player_index = 0
        self.starting_player_index = 0
        self._reset_players()
        self.started_at = None

    def select_player(self, index: int) -> bool:
        if not self.phase.is_in_game or not 0 <= index < len(self.players):
            return False
        self.current_player_index = index
        self.score_input = ""
        return True

    # Pending input ----------------------------------------------------
    def append_digit(self, digit: int) -> bool:
        if not 0 <= digit <= 9:
            return False
        base = "" if self.score_input == "0" else self.score_input
        candidate = f"{base}{digit}"
        if len(candidate) > MAX_INPUT_DIGITS or int(candidate) > MAX_VISIT_SCORE:
            return False
        self.score_input = candidate
        return True

    def delete_digit(self) -> bool:
        if not self.score_input:
            return False
        self.score_input = self.score_input[:-1]
        return True

    def clear_input(self) -> None:
        self.score_input = ""

    # Turns ------------------------------------------------------------
    def submit_turn(self) -> Optional[Turn]:
        """Record the pending visit for the current player."""

        if not self.phase.is_in_game or not self.is_valid_score_input:
            return None
        player = self.current_player
        if player is None:
            return None
        entered = int(self.score_input)
        before = player.remaining
        outcome = evaluate(before, entered, self.out_rule)
        turn = Turn(
            entered=entered,
            before=before,
            after=outcome.after,
            is_bust=outcome.is_bust,
            sequence=self._next_turn_sequence,
        )
        self._next_turn_sequence += 1
        player.turns.insert(0, turn)
        player.remaining = turn.after
        self._actions.append(GameAction(player_index=self.current_player_index, turn=turn))
        self.score_input = ""

        if turn.is_bust:
            LOGGER.debug("Bust for %s: %d from %d", player.name, entered, before)
        if turn.after == 0 and not turn.is_bust:
            self.phase = Phase.finished(self.current_player_index)
            LOGGER.info("%s checked out from %d", player.name, before)
            return turn

        self.current_player_index = (self.current_player_index + 1) % len(self.players)
        return turn

    def undo(self) -> Optional[GameAction]:
        """Reverse the most recent submission, busts included."""

        if not self._actions:
            return None
        action = self._actions.pop()
        index = action.player_index
        if not 0 <= index < len(self.players):
            LOGGER.warning("Dropping undo entry for missing player index %d", index)
            return action
        player = self.players[index]
        try:
            player.turns.remove(action.turn)
        except ValueError:
            LOGGER.warning("Turn %d not found for %s, removing latest", action.turn.sequence, player.name)
            if player.turns:
                del player.turns[0]
        LOGGER.debug("Undid %d for %s", action.turn.entered, player.name)
        player.remaining = action.turn.before
        self.current_player_index = index
        self.score_input = ""
        if self.phase.is_finished:
            self.phase = Phase.in_game()
        return action

    # Internal helpers -------------------------------------------------
    def _append_player(self, name: str) -> Player:
        player = Player(player_id=self._next_player_id, name=name, remaining=self.start_score)
        self._next_player_id += 1
        self.players.append(player)
        return player

    def _reset_players(self) -> None:
        for player in self.players:
            player.remaining = self.start_score
            player.turns.clear()


__all__ = [
    "DEFAULT_START_SCORE",
    "MAX_INPUT_DIGITS",
    "START_SCORE_OPTIONS",
    "X01Game",
]

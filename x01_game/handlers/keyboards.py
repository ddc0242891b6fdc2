"""Inline keyboards for the setup screen, the keypad and the finished leg."""

from __future__ import annotations

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from ..state.game_state import START_SCORE_OPTIONS
from ..state.manager import ChatSession
from ..state.models import OutRule

CALLBACK_PREFIX = "x01"
NO_VALUE = "-"
PLAYERS_PER_ROW = 4


def callback_data(section: str, action: str, value: object, session: ChatSession) -> str:
    return f"{CALLBACK_PREFIX}:{section}:{action}:{value}:{session.session_id}"


def parse_callback_data(data: str) -> tuple[str, str, str, str] | None:
    """Split ``x01:<section>:<action>:<value>:<session>`` into its parts."""

    parts = (data or "").split(":", 4)
    if len(parts) != 5 or parts[0] != CALLBACK_PREFIX:
        return None
    _, section, action, value, session_id = parts
    return section, action, value, session_id


def build_setup_keyboard(session: ChatSession) -> InlineKeyboardMarkup:
    game = session.game
    score_row = [
        InlineKeyboardButton(
            f"✅ {score}" if score == game.start_score else str(score),
            callback_data=callback_data("setup", "score", score, session),
        )
        for score in START_SCORE_OPTIONS
    ]
    rule_row = [
        InlineKeyboardButton(
            f"✅ {rule.label}" if rule is game.out_rule else rule.label,
            callback_data=callback_data("setup", "rule", rule.value, session),
        )
        for rule in OutRule
    ]
    action_row = [
        InlineKeyboardButton("➕ Player", callback_data=callback_data("setup", "add", NO_VALUE, session)),
        InlineKeyboardButton("▶️ Start", callback_data=callback_data("setup", "start", NO_VALUE, session)),
    ]
    return InlineKeyboardMarkup([score_row, rule_row, action_row])


def build_player_rows(session: ChatSession) -> list[list[InlineKeyboardButton]]:
    """One button per player; tapping a name hands the turn to that player."""

    game = session.game
    buttons = []
    for index, player in enumerate(game.players):
        label = player.display_name or "?"
        if index == game.current_player_index:
            label = f"▶️ {label}"
        buttons.append(InlineKeyboardButton(label, callback_data=callback_data("key", "sel", index, session)))
    return [buttons[start : start + PLAYERS_PER_ROW] for start in range(0, len(buttons), PLAYERS_PER_ROW)]


def build_keypad(session: ChatSession) -> InlineKeyboardMarkup:
    def key(label: str, token: str) -> InlineKeyboardButton:
        return InlineKeyboardButton(label, callback_data=callback_data("key", token, NO_VALUE, session))

    rows = build_player_rows(session)
    rows += [[key(str(digit), str(digit)) for digit in range(start, start + 3)] for start in (1, 4, 7)]
    rows.append([key("↩️ Undo", "undo"), key("0", "0"), key("✅ Enter", "ok")])
    rows.append([key("⌫", "del"), key("✖️ Clear", "clr")])
    return InlineKeyboardMarkup(rows)


def build_finished_keyboard(session: ChatSession) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton("🔁 New game", callback_data=callback_data("end", "new", NO_VALUE, session)),
                InlineKeyboardButton("⚙️ Setup", callback_data=callback_data("end", "setup", NO_VALUE, session)),
            ],
            [InlineKeyboardButton("↩️ Undo", callback_data=callback_data("key", "undo", NO_VALUE, session))],
        ]
    )


def build_board_keyboard(session: ChatSession) -> InlineKeyboardMarkup:
    phase = session.game.phase
    if phase.is_setup:
        return build_setup_keyboard(session)
    if phase.is_finished:
        return build_finished_keyboard(session)
    return build_keypad(session)


__all__ = [
    "build_board_keyboard",
    "build_finished_keyboard",
    "build_keypad",
    "build_player_rows",
    "build_setup_keyboard",
    "callback_data",
    "parse_callback_data",
]

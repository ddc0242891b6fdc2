"""X01 darts scorekeeper: rules engine plus Telegram front end."""

from .handlers import help_cmd, newgame, quit_cmd, register_handlers, reset_for_chat, start_cmd
from .state import GameAction, OutRule, Phase, PhaseKind, Player, Turn
from .state.game_state import X01Game
from .state.manager import STATE_MANAGER, ChatSession


def get_session(chat_id: int, thread_id: int | None = None) -> ChatSession | None:
    """Public helper that proxies to the shared session manager."""

    return STATE_MANAGER.get_by_chat(chat_id, thread_id)


__all__ = [
    "ChatSession",
    "GameAction",
    "OutRule",
    "Phase",
    "PhaseKind",
    "Player",
    "STATE_MANAGER",
    "Turn",
    "X01Game",
    "get_session",
    "help_cmd",
    "newgame",
    "quit_cmd",
    "register_handlers",
    "reset_for_chat",
    "start_cmd",
]

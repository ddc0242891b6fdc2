"""Telegram handlers for the X01 scorekeeper."""

from .gameplay import refresh_board, undo_cmd
from .lobby import help_cmd, newgame, quit_cmd, score_cmd, setup_cmd, start_cmd
from .router import register_handlers, reset_for_chat

__all__ = [
    "help_cmd",
    "newgame",
    "quit_cmd",
    "refresh_board",
    "register_handlers",
    "reset_for_chat",
    "score_cmd",
    "setup_cmd",
    "start_cmd",
    "undo_cmd",
]

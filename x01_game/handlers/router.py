"""Registration helpers for the X01 handlers."""

from __future__ import annotations

from typing import Optional

from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from ..state.manager import STATE_MANAGER
from .gameplay import (
    ACTIVE_GAME_FILTER,
    finish_callback,
    handle_score_message,
    keypad_callback,
    refresh_board,
    undo_cmd,
)
from .lobby import (
    add_player_cmd,
    help_cmd,
    move_player_cmd,
    newgame,
    out_rule_cmd,
    quit_cmd,
    remove_player_cmd,
    rename_cmd,
    score_cmd,
    setup_callback,
    setup_cmd,
    start_cmd,
    start_score_cmd,
)


async def reset_for_chat(chat_id: int, thread_id: Optional[int], context: ContextTypes.DEFAULT_TYPE) -> None:
    """Drop the scoreboard bound to the provided chat."""

    STATE_MANAGER.drop_chat(chat_id, thread_id)


def register_handlers(application: Optional[Application]) -> None:
    """Attach X01 command, callback and message handlers to the application."""

    STATE_MANAGER.subscribe(refresh_board)
    if not application:
        return

    application.add_handler(CommandHandler("darts", start_cmd))
    application.add_handler(CommandHandler("newgame", newgame))
    application.add_handler(CommandHandler("setup", setup_cmd))
    application.add_handler(CommandHandler("addplayer", add_player_cmd))
    application.add_handler(CommandHandler("removeplayer", remove_player_cmd))
    application.add_handler(CommandHandler("rename", rename_cmd))
    application.add_handler(CommandHandler("moveplayer", move_player_cmd))
    application.add_handler(CommandHandler("startscore", start_score_cmd))
    application.add_handler(CommandHandler("outrule", out_rule_cmd))
    application.add_handler(CommandHandler("undo", undo_cmd))
    application.add_handler(CommandHandler("help", help_cmd, block=False))
    application.add_handler(CommandHandler("score", score_cmd, block=False))
    application.add_handler(CommandHandler("quit", quit_cmd))
    application.add_handler(CallbackQueryHandler(setup_callback, pattern="^x01:setup:"))
    application.add_handler(CallbackQueryHandler(keypad_callback, pattern="^x01:key:"))
    application.add_handler(CallbackQueryHandler(finish_callback, pattern="^x01:end:"))
    application.add_handler(
        MessageHandler(
            filters.TEXT & (~filters.COMMAND) & ACTIVE_GAME_FILTER,
            handle_score_message,
        )
    )

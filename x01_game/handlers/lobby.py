"""Setup commands: roster, start score, out-rule and starting a leg."""

from __future__ import annotations

import html
import logging
from typing import List, Optional

from telegram import InputFile, Update
from telegram.error import TelegramError
from telegram.ext import ContextTypes

from ..state.manager import STATE_MANAGER, ChatSession
from ..state.models import OutRule
from .gameplay import RENDERER, render_board_text
from .keyboards import parse_callback_data

LOGGER = logging.getLogger(__name__)

HELP_TEXT = (
    "<b>X01 scorekeeper</b>\n"
    "1. /darts opens the scoreboard for this chat.\n"
    "2. Pick 301, 501 or 701 and the out-rule, then add or rename players.\n"
    "3. Press Start. Enter each visit (0–180) on the keypad or type it as a message.\n"
    "4. Scoring more than you have left, or leaving 1, is a bust: the score stays and\n"
    "   the turn passes. With Double or Master out the last dart must finish on a\n"
    "   double or the bull.\n"
    "5. The first player to reach exactly zero wins the leg. New game rotates who\n"
    "   throws first.\n"
    "\nCommands:\n"
    "• /addplayer [name], /removeplayer N, /rename N name, /moveplayer FROM TO\n"
    "• /startscore 301|501|701, /outrule straight|double|master\n"
    "• /undo: take back the last visit (busts included).\n"
    "• /score: scoreboard picture and recent visits.\n"
    "• /newgame: start a new leg, /setup: back to setup, /quit: close the scoreboard.\n"
)


def _resolve_session(update: Update, *, create: bool = False) -> Optional[ChatSession]:
    chat = update.effective_chat
    message = update.effective_message
    if not chat:
        return None
    thread_id = message.message_thread_id if message else None
    if create:
        return STATE_MANAGER.get_or_create(chat.id, thread_id)
    return STATE_MANAGER.get_by_chat(chat.id, thread_id)


def _parse_player_number(raw: str, session: ChatSession) -> Optional[int]:
    """Turn a 1-based player number into an index, or None when invalid."""

    try:
        number = int(raw)
    except (TypeError, ValueError):
        return None
    index = number - 1
    if not 0 <= index < len(session.game.players):
        return None
    return index


def _args(context: ContextTypes.DEFAULT_TYPE) -> List[str]:
    return list(getattr(context, "args", None) or [])


async def _reply(update: Update, text: str) -> None:
    message = update.effective_message
    if message:
        await message.reply_text(text, parse_mode="HTML")


async def start_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Open (or re-post) the scoreboard for the current chat."""

    session = _resolve_session(update, create=True)
    if not session:
        return
    session.board_message_id = None
    await STATE_MANAGER.publish(session, context)


async def newgame(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Start a new leg with the current roster and settings."""

    session = _resolve_session(update, create=True)
    if not session:
        return
    if not session.game.start_game():
        await _reply(update, "Every player needs a name before the game can start.")
        return
    await STATE_MANAGER.publish(session, context)


async def setup_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    session = _resolve_session(update, create=True)
    if not session:
        return
    session.game.reset_to_setup()
    await STATE_MANAGER.publish(session, context)


async def add_player_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    session = _resolve_session(update, create=True)
    if not session:
        return
    name = " ".join(_args(context)).strip() or None
    player = session.game.add_player(name)
    if player is None:
        await _reply(update, "Players can only be changed during setup. Use /setup first.")
        return
    await STATE_MANAGER.publish(session, context)


async def remove_player_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    session = _resolve_session(update)
    args = _args(context)
    if not session or len(args) != 1:
        await _reply(update, "Usage: /removeplayer N")
        return
    index = _parse_player_number(args[0], session)
    if index is None or not session.game.remove_player(index):
        await _reply(update, "That player cannot be removed right now.")
        return
    await STATE_MANAGER.publish(session, context)


async def rename_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    session = _resolve_session(update)
    args = _args(context)
    if not session or len(args) < 2:
        await _reply(update, "Usage: /rename N name")
        return
    index = _parse_player_number(args[0], session)
    if index is None:
        await _reply(update, "No player with that number.")
        return
    session.game.set_player_name(index, " ".join(args[1:]))
    await STATE_MANAGER.publish(session, context)


async def move_player_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    session = _resolve_session(update)
    args = _args(context)
    if not session or len(args) != 2:
        await _reply(update, "Usage: /moveplayer FROM TO")
        return
    source = _parse_player_number(args[0], session)
    destination = _parse_player_number(args[1], session)
    if source is None or destination is None or not session.game.reorder_players(source, destination):
        await _reply(update, "Players can only be reordered during setup.")
        return
    await STATE_MANAGER.publish(session, context)


async def start_score_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    session = _resolve_session(update, create=True)
    args = _args(context)
    if not session:
        return
    try:
        value = int(args[0]) if len(args) == 1 else 0
    except ValueError:
        value = 0
    if not session.game.set_start_score(value):
        await _reply(update, "Usage: /startscore 301|501|701 (any positive number works).")
        return
    await STATE_MANAGER.publish(session, context)


async def out_rule_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    session = _resolve_session(update, create=True)
    args = _args(context)
    if not session:
        return
    try:
        rule = OutRule(args[0].lower()) if len(args) == 1 else None
    except ValueError:
        rule = None
    if rule is None or not session.game.set_out_rule(rule):
        await _reply(update, "Usage during setup: /outrule straight|double|master")
        return
    await STATE_MANAGER.publish(session, context)


async def setup_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle the inline buttons of the setup board."""

    query = update.callback_query
    if not query:
        return
    parsed = parse_callback_data(query.data or "")
    if not parsed or parsed[0] != "setup":
        await query.answer()
        return
    _, action, value, session_id = parsed
    session = STATE_MANAGER.get_by_id(session_id)
    if not session:
        await query.answer("This scoreboard is no longer active.", show_alert=True)
        return
    game = session.game
    if not game.phase.is_setup:
        await query.answer("The game is already running.")
        return
    if action == "score":
        changed = value.isdigit() and game.set_start_score(int(value))
    elif action == "rule":
        try:
            changed = game.set_out_rule(OutRule(value))
        except ValueError:
            changed = False
    elif action == "add":
        changed = game.add_player() is not None
    elif action == "start":
        changed = game.start_game()
        if not changed:
            await query.answer("Every player needs a name first.", show_alert=True)
            return
    else:
        changed = False
    await query.answer()
    if changed:
        await STATE_MANAGER.publish(session, context)


async def help_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _reply(update, HELP_TEXT)


async def score_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Send the scoreboard picture plus each player's recent visits."""

    message = update.effective_message
    session = _resolve_session(update)
    if not message:
        return
    if not session:
        await message.reply_text("No scoreboard here yet. Use /darts to open one.")
        return
    game = session.game
    history = "\n\n".join(
        f"<b>{html.escape(player.display_name)}</b>\n{RENDERER.render_history(player)}"
        for player in game.players
    )
    caption = RENDERER.render_standings(game)
    bot = getattr(context, "bot", None)
    send_photo = getattr(bot, "send_photo", None)
    if callable(send_photo):
        buffer = RENDERER.render_board_image(game)
        try:
            await send_photo(
                session.chat_id,
                photo=InputFile(buffer, filename="scoreboard.png"),
                caption=caption,
                parse_mode="HTML",
                message_thread_id=session.thread_id,
            )
        except TelegramError as exc:
            LOGGER.warning("Failed to send scoreboard image: %s", exc)
            await message.reply_text(render_board_text(session), parse_mode="HTML")
    else:
        await message.reply_text(render_board_text(session), parse_mode="HTML")
    if history:
        await message.reply_text(history, parse_mode="HTML")


async def quit_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Close the scoreboard of the current chat."""

    message = update.effective_message
    chat = update.effective_chat
    if not message or not chat:
        return
    dropped = STATE_MANAGER.drop_chat(chat.id, message.message_thread_id)
    if dropped is None:
        await message.reply_text("No scoreboard is open.")
        return
    await message.reply_text("Scoreboard closed.")


__all__ = [
    "HELP_TEXT",
    "add_player_cmd",
    "help_cmd",
    "move_player_cmd",
    "newgame",
    "out_rule_cmd",
    "quit_cmd",
    "remove_player_cmd",
    "rename_cmd",
    "score_cmd",
    "setup_callback",
    "setup_cmd",
    "start_cmd",
    "start_score_cmd",
]

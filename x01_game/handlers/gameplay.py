"""Runtime handlers: the board message, keypad, typed visits and undo."""

from __future__ import annotations

import html
import logging
import re
from typing import Optional

from telegram import Message, Update
from telegram.error import BadRequest, TelegramError
from telegram.ext import ContextTypes, filters

from ..rendering import ScoreboardRenderer
from ..services import collect_game_stats, format_stats_message
from ..state.manager import STATE_MANAGER, ChatSession
from ..state.models import Turn
from .keyboards import build_board_keyboard, parse_callback_data

LOGGER = logging.getLogger(__name__)
RENDERER = ScoreboardRenderer()
SCORE_PATTERN = re.compile(r"^\s*(\d{1,3})\s*$")


def render_board_text(session: ChatSession) -> str:
    game = session.game
    if game.phase.is_setup:
        return RENDERER.render_setup(game)
    return RENDERER.render_scoreboard(game)


async def refresh_board(session: ChatSession, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Edit the chat's board message in place, or post a new one."""

    bot = getattr(context, "bot", None)
    if not bot:
        return
    text = render_board_text(session)
    keyboard = build_board_keyboard(session)
    if session.board_message_id:
        try:
            await bot.edit_message_text(
                text,
                chat_id=session.chat_id,
                message_id=session.board_message_id,
                parse_mode="HTML",
                reply_markup=keyboard,
            )
            return
        except BadRequest as exc:
            if "not modified" in str(exc).lower():
                return
            LOGGER.warning("Board message %s could not be edited: %s", session.board_message_id, exc)
        except TelegramError as exc:
            LOGGER.warning("Board message %s could not be edited: %s", session.board_message_id, exc)
        session.board_message_id = None
    try:
        sent = await bot.send_message(
            session.chat_id,
            text,
            parse_mode="HTML",
            reply_markup=keyboard,
            message_thread_id=session.thread_id,
        )
    except TelegramError as exc:
        LOGGER.error("Failed to send board to chat %s: %s", session.chat_id, exc)
        return
    session.board_message_id = getattr(sent, "message_id", None)


async def announce_finish(session: ChatSession, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Post the winner and the leg summary."""

    game = session.game
    winner = game.winner
    bot = getattr(context, "bot", None)
    if winner is None or not bot:
        return
    stats = collect_game_stats(game)
    checkout = f" with a {stats.checkout} checkout" if stats.checkout is not None else ""
    try:
        await bot.send_message(
            session.chat_id,
            f"🏆 <b>{html.escape(winner.display_name)}</b> wins the leg{checkout}!",
            parse_mode="HTML",
            message_thread_id=session.thread_id,
        )
        await bot.send_message(
            session.chat_id,
            format_stats_message(stats),
            parse_mode="HTML",
            message_thread_id=session.thread_id,
        )
    except TelegramError as exc:
        LOGGER.warning("Failed to announce winner in chat %s: %s", session.chat_id, exc)


def describe_turn(turn: Turn) -> str:
    if turn.is_bust:
        return f"💥 Bust! {turn.entered} from {turn.before} does not count."
    if turn.after == 0:
        return "🎯 Game shot!"
    return f"{turn.entered} scored, {turn.after} left."


async def _submit_pending(session: ChatSession, context: ContextTypes.DEFAULT_TYPE) -> Optional[Turn]:
    turn = session.game.submit_turn()
    if turn is None:
        return None
    await STATE_MANAGER.publish(session, context)
    if session.game.phase.is_finished:
        await announce_finish(session, context)
    return turn


async def keypad_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle keypad presses: player selection, digits, editing, undo and enter."""

    query = update.callback_query
    if not query:
        return
    parsed = parse_callback_data(query.data or "")
    if not parsed or parsed[0] != "key":
        await query.answer()
        return
    _, token, value, session_id = parsed
    session = STATE_MANAGER.get_by_id(session_id)
    if not session:
        await query.answer("This scoreboard is no longer active.", show_alert=True)
        return
    game = session.game

    if token == "sel":
        if not value.isdigit() or not game.select_player(int(value)):
            await query.answer("That player cannot throw right now.")
            return
        await query.answer(f"{game.players[int(value)].display_name} to throw.")
    elif token.isdigit():
        if not game.phase.is_in_game or not game.append_digit(int(token)):
            await query.answer("A visit is at most 180.")
            return
        await query.answer()
    elif token == "del":
        game.delete_digit()
        await query.answer()
    elif token == "clr":
        game.clear_input()
        await query.answer()
    elif token == "undo":
        action = game.undo()
        await query.answer("Visit undone." if action else "Nothing to undo.")
    elif token == "ok":
        turn = await _submit_pending(session, context)
        if turn is None:
            await query.answer("Enter a score between 0 and 180 first.", show_alert=True)
        else:
            await query.answer(describe_turn(turn))
        return
    else:
        await query.answer()
        return
    await STATE_MANAGER.publish(session, context)


async def finish_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle the buttons shown once a leg is won."""

    query = update.callback_query
    if not query:
        return
    parsed = parse_callback_data(query.data or "")
    if not parsed or parsed[0] != "end":
        await query.answer()
        return
    _, action, _, session_id = parsed
    session = STATE_MANAGER.get_by_id(session_id)
    if not session:
        await query.answer("This scoreboard is no longer active.", show_alert=True)
        return
    if action == "new":
        if not session.game.start_game():
            await query.answer("Every player needs a name first.", show_alert=True)
            return
        starter = session.game.current_player
        await query.answer(f"{starter.display_name} throws first." if starter else "New leg started.")
    elif action == "setup":
        session.game.reset_to_setup()
        await query.answer()
    else:
        await query.answer()
        return
    await STATE_MANAGER.publish(session, context)


class ActiveGameFilter(filters.MessageFilter):
    """Match messages sent to chats with a leg in progress."""

    name = "x01_active_game"

    def filter(self, message: Message) -> bool:  # type: ignore[override]
        chat_id = getattr(message, "chat_id", None)
        if chat_id is None:
            return False
        session = STATE_MANAGER.get_by_chat(chat_id, getattr(message, "message_thread_id", None))
        return bool(session and session.game.phase.is_in_game)


ACTIVE_GAME_FILTER = ActiveGameFilter()


async def handle_score_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Treat a bare number typed into the chat as the current player's visit."""

    message = update.effective_message
    chat = update.effective_chat
    if not message or not chat:
        return
    match = SCORE_PATTERN.match(message.text or "")
    if not match:
        return
    session = STATE_MANAGER.get_by_chat(chat.id, message.message_thread_id)
    if not session or not session.game.phase.is_in_game:
        return
    game = session.game
    game.clear_input()
    for digit in match.group(1):
        if not game.append_digit(int(digit)):
            game.clear_input()
            await message.reply_text("A visit is a number from 0 to 180.")
            return
    turn = await _submit_pending(session, context)
    if turn is not None and turn.is_bust:
        await message.reply_text(describe_turn(turn))


async def undo_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Reverse the last recorded visit in this chat."""

    message = update.effective_message
    chat = update.effective_chat
    if not message or not chat:
        return
    session = STATE_MANAGER.get_by_chat(chat.id, message.message_thread_id)
    if not session or session.game.undo() is None:
        await message.reply_text("Nothing to undo.")
        return
    await STATE_MANAGER.publish(session, context)


__all__ = [
    "ACTIVE_GAME_FILTER",
    "RENDERER",
    "announce_finish",
    "finish_callback",
    "handle_score_message",
    "keypad_callback",
    "refresh_board",
    "render_board_text",
    "undo_cmd",
]

"""Handler tests driven through lightweight Telegram stand-ins."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from telegram.error import BadRequest

from x01_game.handlers import gameplay, lobby
from x01_game.handlers.keyboards import callback_data, parse_callback_data
from x01_game.state.manager import STATE_MANAGER, ChatSession
from x01_game.state.models import OutRule

CHAT_ID = 100


@pytest.fixture(autouse=True)
def _board_listener() -> None:
    STATE_MANAGER.subscribe(gameplay.refresh_board)


def _build_bot() -> SimpleNamespace:
    return SimpleNamespace(
        send_message=AsyncMock(return_value=SimpleNamespace(message_id=42)),
        edit_message_text=AsyncMock(),
        send_photo=AsyncMock(),
    )


def _build_context(bot: SimpleNamespace | None = None, args: list[str] | None = None) -> SimpleNamespace:
    return SimpleNamespace(bot=bot or _build_bot(), args=args or [])


def _build_update(text: str = "", chat_id: int = CHAT_ID) -> SimpleNamespace:
    message = SimpleNamespace(text=text, chat_id=chat_id, message_thread_id=None, reply_text=AsyncMock())
    return SimpleNamespace(
        message=message,
        effective_message=message,
        effective_chat=SimpleNamespace(id=chat_id),
    )


def _build_query_update(data: str) -> SimpleNamespace:
    query = SimpleNamespace(data=data, answer=AsyncMock())
    return SimpleNamespace(callback_query=query)


def _last_answer(update: SimpleNamespace) -> tuple:
    return update.callback_query.answer.await_args


async def _press(session: ChatSession, context: SimpleNamespace, *tokens: str) -> SimpleNamespace:
    update = None
    for token in tokens:
        update = _build_query_update(callback_data("key", token, "-", session))
        await gameplay.keypad_callback(update, context)
    return update


async def _open_board(context: SimpleNamespace) -> ChatSession:
    await lobby.start_cmd(_build_update("/darts"), context)
    session = STATE_MANAGER.get_by_chat(CHAT_ID)
    assert session is not None
    return session


async def _start_leg(context: SimpleNamespace, *, start_score: int = 501) -> ChatSession:
    session = await _open_board(context)
    session.game.set_start_score(start_score)
    await lobby.setup_callback(_build_query_update(callback_data("setup", "start", "-", session)), context)
    assert session.game.phase.is_in_game
    return session


def test_callback_data_round_trip_keeps_session_id() -> None:
    session = STATE_MANAGER.create(CHAT_ID)
    data = callback_data("key", "7", "-", session)

    assert parse_callback_data(data) == ("key", "7", "-", session.session_id)
    assert parse_callback_data("menu:darts") is None


@pytest.mark.anyio
async def test_darts_command_posts_setup_board() -> None:
    context = _build_context()

    session = await _open_board(context)

    context.bot.send_message.assert_awaited_once()
    args, kwargs = context.bot.send_message.await_args
    assert args[0] == CHAT_ID
    assert "X01 setup" in args[1]
    assert kwargs["parse_mode"] == "HTML"
    assert session.board_message_id == 42


@pytest.mark.anyio
async def test_setup_buttons_edit_the_board() -> None:
    context = _build_context()
    session = await _open_board(context)

    await lobby.setup_callback(_build_query_update(callback_data("setup", "score", 301, session)), context)
    await lobby.setup_callback(_build_query_update(callback_data("setup", "rule", "double", session)), context)
    await lobby.setup_callback(_build_query_update(callback_data("setup", "add", "-", session)), context)

    assert session.game.start_score == 301
    assert session.game.out_rule is OutRule.DOUBLE
    assert len(session.game.players) == 3
    assert context.bot.edit_message_text.await_count == 3
    assert context.bot.edit_message_text.await_args.kwargs["message_id"] == 42


@pytest.mark.anyio
async def test_setup_buttons_are_ignored_once_playing() -> None:
    context = _build_context()
    session = await _start_leg(context)
    update = _build_query_update(callback_data("setup", "score", 301, session))

    await lobby.setup_callback(update, context)

    assert session.game.start_score == 501
    assert _last_answer(update).args == ("The game is already running.",)


@pytest.mark.anyio
async def test_stale_session_buttons_are_rejected() -> None:
    context = _build_context()
    update = _build_query_update("x01:key:6:-:missing")

    await gameplay.keypad_callback(update, context)

    assert _last_answer(update).args == ("This scoreboard is no longer active.",)
    assert _last_answer(update).kwargs == {"show_alert": True}


@pytest.mark.anyio
async def test_keypad_records_a_visit() -> None:
    context = _build_context()
    session = await _start_leg(context)

    update = await _press(session, context, "6", "0", "ok")

    assert session.game.players[0].remaining == 441
    assert session.game.current_player_index == 1
    assert _last_answer(update).args == ("60 scored, 441 left.",)
    board_text = context.bot.edit_message_text.await_args.args[0]
    assert "Score: <code>—</code>" in board_text


@pytest.mark.anyio
async def test_keypad_rejects_visits_above_180() -> None:
    context = _build_context()
    session = await _start_leg(context)

    update = await _press(session, context, "1", "9", "0")

    assert session.game.score_input == "19"
    assert _last_answer(update).args == ("A visit is at most 180.",)


@pytest.mark.anyio
async def test_keypad_enter_without_input_alerts() -> None:
    context = _build_context()
    session = await _start_leg(context)

    update = await _press(session, context, "ok")

    assert _last_answer(update).kwargs == {"show_alert": True}
    assert session.game.actions == ()


@pytest.mark.anyio
async def test_keypad_delete_clear_and_undo() -> None:
    context = _build_context()
    session = await _start_leg(context)

    await _press(session, context, "4", "5", "del")
    assert session.game.score_input == "4"
    await _press(session, context, "clr")
    assert session.game.score_input == ""

    update = await _press(session, context, "undo")
    assert _last_answer(update).args == ("Nothing to undo.",)

    await _press(session, context, "4", "5", "ok")
    update = await _press(session, context, "undo")
    assert _last_answer(update).args == ("Visit undone.",)
    assert session.game.players[0].remaining == 501
    assert session.game.current_player_index == 0


@pytest.mark.anyio
async def test_keypad_player_buttons_hand_over_the_turn() -> None:
    context = _build_context()
    session = await _start_leg(context)
    keyboard = context.bot.edit_message_text.await_args.kwargs["reply_markup"]
    assert [button.text for button in keyboard.inline_keyboard[0]] == ["▶️ Player 1", "Player 2"]
    assert keyboard.inline_keyboard[0][1].callback_data == callback_data("key", "sel", 1, session)

    await _press(session, context, "7")
    update = _build_query_update(callback_data("key", "sel", 1, session))
    await gameplay.keypad_callback(update, context)

    assert session.game.current_player_index == 1
    assert session.game.score_input == ""
    assert _last_answer(update).args == ("Player 2 to throw.",)
    keyboard = context.bot.edit_message_text.await_args.kwargs["reply_markup"]
    assert [button.text for button in keyboard.inline_keyboard[0]] == ["Player 1", "▶️ Player 2"]


@pytest.mark.anyio
async def test_keypad_player_button_rejects_unknown_player() -> None:
    context = _build_context()
    session = await _start_leg(context)
    update = _build_query_update(callback_data("key", "sel", 5, session))

    await gameplay.keypad_callback(update, context)

    assert session.game.current_player_index == 0
    assert _last_answer(update).args == ("That player cannot throw right now.",)


@pytest.mark.anyio
async def test_typed_score_is_recorded_and_bust_is_reported() -> None:
    context = _build_context()
    session = await _start_leg(context, start_score=40)

    await gameplay.handle_score_message(_build_update("20"), context)
    assert session.game.players[0].remaining == 20

    bust = _build_update(" 45 ")
    await gameplay.handle_score_message(bust, context)

    assert session.game.players[1].remaining == 40
    bust.message.reply_text.assert_awaited_once_with("💥 Bust! 45 from 40 does not count.")


@pytest.mark.anyio
async def test_typed_score_out_of_range_is_rejected() -> None:
    context = _build_context()
    session = await _start_leg(context)
    update = _build_update("200")

    await gameplay.handle_score_message(update, context)

    update.message.reply_text.assert_awaited_once_with("A visit is a number from 0 to 180.")
    assert session.game.actions == ()
    assert session.game.score_input == ""


@pytest.mark.anyio
async def test_plain_chat_text_is_ignored() -> None:
    context = _build_context()
    session = await _start_leg(context)
    update = _build_update("nice darts!")

    await gameplay.handle_score_message(update, context)

    update.message.reply_text.assert_not_awaited()
    assert session.game.actions == ()


@pytest.mark.anyio
async def test_winning_visit_announces_and_new_game_rotates_starter() -> None:
    context = _build_context()
    session = await _start_leg(context, start_score=40)

    await gameplay.handle_score_message(_build_update("40"), context)

    assert session.game.phase.is_finished
    announcements = [call.args[1] for call in context.bot.send_message.await_args_list[1:]]
    assert "<b>Player 1</b> wins the leg with a 40 checkout!" in announcements[0]
    assert "Leg stats" in announcements[1]
    keyboard = context.bot.edit_message_text.await_args.kwargs["reply_markup"]
    assert keyboard.inline_keyboard[0][0].text == "🔁 New game"

    update = _build_query_update(callback_data("end", "new", "-", session))
    await gameplay.finish_callback(update, context)

    assert session.game.phase.is_in_game
    assert session.game.current_player_index == 1
    assert _last_answer(update).args == ("Player 2 throws first.",)


@pytest.mark.anyio
async def test_finish_setup_button_returns_to_setup() -> None:
    context = _build_context()
    session = await _start_leg(context, start_score=40)
    await gameplay.handle_score_message(_build_update("40"), context)

    await gameplay.finish_callback(_build_query_update(callback_data("end", "setup", "-", session)), context)

    assert session.game.phase.is_setup
    assert all(player.remaining == 40 for player in session.game.players)


@pytest.mark.anyio
async def test_undo_command() -> None:
    context = _build_context()
    empty = _build_update("/undo")
    await gameplay.undo_cmd(empty, context)
    empty.message.reply_text.assert_awaited_once_with("Nothing to undo.")

    session = await _start_leg(context)
    await gameplay.handle_score_message(_build_update("100"), context)
    update = _build_update("/undo")
    await gameplay.undo_cmd(update, context)

    update.message.reply_text.assert_not_awaited()
    assert session.game.players[0].remaining == 501


@pytest.mark.anyio
async def test_roster_commands_during_setup() -> None:
    bot = _build_bot()
    session = await _open_board(_build_context(bot))

    await lobby.add_player_cmd(_build_update(), _build_context(bot, ["Dan"]))
    await lobby.rename_cmd(_build_update(), _build_context(bot, ["1", "Alice", "B."]))
    await lobby.move_player_cmd(_build_update(), _build_context(bot, ["3", "1"]))
    await lobby.remove_player_cmd(_build_update(), _build_context(bot, ["3"]))
    await lobby.out_rule_cmd(_build_update(), _build_context(bot, ["MASTER"]))
    await lobby.start_score_cmd(_build_update(), _build_context(bot, ["701"]))

    assert [player.name for player in session.game.players] == ["Dan", "Alice B."]
    assert session.game.out_rule is OutRule.MASTER
    assert session.game.start_score == 701


@pytest.mark.anyio
async def test_roster_commands_report_misuse() -> None:
    bot = _build_bot()
    await _start_leg(_build_context(bot))

    add = _build_update()
    await lobby.add_player_cmd(add, _build_context(bot, ["Eve"]))
    add.message.reply_text.assert_awaited_once_with(
        "Players can only be changed during setup. Use /setup first.", parse_mode="HTML"
    )

    remove = _build_update()
    await lobby.remove_player_cmd(remove, _build_context(bot, ["5"]))
    remove.message.reply_text.assert_awaited_once_with(
        "That player cannot be removed right now.", parse_mode="HTML"
    )

    score = _build_update()
    await lobby.start_score_cmd(score, _build_context(bot, ["abc"]))
    assert "Usage" in score.message.reply_text.await_args.args[0]


@pytest.mark.anyio
async def test_newgame_requires_named_players() -> None:
    context = _build_context()
    session = await _open_board(context)
    session.game.set_player_name(0, " ")
    update = _build_update("/newgame")

    await lobby.newgame(update, context)

    assert session.game.phase.is_setup
    update.message.reply_text.assert_awaited_once()


@pytest.mark.anyio
async def test_score_command_sends_picture_and_history() -> None:
    context = _build_context()
    missing = _build_update("/score")
    await lobby.score_cmd(missing, context)
    missing.message.reply_text.assert_awaited_once_with("No scoreboard here yet. Use /darts to open one.")

    await _start_leg(context)
    await gameplay.handle_score_message(_build_update("60"), context)
    update = _build_update("/score")
    await lobby.score_cmd(update, context)

    context.bot.send_photo.assert_awaited_once()
    kwargs = context.bot.send_photo.await_args.kwargs
    assert "Standings" in kwargs["caption"]
    history = update.message.reply_text.await_args.args[0]
    assert "• 60 → 441" in history


@pytest.mark.anyio
async def test_quit_command_drops_the_session() -> None:
    context = _build_context()
    await _open_board(context)
    update = _build_update("/quit")

    await lobby.quit_cmd(update, context)

    update.message.reply_text.assert_awaited_once_with("Scoreboard closed.")
    assert STATE_MANAGER.get_by_chat(CHAT_ID) is None

    again = _build_update("/quit")
    await lobby.quit_cmd(again, context)
    again.message.reply_text.assert_awaited_once_with("No scoreboard is open.")


@pytest.mark.anyio
async def test_active_game_filter_tracks_phase() -> None:
    context = _build_context()
    message = SimpleNamespace(chat_id=CHAT_ID, message_thread_id=None)
    assert gameplay.ACTIVE_GAME_FILTER.filter(message) is False

    await _open_board(context)
    assert gameplay.ACTIVE_GAME_FILTER.filter(message) is False

    await lobby.newgame(_build_update("/newgame"), context)
    assert gameplay.ACTIVE_GAME_FILTER.filter(message) is True


@pytest.mark.anyio
async def test_refresh_board_ignores_unchanged_message() -> None:
    bot = _build_bot()
    bot.edit_message_text.side_effect = BadRequest("Message is not modified")
    session = STATE_MANAGER.create(CHAT_ID)
    session.board_message_id = 7

    await gameplay.refresh_board(session, _build_context(bot))

    bot.send_message.assert_not_awaited()
    assert session.board_message_id == 7


@pytest.mark.anyio
async def test_refresh_board_reposts_missing_message() -> None:
    bot = _build_bot()
    bot.edit_message_text.side_effect = BadRequest("Message to edit not found")
    session = STATE_MANAGER.create(CHAT_ID)
    session.board_message_id = 7

    await gameplay.refresh_board(session, _build_context(bot))

    bot.send_message.assert_awaited_once()
    assert session.board_message_id == 42

import logging
import os
import socket
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from urllib.parse import urlparse

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.error import TelegramError
from telegram.ext import Application, CallbackQueryHandler, CommandHandler, ContextTypes

import x01_game
from shared.logging_utils import configure_logging

TOKEN = os.environ.get("TELEGRAM_BOT_TOKEN")
PUBLIC_URL = os.environ.get("PUBLIC_URL")
WEBHOOK_SECRET = os.environ.get("WEBHOOK_SECRET", "")
WEBHOOK_PATH = os.environ.get("WEBHOOK_PATH", "/webhook")
ALLOWED_UPDATES = ["message", "callback_query"]

configure_logging(extra_values=[TOKEN, WEBHOOK_SECRET])
logger = logging.getLogger(__name__)
APPLICATION: Optional[Application] = None


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    keyboard = InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton("🎯 Scoreboard", callback_data="menu:darts"),
                InlineKeyboardButton("❓ Rules", callback_data="menu:help"),
            ]
        ]
    )
    if update.message:
        await update.message.reply_text("Ready to keep score. What next?", reply_markup=keyboard)


async def choose_menu(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()
    if query.data == "menu:darts":
        await x01_game.start_cmd(update, context)
    elif query.data == "menu:help":
        await x01_game.help_cmd(update, context)
    try:
        await query.delete_message()
    except TelegramError:
        pass


def _webhook_url() -> str:
    if not PUBLIC_URL:
        raise HTTPException(status_code=400, detail="PUBLIC_URL is not configured")
    return f"{PUBLIC_URL.rstrip('/')}{WEBHOOK_PATH}"


def _can_resolve_webhook_host(webhook_url: str) -> bool:
    host = urlparse(webhook_url).hostname
    if not host:
        logger.error("Webhook URL %s does not contain a hostname", webhook_url)
        return False
    try:
        socket.getaddrinfo(host, None)
    except socket.gaierror as exc:
        logger.warning("Cannot resolve webhook host %s (%s)", host, exc)
        return False
    return True


async def on_startup() -> None:
    global APPLICATION
    APPLICATION = Application.builder().token(TOKEN).build()
    APPLICATION.add_handler(CommandHandler("start", start))
    APPLICATION.add_handler(CallbackQueryHandler(choose_menu, pattern="^menu:"))
    x01_game.register_handlers(APPLICATION)
    await APPLICATION.initialize()
    await APPLICATION.start()
    if not PUBLIC_URL:
        logger.warning("PUBLIC_URL is not set; the Telegram webhook is left untouched")
        return
    webhook_url = _webhook_url()
    if not _can_resolve_webhook_host(webhook_url):
        logger.warning("Telegram webhook will not be configured without a resolvable host")
        return
    try:
        info = await APPLICATION.bot.get_webhook_info()
        if info.url == webhook_url:
            return
    except TelegramError as exc:
        logger.warning("Failed to fetch current webhook info: %s", exc)
    try:
        await APPLICATION.bot.set_webhook(
            url=webhook_url,
            secret_token=WEBHOOK_SECRET,
            allowed_updates=ALLOWED_UPDATES,
        )
    except TelegramError as exc:
        logger.error("Failed to set webhook to %s: %s", webhook_url, exc)


async def on_shutdown() -> None:
    if APPLICATION is None:
        return
    await APPLICATION.stop()
    await APPLICATION.shutdown()


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    await on_startup()
    try:
        yield
    finally:
        await on_shutdown()


app = FastAPI(lifespan=lifespan)


@app.post(WEBHOOK_PATH)
async def telegram_webhook(request: Request) -> JSONResponse:
    if request.headers.get("X-Telegram-Bot-Api-Secret-Token") != WEBHOOK_SECRET:
        raise HTTPException(status_code=403, detail="Invalid secret")
    if APPLICATION is None:
        raise HTTPException(status_code=503, detail="Bot is not running")
    update = Update.de_json(await request.json(), APPLICATION.bot)
    await APPLICATION.process_update(update)
    return JSONResponse({"ok": True})


@app.get("/set_webhook")
async def set_webhook() -> JSONResponse:
    webhook_url = _webhook_url()
    if not _can_resolve_webhook_host(webhook_url):
        raise HTTPException(status_code=503, detail="Webhook host cannot be resolved")
    try:
        await APPLICATION.bot.set_webhook(
            url=webhook_url,
            secret_token=WEBHOOK_SECRET,
            allowed_updates=ALLOWED_UPDATES,
        )
    except TelegramError as exc:
        raise HTTPException(status_code=502, detail=f"Failed to set webhook: {exc}") from exc
    return JSONResponse({"url": webhook_url})


@app.get("/")
async def root() -> JSONResponse:
    return JSONResponse({"message": "X01 scorekeeper bot. See /healthz for status."})


@app.get("/healthz")
async def healthz_get():
    return {"status": "ok", "sessions": len(x01_game.STATE_MANAGER)}


@app.head("/healthz", include_in_schema=False)
async def healthz_head():
    return Response(status_code=200)

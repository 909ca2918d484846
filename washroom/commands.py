"""
Command Handlers — All /slash commands and the command table
============================================================
"""

import logging
from dataclasses import dataclass
from functools import wraps
from types import MappingProxyType
from typing import Optional

from telegram import Update
from telegram.constants import ParseMode
from telegram.error import TelegramError
from telegram.ext import CommandHandler, ContextTypes

from washroom.choices import RollOutcome, pick_dinner, roll_outcome
from washroom.config import HELP, TITLE_USAGE, UNTITLE_USAGE, Config
from washroom.errors import MalformedCommand, ResolutionError, TransportError
from washroom.helpers import reply
from washroom.mentions import extract_mention, from_telegram
from washroom.session import SecondarySession
from washroom.titles import CLEAR_RIGHTS, TITLE_RIGHTS, AdminRights, TitleWorkflow, format_outcome

logger = logging.getLogger(__name__)

CONTEXT_KEY = "washroom"


@dataclass
class BotContext:
    """Process-wide state handed to every handler via application.bot_data."""

    config: Config
    session: SecondarySession


def get_bot_context(context: ContextTypes.DEFAULT_TYPE) -> BotContext:
    return context.bot_data[CONTEXT_KEY]


def guarded(usage: Optional[str] = None):
    """
    Decorator that turns any failure inside a command into a reply.

    Nothing raised by one command reaches the dispatcher or other updates.
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE):
            message = update.effective_message
            if message is None:
                return
            try:
                return await func(update, context)
            except MalformedCommand as e:
                logger.info(f"/{func.__name__[4:]} malformed: {e}")
                text = usage or str(e)
            except TransportError as e:
                logger.error(f"/{func.__name__[4:]} lookup failed: {e}")
                text = "查詢使用者時連線失敗，請稍後再試"
            except ResolutionError as e:
                logger.info(f"/{func.__name__[4:]} unresolved: {e}")
                text = "找不到該使用者"
            except Exception as e:
                logger.exception(f"/{func.__name__[4:]} failed")
                text = f"指令執行失敗: {e}"
            try:
                await reply(message, text)
            except TelegramError as e:
                logger.error(f"Could not deliver error reply: {e}")
        return wrapper
    return decorator


@guarded()
async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await reply(update.effective_message, HELP, parse_mode=ParseMode.MARKDOWN_V2)


@guarded()
async def cmd_roll(update: Update, context: ContextTypes.DEFAULT_TYPE):
    message = update.effective_message
    if roll_outcome() is RollOutcome.NOVELTY:
        animation = get_bot_context(context).config.media.roll_animation
        with open(animation, "rb") as fh:
            await message.reply_animation(fh, do_quote=True, disable_notification=True)
    else:
        await context.bot.send_dice(message.chat_id)


async def _change_title(update: Update, context: ContextTypes.DEFAULT_TYPE,
                        rights: AdminRights, require_title: bool):
    message = update.effective_message
    session = get_bot_context(context).session

    result = await extract_mention(
        message.text or "",
        from_telegram(message.entities),
        session.resolve_username,
        require_title=require_title,
    )
    title = result.title if require_title else ""

    workflow = TitleWorkflow(context.bot, message.chat_id, rights)
    outcome = await workflow.run(result.target, title)
    await reply(message, format_outcome(outcome))


@guarded(TITLE_USAGE)
async def cmd_title(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await _change_title(update, context, TITLE_RIGHTS, require_title=True)


@guarded(UNTITLE_USAGE)
async def cmd_untitle(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await _change_title(update, context, CLEAR_RIGHTS, require_title=False)


@guarded()
async def cmd_dinner(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await reply(update.effective_message, pick_dinner(context.args or []))


COMMANDS = MappingProxyType({
    "start": cmd_help,
    "help": cmd_help,
    "roll": cmd_roll,
    "title": cmd_title,
    "untitle": cmd_untitle,
    "dinner": cmd_dinner,
})


def register_commands(app):
    """Add one CommandHandler per entry in COMMANDS."""
    for name, handler in COMMANDS.items():
        app.add_handler(CommandHandler(name, handler))

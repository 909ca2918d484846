#!/usr/bin/env python3
"""
Washroom Telegram Bot
=====================
Bot account for replies and admin actions, plus a secondary user-account
session (Telethon) for @username lookups the Bot API can't do.
"""

import sys
import logging

from telegram.ext import Application

from washroom.commands import CONTEXT_KEY, BotContext, register_commands
from washroom.config import get_config
from washroom.errors import AuthError
from washroom.session import SecondarySession

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


async def on_startup(app: Application):
    """Log in the secondary account before polling starts."""
    config = get_config()
    session = await SecondarySession.connect(config)
    app.bot_data[CONTEXT_KEY] = BotContext(config=config, session=session)
    if session.sign_out_on_close:
        logger.warning("Secondary session is not persisted; it will be signed out on shutdown")


async def on_shutdown(app: Application):
    ctx = app.bot_data.get(CONTEXT_KEY)
    if ctx is not None:
        await ctx.session.close()
        logger.info("Secondary session closed")


def build_application(token: str) -> Application:
    app = (
        Application.builder()
        .token(token)
        .concurrent_updates(True)
        .post_init(on_startup)
        .post_shutdown(on_shutdown)
        .build()
    )
    register_commands(app)
    return app


# ============================================================
# MAIN
# ============================================================

def main():
    try:
        config = get_config()
    except ValueError as e:
        logger.critical(f"Invalid configuration: {e}")
        sys.exit(1)

    logging.getLogger().setLevel(config.log_level)
    logger.info("Starting washroom bot...")

    app = build_application(config.bot.token)

    try:
        app.run_polling(drop_pending_updates=True)
    except AuthError as e:
        logger.critical(f"Secondary account login failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

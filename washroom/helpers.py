"""
Reply Helpers — every bot reply is linked to the command and sent silently
==========================================================================
"""

from typing import Optional

from telegram import Message


async def reply(message: Message, text: str, parse_mode: Optional[str] = None):
    """Reply to a command message without a notification."""
    await message.reply_text(
        text,
        do_quote=True,
        disable_notification=True,
        parse_mode=parse_mode,
    )

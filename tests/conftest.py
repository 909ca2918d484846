"""Shared pytest fixtures for fake Telegram updates and contexts."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from washroom.commands import CONTEXT_KEY, BotContext


def make_message(text="", entities=(), chat_id=-1001, message_id=7):
    message = MagicMock()
    message.text = text
    message.entities = tuple(entities)
    message.chat_id = chat_id
    message.message_id = message_id
    message.reply_text = AsyncMock()
    message.reply_animation = AsyncMock()
    return message


@pytest.fixture
def fake_session():
    session = MagicMock()
    session.resolve_username = AsyncMock(return_value=None)
    return session


@pytest.fixture
def make_update():
    def _make(text="", entities=()):
        return SimpleNamespace(effective_message=make_message(text, entities))
    return _make


@pytest.fixture
def make_context(fake_session):
    def _make(args=None, config=None):
        config = config or SimpleNamespace(media=SimpleNamespace(roll_animation="missing.gif"))
        return SimpleNamespace(
            bot=AsyncMock(),
            args=args,
            bot_data={CONTEXT_KEY: BotContext(config=config, session=fake_session)},
        )
    return _make


def sent_text(message) -> str:
    """Text of the last reply_text call."""
    return message.reply_text.await_args.args[0]

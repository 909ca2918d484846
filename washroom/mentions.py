"""
Mention Extraction — @user + title parsing from message entities
================================================================
Telegram reports entity offsets in UTF-16 code units. Python strings are
indexed by code point, so every slice goes through a per-message table.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence

from telegram import MessageEntity

from washroom.errors import MalformedCommand, MissingTitle, NoMentionFound, ResolutionError

logger = logging.getLogger(__name__)


class MentionKind(Enum):
    BARE_MENTION = "mention"  # @username, no id attached
    RESOLVED_MENTION = "text_mention"  # Telegram already attached the user


@dataclass
class MentionEntity:
    kind: MentionKind
    offset: int  # UTF-16 code units
    length: int  # UTF-16 code units
    user_id: Optional[int] = None
    display_name: Optional[str] = None


@dataclass
class ResolvedTarget:
    user_id: int
    display_name: str


@dataclass
class MentionResult:
    target: ResolvedTarget
    title: str


Resolver = Callable[[str], Awaitable[Optional[int]]]


class Utf16Text:
    """
    Message text addressable by UTF-16 code-unit offsets.

    _index[u] is the Python index of the code point containing code unit u,
    with one extra slot for the end of the text.
    """

    def __init__(self, text: str):
        self.text = text
        index: List[int] = []
        for i, ch in enumerate(text):
            index.append(i)
            if ord(ch) > 0xFFFF:
                index.append(i)  # surrogate pair takes two code units
        index.append(len(text))
        self._index = index

    def __len__(self):
        return len(self._index) - 1

    def to_native(self, unit: int) -> int:
        if not 0 <= unit <= len(self):
            raise MalformedCommand(f"Offset {unit} outside text of {len(self)} UTF-16 units")
        return self._index[unit]

    def slice(self, start: int, end: Optional[int] = None) -> str:
        stop = len(self) if end is None else end
        if stop < start:
            raise MalformedCommand(f"Span [{start}, {stop}) is reversed")
        return self.text[self.to_native(start):self.to_native(stop)]


def from_telegram(entities: Sequence[MessageEntity]) -> List[MentionEntity]:
    """Keep only mention-type entities, in message order."""
    result = []
    for entity in entities or ():
        if entity.type == MessageEntity.MENTION:
            result.append(MentionEntity(MentionKind.BARE_MENTION, entity.offset, entity.length))
        elif entity.type == MessageEntity.TEXT_MENTION and entity.user is not None:
            result.append(MentionEntity(
                MentionKind.RESOLVED_MENTION, entity.offset, entity.length,
                user_id=entity.user.id, display_name=entity.user.full_name,
            ))
    return result


async def extract_mention(
    text: str,
    entities: Sequence[MentionEntity],
    resolver: Resolver,
    require_title: bool = True,
) -> MentionResult:
    """
    Pick the first mention in the message and the text that follows it.

    Raises:
        NoMentionFound: no mention entity at all
        ResolutionError: @username did not resolve (TransportError if the lookup failed)
        MissingTitle: nothing after the mention and require_title is set
        MalformedCommand: entity span outside the text
    """
    utext = Utf16Text(text)
    entity = next(
        (e for e in entities if e.kind in (MentionKind.BARE_MENTION, MentionKind.RESOLVED_MENTION)),
        None,
    )
    if entity is None:
        raise NoMentionFound("No @mention in message")

    end = entity.offset + entity.length
    span = utext.slice(entity.offset, end)

    if entity.kind is MentionKind.BARE_MENTION:
        username = utext.slice(entity.offset + 1, end)
        if not username:
            raise MalformedCommand("Empty @mention")
        user_id = await resolver(username)
        if user_id is None:
            raise ResolutionError(f"@{username} does not resolve to a user")
        target = ResolvedTarget(user_id=user_id, display_name=username)
    else:
        target = ResolvedTarget(
            user_id=entity.user_id,
            display_name=entity.display_name or span.strip() or str(entity.user_id),
        )

    title = utext.slice(end).strip()
    if require_title and not title:
        raise MissingTitle(f"No title after mention of {target.display_name}")

    logger.debug(f"Mention resolved: {target.display_name} ({target.user_id}), title={title!r}")
    return MentionResult(target=target, title=title)

"""
Title Workflow — Promote a member, then set their admin custom title
====================================================================
IDLE -> PROMOTING -> TITLING -> DONE
Any failed step -> FAILED. A promotion that succeeded is never rolled back.
"""

import logging
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional

from telegram.error import TelegramError

from washroom.errors import RemoteRejection
from washroom.mentions import ResolvedTarget

logger = logging.getLogger(__name__)


class TitleState(Enum):
    IDLE = "idle"
    PROMOTING = "promoting"
    TITLING = "titling"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class AdminRights:
    """Keyword arguments for promote_chat_member. Unlisted rights stay off."""

    can_change_info: bool = False
    can_delete_messages: bool = False
    can_invite_users: bool = False
    can_restrict_members: bool = False
    can_pin_messages: bool = False
    can_promote_members: bool = False


# Smallest sets that keep the member an admin so a title can be attached
TITLE_RIGHTS = AdminRights(can_invite_users=True, can_pin_messages=True)
CLEAR_RIGHTS = AdminRights(can_invite_users=True)


@dataclass
class TitleOutcome:
    state: TitleState
    target: ResolvedTarget
    title: str
    error: Optional[RemoteRejection] = None

    @property
    def ok(self) -> bool:
        return self.state is TitleState.DONE


class TitleWorkflow:
    """
    One title change against one chat. Not reusable.

    Args:
        bot: telegram.Bot (or anything with the same two coroutines)
        chat_id: group where the member is promoted
        rights: AdminRights granted in the promotion step
    """

    def __init__(self, bot, chat_id: int, rights: AdminRights = TITLE_RIGHTS):
        self.bot = bot
        self.chat_id = chat_id
        self.rights = rights
        self.state = TitleState.IDLE

    async def run(self, target: ResolvedTarget, title: str) -> TitleOutcome:
        """An empty title clears the member's current title."""
        self.state = TitleState.PROMOTING
        try:
            await self.bot.promote_chat_member(self.chat_id, target.user_id, **asdict(self.rights))
        except TelegramError as e:
            return self._failed(target, title, e)

        self.state = TitleState.TITLING
        try:
            await self.bot.set_chat_administrator_custom_title(self.chat_id, target.user_id, title)
        except TelegramError as e:
            return self._failed(target, title, e)

        self.state = TitleState.DONE
        logger.info(f"Title for {target.display_name} ({target.user_id}) in {self.chat_id} set to {title!r}")
        return TitleOutcome(self.state, target, title)

    def _failed(self, target: ResolvedTarget, title: str, error: TelegramError) -> TitleOutcome:
        step = self.state.value
        self.state = TitleState.FAILED
        logger.warning(f"Title change for {target.display_name} failed while {step}: {error.message}")
        return TitleOutcome(self.state, target, title, RemoteRejection(error.message))


def format_outcome(outcome: TitleOutcome) -> str:
    name = outcome.target.display_name
    if not outcome.ok:
        reason = f"：{outcome.error.message}" if outcome.error else ""
        return f"{name} 的標籤變更失敗{reason}"
    if not outcome.title:
        return f"{name} 的標籤已清除"
    return f"{name} 的標籤已變更為{outcome.title}"

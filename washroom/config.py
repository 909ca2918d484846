"""
Bot Configuration, Help Text, Usage Hints
=========================================
Loads settings from environment variables (and .env for local runs).
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

# Load .env file if exists (for local development)
load_dotenv()

logger = logging.getLogger(__name__)

HELP = r"""
\#歡迎光臨洗手室
/help \- 檢視說明
/roll \- 擲骰子
/title *@user* *string*  \- 變更使用者標籤
/untitle *@user* \- 清除使用者標籤
/dinner *options\.\.\.* \- 晚餐吃什麼
    e\.g\. `/dinner 八方雲集 Sukiya 臺鐵便當 元氣`
"""

TITLE_USAGE = "請輸入選項 e.g. /title @user string"
UNTITLE_USAGE = "請輸入選項 e.g. /untitle @user"
DINNER_USAGE = "請輸入選項 e.g. /dinner 八方雲集 Sukiya 臺鐵便當 元氣"


@dataclass
class BotConfig:
    """Bot API credentials."""

    token: str


@dataclass
class SecondaryAccountConfig:
    """MTProto app credentials for the user account."""

    api_id: int
    api_hash: str


@dataclass
class SessionConfig:
    """Where and how the user-account session is stored."""

    path: str = "echo.session"
    key: Optional[str] = None  # Fernet key; None = plain text file


@dataclass
class MediaConfig:
    """Files sent by cosmetic commands."""

    roll_animation: str = "assets/rickroll-roll.gif"


class Config:
    """
    Main configuration class.
    Loads all settings and validates them.
    """

    def __init__(self):
        """Initialize configuration from environment."""
        self.log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
        self._load_bot_config()
        self._load_account_config()
        self._load_session_config()
        self._load_media_config()
        self._validate()

    def _load_bot_config(self):
        token = os.environ.get("BOT_TOKEN") or os.environ.get("TELOXIDE_TOKEN", "")
        self.bot = BotConfig(token=token.strip())

    def _load_account_config(self):
        """Load secondary account credentials."""
        raw_id = os.environ.get("TG_ID", "").strip()
        try:
            api_id = int(raw_id)
        except ValueError:
            raise ValueError(f"TG_ID must be an integer, got {raw_id!r}")

        self.account = SecondaryAccountConfig(
            api_id=api_id,
            api_hash=os.environ.get("TG_HASH", "").strip(),
        )

    def _load_session_config(self):
        self.session = SessionConfig(
            path=os.environ.get("SESSION_FILE", "echo.session"),
            key=os.environ.get("SESSION_KEY") or None,
        )

    def _load_media_config(self):
        self.media = MediaConfig(
            roll_animation=os.environ.get("ROLL_ANIMATION", "assets/rickroll-roll.gif"),
        )

    def _validate(self):
        """Validate configuration values."""
        if not self.bot.token:
            raise ValueError("BOT_TOKEN must be set")

        if self.account.api_id <= 0:
            raise ValueError("TG_ID must be a positive integer")

        if not self.account.api_hash:
            raise ValueError("TG_HASH must be set")

        if not self.session.path:
            raise ValueError("SESSION_FILE must not be empty")

        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"LOG_LEVEL {self.log_level!r} is not a logging level")

        logger.info("Configuration validated successfully")
        logger.info(f"Session file: {self.session.path} (encrypted: {self.session.key is not None})")

    def __repr__(self):
        return (
            f"Config(\n"
            f"  api_id={self.account.api_id},\n"
            f"  session_file={self.session.path},\n"
            f"  roll_animation={self.media.roll_animation},\n"
            f"  log_level={self.log_level}\n"
            f")"
        )


# Global config instance
_config = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config

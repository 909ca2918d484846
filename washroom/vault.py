"""
Session Vault - Secondary Account Session Storage
=================================================
Stores the Telethon StringSession in a single file.
When SESSION_KEY is set the file is encrypted with Fernet (AES-128-CBC),
so the login material is only ever decrypted in memory.
"""

import os
import logging
from typing import Optional
from cryptography.fernet import Fernet, InvalidToken

from washroom.errors import AuthError, PersistenceError

logger = logging.getLogger(__name__)


class SessionVault:
    """
    Loads and saves the opaque session string for the user account.

    - Missing file: treated as a fresh, empty session
    - Unreadable or undecryptable file: AuthError (fatal at startup)
    - Failed write: PersistenceError (caller decides what to do)
    """

    def __init__(self, path: str, key: Optional[str] = None):
        self.path = path
        self._fernet = self._initialize_encryption(key) if key else None

    def _initialize_encryption(self, key: str) -> Fernet:
        try:
            return Fernet(key.encode() if isinstance(key, str) else key)
        except Exception as e:
            logger.error(f"Invalid SESSION_KEY format: {e}")
            raise AuthError("SESSION_KEY must be a valid Fernet key")

    def load(self) -> str:
        """
        Read the stored session string.

        Returns:
            The session string, or "" when no session file exists yet
        """
        if not os.path.exists(self.path):
            logger.info(f"No session file at {self.path}, starting fresh")
            return ""

        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                raw = fh.read().strip()
        except (OSError, UnicodeDecodeError) as e:
            raise AuthError(f"Cannot read session file {self.path}: {e}")

        if not raw:
            return ""

        if self._fernet is None:
            return raw

        try:
            return self._fernet.decrypt(raw.encode()).decode()
        except InvalidToken:
            raise AuthError(f"Cannot decrypt session file {self.path} - wrong SESSION_KEY or corrupted data")

    def save(self, session_string: str):
        """Write the session string, replacing any previous file."""
        if not session_string:
            raise PersistenceError("Refusing to save an empty session")

        payload = session_string
        if self._fernet is not None:
            payload = self._fernet.encrypt(session_string.encode()).decode()

        tmp_path = f"{self.path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceError(f"Cannot write session file {self.path}: {e}")
        logger.info(f"Session saved to {self.path}")


def generate_session_key() -> str:
    """
    Generate a new Fernet key for SESSION_KEY.

    Run once: python -c "from washroom.vault import generate_session_key; print(generate_session_key())"
    """
    return Fernet.generate_key().decode()

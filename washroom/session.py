"""
Secondary Session — User-account connection for lookups the Bot API can't do
============================================================================
Owns the Telethon client: loading the saved session, interactive login
(phone -> code -> optional 2FA password), persisting the session, and
serialized username resolution.
"""

import asyncio
import getpass
import logging
import struct
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional

from telethon import TelegramClient, errors, functions, types
from telethon.sessions import StringSession

from washroom.config import Config
from washroom.errors import AuthError, PersistenceError, ResolutionError, TransportError
from washroom.vault import SessionVault

logger = logging.getLogger(__name__)

# Failures that mean the connection itself is gone, not that the lookup was refused
_TRANSPORT_ERRORS = (ConnectionError, OSError, asyncio.TimeoutError)

# One attempt per request, flood waits raised instead of slept through
CLIENT_OPTIONS = {
    "request_retries": 1,
    "flood_sleep_threshold": 0,
    "raise_last_call_error": True,
}


def new_client(session, api_id: int, api_hash: str) -> TelegramClient:
    return TelegramClient(session, api_id, api_hash, **CLIENT_OPTIONS)


class LoginState(Enum):
    AWAITING_PHONE = "awaiting_phone"
    AWAITING_CODE = "awaiting_code"
    AWAITING_PASSWORD = "awaiting_password"
    AUTHORIZED = "authorized"
    FAILED = "failed"


class PromptProvider(ABC):
    """Synchronous source of login answers. Called off the event loop."""

    @abstractmethod
    def phone(self) -> str:
        ...

    @abstractmethod
    def code(self) -> str:
        ...

    @abstractmethod
    def password(self, hint: str) -> str:
        ...


class ConsolePrompt(PromptProvider):
    """Reads login answers from the terminal."""

    def phone(self) -> str:
        return input("Enter your phone number (international format): ")

    def code(self) -> str:
        return input("Enter the code you received: ")

    def password(self, hint: str) -> str:
        return getpass.getpass(f"Enter the password (hint {hint}): ")


class LoginFlow:
    """
    Step-up login state machine.

    AWAITING_PHONE -> AWAITING_CODE -> (AWAITING_PASSWORD) -> AUTHORIZED
    Any rejected submission moves to FAILED and raises AuthError.
    """

    def __init__(self, client, prompt: PromptProvider):
        self.client = client
        self.prompt = prompt
        self.state = LoginState.AWAITING_PHONE
        self._phone = None
        self._phone_code_hash = None

    async def _ask(self, func, *args) -> str:
        loop = asyncio.get_running_loop()
        answer = await loop.run_in_executor(None, func, *args)
        return (answer or "").strip()

    def _fail(self, step: str, error: Exception) -> AuthError:
        self.state = LoginState.FAILED
        logger.error(f"Login failed while {step}: {error}")
        return AuthError(f"Login failed while {step}: {error}")

    async def run(self) -> LoginState:
        while self.state not in (LoginState.AUTHORIZED, LoginState.FAILED):
            if self.state is LoginState.AWAITING_PHONE:
                await self._submit_phone()
            elif self.state is LoginState.AWAITING_CODE:
                await self._submit_code()
            elif self.state is LoginState.AWAITING_PASSWORD:
                await self._submit_password()
        return self.state

    async def _submit_phone(self):
        self._phone = await self._ask(self.prompt.phone)
        try:
            sent = await self.client.send_code_request(self._phone)
        except (errors.RPCError,) + _TRANSPORT_ERRORS as e:
            raise self._fail("requesting a login code", e)
        self._phone_code_hash = sent.phone_code_hash
        self.state = LoginState.AWAITING_CODE

    async def _submit_code(self):
        code = await self._ask(self.prompt.code)
        # The login token is good for exactly one submission
        phone_code_hash, self._phone_code_hash = self._phone_code_hash, None
        try:
            await self.client.sign_in(phone=self._phone, code=code, phone_code_hash=phone_code_hash)
        except errors.SessionPasswordNeededError:
            self.state = LoginState.AWAITING_PASSWORD
            return
        except (errors.RPCError,) + _TRANSPORT_ERRORS as e:
            raise self._fail("submitting the login code", e)
        self.state = LoginState.AUTHORIZED

    async def _submit_password(self):
        try:
            pwd_info = await self.client(functions.account.GetPasswordRequest())
        except (errors.RPCError,) + _TRANSPORT_ERRORS as e:
            raise self._fail("fetching the password hint", e)

        password = await self._ask(self.prompt.password, pwd_info.hint or "None")
        try:
            await self.client.sign_in(password=password)
        except (errors.RPCError,) + _TRANSPORT_ERRORS as e:
            raise self._fail("checking the password", e)
        self.state = LoginState.AUTHORIZED


class SecondarySession:
    """
    Process-wide handle on the authenticated user account.

    Created once at startup and shared by every handler through BotContext.
    The underlying MTProto connection is not safe under arbitrary
    interleaving, so every lookup goes through a single asyncio.Lock.
    """

    def __init__(self, client, vault: SessionVault):
        self.client = client
        self.vault = vault
        self.sign_out_on_close = False
        self._lock = asyncio.Lock()

    @classmethod
    async def connect(
        cls,
        config: Config,
        prompt: Optional[PromptProvider] = None,
        vault: Optional[SessionVault] = None,
        client_factory: Callable = new_client,
    ) -> "SecondarySession":
        """
        Load the saved session, log in if needed, and persist the result.

        Raises:
            AuthError: session file unusable, or the login was rejected
        """
        vault = vault or SessionVault(config.session.path, config.session.key)
        saved = vault.load()
        try:
            string_session = StringSession(saved or None)
        except (ValueError, struct.error) as e:
            raise AuthError(f"Session file {vault.path} is corrupt: {e}")

        client = client_factory(string_session, config.account.api_id, config.account.api_hash)
        session = cls(client, vault)

        logger.info("Connecting to Telegram...")
        try:
            await client.connect()
        except _TRANSPORT_ERRORS as e:
            raise AuthError(f"Cannot connect to Telegram: {e}")
        logger.info("Connected!")

        if await client.is_user_authorized():
            logger.info("Secondary account already authorized")
            return session

        logger.info("Signing in...")
        flow = LoginFlow(client, prompt or ConsolePrompt())
        try:
            await flow.run()
        except AuthError:
            await client.disconnect()
            raise
        logger.info("Signed in!")

        session.persist()
        return session

    def persist(self):
        """Save the session; on failure, schedule a sign-out for shutdown."""
        try:
            self.vault.save(self.client.session.save())
        except PersistenceError as e:
            logger.warning(f"NOTE: failed to save the session, will sign out when done: {e}")
            self.sign_out_on_close = True

    async def resolve_username(self, name: str) -> Optional[int]:
        """
        Look up a username with the user account.

        Returns:
            The numeric user id, or None if no user owns that username

        Raises:
            TransportError: the connection failed (never retried)
            ResolutionError: Telegram refused the lookup for another reason
        """
        name = name.lstrip("@")
        async with self._lock:
            try:
                result = await self.client(functions.contacts.ResolveUsernameRequest(name))
            except (errors.UsernameNotOccupiedError, errors.UsernameInvalidError):
                return None
            except errors.RPCError as e:
                raise ResolutionError(f"Lookup of @{name} refused: {e}")
            except _TRANSPORT_ERRORS as e:
                raise TransportError(f"Connection failed while resolving @{name}: {e}")
            except ValueError as e:
                # raised by Telethon when a request never got a usable answer
                raise TransportError(f"No answer while resolving @{name}: {e}")

        if not isinstance(result.peer, types.PeerUser):
            logger.info(f"@{name} is not a user ({type(result.peer).__name__})")
            return None
        return result.peer.user_id

    async def close(self):
        """Disconnect, signing out first if the session was never saved."""
        if self.sign_out_on_close:
            logger.info("Signing out unsaved secondary session")
            try:
                await self.client.log_out()
            except (errors.RPCError,) + _TRANSPORT_ERRORS as e:
                logger.warning(f"Sign-out failed: {e}")
            return
        await self.client.disconnect()

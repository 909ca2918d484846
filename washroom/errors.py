"""
Error Taxonomy
==============
Only AuthError is allowed to stop the process. Everything else is turned
into a reply at the handler boundary.
"""


class WashroomError(Exception):
    """Base class for all bot errors."""


class AuthError(WashroomError):
    """Secondary account could not be authorized. Fatal at startup."""


class PersistenceError(WashroomError):
    """Session could not be written to disk."""


class ResolutionError(WashroomError):
    """A mentioned user could not be turned into a numeric id."""


class TransportError(ResolutionError):
    """The secondary connection failed while resolving."""


class RemoteRejection(WashroomError):
    """Telegram declined an admin request. Message is kept verbatim."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MalformedCommand(WashroomError):
    """Missing or invalid command arguments."""


class NoMentionFound(MalformedCommand):
    """The message carries no @mention entity."""


class MissingTitle(MalformedCommand):
    """Nothing left after the mention to use as a title."""

from __future__ import annotations

from typing import Optional

CORRUPTED_MESSAGE = "This link is corrupted. Please ask the sender for a new one."
INCOMPLETE_MESSAGE = "This link is incomplete. Please ask the sender for a new one."
TRUNCATED_MESSAGE = (
    "This link is incomplete. Make sure the URL was not cut off, "
    "or ask the sender for a new one."
)
WRONG_PASSWORD_MESSAGE = "Wrong password, please try again."
CRYPTO_UNAVAILABLE_MESSAGE = (
    "Decryption is not supported in this environment. Please use a newer client."
)
BACKUP_CORRUPTED_MESSAGE = "This backup link is corrupted."
PARSE_FAILED_MESSAGE = "Something went wrong while reading this link."


class ShareLinkError(Exception):
    """Base class for share-link errors. ``message`` is safe to show to users."""

    default_message = CORRUPTED_MESSAGE

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class CorruptionError(ShareLinkError):
    """Payload did not decompress or was not JSON."""


class ValidationError(CorruptionError):
    """Payload parsed but failed the structural schema check."""

    default_message = INCOMPLETE_MESSAGE


class DecryptionError(ShareLinkError):
    """Wrong password, tampered blob or an envelope too short to be valid."""

    default_message = WRONG_PASSWORD_MESSAGE


class CryptoUnavailableError(DecryptionError):
    default_message = CRYPTO_UNAVAILABLE_MESSAGE


class UnknownModeError(ShareLinkError, LookupError):
    """A link was requested for a mode with no registered route."""

    def __init__(self, mode: object) -> None:
        self.mode = mode
        super().__init__(f"Unknown mode: {mode!r}")


class ShortenerError(ShareLinkError):
    """The short-link service refused or could not be reached.

    ``status_code`` is ``None`` for transport failures.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)

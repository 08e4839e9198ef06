"""
The password step for encrypted share links.

``parse`` only isolates the envelope of a ``data=1`` link; this module turns
it back into share data once the recipient supplies the password.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from .codec import decode_fragment_to_json
from .envelope import decrypt, is_crypto_available
from .errors import (
    TRUNCATED_MESSAGE,
    CorruptionError,
    CryptoUnavailableError,
    DecryptionError,
    ValidationError,
)
from .schema import validate_compressed_data

logger = logging.getLogger(__name__)

# salt16 + iv12 + at least one byte + tag16, base64url encoded
MIN_BLOB_CHARS = 60


async def unlock_share_blob(blob: str, password: str) -> dict[str, Any]:
    """Decrypt, decompress and validate an encrypted share payload.

    Raises ``CryptoUnavailableError`` when AES-GCM is missing (checked before
    any attempt), ``CorruptionError``/``ValidationError`` for damaged links and
    ``DecryptionError`` for a wrong password.
    """
    password = password.strip()
    if not password:
        raise DecryptionError("Please enter the password.")
    if not is_crypto_available():
        raise CryptoUnavailableError()
    if len(blob) < MIN_BLOB_CHARS:
        logger.error("Encrypted blob too short, link probably truncated (length=%d)", len(blob))
        raise CorruptionError(TRUNCATED_MESSAGE)

    compressed = await decrypt(password, blob)

    try:
        data = decode_fragment_to_json(compressed)
    except CorruptionError:
        logger.error("Decrypted payload failed to decode (length=%d)", len(compressed))
        raise

    schema_error = validate_compressed_data(data)
    if schema_error:
        raise ValidationError(schema_error)
    return data


def unlock_share_blob_sync(blob: str, password: str) -> dict[str, Any]:
    """Synchronous wrapper around ``unlock_share_blob``."""
    return asyncio.run(unlock_share_blob(blob, password))

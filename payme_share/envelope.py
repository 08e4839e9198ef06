"""
Password-based AES-256-GCM envelope for encrypted share links.

Envelope layout (base64url, no padding)::

    salt (16 bytes) || iv (12 bytes) || ciphertext + GCM tag

Salt and IV are drawn fresh for every call, so encrypting the same text twice
never yields the same blob.
"""
from __future__ import annotations

import asyncio
import functools
import os

from cryptography.exceptions import InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .codec import base64url_decode, base64url_encode
from .errors import DecryptionError

SALT_LENGTH = 16
IV_LENGTH = 12
PBKDF2_ITERATIONS = 100_000
KEY_LENGTH = 32  # AES-256
MIN_ENVELOPE_LENGTH = SALT_LENGTH + IV_LENGTH


def _derive_key(password: str, salt: bytes) -> AESGCM:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    # The raw key never leaves this function; callers only get the cipher.
    return AESGCM(kdf.derive(password.encode("utf-8")))


async def encrypt(password: str, plaintext: str) -> str:
    """Encrypt ``plaintext`` with a key derived from ``password``."""
    salt = os.urandom(SALT_LENGTH)
    iv = os.urandom(IV_LENGTH)

    cipher = await asyncio.to_thread(_derive_key, password, salt)
    ciphertext = cipher.encrypt(iv, plaintext.encode("utf-8"), None)

    return base64url_encode(salt + iv + ciphertext)


async def decrypt(password: str, blob: str) -> str:
    """Decrypt an envelope produced by ``encrypt``.

    Raises ``DecryptionError`` for a wrong password, a tampered blob or an
    envelope shorter than salt + iv.
    """
    try:
        data = base64url_decode(blob)
    except ValueError as exc:
        raise DecryptionError() from exc

    if len(data) < MIN_ENVELOPE_LENGTH:
        raise DecryptionError(
            f"Invalid blob: expected at least {MIN_ENVELOPE_LENGTH} bytes, got {len(data)}"
        )

    salt = data[:SALT_LENGTH]
    iv = data[SALT_LENGTH:MIN_ENVELOPE_LENGTH]
    ciphertext = data[MIN_ENVELOPE_LENGTH:]

    cipher = await asyncio.to_thread(_derive_key, password, salt)
    try:
        plain = cipher.decrypt(iv, ciphertext, None)
    except InvalidTag as exc:
        raise DecryptionError() from exc

    try:
        return plain.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecryptionError() from exc


def encrypt_sync(password: str, plaintext: str) -> str:
    """Synchronous wrapper around ``encrypt``."""
    return asyncio.run(encrypt(password, plaintext))


def decrypt_sync(password: str, blob: str) -> str:
    """Synchronous wrapper around ``decrypt``."""
    return asyncio.run(decrypt(password, blob))


@functools.lru_cache(maxsize=None)
def is_crypto_available() -> bool:
    """Whether the installed crypto backend can do AES-GCM at all."""
    try:
        AESGCM(bytes(KEY_LENGTH)).encrypt(bytes(IV_LENGTH), b"", None)
    except UnsupportedAlgorithm:
        return False
    return True

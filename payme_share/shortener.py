"""
Split-key encryption for the third-party short-link service.

The service stores ``{ciphertext, serverKey}`` under a short code. The AES key
is derived from a 4 character ``clientKey`` that only ever travels in the
short URL's fragment (``https://s.payme.tw/{code}#{clientKey}``), so the
server never holds enough to decrypt what it stores.
"""
from __future__ import annotations

import asyncio
import logging
import os
import secrets
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlsplit

import aiohttp
from aiohttp import ClientSession
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .codec import base64url_decode, base64url_encode
from .config import get_shortener_timeout, get_shortener_url
from .errors import DecryptionError, ShortenerError

logger = logging.getLogger(__name__)

CLIENT_KEY_CHARSET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
CLIENT_KEY_LENGTH = 4
SERVER_KEY_BYTES = 32
IV_LENGTH = 12
HKDF_SALT = b"payme-shortener-v1"
HKDF_INFO = b"aes-256-gcm"
KEY_LENGTH = 32


@dataclass(frozen=True)
class ShortenerPayload:
    ciphertext: str
    server_key: str
    client_key: str

    def server_request(self) -> dict[str, str]:
        """Body sent to the service. The client key is deliberately absent."""
        return {"ciphertext": self.ciphertext, "serverKey": self.server_key}


def generate_client_key() -> str:
    return "".join(secrets.choice(CLIENT_KEY_CHARSET) for _ in range(CLIENT_KEY_LENGTH))


def generate_server_key() -> str:
    return base64url_encode(os.urandom(SERVER_KEY_BYTES))


def derive_enc_key(client_key: str) -> bytes:
    """HKDF-SHA256 over the client key -> raw 256-bit AES-GCM key."""
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=HKDF_SALT,
        info=HKDF_INFO,
    )
    return hkdf.derive(client_key.encode("utf-8"))


def _seal(plaintext: str, key: bytes) -> str:
    iv = os.urandom(IV_LENGTH)
    ciphertext = AESGCM(key).encrypt(iv, plaintext.encode("utf-8"), None)
    return base64url_encode(iv + ciphertext)


def _open(blob: str, key: bytes) -> str:
    try:
        combined = base64url_decode(blob)
    except ValueError as exc:
        raise DecryptionError() from exc

    iv, ciphertext = combined[:IV_LENGTH], combined[IV_LENGTH:]
    if len(iv) < IV_LENGTH:
        raise DecryptionError()
    try:
        return AESGCM(key).decrypt(iv, ciphertext, None).decode("utf-8")
    except (InvalidTag, UnicodeDecodeError) as exc:
        raise DecryptionError() from exc


async def encrypt_payload(plaintext: str, key: bytes) -> str:
    """AES-256-GCM, returns base64url(iv || ciphertext)."""
    return await asyncio.to_thread(_seal, plaintext, key)


async def decrypt_payload(blob: str, key: bytes) -> str:
    return await asyncio.to_thread(_open, blob, key)


async def encrypt_for_shortener(url: str) -> ShortenerPayload:
    """Generate a client key, derive the AES key from it and encrypt ``url``."""
    client_key = generate_client_key()
    key = await asyncio.to_thread(derive_enc_key, client_key)
    ciphertext = await encrypt_payload(url, key)
    return ShortenerPayload(
        ciphertext=ciphertext,
        server_key=generate_server_key(),
        client_key=client_key,
    )


def classify_status(status: int) -> str:
    """User-facing message for a non-2xx response of the service."""
    if status == 403:
        return "The short-link service is temporarily unavailable (403)."
    if status == 429:
        return "Too many requests, please try again later."
    if status == 400:
        return "The request was malformed, please try again."
    return f"The short-link service returned an error ({status})."


async def _post_shorten(
    session: ClientSession, base: str, payload: ShortenerPayload
) -> str:
    try:
        async with session.post(f"{base}/api/shorten", json=payload.server_request()) as resp:
            if not 200 <= resp.status < 300:
                body = await resp.text()
                logger.warning(
                    "Shortener rejected request: HTTP %s - %s", resp.status, body[:200]
                )
                raise ShortenerError(classify_status(resp.status), resp.status)

            try:
                data: Any = await resp.json(content_type=None)
            except ValueError as exc:
                raise ShortenerError(
                    "The short-link service sent an invalid response.", resp.status
                ) from exc
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise ShortenerError(
            "Network connection failed, please check your connection and retry."
        ) from exc

    short_code = data.get("shortCode") if isinstance(data, dict) else None
    if not isinstance(short_code, str) or not short_code:
        raise ShortenerError("The short-link service sent an invalid response.", resp.status)
    return short_code


async def create_short_link(
    url: str,
    *,
    base_url: Optional[str] = None,
    session: Optional[ClientSession] = None,
) -> str:
    """Encrypt ``url``, store it with the service and return the short URL.

    Raises ``ShortenerError`` on any failure; callers should then offer the
    full ``url`` to the user instead.
    """
    base = (base_url or get_shortener_url()).rstrip("/")
    payload = await encrypt_for_shortener(url)

    if session is not None:
        short_code = await _post_shorten(session, base, payload)
    else:
        timeout = aiohttp.ClientTimeout(total=get_shortener_timeout())
        async with aiohttp.ClientSession(timeout=timeout) as own_session:
            short_code = await _post_shorten(own_session, base, payload)

    return f"{base}/{short_code}#{payload.client_key}"


def create_short_link_sync(url: str, base_url: Optional[str] = None) -> str:
    """Synchronous wrapper around ``create_short_link``."""
    return asyncio.run(create_short_link(url, base_url=base_url))


def split_short_url(short_url: str) -> tuple[str, str]:
    """Return ``(short_code, client_key)`` from a short URL."""
    parts = urlsplit(short_url)
    return parts.path.strip("/"), parts.fragment

"""
Share-link parsing and recovery.

Understands every fragment shape links have been published with::

    #/?data=0<compressed>   current plaintext format
    #/?data=1<envelope>     password-protected (decrypted later, see ``unlock``)
    #/?data=<compressed>    early format, ``data=`` key but no version
    #<compressed>           oldest format, bare payload

``parse`` is a pure function of ``(path, hash)``; ``UrlParser`` memoises the
last input for hosts that re-parse on every navigation or hash change.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional, Union
from urllib.parse import unquote, urlsplit

from .backup import decompress_backup
from .codec import decode_fragment_to_json
from .errors import (
    BACKUP_CORRUPTED_MESSAGE,
    PARSE_FAILED_MESSAGE,
    ShareLinkError,
    ValidationError,
)
from .models import BackupPayload
from .routes import BACKUP_PREFIX, route_for_prefix
from .schema import validate_compressed_data

logger = logging.getLogger(__name__)

DATA_PARAM_RE = re.compile(r"(?:[?&]|^|#)data=([^&]*)")
HASH_PREFIX_RE = re.compile(r"^#/?\??")
# Extraction is prefix-greedy over the base64url alphabet: share sheets may
# append text straight after the URL, everything from the first foreign
# character on is dropped.
BLOB_RE = re.compile(r"^[A-Za-z0-9_-]+")


@dataclass(frozen=True)
class Plaintext:
    body: str


@dataclass(frozen=True)
class Encrypted:
    blob: str


@dataclass(frozen=True)
class Legacy:
    body: str
    keyed: bool  # True for ``data=<body>``, False for a bare ``#<body>``


Payload = Union[Plaintext, Encrypted, Legacy]


@dataclass(frozen=True)
class ParseResult:
    mode: Optional[str] = None
    path_params: dict[str, str] = field(default_factory=dict)
    decoded_data: Optional[dict[str, Any]] = None
    raw_hash: Optional[str] = None
    error: Optional[str] = None
    is_encrypted: bool = False
    encrypted_blob: Optional[str] = None
    is_share_link: bool = False
    is_backup_link: bool = False
    backup_data: Optional[BackupPayload] = None


def extract_raw_data(hash_: str) -> tuple[str, bool]:
    """Return ``(raw, keyed)``: the ``data=`` value when present, otherwise the
    whole fragment minus its ``#/?`` lead-in."""
    match = DATA_PARAM_RE.search(hash_)
    if match:
        return match.group(1), True
    return HASH_PREFIX_RE.sub("", hash_, count=1), False


def classify_payload(raw: str, keyed: bool = True) -> Optional[Payload]:
    """Pick the decode path from the version character. Empty input means the
    link carries no payload."""
    if not raw:
        return None
    if raw.startswith("1"):
        match = BLOB_RE.match(raw[1:])
        return Encrypted(match.group(0) if match else "")
    if raw.startswith("0"):
        return Plaintext(raw[1:])
    return Legacy(raw, keyed=keyed)


def decode_compressed(body: str) -> dict[str, Any]:
    """Decompress, parse and structurally validate a plaintext body.

    Raises ``CorruptionError`` or ``ValidationError``.
    """
    decoded = decode_fragment_to_json(body)
    schema_error = validate_compressed_data(decoded)
    if schema_error:
        raise ValidationError(schema_error)
    return decoded


def _parse_path(path: str) -> tuple[list[str], Optional[str], dict[str, str]]:
    segments = [s for s in path.split("/") if s]
    prefix = segments[0] if segments else ""
    config = route_for_prefix(prefix)
    if config is None:
        return segments, None, {}

    params: dict[str, str] = {}
    for index, segment in enumerate(config.segments):
        # segments[0] is the prefix
        if index + 1 < len(segments):
            params[segment.key] = unquote(segments[index + 1])
    return segments, config.mode, params


def _parse_backup(hash_: str) -> ParseResult:
    backup: Optional[BackupPayload] = None
    if hash_:
        match = DATA_PARAM_RE.search(hash_)
        raw = match.group(1) if match else ""
        if raw.startswith("0"):
            backup = decompress_backup(raw[1:])

    error = None
    if backup is None and hash_:
        error = BACKUP_CORRUPTED_MESSAGE
    return ParseResult(
        raw_hash=hash_,
        error=error,
        is_backup_link=True,
        backup_data=backup,
    )


def _parse(path: str, hash_: str) -> ParseResult:
    segments, mode, path_params = _parse_path(path)
    if segments and segments[0] == BACKUP_PREFIX:
        return _parse_backup(hash_)

    payload = None
    if hash_:
        raw, keyed = extract_raw_data(hash_)
        payload = classify_payload(raw, keyed)

    if payload is None:
        return ParseResult(mode=mode, path_params=path_params, raw_hash=hash_)

    if isinstance(payload, Encrypted):
        return ParseResult(
            mode=mode,
            path_params=path_params,
            raw_hash=hash_,
            is_encrypted=True,
            encrypted_blob=payload.blob,
        )

    try:
        decoded = decode_compressed(payload.body)
    except ShareLinkError as exc:
        logger.warning("Failed to parse hash data (%s): %s", type(exc).__name__, exc)
        return ParseResult(
            mode=mode, path_params=path_params, raw_hash=hash_, error=exc.message
        )

    return ParseResult(
        mode=mode,
        path_params=path_params,
        decoded_data=decoded,
        raw_hash=hash_,
        is_share_link=True,
    )


def parse(path: str, hash_: str) -> ParseResult:
    """Parse the current location into a ``ParseResult``. Never raises."""
    try:
        return _parse(path or "", hash_ or "")
    except Exception:
        logger.exception("URL parsing error for path %r", path)
        return ParseResult(raw_hash=hash_, error=PARSE_FAILED_MESSAGE)


def parse_url(url: str) -> ParseResult:
    """Convenience wrapper for a full URL string."""
    parts = urlsplit(url)
    hash_ = f"#{parts.fragment}" if parts.fragment else ""
    return parse(parts.path, hash_)


class UrlParser:
    """Holds the parse result for a changing location.

    Navigation and hash changes both funnel into ``update``; an unchanged
    location returns the previous result without re-parsing.
    """

    def __init__(self, path: str = "/", hash_: str = "") -> None:
        self._last_input: Optional[tuple[str, str]] = None
        self._result = ParseResult()
        self.update(path, hash_)

    @property
    def result(self) -> ParseResult:
        return self._result

    @property
    def path(self) -> str:
        return self._last_input[0] if self._last_input else ""

    @property
    def hash(self) -> str:
        return self._last_input[1] if self._last_input else ""

    def update(self, path: str, hash_: str) -> ParseResult:
        key = (path, hash_)
        if key != self._last_input:
            self._result = parse(path, hash_)
            self._last_input = key
        return self._result

    def on_navigate(self, path: str, hash_: Optional[str] = None) -> ParseResult:
        return self.update(path, self.hash if hash_ is None else hash_)

    def on_hash_change(self, hash_: str) -> ParseResult:
        return self.update(self.path, hash_)

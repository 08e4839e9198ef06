from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional, Union
from urllib.parse import quote

from .codec import encode_json_to_fragment
from .config import get_origin
from .envelope import encrypt
from .models import CompressedData
from .routes import get_route_config

PLAINTEXT_VERSION = "0"
ENCRYPTED_VERSION = "1"

PathParams = Mapping[str, Union[str, int, None]]
ShareData = Union[CompressedData, Mapping[str, Any]]


def resolve_origin(origin: Optional[str] = None) -> str:
    return (origin or get_origin()).rstrip("/")


def build_path(mode: str, path_params: PathParams) -> str:
    """``/<prefix>/<segment>...`` for ``mode``.

    Segments are taken in route order; missing or empty values are skipped.
    """
    config = get_route_config(mode)
    parts = [config.prefix]
    for segment in config.segments:
        value = path_params.get(segment.key)
        if value is None or value == "":
            continue
        parts.append(quote(str(value), safe=""))
    return "/" + "/".join(parts)


def _compress(data: ShareData) -> str:
    obj = data.to_dict() if isinstance(data, CompressedData) else dict(data)
    return encode_json_to_fragment(obj)


def build_share_url(
    mode: str,
    path_params: PathParams,
    data: ShareData,
    *,
    origin: Optional[str] = None,
) -> str:
    """Build a plaintext share link: ``{origin}{path}/#/?data=0{compressed}``."""
    path = build_path(mode, path_params)
    compressed = _compress(data)
    return f"{resolve_origin(origin)}{path}/#/?data={PLAINTEXT_VERSION}{compressed}"


async def build_encrypted_share_url(
    mode: str,
    path_params: PathParams,
    data: ShareData,
    password: str,
    *,
    origin: Optional[str] = None,
) -> str:
    """Build a password-protected share link: ``.../#/?data=1{envelope}``.

    The payload is compressed first and the compressed text is encrypted.
    """
    if not password:
        raise ValueError("password must not be empty")
    path = build_path(mode, path_params)
    compressed = _compress(data)
    blob = await encrypt(password, compressed)
    return f"{resolve_origin(origin)}{path}/#/?data={ENCRYPTED_VERSION}{blob}"


def build_encrypted_share_url_sync(
    mode: str,
    path_params: PathParams,
    data: ShareData,
    password: str,
    *,
    origin: Optional[str] = None,
) -> str:
    """Synchronous wrapper around ``build_encrypted_share_url``."""
    return asyncio.run(
        build_encrypted_share_url(mode, path_params, data, password, origin=origin)
    )

import base64
import json
import logging
import re
from typing import Any, Optional

import lzstring

from .errors import CorruptionError

logger = logging.getLogger(__name__)

BASE64URL_RE = re.compile(r"^[A-Za-z0-9_-]*$")

_LZ = lzstring.LZString()


def base64url_encode(data: bytes) -> str:
    """bytes -> url-safe base64 string without padding."""
    b64 = base64.b64encode(data).decode("ascii")
    return b64.replace("+", "-").replace("/", "_").rstrip("=")


def base64url_decode(s: str) -> bytes:
    """url-safe base64 string (no padding) -> bytes.

    Raises ``ValueError`` for characters outside the base64url alphabet.
    """
    if not BASE64URL_RE.match(s):
        raise ValueError("Invalid base64url string")
    s = s.replace("-", "+").replace("_", "/")
    # restore padding
    while len(s) % 4:
        s += "="
    return base64.b64decode(s, validate=True)


def _to_utf16_units(text: str) -> str:
    # lz-string counts UTF-16 code units; split astral characters into
    # surrogate pairs so output matches the JavaScript implementation
    data = text.encode("utf-16-le", "surrogatepass")
    return "".join(
        chr(int.from_bytes(data[i:i + 2], "little")) for i in range(0, len(data), 2)
    )


def _from_utf16_units(units: str) -> str:
    return units.encode("utf-16-le", "surrogatepass").decode("utf-16-le")


def compress_to_fragment(text: str) -> str:
    """Compress text into a URI-safe string usable inside a hash fragment.

    Uses lz-string's ``compressToEncodedURIComponent``, so the output is the
    same string the web app publishes for the same text.
    """
    return _LZ.compressToEncodedURIComponent(_to_utf16_units(text))


def decompress_from_fragment(fragment: str) -> Optional[str]:
    """Inverse of ``compress_to_fragment``. Returns ``None`` when the input is not
    a valid compressed fragment."""
    if not fragment:
        return None
    try:
        units = _LZ.decompressFromEncodedURIComponent(fragment)
        return _from_utf16_units(units) if units else None
    except Exception as exc:
        # lzstring signals malformed input with whatever its internals trip over
        # (KeyError, IndexError, TypeError, ...)
        logger.debug("Failed to decompress fragment of length %d: %s", len(fragment), exc)
        return None


def encode_json_to_fragment(obj: Any) -> str:
    """Encode a JSON-compatible object (or an already serialized JSON string)."""
    json_str = obj if isinstance(obj, str) else json.dumps(
        obj, separators=(",", ":"), ensure_ascii=False
    )
    return compress_to_fragment(json_str)


def decode_fragment_to_json(fragment: str) -> Any:
    """Decode a compressed fragment back to JSON.

    Raises ``CorruptionError`` when the fragment does not decompress or the
    result is not JSON.
    """
    json_str = decompress_from_fragment(fragment)
    if not json_str:
        raise CorruptionError()
    try:
        return json.loads(json_str)
    except json.JSONDecodeError as exc:
        raise CorruptionError() from exc

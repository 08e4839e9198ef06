from __future__ import annotations

from typing import Any, Mapping, Optional

from .errors import INCOMPLETE_MESSAGE
from .routes import BILL, VALID_MODES

MALFORMED_MESSAGE = "This link's data is malformed. Please ask the sender for a new one."
MISSING_BILL_MESSAGE = "This bill link has no bill details. Please ask the sender for a new one."
MISSING_MEMBERS_MESSAGE = "This bill link has no members. Please ask the sender for a new one."
MISSING_ITEMS_MESSAGE = "This bill link has no items. Please ask the sender for a new one."


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _non_empty_list(value: Any) -> bool:
    return isinstance(value, list) and len(value) > 0


def validate_compressed_data(decoded: Any) -> Optional[str]:
    """Structural check of a decoded share payload.

    Returns a user-facing error message, or ``None`` when the payload is
    acceptable. Payloads without a ``mo`` discriminator predate the current
    format and are passed through.
    """
    if not isinstance(decoded, Mapping):
        return MALFORMED_MESSAGE
    if not decoded.get("mo"):
        return None

    if decoded["mo"] not in VALID_MODES:
        return INCOMPLETE_MESSAGE
    if not _non_empty_str(decoded.get("b")) or not _non_empty_str(decoded.get("a")):
        return INCOMPLETE_MESSAGE

    if decoded["mo"] == BILL:
        bill = decoded.get("bd")
        if not isinstance(bill, Mapping):
            return MISSING_BILL_MESSAGE
        if not _non_empty_list(bill.get("m")):
            return MISSING_MEMBERS_MESSAGE
        if not _non_empty_list(bill.get("i")):
            return MISSING_ITEMS_MESSAGE

    return None

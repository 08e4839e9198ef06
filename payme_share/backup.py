"""
Backup links: a snapshot of the user's local settings packed into
``{origin}/backup/#/?data=0{compressed}``. Backups are never encrypted.
"""
from __future__ import annotations

import logging
import time
from typing import Mapping, MutableMapping, Optional

from .codec import decode_fragment_to_json, encode_json_to_fragment
from .config import get_origin
from .errors import CorruptionError
from .models import BackupPayload
from .routes import BACKUP_PREFIX

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1

# Personal data only; device-local flags and caches are not backed up.
USER_DATA_KEYS: tuple[str, ...] = (
    "payme_data_payment",
    "payme_data_bill",
    "payme_data_bill_detail",
    "payme_last_mode",
    "payme_simple_inputs",
    "payme_accounts",
)


def create_backup_payload(
    store: Mapping[str, str], now: Optional[int] = None
) -> BackupPayload:
    """Collect every user data key present in ``store``."""
    keys = {key: store[key] for key in USER_DATA_KEYS if store.get(key) is not None}
    timestamp = now if now is not None else int(time.time() * 1000)
    return BackupPayload(timestamp=timestamp, keys=keys, version=BACKUP_VERSION)


def compress_backup(payload: BackupPayload) -> str:
    return encode_json_to_fragment(payload.to_dict())


def decompress_backup(compressed: str) -> Optional[BackupPayload]:
    """Inverse of ``compress_backup``; ``None`` for anything that is not a valid
    version 1 backup."""
    try:
        data = decode_fragment_to_json(compressed)
    except CorruptionError:
        logger.debug("Backup payload is corrupted")
        return None

    if not isinstance(data, dict):
        return None
    if data.get("v") != BACKUP_VERSION:
        return None
    ts = data.get("ts")
    if not isinstance(ts, (int, float)) or isinstance(ts, bool):
        return None
    keys = data.get("keys")
    if not isinstance(keys, dict):
        return None
    return BackupPayload.from_dict(data)


def build_backup_url(payload: BackupPayload, origin: Optional[str] = None) -> str:
    base = (origin or get_origin()).rstrip("/")
    return f"{base}/{BACKUP_PREFIX}/#/?data=0{compress_backup(payload)}"


def restore_backup(payload: BackupPayload, store: MutableMapping[str, str]) -> None:
    for key, value in payload.keys.items():
        store[key] = value


def has_existing_user_data(store: Mapping[str, str]) -> bool:
    return any(store.get(key) is not None for key in USER_DATA_KEYS)

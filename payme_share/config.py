"""
Environment-driven settings. Values are read at call time so tests and
long-running processes pick up changes to ``os.environ``.
"""
from __future__ import annotations

import os

DEFAULT_ORIGIN = "https://payme.tw"
DEFAULT_SHORTENER_URL = "https://s.payme.tw"
DEFAULT_SHORTENER_TIMEOUT = 15.0


def get_origin() -> str:
    return os.environ.get("PAYME_ORIGIN", DEFAULT_ORIGIN).rstrip("/")


def get_shortener_url() -> str:
    return os.environ.get("PAYME_SHORTENER_URL", DEFAULT_SHORTENER_URL).rstrip("/")


def get_shortener_timeout() -> float:
    raw = os.environ.get("PAYME_SHORTENER_TIMEOUT")
    if not raw:
        return DEFAULT_SHORTENER_TIMEOUT
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(
            f"PAYME_SHORTENER_TIMEOUT must be a number of seconds, got {raw!r}"
        ) from exc

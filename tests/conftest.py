from __future__ import annotations

from typing import Any

import pytest


@pytest.fixture
def pay_data() -> dict[str, Any]:
    return {
        "b": "822",
        "a": "123456789012",
        "m": "1234",
        "c": "測試round-trip",
        "mo": "pay",
    }


@pytest.fixture
def bill_data() -> dict[str, Any]:
    return {
        "b": "013",
        "a": "0012345678901",
        "m": "",
        "c": "",
        "mo": "bill",
        "bd": {
            "t": "KTV 趴",
            "m": ["Amy", "Ben", "Cleo"],
            "i": [
                {"n": "Room", "p": 1800, "o": [0, 1, 2]},
                {"n": "Beer", "p": 420, "o": [1]},
            ],
            "s": True,
        },
        "tid": "tpl_ktv",
        "ac": [{"b": "700", "a": "00012345678"}],
    }


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PAYME_ORIGIN", "PAYME_SHORTENER_URL", "PAYME_SHORTENER_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


# Fragments and envelopes captured from links published by the web app.
WEB_APP_PAY = {"b": "822", "a": "123456789012", "m": "1234", "c": "聚餐", "mo": "pay"}


@pytest.fixture
def web_app_links() -> dict[str, tuple[str, dict[str, Any]]]:
    """``name -> (compressed body, decoded JSON)``"""
    return {
        "pay": (
            "N4IgRiBcIBwExxAGhAQyiAjHAzAFgFYA2AdhgE4AGbZEAWw231oGMNAtAMARM2ugewwAOqAJ4gAvkA",
            dict(WEB_APP_PAY),
        ),
        "bill": (
            "N4IgRiBcIAwIwGYQBoQEMq3gJgQFgFYA2AdgA4BOeFEAW0xoGMHVaB7TMASwBseawAEyigALpgBiAJy6C0"
            "ATxr1IAbRABBWotQAhAKYA7EAF1UXKCtBHoABS4AvexlQAHKERgxUHVV7jGAX1MQAGcoADM0HhC9AICgA",
            {
                "b": "013",
                "a": "0012345678901",
                "m": "",
                "c": "",
                "mo": "bill",
                "bd": {
                    "t": "Friday",
                    "m": ["Amy", "Ben"],
                    "i": [{"n": "Pizza", "p": 600, "o": [0, 1]}],
                    "s": False,
                },
            },
        ),
        "keyed_legacy": (
            "N4IgRiBcIBwIwCYQBoQEMogAw8QZgBYBWANgHYYBOFEAW0yJxoGNMATASwDsuBTAJxABfIA",
            {"b": "812", "a": "000123456789", "m": "500", "c": "dinner"},
        ),
        "bare_legacy": (
            "N4IgRiBcIAwwLCANCAhlEBOAHAdgGwCs8AzAEwCMyIAthmYTNQMYYA2ArgHbMAWIAXyA",
            {"b": "004", "a": "987654321", "m": "250", "c": "lunch"},
        ),
        "backup": (
            "N4IgbiBcCMA0IBcDOVoHZ0CYAMu+-gGsBTATxUlAAcBDUgW2IH0AbGpBJ+gewBNioIAEYBLFixDxaDZjQDGc7gFcAdskEBtYAB1huyLoAcmTLti6a+3dEwBmACwBWAGxpDATmw3dAXwC6ID4+QA",
            {
                "v": 1,
                "ts": 1717200000000,
                "keys": {
                    "payme_last_mode": "bill",
                    "payme_accounts": '[{"b":"822","a":"123456789012"}]',
                },
            },
        ),
    }


@pytest.fixture
def web_app_envelope() -> tuple[str, str, dict[str, Any]]:
    """``(blob, password, decoded JSON)`` for a ``data=1`` link; the plaintext
    inside is the lz-compressed pay payload."""
    blob = (
        "AQIDBAUGBwgJCgsMDQ4PEKChoqOkpaanqKmqq5ByFQ1haUEu1CWtGmjTqK7Zl07higvmzY5N12-jLU2VnmztJq"
        "wKpWH0_hjo_uymO83LjnSu6kFaU-O4MOia9VEWMZqZNYkvtwmIMd9_XKkkmN_Ke4czX8J9trkagNA"
    )
    return blob, "mySecret123", dict(WEB_APP_PAY)

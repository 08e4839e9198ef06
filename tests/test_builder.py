from __future__ import annotations

import json
from typing import Any
from urllib.parse import urlsplit

import pytest

from payme_share import envelope
from payme_share.builder import (
    build_encrypted_share_url_sync,
    build_path,
    build_share_url,
)
from payme_share.codec import decompress_from_fragment
from payme_share.errors import DecryptionError, UnknownModeError
from payme_share.models import BillData, BillItem, CompressedData


def _data_param(url: str) -> str:
    fragment = urlsplit(url).fragment
    assert fragment.startswith("/?data=")
    return fragment[len("/?data="):]


def test_plaintext_link_shape(pay_data: dict[str, Any]) -> None:
    url = build_share_url("pay", {}, pay_data)

    assert url.startswith("https://payme.tw/pay/#/?data=0")


def test_concrete_plaintext_scenario(pay_data: dict[str, Any]) -> None:
    url = build_share_url("pay", {}, pay_data)

    data = _data_param(url)
    assert data.startswith("0")
    assert json.loads(decompress_from_fragment(data[1:]) or "") == pay_data


def test_concrete_encrypted_scenario(pay_data: dict[str, Any]) -> None:
    url = build_encrypted_share_url_sync("pay", {}, pay_data, "mySecret123")

    data = _data_param(url)
    assert data.startswith("1")
    compressed = envelope.decrypt_sync("mySecret123", data[1:])
    assert json.loads(decompress_from_fragment(compressed) or "") == pay_data

    with pytest.raises(DecryptionError):
        envelope.decrypt_sync("mySecret12", data[1:])


def test_encrypted_build_rejects_empty_password(pay_data: dict[str, Any]) -> None:
    with pytest.raises(ValueError):
        build_encrypted_share_url_sync("pay", {}, pay_data, "")


def test_path_segments_are_encoded_in_route_order() -> None:
    assert build_path("pay", {"pax": 4, "title": "聚餐 費/AA"}) == (
        "/pay/%E8%81%9A%E9%A4%90%20%E8%B2%BB%2FAA/4"
    )
    assert build_path("bill", {"title": "KTV", "templateId": "tpl_netflix"}) == (
        "/bill/KTV/tpl_netflix"
    )


@pytest.mark.parametrize(
    ("params", "expected"),
    [
        ({}, "/pay"),
        ({"title": None, "pax": None}, "/pay"),
        ({"title": "", "pax": 3}, "/pay/3"),
        ({"title": "Lunch", "pax": ""}, "/pay/Lunch"),
        ({"unknown": "x"}, "/pay"),
    ],
)
def test_missing_segments_are_skipped(params: dict[str, Any], expected: str) -> None:
    path = build_path("pay", params)

    assert path == expected
    assert "None" not in path


def test_unknown_mode_fails_loudly(pay_data: dict[str, Any]) -> None:
    with pytest.raises(UnknownModeError):
        build_share_url("split", {}, pay_data)


def test_origin_resolution(monkeypatch: pytest.MonkeyPatch, pay_data: dict[str, Any]) -> None:
    assert build_share_url("pay", {}, pay_data, origin="http://localhost:3000/").startswith(
        "http://localhost:3000/pay/#/?data=0"
    )

    monkeypatch.setenv("PAYME_ORIGIN", "https://staging.payme.tw")
    assert build_share_url("pay", {}, pay_data).startswith("https://staging.payme.tw/pay/")


def test_dataclass_payload_serializes_to_wire_keys(bill_data: dict[str, Any]) -> None:
    data = CompressedData(
        bank_code="013",
        account_number="0012345678901",
        mode="bill",
        bill=BillData(
            title="KTV 趴",
            members=["Amy", "Ben"],
            items=[BillItem(name="Room", price=1800, owners=[0, 1])],
            service_charge=True,
        ),
    )

    url = build_share_url("bill", {"title": "KTV 趴"}, data)

    decoded = json.loads(decompress_from_fragment(_data_param(url)[1:]) or "")
    assert decoded == {
        "b": "013",
        "a": "0012345678901",
        "m": "",
        "c": "",
        "mo": "bill",
        "bd": {
            "t": "KTV 趴",
            "m": ["Amy", "Ben"],
            "i": [{"n": "Room", "p": 1800, "o": [0, 1]}],
            "s": True,
        },
    }
    assert CompressedData.from_dict(decoded) == data
    assert CompressedData.from_dict(bill_data).to_dict() == bill_data

"""
TWQR (Taiwan common QR code) personal-transfer payloads.

The payload is a ``TWQRP://`` URI that banking apps understand, returned
fully percent-encoded::

    TWQRP://個人轉帳/158/02/V1?D5=<bank>&D6=<account, 16 digits>&D1=<cents>&D9=<note>&D10=901
"""
from __future__ import annotations

import io
import math
from typing import Any, Mapping, Optional, Union
from urllib.parse import quote

import qrcode
from PIL import Image
from qrcode.image.pil import PilImage

PROTOCOL = "TWQRP"
SERVICE_NAME = "個人轉帳"
COUNTRY_CODE = "158"
CATEGORY = "02"
VERSION = "V1"
CURRENCY_TWD = "901"
ACCOUNT_WIDTH = 16

# Characters encodeURIComponent leaves untouched
_URI_COMPONENT_SAFE = "-_.!~*'()"


def _amount_in_cents(amount: Union[str, int, float, None]) -> Optional[int]:
    if amount is None or amount == "":
        return None
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return math.floor(value * 100 + 0.5)


def create_twqr_string(
    bank_code: str,
    account_number: str,
    amount: Union[str, int, float, None] = None,
    comment: Optional[str] = None,
) -> str:
    """Build the percent-encoded TWQRP URI for a personal transfer.

    The account is left padded with zeros to 16 digits, the amount is sent in
    cents and only when positive.
    """
    base_path = f"{PROTOCOL}://{SERVICE_NAME}/{COUNTRY_CODE}/{CATEGORY}/{VERSION}"

    # Params are joined by hand; the whole URI is encoded once at the end.
    params = [f"D5={bank_code}", f"D6={account_number.rjust(ACCOUNT_WIDTH, '0')}"]
    cents = _amount_in_cents(amount)
    if cents is not None:
        params.append(f"D1={cents}")
    if comment:
        params.append(f"D9={comment}")
    params.append(f"D10={CURRENCY_TWD}")

    raw_uri = f"{base_path}?{'&'.join(params)}"
    return quote(raw_uri, safe=_URI_COMPONENT_SAFE)


def payment_from_decoded(decoded: Mapping[str, Any]) -> str:
    """TWQR payload for a decoded share link (``b``/``a``/``m``/``c`` keys)."""
    return create_twqr_string(
        bank_code=decoded["b"],
        account_number=decoded["a"],
        amount=decoded.get("m") or None,
        comment=decoded.get("c") or None,
    )


def render_qr_png(
    payload: str, box_size: int = 10, border: int = 4, size: Optional[int] = None
) -> bytes:
    """Render ``payload`` as a PNG QR code, optionally scaled to ``size`` pixels."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
        image_factory=PilImage,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    img: Image.Image = qr.make_image(fill_color="black", back_color="white").get_image()
    if size is not None:
        img = img.resize((size, size), resample=Image.Resampling.NEAREST)

    buffer = io.BytesIO()
    img.save(buffer, format="PNG", optimize=True)
    return buffer.getvalue()

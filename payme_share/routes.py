from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional
from urllib.parse import unquote

from .errors import UnknownModeError

PAY = "pay"
BILL = "bill"
VALID_MODES: tuple[str, ...] = (PAY, BILL)

BACKUP_PREFIX = "backup"

# Segment keys shared by the route table and callers building path params
SEG_TITLE = "title"
SEG_PAX = "pax"
SEG_TEMPLATE_ID = "templateId"


@dataclass(frozen=True)
class RouteSegment:
    key: str
    description: str
    optional: bool = True


@dataclass(frozen=True)
class RouteConfig:
    mode: str
    label: str
    prefix: str
    segments: tuple[RouteSegment, ...] = field(default_factory=tuple)
    og_image: str = "/og-simple.jpg"

    def meta(self, params: Mapping[str, Optional[str]]) -> dict[str, str]:
        """Open-graph title/description/image for a link on this route."""
        title = unquote(params.get(SEG_TITLE) or "")
        if self.mode == BILL:
            return {
                "title": f"{title or 'Bill details'} - PayMe.TW bill split",
                "description": "Open the link to see the bill and claim your items.",
                "image": self.og_image,
            }

        pax = params.get(SEG_PAX)
        suffix = f" (split {pax} ways)" if pax else ""
        return {
            "title": f"{title}{suffix} - payment request" if title else "PayMe.TW payment",
            "description": (
                "Per-person amount is calculated automatically, service charge included."
                if pax
                else "Open the link to see the amount and make the transfer."
            ),
            "image": self.og_image,
        }


APP_ROUTES: dict[str, RouteConfig] = {
    # e.g. /pay/Dinner/4
    "pay": RouteConfig(
        mode=PAY,
        label="Payment",
        prefix="pay",
        segments=(
            RouteSegment(SEG_TITLE, "Payment title"),
            RouteSegment(SEG_PAX, "Number of people sharing"),
        ),
        og_image="/og-simple.jpg",
    ),
    # e.g. /bill/KTV/tpl_netflix
    "bill": RouteConfig(
        mode=BILL,
        label="Bill",
        prefix="bill",
        segments=(
            RouteSegment(SEG_TITLE, "Bill title"),
            RouteSegment(SEG_TEMPLATE_ID, "Template id (e.g. netflix)"),
        ),
        og_image="/og-bill.jpg",
    ),
}


def get_route_config(mode: str) -> RouteConfig:
    """Return the route registered for ``mode``, raising ``UnknownModeError``."""
    for config in APP_ROUTES.values():
        if config.mode == mode:
            return config
    raise UnknownModeError(mode)


def route_for_prefix(prefix: str) -> Optional[RouteConfig]:
    return APP_ROUTES.get(prefix)

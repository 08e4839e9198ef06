"""
Clean-up applied to template submissions before they are sent to the
feedback endpoint. Account details must never leave the device.
"""
from __future__ import annotations

import re
from typing import Any, Mapping

SENSITIVE_FIELDS = frozenset({"bankCode", "accountNumber", "ac"})

_HTML_TAG_RE = re.compile(r"<[^>]*>")


def strip_html_tags(text: str) -> str:
    return _HTML_TAG_RE.sub("", text)


def strip_sensitive_fields(state: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of ``state`` without bank code, account number or account list."""
    return {key: value for key, value in state.items() if key not in SENSITIVE_FIELDS}


def prepare_template_submission(
    author_name: str, form_state: Mapping[str, Any], notes: str = ""
) -> dict[str, Any]:
    """Build the ``template`` submission payload from the generator's state."""
    payload: dict[str, Any] = {
        "type": "template",
        "authorName": strip_html_tags(author_name).strip(),
        "formState": strip_sensitive_fields(form_state),
    }
    if notes:
        payload["notes"] = strip_html_tags(notes).strip()
    return payload

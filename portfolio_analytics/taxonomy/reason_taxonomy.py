"""
Change-order reason taxonomy.

Source systems export ``co_reason`` either as a numeric code or as free
text.  Codes map onto four canonical labels; free text is kept verbatim and
blank cells become ``"Unspecified"``.

Normalisation handles the usual spreadsheet damage before lookup:
surrounding whitespace (``" 0"``) and float-ified codes (``"0.0"``, ``"2.00"``).

This module has NO imports from any other ``portfolio_analytics`` package.
"""

from __future__ import annotations

import re
from enum import StrEnum


class ChangeOrderReason(StrEnum):
    """Canonical change-order reason labels."""

    SCOPE_CHANGE = "Scope Change"
    """Owner-driven addition or removal of scope."""

    CLIENT_REQUEST = "Client Request"
    """Client-initiated modification that does not change overall scope."""

    UNFORESEEN_CONDITIONS = "Unforeseen Conditions"
    """Site or ground conditions not visible at bid time."""

    DESIGN_REVISION = "Design Revision"
    """Drawings or specifications revised after award."""

    UNSPECIFIED = "Unspecified"
    """No reason recorded."""


REASON_CODE_MAP: dict[str, ChangeOrderReason] = {
    "0": ChangeOrderReason.SCOPE_CHANGE,
    "1": ChangeOrderReason.CLIENT_REQUEST,
    "2": ChangeOrderReason.UNFORESEEN_CONDITIONS,
    "3": ChangeOrderReason.DESIGN_REVISION,
}

_TRAILING_ZERO_DECIMAL = re.compile(r"\.0+$")


def normalize_reason(raw: object) -> str:
    """Map a raw ``co_reason`` cell to its display label.

    Examples::

        normalize_reason("2")     -> "Unforeseen Conditions"
        normalize_reason(" 0.0 ") -> "Scope Change"
        normalize_reason("Weather") -> "Weather"
        normalize_reason("")      -> "Unspecified"

    Args:
        raw: Cell value (``None`` allowed).

    Returns:
        Canonical label for known codes, the stripped text for unmapped
        values, or ``"Unspecified"`` for blanks.
    """
    text = "" if raw is None else str(raw).strip()
    if not text:
        return ChangeOrderReason.UNSPECIFIED.value

    mapped = REASON_CODE_MAP.get(text) or REASON_CODE_MAP.get(
        _TRAILING_ZERO_DECIMAL.sub("", text)
    )
    return mapped.value if mapped is not None else text

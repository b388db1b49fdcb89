from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Tuple

from .formats import PERCENT_STEP
from .tip_core import MAX_BILL, DollarRoundingMode

_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_bill(text: str) -> Decimal:
    """Parse free-form bill text into a Decimal, never raising.

    Comma thousands separators are dropped. Plain decimals and exponent
    forms such as ``1e2`` are read; anything else (empty text, letters,
    ``nan``) reads as zero, as do amounts above ``MAX_BILL``.
    """
    raw = (text or "").strip().replace(",", "")
    if not _NUMBER_RE.fullmatch(raw):
        return Decimal("0")
    try:
        value = Decimal(raw)
    except InvalidOperation:
        return Decimal("0")
    if not value.is_finite() or value > MAX_BILL:
        return Decimal("0")
    return value


def parse_percentage(
    text: str,
    *,
    min_value: Decimal = Decimal("0"),
    max_value: Decimal = Decimal("50"),
) -> Decimal:
    s = text.strip()
    raw = re.sub(r"\s+", "", s).replace("%", "").replace(",", "")
    try:
        value = Decimal(raw)
    except InvalidOperation as exc:
        raise ValueError("Enter a valid percentage (e.g., 18 or 18%)") from exc
    if not value.is_finite() or value < min_value or value > max_value:
        raise ValueError(f"Percentage must be between {min_value} and {max_value}")
    return value.quantize(PERCENT_STEP, rounding=ROUND_HALF_UP)


def parse_int(text: str, *, min_value: int = 1) -> int:
    try:
        value = int(text.strip())
    except ValueError as exc:
        raise ValueError("Enter a whole number") from exc
    if value < min_value:
        raise ValueError(f"Value must be >= {min_value}")
    return value


def parse_rounding_mode(text: str) -> DollarRoundingMode:
    key = text.strip().lower().replace("-", " ").replace("_", " ")
    aliases = {
        "": DollarRoundingMode.NONE,
        "n": DollarRoundingMode.NONE,
        "none": DollarRoundingMode.NONE,
        "off": DollarRoundingMode.NONE,
        "u": DollarRoundingMode.UP,
        "up": DollarRoundingMode.UP,
        "round up": DollarRoundingMode.UP,
        "d": DollarRoundingMode.DOWN,
        "down": DollarRoundingMode.DOWN,
        "round down": DollarRoundingMode.DOWN,
    }
    try:
        return aliases[key]
    except KeyError:
        raise ValueError("Rounding must be one of: none, up, down") from None


def parse_preset_assignment(text: str) -> Tuple[int, int]:
    """Parse ``N=VALUE`` (1-based slot) into a 0-based ``(index, value)`` pair."""
    if "=" not in text:
        raise ValueError("Preset edits look like 2=18 (slot=percent)")
    slot, value = text.split("=", 1)
    index = parse_int(slot, min_value=1) - 1
    percent = parse_int(value.replace("%", ""), min_value=0)
    return index, percent

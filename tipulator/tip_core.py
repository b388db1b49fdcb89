from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR, localcontext

from .formats import HUNDRED

# Upper bound on how far past the starting cent value the palindrome scan goes.
PALINDROME_SEARCH_LIMIT = 20000

# Bills above this are treated like an unreadable bill (all amounts zero).
MAX_BILL = Decimal("1e15")

# Working precision for the recompute; wide enough that bills up to MAX_BILL
# with any tip percentage stay exact.
COMPUTE_PRECISION = 60

_ZERO = Decimal("0")
_ONE = Decimal("1")


class DollarRoundingMode(str, enum.Enum):
    NONE = "none"
    UP = "up"
    DOWN = "down"

    @property
    def label(self) -> str:
        return {"none": "None", "up": "Round Up", "down": "Round Down"}[self.value]


@dataclass(frozen=True)
class TipResult:
    tip_amount: Decimal
    total_amount: Decimal
    amount_per_person: Decimal
    palindrome_adjustment: Decimal
    dollar_rounding_adjustment: Decimal
    is_palindrome_active: bool

    @classmethod
    def zero(cls) -> "TipResult":
        return cls(
            tip_amount=_ZERO,
            total_amount=_ZERO,
            amount_per_person=_ZERO,
            palindrome_adjustment=_ZERO,
            dollar_rounding_adjustment=_ZERO,
            is_palindrome_active=False,
        )


def round_to_dollar(amount: Decimal, mode: DollarRoundingMode) -> Decimal:
    """Round ``amount`` to a whole currency unit in the direction of ``mode``."""
    mode = DollarRoundingMode(mode)
    if mode is DollarRoundingMode.UP:
        return amount.quantize(_ONE, rounding=ROUND_CEILING)
    if mode is DollarRoundingMode.DOWN:
        return amount.quantize(_ONE, rounding=ROUND_FLOOR)
    raise ValueError("round_to_dollar needs an UP or DOWN rounding mode")


def is_palindrome_cents(cents: int) -> bool:
    digits = str(cents)
    return digits == digits[::-1]


def next_palindrome_cents(start_amount: Decimal) -> Decimal:
    """Return the first palindromic cent total at or above ``start_amount``.

    The scan works on whole cents, starting from the ceiling of
    ``start_amount * 100`` so the result never drops below the start. If no
    palindrome turns up within ``PALINDROME_SEARCH_LIMIT`` cents the start
    amount is returned unchanged.
    """
    start = int((start_amount * HUNDRED).to_integral_value(rounding=ROUND_CEILING))
    for cents in range(start, start + PALINDROME_SEARCH_LIMIT + 1):
        if is_palindrome_cents(cents):
            return Decimal(cents) / HUNDRED
    return start_amount


def compute_tip(
    *,
    bill: Decimal,
    tip_percent: Decimal,
    people: int,
    palindrome: bool = False,
    dollar_rounding: DollarRoundingMode = DollarRoundingMode.NONE,
) -> TipResult:
    """Compute tip, total and per-person share for one snapshot of inputs.

    Palindrome rounding and dollar rounding are exclusive: with
    ``palindrome`` set the dollar rounding mode is not consulted at all.
    Any rounding delta is folded into the tip. Bills above ``MAX_BILL``
    give the same all-zero result as a non-positive bill.
    """
    if bill <= 0 or bill > MAX_BILL:
        return TipResult.zero()

    with localcontext() as ctx:
        ctx.prec = COMPUTE_PRECISION
        return _compute(bill, tip_percent, people, palindrome, dollar_rounding)


def _compute(
    bill: Decimal,
    tip_percent: Decimal,
    people: int,
    palindrome: bool,
    dollar_rounding: DollarRoundingMode,
) -> TipResult:
    tip = bill * tip_percent / HUNDRED
    total = bill + tip
    palindrome_adjustment = _ZERO
    dollar_adjustment = _ZERO

    if palindrome:
        rounded = next_palindrome_cents(total)
        palindrome_adjustment = rounded - total
        tip += palindrome_adjustment
        total = rounded
    elif DollarRoundingMode(dollar_rounding) is not DollarRoundingMode.NONE:
        rounded = round_to_dollar(total, dollar_rounding)
        dollar_adjustment = rounded - total
        tip += dollar_adjustment
        total = rounded

    per_person = total / people if people > 0 else _ZERO

    return TipResult(
        tip_amount=tip,
        total_amount=total,
        amount_per_person=per_person,
        palindrome_adjustment=palindrome_adjustment,
        dollar_rounding_adjustment=dollar_adjustment,
        is_palindrome_active=bool(palindrome),
    )

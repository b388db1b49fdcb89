from __future__ import annotations

from decimal import Decimal, ROUND_HALF_EVEN, ROUND_HALF_UP
from typing import Optional

import pyperclip
from babel.core import UnknownLocaleError
from babel.numbers import format_currency as _babel_format_currency


# --- Money helpers & constants ---
CENT = Decimal("0.01")
HUNDRED = Decimal("100")
PERCENT_STEP = Decimal("0.01")  # display percent with up to 2 decimals


def quantize_amount(
    value: Decimal,
    *,
    step: Decimal = CENT,
    rounding: str = ROUND_HALF_EVEN,
) -> Decimal:
    """Quantize ``value`` to ``step`` (banker's rounding unless overridden)."""
    return value.quantize(step, rounding=rounding)


def to_cents(value: Decimal) -> Decimal:
    """Round a Decimal to two fractional digits using ROUND_HALF_UP."""
    return quantize_amount(value, rounding=ROUND_HALF_UP)


# --- Formatting ---
def currency_symbol(code: str) -> str:
    code = (code or "USD").upper()
    return {"USD": "$", "EUR": "€", "GBP": "£", "CAD": "C$"}.get(code, "$")


def fmt_money(
    value: Decimal,
    *,
    symbol: str = "$",
    currency: str = "USD",
    locale: Optional[str] = None,
) -> str:
    """Format money for display.

    - If a ``locale`` is provided, use Babel's locale-aware formatting
      (thousands separators, proper symbol placement).
    - Otherwise, or for a locale Babel does not know, use a simple
      symbol + 2-decimal format with commas.
    """
    amount = to_cents(value)
    if locale:
        try:
            return _babel_format_currency(amount, currency, locale=locale)
        except (UnknownLocaleError, ValueError):
            pass
    if amount < 0:
        return f"-{symbol}{-amount:,.2f}"
    return f"{symbol}{amount:,.2f}"


def fmt_signed_money(value: Decimal, **kwargs) -> str:
    """Like :func:`fmt_money` but always carries a sign, for adjustments."""
    if to_cents(value) < 0:
        return fmt_money(value, **kwargs)
    return "+" + fmt_money(value, **kwargs)


def fmt_percent(value: Decimal) -> str:
    """Format a percentage with up to two decimals, trimming zeros."""
    q = quantize_amount(value, step=PERCENT_STEP, rounding=ROUND_HALF_UP)
    return f"{q:.2f}".rstrip("0").rstrip(".")


def print_results(
    *,
    bill: Decimal,
    tip_percent: Decimal,
    tip: Decimal,
    total: Decimal,
    per_person: Decimal,
    people: int,
    palindrome_adjustment: Decimal = Decimal("0"),
    dollar_rounding_adjustment: Decimal = Decimal("0"),
    is_palindrome: bool = False,
    currency: str = "USD",
    locale: Optional[str] = None,
) -> str:
    sym = currency_symbol(currency)

    def money(value: Decimal) -> str:
        return fmt_money(value, symbol=sym, currency=currency, locale=locale)

    lines = ["\n--- Results ---"]
    lines.append(f"Bill: {money(bill)}")
    lines.append(f"Tip ({fmt_percent(tip_percent)}%): {money(tip)}")
    if is_palindrome:
        lines.append(
            "Palindrome adjustment: "
            + fmt_signed_money(palindrome_adjustment, symbol=sym, currency=currency, locale=locale)
        )
    elif to_cents(dollar_rounding_adjustment) != 0:
        lines.append(
            "Dollar rounding adjustment: "
            + fmt_signed_money(dollar_rounding_adjustment, symbol=sym, currency=currency, locale=locale)
        )
    lines.append(f"Total with tip: {money(total)}")
    if people > 1:
        lines.append(f"Each of {people} people pays: {money(per_person)}")
    else:
        lines.append(f"You pay: {money(per_person)}")
    return "\n".join(lines) + "\n"


# --- Data export helpers ---
CSV_COLUMNS = [
    "currency",
    "bill",
    "tip_percent",
    "tip",
    "palindrome",
    "palindrome_adjustment",
    "dollar_rounding",
    "dollar_rounding_adjustment",
    "total",
    "people",
    "per_person",
]


def results_to_dict(
    *,
    bill: Decimal,
    tip_percent: Decimal,
    tip: Decimal,
    total: Decimal,
    per_person: Decimal,
    people: int,
    palindrome_adjustment: Decimal,
    dollar_rounding: str,
    dollar_rounding_adjustment: Decimal,
    is_palindrome: bool,
    currency: str,
) -> dict:
    return {
        "currency": currency,
        "bill": f"{to_cents(bill):.2f}",
        "tip_percent": f"{tip_percent:.2f}",
        "tip": f"{to_cents(tip):.2f}",
        "palindrome": is_palindrome,
        "palindrome_adjustment": f"{to_cents(palindrome_adjustment):.2f}",
        "dollar_rounding": dollar_rounding,
        "dollar_rounding_adjustment": f"{to_cents(dollar_rounding_adjustment):.2f}",
        "total": f"{to_cents(total):.2f}",
        "people": people,
        "per_person": f"{to_cents(per_person):.2f}",
    }


def dict_to_csv_line(d: dict) -> str:
    row = {**d, "palindrome": "yes" if d.get("palindrome") else "no"}
    return ",".join(str(row.get(k, "")) for k in CSV_COLUMNS)


def copy_to_clipboard(text: str) -> bool:
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException:
        return False
    return True

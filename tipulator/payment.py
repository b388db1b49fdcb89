from __future__ import annotations

import enum
from decimal import Decimal
from pathlib import Path
from typing import Iterable, List, Optional, Sequence
from urllib.parse import quote

import segno

from .formats import currency_symbol, fmt_money, fmt_percent, to_cents


class QRGenerationError(RuntimeError):
    """Raised when QR code generation fails."""


class PaymentApp(str, enum.Enum):
    VENMO = "venmo"
    CASH_APP = "cashapp"
    ZELLE = "zelle"
    PAYPAL = "paypal"

    @property
    def label(self) -> str:
        return {
            "venmo": "Venmo",
            "cashapp": "Cash App",
            "zelle": "Zelle",
            "paypal": "PayPal",
        }[self.value]

    @property
    def url_scheme(self) -> str:
        return f"{self.value}://"


def _amount_text(amount: Decimal) -> str:
    return f"{to_cents(amount):.2f}"


def build_payment_link(app: PaymentApp, amount: Decimal, note: str) -> Optional[str]:
    """Deep link that opens ``app`` with ``amount`` pre-filled.

    None of the apps know the recipient, so the links only open a request
    screen. Zelle takes no link parameters and yields None.
    """
    app = PaymentApp(app)
    value = _amount_text(amount)
    encoded_note = quote(note, safe="")
    if app is PaymentApp.VENMO:
        return f"venmo://paycharge?txn=pay&amount={value}&note={encoded_note}"
    if app is PaymentApp.CASH_APP:
        return f"cashapp://cash.app?amount={value}&note={encoded_note}"
    if app is PaymentApp.PAYPAL:
        return f"paypal://sendmoney?amount={value}"
    return None


def payment_request_message(
    *,
    amount: Decimal,
    tip_percent: Decimal,
    total: Decimal,
    people: int,
    apps: Optional[Sequence[PaymentApp]] = None,
    currency: str = "USD",
    locale: Optional[str] = None,
) -> str:
    """Plain-text payment request suitable for an SMS or share sheet."""
    sym = currency_symbol(currency)
    lines: List[str] = ["Payment Request", ""]
    lines.append(f"Please send me {fmt_money(amount, symbol=sym, currency=currency, locale=locale)}")
    lines.append("")
    lines.append("Bill Details:")
    lines.append(f"- Total: {fmt_money(total, symbol=sym, currency=currency, locale=locale)}")
    lines.append(f"- Tip: {fmt_percent(tip_percent)}%")
    if people > 1:
        lines.append(f"- Split {people} ways")
    lines.append("")
    lines.append("You can pay via:")
    for app in apps or list(PaymentApp):
        lines.append(f"- {PaymentApp(app).label}")
    lines.append("")
    lines.append("Sent from Tipulator")
    return "\n".join(lines)


def _build_payload(provider: str, amount: Decimal, note: str) -> str:
    if provider.lower() == "generic":
        return f"PAYMENT:{_amount_text(amount)}:{note}"
    try:
        app = PaymentApp(provider.lower())
    except ValueError:
        raise QRGenerationError(f"Unsupported QR provider: {provider}") from None
    link = build_payment_link(app, amount, note)
    if link is None:
        raise QRGenerationError(f"{app.label} does not support payment links")
    return link


def generate_qr_codes(
    *,
    per_person: Iterable[Decimal],
    provider: str,
    note: str,
    directory: Path,
    scale: int = 5,
) -> List[Path]:
    payloads = [_build_payload(provider, share, f"{note} P{idx}") for idx, share in enumerate(per_person, 1)]
    directory.mkdir(parents=True, exist_ok=True)
    paths: List[Path] = []
    for idx, payload in enumerate(payloads, 1):
        try:
            qr = segno.make(payload)
        except segno.DataOverflowError as exc:
            raise QRGenerationError(f"Payment note is too long for a QR code: {exc}") from exc
        filename = directory / f"qr_person_{idx}.png"
        qr.save(str(filename), scale=scale)
        paths.append(filename)
    return paths

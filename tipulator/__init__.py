from .engine import TipEngine, TipRequest
from .formats import (
    CENT,
    HUNDRED,
    PERCENT_STEP,
    fmt_money,
    fmt_percent,
    print_results,
    quantize_amount,
    to_cents,
)
from .parsing import parse_bill, parse_int, parse_percentage
from .payment import (
    PaymentApp,
    QRGenerationError,
    build_payment_link,
    generate_qr_codes,
    payment_request_message,
)
from .presets import DEFAULT_PRESETS, JsonPresetStore, MemoryPresetStore, PresetError
from .tip_core import (
    MAX_BILL,
    PALINDROME_SEARCH_LIMIT,
    DollarRoundingMode,
    TipResult,
    compute_tip,
    next_palindrome_cents,
    round_to_dollar,
)

__all__ = [
    "TipEngine",
    "TipRequest",
    "TipResult",
    "DollarRoundingMode",
    "compute_tip",
    "round_to_dollar",
    "next_palindrome_cents",
    "PALINDROME_SEARCH_LIMIT",
    "MAX_BILL",
    "parse_bill",
    "parse_percentage",
    "parse_int",
    "CENT",
    "HUNDRED",
    "PERCENT_STEP",
    "to_cents",
    "quantize_amount",
    "fmt_money",
    "fmt_percent",
    "print_results",
    "DEFAULT_PRESETS",
    "JsonPresetStore",
    "MemoryPresetStore",
    "PresetError",
    "PaymentApp",
    "build_payment_link",
    "payment_request_message",
    "generate_qr_codes",
    "QRGenerationError",
]

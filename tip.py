from __future__ import annotations

# ruff: noqa: E402  # allow sys.path/bootstrap and docstring before imports

"""Public API and CLI entrypoint for Tipulator.

Re-exports the main API from `tipulator` so that

    import tip as tipmod

gives the engine and helpers in one place. Also provides `python tip.py` entry.
"""

import importlib.metadata as importlib_metadata
import sys

from tipulator import (
    CENT,
    DEFAULT_PRESETS,
    HUNDRED,
    MAX_BILL,
    PALINDROME_SEARCH_LIMIT,
    PERCENT_STEP,
    DollarRoundingMode,
    JsonPresetStore,
    MemoryPresetStore,
    PaymentApp,
    PresetError,
    QRGenerationError,
    TipEngine,
    TipRequest,
    TipResult,
    build_payment_link,
    compute_tip,
    fmt_money,
    fmt_percent,
    generate_qr_codes,
    next_palindrome_cents,
    parse_bill,
    parse_int,
    parse_percentage,
    payment_request_message,
    print_results,
    quantize_amount,
    round_to_dollar,
    to_cents,
)
from tipulator.cli import run_cli

try:
    _distribution_version = importlib_metadata.version("tipulator")
except importlib_metadata.PackageNotFoundError:
    __version__ = "0+unknown"
else:
    __version__ = _distribution_version or "0+unknown"

__all__ = [
    "__version__",
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
    "to_cents",
    "CENT",
    "HUNDRED",
    "PERCENT_STEP",
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
    "run_cli",
]

if __name__ == "__main__":
    sys.exit(run_cli())

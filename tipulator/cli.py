from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Callable, List, Optional, TypeVar

from .engine import TipEngine
from .formats import (
    copy_to_clipboard,
    dict_to_csv_line,
    fmt_percent,
    print_results,
    results_to_dict,
    CSV_COLUMNS,
)
from .parsing import (
    parse_int,
    parse_percentage,
    parse_preset_assignment,
    parse_rounding_mode,
)
from .payment import PaymentApp, QRGenerationError, generate_qr_codes, payment_request_message
from .presets import PRESET_COUNT, JsonPresetStore, PresetStore, is_valid_percent
from .tip_core import DollarRoundingMode

logger = logging.getLogger(__name__)

_TRUE_WORDS = {"1", "true", "yes", "on"}


@dataclass
class AppConfig:
    default_tip_percent: Decimal = Decimal("18")
    default_people: int = 1
    rounding: DollarRoundingMode = DollarRoundingMode.NONE
    palindrome: bool = False
    currency: str = "USD"
    locale: Optional[str] = None


def _apply_setting(cfg: AppConfig, key: str, value: object) -> None:
    key = key.lower()
    if key in {"default_tip_percent", "tip_default_percent"}:
        cfg.default_tip_percent = parse_percentage(str(value))
    elif key in {"default_people", "tip_default_people"}:
        cfg.default_people = parse_int(str(value), min_value=1)
    elif key in {"rounding", "tip_rounding"}:
        cfg.rounding = parse_rounding_mode(str(value))
    elif key in {"palindrome", "tip_palindrome"}:
        cfg.palindrome = value is True or str(value).strip().lower() in _TRUE_WORDS
    elif key in {"currency", "tip_currency"}:
        cfg.currency = str(value).upper()
    elif key in {"locale", "tip_locale"}:
        cfg.locale = str(value) or None


def load_config(path: Optional[str] = None) -> AppConfig:
    cfg = AppConfig()

    # JSON candidates
    json_candidates: List[Path] = []
    if path:
        json_candidates.append(Path(path).expanduser())
    json_candidates.append(Path.cwd() / "tipconfig.json")
    json_candidates.append(Path(__file__).with_name("tipconfig.json"))
    for p in json_candidates:
        if not p.is_file():
            continue
        try:
            data = json.loads(p.read_text())
        except (OSError, json.JSONDecodeError):
            logger.warning("Skipping unreadable config file %s", p)
            continue
        if isinstance(data, dict):
            for key, value in data.items():
                try:
                    _apply_setting(cfg, key, value)
                except (ValueError, InvalidOperation):
                    logger.warning("Ignoring bad config value %s=%r in %s", key, value, p)
        break

    # .env candidates
    env_candidates: List[Path] = [Path.cwd() / ".env", Path(__file__).with_name(".env")]
    for p in env_candidates:
        if not p.is_file():
            continue
        try:
            lines = p.read_text().splitlines()
        except OSError:
            logger.warning("Skipping unreadable env file %s", p)
            continue
        for line in lines:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            k, v = line.split("=", 1)
            k = k.strip().upper()
            if not k.startswith("TIP_"):
                continue
            try:
                _apply_setting(cfg, k, v.strip())
            except (ValueError, InvalidOperation):
                logger.warning("Ignoring bad %s in %s", k, p)
        break

    return cfg


T = TypeVar("T")


def prompt_loop(prompt: str, parser: Callable[[str], T]) -> T:
    while True:
        try:
            return parser(input(prompt))
        except ValueError as e:
            print(f"Error: {e}")


def yes_no(prompt: str, *, default_yes: bool = True) -> bool:
    suffix = "[Y/n]" if default_yes else "[y/N]"
    while True:
        ans = input(f"{prompt} {suffix} ").strip().lower()
        if not ans:
            return default_yes
        if ans in {"y", "yes"}:
            return True
        if ans in {"n", "no"}:
            return False
        print("Please answer 'y' or 'n'.")


def prompt_tip(engine: TipEngine) -> None:
    menu = "  ".join(f"[{i + 1}] {p}%" for i, p in enumerate(engine.presets))
    current = fmt_percent(engine.effective_percentage)
    while True:
        s = input(f"Tip: {menu}  [Enter={current}% or custom 0-50]: ").strip()
        if not s:
            return
        if s.isdigit() and 1 <= int(s) <= len(engine.presets):
            engine.select_preset(int(s) - 1)
            return
        try:
            percent = parse_percentage(s)
        except ValueError as e:
            print(f"Error: {e}")
            continue
        engine.clear_preset()
        engine.set_custom_percentage(percent)
        return


def prompt_adjustment(engine: TipEngine) -> None:
    prompt = "Adjust total: [N]one, [P]alindrome, round [U]p, round [D]own: "
    while True:
        ans = input(prompt).strip().lower()
        if ans in {"p", "palindrome"}:
            engine.set_palindrome(True)
            return
        try:
            mode = parse_rounding_mode(ans)
        except ValueError:
            print("Choose N, P, U or D.")
            continue
        engine.set_palindrome(False)
        engine.set_dollar_rounding(mode)
        return


def render_results(engine: TipEngine, *, currency: str, locale: Optional[str]) -> str:
    result = engine.result
    return print_results(
        bill=engine.bill_amount,
        tip_percent=engine.effective_percentage,
        tip=result.tip_amount,
        total=result.total_amount,
        per_person=result.amount_per_person,
        people=engine.people,
        palindrome_adjustment=result.palindrome_adjustment,
        dollar_rounding_adjustment=result.dollar_rounding_adjustment,
        is_palindrome=result.is_palindrome_active,
        currency=currency,
        locale=locale,
    )


def engine_to_dict(engine: TipEngine, *, currency: str) -> dict:
    result = engine.result
    return results_to_dict(
        bill=engine.bill_amount,
        tip_percent=engine.effective_percentage,
        tip=result.tip_amount,
        total=result.total_amount,
        per_person=result.amount_per_person,
        people=engine.people,
        palindrome_adjustment=result.palindrome_adjustment,
        dollar_rounding=engine.dollar_rounding_mode.value,
        dollar_rounding_adjustment=result.dollar_rounding_adjustment,
        is_palindrome=result.is_palindrome_active,
        currency=currency,
    )


def _maybe_generate_qr(engine: TipEngine, qr_options: Optional[dict]) -> None:
    if not qr_options:
        return
    per_person = [engine.amount_per_person] * max(1, engine.people)
    try:
        paths = generate_qr_codes(
            per_person=per_person,
            provider=qr_options["provider"],
            note=qr_options["note"],
            directory=qr_options["directory"],
            scale=qr_options["scale"],
        )
    except QRGenerationError as exc:
        print(f"QR generation failed: {exc}", file=sys.stderr)
        return
    print(f"Saved {len(paths)} QR code(s) to {qr_options['directory']}")


def run_interactive(
    engine: TipEngine,
    *,
    currency: str,
    locale: Optional[str],
    qr_options: Optional[dict] = None,
) -> None:
    print("--- Tipulator ---")
    while True:
        engine.set_bill_text(input("Bill amount: $"))
        if engine.bill_amount <= 0:
            print("Bill reads as $0.00; enter an amount like 42.50.")
            continue
        prompt_tip(engine)
        default_people = engine.people
        people: int = prompt_loop(
            f"Split between how many people? [{default_people}]: ",
            lambda s: default_people if not s.strip() else parse_int(s, min_value=1),
        )
        engine.set_people(people)
        prompt_adjustment(engine)
        print(render_results(engine, currency=currency, locale=locale))
        _maybe_generate_qr(engine, qr_options)

        if not yes_no("Calculate another tip?", default_yes=False):
            break


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Tip calculator with bill splitting, palindrome totals and whole-dollar rounding."
    )
    parser.add_argument("--bill", help="Bill amount, e.g. 1,234.56")
    tip_source = parser.add_mutually_exclusive_group()
    tip_source.add_argument("--tip", default=None, help="Custom tip percentage 0-50, e.g. 18 or 18.5%%")
    tip_source.add_argument("--preset", type=int, default=None, help="Use preset slot 1-4 for the tip percentage")
    parser.add_argument("--people", type=int, default=None, help="Number of people to split between (>=1). Default: config or 1")
    parser.add_argument("--palindrome", action="store_true", help="Raise the total to the next palindromic cent amount")
    parser.add_argument("--round", choices=["none", "up", "down"], default=None, help="Round the total to a whole dollar (ignored with --palindrome)")
    parser.add_argument("--set-preset", action="append", default=[], metavar="SLOT=PERCENT", help="Store a new preset value, e.g. 2=18 (repeatable)")
    parser.add_argument("--show-presets", action="store_true", help="Print the stored tip presets and exit")
    parser.add_argument("--presets-file", help="Preset JSON file (default: $TIP_PRESETS_PATH or ./tip_presets.json)")
    parser.add_argument("--request", action="store_true", help="Append a payment request message for the per-person amount")
    parser.add_argument("--qr", action="store_true", help="Generate per-person payment QR codes")
    parser.add_argument("--qr-app", choices=["venmo", "cashapp", "paypal", "generic"], default="venmo", help="Payment app the QR codes link to")
    parser.add_argument("--qr-dir", default="qr_codes", help="Directory to write QR code PNG files")
    parser.add_argument("--qr-note", default="Tipulator split", help="Note text embedded in the QR payload")
    parser.add_argument("--qr-scale", type=int, default=5, help="Pixel scale for generated QR images")
    parser.add_argument("--config", help="Path to JSON config with default_tip_percent, default_people, rounding, palindrome")
    parser.add_argument("--currency", choices=["USD", "EUR", "GBP", "CAD"], default=None, help="Currency for display and symbol")
    parser.add_argument("--locale", help="Locale for formatting (e.g., en_US)")
    parser.add_argument("--json", action="store_true", help="Output results as JSON")
    parser.add_argument("--csv", action="store_true", help="Output results as CSV")
    parser.add_argument("--copy", action="store_true", help="Copy the output to clipboard")
    parser.add_argument("--interactive", action="store_true", help="Force interactive mode regardless of provided flags.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log calculation details to stderr")
    return parser


def build_engine(config: AppConfig, store: PresetStore) -> TipEngine:
    engine = TipEngine(store, default_percent=int(config.default_tip_percent))
    if engine.effective_percentage != config.default_tip_percent:
        engine.clear_preset()
        engine.set_custom_percentage(config.default_tip_percent)
    engine.set_people(config.default_people)
    engine.set_palindrome(config.palindrome)
    engine.set_dollar_rounding(config.rounding)
    return engine


def run_cli(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )

    config = load_config(args.config)
    store = JsonPresetStore(Path(args.presets_file) if args.presets_file else None)
    engine = build_engine(config, store)
    currency = args.currency or config.currency
    locale_value = args.locale or config.locale

    for assignment in args.set_preset:
        try:
            index, value = parse_preset_assignment(assignment)
        except ValueError as e:
            parser.error(f"--set-preset: {e}")
        if not 0 <= index < PRESET_COUNT or not is_valid_percent(value):
            print(f"Ignored preset edit {assignment}: slots are 1-4 and values 0-50.", file=sys.stderr)
            continue
        engine.update_preset(index, value)

    if args.show_presets or (args.set_preset and args.bill is None and not args.interactive):
        print("Presets: " + "  ".join(f"[{i + 1}] {p}%" for i, p in enumerate(engine.presets)))
        return 0

    qr_options: Optional[dict] = None
    if args.qr:
        qr_options = {
            "provider": args.qr_app,
            "note": args.qr_note,
            "directory": Path(args.qr_dir),
            "scale": max(1, args.qr_scale),
        }

    try:
        if args.preset is not None:
            if not 1 <= args.preset <= len(engine.presets):
                raise ValueError(f"--preset must be between 1 and {len(engine.presets)}")
            engine.select_preset(args.preset - 1)
        if args.tip is not None:
            engine.clear_preset()
            engine.set_custom_percentage(parse_percentage(args.tip))
        if args.people is not None:
            engine.set_people(parse_int(str(args.people), min_value=1))
        if args.palindrome:
            engine.set_palindrome(True)
        if args.round is not None:
            if args.palindrome and args.round != "none":
                print("Warning: --round is ignored when --palindrome is set.", file=sys.stderr)
            elif not args.palindrome:
                engine.set_palindrome(False)
            engine.set_dollar_rounding(parse_rounding_mode(args.round))
    except ValueError as e:
        parser.error(str(e))
        return 2

    if args.interactive or args.bill is None:
        try:
            run_interactive(engine, currency=currency, locale=locale_value, qr_options=qr_options)
            return 0
        except (KeyboardInterrupt, EOFError):
            print("\nGoodbye!")
            return 0

    engine.set_bill_text(args.bill)
    if engine.bill_amount <= 0:
        print(f"Warning: bill '{args.bill}' reads as zero; all amounts are 0.", file=sys.stderr)

    if args.json:
        out = json.dumps(engine_to_dict(engine, currency=currency))
    elif args.csv:
        out = ",".join(CSV_COLUMNS) + "\n" + dict_to_csv_line(engine_to_dict(engine, currency=currency))
    else:
        out = render_results(engine, currency=currency, locale=locale_value)
    if args.request:
        out += "\n" + payment_request_message(
            amount=engine.amount_per_person,
            tip_percent=engine.effective_percentage,
            total=engine.total_amount,
            people=engine.people,
            apps=list(PaymentApp),
            currency=currency,
            locale=locale_value,
        )
    print(out)
    if qr_options:
        _maybe_generate_qr(engine, qr_options)
    if args.copy:
        if not copy_to_clipboard(out):
            print("(Could not copy to clipboard on this system)", file=sys.stderr)
    return 0

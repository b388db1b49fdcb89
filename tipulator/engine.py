from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Union

from .parsing import parse_bill
from .presets import (
    MAX_PERCENT,
    MIN_PERCENT,
    MemoryPresetStore,
    PresetError,
    PresetStore,
    is_valid_percent,
    load_presets,
)
from .tip_core import DollarRoundingMode, TipResult, compute_tip

logger = logging.getLogger(__name__)

Number = Union[Decimal, int, float, str]

DEFAULT_TIP_PERCENT = 18


@dataclass(frozen=True)
class TipRequest:
    bill_text: str
    tip_percentage_selected: Optional[int]
    tip_percentage_custom: Decimal
    people_count: int
    palindrome_enabled: bool
    dollar_rounding_mode: DollarRoundingMode


class TipEngine:
    """Holds the calculator inputs and keeps the result current.

    Every setter recomputes before returning, so ``result`` always reflects
    the latest inputs. The tip percentage comes from one of two sources: the
    selected preset slot, or the custom value when no slot is selected.
    """

    def __init__(
        self,
        store: Optional[PresetStore] = None,
        *,
        default_percent: int = DEFAULT_TIP_PERCENT,
    ) -> None:
        self._store: PresetStore = store if store is not None else MemoryPresetStore()
        self._presets: List[int] = load_presets(self._store)
        self._bill_text = ""
        self._cached_bill: Optional[Decimal] = None
        self._selected: Optional[int] = None
        self._custom = _clamp_percent(Decimal(default_percent))
        self._people = 1
        self._palindrome = False
        self._dollar_mode = DollarRoundingMode.NONE
        self._result = TipResult.zero()
        if default_percent in self._presets:
            self._selected = self._presets.index(default_percent)
        self._recompute()

    # --- inputs ---
    @property
    def bill_text(self) -> str:
        return self._bill_text

    @property
    def bill_amount(self) -> Decimal:
        if self._cached_bill is None:
            self._cached_bill = parse_bill(self._bill_text)
        return self._cached_bill

    @property
    def presets(self) -> List[int]:
        return list(self._presets)

    @property
    def selected_preset(self) -> Optional[int]:
        """Index of the selected preset slot, or None when the custom value rules."""
        return self._selected

    @property
    def selected_percentage(self) -> Optional[int]:
        if self._selected is None:
            return None
        return self._presets[self._selected]

    @property
    def custom_percentage(self) -> Decimal:
        return self._custom

    @property
    def effective_percentage(self) -> Decimal:
        selected = self.selected_percentage
        if selected is not None:
            return Decimal(selected)
        return self._custom

    @property
    def people(self) -> int:
        return self._people

    @property
    def palindrome_enabled(self) -> bool:
        return self._palindrome

    @property
    def dollar_rounding_mode(self) -> DollarRoundingMode:
        return self._dollar_mode

    @property
    def request(self) -> TipRequest:
        return TipRequest(
            bill_text=self._bill_text,
            tip_percentage_selected=self.selected_percentage,
            tip_percentage_custom=self._custom,
            people_count=self._people,
            palindrome_enabled=self._palindrome,
            dollar_rounding_mode=self._dollar_mode,
        )

    # --- outputs ---
    @property
    def result(self) -> TipResult:
        return self._result

    @property
    def tip_amount(self) -> Decimal:
        return self._result.tip_amount

    @property
    def total_amount(self) -> Decimal:
        return self._result.total_amount

    @property
    def amount_per_person(self) -> Decimal:
        return self._result.amount_per_person

    @property
    def palindrome_adjustment(self) -> Decimal:
        return self._result.palindrome_adjustment

    @property
    def dollar_rounding_adjustment(self) -> Decimal:
        return self._result.dollar_rounding_adjustment

    @property
    def is_palindrome(self) -> bool:
        return self._result.is_palindrome_active

    # --- setters ---
    def set_bill_text(self, text: str) -> TipResult:
        text = text or ""
        if text != self._bill_text:
            self._bill_text = text
            self._cached_bill = None
        return self._recompute()

    def select_preset(self, index: int) -> TipResult:
        """Make preset slot ``index`` authoritative and snap the custom value to it."""
        if not 0 <= index < len(self._presets):
            logger.debug("Ignoring selection of preset slot %s", index)
            return self._result
        self._selected = index
        self._custom = Decimal(self._presets[index])
        return self._recompute()

    def clear_preset(self) -> TipResult:
        self._selected = None
        return self._recompute()

    def set_custom_percentage(self, value: Number) -> TipResult:
        """Move the custom value; a value off the selected preset deselects it."""
        try:
            percent = Decimal(str(value))
        except ArithmeticError:
            percent = None
        if percent is None or not percent.is_finite():
            logger.debug("Ignoring custom percentage %r", value)
            return self._result
        self._custom = _clamp_percent(percent)
        selected = self.selected_percentage
        if selected is not None and int(self._custom) != selected:
            self._selected = None
        return self._recompute()

    def set_people(self, people: int) -> TipResult:
        self._people = int(people)
        return self._recompute()

    def set_palindrome(self, enabled: bool) -> TipResult:
        self._palindrome = bool(enabled)
        if self._palindrome:
            self._dollar_mode = DollarRoundingMode.NONE
        return self._recompute()

    def set_dollar_rounding(self, mode: DollarRoundingMode) -> TipResult:
        mode = DollarRoundingMode(mode)
        if self._palindrome and mode is not DollarRoundingMode.NONE:
            logger.debug("Palindrome rounding is on; ignoring dollar rounding %s", mode.value)
            return self._result
        self._dollar_mode = mode
        return self._recompute()

    def update_preset(self, index: int, value: int) -> TipResult:
        """Store a new value in preset slot ``index`` and persist the list.

        Out-of-range slots or values are ignored. When the edited slot is the
        selected one, the effective percentage follows the new value.
        """
        if not 0 <= index < len(self._presets) or not is_valid_percent(value):
            logger.debug("Ignoring preset update %s -> %r", index, value)
            return self._result
        self._presets[index] = value
        try:
            self._store.save(list(self._presets))
        except PresetError as exc:
            logger.warning("Could not persist presets: %s", exc)
        if self._selected == index:
            self._custom = Decimal(value)
        return self._recompute()

    def _recompute(self) -> TipResult:
        self._result = compute_tip(
            bill=self.bill_amount,
            tip_percent=self.effective_percentage,
            people=self._people,
            palindrome=self._palindrome,
            dollar_rounding=self._dollar_mode,
        )
        logger.debug(
            "Recomputed tip=%s total=%s per_person=%s",
            self._result.tip_amount,
            self._result.total_amount,
            self._result.amount_per_person,
        )
        return self._result


def _clamp_percent(value: Decimal) -> Decimal:
    return max(Decimal(MIN_PERCENT), min(Decimal(MAX_PERCENT), value))

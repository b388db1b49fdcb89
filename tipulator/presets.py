from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Protocol

logger = logging.getLogger(__name__)

PRESET_FILENAME = "tip_presets.json"
PRESET_KEY = "preset_percentages"
PRESET_COUNT = 4
MIN_PERCENT = 0
MAX_PERCENT = 50
DEFAULT_PRESETS = (10, 18, 20, 22)


class PresetError(RuntimeError):
    """Raised when the preset list cannot be written."""


class PresetStore(Protocol):
    def load(self) -> List[int]:
        ...

    def save(self, presets: List[int]) -> None:
        ...


def default_presets() -> List[int]:
    return list(DEFAULT_PRESETS)


def is_valid_percent(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and MIN_PERCENT <= value <= MAX_PERCENT


def validate_presets(values: object) -> Optional[List[int]]:
    """Return ``values`` as a preset list, or None if it is not one."""
    if not isinstance(values, (list, tuple)) or len(values) != PRESET_COUNT:
        return None
    if not all(is_valid_percent(v) for v in values):
        return None
    return list(values)


class MemoryPresetStore:
    """Keeps presets in memory; used when nothing is persisted."""

    def __init__(self, presets: Optional[List[int]] = None) -> None:
        self.saved: Optional[List[int]] = list(presets) if presets is not None else None

    def load(self) -> List[int]:
        return validate_presets(self.saved) or default_presets()

    def save(self, presets: List[int]) -> None:
        self.saved = list(presets)


class JsonPresetStore:
    """Presets kept under a single key in a small JSON file."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        if self._path is not None:
            return Path(self._path).expanduser()
        override = os.environ.get("TIP_PRESETS_PATH")
        if override:
            return Path(override).expanduser()
        return Path.cwd() / PRESET_FILENAME

    def load(self) -> List[int]:
        path = self.path
        if not path.is_file():
            return default_presets()
        try:
            data = json.loads(path.read_text())
        except (OSError, json.JSONDecodeError):
            logger.warning("Unreadable preset file %s; using defaults", path)
            return default_presets()
        presets = validate_presets(data.get(PRESET_KEY)) if isinstance(data, dict) else None
        if presets is None:
            logger.warning("Malformed preset list in %s; using defaults", path)
            return default_presets()
        return presets

    def save(self, presets: List[int]) -> None:
        path = self.path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps({PRESET_KEY: list(presets)}, indent=2, sort_keys=True))
        except OSError as exc:
            raise PresetError(f"Failed to write presets file: {path}") from exc


def load_presets(store: PresetStore) -> List[int]:
    """Load presets from ``store``, falling back to the defaults."""
    return validate_presets(store.load()) or default_presets()

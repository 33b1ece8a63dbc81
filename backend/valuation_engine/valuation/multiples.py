"""
multiples.py — Industry Multiple Reference Data

Purpose:
- Model the industry multiple reference table: per key, a base band and an
  optional premium band of EBITDA multiples.
- Load the table from its JSON file, validating every entry.
- Expose the configured table as a process-wide, read-only object.

JSON format:
{
  "238160": {
    "industry": "Roofing Contractors",
    "base_range": {"min": 5.9, "max": 8.4},
    "premium_range": {"min": 8.5, "max": 11.0},
    "notes": "..."
  },
  ...
}

Keys may be full NAICS codes, truncated (4-digit) codes, composite sector
keys ("31-33") or free-text industry keys ("technology").

Any failure to read or validate the file raises ReferenceDataError; there is
no partial load.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Union

from valuation_engine.core.config import settings
from valuation_engine.core.exceptions import ReferenceDataError
from valuation_engine.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class MultipleBand:
    """An EBITDA multiple band, min <= max, both strictly positive."""
    min: float
    max: float

    def interpolate(self, t: float) -> float:
        """Linear interpolation at t, clamped to [0, 1]."""
        t = min(max(t, 0.0), 1.0)
        # float rounding must not push the result past either edge
        return min(max(self.min + (self.max - self.min) * t, self.min), self.max)

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


@dataclass(frozen=True)
class IndustryMultiple:
    """Reference entry for one table key."""
    base_range: MultipleBand
    premium_range: Optional[MultipleBand] = None
    industry: str = ""
    notes: str = ""


class MultipleTable(Mapping[str, IndustryMultiple]):
    """
    Immutable mapping of table key -> IndustryMultiple.

    Built once and shared read-only; tests inject synthetic tables via
    MultipleTable.from_dict().
    """

    def __init__(self, entries: Mapping[str, IndustryMultiple], source: str = "<memory>"):
        self._entries = MappingProxyType(dict(entries))
        self.source = source

    def __getitem__(self, key: str) -> IndustryMultiple:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"MultipleTable(source={self.source!r}, entries={len(self)})"

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], source: str = "<memory>") -> "MultipleTable":
        """
        Build a table from the JSON-shaped mapping.

        Raises:
            ReferenceDataError: the mapping or any entry is malformed
        """
        if not isinstance(raw, Mapping):
            raise ReferenceDataError(source, f"expected a JSON object, got {type(raw).__name__}")

        entries: Dict[str, IndustryMultiple] = {}
        for key, entry in raw.items():
            entries[str(key).strip()] = _parse_entry(source, str(key), entry)
        return cls(entries, source=source)


def _parse_band(source: str, key: str, name: str, raw: Any) -> MultipleBand:
    if not isinstance(raw, Mapping) or "min" not in raw or "max" not in raw:
        raise ReferenceDataError(source, f"entry {key!r}: {name} must have min and max")
    try:
        low = float(raw["min"])
        high = float(raw["max"])
    except (TypeError, ValueError):
        raise ReferenceDataError(source, f"entry {key!r}: {name} min/max must be numbers")
    if low <= 0 or high < low:
        raise ReferenceDataError(
            source, f"entry {key!r}: {name} must satisfy 0 < min <= max, got {low}..{high}"
        )
    return MultipleBand(min=low, max=high)


def _parse_entry(source: str, key: str, raw: Any) -> IndustryMultiple:
    if not isinstance(raw, Mapping):
        raise ReferenceDataError(source, f"entry {key!r} must be an object")
    if "base_range" not in raw:
        raise ReferenceDataError(source, f"entry {key!r} is missing base_range")

    premium_raw = raw.get("premium_range")
    return IndustryMultiple(
        base_range=_parse_band(source, key, "base_range", raw["base_range"]),
        premium_range=(
            _parse_band(source, key, "premium_range", premium_raw)
            if premium_raw is not None else None
        ),
        industry=str(raw.get("industry") or ""),
        notes=str(raw.get("notes") or ""),
    )


def load_multiple_table(path: Union[str, Path]) -> MultipleTable:
    """
    Load and validate the multiple table from a JSON file.

    Args:
        path: Path to the JSON reference table

    Returns:
        MultipleTable

    Raises:
        ReferenceDataError: the file is missing, unreadable, not JSON, or malformed
    """
    path = Path(path)
    source = str(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        logger.error("Multiple table not found at %s", source)
        raise ReferenceDataError(source, "file not found")
    except OSError as e:
        logger.error("Multiple table at %s could not be read: %s", source, e)
        raise ReferenceDataError(source, f"unreadable: {e}")
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error("Multiple table at %s is not valid JSON: %s", source, e)
        raise ReferenceDataError(source, f"invalid JSON: {e}")

    try:
        table = MultipleTable.from_dict(raw, source=source)
    except ReferenceDataError as e:
        logger.error("Multiple table at %s is malformed: %s", source, e.reason)
        raise

    logger.info("Loaded %d industry multiple entries from %s", len(table), source)
    return table


@lru_cache(maxsize=None)
def _load_cached(path: str) -> MultipleTable:
    return load_multiple_table(path)


def get_multiple_table(path: Optional[Union[str, Path]] = None) -> MultipleTable:
    """
    Return the process-wide multiple table, loading it on first use.

    Args:
        path: Override path; defaults to settings.VALUATION_MULTIPLES_PATH

    Failed loads are not cached, so a caller may retry after fixing the file.
    """
    resolved = Path(path) if path is not None else Path(settings.VALUATION_MULTIPLES_PATH)
    return _load_cached(str(resolved.resolve()))

"""
multiple_resolver.py — Industry Multiple Resolver

Purpose:
- Turn an industry context (NAICS code and/or free-text description) plus a
  performance score into one EBITDA multiple.

Resolution order (first strategy returning a result wins):
1. ExactMatchStrategy: code, then free-text key, in the table
2. TruncatedCodeStrategy: code truncated to 4 digits, in the table
3. SectorDefaultStrategy: composite sector key ("31-33", "44-45", "48-49")
4. SectorHeuristicStrategy: 2-digit sector base multiplier x performance multiplier
5. Default multiple: no industry information at all

Band selection for table matches (steps 1-3):
- score >= 4.0 -> premium band, t = (score - 4.0) / 1.0
- score <  4.0 -> base band,    t = score / 3.9
- multiple = band.min + (band.max - band.min) * clamp(t, 0, 1)

The 4.0 threshold and the 1.0 / 3.9 denominators are fixed constants. The
jump at exactly 4.0 is expected by report generation.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from valuation_engine.core.config import settings
from valuation_engine.core.logging import get_logger
from valuation_engine.valuation.multiples import IndustryMultiple, MultipleTable, get_multiple_table

logger = get_logger(__name__)

PREMIUM_THRESHOLD = 4.0
PREMIUM_SPAN = 1.0
BASE_SPAN = 3.9
TRUNCATED_CODE_LENGTH = 4
_WHOLE_CODE = re.compile(r"\d+\.0+")

# NAICS sectors published as a range of 2-digit prefixes
COMPOSITE_SECTORS: Mapping[str, str] = MappingProxyType({
    "31": "31-33",
    "32": "31-33",
    "33": "31-33",
    "44": "44-45",
    "45": "44-45",
    "48": "48-49",
    "49": "48-49",
})

# Conservative base multipliers per 2-digit NAICS sector
SECTOR_BASE_MULTIPLIERS: Mapping[str, float] = MappingProxyType({
    "11": 3.0,  # Agriculture
    "21": 4.0,  # Mining
    "22": 5.0,  # Utilities
    "23": 4.0,  # Construction
    "31": 4.5,  # Manufacturing
    "32": 4.5,  # Manufacturing
    "33": 4.5,  # Manufacturing
    "42": 3.5,  # Wholesale Trade
    "44": 3.0,  # Retail Trade
    "45": 3.0,  # Retail Trade
    "48": 3.5,  # Transportation
    "49": 3.5,  # Transportation
    "51": 7.0,  # Information/Tech
    "52": 6.0,  # Finance
    "53": 5.0,  # Real Estate
    "54": 6.5,  # Professional Services
    "55": 5.5,  # Management
    "56": 4.0,  # Administrative
    "61": 4.5,  # Educational
    "62": 5.5,  # Healthcare
    "71": 3.5,  # Arts/Entertainment
    "72": 3.0,  # Accommodation/Food
    "81": 3.5,  # Other Services
    "92": 4.0,  # Public Administration
})
UNKNOWN_SECTOR_MULTIPLIER = 4.0

# Description keywords -> sector, checked in order (first hit wins)
DESCRIPTION_SECTOR_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("software", "51"),
    ("technology", "51"),
    ("health", "62"),
    ("medical", "62"),
    ("dental", "62"),
    ("manufactur", "31"),
    ("construction", "23"),
    ("contractor", "23"),
    ("retail", "44"),
    ("wholesale", "42"),
    ("distribution", "42"),
    ("transport", "48"),
    ("logistics", "48"),
    ("trucking", "48"),
    ("restaurant", "72"),
    ("hospitality", "72"),
    ("real estate", "53"),
    ("insurance", "52"),
    ("financ", "52"),
    ("education", "61"),
    ("agricultur", "11"),
    ("farm", "11"),
    ("professional", "54"),
    ("consulting", "54"),
    ("accounting", "54"),
    ("services", "81"),
)

# (lower bound, multiplier), checked top-down; below 2.5 is discounted
PERFORMANCE_MULTIPLIERS: Tuple[Tuple[float, float], ...] = (
    (4.5, 1.5),
    (4.0, 1.3),
    (3.5, 1.1),
)
LOW_PERFORMANCE_THRESHOLD = 2.5
LOW_PERFORMANCE_MULTIPLIER = 0.8


class MultipleSource(str, Enum):
    """Which resolution step produced the multiple."""

    EXACT = "exact"
    TRUNCATED_CODE = "truncated_code"
    SECTOR_DEFAULT = "sector_default"
    SECTOR_HEURISTIC = "sector_heuristic"
    DEFAULT = "default"


@dataclass(frozen=True)
class IndustryKey:
    """
    Industry context reduced to lookup keys.

    Attributes:
        code: Classification code with surrounding whitespace removed, or None
        description_key: Lower-cased, whitespace-collapsed description, or None
    """
    code: Optional[str]
    description_key: Optional[str]

    @property
    def is_hierarchical(self) -> bool:
        """NAICS-style numeric code of at least sector length."""
        return bool(self.code) and self.code.isdigit() and len(self.code) >= 2

    @property
    def sector(self) -> Optional[str]:
        return self.code[:2] if self.is_hierarchical else None

    @property
    def is_empty(self) -> bool:
        return not self.code and not self.description_key

    @classmethod
    def from_context(cls, industry: Any) -> "IndustryKey":
        """
        Build keys from an IndustryContext, a mapping, or None.

        Mappings may use naics_code/naicsCode/code and
        description/industry/industryDescription.
        """
        if industry is None:
            return cls(code=None, description_key=None)
        if isinstance(industry, Mapping):
            code = _first_present(industry, ("naics_code", "naicsCode", "code"))
            description = _first_present(industry, ("description", "industry", "industryDescription"))
        else:
            code = getattr(industry, "naics_code", None)
            description = getattr(industry, "description", None)
        return cls(code=clean_industry_code(code), description_key=normalize_description(description))


def _first_present(source: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        value = source.get(key)
        if value not in (None, ""):
            return value
    return None


def clean_industry_code(code: Any) -> Optional[str]:
    """NAICS code as text; whole-number floats and "238160.0" strings lose the fraction."""
    if code is None or isinstance(code, bool):
        return None
    if isinstance(code, float) and code.is_integer():
        return str(int(code))
    cleaned = str(code).strip()
    if _WHOLE_CODE.fullmatch(cleaned):
        cleaned = cleaned.split(".", 1)[0]
    return cleaned or None


def normalize_description(description: Any) -> Optional[str]:
    """Lower-case a free-text industry description and collapse whitespace."""
    if not isinstance(description, str):
        return None
    collapsed = re.sub(r"\s+", " ", description).strip().lower()
    return collapsed or None


@dataclass(frozen=True)
class MultipleResolution:
    """
    Result of multiple resolution.

    Attributes:
        multiple: Resolved EBITDA multiple (strictly positive)
        source: Resolution step that produced it
        matched_key: Table key or sector prefix used, None for the fixed default
        band: "premium" or "base" for table matches, None otherwise
        industry: Industry name of the matched table entry, if any
    """
    multiple: float
    source: MultipleSource
    matched_key: Optional[str] = None
    band: Optional[str] = None
    industry: str = ""


def interpolate_entry(entry: IndustryMultiple, avg_score: float) -> Tuple[float, str]:
    """
    Select the band for a score and interpolate within it.

    Returns:
        (multiple, band name). Entries without a premium band always use the
        base band with the base normalization.
    """
    if avg_score >= PREMIUM_THRESHOLD and entry.premium_range is not None:
        t = (avg_score - PREMIUM_THRESHOLD) / PREMIUM_SPAN
        return entry.premium_range.interpolate(t), "premium"
    t = avg_score / BASE_SPAN
    return entry.base_range.interpolate(t), "base"


def performance_multiplier(avg_score: float) -> float:
    """Heuristic adjustment applied on top of a sector base multiplier."""
    for lower_bound, multiplier in PERFORMANCE_MULTIPLIERS:
        if avg_score >= lower_bound:
            return multiplier
    if avg_score < LOW_PERFORMANCE_THRESHOLD:
        return LOW_PERFORMANCE_MULTIPLIER
    return 1.0


# -----------------------------------------------------------------------------
# Strategies
# -----------------------------------------------------------------------------

class BaseMultipleStrategy(ABC):
    """One step of the resolution order."""

    source: MultipleSource

    @abstractmethod
    def resolve(
        self,
        key: IndustryKey,
        avg_score: float,
        table: MultipleTable,
    ) -> Optional[MultipleResolution]:
        """Return a resolution, or None to pass to the next strategy."""

    def _from_entry(self, table: MultipleTable, table_key: str, avg_score: float) -> MultipleResolution:
        entry = table[table_key]
        multiple, band = interpolate_entry(entry, avg_score)
        return MultipleResolution(
            multiple=multiple,
            source=self.source,
            matched_key=table_key,
            band=band,
            industry=entry.industry,
        )


class ExactMatchStrategy(BaseMultipleStrategy):
    """Exact classification code, then exact free-text industry key."""

    source = MultipleSource.EXACT

    def resolve(self, key, avg_score, table):
        for candidate in (key.code, key.description_key):
            if candidate and candidate in table:
                return self._from_entry(table, candidate, avg_score)
        return None


class TruncatedCodeStrategy(BaseMultipleStrategy):
    """Hierarchical code truncated to its 4-digit industry group."""

    source = MultipleSource.TRUNCATED_CODE

    def __init__(self, length: int = TRUNCATED_CODE_LENGTH):
        self.length = length

    def resolve(self, key, avg_score, table):
        if not key.is_hierarchical or len(key.code) <= self.length:
            return None
        prefix = key.code[:self.length]
        if prefix in table:
            return self._from_entry(table, prefix, avg_score)
        return None


class SectorDefaultStrategy(BaseMultipleStrategy):
    """Default band of a composite NAICS sector."""

    source = MultipleSource.SECTOR_DEFAULT

    def __init__(self, composite_sectors: Mapping[str, str] = COMPOSITE_SECTORS):
        self.composite_sectors = composite_sectors

    def resolve(self, key, avg_score, table):
        sector_key = self.composite_sectors.get(key.sector) if key.sector else None
        if sector_key and sector_key in table:
            return self._from_entry(table, sector_key, avg_score)
        return None


class SectorHeuristicStrategy(BaseMultipleStrategy):
    """
    Hard-coded sector base multiplier times a performance multiplier.

    Applies to any context carrying a code or description; description-only
    contexts map to a sector through DESCRIPTION_SECTOR_KEYWORDS.
    """

    source = MultipleSource.SECTOR_HEURISTIC

    def __init__(
        self,
        sector_multipliers: Mapping[str, float] = SECTOR_BASE_MULTIPLIERS,
        unknown_sector_multiplier: float = UNKNOWN_SECTOR_MULTIPLIER,
        keywords: Sequence[Tuple[str, str]] = DESCRIPTION_SECTOR_KEYWORDS,
    ):
        self.sector_multipliers = sector_multipliers
        self.unknown_sector_multiplier = unknown_sector_multiplier
        self.keywords = keywords

    def _sector_for(self, key: IndustryKey) -> Optional[str]:
        if key.sector:
            return key.sector
        if key.description_key:
            for keyword, sector in self.keywords:
                if keyword in key.description_key:
                    return sector
        return None

    def resolve(self, key, avg_score, table):
        if key.is_empty:
            return None
        sector = self._sector_for(key)
        base = self.sector_multipliers.get(sector, self.unknown_sector_multiplier)
        return MultipleResolution(
            multiple=base * performance_multiplier(avg_score),
            source=self.source,
            matched_key=sector,
        )


def default_strategies() -> List[BaseMultipleStrategy]:
    return [
        ExactMatchStrategy(),
        TruncatedCodeStrategy(),
        SectorDefaultStrategy(),
        SectorHeuristicStrategy(),
    ]


# -----------------------------------------------------------------------------
# Resolver
# -----------------------------------------------------------------------------

class MultipleResolver:
    """
    Ordered strategy chain over an injected, read-only multiple table.

    Stateless after construction; one instance may serve concurrent callers.
    """

    def __init__(
        self,
        table: MultipleTable,
        strategies: Optional[Sequence[BaseMultipleStrategy]] = None,
        default_multiple: Optional[float] = None,
    ):
        self.table = table
        self.strategies: Tuple[BaseMultipleStrategy, ...] = tuple(
            strategies if strategies is not None else default_strategies()
        )
        self.default_multiple = (
            default_multiple if default_multiple is not None else settings.VALUATION_DEFAULT_MULTIPLE
        )
        if self.default_multiple <= 0:
            raise ValueError("default_multiple must be strictly positive")

    @classmethod
    def from_settings(cls) -> "MultipleResolver":
        """Resolver over the configured reference table and default multiple."""
        return cls(get_multiple_table(), default_multiple=settings.VALUATION_DEFAULT_MULTIPLE)

    def resolve(self, industry: Any, avg_score: float) -> MultipleResolution:
        """
        Resolve the multiple for an industry context and performance score.

        Args:
            industry: IndustryContext, mapping, IndustryKey, or None
            avg_score: Average value-driver score (1-5)

        Returns:
            MultipleResolution
        """
        key = industry if isinstance(industry, IndustryKey) else IndustryKey.from_context(industry)

        if key.is_empty:
            logger.info("No industry information supplied; using default multiple %.2f", self.default_multiple)
            return MultipleResolution(multiple=self.default_multiple, source=MultipleSource.DEFAULT)

        for strategy in self.strategies:
            resolution = strategy.resolve(key, avg_score, self.table)
            if resolution is not None:
                logger.debug(
                    "Resolved multiple %.3f via %s (key=%s, band=%s, score=%.2f)",
                    resolution.multiple,
                    resolution.source.value,
                    resolution.matched_key,
                    resolution.band,
                    avg_score,
                )
                return resolution

        logger.info(
            "No strategy resolved industry (code=%s, description=%s); using default multiple %.2f",
            key.code,
            key.description_key,
            self.default_multiple,
        )
        return MultipleResolution(multiple=self.default_multiple, source=MultipleSource.DEFAULT)

"""
value_drivers.py — Value-Driver Aggregator

Purpose:
- Resolve the two supported rating shapes into one internal representation:
    * Letter grade (free tier): each driver holds A/B/C/D/F
    * Weighted answer (growth tier): each driver holds the selected option
      index 0..4 of its question, 4 being the best answer
- Average the per-driver scores into one performance score (1-5).
- Derive the overall letter grade and the letter-grade ratings written to
  the assessment record.

Growth tier note: the record sets every driver to the single overall grade.
There is no per-driver differentiation in that tier.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from valuation_engine.core.exceptions import RatingShapeError
from valuation_engine.core.logging import get_logger
from valuation_engine.valuation.grade_scale import (
    NEUTRAL_SCORE,
    grade_to_score,
    is_letter_grade,
    score_to_grade,
)

logger = get_logger(__name__)

# Canonical driver names, in report order
VALUE_DRIVERS: Tuple[str, ...] = (
    "financial_performance",
    "customer_concentration",
    "management_team",
    "competitive_position",
    "growth_prospects",
    "systems_processes",
    "asset_quality",
    "industry_outlook",
    "risk_factors",
    "owner_dependency",
)

DRIVER_LABELS: Mapping[str, str] = MappingProxyType({
    "financial_performance": "Financial Performance",
    "customer_concentration": "Customer Concentration",
    "management_team": "Management Team",
    "competitive_position": "Competitive Position",
    "growth_prospects": "Growth Prospects",
    "systems_processes": "Systems & Processes",
    "asset_quality": "Asset Quality",
    "industry_outlook": "Industry Outlook",
    "risk_factors": "Risk Factors",
    "owner_dependency": "Owner Dependency",
})

# Form payloads use camelCase keys
DRIVER_ALIASES: Mapping[str, str] = MappingProxyType({
    "financialPerformance": "financial_performance",
    "customerConcentration": "customer_concentration",
    "managementTeam": "management_team",
    "competitivePosition": "competitive_position",
    "growthProspects": "growth_prospects",
    "systemsProcesses": "systems_processes",
    "assetQuality": "asset_quality",
    "industryOutlook": "industry_outlook",
    "riskFactors": "risk_factors",
    "ownerDependency": "owner_dependency",
})

MIN_ANSWER_INDEX = 0
MAX_ANSWER_INDEX = 4


class RatingShape(str, Enum):
    """Supported value-driver input shapes."""

    LETTER_GRADE = "letter_grade"
    WEIGHTED_ANSWER = "weighted_answer"


@dataclass(frozen=True)
class DriverScore:
    """One driver's rating after normalization (score 1-5, 5 best)."""
    driver: str
    score: int
    raw_value: Any = None


@dataclass(frozen=True)
class NormalizedDrivers:
    """
    Value-driver ratings resolved from either input shape.

    Attributes:
        shape: Input shape the ratings were given in
        scores: driver name -> DriverScore, only for drivers that were rated
    """
    shape: RatingShape
    scores: Mapping[str, DriverScore]

    def score_map(self) -> Dict[str, int]:
        return {name: ds.score for name, ds in self.scores.items()}

    def __len__(self) -> int:
        return len(self.scores)


def canonical_driver_name(name: str) -> Optional[str]:
    """Map a form key or snake_case key to the canonical driver name."""
    if name in DRIVER_ALIASES:
        return DRIVER_ALIASES[name]
    if name in VALUE_DRIVERS:
        return name
    return None


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _present_ratings(ratings: Mapping[str, Any]) -> Dict[str, Any]:
    """Canonicalize driver keys and drop unknown drivers and missing values."""
    present: Dict[str, Any] = {}
    for key, value in ratings.items():
        name = canonical_driver_name(key)
        if name is None:
            logger.warning("Ignoring unknown value driver %r", key)
            continue
        if _is_missing(value):
            logger.debug("Value driver %s not rated; excluded from average", name)
            continue
        present[name] = value
    return present


def _is_answer_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_digit_string(value: Any) -> bool:
    return isinstance(value, str) and value.strip().isdigit()


def detect_rating_shape(ratings: Mapping[str, Any]) -> RatingShape:
    """
    Infer the input shape from the rating values.

    All present values integers or digit strings, in any mix -> WEIGHTED_ANSWER;
    all other strings -> LETTER_GRADE, where strings off the grade scale
    later score as neutral. An empty set of ratings is LETTER_GRADE.

    Raises:
        RatingShapeError: values are mixed or of neither shape
    """
    present = _present_ratings(ratings)
    values = list(present.values())
    if not values:
        return RatingShape.LETTER_GRADE
    if all(_is_answer_index(v) or _is_digit_string(v) for v in values):
        return RatingShape.WEIGHTED_ANSWER
    if all(isinstance(v, str) for v in values):
        unknown = [v for v in values if not is_letter_grade(v)]
        if unknown:
            logger.info("Off-scale letter grades %r will score as neutral", unknown)
        return RatingShape.LETTER_GRADE

    logger.error("Unrecognized value-driver rating shape: %r", present)
    raise RatingShapeError(
        "Value-driver ratings are neither letter grades nor answer indices",
        details={"ratings": {k: repr(v) for k, v in present.items()}},
    )


def _answer_index(driver: str, value: Any) -> int:
    """Validate a weighted-answer value; numeric strings ("3") are accepted."""
    index: Any = value
    if _is_digit_string(value):
        index = int(value.strip())
    if not _is_answer_index(index) or not MIN_ANSWER_INDEX <= index <= MAX_ANSWER_INDEX:
        logger.error("Invalid answer index %r for value driver %s", value, driver)
        raise RatingShapeError(
            f"Answer index for {driver} must be an integer in "
            f"{MIN_ANSWER_INDEX}..{MAX_ANSWER_INDEX}, got {value!r}",
            details={"driver": driver, "value": repr(value)},
        )
    return index


def normalize_drivers(
    ratings: Optional[Mapping[str, Any]],
    shape: Optional[RatingShape] = None,
) -> NormalizedDrivers:
    """
    Resolve raw ratings into per-driver scores in [1, 5].

    Args:
        ratings: driver name (camelCase or snake_case) -> grade or answer index
        shape: Input shape; inferred from the values when None

    Returns:
        NormalizedDrivers holding only the rated drivers

    Raises:
        RatingShapeError: ratings is not a mapping, or values do not fit the shape
    """
    if ratings is None:
        ratings = {}
    if not isinstance(ratings, Mapping):
        logger.error("Value-driver ratings must be a mapping, got %s", type(ratings).__name__)
        raise RatingShapeError(
            "Value-driver ratings must be a mapping of driver name to rating",
            details={"type": type(ratings).__name__},
        )

    if shape is None:
        shape = detect_rating_shape(ratings)
    else:
        shape = RatingShape(shape)

    scores: Dict[str, DriverScore] = {}
    for name, value in _present_ratings(ratings).items():
        if shape is RatingShape.LETTER_GRADE:
            if not isinstance(value, str):
                logger.error("Letter-grade rating for %s is not a string: %r", name, value)
                raise RatingShapeError(
                    f"Letter-grade rating for {name} must be a string, got {value!r}",
                    details={"driver": name, "value": repr(value)},
                )
            score = grade_to_score(value)
        else:
            score = _answer_index(name, value) + 1
        scores[name] = DriverScore(driver=name, score=score, raw_value=value)

    return NormalizedDrivers(shape=shape, scores=MappingProxyType(scores))


def average_score(normalized: Any) -> float:
    """
    Arithmetic mean of the rated driver scores.

    Accepts NormalizedDrivers or a plain driver -> score mapping.
    Returns the neutral 3.0 when no drivers are rated.
    """
    if isinstance(normalized, NormalizedDrivers):
        values = [ds.score for ds in normalized.scores.values()]
    else:
        values = list(normalized.values())

    if not values:
        return float(NEUTRAL_SCORE)
    return sum(values) / len(values)


def overall_grade(avg_score: float) -> str:
    """Overall letter grade for an average score."""
    return score_to_grade(avg_score)


def rated_drivers(normalized: NormalizedDrivers, overall: str) -> Dict[str, Optional[str]]:
    """
    Letter-grade ratings for the assessment record.

    Letter grade shape: each rated driver's score mapped back to its letter,
    unrated drivers None. Weighted answer shape: every driver carries the
    overall grade.
    """
    if normalized.shape is RatingShape.WEIGHTED_ANSWER:
        return {name: overall for name in VALUE_DRIVERS}

    return {
        name: (score_to_grade(normalized.scores[name].score) if name in normalized.scores else None)
        for name in VALUE_DRIVERS
    }

"""
engine.py — Valuation Calculation Engine entrypoint.

Pipeline:
    raw input
      -> EBITDA normalizer      (base / adjusted EBITDA)
      -> value-driver aggregator (average score, overall grade)
      -> multiple resolver      (industry + score -> multiple)
      -> calculator             (low / mid / high)
      -> ValuationResult

The engine is a pure function of its input plus the read-only reference
table: no I/O beyond the one-time table load, no shared mutable state.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Mapping, Optional, Union

from valuation_engine.core.logging import get_logger
from valuation_engine.models.assessment import RawAssessmentInput, ValuationResult
from valuation_engine.valuation.calculator import compute_range
from valuation_engine.valuation.ebitda import compute_adjusted_ebitda, compute_base_ebitda
from valuation_engine.valuation.multiple_resolver import MultipleResolution, MultipleResolver
from valuation_engine.valuation.value_drivers import (
    NormalizedDrivers,
    average_score,
    normalize_drivers,
    overall_grade,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class EngineRun:
    """Everything one evaluation produced, for record assembly."""
    input: RawAssessmentInput
    drivers: NormalizedDrivers
    resolution: MultipleResolution
    result: ValuationResult


@lru_cache(maxsize=1)
def get_default_resolver() -> MultipleResolver:
    """Resolver over the configured reference table (loaded once per process)."""
    return MultipleResolver.from_settings()


def coerce_input(raw: Union[RawAssessmentInput, Mapping[str, Any]]) -> RawAssessmentInput:
    """Accept a validated model or a raw mapping (form / JSON payload)."""
    if isinstance(raw, RawAssessmentInput):
        return raw
    return RawAssessmentInput.model_validate(dict(raw))


def run_engine(
    raw: Union[RawAssessmentInput, Mapping[str, Any]],
    resolver: Optional[MultipleResolver] = None,
) -> EngineRun:
    """
    Run the full pipeline and keep the intermediate products.

    Raises:
        RatingShapeError: value-driver ratings match no supported shape
        ReferenceDataError: the default reference table could not be loaded
    """
    data = coerce_input(raw)
    resolver = resolver or get_default_resolver()

    base_ebitda = compute_base_ebitda(data.financials)
    adjusted_ebitda = compute_adjusted_ebitda(base_ebitda, data.adjustments)

    drivers = normalize_drivers(data.value_drivers, data.driver_input_shape)
    avg = average_score(drivers)
    grade = overall_grade(avg)

    resolution = resolver.resolve(data.industry, avg)
    valuation_range = compute_range(adjusted_ebitda, resolution.multiple)

    result = ValuationResult(
        base_ebitda=base_ebitda,
        adjusted_ebitda=adjusted_ebitda,
        resolved_multiple=resolution.multiple,
        low_estimate=valuation_range.low,
        mid_estimate=valuation_range.mid,
        high_estimate=valuation_range.high,
        overall_grade=grade,
        average_score=avg,
        multiple_source=resolution.source.value,
        rating_shape=drivers.shape,
    )
    logger.debug(
        "Evaluated %s assessment: adjusted EBITDA %.2f x %.3f (%s) -> mid %.2f, grade %s",
        data.tier.value,
        adjusted_ebitda,
        resolution.multiple,
        resolution.source.value,
        valuation_range.mid,
        grade,
    )
    return EngineRun(input=data, drivers=drivers, resolution=resolution, result=result)


def evaluate(
    raw: Union[RawAssessmentInput, Mapping[str, Any]],
    resolver: Optional[MultipleResolver] = None,
) -> ValuationResult:
    """
    Evaluate one submission.

    Args:
        raw: RawAssessmentInput or an equivalent mapping
        resolver: Multiple resolver; defaults to the configured reference table

    Returns:
        ValuationResult
    """
    return run_engine(raw, resolver).result

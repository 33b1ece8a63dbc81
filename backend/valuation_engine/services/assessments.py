"""
assessments.py — Assemble processed assessment records.

Purpose:
- Turn one submission into one immutable Assessment record:
    * run the valuation engine
    * build the deterministic narrative texts
    * attach identifiers, timestamps and tier information
- Handle resubmission by creating a fresh record that supersedes the old one.

This module does NOT:
- Persist records, send email or render reports.
- Call external AI services; a caller-supplied NarrativeSummary replaces the
  built-in texts when given.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union
from uuid import UUID, uuid4

from valuation_engine.core.logging import get_logger
from valuation_engine.models.assessment import (
    Assessment,
    NarrativeSummary,
    RawAssessmentInput,
    ValuationResult,
)
from valuation_engine.valuation.engine import coerce_input, run_engine
from valuation_engine.valuation.multiple_resolver import MultipleResolver
from valuation_engine.valuation.narrative import build_executive_summary, build_narrative_summary
from valuation_engine.valuation.value_drivers import NormalizedDrivers, average_score, rated_drivers

logger = get_logger(__name__)

RawInput = Union[RawAssessmentInput, Mapping[str, Any]]


def default_narrative(
    raw: RawAssessmentInput,
    result: ValuationResult,
    ratings: Mapping[str, Optional[str]],
) -> NarrativeSummary:
    """Template narrative built from the result and the submission's context."""
    return NarrativeSummary(
        narrative_summary=build_narrative_summary(
            result,
            company_name=raw.contact.company,
            industry=raw.industry.description,
            founding_year=raw.contact.founding_year,
        ),
        executive_summary=build_executive_summary(
            result,
            ratings,
            company_name=raw.contact.company,
            industry=raw.industry.description,
            naics_code=raw.industry.naics_code,
        ),
    )


def build_assessment(
    raw: RawInput,
    result: ValuationResult,
    drivers: NormalizedDrivers,
    narrative: Optional[NarrativeSummary] = None,
    supersedes_id: Optional[UUID] = None,
) -> Assessment:
    """
    Combine a submission and its valuation result into a processed record.

    Args:
        raw: The submission the result was computed from
        result: Engine output for that submission
        drivers: Normalized value drivers from the same engine run
        narrative: Narrative texts; the template narrative when None
        supersedes_id: Id of the record this one replaces, if any

    Returns:
        Assessment with a fresh id and creation timestamp

    Raises:
        ValueError: drivers do not belong to the run that produced result
    """
    data = coerce_input(raw)

    drivers_avg = average_score(drivers)
    if drivers.shape is not result.rating_shape or drivers_avg != result.average_score:
        raise ValueError(
            f"Driver ratings ({drivers.shape.value}, average {drivers_avg:.2f}) do not match "
            f"the valuation result ({result.rating_shape.value}, average {result.average_score:.2f})"
        )

    # growth tier collects answer indices; the stored per-driver grade is the overall one
    ratings = rated_drivers(drivers, result.overall_grade)
    narrative = narrative or default_narrative(data, result, ratings)

    record = Assessment(
        id=uuid4(),
        supersedes_id=supersedes_id,
        created_at=datetime.now(timezone.utc),
        tier=data.tier,
        report_tier=data.tier.report_tier,
        contact=data.contact,
        financials=data.financials,
        adjustments=data.adjustments,
        value_drivers=ratings,
        industry=data.industry,
        valuation=result,
        narrative_summary=narrative.narrative_summary,
        executive_summary=narrative.executive_summary,
        follow_up_intent=data.follow_up_intent,
        additional_comments=data.additional_comments,
    )
    logger.info(
        "Built %s assessment %s (grade %s, mid %.2f)",
        record.tier.value,
        record.id,
        result.overall_grade,
        result.mid_estimate,
    )
    return record


def process_assessment(
    raw: RawInput,
    resolver: Optional[MultipleResolver] = None,
    narrative: Optional[NarrativeSummary] = None,
) -> Assessment:
    """Evaluate a submission and build its record in one step."""
    run = run_engine(raw, resolver)
    return build_assessment(run.input, run.result, run.drivers, narrative)


def reprocess_assessment(
    previous: Assessment,
    raw: RawInput,
    resolver: Optional[MultipleResolver] = None,
    narrative: Optional[NarrativeSummary] = None,
) -> Assessment:
    """
    Process a resubmission of an existing assessment.

    The previous record is left untouched; the new record carries a new id
    and points back at it through supersedes_id.
    """
    run = run_engine(raw, resolver)
    record = build_assessment(
        run.input, run.result, run.drivers, narrative, supersedes_id=previous.id
    )
    logger.info("Assessment %s supersedes %s", record.id, previous.id)
    return record

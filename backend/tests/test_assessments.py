"""
Unit tests for services/assessments.py (processed record assembly)
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from valuation_engine.models.assessment import Assessment, NarrativeSummary
from valuation_engine.services.assessments import (
    build_assessment,
    process_assessment,
    reprocess_assessment,
)
from valuation_engine.valuation.engine import run_engine
from valuation_engine.valuation.value_drivers import VALUE_DRIVERS


def test_process_free_assessment(resolver, free_submission):
    record = process_assessment(free_submission, resolver=resolver)

    assert isinstance(record, Assessment)
    assert record.status == "processed"
    assert record.is_processed is True
    assert record.supersedes_id is None
    assert record.tier.value == "free"
    assert record.report_tier == "free"
    assert record.contact.company == "Summit Roofing"
    assert record.financials.net_income == 100000.0
    assert record.adjustments.owner_salary_addback == 25000.0
    assert record.industry.naics_code == "238160"
    assert record.follow_up_intent == "yes"
    assert record.created_at.tzinfo is not None
    assert record.created_at <= datetime.now(timezone.utc)


def test_free_record_keeps_individual_grades(resolver, free_submission):
    record = process_assessment(free_submission, resolver=resolver)

    assert record.value_drivers["financial_performance"] == "A"
    assert record.value_drivers["systems_processes"] == "D"
    assert record.value_drivers["risk_factors"] == "C"
    assert set(record.value_drivers) == set(VALUE_DRIVERS)


def test_growth_record_sets_every_driver_to_overall_grade(resolver, growth_submission):
    record = process_assessment(growth_submission, resolver=resolver)

    assert record.report_tier == "paid"
    assert record.valuation.overall_grade == "B"
    assert set(record.value_drivers) == set(VALUE_DRIVERS)
    assert all(grade == "B" for grade in record.value_drivers.values())


def test_record_carries_the_engine_result(resolver, free_submission):
    run = run_engine(free_submission, resolver=resolver)
    record = build_assessment(run.input, run.result, run.drivers)

    assert record.valuation == run.result
    assert record.valuation.mid_estimate == run.result.mid_estimate


def test_record_driver_grades_come_from_the_engine_run(resolver):
    run = run_engine({"valueDrivers": {"financialPerformance": "F"}}, resolver=resolver)

    # the submission passed alongside disagrees with the run; the run wins
    record = build_assessment({"valueDrivers": {"financialPerformance": "A"}}, run.result, run.drivers)

    assert record.valuation.overall_grade == "F"
    assert record.value_drivers["financial_performance"] == "F"


def test_drivers_from_another_run_are_rejected(resolver):
    run_f = run_engine({"valueDrivers": {"financialPerformance": "F"}}, resolver=resolver)
    run_a = run_engine({"valueDrivers": {"financialPerformance": "A"}}, resolver=resolver)

    with pytest.raises(ValueError):
        build_assessment(run_f.input, run_f.result, run_a.drivers)


def test_default_narrative_texts(resolver, free_submission):
    record = process_assessment(free_submission, resolver=resolver)

    assert record.narrative_summary.startswith("Summit Roofing")
    assert "overall grade of C (Average)" in record.narrative_summary
    assert "EXECUTIVE SUMMARY" in record.executive_summary
    assert "(NAICS: 238160)" in record.executive_summary
    assert "Strong financial performance" in record.executive_summary
    assert "Enhance operational systems and processes" in record.executive_summary


def test_supplied_narrative_is_used(resolver, free_submission):
    narrative = NarrativeSummary(narrative_summary="custom", executive_summary="custom exec")

    record = process_assessment(free_submission, resolver=resolver, narrative=narrative)

    assert record.narrative_summary == "custom"
    assert record.executive_summary == "custom exec"


def test_each_record_gets_a_new_id(resolver, free_submission):
    first = process_assessment(free_submission, resolver=resolver)
    second = process_assessment(free_submission, resolver=resolver)

    assert first.id != second.id
    assert first.valuation == second.valuation


def test_reprocess_creates_superseding_record(resolver, free_submission):
    original = process_assessment(free_submission, resolver=resolver)
    snapshot = original.model_dump()

    edited = dict(free_submission, valueDrivers={"financialPerformance": "A"})
    replacement = reprocess_assessment(original, edited, resolver=resolver)

    assert replacement.id != original.id
    assert replacement.supersedes_id == original.id
    assert replacement.valuation.overall_grade == "A"
    assert original.model_dump() == snapshot


def test_record_is_frozen(resolver, free_submission):
    record = process_assessment(free_submission, resolver=resolver)
    with pytest.raises(ValidationError):
        record.status = "pending"


def test_record_serializes_to_json(resolver, growth_submission):
    record = process_assessment(growth_submission, resolver=resolver)

    payload = record.model_dump(mode="json")

    assert payload["valuation"]["rating_shape"] == "weighted_answer"
    assert payload["tier"] == "growth"
    assert isinstance(payload["id"], str)

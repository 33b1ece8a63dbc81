"""
valuation_engine — EBITDA-multiple valuation engine for small-business
assessments.

Entry points:
    - evaluate: raw submission -> ValuationResult
    - process_assessment / reprocess_assessment: raw submission -> Assessment record
"""

from valuation_engine.core.exceptions import (
    RatingShapeError,
    ReferenceDataError,
    ValuationEngineError,
)
from valuation_engine.models.assessment import Assessment, RawAssessmentInput, ValuationResult
from valuation_engine.services.assessments import (
    build_assessment,
    process_assessment,
    reprocess_assessment,
)
from valuation_engine.valuation.engine import evaluate
from valuation_engine.valuation.multiple_resolver import MultipleResolver

__all__ = [
    "Assessment",
    "MultipleResolver",
    "RatingShapeError",
    "RawAssessmentInput",
    "ReferenceDataError",
    "ValuationEngineError",
    "ValuationResult",
    "build_assessment",
    "evaluate",
    "process_assessment",
    "reprocess_assessment",
]

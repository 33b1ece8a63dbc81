"""
narrative.py — Deterministic narrative text for processed assessments.

Builds the plain-language summaries stored on the assessment record:
- narrative summary: one paragraph stating adjusted EBITDA, range and grade
- executive summary: key findings plus strengths / opportunities derived from
  individual driver grades

AI-written narratives are produced outside the engine; these texts are the
baseline the record always carries.
"""

from __future__ import annotations

from datetime import date
from typing import List, Mapping, Optional

from valuation_engine.models.assessment import ValuationResult
from valuation_engine.valuation.grade_scale import grade_label

STRONG_GRADES = ("A", "B")
WEAK_GRADES = ("C", "D", "F")

# driver -> line listed under STRENGTHS when graded A/B
STRENGTH_LINES = (
    ("financial_performance", "Strong financial performance"),
    ("management_team", "Experienced management team"),
    ("growth_prospects", "Positive growth trajectory"),
)

# driver -> line listed under OPPORTUNITIES when graded C/D/F
OPPORTUNITY_LINES = (
    ("systems_processes", "Enhance operational systems and processes"),
    ("customer_concentration", "Diversify customer base"),
    ("owner_dependency", "Reduce owner dependency"),
)


def format_currency(value: float) -> str:
    """$1,234,567 style; negatives as -$1,234."""
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.0f}"


def performance_phrase(grade: str) -> str:
    if grade in STRONG_GRADES:
        return "strong"
    if grade == "C":
        return "moderate"
    return "improvement opportunities in"


def build_narrative_summary(
    result: ValuationResult,
    company_name: Optional[str] = None,
    industry: Optional[str] = None,
    founding_year: Optional[int] = None,
    as_of: Optional[date] = None,
) -> str:
    """
    One-paragraph summary of a valuation result.

    Args:
        result: Engine output
        company_name: Display name; "The business" when missing
        industry: Industry description, omitted when missing
        founding_year: Used to state the company's age
        as_of: Reference date for the age (defaults to today)
    """
    name = company_name or "The business"

    profile = ""
    if founding_year and industry:
        years = (as_of or date.today()).year - founding_year
        profile = f" is a {years}-year-old {industry} company and"
    elif industry:
        profile = f" is a {industry} company and"

    grade = result.overall_grade
    return (
        f"{name}{profile} has an adjusted EBITDA of {format_currency(result.adjusted_ebitda)}. "
        f"Based on our analysis of its key value drivers, we estimate the business value to be between "
        f"{format_currency(result.low_estimate)} and {format_currency(result.high_estimate)}, with a most "
        f"likely value of {format_currency(result.mid_estimate)}. "
        f"The company received an overall grade of {grade} ({grade_label(grade)}), reflecting "
        f"{performance_phrase(grade)} performance across key business metrics."
    )


def build_executive_summary(
    result: ValuationResult,
    ratings: Mapping[str, Optional[str]],
    company_name: Optional[str] = None,
    industry: Optional[str] = None,
    naics_code: Optional[str] = None,
) -> str:
    """
    Executive summary with key findings, strengths and opportunities.

    Args:
        result: Engine output
        ratings: Letter-grade driver ratings as stored on the record
        company_name, industry, naics_code: Optional display context
    """
    name = company_name or "The business"
    if industry:
        naics = f" (NAICS: {naics_code})" if naics_code else ""
        overview = f"{name} operates in the {industry} sector{naics}."
    elif naics_code:
        overview = f"{name} operates under NAICS code {naics_code}."
    else:
        overview = f"{name} has completed a valuation assessment."

    lines: List[str] = [
        "EXECUTIVE SUMMARY",
        "",
        overview,
        "",
        "KEY FINDINGS:",
        f"• Adjusted EBITDA: {format_currency(result.adjusted_ebitda)}",
        f"• Valuation Multiple: {result.resolved_multiple:.1f}x",
        f"• Estimated Value Range: {format_currency(result.low_estimate)} - "
        f"{format_currency(result.high_estimate)}",
        f"• Most Likely Value: {format_currency(result.mid_estimate)}",
        f"• Overall Grade: {result.overall_grade}",
    ]

    strengths = [text for driver, text in STRENGTH_LINES if ratings.get(driver) in STRONG_GRADES]
    opportunities = [text for driver, text in OPPORTUNITY_LINES if ratings.get(driver) in WEAK_GRADES]

    if strengths:
        lines += ["", "STRENGTHS:"] + [f"• {s}" for s in strengths]
    if opportunities:
        lines += ["", "OPPORTUNITIES:"] + [f"• {o}" for o in opportunities]

    return "\n".join(lines)

"""
grade_scale.py — Letter grade <-> numeric score mapping.

Purpose:
- Map value-driver letter grades (A-F) onto the 1-5 score scale used by the
  aggregator and the multiple resolver.
- Map an average score back onto a single overall letter grade.
- Provide display labels/descriptions for narrative text.

The two mappings are inverse-consistent at the table points:
score_to_grade(grade_to_score(g)) == g for every letter grade.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Tuple

NEUTRAL_GRADE = "C"
NEUTRAL_SCORE = 3

_GRADE_PATTERN = re.compile(r"([ABCDF])[+-]?")

GRADE_SCORES: Mapping[str, int] = MappingProxyType({
    "A": 5,
    "B": 4,
    "C": 3,
    "D": 2,
    "F": 1,
})

# (lower bound, grade), checked top-down
GRADE_THRESHOLDS: Tuple[Tuple[float, str], ...] = (
    (4.5, "A"),
    (4.0, "B"),
    (3.0, "C"),
    (2.0, "D"),
)


@dataclass(frozen=True)
class GradeInfo:
    grade: str
    label: str
    description: str


GRADE_INFO: Mapping[str, GradeInfo] = MappingProxyType({
    "A": GradeInfo("A", "Excellent", "Strong operational performance across all areas"),
    "B": GradeInfo("B", "Good", "Above average performance with minor improvement areas"),
    "C": GradeInfo("C", "Average", "Typical business performance with room for enhancement"),
    "D": GradeInfo("D", "Below Average", "Performance challenges requiring attention"),
    "F": GradeInfo("F", "Poor", "Significant operational improvements needed"),
})


def base_grade(grade: Any) -> str:
    """
    Reduce a raw grade value to its base letter.

    "b+" -> "B", " A- " -> "A". Anything other than a single scale letter
    with an optional +/- modifier ("Average", "Bad", "E") returns "".
    """
    if not isinstance(grade, str):
        return ""
    match = _GRADE_PATTERN.fullmatch(grade.strip().upper())
    return match.group(1) if match else ""


def is_letter_grade(value: Any) -> bool:
    """True if `value` is a string whose base letter is on the grade scale."""
    return base_grade(value) in GRADE_SCORES


def grade_to_score(grade: Any) -> int:
    """
    Convert a letter grade to its numeric score.

    Args:
        grade: Letter grade (A, B, C, D, F); case and +/- modifiers ignored

    Returns:
        Score 1-5; unknown or missing grades score 3 (neutral "C")
    """
    return GRADE_SCORES.get(base_grade(grade), NEUTRAL_SCORE)


def score_to_grade(avg_score: float) -> str:
    """
    Convert an (average) score to a letter grade.

    >= 4.5 A, >= 4.0 B, >= 3.0 C, >= 2.0 D, otherwise F.
    """
    for lower_bound, grade in GRADE_THRESHOLDS:
        if avg_score >= lower_bound:
            return grade
    return "F"


def grade_label(grade: Any) -> str:
    """Human-readable label for a grade ("Excellent" ... "Poor")."""
    return GRADE_INFO.get(base_grade(grade), GRADE_INFO[NEUTRAL_GRADE]).label


def grade_description(grade: Any) -> str:
    """One-line description of what a grade means."""
    return GRADE_INFO.get(base_grade(grade), GRADE_INFO[NEUTRAL_GRADE]).description

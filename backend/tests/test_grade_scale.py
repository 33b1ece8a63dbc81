"""
Unit tests for grade_scale.py
"""

import pytest

from valuation_engine.valuation.grade_scale import (
    GRADE_SCORES,
    base_grade,
    grade_description,
    grade_label,
    grade_to_score,
    is_letter_grade,
    score_to_grade,
)


@pytest.mark.parametrize("grade", ["A", "B", "C", "D", "F"])
def test_grade_round_trip(grade):
    assert score_to_grade(grade_to_score(grade)) == grade


def test_grade_scores_table():
    assert dict(GRADE_SCORES) == {"A": 5, "B": 4, "C": 3, "D": 2, "F": 1}


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("b", 4),
        (" a ", 5),
        ("B+", 4),
        ("A-", 5),
        ("Z", 3),
        ("E", 3),
        ("Average", 3),
        ("Bad", 3),
        ("Fair", 3),
        ("Distinction", 3),
        ("Excellent", 3),
        ("A+-", 3),
        ("", 3),
        (None, 3),
        (4, 3),
    ],
)
def test_grade_to_score_lenient(raw, expected):
    assert grade_to_score(raw) == expected


@pytest.mark.parametrize(
    "score, expected",
    [
        (5.0, "A"),
        (4.5, "A"),
        (4.49, "B"),
        (4.0, "B"),
        (3.99, "C"),
        (3.0, "C"),
        (2.99, "D"),
        (2.0, "D"),
        (1.99, "F"),
        (1.0, "F"),
    ],
)
def test_score_to_grade_thresholds(score, expected):
    assert score_to_grade(score) == expected


def test_base_grade_and_membership():
    assert base_grade(" c+ ") == "C"
    assert base_grade(None) == ""
    assert is_letter_grade("f")
    assert not is_letter_grade("E")
    assert not is_letter_grade(3)
    assert not is_letter_grade("Bad")
    assert base_grade("Average") == ""


def test_grade_labels():
    assert grade_label("A") == "Excellent"
    assert grade_label("d") == "Below Average"
    assert grade_label("F") == "Poor"
    # Off-scale grades read as the neutral grade
    assert grade_label("Q") == "Average"
    assert "improvements" in grade_description("F")

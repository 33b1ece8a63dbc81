"""
ebitda.py — Base and Adjusted EBITDA Normalizer

Purpose:
- Compute base EBITDA from the five income statement line items.
- Add owner/normalizing adjustments to produce adjusted EBITDA.

Formulas:
- Base EBITDA = Net Income + Interest + Taxes + Depreciation + Amortization
- Adjusted EBITDA = Base EBITDA + Owner Salary Add-back + Personal Expenses
  + One-Time Expenses + Other Adjustments

Missing or unparseable amounts are treated as 0; a partially filled form
still produces a figure. Negative and zero results are passed through.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Tuple

from valuation_engine.core.logging import get_logger

logger = get_logger(__name__)

# (attribute name, accepted mapping keys); form keys come first
FINANCIAL_FIELDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("net_income", ("netIncome", "net_income")),
    ("interest_expense", ("interest", "interestExpense", "interest_expense")),
    ("tax_expense", ("taxes", "taxExpense", "tax_expense")),
    ("depreciation", ("depreciation",)),
    ("amortization", ("amortization",)),
)

ADJUSTMENT_FIELDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("owner_salary_addback", ("ownerSalary", "ownerSalaryAddback", "owner_salary_addback")),
    ("personal_expenses", ("personalExpenses", "personal_expenses")),
    ("one_time_expenses", ("oneTimeExpenses", "one_time_expenses")),
    ("other_adjustments", ("otherAdjustments", "other_adjustments")),
)

_STRIP_CHARS = str.maketrans("", "", "$,_ ")


def coerce_amount(value: Any) -> float:
    """
    Parse a free-form amount as float, defaulting to 0.0.

    Accepts ints, floats, numeric strings and strings carrying a currency
    sign or thousands separators ("$1,250.50"). None, empty strings,
    booleans, NaN/inf and anything unparseable become 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.strip().translate(_STRIP_CHARS)
        if not cleaned:
            return 0.0
        # Accounting negatives: "(1,000)"
        if cleaned.startswith("(") and cleaned.endswith(")"):
            cleaned = "-" + cleaned[1:-1]
        try:
            number = float(cleaned)
        except ValueError:
            logger.debug("Unparseable amount %r treated as 0", value)
            return 0.0
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            logger.debug("Unsupported amount type %s treated as 0", type(value).__name__)
            return 0.0

    if not math.isfinite(number):
        logger.debug("Non-finite amount %r treated as 0", value)
        return 0.0
    return number


def _read_field(source: Any, attr: str, keys: Tuple[str, ...]) -> float:
    """Read one line item from a model (attribute) or a mapping (any alias key)."""
    if source is None:
        return 0.0
    if isinstance(source, Mapping):
        for key in (attr,) + keys:
            if key in source:
                return coerce_amount(source[key])
        return 0.0
    return coerce_amount(getattr(source, attr, None))


def compute_base_ebitda(inputs: Any) -> float:
    """
    Compute base EBITDA.

    Args:
        inputs: FinancialInputs model or a mapping with net income, interest,
            taxes, depreciation and amortization (form or snake_case keys)

    Returns:
        Sum of the five line items (each zero-defaulted)
    """
    return sum(_read_field(inputs, attr, keys) for attr, keys in FINANCIAL_FIELDS)


def total_adjustments(adjustments: Any) -> float:
    """Sum of the four add-back fields (each zero-defaulted)."""
    return sum(_read_field(adjustments, attr, keys) for attr, keys in ADJUSTMENT_FIELDS)


def compute_adjusted_ebitda(base: float, adjustments: Any) -> float:
    """
    Compute adjusted EBITDA.

    Args:
        base: Base EBITDA (see compute_base_ebitda)
        adjustments: Adjustments model, mapping, or None

    Returns:
        base + total adjustments; may be negative or zero
    """
    return coerce_amount(base) + total_adjustments(adjustments)

"""
assessment.py — Input and output records of the valuation engine.

Input side (validated leniently, never rejects a partially filled form):
- RawAssessmentInput: one submission as received from a collaborator
  (form handler, queue consumer, CLI), with nested FinancialInputs,
  Adjustments, IndustryContext and ContactInfo.

Output side (frozen):
- ValuationResult: engine output, derivable purely from the input.
- Assessment: the processed record handed to storage / report rendering.

Numeric line items go through coerce_amount: unparseable values become 0.
Both snake_case names and the camelCase keys of the assessment forms are
accepted.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Literal, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from valuation_engine.valuation.ebitda import coerce_amount
from valuation_engine.valuation.multiple_resolver import clean_industry_code
from valuation_engine.valuation.value_drivers import RatingShape, canonical_driver_name


class Tier(str, Enum):
    """Product plan the assessment was submitted under."""

    FREE = "free"
    GROWTH = "growth"

    @property
    def report_tier(self) -> str:
        return "paid" if self is Tier.GROWTH else "free"


_INPUT_CONFIG = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class FinancialInputs(BaseModel):
    """Income statement line items for one normalized period."""

    model_config = _INPUT_CONFIG

    net_income: float = Field(0.0, validation_alias=AliasChoices("net_income", "netIncome"))
    interest_expense: float = Field(
        0.0, validation_alias=AliasChoices("interest_expense", "interest", "interestExpense")
    )
    tax_expense: float = Field(0.0, validation_alias=AliasChoices("tax_expense", "taxes", "taxExpense"))
    depreciation: float = 0.0
    amortization: float = 0.0

    @field_validator("net_income", "interest_expense", "tax_expense", "depreciation", "amortization",
                     mode="before")
    @classmethod
    def coerce(cls, v: Any) -> float:
        return coerce_amount(v)


class Adjustments(BaseModel):
    """Normalizing add-backs applied to base EBITDA."""

    model_config = _INPUT_CONFIG

    owner_salary_addback: float = Field(
        0.0,
        validation_alias=AliasChoices("owner_salary_addback", "ownerSalary", "ownerSalaryAddback"),
    )
    personal_expenses: float = Field(
        0.0, validation_alias=AliasChoices("personal_expenses", "personalExpenses")
    )
    one_time_expenses: float = Field(
        0.0, validation_alias=AliasChoices("one_time_expenses", "oneTimeExpenses")
    )
    other_adjustments: float = Field(
        0.0, validation_alias=AliasChoices("other_adjustments", "otherAdjustments")
    )
    adjustment_notes: Optional[str] = Field(
        None, validation_alias=AliasChoices("adjustment_notes", "adjustmentNotes")
    )

    @field_validator("owner_salary_addback", "personal_expenses", "one_time_expenses", "other_adjustments",
                     mode="before")
    @classmethod
    def coerce(cls, v: Any) -> float:
        return coerce_amount(v)


class IndustryContext(BaseModel):
    """Industry classification used only for multiple resolution."""

    model_config = _INPUT_CONFIG

    naics_code: Optional[str] = Field(None, validation_alias=AliasChoices("naics_code", "naicsCode", "code"))
    description: Optional[str] = Field(
        None, validation_alias=AliasChoices("description", "industry", "industryDescription")
    )

    @field_validator("naics_code", mode="before")
    @classmethod
    def code_to_str(cls, v: Any) -> Optional[str]:
        return clean_industry_code(v)


class ContactInfo(BaseModel):
    """Contact and company metadata; presence is validated upstream."""

    model_config = _INPUT_CONFIG

    first_name: Optional[str] = Field(None, validation_alias=AliasChoices("first_name", "firstName"))
    last_name: Optional[str] = Field(None, validation_alias=AliasChoices("last_name", "lastName"))
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = Field(None, validation_alias=AliasChoices("company", "companyName"))
    job_title: Optional[str] = Field(None, validation_alias=AliasChoices("job_title", "jobTitle"))
    founding_year: Optional[int] = Field(None, validation_alias=AliasChoices("founding_year", "foundingYear"))

    @field_validator("founding_year", mode="before")
    @classmethod
    def lenient_year(cls, v: Any) -> Optional[int]:
        if v is None or isinstance(v, bool):
            return None
        try:
            return int(str(v).strip())
        except ValueError:
            return None


# Flat free-assessment form: (section, section keys, top-level form keys)
_FLAT_SECTIONS = (
    ("financials", ("financials", "ebitda"),
     ("netIncome", "interest", "taxes", "depreciation", "amortization")),
    ("adjustments", ("adjustments",),
     ("ownerSalary", "personalExpenses", "oneTimeExpenses", "otherAdjustments", "adjustmentNotes")),
    ("contact", ("contact",),
     ("firstName", "lastName", "email", "phone", "companyName", "jobTitle", "foundingYear")),
)


class RawAssessmentInput(BaseModel):
    """
    One submission as supplied by a collaborator.

    Accepts three layouts:
    - nested snake_case: {"financials": {...}, "value_drivers": {...}, ...}
    - nested form: {"ebitda": {...}, "adjustments": {...}, "valueDrivers": {...}, "followUp": {...}}
    - flat form: {"netIncome": ..., "financialPerformance": "B", "industry": "...", ...}
    """

    model_config = _INPUT_CONFIG

    tier: Tier = Tier.FREE
    driver_input_shape: Optional[RatingShape] = Field(
        None, validation_alias=AliasChoices("driver_input_shape", "inputShape")
    )
    contact: ContactInfo = Field(default_factory=ContactInfo)
    financials: FinancialInputs = Field(
        default_factory=FinancialInputs, validation_alias=AliasChoices("financials", "ebitda")
    )
    adjustments: Adjustments = Field(default_factory=Adjustments)
    value_drivers: Dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("value_drivers", "valueDrivers")
    )
    industry: IndustryContext = Field(default_factory=IndustryContext)
    follow_up_intent: Optional[str] = Field(
        None, validation_alias=AliasChoices("follow_up_intent", "followUpIntent")
    )
    additional_comments: Optional[str] = Field(
        None, validation_alias=AliasChoices("additional_comments", "additionalComments")
    )

    @model_validator(mode="before")
    @classmethod
    def nest_form_payload(cls, data: Any) -> Any:
        """Fold the flat and nested form layouts into the model's sections."""
        if not isinstance(data, dict):
            return data
        data = dict(data)

        follow_up = data.pop("followUp", None)
        if isinstance(follow_up, dict):
            data.setdefault("followUpIntent", follow_up.get("followUpIntent"))
            data.setdefault("additionalComments", follow_up.get("additionalComments"))

        # "industry" is a section in the nested layouts but a free-text field in the flat one
        industry = data.get("industry")
        if isinstance(industry, str) or "naicsCode" in data:
            section = dict(industry) if isinstance(industry, dict) else {"industry": industry}
            if "naicsCode" in data:
                section.setdefault("naicsCode", data.pop("naicsCode"))
            data["industry"] = section

        for section, section_keys, form_keys in _FLAT_SECTIONS:
            if any(k in data for k in section_keys):
                continue
            flat = {k: data.pop(k) for k in form_keys if k in data}
            if flat:
                data[section] = flat

        if "value_drivers" not in data and "valueDrivers" not in data:
            flat_drivers = {
                k: data.pop(k) for k in list(data) if canonical_driver_name(k) is not None
            }
            if flat_drivers:
                data["value_drivers"] = flat_drivers

        return data


class ValuationResult(BaseModel):
    """Engine output for one submission."""

    model_config = ConfigDict(frozen=True)

    base_ebitda: float
    adjusted_ebitda: float
    resolved_multiple: float
    low_estimate: float
    mid_estimate: float
    high_estimate: float
    overall_grade: str
    average_score: float
    multiple_source: str
    rating_shape: RatingShape


class NarrativeSummary(BaseModel):
    """Deterministic narrative text stored with the record."""

    model_config = ConfigDict(frozen=True)

    narrative_summary: str = ""
    executive_summary: str = ""


class Assessment(BaseModel):
    """
    Processed assessment record.

    Created exactly once per submission; a resubmission produces a new record
    whose supersedes_id points at the one it replaces.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    supersedes_id: Optional[UUID] = None
    created_at: datetime
    status: Literal["processed"] = "processed"
    is_processed: bool = True

    tier: Tier
    report_tier: str
    contact: ContactInfo
    financials: FinancialInputs
    adjustments: Adjustments
    value_drivers: Dict[str, Optional[str]]
    industry: IndustryContext
    valuation: ValuationResult

    narrative_summary: str = ""
    executive_summary: str = ""
    follow_up_intent: Optional[str] = None
    additional_comments: Optional[str] = None

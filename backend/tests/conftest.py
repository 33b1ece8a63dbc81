"""
Shared fixtures: a small synthetic multiple table and submissions used across
the engine and record-builder tests.
"""

from typing import Any, Dict

import pytest

from valuation_engine.valuation.multiple_resolver import MultipleResolver
from valuation_engine.valuation.multiples import MultipleTable


@pytest.fixture
def synthetic_table() -> MultipleTable:
    """Hand-picked entries covering every table-backed resolution step."""
    return MultipleTable.from_dict(
        {
            "238160": {
                "industry": "Roofing Contractors",
                "base_range": {"min": 5.9, "max": 8.4},
                "premium_range": {"min": 8.5, "max": 11.0},
            },
            "2382": {
                "industry": "Building Equipment Contractors",
                "base_range": {"min": 5.0, "max": 7.5},
                "premium_range": {"min": 7.8, "max": 10.0},
            },
            "31-33": {
                "industry": "Manufacturing",
                "base_range": {"min": 4.0, "max": 6.0},
                "premium_range": {"min": 6.5, "max": 8.0},
            },
            "221118": {
                "industry": "Other Electric Power Generation",
                "base_range": {"min": 6.0, "max": 8.0},
            },
            "technology": {
                "industry": "Technology",
                "base_range": {"min": 6.0, "max": 9.0},
                "premium_range": {"min": 9.5, "max": 14.0},
            },
        },
        source="synthetic",
    )


@pytest.fixture
def resolver(synthetic_table) -> MultipleResolver:
    return MultipleResolver(synthetic_table, default_multiple=5.0)


@pytest.fixture
def free_submission() -> Dict[str, Any]:
    """Free-tier submission in the nested form layout."""
    return {
        "tier": "free",
        "contact": {
            "firstName": "Dana",
            "lastName": "Reyes",
            "email": "dana@summitroofing.example",
            "companyName": "Summit Roofing",
            "foundingYear": "2012",
        },
        "ebitda": {
            "netIncome": "100,000",
            "interest": 20000,
            "taxes": 30000,
            "depreciation": 10000,
            "amortization": 0,
        },
        "adjustments": {
            "ownerSalary": 25000,
            "personalExpenses": "",
            "oneTimeExpenses": 5000,
            "otherAdjustments": None,
            "adjustmentNotes": "Owner paid above market",
        },
        "valueDrivers": {
            "financialPerformance": "A",
            "customerConcentration": "C",
            "managementTeam": "B",
            "competitivePosition": "B",
            "growthProspects": "A",
            "systemsProcesses": "D",
            "assetQuality": "B",
            "industryOutlook": "B",
            "riskFactors": "C",
            "ownerDependency": "C",
        },
        "industry": {"naicsCode": "238160", "description": "Roofing Contractors"},
        "followUp": {"followUpIntent": "yes", "additionalComments": "Call after 3pm"},
    }


@pytest.fixture
def growth_submission() -> Dict[str, Any]:
    """Growth-tier submission: every driver answered with option index 3."""
    drivers = [
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
    ]
    return {
        "tier": "growth",
        "contact": {"company": "Northwind Plumbing", "email": "ops@northwind.example"},
        "financials": {
            "net_income": 400000,
            "interest_expense": 15000,
            "tax_expense": 60000,
            "depreciation": 20000,
            "amortization": 5000,
        },
        "value_drivers": {name: 3 for name in drivers},
        "industry": {"naics_code": "238220"},
    }

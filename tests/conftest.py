# tests/conftest.py
import copy

import pytest
from fastapi.testclient import TestClient

from propreport.adapters.config import AppConfig
from propreport.api.http import app, get_responses_client, get_settings


_SCENARIO = {"noiAnnual": 10000.0, "capRatePct": 3.2, "dscr": 0.6, "cashFlowAnnual": -6000.0}

# Conforms to property_investment_report_v1
_SAMPLE_REPORT = {
    "version": "1.0",
    "reportMeta": {
        "generatedAt": "2025-09-01T12:00:00Z",
        "targetCapPct": 8,
        "currency": "USD",
        "locale": "en-US",
    },
    "subject": {
        "address": "111 Cultural Park Blvd S, Cape Coral, FL 33990",
        "city": "Cape Coral",
        "state": "FL",
        "zip": "33990",
        "geo": {"lat": 26.56, "lng": None},
    },
    "purchase": {
        "purchasePrice": 500000,
        "rehabBudget": 0,
        "closingCostPct": 0.03,
        "pointsPct": 0.0075,
        "totalCost": 515000,
    },
    "propertySnapshot": {
        "propertyType": "duplex",
        "unitMix": "2x 2bd/2ba",
        "beds": 4,
        "baths": 4,
        "livingSqft": 2200,
        "yearBuilt": 2006,
        "lotSizeSqft": None,
        "hoa": {"hasHoa": False, "annual": 0, "monthly": 0, "name": "", "notes": ""},
        "taxes": {"annual": 6000, "year": 2024},
        "insurance": {"dp3Annual": 3600, "notes": "DP-3 quote estimate"},
        "recentUpdates": ["roof 2019"],
    },
    "units": [
        {
            "name": "111",
            "beds": 2,
            "baths": 2,
            "sqft": 1100,
            "modeledRentMonthly": 1900,
            "leaseTermMonths": 12,
            "notes": "",
        },
        {
            "name": "113",
            "beds": 2,
            "baths": 2,
            "sqft": 1100,
            "modeledRentMonthly": 1850,
            "leaseTermMonths": 12,
            "notes": "",
        },
    ],
    "rents": {
        "benchmarkMedian": 1875,
        "qualityAdjustmentPct": 0,
        "modeledMarketRentMonthly": 1875,
        "grossScheduledRentMonthly": 3750,
    },
    "rentComps": [
        {
            "address": f"{100 + i} Comp St, Cape Coral, FL",
            "beds": 2,
            "baths": 2,
            "askingRent": 1800 + 25 * i,
            "distanceMiles": 0.5 + i / 10,
            "conditionNote": "updated",
        }
        for i in range(5)
    ],
    "operatingAssumptions": {
        "vacancyPct": 5,
        "maintenancePctOfGrossRent": 8,
        "managementPctOfEGI": 8,
        "selfManaged": False,
        "utilitiesLandlordPaidAnnual": 1200,
        "otherOpExAnnual": 0,
    },
    "financing": {
        "downPaymentPct": 25,
        "rateAnnualPct": 7.7,
        "termYears": 30,
        "loanAmount": 375000,
        "monthlyPI": 2673.6,
        "annualDebtService": 32083.2,
    },
    "totals": {
        "egiAnnual": 42750,
        "opExAnnual": 17820,
        "noiAnnual": 24930,
        "capRatePct": 4.84,
        "dscr": 0.78,
        "cashFlowAnnual": -7153,
        "cashOnCashRoiPct": None,
        "onePercentRulePct": 0.75,
    },
    "sensitivity": {
        name: dict(_SCENARIO)
        for name in ("rentMinus10", "baseCase", "rentPlus10", "opExMinus10", "opExPlus10")
    },
    "negotiation": {
        "targetCapPct": 8,
        "maxPurchasePriceAtTargetCap": 302000,
        "assumptions": {"closingCostPct": 0.03, "pointsPct": 0.0075},
    },
    "glossary": {
        "EGI": "Effective gross income",
        "OpEx": "Operating expenses",
        "NOI": "Net operating income",
        "Cap": "Capitalization rate",
        "DSCR": "Debt service coverage ratio",
        "CoC": "Cash-on-cash return",
    },
}


class FakeResponses:
    """Stands in for ResponsesClient; records every payload it is sent."""

    def __init__(self, status=200, body=None):
        self.status = status
        self.body = body if body is not None else {}
        self.calls = []

    def create(self, payload):
        self.calls.append(payload)
        return self.status, self.body


@pytest.fixture
def sample_report():
    return copy.deepcopy(_SAMPLE_REPORT)


@pytest.fixture
def settings():
    return AppConfig(
        _env_file=None,
        OPENAI_API_KEY="sk-test",
        OPENAI_PROMPT_ID="pmpt_test",
        OPENAI_MODEL="test-model",
        OPENAI_MAX_RETRIES=0,
    )


@pytest.fixture(scope="session")
def client():
    return TestClient(app)


@pytest.fixture
def fake_upstream(settings):
    """
    Wire the API to `settings` and a FakeResponses. Tests set .status/.body.
    """
    fake = FakeResponses()
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_responses_client] = lambda: fake
    yield fake
    app.dependency_overrides.clear()


@pytest.fixture
def responses_factory():
    return FakeResponses

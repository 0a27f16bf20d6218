# src/propreport/domain/report_schema.py
"""
Structured-output contract for the generation service.

Every numeric field that can legitimately be unknown is typed
``["number", "null"]`` so consumers test for ``None`` instead of telling
"absent" apart from "explicitly unknown". ``additionalProperties`` is false
everywhere in the tree.
"""
from __future__ import annotations

from typing import Any

from jsonschema import Draft202012Validator

REPORT_SCHEMA_NAME = "property_investment_report_v1"
REPORT_SCHEMA_VERSION = "1.0"

TOP_LEVEL_KEYS = (
    "version",
    "reportMeta",
    "subject",
    "purchase",
    "propertySnapshot",
    "units",
    "rents",
    "rentComps",
    "operatingAssumptions",
    "financing",
    "totals",
    "sensitivity",
    "negotiation",
    "glossary",
)

SENSITIVITY_SCENARIOS = (
    "rentMinus10",
    "baseCase",
    "rentPlus10",
    "opExMinus10",
    "opExPlus10",
)

SCENARIO_FIELDS = ("noiAnnual", "capRatePct", "dscr", "cashFlowAnnual")

MIN_UNITS = 1
MIN_RENT_COMPS = 5


def _num(minimum: float | None = None, maximum: float | None = None, nullable: bool = False) -> dict[str, Any]:
    out: dict[str, Any] = {"type": ["number", "null"] if nullable else "number"}
    if minimum is not None:
        out["minimum"] = minimum
    if maximum is not None:
        out["maximum"] = maximum
    return out


def _int(minimum: int | None = None, maximum: int | None = None, nullable: bool = False) -> dict[str, Any]:
    out: dict[str, Any] = {"type": ["integer", "null"] if nullable else "integer"}
    if minimum is not None:
        out["minimum"] = minimum
    if maximum is not None:
        out["maximum"] = maximum
    return out


def _obj(properties: dict[str, Any], required: list[str] | tuple[str, ...] = ()) -> dict[str, Any]:
    out: dict[str, Any] = {
        "type": "object",
        "additionalProperties": False,
        "properties": properties,
    }
    if required:
        out["required"] = list(required)
    return out


def _scenario() -> dict[str, Any]:
    # identical shape for every scenario so renderers never special-case one
    return _obj({f: {"type": ["number", "null"]} for f in SCENARIO_FIELDS}, SCENARIO_FIELDS)


PROPERTY_REPORT_JSON_SCHEMA: dict[str, Any] = _obj(
    required=TOP_LEVEL_KEYS,
    properties={
        "version": {"type": "string", "const": REPORT_SCHEMA_VERSION},
        "reportMeta": _obj(
            {
                "generatedAt": {"type": "string", "format": "date-time"},
                "targetCapPct": _num(minimum=0),
                "currency": {"type": "string", "minLength": 1},
                "locale": {"type": "string", "minLength": 2},
            },
            ["generatedAt", "targetCapPct", "currency", "locale"],
        ),
        "subject": _obj(
            {
                "address": {"type": "string", "minLength": 3},
                "unitLabel": {"type": "string"},
                "city": {"type": "string"},
                "state": {"type": "string"},
                "zip": {"type": "string"},
                "county": {"type": "string"},
                "parcelId": {"type": "string"},
                "mlsId": {"type": "string"},
                "geo": _obj(
                    {
                        "lat": _num(minimum=-90, maximum=90, nullable=True),
                        "lng": _num(minimum=-180, maximum=180, nullable=True),
                    }
                ),
            },
            ["address"],
        ),
        "purchase": _obj(
            {
                "purchasePrice": _num(minimum=0, nullable=True),
                "rehabBudget": _num(minimum=0),
                "closingCostPct": _num(minimum=0),
                "pointsPct": _num(minimum=0),
                "totalCost": _num(minimum=0, nullable=True),
            },
            ["purchasePrice", "rehabBudget", "closingCostPct", "pointsPct", "totalCost"],
        ),
        "propertySnapshot": _obj(
            {
                "propertyType": {"type": "string"},
                "unitMix": {"type": "string"},
                "beds": _num(minimum=0),
                "baths": _num(minimum=0),
                "livingSqft": _num(minimum=0, nullable=True),
                "yearBuilt": _int(minimum=1800, maximum=2100, nullable=True),
                "lotSizeSqft": _num(minimum=0, nullable=True),
                "hoa": _obj(
                    {
                        "hasHoa": {"type": "boolean"},
                        "annual": _num(minimum=0),
                        "monthly": _num(minimum=0),
                        "name": {"type": "string"},
                        "notes": {"type": "string"},
                    },
                    ["hasHoa", "annual", "monthly", "name", "notes"],
                ),
                "taxes": _obj(
                    {
                        "annual": _num(minimum=0, nullable=True),
                        "year": _int(minimum=2000, maximum=2100, nullable=True),
                    },
                    ["annual", "year"],
                ),
                "insurance": _obj(
                    {
                        "dp3Annual": _num(minimum=0, nullable=True),
                        "notes": {"type": "string"},
                    },
                    ["dp3Annual", "notes"],
                ),
                "recentUpdates": {"type": "array", "items": {"type": "string"}},
            },
            ["propertyType", "unitMix", "beds", "baths", "hoa", "taxes", "insurance", "recentUpdates"],
        ),
        "units": {
            "type": "array",
            "minItems": MIN_UNITS,
            "items": _obj(
                {
                    "name": {"type": "string"},
                    "beds": _num(minimum=0),
                    "baths": _num(minimum=0),
                    "sqft": _num(minimum=0, nullable=True),
                    "modeledRentMonthly": _num(minimum=0, nullable=True),
                    "leaseTermMonths": _int(minimum=1),
                    "notes": {"type": "string"},
                },
                ["name", "beds", "baths", "sqft", "modeledRentMonthly", "leaseTermMonths", "notes"],
            ),
        },
        "rents": _obj(
            {
                "benchmarkMedian": _num(minimum=0, nullable=True),
                "qualityAdjustmentPct": _num(),
                "modeledMarketRentMonthly": _num(minimum=0, nullable=True),
                "grossScheduledRentMonthly": _num(minimum=0, nullable=True),
            },
            ["benchmarkMedian", "qualityAdjustmentPct", "modeledMarketRentMonthly", "grossScheduledRentMonthly"],
        ),
        "rentComps": {
            "type": "array",
            "minItems": MIN_RENT_COMPS,
            "items": _obj(
                {
                    "address": {"type": "string", "minLength": 3},
                    "beds": _num(minimum=0),
                    "baths": _num(minimum=0),
                    "askingRent": _num(minimum=0, nullable=True),
                    "distanceMiles": _num(minimum=0, nullable=True),
                    "conditionNote": {"type": "string"},
                },
                ["address", "beds", "baths", "askingRent", "distanceMiles", "conditionNote"],
            ),
        },
        "operatingAssumptions": _obj(
            {
                "vacancyPct": _num(minimum=0),
                "maintenancePctOfGrossRent": _num(minimum=0),
                "managementPctOfEGI": _num(minimum=0),
                "selfManaged": {"type": "boolean"},
                "utilitiesLandlordPaidAnnual": _num(minimum=0),
                "otherOpExAnnual": _num(minimum=0),
            },
            [
                "vacancyPct",
                "maintenancePctOfGrossRent",
                "managementPctOfEGI",
                "selfManaged",
                "utilitiesLandlordPaidAnnual",
                "otherOpExAnnual",
            ],
        ),
        "financing": _obj(
            {
                "downPaymentPct": _num(minimum=0),
                "rateAnnualPct": _num(minimum=0),
                "termYears": _int(minimum=1),
                "loanAmount": _num(minimum=0, nullable=True),
                "monthlyPI": _num(minimum=0, nullable=True),
                "annualDebtService": _num(minimum=0, nullable=True),
            },
            ["downPaymentPct", "rateAnnualPct", "termYears", "loanAmount", "monthlyPI", "annualDebtService"],
        ),
        "totals": _obj(
            {
                "egiAnnual": _num(minimum=0, nullable=True),
                "opExAnnual": _num(minimum=0, nullable=True),
                "noiAnnual": _num(minimum=0, nullable=True),
                "capRatePct": _num(minimum=0, nullable=True),
                "dscr": _num(minimum=0, nullable=True),
                "cashFlowAnnual": _num(minimum=-1_000_000_000, nullable=True),
                "cashOnCashRoiPct": _num(nullable=True),
                "onePercentRulePct": _num(minimum=0, nullable=True),
            },
            [
                "egiAnnual",
                "opExAnnual",
                "noiAnnual",
                "capRatePct",
                "dscr",
                "cashFlowAnnual",
                "cashOnCashRoiPct",
                "onePercentRulePct",
            ],
        ),
        "sensitivity": _obj(
            {name: _scenario() for name in SENSITIVITY_SCENARIOS},
            SENSITIVITY_SCENARIOS,
        ),
        "negotiation": _obj(
            {
                "targetCapPct": _num(minimum=0),
                "maxPurchasePriceAtTargetCap": _num(minimum=0, nullable=True),
                "assumptions": _obj(
                    {
                        "closingCostPct": _num(minimum=0),
                        "pointsPct": _num(minimum=0),
                    },
                    ["closingCostPct", "pointsPct"],
                ),
            },
            ["targetCapPct", "maxPurchasePriceAtTargetCap", "assumptions"],
        ),
        "glossary": _obj(
            {k: {"type": "string"} for k in ("EGI", "OpEx", "NOI", "Cap", "DSCR", "CoC")},
            ["EGI", "OpEx", "NOI", "Cap", "DSCR", "CoC"],
        ),
    },
)

_validator = Draft202012Validator(PROPERTY_REPORT_JSON_SCHEMA)


def response_format(strict: bool = False) -> dict[str, Any]:
    """`text.format` block for a Responses API request."""
    return {
        "type": "json_schema",
        "name": REPORT_SCHEMA_NAME,
        "strict": strict,
        "schema": PROPERTY_REPORT_JSON_SCHEMA,
    }


def validate_report(report: Any) -> list[str]:
    """
    Check a parsed report against the contract.

    Returns human readable problems as "path: message", root-level problems
    as "<root>: message". An empty list means the report conforms.
    """
    problems: list[str] = []
    for err in _validator.iter_errors(report):
        path = "/".join(str(p) for p in err.absolute_path) or "<root>"
        problems.append(f"{path}: {err.message}")
    return sorted(problems)

# src/propreport/services/normalize.py
"""
The one place where raw numbers become calculator inputs.

Two entry points:

  inputs_from_report(report)  -- generation-service JSON (whole-number
                                 percents such as vacancyPct: 5)
  inputs_from_mapping(data)   -- calculator-shaped JSON (fractions such as
                                 vacancyRate: 0.05)

Neither raises for missing, null, negative or non-numeric values; those
fall back to the defaults below.
"""
from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from propreport.domain.investment import (
    Financing,
    Fraction,
    InvestmentInputs,
    UnitRent,
    WholePercent,
    to_fraction,
)

DEFAULT_CLOSING_COST_PCT = Fraction(0.03)
DEFAULT_POINTS_PCT = Fraction(0.0075)
DEFAULT_VACANCY_RATE = Fraction(0.05)
DEFAULT_MAINTENANCE_PCT_OF_GROSS_RENT = Fraction(0.08)
DEFAULT_MANAGEMENT_PCT_OF_EGI = Fraction(0.08)
DEFAULT_DOWN_PAYMENT_PCT = Fraction(0.25)
DEFAULT_ANNUAL_RATE_PCT = Fraction(0.077)
DEFAULT_TERM_MONTHS = 360
DEFAULT_UNIT_NAME = "Unit A"


def _to_num(val: Any) -> float | None:
    """
    Lenient converter. Accepts 250000, "250000", "$250,000", "6.5%".
    Returns None for missing/blank/garbage/NaN/inf and for booleans.
    """
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, (int, float)):
        f = float(val)
    elif isinstance(val, str):
        s = val.strip().replace("$", "").replace(",", "").replace("%", "").strip()
        if not s:
            return None
        try:
            f = float(s)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(f) or math.isinf(f):
        return None
    return f


def coerce_non_negative(val: Any, default: float) -> float:
    f = _to_num(val)
    if f is None or f < 0:
        return default
    return f


def _fraction(val: Any, default: Fraction, *, upper: float | None = None) -> Fraction:
    f = _to_num(val)
    if f is None or f < 0 or (upper is not None and f > upper):
        return default
    return Fraction(f)


def _whole_percent(val: Any, default: Fraction, *, upper: float | None = None) -> Fraction:
    f = _to_num(val)
    if f is None or f < 0:
        return default
    frac = to_fraction(WholePercent(f))
    if upper is not None and frac > upper:
        return default
    return frac


def _fraction_or_percent(val: Any, default: Fraction) -> Fraction:
    # contract fields with no declared unit: 3 means 3%, 0.03 also means 3%
    f = _to_num(val)
    if f is None or f < 0:
        return default
    if f > 1.0:
        return to_fraction(WholePercent(f))
    return Fraction(f)


def _term_months(val: Any, default: int, *, scale: int = 1) -> int:
    f = _to_num(val)
    if f is None:
        return default
    scaled = f * scale
    if not math.isfinite(scaled):
        return default
    months = int(round(scaled))
    if months < 1:
        return default
    return months


def _dig(data: Any, *path: str) -> Any:
    cur = data
    for key in path:
        if not isinstance(cur, Mapping):
            return None
        cur = cur.get(key)
    return cur


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        if k in data and data[k] is not None:
            return data[k]
    return None


def _unit_name(raw: Any, index: int) -> str:
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    if raw is not None and not isinstance(raw, (dict, list)) and str(raw).strip():
        return str(raw).strip()
    return f"Unit {chr(ord('A') + index)}" if index < 26 else f"Unit {index + 1}"


def _units(raw_units: Any, rent_keys: tuple[str, ...]) -> tuple[UnitRent, ...]:
    if not isinstance(raw_units, (list, tuple)) or not raw_units:
        return (UnitRent(name=DEFAULT_UNIT_NAME, monthly_rent=0.0),)

    units: list[UnitRent] = []
    for i, u in enumerate(raw_units):
        if not isinstance(u, Mapping):
            u = {}
        rent = coerce_non_negative(_pick(u, *rent_keys), 0.0)
        units.append(UnitRent(name=_unit_name(u.get("name"), i), monthly_rent=rent))
    return tuple(units)


def inputs_from_report(report: Any) -> InvestmentInputs:
    """
    Map a property_investment_report_v1 object to calculator inputs.

    Unit conversions happen here and nowhere else:
      - operatingAssumptions.*Pct and financing.*Pct are whole percents
      - financing.termYears is years
      - purchase.closingCostPct / pointsPct are read as fractions unless > 1
    """
    if not isinstance(report, Mapping):
        report = {}

    oa = _dig(report, "operatingAssumptions")
    fin = _dig(report, "financing")

    financing = Financing(
        down_payment_pct=_whole_percent(_dig(fin, "downPaymentPct"), DEFAULT_DOWN_PAYMENT_PCT, upper=1.0),
        annual_rate_pct=_whole_percent(_dig(fin, "rateAnnualPct"), DEFAULT_ANNUAL_RATE_PCT),
        term_months=_term_months(_dig(fin, "termYears"), DEFAULT_TERM_MONTHS, scale=12),
    )

    return InvestmentInputs(
        purchase_price=coerce_non_negative(_dig(report, "purchase", "purchasePrice"), 0.0),
        closing_cost_pct=_fraction_or_percent(_dig(report, "purchase", "closingCostPct"), DEFAULT_CLOSING_COST_PCT),
        points_pct=_fraction_or_percent(_dig(report, "purchase", "pointsPct"), DEFAULT_POINTS_PCT),
        vacancy_rate=_whole_percent(_dig(oa, "vacancyPct"), DEFAULT_VACANCY_RATE),
        maintenance_pct_of_gross_rent=_whole_percent(
            _dig(oa, "maintenancePctOfGrossRent"), DEFAULT_MAINTENANCE_PCT_OF_GROSS_RENT
        ),
        management_pct_of_egi=_whole_percent(_dig(oa, "managementPctOfEGI"), DEFAULT_MANAGEMENT_PCT_OF_EGI),
        taxes_annual=coerce_non_negative(_dig(report, "propertySnapshot", "taxes", "annual"), 0.0),
        insurance_annual=coerce_non_negative(_dig(report, "propertySnapshot", "insurance", "dp3Annual"), 0.0),
        hoa_annual=coerce_non_negative(_dig(report, "propertySnapshot", "hoa", "annual"), 0.0),
        utilities_landlord_annual=coerce_non_negative(_dig(oa, "utilitiesLandlordPaidAnnual"), 0.0),
        other_op_ex_annual=coerce_non_negative(_dig(oa, "otherOpExAnnual"), 0.0),
        units=_units(_dig(report, "units"), ("modeledRentMonthly",)),
        financing=financing,
    )


def inputs_from_mapping(data: Any) -> InvestmentInputs:
    """
    Fill defaults for calculator-shaped input (camelCase or snake_case keys,
    percentages already as fractions).

    Example:
        {"purchasePrice": 500000, "units": [{"name": "Unit A", "monthlyRent": 2000}]}
    """
    if not isinstance(data, Mapping):
        data = {}

    fin = _pick(data, "financing")
    if not isinstance(fin, Mapping):
        fin = {}

    financing = Financing(
        down_payment_pct=_fraction(
            _pick(fin, "downPaymentPct", "down_payment_pct"), DEFAULT_DOWN_PAYMENT_PCT, upper=1.0
        ),
        annual_rate_pct=_fraction(_pick(fin, "annualRatePct", "annual_rate_pct"), DEFAULT_ANNUAL_RATE_PCT),
        term_months=_term_months(_pick(fin, "termMonths", "term_months"), DEFAULT_TERM_MONTHS),
    )

    return InvestmentInputs(
        purchase_price=coerce_non_negative(_pick(data, "purchasePrice", "purchase_price"), 0.0),
        closing_cost_pct=_fraction(_pick(data, "closingCostPct", "closing_cost_pct"), DEFAULT_CLOSING_COST_PCT),
        points_pct=_fraction(_pick(data, "pointsPct", "points_pct"), DEFAULT_POINTS_PCT),
        vacancy_rate=_fraction(_pick(data, "vacancyRate", "vacancy_rate"), DEFAULT_VACANCY_RATE),
        maintenance_pct_of_gross_rent=_fraction(
            _pick(data, "maintenancePctOfGrossRent", "maintenance_pct_of_gross_rent"),
            DEFAULT_MAINTENANCE_PCT_OF_GROSS_RENT,
        ),
        management_pct_of_egi=_fraction(
            _pick(data, "managementPctOfEGI", "management_pct_of_egi"), DEFAULT_MANAGEMENT_PCT_OF_EGI
        ),
        taxes_annual=coerce_non_negative(_pick(data, "taxesAnnual", "taxes_annual"), 0.0),
        insurance_annual=coerce_non_negative(_pick(data, "insuranceAnnual", "insurance_annual"), 0.0),
        hoa_annual=coerce_non_negative(_pick(data, "hoaAnnual", "hoa_annual"), 0.0),
        utilities_landlord_annual=coerce_non_negative(
            _pick(data, "utilitiesLandlordAnnual", "utilities_landlord_annual"), 0.0
        ),
        other_op_ex_annual=coerce_non_negative(_pick(data, "otherOpExAnnual", "other_op_ex_annual"), 0.0),
        units=_units(_pick(data, "units"), ("monthlyRent", "monthly_rent", "rent")),
        financing=financing,
    )

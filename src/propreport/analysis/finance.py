from __future__ import annotations

import math

from propreport.domain.investment import (
    Fraction,
    InvestmentInputs,
    InvestmentResult,
    ScenarioMetrics,
)
from propreport.domain.report_schema import SENSITIVITY_SCENARIOS

# (rent_factor, opex_factor) per sensitivity scenario
_SCENARIO_FACTORS: dict[str, tuple[float, float]] = {
    "rentMinus10": (0.90, 1.00),
    "baseCase": (1.00, 1.00),
    "rentPlus10": (1.10, 1.00),
    "opExMinus10": (1.00, 0.90),
    "opExPlus10": (1.00, 1.10),
}


def monthly_principal_and_interest(principal: float, annual_rate: Fraction, n_months: int) -> float:
    """
    Standard fixed-rate amortization formula:
    M = P * r / (1 - (1 + r)^-n)
    P = loan principal
    r = monthly interest rate
    n = number of payments (months)

    A 0% loan amortizes straight-line: P / n.
    """
    r = annual_rate / 12.0
    n = n_months

    if r == 0:
        return principal / n

    denom = 1 - (1 + r) ** (-n)
    if denom == 0:
        # rate too small to register in floating point
        return principal / n
    return principal * r / denom


def _finite(value: float | None) -> float | None:
    # amounts past the float range come out as inf or nan
    if value is None or not math.isfinite(value):
        return None
    return value


def _ratio(numerator: float, denominator: float) -> float | None:
    # undefined ratios stay None so they serialize as JSON null
    if not (math.isfinite(numerator) and math.isfinite(denominator)) or denominator == 0:
        return None
    try:
        out = numerator / denominator
    except OverflowError:
        return None
    # denominators near the float floor overflow to inf
    return _finite(out)


def _evaluate(inputs: InvestmentInputs, rent_factor: float = 1.0, opex_factor: float = 1.0) -> InvestmentResult:
    fin = inputs.financing
    price = inputs.purchase_price

    # --- income side ---
    monthly_rent = sum(u.monthly_rent for u in inputs.units) * rent_factor
    gsr = monthly_rent * 12.0
    vacancy_loss = gsr * inputs.vacancy_rate
    egi = gsr - vacancy_loss

    # --- operating expenses ---
    # maintenance scales with scheduled rent, management with collected income
    maintenance = gsr * inputs.maintenance_pct_of_gross_rent
    management = egi * inputs.management_pct_of_egi
    opex = (
        inputs.taxes_annual
        + inputs.insurance_annual
        + inputs.hoa_annual
        + maintenance
        + management
        + inputs.utilities_landlord_annual
        + inputs.other_op_ex_annual
    ) * opex_factor

    noi = egi - opex

    # --- acquisition ---
    closing_cost = price * inputs.closing_cost_pct
    total_cost = price + closing_cost
    down_payment = price * fin.down_payment_pct
    loan_amount = price * (1 - fin.down_payment_pct)

    # --- debt service ---
    monthly_pi = monthly_principal_and_interest(loan_amount, fin.annual_rate_pct, fin.term_months)
    annual_debt_service = monthly_pi * 12.0

    points_cost = price * inputs.points_pct
    cash_invested = down_payment + closing_cost + points_cost
    cash_flow = noi - annual_debt_service

    return InvestmentResult(
        gross_scheduled_rent_annual=_finite(gsr),
        vacancy_loss_annual=_finite(vacancy_loss),
        effective_gross_income_annual=_finite(egi),
        maintenance_annual=_finite(maintenance),
        management_annual=_finite(management),
        operating_expenses_annual=_finite(opex),
        net_operating_income_annual=_finite(noi),
        closing_cost=_finite(closing_cost),
        points_cost=_finite(points_cost),
        total_acquisition_cost=_finite(total_cost),
        down_payment=_finite(down_payment),
        loan_amount=_finite(loan_amount),
        monthly_principal_and_interest=_finite(monthly_pi),
        annual_debt_service=_finite(annual_debt_service),
        debt_service_coverage_ratio=_ratio(noi, annual_debt_service),
        cap_rate_pct=_ratio(noi, total_cost),
        cash_invested=_finite(cash_invested),
        annual_cash_flow=_finite(cash_flow),
        cash_on_cash_roi_pct=_ratio(cash_flow, cash_invested),
        one_percent_rule_pct=_ratio(monthly_rent, price),
    )


def compute_investment_metrics(inputs: InvestmentInputs) -> InvestmentResult:
    """
    Core underwriting math for one report.

    Pure and deterministic: the inputs are never mutated and no field is
    ever NaN or infinite. Zero denominators give None, and so do amounts
    that overflow the float range.
    """
    return _evaluate(inputs)


def compute_sensitivity(inputs: InvestmentInputs) -> dict[str, ScenarioMetrics]:
    """
    Re-run the model for the five standard scenarios:
    rent -10% / base / rent +10% / OpEx -10% / OpEx +10%.
    """
    out: dict[str, ScenarioMetrics] = {}
    for name in SENSITIVITY_SCENARIOS:
        rent_factor, opex_factor = _SCENARIO_FACTORS[name]
        r = _evaluate(inputs, rent_factor=rent_factor, opex_factor=opex_factor)
        out[name] = ScenarioMetrics(
            noi_annual=r.net_operating_income_annual,
            cap_rate_pct=r.cap_rate_pct,
            dscr=r.debt_service_coverage_ratio,
            cash_flow_annual=r.annual_cash_flow,
        )
    return out


def max_purchase_price_at_target_cap(inputs: InvestmentInputs, target_cap: Fraction) -> float | None:
    """
    Highest price P where NOI / (P * (1 + closing_cost_pct)) hits target_cap.

    NOI does not depend on price (taxes/insurance are fixed dollar inputs),
    so this is closed form. None when the target or NOI is not positive.
    """
    if target_cap <= 0:
        return None
    noi = _evaluate(inputs).net_operating_income_annual
    if noi is None or noi <= 0:
        return None
    return _ratio(noi, target_cap * (1 + inputs.closing_cost_pct))

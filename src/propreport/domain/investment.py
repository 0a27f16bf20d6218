from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, NewType

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Two different percent encodings travel through the system:
#   Fraction      0.05 means 5%   (what the calculator consumes)
#   WholePercent  5    means 5%   (what the report contract carries)
Fraction = NewType("Fraction", float)
WholePercent = NewType("WholePercent", float)


def to_fraction(value: WholePercent) -> Fraction:
    return Fraction(value / 100.0)


def to_whole_percent(value: Fraction) -> WholePercent:
    return WholePercent(value * 100.0)


class _InputModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class UnitRent(_InputModel):
    name: str
    monthly_rent: float = Field(default=0.0, ge=0.0)


class Financing(_InputModel):
    down_payment_pct: Fraction = Field(default=Fraction(0.25), ge=0.0, le=1.0)
    annual_rate_pct: Fraction = Field(default=Fraction(0.077), ge=0.0)
    term_months: int = Field(default=360, ge=1)


class InvestmentInputs(_InputModel):
    """
    Normalized, defaulted calculator input.

    Every percentage is a Fraction here. Build instances through
    propreport.services.normalize so whole-percent values from the
    report contract are converted exactly once.
    """

    purchase_price: float = Field(default=0.0, ge=0.0)
    closing_cost_pct: Fraction = Field(default=Fraction(0.03), ge=0.0)
    points_pct: Fraction = Field(default=Fraction(0.0075), ge=0.0)

    vacancy_rate: Fraction = Field(default=Fraction(0.05), ge=0.0)
    maintenance_pct_of_gross_rent: Fraction = Field(default=Fraction(0.08), ge=0.0)
    management_pct_of_egi: Fraction = Field(default=Fraction(0.08), ge=0.0, alias="managementPctOfEGI")

    taxes_annual: float = Field(default=0.0, ge=0.0)
    insurance_annual: float = Field(default=0.0, ge=0.0)
    hoa_annual: float = Field(default=0.0, ge=0.0)
    utilities_landlord_annual: float = Field(default=0.0, ge=0.0)
    other_op_ex_annual: float = Field(default=0.0, ge=0.0, alias="otherOpExAnnual")

    units: tuple[UnitRent, ...] = Field(
        default=(UnitRent(name="Unit A", monthly_rent=0.0),),
        min_length=1,
    )
    financing: Financing = Field(default_factory=Financing)

    def as_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


def _camel_dict(obj: Any) -> dict[str, Any]:
    return {to_camel(k): v for k, v in asdict(obj).items()}


@dataclass(frozen=True)
class InvestmentResult:
    # None marks an undefined ratio (zero denominator) or an amount past
    # the float range
    gross_scheduled_rent_annual: float | None
    vacancy_loss_annual: float | None
    effective_gross_income_annual: float | None    # EGI
    maintenance_annual: float | None               # from gross scheduled rent
    management_annual: float | None                # from EGI
    operating_expenses_annual: float | None
    net_operating_income_annual: float | None      # may be negative

    closing_cost: float | None
    points_cost: float | None
    total_acquisition_cost: float | None
    down_payment: float | None
    loan_amount: float | None
    monthly_principal_and_interest: float | None
    annual_debt_service: float | None

    debt_service_coverage_ratio: float | None
    cap_rate_pct: float | None                     # fraction, x100 for display
    cash_invested: float | None
    annual_cash_flow: float | None
    cash_on_cash_roi_pct: float | None             # fraction
    one_percent_rule_pct: float | None             # monthly rent / price, fraction

    def as_dict(self) -> dict[str, Any]:
        return _camel_dict(self)


@dataclass(frozen=True)
class ScenarioMetrics:
    noi_annual: float | None
    cap_rate_pct: float | None
    dscr: float | None
    cash_flow_annual: float | None

    def as_dict(self) -> dict[str, Any]:
        return _camel_dict(self)

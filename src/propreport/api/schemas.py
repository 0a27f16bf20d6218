# src/propreport/api/schemas.py
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from propreport.services.normalize import coerce_non_negative


# --------------------------------------------
# Generate (proxy to the generation service)
# --------------------------------------------

class GenerateRequest(BaseModel):
    """
    Body for POST /api/generate.

    Kept permissive: the browser form sends whatever the user typed, and
    only a blank address is a client error (checked by the service layer).
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    address: str | None = None
    purchase_price: float | None = Field(default=None, alias="purchasePrice")
    overrides: str | None = None

    @field_validator("address", "overrides", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (dict, list)):
            return None
        return str(v)

    @field_validator("purchase_price", mode="before")
    @classmethod
    def _price(cls, v: Any) -> Any:
        # "$500,000" -> 500000.0; garbage or <= 0 -> None
        f = coerce_non_negative(v, 0.0)
        return f or None


class ErrorResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    error: str


# --------------------------------------------
# Metrics (local calculator)
# --------------------------------------------

class MetricsResponse(BaseModel):
    """
    Response for POST /api/metrics.
    Ratios are None when their denominator is zero.
    """
    model_config = ConfigDict(extra="allow")

    inputs: dict[str, Any]
    metrics: dict[str, Any]
    sensitivity: dict[str, dict[str, Any]]


class ReportViewResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    address: str
    inputs: dict[str, Any]
    units: list[dict[str, Any]]
    comps: list[dict[str, Any]]
    metrics: dict[str, Any]
    sensitivity: dict[str, dict[str, Any]]
    negotiation: dict[str, Any]
    warnings: list[str] = []

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from propreport.analysis.finance import (
    compute_investment_metrics,
    compute_sensitivity,
    max_purchase_price_at_target_cap,
)
from propreport.domain.investment import WholePercent, to_fraction
from propreport.domain.report_schema import validate_report
from propreport.services.normalize import coerce_non_negative, inputs_from_report

DEFAULT_TARGET_CAP_PCT = WholePercent(8.0)


def _comps(raw: Any) -> list[dict[str, Any]]:
    if not isinstance(raw, list):
        return []
    out = []
    for c in raw:
        if not isinstance(c, Mapping):
            continue
        out.append(
            {
                "label": str(c.get("address") or ""),
                "rent": coerce_non_negative(c.get("askingRent"), 0.0),
                "beds": f"{c.get('beds')}/{c.get('baths')}",
                "distanceMiles": coerce_non_negative(c.get("distanceMiles"), 0.0),
                "condition": str(c.get("conditionNote") or ""),
            }
        )
    return out


def build_report_view(report: Any) -> dict[str, Any]:
    """
    Turn a raw generation-service report into everything the renderer needs:
    normalized inputs, locally computed metrics, sensitivity scenarios and
    the negotiation ceiling. Service-side totals are not trusted; metrics
    are always recomputed here.
    """
    if not isinstance(report, Mapping):
        report = {}

    inputs = inputs_from_report(report)
    metrics = compute_investment_metrics(inputs)
    sensitivity = compute_sensitivity(inputs)

    meta = report.get("reportMeta") if isinstance(report.get("reportMeta"), Mapping) else {}
    target_cap_pct = WholePercent(coerce_non_negative(meta.get("targetCapPct"), DEFAULT_TARGET_CAP_PCT))
    subject = report.get("subject") if isinstance(report.get("subject"), Mapping) else {}

    return {
        "address": str(subject.get("address") or ""),
        "inputs": inputs.as_dict(),
        "units": [u.model_dump(by_alias=True) for u in inputs.units],
        "comps": _comps(report.get("rentComps")),
        "metrics": metrics.as_dict(),
        "sensitivity": {name: s.as_dict() for name, s in sensitivity.items()},
        "negotiation": {
            "targetCapPct": target_cap_pct,
            "maxPurchasePriceAtTargetCap": max_purchase_price_at_target_cap(inputs, to_fraction(target_cap_pct)),
        },
        "warnings": validate_report(report),
    }

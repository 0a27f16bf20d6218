from __future__ import annotations

import math
from datetime import date
from typing import Any

from propreport.domain.report_schema import SENSITIVITY_SCENARIOS

_SCENARIO_LABELS = {
    "rentMinus10": "Rent -10%",
    "baseCase": "Base case",
    "rentPlus10": "Rent +10%",
    "opExMinus10": "OpEx -10%",
    "opExPlus10": "OpEx +10%",
}


def _missing(n: Any) -> bool:
    return n is None or isinstance(n, bool) or not isinstance(n, (int, float)) or math.isnan(n)


def fmt_usd(n: Any) -> str:
    if _missing(n):
        return "-"
    sign = "-" if n < 0 else ""
    return f"{sign}${abs(n):,.0f}"


def fmt_pct(n: Any) -> str:
    """Fraction -> '3.27%'."""
    if _missing(n):
        return "-"
    return f"{n * 100:.2f}%"


def fmt_ratio(n: Any) -> str:
    if _missing(n):
        return "-"
    return f"{n:.2f}×"


def _row(label: str, value: str, sub: str = "") -> str:
    line = f"  {label:<22}{value:>14}"
    return f"{line}  {sub}" if sub else line


def render_text_report(view: dict[str, Any], prepared: date | None = None) -> str:
    """Plain-text investment report for a build_report_view() result."""
    prepared = prepared or date.today()
    m = view.get("metrics") or {}
    inputs = view.get("inputs") or {}

    lines = [
        f"Investment Report — {view.get('address') or '(no address)'}",
        f"Prepared: {prepared.month}/{prepared.day}/{prepared.year}",
        "",
        _row("Purchase Price", fmt_usd(inputs.get("purchasePrice"))),
        _row("NOI", fmt_usd(m.get("netOperatingIncomeAnnual")), "Net Operating Income (yr)"),
        _row("Cap Rate", fmt_pct(m.get("capRatePct"))),
        _row("Monthly P&I", fmt_usd(m.get("monthlyPrincipalAndInterest"))),
        _row("DSCR", fmt_ratio(m.get("debtServiceCoverageRatio"))),
        _row("Cash Flow (yr)", fmt_usd(m.get("annualCashFlow"))),
        _row("Total Cost", fmt_usd(m.get("totalAcquisitionCost"))),
        _row("Cash Invested", fmt_usd(m.get("cashInvested"))),
        _row("Cash-on-Cash", fmt_pct(m.get("cashOnCashRoiPct"))),
        "",
        "Units & Rents",
    ]
    for u in view.get("units") or []:
        lines.append(f"  {u.get('name', ''):<30}{fmt_usd(u.get('monthlyRent')):>12}/mo")

    sens = view.get("sensitivity") or {}
    if sens:
        lines += ["", "Sensitivity", f"  {'':<14}{'NOI':>12}{'Cap':>10}{'DSCR':>9}{'Cash Flow':>12}"]
        for name in SENSITIVITY_SCENARIOS:
            s = sens.get(name)
            if not s:
                continue
            lines.append(
                f"  {_SCENARIO_LABELS[name]:<14}{fmt_usd(s.get('noiAnnual')):>12}"
                f"{fmt_pct(s.get('capRatePct')):>10}{fmt_ratio(s.get('dscr')):>9}"
                f"{fmt_usd(s.get('cashFlowAnnual')):>12}"
            )

    comps = view.get("comps") or []
    if comps:
        lines += ["", "Rent Comps"]
        for c in comps:
            lines.append(
                f"  {c.get('label', '')[:40]:<40}{fmt_usd(c.get('rent')):>10}  {c.get('beds', '')}"
                f"  {c.get('distanceMiles', 0):.1f} mi  {c.get('condition', '')}".rstrip()
            )

    neg = view.get("negotiation") or {}
    if neg:
        lines += [
            "",
            f"Max price at {neg.get('targetCapPct', 0):g}% cap: "
            f"{fmt_usd(neg.get('maxPurchasePriceAtTargetCap'))}",
        ]

    return "\n".join(lines) + "\n"

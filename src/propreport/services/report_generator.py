# src/propreport/services/report_generator.py
from __future__ import annotations

import json
from typing import Any, Protocol

from propreport.adapters.config import AppConfig
from propreport.adapters.logging_utils import get_logger
from propreport.adapters.openai_client import OpenAIError, make_responses_client
from propreport.domain.report_schema import response_format, validate_report

logger = get_logger(__name__)


class ResponsesPort(Protocol):
    def create(self, payload: dict[str, Any]) -> tuple[int, Any]:
        ...


# ---------------------------------------------------------------------
# Errors: each one knows the HTTP answer the API layer should send
# ---------------------------------------------------------------------
class ReportGenerationError(RuntimeError):
    status_code = 500

    def __init__(self, message: str, body: Any | None = None) -> None:
        super().__init__(message)
        self.body = body if body is not None else {"error": message}


class ConfigurationError(ReportGenerationError):
    pass


class InvalidRequestError(ReportGenerationError):
    status_code = 400


class UpstreamHTTPError(ReportGenerationError):
    """Non-2xx from the generation service; status and body pass through."""

    def __init__(self, status_code: int, body: Any) -> None:
        super().__init__(f"upstream HTTP {status_code}", body=body)
        self.status_code = status_code


class EmptyReportError(ReportGenerationError):
    pass


class UpstreamTransportError(ReportGenerationError):
    pass


# ---------------------------------------------------------------------
# Request shaping
# ---------------------------------------------------------------------
def _format_price(price: float) -> str:
    if float(price).is_integer():
        return str(int(price))
    return repr(float(price))


def build_user_input(address: Any, purchase_price: float | None = None, overrides: Any = None) -> str:
    """
    Single-line input the hosted prompt expects:
      "<address> — $<price> <overrides>"
    Price and overrides are optional.
    """
    addr = str(address if address is not None else "").strip()
    if not addr:
        raise InvalidRequestError("address is required")

    price_str = f" — ${_format_price(purchase_price)}" if purchase_price else ""
    extra = str(overrides).strip() if overrides else ""
    extra = f" {extra}" if extra else ""
    return f"{addr}{price_str}{extra}"


def build_responses_payload(user_input: str, *, model: str, prompt_id: str) -> dict[str, Any]:
    return {
        "model": model,
        "prompt": {"id": prompt_id},  # latest published version
        "input": user_input,
        "text": {"format": response_format(strict=False)},
    }


# ---------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------
def safe_parse_json(s: Any) -> Any | None:
    if not isinstance(s, str) or not s:
        return None
    try:
        return json.loads(s)
    except ValueError:
        return None


def _found(value: Any) -> bool:
    # objects and arrays count even when empty; null, "", 0 and false do not
    if isinstance(value, (dict, list)):
        return True
    return bool(value)


def extract_report(data: Any) -> Any | None:
    """
    Pull the structured report out of a Responses API answer.

    Tries, in order: output_parsed, output_text, then the first text item
    inside output[].content[] that parses as JSON.
    """
    if not isinstance(data, dict):
        return None

    parsed = data.get("output_parsed")
    if _found(parsed):
        return parsed

    parsed = safe_parse_json(data.get("output_text"))
    if _found(parsed):
        return parsed

    output = data.get("output")
    if isinstance(output, list):
        for message in output:
            content = message.get("content") if isinstance(message, dict) else None
            if not isinstance(content, list):
                continue
            for item in content:
                if not isinstance(item, dict):
                    continue
                if item.get("type") in ("output_text", "text") and isinstance(item.get("text"), str):
                    parsed = safe_parse_json(item["text"])
                    if _found(parsed):
                        return parsed
    return None


def redact_large(obj: Any, max_chars: int) -> Any:
    try:
        size = len(json.dumps(obj))
    except (TypeError, ValueError):
        return {"notice": "unable to serialize raw response"}
    if size > max_chars:
        return {"notice": "raw response too large to echo", "chars": size}
    return obj


# ---------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------
def generate_report(
    address: Any,
    purchase_price: float | None = None,
    overrides: Any = None,
    *,
    settings: AppConfig,
    client: ResponsesPort | None = None,
) -> dict[str, Any]:
    """
    Ask the generation service for a report and return the parsed JSON.

    Raises a ReportGenerationError subclass carrying the HTTP status and
    body to answer with. Schema problems are logged, never raised.
    """
    if not settings.OPENAI_API_KEY:
        raise ConfigurationError("Missing OPENAI_API_KEY")
    if not settings.OPENAI_PROMPT_ID:
        raise ConfigurationError("Missing OPENAI_PROMPT_ID")

    user_input = build_user_input(address, purchase_price, overrides)
    payload = build_responses_payload(
        user_input,
        model=settings.OPENAI_MODEL,
        prompt_id=settings.OPENAI_PROMPT_ID,
    )

    try:
        responses = client or make_responses_client(settings)
        status, data = responses.create(payload)
    except OpenAIError as e:
        logger.error("report_upstream_unreachable", extra={"context": {"error": str(e)}})
        raise UpstreamTransportError(str(e)) from e

    if not 200 <= status < 300:
        logger.warning("report_upstream_error", extra={"context": {"status": status}})
        raise UpstreamHTTPError(status, data)

    report = extract_report(data)
    if report is None:
        raise EmptyReportError(
            "No JSON returned",
            body={"error": "No JSON returned", "raw": redact_large(data, settings.RAW_RESPONSE_MAX_CHARS)},
        )

    problems = validate_report(report)
    if problems:
        logger.warning(
            "report_schema_mismatch",
            extra={"context": {"count": len(problems), "problems": problems[:20]}},
        )

    logger.info(
        "report_generated",
        extra={"context": {"model": settings.OPENAI_MODEL, "input_chars": len(user_input)}},
    )
    return report

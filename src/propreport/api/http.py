# src/propreport/api/http.py
from __future__ import annotations

import json
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from propreport.adapters.config import AppConfig, config
from propreport.adapters.logging_utils import get_logger
from propreport.analysis.finance import compute_investment_metrics, compute_sensitivity
from propreport.services.normalize import inputs_from_mapping
from propreport.services.report_generator import (
    ReportGenerationError,
    ResponsesPort,
    generate_report,
)
from propreport.services.report_view import build_report_view
from .schemas import ErrorResponse, GenerateRequest, MetricsResponse, ReportViewResponse

logger = get_logger(__name__)

app = FastAPI(title="Property Report Builder")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


# -------------------------------------------------------------------
# Dependencies (overridable in tests)
# -------------------------------------------------------------------
def get_settings() -> AppConfig:
    return config


def get_responses_client() -> ResponsesPort | None:
    # None -> built from settings on each request
    return None


async def _read_json_body(request: Request) -> Any:
    """
    Streamed or buffered, the body is decoded once.
    Empty or unparseable bodies come back as None.
    """
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# -------------------------------------------------------------------
# Report generation proxy
# -------------------------------------------------------------------
@app.options("/api/generate")
def generate_preflight() -> Response:
    return Response(status_code=200)


@app.api_route("/api/generate", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
def generate_wrong_method() -> JSONResponse:
    return _error(405, "Only POST")


@app.post("/api/generate")
async def generate_endpoint(
    request: Request,
    settings: AppConfig = Depends(get_settings),
    client: ResponsesPort | None = Depends(get_responses_client),
) -> JSONResponse:
    """
    Forward {address, purchasePrice, overrides} to the generation service and
    return its structured report unchanged.
    """
    if not settings.OPENAI_API_KEY:
        return _error(500, "Missing OPENAI_API_KEY")
    if not settings.OPENAI_PROMPT_ID:
        return _error(500, "Missing OPENAI_PROMPT_ID")

    body = await _read_json_body(request)
    payload = GenerateRequest.model_validate(body if isinstance(body, dict) else {})

    if not (payload.address or "").strip():
        return _error(400, "address is required")

    try:
        report = await run_in_threadpool(
            generate_report,
            payload.address,
            payload.purchase_price,
            payload.overrides,
            settings=settings,
            client=client,
        )
    except ReportGenerationError as e:
        return JSONResponse(status_code=e.status_code, content=e.body)
    except Exception as e:
        logger.exception("generate_failed")
        return _error(500, str(e))

    return JSONResponse(status_code=200, content=report)


# -------------------------------------------------------------------
# Local calculator
# -------------------------------------------------------------------
@app.post("/api/report", response_model=ReportViewResponse)
async def report_view_endpoint(request: Request) -> Any:
    """
    Map a generated report to the renderer view with locally computed metrics.
    """
    body = await _read_json_body(request)
    if not isinstance(body, dict):
        return _error(400, "report must be a JSON object")
    return ReportViewResponse(**build_report_view(body))


@app.post("/api/metrics", response_model=MetricsResponse)
async def metrics_endpoint(request: Request) -> Any:
    """
    Calculator-shaped input (fractions) in, metrics out. Missing fields take
    the documented defaults.
    """
    body = await _read_json_body(request)
    if not isinstance(body, dict):
        return _error(400, "inputs must be a JSON object")

    inputs = inputs_from_mapping(body)
    metrics = compute_investment_metrics(inputs)
    return MetricsResponse(
        inputs=inputs.as_dict(),
        metrics=metrics.as_dict(),
        sensitivity={k: v.as_dict() for k, v in compute_sensitivity(inputs).items()},
    )

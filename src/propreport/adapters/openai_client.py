# src/propreport/adapters/openai_client.py
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import requests

from propreport.adapters.config import AppConfig
from propreport.adapters.logging_utils import get_logger

logger = get_logger(__name__)

_RETRY_STATUSES = (429, 502, 503, 504)


class OpenAIError(RuntimeError):
    """Transport-level failure talking to the Responses API."""


@dataclass(frozen=True)
class ResponsesClient:
    """
    Thin client for POST {base_url}/responses.

    Returns (status_code, decoded_body) for every HTTP answer, including
    4xx/5xx, so callers can pass upstream errors through unchanged.
    Only network failures raise.
    """

    base_url: str
    api_key: str
    timeout_s: float = 120.0
    max_retries: int = 2
    backoff_base_s: float = 0.8

    def create(self, payload: dict[str, Any]) -> tuple[int, Any]:
        url = self.base_url.rstrip("/") + "/responses"

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        last_err: Exception | None = None

        for attempt in range(self.max_retries + 1):
            try:
                resp = requests.post(
                    url,
                    headers=headers,
                    json=payload,
                    timeout=self.timeout_s,
                )
            except requests.RequestException as e:
                last_err = e
                logger.warning(
                    "responses_request_failed",
                    extra={"context": {"attempt": attempt, "error": str(e)}},
                )
                if attempt < self.max_retries:
                    time.sleep(self.backoff_base_s * (2**attempt))
                    continue
                break

            # Rate limiting / transient gateway errors get another try
            if resp.status_code in _RETRY_STATUSES and attempt < self.max_retries:
                wait = self.backoff_base_s * (2**attempt)
                ra = resp.headers.get("Retry-After")
                if ra:
                    try:
                        wait = max(wait, float(ra))
                    except ValueError:
                        pass
                logger.info(
                    "responses_retry",
                    extra={"context": {"attempt": attempt, "status": resp.status_code, "wait_s": wait}},
                )
                time.sleep(wait)
                continue

            return resp.status_code, _decode_body(resp)

        raise OpenAIError(f"Responses API request failed after retries: {last_err!r}")


def _decode_body(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return {"error": resp.text or f"HTTP {resp.status_code}"}


def make_responses_client(settings: AppConfig) -> ResponsesClient:
    if not settings.OPENAI_API_KEY:
        raise OpenAIError("Missing OPENAI_API_KEY")

    return ResponsesClient(
        base_url=settings.OPENAI_BASE_URL,
        api_key=settings.OPENAI_API_KEY,
        timeout_s=settings.OPENAI_TIMEOUT_S,
        max_retries=settings.OPENAI_MAX_RETRIES,
        backoff_base_s=settings.OPENAI_BACKOFF_BASE_S,
    )

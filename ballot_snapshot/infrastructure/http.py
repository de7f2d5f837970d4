"""Single GET helper shared by the upstream clients."""
from __future__ import annotations

import time
from typing import Any, Mapping, Sequence

import httpx

from ballot_snapshot.core.logging import get_logger, log_event
from ballot_snapshot.core.payloads import parse_body
from ballot_snapshot.domain.errors import UpstreamError
from ballot_snapshot.domain.models import RequestResult

USER_AGENT = "ballot-snapshot/0.1"

QueryParams = Mapping[str, Any] | Sequence[tuple[str, Any]]

logger = get_logger("upstream")


async def get_result(
    client: httpx.AsyncClient,
    url: str,
    *,
    stage: str,
    params: QueryParams | None = None,
    headers: Mapping[str, str] | None = None,
) -> RequestResult:
    """Issue one GET and return the uninterpreted outcome.

    Timeouts and transport failures raise :class:`UpstreamError` with stage
    ``timeout`` or ``transport``; HTTP error statuses do not raise here.
    """

    merged = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    if headers:
        merged.update(headers)

    started = time.perf_counter()
    try:
        response = await client.get(url, params=params, headers=merged)
    except httpx.TimeoutException as exc:
        log_event(logger, f"{stage} timed out", event="upstream_call", stage=stage, error_code="TIMEOUT")
        raise UpstreamError(f"{stage} request timed out", stage="timeout") from exc
    except httpx.HTTPError as exc:
        log_event(logger, f"{stage} failed: {exc}", event="upstream_call", stage=stage, error_code="TRANSPORT")
        raise UpstreamError(f"{stage} request failed: {exc}", stage="transport") from exc

    duration_ms = round((time.perf_counter() - started) * 1000, 1)
    log_event(
        logger,
        f"GET {response.request.url.path} -> {response.status_code}",
        event="upstream_call",
        stage=stage,
        status=response.status_code,
        duration_ms=duration_ms,
    )
    return RequestResult(status=response.status_code, body=parse_body(response.text))


def raise_for_result(result: RequestResult, *, stage: str, label: str) -> RequestResult:
    if not result.ok:
        raise UpstreamError(
            f"{label} {result.status}",
            status=result.status,
            body=result.body,
            stage=stage,
        )
    return result

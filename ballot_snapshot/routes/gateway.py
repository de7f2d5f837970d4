from __future__ import annotations

from typing import Any

import httpx
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from ballot_snapshot.application import EventResolver, query_from_params
from ballot_snapshot.config import Settings
from ballot_snapshot.core.events import MAX_EVENTS
from ballot_snapshot.domain.errors import InvalidInput
from ballot_snapshot.domain.models import RequestResult
from ballot_snapshot.infrastructure import OpenStatesClient, ZippopotamGeocoder
from ballot_snapshot.infrastructure.openstates import BILL_INCLUDES

router = APIRouter(tags=["openstates"])

POINT_REQUIRED = "lat and lon/lng query params required"


class Gateway:
    """Per-request bundle of upstream clients sharing the app's HTTP pool."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self.settings = settings
        self.client = OpenStatesClient(settings.client_config(use_proxy=False), http_client=http_client)
        self.geocoder = ZippopotamGeocoder(http_client, base_url=settings.geocoder_base_url)

    def resolver(self) -> EventResolver:
        return EventResolver(self.client, self.geocoder, postal_strategy="point")


def get_gateway(request: Request) -> Gateway:
    return Gateway(request.app.state.settings, request.app.state.http_client)


def longitude_param(request: Request) -> str | None:
    """Longitude under any accepted alias: ``lon``, ``lng``, then ``long``."""

    params = request.query_params
    for alias in ("lon", "lng", "long"):
        value = params.get(alias)
        if value:
            return value
    return None


def _require_point(lat: str | None, lon: str | None, message: str = POINT_REQUIRED) -> None:
    if not lat or not lon:
        raise InvalidInput(message)


def forward(result: RequestResult) -> Response:
    """Relay an upstream outcome with its status code untouched."""

    if isinstance(result.body, str):
        return PlainTextResponse(result.body, status_code=result.status)
    return JSONResponse(result.body, status_code=result.status)


@router.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@router.get("/people.geo")
async def people_geo(
    lat: str | None = Query(default=None),
    lon: str | None = Depends(longitude_param),
    gateway: Gateway = Depends(get_gateway),
) -> Response:
    _require_point(lat, lon)
    result = await gateway.client.fetch("people.geo", [("lat", lat), ("lng", lon)], stage="people")
    return forward(result)


@router.get("/events.geo")
async def events_geo(
    lat: str | None = Query(default=None),
    lon: str | None = Depends(longitude_param),
    gateway: Gateway = Depends(get_gateway),
) -> Response:
    _require_point(lat, lon)
    result = await gateway.client.fetch("events.geo", [("lat", lat), ("lng", lon)], stage="events-geo")
    return forward(result)


@router.get("/jurisdictions")
async def jurisdictions(
    lat: str | None = Query(default=None),
    lon: str | None = Depends(longitude_param),
    gateway: Gateway = Depends(get_gateway),
) -> Response:
    _require_point(lat, lon)
    result = await gateway.client.fetch("jurisdictions", [("lat", lat), ("lng", lon)], stage="jurisdiction-lookup")
    return forward(result)


@router.get("/bills")
async def bills(
    jurisdiction: str | None = Query(default=None),
    created_since: str | None = Query(default=None),
    sort: str = Query(default="updated_desc"),
    per_page: int = Query(default=10, ge=1, le=50),
    gateway: Gateway = Depends(get_gateway),
) -> Response:
    if not jurisdiction:
        raise InvalidInput("jurisdiction query param required")
    params: list[tuple[str, Any]] = [("jurisdiction", jurisdiction)]
    if created_since:
        params.append(("created_since", created_since))
    params.append(("sort", sort))
    params.extend(("include", name) for name in BILL_INCLUDES)
    params.extend([("page", 1), ("per_page", per_page)])
    result = await gateway.client.fetch("bills", params, stage="bills")
    return forward(result)


@router.get("/events")
async def events(
    lat: str | None = Query(default=None),
    zip: str | None = Query(default=None),
    jurisdiction: str | None = Query(default=None),
    per_page: int = Query(default=MAX_EVENTS, ge=1),
    lon: str | None = Depends(longitude_param),
    gateway: Gateway = Depends(get_gateway),
) -> list[dict[str, Any]]:
    """Upcoming events for a jurisdiction, a point or a ZIP code.

    A jurisdiction is queried directly. Otherwise the point (or the ZIP's
    averaged point) is tried against ``events.geo`` first and, failing that,
    mapped to a jurisdiction whose events are returned.
    """

    limit = min(per_page, MAX_EVENTS)
    if jurisdiction:
        query = query_from_params(jurisdiction=jurisdiction)
    elif lat:
        _require_point(lat, lon, f"{POINT_REQUIRED} (or provide zip)")
        query = query_from_params(latitude=lat, longitude=lon)
    elif zip:
        query = query_from_params(postal_code=zip)
    else:
        raise InvalidInput(f"{POINT_REQUIRED} (or provide zip)")

    gateway.client.ensure_credentials()
    return await gateway.resolver().resolve_events(query, limit)

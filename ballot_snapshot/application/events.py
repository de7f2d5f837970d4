"""Resolution of a location or jurisdiction into a short list of events."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from ballot_snapshot.core.events import MAX_EVENTS
from ballot_snapshot.core.logging import get_logger, log_event
from ballot_snapshot.core.payloads import jurisdiction_identifier, truncate
from ballot_snapshot.domain.errors import InvalidInput, InvalidUpstreamData, NotFound, UpstreamError
from ballot_snapshot.domain.models import LocationQuery, ResolvedPlace
from ballot_snapshot.infrastructure.geocoder import Geocoder

PostalStrategy = Literal["state", "point"]

logger = get_logger("events")


class EventSource(Protocol):
    async def events_near(self, lat: float, lon: float, limit: int = ...) -> list[dict[str, Any]]: ...

    async def jurisdictions_near(self, lat: float, lon: float) -> list[dict[str, Any]]: ...

    async def events_for_jurisdiction(self, jurisdiction: str, limit: int = ...) -> list[dict[str, Any]]: ...


@dataclass(slots=True)
class EventResolution:
    """Events plus how they were found."""

    events: list[dict[str, Any]] = field(default_factory=list)
    strategy: str = "jurisdiction"
    jurisdiction: str | None = None
    place: ResolvedPlace | None = None


class EventResolver:
    """Tries progressively coarser strategies until one yields events.

    1. explicit jurisdiction: query it and stop
    2. postal code: geocode, then either use the state name as the
       jurisdiction (``postal_strategy="state"``) or continue with the
       averaged point (``"point"``)
    3. point: ``events.geo``; a non-empty list wins
    4. jurisdiction lookup for the point, then that jurisdiction's events
    """

    def __init__(
        self,
        source: EventSource,
        geocoder: Geocoder,
        *,
        postal_strategy: PostalStrategy = "state",
    ) -> None:
        if postal_strategy not in ("state", "point"):
            raise ValueError("postal_strategy must be 'state' or 'point'")
        self._source = source
        self._geocoder = geocoder
        self._postal_strategy = postal_strategy

    async def resolve_events(self, target: LocationQuery | str, limit: int = MAX_EVENTS) -> list[dict[str, Any]]:
        resolution = await self.resolve(target, limit)
        return resolution.events

    async def resolve(self, target: LocationQuery | str, limit: int = MAX_EVENTS) -> EventResolution:
        limit = max(0, min(int(limit), MAX_EVENTS))
        query = LocationQuery(jurisdiction=target) if isinstance(target, str) else target
        if query.jurisdiction:
            return await self._by_jurisdiction(query.jurisdiction, limit, strategy="jurisdiction")

        place: ResolvedPlace | None = None
        if query.has_coordinate:
            lat, lon = float(query.latitude), float(query.longitude)
        else:
            place = await self._geocoder.resolve(query.postal_code or "")
            if self._postal_strategy == "state" and place.state_name:
                log_event(logger, "using state from ZIP lookup", event="resolve", stage="postal-state", jurisdiction=place.state_name)
                resolution = await self._by_jurisdiction(place.state_name, limit, strategy="postal-state")
                resolution.place = place
                return resolution
            lat, lon = place.latitude, place.longitude

        resolution = await self._by_point(lat, lon, limit)
        resolution.place = place
        return resolution

    async def _by_jurisdiction(self, jurisdiction: str, limit: int, *, strategy: str) -> EventResolution:
        events = await self._source.events_for_jurisdiction(jurisdiction, limit)
        events = truncate(events, limit)
        log_event(logger, "events for jurisdiction", event="resolve", stage=strategy, jurisdiction=jurisdiction, items=len(events))
        return EventResolution(events=events, strategy=strategy, jurisdiction=jurisdiction)

    async def _by_point(self, lat: float, lon: float, limit: int) -> EventResolution:
        try:
            nearby = await self._source.events_near(lat, lon, limit)
        except UpstreamError as exc:
            # Not every OpenStates install serves events.geo; only a received
            # error status falls through, lost connections propagate.
            if exc.status is None:
                raise
            log_event(logger, "events.geo unavailable", event="resolve", stage="point", status=exc.status)
            nearby = []
        except InvalidUpstreamData:
            log_event(logger, "events.geo payload unusable", event="resolve", stage="point")
            nearby = []

        if nearby:
            events = truncate(nearby, limit)
            log_event(logger, "events near point", event="resolve", stage="point", items=len(events))
            return EventResolution(events=events, strategy="point")

        try:
            jurisdictions = await self._source.jurisdictions_near(lat, lon)
        except UpstreamError as exc:
            if exc.stage in ("timeout", "transport"):
                raise
            raise UpstreamError(
                f"Jurisdiction lookup failed {exc.status}",
                status=exc.status,
                body=exc.body,
                stage="jurisdiction-lookup",
            ) from exc
        except InvalidUpstreamData:
            jurisdictions = []
        if not jurisdictions:
            raise NotFound("No jurisdiction found for location")

        identifier = jurisdiction_identifier(jurisdictions[0])
        return await self._by_jurisdiction(identifier, limit, strategy="point-jurisdiction")


def query_from_params(
    *,
    latitude: str | float | None = None,
    longitude: str | float | None = None,
    postal_code: str | None = None,
    jurisdiction: str | None = None,
) -> LocationQuery:
    """Build a :class:`LocationQuery` from loosely typed request values."""

    def _float(value: str | float | None, name: str) -> float | None:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise InvalidInput(f"{name} must be a number") from exc

    return LocationQuery(
        latitude=_float(latitude, "lat"),
        longitude=_float(longitude, "lon"),
        postal_code=postal_code or None,
        jurisdiction=jurisdiction or None,
    )


__all__ = ["EventResolution", "EventResolver", "EventSource", "query_from_params"]

"""Presentation-facing use cases: representatives, events and bills for a ZIP."""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from ballot_snapshot.core.events import MAX_EVENTS, filter_upcoming, select_for_display
from ballot_snapshot.core.postal import normalize_postal_code
from ballot_snapshot.core.records import summarise_bill, summarise_event, summarise_person
from ballot_snapshot.domain.errors import InvalidInput, NotFound
from ballot_snapshot.domain.models import LocationQuery
from ballot_snapshot.infrastructure.geocoder import Geocoder
from ballot_snapshot.infrastructure.openstates import BILL_SORTS, OpenStatesClient

from .events import EventResolver

_DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
MAX_BILLS_PER_PAGE = 50


def parse_created_since(value: date | str) -> date:
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not _DATE_PATTERN.fullmatch(text):
        raise InvalidInput("created_since must be a date in yyyy-mm-dd format")
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise InvalidInput("created_since must be a date in yyyy-mm-dd format") from exc


class CivicLookupService:
    """Coordinates the geocoder, the OpenStates client and the event resolver."""

    def __init__(
        self,
        client: OpenStatesClient,
        geocoder: Geocoder,
        resolver: EventResolver | None = None,
    ) -> None:
        self._client = client
        self._geocoder = geocoder
        self._resolver = resolver or EventResolver(client, geocoder)

    async def representatives(self, postal_code: str) -> dict[str, Any]:
        place = await self._geocoder.resolve(postal_code)
        people = await self._client.people_near(place.latitude, place.longitude)
        summaries = [summarise_person(person) for person in people if isinstance(person, dict)]
        return {
            "place": place.to_dict(),
            "items": [summary.model_dump() for summary in summaries],
        }

    async def upcoming_events(
        self,
        postal_code: str,
        *,
        show: int | None = MAX_EVENTS,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Events for the ZIP's state, stale ones dropped, then trimmed for display."""

        code = normalize_postal_code(postal_code)
        resolution = await self._resolver.resolve(LocationQuery(postal_code=code), MAX_EVENTS)
        records = [event for event in resolution.events if isinstance(event, dict)]
        upcoming = filter_upcoming(records, now)
        shown = select_for_display(upcoming, show)
        return {
            "place": resolution.place.to_dict() if resolution.place else None,
            "jurisdiction": resolution.jurisdiction,
            "strategy": resolution.strategy,
            "available": len(upcoming),
            "showing": len(shown),
            "items": [summarise_event(event, index).model_dump() for index, event in enumerate(shown)],
        }

    async def bills(
        self,
        postal_code: str,
        created_since: date | str,
        *,
        sort: str = "updated_desc",
        per_page: int = 10,
    ) -> dict[str, Any]:
        code = normalize_postal_code(postal_code)
        since = parse_created_since(created_since)
        if sort not in BILL_SORTS:
            raise InvalidInput(f"sort must be one of {', '.join(sorted(BILL_SORTS))}")
        if not 1 <= int(per_page) <= MAX_BILLS_PER_PAGE:
            raise InvalidInput(f"per_page must be between 1 and {MAX_BILLS_PER_PAGE}")

        place = await self._geocoder.resolve(code)
        if not place.state_name:
            raise NotFound("Could not determine state from ZIP")
        page = await self._client.bills_for_jurisdiction(place.state_name, since, sort, int(per_page))
        items = [summarise_bill(bill, index).model_dump() for index, bill in enumerate(page.items) if isinstance(bill, dict)]
        return {
            "place": place.to_dict(),
            "jurisdiction": place.state_name,
            "total": page.total if page.total is not None else len(items),
            "showing": min(int(per_page), len(items)),
            "items": items,
        }


__all__ = ["CivicLookupService", "parse_created_since"]

"""ZIP code geocoding through the Zippopotam.us API."""
from __future__ import annotations

from typing import Any, Protocol

import httpx

from ballot_snapshot.core.postal import normalize_postal_code
from ballot_snapshot.domain.errors import InvalidUpstreamData, NotFound
from ballot_snapshot.domain.models import ResolvedPlace

from .http import get_result, raise_for_result


class Geocoder(Protocol):
    """Contract for postal code resolution."""

    async def resolve(self, postal_code: str) -> ResolvedPlace:
        """Resolve a 5-digit ZIP code to a representative point."""


def _coordinate(place: dict[str, Any], key: str) -> float:
    try:
        return float(place[key])
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidUpstreamData(f"place is missing a numeric {key}") from exc


def place_from_payload(payload: Any, postal_code: str) -> ResolvedPlace:
    """Average every returned place into one :class:`ResolvedPlace`.

    A ZIP can span several named places, so the coordinate is the mean over
    all of them while the city and state labels come from the first place.
    """

    places = payload.get("places") if isinstance(payload, dict) else None
    if not isinstance(places, list) or not places:
        raise NotFound("No places found for ZIP")
    places = [place for place in places if isinstance(place, dict)]
    if not places:
        raise InvalidUpstreamData("ZIP lookup returned malformed places")

    latitudes = [_coordinate(place, "latitude") for place in places]
    longitudes = [_coordinate(place, "longitude") for place in places]
    first = places[0]
    return ResolvedPlace(
        latitude=sum(latitudes) / len(latitudes),
        longitude=sum(longitudes) / len(longitudes),
        city_name=first.get("place name"),
        state_name=first.get("state"),
        state_abbreviation=first.get("state abbreviation"),
        postal_code=payload.get("post code") or payload.get("postcode") or postal_code,
        country=payload.get("country"),
        place_count=len(places),
    )


class ZippopotamGeocoder:
    """Client for ``GET /us/{zip}`` on Zippopotam.us."""

    def __init__(self, http_client: httpx.AsyncClient, *, base_url: str = "https://api.zippopotam.us") -> None:
        self._client = http_client
        self._base_url = base_url.rstrip("/")

    async def resolve(self, postal_code: str) -> ResolvedPlace:
        code = normalize_postal_code(postal_code)
        result = await get_result(self._client, f"{self._base_url}/us/{code}", stage="geocode")
        raise_for_result(result, stage="geocode", label="ZIP lookup failed")
        return place_from_payload(result.body, code)


__all__ = ["Geocoder", "ZippopotamGeocoder", "place_from_payload"]

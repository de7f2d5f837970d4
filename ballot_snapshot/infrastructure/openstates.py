"""Client for the OpenStates v3 API, called directly or through the gateway."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

import httpx

from ballot_snapshot.core.payloads import extract_items, extract_total, truncate
from ballot_snapshot.domain.errors import ConfigurationError, InvalidUpstreamData
from ballot_snapshot.domain.models import BillPage, RequestResult

from .http import QueryParams, get_result, raise_for_result

API_KEY_HEADER = "X-API-KEY"
BILL_INCLUDES: tuple[str, ...] = ("other_titles", "other_identifiers", "sources", "votes")
BILL_SORTS: frozenset[str] = frozenset(
    f"{field}_{direction}"
    for field in ("updated", "first_action", "last_action")
    for direction in ("asc", "desc")
)


@dataclass(frozen=True)
class ClientConfig:
    """Where the client sends requests and how it authenticates.

    In proxy mode ``base_url`` points at the gateway's ``/api`` prefix and no
    key is attached; the gateway holds the credential.
    """

    base_url: str = "https://v3.openstates.org"
    api_key: str | None = None
    use_proxy: bool = False
    timeout: float = 10.0


class OpenStatesClient:
    """Read-only OpenStates operations used by the lookup service."""

    def __init__(self, config: ClientConfig, *, http_client: httpx.AsyncClient | None = None) -> None:
        self._config = config
        self._base_url = config.base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout)
        self._owns_client = http_client is None

    @property
    def config(self) -> ClientConfig:
        return self._config

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _headers(self) -> dict[str, str]:
        if self._config.use_proxy:
            return {}
        if not self._config.api_key:
            raise ConfigurationError("Server missing OPENSTATES_API_KEY")
        return {API_KEY_HEADER: self._config.api_key}

    def ensure_credentials(self) -> None:
        """Raise :class:`ConfigurationError` when a direct call would lack its key."""

        self._headers()

    def _point(self, lat: float, lon: float) -> list[tuple[str, Any]]:
        # OpenStates names the longitude parameter `lng`; the gateway accepts `lon`.
        lon_name = "lon" if self._config.use_proxy else "lng"
        return [("lat", lat), (lon_name, lon)]

    async def fetch(self, path: str, params: QueryParams | None = None, *, stage: str = "openstates") -> RequestResult:
        """Issue one GET against ``path`` and return the raw outcome."""

        headers = self._headers()
        url = f"{self._base_url}/{path.lstrip('/')}"
        return await get_result(self._client, url, stage=stage, params=params, headers=headers)

    async def _list(self, path: str, params: QueryParams, *, stage: str) -> tuple[list[Any], Any]:
        result = raise_for_result(await self.fetch(path, params, stage=stage), stage=stage, label="OpenStates API error")
        items = extract_items(result.body)
        if items is None:
            raise InvalidUpstreamData(f"{path} returned neither a list nor a results envelope")
        return items, result.body

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    async def people_near(self, lat: float, lon: float) -> list[dict[str, Any]]:
        items, _ = await self._list("people.geo", self._point(lat, lon), stage="people")
        return items

    async def events_near(self, lat: float, lon: float, limit: int = 5) -> list[dict[str, Any]]:
        items, _ = await self._list("events.geo", self._point(lat, lon), stage="events-geo")
        return truncate(items, limit)

    async def jurisdictions_near(self, lat: float, lon: float) -> list[dict[str, Any]]:
        items, _ = await self._list("jurisdictions", self._point(lat, lon), stage="jurisdiction-lookup")
        return items

    async def events_for_jurisdiction(self, jurisdiction: str, limit: int = 5) -> list[dict[str, Any]]:
        params: list[tuple[str, Any]] = [("jurisdiction", jurisdiction)]
        if self._config.use_proxy:
            params.append(("per_page", limit))
        else:
            params.extend(
                [
                    ("deleted", "false"),
                    ("require_bills", "false"),
                    ("page", 1),
                    ("per_page", limit),
                ]
            )
        items, _ = await self._list("events", params, stage="events")
        return truncate(items, limit)

    async def bills_for_jurisdiction(
        self,
        jurisdiction: str,
        created_since: date | str,
        sort: str = "updated_desc",
        per_page: int = 10,
    ) -> BillPage:
        since = created_since.isoformat() if isinstance(created_since, date) else str(created_since)
        params: list[tuple[str, Any]] = [
            ("jurisdiction", jurisdiction),
            ("created_since", since),
            ("sort", sort),
        ]
        if not self._config.use_proxy:
            params.extend(("include", name) for name in BILL_INCLUDES)
            params.append(("page", 1))
        params.append(("per_page", per_page))

        items, body = await self._list("bills", params, stage="bills")
        return BillPage(items=truncate(items, per_page), total=extract_total(body))

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["API_KEY_HEADER", "BILL_INCLUDES", "BILL_SORTS", "ClientConfig", "OpenStatesClient"]

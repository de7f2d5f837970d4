"""Request-scoped entities for civic lookups."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import InvalidInput


@dataclass(slots=True)
class LocationQuery:
    """Where a resident is asking from.

    Without a ``jurisdiction`` hint exactly one origin must be present: a
    coordinate pair or a postal code.
    """

    latitude: float | None = None
    longitude: float | None = None
    postal_code: str | None = None
    jurisdiction: str | None = None

    def __post_init__(self) -> None:
        if self.jurisdiction is not None and not str(self.jurisdiction).strip():
            self.jurisdiction = None
        if self.jurisdiction:
            return
        has_coordinate = self.latitude is not None and self.longitude is not None
        has_postal = bool(self.postal_code and str(self.postal_code).strip())
        if self.latitude is not None and self.longitude is None:
            raise InvalidInput("longitude is required with latitude")
        if self.longitude is not None and self.latitude is None:
            raise InvalidInput("latitude is required with longitude")
        if has_coordinate == has_postal:
            raise InvalidInput("provide either a coordinate or a postal code")

    @property
    def has_coordinate(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(slots=True)
class ResolvedPlace:
    """A postal code reduced to a single representative point and label."""

    latitude: float
    longitude: float
    city_name: str | None = None
    state_name: str | None = None
    state_abbreviation: str | None = None
    postal_code: str | None = None
    country: str | None = None
    place_count: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "city": self.city_name,
            "state": self.state_name,
            "state_abbreviation": self.state_abbreviation,
            "postal_code": self.postal_code,
            "country": self.country,
            "place_count": self.place_count,
        }


@dataclass(slots=True)
class RequestResult:
    """Uninterpreted outcome of one upstream call."""

    status: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass(slots=True)
class BillPage:
    items: list[dict[str, Any]] = field(default_factory=list)
    total: int | None = None


# ----------------------------------------------------------------------
# roles
# ----------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class UnknownRole:
    kind: str = "unknown"

    def describe(self) -> str | None:
        return None


@dataclass(frozen=True, slots=True)
class LabelRole:
    text: str
    kind: str = "label"

    def describe(self) -> str | None:
        return self.text


@dataclass(frozen=True, slots=True)
class StructuredRole:
    title: str | None = None
    org: str | None = None
    district: str | None = None
    kind: str = "structured"

    def describe(self) -> str | None:
        return self.title


Role = UnknownRole | LabelRole | StructuredRole


__all__ = [
    "BillPage",
    "LabelRole",
    "LocationQuery",
    "RequestResult",
    "ResolvedPlace",
    "Role",
    "StructuredRole",
    "UnknownRole",
]

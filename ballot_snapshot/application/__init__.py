"""Application services."""

from .events import EventResolution, EventResolver, query_from_params
from .lookup import CivicLookupService

__all__ = [
    "CivicLookupService",
    "EventResolution",
    "EventResolver",
    "query_from_params",
]

"""Domain layer definitions."""

from .errors import (
    CivicError,
    ConfigurationError,
    InvalidInput,
    InvalidUpstreamData,
    NotFound,
    UpstreamError,
)
from .models import (
    BillPage,
    LabelRole,
    LocationQuery,
    RequestResult,
    ResolvedPlace,
    Role,
    StructuredRole,
    UnknownRole,
)

__all__ = [
    "BillPage",
    "CivicError",
    "ConfigurationError",
    "InvalidInput",
    "InvalidUpstreamData",
    "LabelRole",
    "LocationQuery",
    "NotFound",
    "RequestResult",
    "ResolvedPlace",
    "Role",
    "StructuredRole",
    "UnknownRole",
    "UpstreamError",
]

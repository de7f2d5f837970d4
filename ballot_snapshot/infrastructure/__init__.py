"""Infrastructure layer exports."""

from .geocoder import Geocoder, ZippopotamGeocoder
from .openstates import ClientConfig, OpenStatesClient

__all__ = [
    "ClientConfig",
    "Geocoder",
    "OpenStatesClient",
    "ZippopotamGeocoder",
]

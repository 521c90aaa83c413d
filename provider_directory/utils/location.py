"""User location acquisition and the location toggle.

The engine only knows the :class:`LocationProvider` port: something that
returns the user's coordinates once, or raises
:class:`LocationUnavailableError`. The app plugs in a geocoding adapter
(the user types a place); tests plug in fixed coordinates.
"""
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, Protocol, Tuple

from geopy.exc import GeopyError

from .geocoding import geocode_address_with_cache, handle_geocoding_error
from .search_state import FilterState, SortKey, UserLocation

logger = logging.getLogger(__name__)


class LocationUnavailableError(Exception):
    """The user's location could not be determined; the message is user-facing."""


class LocationProvider(Protocol):
    def request_once(self) -> UserLocation:
        ...


class GeocodedLocationProvider:
    """Resolve a user-typed address or place name to coordinates."""

    def __init__(
        self,
        query: str,
        geocode_fn: Callable[[str], Optional[Tuple[float, float]]] = geocode_address_with_cache,
    ):
        self.query = (query or "").strip()
        self.geocode_fn = geocode_fn

    def request_once(self) -> UserLocation:
        if not self.query:
            raise LocationUnavailableError("Enter an address or a place to use your location.")
        try:
            coords = self.geocode_fn(self.query)
        except GeopyError as e:
            raise LocationUnavailableError(handle_geocoding_error(self.query, e)) from e
        if coords is None:
            raise LocationUnavailableError(f"Could not find a location for '{self.query}'.")
        lat, lng = coords
        return UserLocation(lat=float(lat), lng=float(lng))


class StaticLocationProvider:
    """Always returns the same coordinates."""

    def __init__(self, lat: float, lng: float):
        self.location = UserLocation(lat=float(lat), lng=float(lng))

    def request_once(self) -> UserLocation:
        return self.location


class LocationStatus(str, Enum):
    INACTIVE = "inactive"
    REQUESTING = "requesting"
    ACTIVE = "active"


@dataclass
class LocationToggle:
    """On/off switch for location-based sorting.

    Turning it on asks the provider once. On success the location is stored
    and the sort switches to distance; on failure the filter state is left
    exactly as it was and ``last_error`` says why. Turning it off drops the
    location and returns the sort to name.
    """

    status: LocationStatus = LocationStatus.INACTIVE
    last_error: Optional[str] = None

    @property
    def active(self) -> bool:
        return self.status is LocationStatus.ACTIVE

    def toggle(self, state: FilterState, provider: Optional[LocationProvider] = None) -> FilterState:
        if self.active:
            self.status = LocationStatus.INACTIVE
            self.last_error = None
            return replace(state, user_location=None, sort_key=SortKey.NAME)

        if provider is None:
            self.last_error = "No location source available."
            return state

        self.status = LocationStatus.REQUESTING
        try:
            location = provider.request_once()
        except LocationUnavailableError as e:
            logger.warning(f"Location unavailable: {e}")
            self.status = LocationStatus.INACTIVE
            self.last_error = str(e)
            return state

        self.status = LocationStatus.ACTIVE
        self.last_error = None
        logger.info("User location acquired; sorting by distance")
        return replace(state, user_location=location, sort_key=SortKey.DISTANCE)

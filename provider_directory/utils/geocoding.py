"""Geocoding helpers with caching and rate limiting.

Used to turn a place the user types ("Sarajevo", "Titova 5, Mostar") into
the coordinates that drive distance sorting.
"""
import logging
from typing import Callable, Optional, Tuple

import streamlit as st
from geopy.exc import GeocoderRateLimited, GeocoderServiceError, GeocoderTimedOut, GeocoderUnavailable
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from .config import get_api_config

logger = logging.getLogger(__name__)

# Cached factory
_RATE_LIMITED_GEOCODER: Optional[Callable] = None


def _get_rate_limited_geocoder() -> Callable:
    global _RATE_LIMITED_GEOCODER
    if _RATE_LIMITED_GEOCODER is not None:
        return _RATE_LIMITED_GEOCODER

    cfg = get_api_config("geocoding")
    geolocator = Nominatim(user_agent=cfg["nominatim_user_agent"], timeout=cfg["request_timeout"])
    rate_limited = RateLimiter(
        geolocator.geocode,
        min_delay_seconds=cfg["rate_limit_delay"],
        max_retries=cfg["max_retries"],
        swallow_exceptions=False,
    )
    country_codes = cfg.get("country_codes") or None

    def geocode_fn(q, timeout=cfg["request_timeout"]):
        return rate_limited(q, timeout=timeout, country_codes=country_codes)

    _RATE_LIMITED_GEOCODER = geocode_fn
    return _RATE_LIMITED_GEOCODER


def reset_geocoder() -> None:
    """Forget the cached geocoder so the next call re-reads configuration."""
    global _RATE_LIMITED_GEOCODER
    _RATE_LIMITED_GEOCODER = None


def geocode_address(address: str) -> Optional[Tuple[float, float]]:
    """Coordinates for ``address``, or None when nothing matches.

    geopy errors propagate to the caller.
    """
    if not address or not address.strip():
        return None
    geocode_fn = _get_rate_limited_geocoder()
    location = geocode_fn(address.strip())
    if location is None:
        logger.info(f"No geocoding match for '{address}'")
        return None
    return location.latitude, location.longitude


@st.cache_data(ttl=3600, show_spinner=False)
def geocode_address_with_cache(address: str) -> Optional[Tuple[float, float]]:
    # Exceptions are not cached by st.cache_data, so failures are retried on the next call
    return geocode_address(address)


def handle_geocoding_error(address: str, error: Exception) -> str:
    if isinstance(error, GeocoderTimedOut):
        et = "timeout"
    elif isinstance(error, GeocoderRateLimited):
        et = "rate limit"
    elif isinstance(error, (GeocoderUnavailable, GeocoderServiceError)):
        et = "service unavailable"
    else:
        et = str(error).lower()
    if "timeout" in et or "timed out" in et:
        return "⏱️ **Geocoding Timeout**: The address lookup service is taking too long. Please try again in a moment."
    if "rate" in et or "limit" in et:
        return "🚦 **Rate Limited**: Too many requests to the geocoding service. Please wait a moment and try again."
    if "unavailable" in et or "service" in et:
        return "🔌 **Service Unavailable**: The geocoding service is temporarily unavailable. Please try again later."
    if "network" in et or "connection" in et:
        return "🌐 **Network Error**: Cannot connect to the geocoding service. Please check your internet connection."
    return f"❌ **Geocoding Error**: Unable to find location for '{address}'. (Error: {type(error).__name__})"

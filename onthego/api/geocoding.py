# onthego/api/geocoding.py
from __future__ import annotations

import logging
import time
from functools import lru_cache
from typing import Iterable, List

import googlemaps

from onthego.api.config import get_google_maps_api_key
from onthego.api.models import Coordinate, Trip

logger = logging.getLogger(__name__)

_gmaps: googlemaps.Client | None = None


def _get_client() -> googlemaps.Client | None:
    """Return a cached googlemaps.Client instance, or None without a key."""
    global _gmaps
    if _gmaps is None:
        api_key = get_google_maps_api_key()
        if not api_key:
            logger.debug("No Google Maps API key configured, geocoding disabled")
            return None
        logger.info(f"Initializing Google Maps client with key: {api_key[:6]}...")
        try:
            _gmaps = googlemaps.Client(key=api_key)
        except ValueError as e:
            logger.error(f"Failed to initialize Google Maps client: {e}")
            return None
    return _gmaps


def geocoding_enabled() -> bool:
    return _get_client() is not None


@lru_cache(maxsize=1000)
def get_coordinates_for_place(place: str) -> tuple[float, float] | None:
    """Resolve a free-text place name to (lat, lng) or None if not found."""
    client = _get_client()
    if client is None:
        return None

    try:
        logger.debug(f"Geocoding place: {place}")
        results = client.geocode(place, language="en")
    except (googlemaps.exceptions.ApiError,
            googlemaps.exceptions.TransportError,
            googlemaps.exceptions.Timeout) as e:
        logger.error(f"Geocoding error for '{place}': {e}")
        return None

    if not results:
        logger.warning(f"No results found for place: {place}")
        return None

    loc = results[0]["geometry"]["location"]
    logger.debug(f"Geocoded {place} to {loc['lat']}, {loc['lng']}")
    return loc["lat"], loc["lng"]


def trip_geocode_query(trip: Trip) -> str:
    """Hotel plus city is more precise than the city alone."""
    parts = [trip.hotel, trip.city, trip.state, trip.country]
    return ", ".join(p for p in parts if p)


def enhance_trips_with_geocoding(trips: Iterable[Trip]) -> List[Trip]:
    """Attach coordinates to every trip that lacks finite ones.

    Trips that already carry coordinates are left untouched. Failed
    look-ups are logged and leave the trip without coordinates, so the
    caller can still render the rest of the list.

    Returns the trips as a list, mutated in place.
    """
    trips = list(trips)
    pending = [t for t in trips if not t.has_finite_coordinates]
    if not pending or not geocoding_enabled():
        return trips

    start_time = time.time()
    resolved = 0
    for trip in pending:
        coords = get_coordinates_for_place(trip_geocode_query(trip))
        if coords:
            trip.coordinates = Coordinate(*coords)
            resolved += 1
        else:
            logger.warning(f"Failed to geocode trip '{trip.id}' ({trip.city})")

    duration = time.time() - start_time
    logger.info(f"Geocoded {resolved}/{len(pending)} trips in {duration:.2f}s")
    return trips


__all__ = [
    "get_coordinates_for_place",
    "geocoding_enabled",
    "trip_geocode_query",
    "enhance_trips_with_geocoding",
]

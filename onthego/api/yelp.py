# onthego/api/yelp.py
"""Yelp Fusion business search: request validation, caching and transport.

The browser never sees the Yelp key. It posts a search body to the
``/api/yelp-search`` route, which validates it into a ``SearchQuery`` and
hands it to ``YelpClient``.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from onthego.api.config import get_yelp_config

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_RADIUS = 8047
MAX_SEARCH_RADIUS_METERS = 40000
DEFAULT_SEARCH_LIMIT = 20
DEFAULT_CATEGORIES = "restaurants"
DEFAULT_SORT_BY = "rating"

MISSING_KEY_MESSAGE = "Yelp API key not configured. Please set YELP_API_KEY in your environment."


class ValidationError(ValueError):
    """A search request body that cannot be sent upstream."""


class YelpAPIError(Exception):
    """Yelp could not be reached or answered with an error status.

    ``status`` is the upstream HTTP status, or None for transport failures.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


def _to_number(value: Any) -> float:
    """Coerce a JSON value to a float, returning NaN when it is not numeric."""
    if isinstance(value, bool) or value is None:
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return math.nan
    return math.nan


@dataclass(frozen=True)
class SearchQuery:
    latitude: float
    longitude: float
    radius: int = DEFAULT_SEARCH_RADIUS
    limit: int = DEFAULT_SEARCH_LIMIT
    categories: str = DEFAULT_CATEGORIES
    sort_by: str = DEFAULT_SORT_BY

    def to_params(self) -> Dict[str, str]:
        return {
            "latitude": str(self.latitude),
            "longitude": str(self.longitude),
            "radius": str(self.radius),
            "limit": str(self.limit),
            "categories": self.categories,
            "sort_by": self.sort_by,
        }

    @property
    def cache_key(self) -> tuple:
        return (self.latitude, self.longitude, self.radius, self.limit,
                self.categories, self.sort_by)


def validate_search_request(body: Optional[Dict[str, Any]]) -> SearchQuery:
    """Validate a search body and fill in defaults.

    Args:
        body: Parsed JSON body with ``latitude``, ``longitude`` and optional
            ``radius``, ``limit``, ``categories`` and ``sort_by``

    Returns:
        The normalized ``SearchQuery``

    Raises:
        ValidationError: with the message the API returns to the caller
    """
    body = body if isinstance(body, dict) else {}

    latitude = body.get("latitude")
    longitude = body.get("longitude")
    if latitude in (None, "") or longitude in (None, ""):
        raise ValidationError("latitude and longitude are required")

    lat_value = _to_number(latitude)
    lng_value = _to_number(longitude)
    if not (math.isfinite(lat_value) and math.isfinite(lng_value)):
        raise ValidationError("latitude and longitude must be valid numbers")

    radius = DEFAULT_SEARCH_RADIUS
    if "radius" in body:
        radius_value = _to_number(body["radius"])
        if (not math.isfinite(radius_value) or radius_value <= 0
                or radius_value > MAX_SEARCH_RADIUS_METERS):
            raise ValidationError(
                f"radius must be a number between 1 and {MAX_SEARCH_RADIUS_METERS}")
        radius = max(1, int(radius_value))

    limit = DEFAULT_SEARCH_LIMIT
    if "limit" in body:
        limit_value = _to_number(body["limit"])
        if not math.isfinite(limit_value) or limit_value <= 0:
            raise ValidationError("limit must be a positive number")
        limit = max(1, int(limit_value))

    return SearchQuery(
        latitude=lat_value,
        longitude=lng_value,
        radius=radius,
        limit=limit,
        categories=body.get("categories") or DEFAULT_CATEGORIES,
        sort_by=body.get("sort_by") or DEFAULT_SORT_BY,
    )


class TTLCache:
    """Thread-safe in-process cache with a fixed time-to-live."""

    def __init__(self, ttl_seconds: float):
        self.ttl_seconds = ttl_seconds
        self._entries: Dict[Any, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key):
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if time.monotonic() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key, value):
        with self._lock:
            self._entries[key] = (time.monotonic() + self.ttl_seconds, value)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self):
        with self._lock:
            return len(self._entries)


class YelpClient:
    """Calls the Yelp business search endpoint with the server-side key."""

    def __init__(self, api_key: str, api_url: str, timeout_seconds: float = 10,
                 cache_ttl_seconds: float = 300,
                 session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout_seconds = timeout_seconds
        self.cache = TTLCache(cache_ttl_seconds)
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def cache_control(self) -> str:
        ttl = int(self.cache.ttl_seconds)
        return f"s-maxage={ttl}, stale-while-revalidate={ttl * 2}"

    @retry(
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, max=2),
        reraise=True,
    )
    def _get(self, params: Dict[str, str]) -> requests.Response:
        return self.session.get(
            self.api_url,
            params=params,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Accept": "application/json",
            },
            timeout=self.timeout_seconds,
        )

    def search(self, query: SearchQuery) -> Dict[str, Any]:
        """Run a business search, serving repeated queries from the cache.

        Raises:
            YelpAPIError: when no key is configured, the transport fails after
                retries, or Yelp answers with a non-2xx status
        """
        if not self.configured:
            raise YelpAPIError(MISSING_KEY_MESSAGE)

        cached = self.cache.get(query.cache_key)
        if cached is not None:
            logger.debug(f"Yelp cache hit for {query.latitude},{query.longitude}")
            return cached

        try:
            response = self._get(query.to_params())
        except requests.RequestException as e:
            logger.error(f"Error contacting Yelp API: {e}")
            raise YelpAPIError("Failed to contact Yelp API") from e

        if not response.ok:
            logger.warning(f"Yelp API returned {response.status_code}")
            raise YelpAPIError("Yelp API error", status=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Yelp API returned invalid JSON: {e}")
            raise YelpAPIError("Failed to contact Yelp API") from e

        self.cache.set(query.cache_key, data)
        logger.info(f"Yelp returned {len(data.get('businesses', []))} businesses "
                    f"for {query.latitude},{query.longitude}")
        return data


_client: YelpClient | None = None
_client_lock = threading.Lock()


def get_yelp_client() -> YelpClient:
    """Return the process-wide Yelp client built from the environment."""
    global _client
    with _client_lock:
        if _client is None:
            cfg = get_yelp_config()
            _client = YelpClient(
                api_key=cfg["api_key"],
                api_url=cfg["api_url"],
                timeout_seconds=cfg["timeout_seconds"],
                cache_ttl_seconds=cfg["cache_ttl_seconds"],
            )
        return _client


def reset_yelp_client():
    """Drop the cached client so the next call re-reads configuration."""
    global _client
    with _client_lock:
        _client = None


__all__ = [
    "DEFAULT_SEARCH_RADIUS",
    "MAX_SEARCH_RADIUS_METERS",
    "MISSING_KEY_MESSAGE",
    "ValidationError",
    "YelpAPIError",
    "SearchQuery",
    "validate_search_request",
    "TTLCache",
    "YelpClient",
    "get_yelp_client",
    "reset_yelp_client",
]

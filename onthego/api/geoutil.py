# onthego/api/geoutil.py
"""Pure helpers for distances, dates and ratings.

No I/O and no project imports, so everything here is safe to call from
the event loop thread as well as from Flask request handlers.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Optional

EARTH_RADIUS_METERS = 6371e3
METERS_PER_MILE = 1609.344
FEET_PER_METER = 3.28084

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def distance_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two coordinates (Haversine)."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = (math.sin(d_phi / 2) ** 2
         + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def format_distance(meters: float) -> str:
    """Format a distance for display: feet below 0.1 miles, else miles."""
    miles = meters / METERS_PER_MILE
    if miles < 0.1:
        return f"{round(meters * FEET_PER_METER)} ft"
    return f"{miles:.1f} mi"


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse an ISO date (or datetime) string, returning None when invalid."""
    if not value or not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        return None


def _month(value: date) -> str:
    return _MONTHS[value.month - 1]


def format_date(value: Optional[str]) -> str:
    """Format a single date like ``Mar 15, 2026``; unparseable input is returned as-is."""
    parsed = parse_date(value)
    if parsed is None:
        return value or ""
    return f"{_month(parsed)} {parsed.day}, {parsed.year}"


def format_date_range(start: str, end: str) -> str:
    """Format a trip date range.

    Examples:
        Mar 15–19, 2026
        Mar 30 – Apr 2, 2026
        Dec 30, 2026 – Jan 2, 2027
    """
    start_date = parse_date(start)
    end_date = parse_date(end)
    if start_date is None or end_date is None:
        return f"{start} – {end}"

    if start_date.year == end_date.year:
        if start_date.month == end_date.month:
            return f"{_month(start_date)} {start_date.day}–{end_date.day}, {start_date.year}"
        return (f"{_month(start_date)} {start_date.day} – "
                f"{_month(end_date)} {end_date.day}, {start_date.year}")
    return (f"{_month(start_date)} {start_date.day}, {start_date.year} – "
            f"{_month(end_date)} {end_date.day}, {end_date.year}")


def star_rating(rating: float) -> str:
    """Star icon markup for a 0-5 rating with half-star granularity."""
    rating = max(0.0, min(5.0, float(rating or 0)))
    full_stars = math.floor(rating)
    has_half_star = rating % 1 >= 0.5
    empty_stars = 5 - full_stars - (1 if has_half_star else 0)

    stars = '<i class="fas fa-star"></i>' * full_stars
    if has_half_star:
        stars += '<i class="fas fa-star-half-alt"></i>'
    stars += '<i class="far fa-star"></i>' * empty_stars
    return stars


__all__ = [
    "distance_meters",
    "format_distance",
    "parse_date",
    "format_date",
    "format_date_range",
    "star_rating",
]

"""Shared data structures for trips, restaurants and search contexts.

Everything here is plain data: the view orchestrator, the map surfaces and
the HTTP routes all exchange these objects instead of raw JSON dicts.
"""

from __future__ import annotations

import enum
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Optional


class ViewState(str, enum.Enum):
    """The single currently visible top-level screen."""

    WORLD = "world"
    LOCAL = "local"
    TRAVEL_LOG = "travel_log"


class TripKind(str, enum.Enum):
    PAST = "past"
    UPCOMING = "upcoming"


class OriginKind(str, enum.Enum):
    """Where a search context came from."""

    TRIP_UPCOMING = "trip-upcoming"
    TRIP_PAST = "trip-past"
    GPS = "gps"
    MAP_AREA = "map-area"

    @classmethod
    def for_trip(cls, kind: TripKind) -> "OriginKind":
        return cls.TRIP_PAST if kind is TripKind.PAST else cls.TRIP_UPCOMING


def is_finite_coordinate(lat: Any, lng: Any) -> bool:
    """True when both values are real, finite numbers."""
    for value in (lat, lng):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if not math.isfinite(value):
            return False
    return True


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    @property
    def is_finite(self) -> bool:
        return is_finite_coordinate(self.latitude, self.longitude)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["Coordinate"]:
        if not data:
            return None
        lat = data.get("latitude", data.get("lat"))
        lng = data.get("longitude", data.get("lng"))
        if lat is None or lng is None:
            return None
        return cls(float(lat), float(lng))


@dataclass
class Trip:
    """A past or upcoming travel event (read-only reference data)."""

    id: str
    kind: TripKind
    city: str
    state: str
    country: str
    start_date: str
    end_date: str
    hotel: str
    purpose: str = ""
    coordinates: Optional[Coordinate] = None
    restaurants_visited: list[str] = field(default_factory=list)
    confirmed_reservations: list[dict] = field(default_factory=list)

    @property
    def is_past(self) -> bool:
        return self.kind is TripKind.PAST

    @property
    def has_finite_coordinates(self) -> bool:
        return self.coordinates is not None and self.coordinates.is_finite

    @classmethod
    def from_dict(cls, data: dict, kind: TripKind) -> "Trip":
        return cls(
            id=str(data["id"]),
            kind=kind,
            city=data.get("city", ""),
            state=data.get("state", ""),
            country=data.get("country", ""),
            start_date=data.get("startDate", data.get("start_date", "")),
            end_date=data.get("endDate", data.get("end_date", "")),
            hotel=data.get("hotel", ""),
            purpose=data.get("purpose", ""),
            coordinates=Coordinate.from_dict(data.get("coordinates")),
            restaurants_visited=[str(r) for r in data.get("restaurantsVisited", [])],
            confirmed_reservations=list(data.get("confirmedReservations", [])),
        )

    def to_dict(self) -> dict:
        payload = {
            "id": self.id,
            "type": self.kind.value,
            "city": self.city,
            "state": self.state,
            "country": self.country,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "hotel": self.hotel,
            "purpose": self.purpose,
            "coordinates": asdict(self.coordinates) if self.coordinates else None,
        }
        if self.is_past:
            payload["restaurantsVisited"] = list(self.restaurants_visited)
        else:
            payload["confirmedReservations"] = list(self.confirmed_reservations)
        return payload


@dataclass(frozen=True)
class SearchContext:
    """The active coordinate + label driving restaurant search.

    Immutable: a new selection always produces a new context.
    """

    origin_kind: OriginKind
    latitude: float
    longitude: float
    label: str
    trip_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "originKind": self.origin_kind.value,
            "tripId": self.trip_id,
            "coordinate": {"lat": self.latitude, "lng": self.longitude},
            "label": self.label,
        }


@dataclass
class Restaurant:
    """A restaurant listing in Yelp's business shape."""

    id: str
    name: str
    coordinates: Coordinate
    rating: float = 0.0
    review_count: int = 0
    price: str = ""
    categories: list[dict] = field(default_factory=list)
    location: dict = field(default_factory=dict)
    distance: Optional[float] = None
    url: str = ""
    display_phone: str = ""
    image_url: str = ""
    tags: list[str] = field(default_factory=list)

    @property
    def category_titles(self) -> list[str]:
        return [c.get("title", "") for c in self.categories if c.get("title")]

    @classmethod
    def from_dict(cls, data: dict) -> "Restaurant":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            coordinates=Coordinate.from_dict(data.get("coordinates")) or Coordinate(math.nan, math.nan),
            rating=float(data.get("rating") or 0),
            review_count=int(data.get("review_count") or 0),
            price=data.get("price") or "",
            categories=list(data.get("categories") or []),
            location=dict(data.get("location") or {}),
            distance=data.get("distance"),
            url=data.get("url") or "",
            display_phone=data.get("display_phone") or "",
            image_url=data.get("image_url") or "",
            tags=list(data.get("tags") or []),
        )

    def to_dict(self) -> dict:
        return asdict(self)

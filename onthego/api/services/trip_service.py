# onthego/api/services/trip_service.py
"""Service layer for trips: loading, default selection and search contexts."""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from onthego.api.config import get_trips_file
from onthego.api.geocoding import enhance_trips_with_geocoding
from onthego.api.geoutil import format_date_range, parse_date
from onthego.api.models import OriginKind, SearchContext, Trip, TripKind
from onthego.api.sample_data import SAMPLE_PAST_TRIPS, SAMPLE_UPCOMING_TRIPS

logger = logging.getLogger(__name__)


class TripRepository:
    """The two read-only trip collections: past and upcoming."""

    def __init__(self, past: List[Trip], upcoming: List[Trip]):
        self.past = list(past)
        self.upcoming = list(upcoming)

    @classmethod
    def from_dicts(cls, past: List[dict], upcoming: List[dict]) -> "TripRepository":
        return cls(
            past=[Trip.from_dict(t, TripKind.PAST) for t in past],
            upcoming=[Trip.from_dict(t, TripKind.UPCOMING) for t in upcoming],
        )

    @classmethod
    def load(cls, path: Optional[str] = None, geocode: bool = True) -> "TripRepository":
        """Load trips from a JSON file, or the bundled sample trips.

        The file holds ``{"past": [...], "upcoming": [...]}``. Trips without
        coordinates are geocoded when Google Maps is configured.

        Args:
            path: JSON file path; defaults to ``ONTHEGO_TRIPS_FILE``
            geocode: Whether to resolve missing coordinates

        Raises:
            ValueError: if the file exists but is not valid trip JSON
        """
        path = path if path is not None else get_trips_file()
        if path:
            logger.info(f"Loading trips from {path}")
            try:
                payload = json.loads(Path(path).read_text(encoding="utf-8"))
                repo = cls.from_dicts(payload.get("past", []), payload.get("upcoming", []))
            except (json.JSONDecodeError, AttributeError, KeyError) as e:
                raise ValueError(f"Invalid trips file {path}: {e}") from e
        else:
            repo = cls.from_dicts(SAMPLE_PAST_TRIPS, SAMPLE_UPCOMING_TRIPS)

        if geocode:
            enhance_trips_with_geocoding(repo.past + repo.upcoming)
        logger.info(f"Loaded {len(repo.past)} past and {len(repo.upcoming)} upcoming trips")
        return repo

    def trips(self, kind: TripKind) -> List[Trip]:
        return self.past if kind is TripKind.PAST else self.upcoming

    def find(self, kind: TripKind, trip_id: str) -> Optional[Trip]:
        return next((t for t in self.trips(kind) if t.id == trip_id), None)


class TripSelector:
    """Computes the default trip and turns trip selections into search contexts."""

    def __init__(self, repository: TripRepository):
        self.repository = repository

    @staticmethod
    def option_value(trip: Trip) -> str:
        return f"{trip.kind.value}:{trip.id}"

    @staticmethod
    def option_label(trip: Trip) -> str:
        date_range = format_date_range(trip.start_date, trip.end_date)
        return f"{trip.hotel} ({trip.city}) — {date_range}"

    @staticmethod
    def context_label(trip: Trip) -> str:
        return f"{trip.hotel} • {format_date_range(trip.start_date, trip.end_date)}"

    @staticmethod
    def parse_option_value(value: str) -> Optional[Tuple[TripKind, str]]:
        """Split an option value like ``upcoming:t1`` into (kind, id)."""
        if not value or ":" not in value:
            return None
        kind, _, trip_id = value.partition(":")
        if not kind or not trip_id:
            return None
        try:
            return TripKind(kind), trip_id
        except ValueError:
            return None

    def build_options(self) -> List[Dict]:
        """Grouped select options, upcoming trips first."""
        return [
            {
                "label": "Upcoming Trips",
                "options": [{"value": self.option_value(t), "label": self.option_label(t)}
                            for t in self.repository.upcoming],
            },
            {
                "label": "Past Trips",
                "options": [{"value": self.option_value(t), "label": self.option_label(t)}
                            for t in self.repository.past],
            },
        ]

    def default_trip(self, today: Optional[date] = None) -> Optional[Trip]:
        """The trip selected when nothing has been chosen yet.

        The next upcoming trip (earliest start today or later), else the
        earliest upcoming trip, else the most recently started past trip.
        """
        today = today or date.today()

        dated = [(parse_date(t.start_date), t) for t in self.repository.upcoming]
        dated = sorted(((d, t) for d, t in dated if d is not None), key=lambda pair: pair[0])
        for start, trip in dated:
            if start >= today:
                return trip
        if dated:
            return dated[0][1]

        past = [(parse_date(t.start_date), t) for t in self.repository.past]
        past = [(d, t) for d, t in past if d is not None]
        if past:
            return max(past, key=lambda pair: pair[0])[1]
        if self.repository.past:
            return self.repository.past[0]
        return None

    def context_for(self, trip: Trip) -> Optional[SearchContext]:
        if not trip.has_finite_coordinates:
            logger.warning(f"Trip {trip.id} has no usable coordinates")
            return None
        return SearchContext(
            origin_kind=OriginKind.for_trip(trip.kind),
            latitude=trip.coordinates.latitude,
            longitude=trip.coordinates.longitude,
            label=self.context_label(trip),
            trip_id=trip.id,
        )

    def select(self, kind: TripKind, trip_id: str) -> Optional[SearchContext]:
        """SearchContext for a trip, or None if unknown or not locatable."""
        trip = self.repository.find(kind, trip_id)
        if trip is None:
            logger.warning(f"Unknown {kind.value} trip: {trip_id}")
            return None
        return self.context_for(trip)

    def default_context(self, today: Optional[date] = None) -> Optional[SearchContext]:
        trip = self.default_trip(today)
        return self.context_for(trip) if trip else None

    def trip_for_context(self, context: Optional[SearchContext]) -> Optional[Trip]:
        if context is None or context.trip_id is None:
            return None
        kind = TripKind.PAST if context.origin_kind is OriginKind.TRIP_PAST else TripKind.UPCOMING
        return self.repository.find(kind, context.trip_id)


__all__ = ["TripRepository", "TripSelector"]

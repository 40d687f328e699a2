import json
from datetime import date

import pytest

from onthego.api.models import OriginKind, TripKind
from onthego.api.services.trip_service import TripRepository, TripSelector


@pytest.fixture
def selector(repository):
    return TripSelector(repository)


def test_default_trip_is_next_upcoming(selector):
    assert selector.default_trip(date(2026, 2, 1)).id == "upcoming-1"
    assert selector.default_trip(date(2026, 11, 20)).id == "upcoming-2"


def test_default_trip_falls_back_to_earliest_upcoming_when_all_started(selector):
    assert selector.default_trip(date(2030, 1, 1)).id == "upcoming-1"


def test_default_trip_uses_most_recent_past_without_upcoming(repository):
    selector = TripSelector(TripRepository(repository.past, []))
    assert selector.default_trip(date(2026, 5, 1)).id == "trip-1"


def test_default_trip_none_without_trips():
    assert TripSelector(TripRepository([], [])).default_trip(date(2026, 5, 1)) is None


def test_select_builds_context(selector):
    context = selector.select(TripKind.UPCOMING, "upcoming-2")
    assert context.origin_kind is OriginKind.TRIP_UPCOMING
    assert context.trip_id == "upcoming-2"
    assert context.label == "Hyatt Regency Miami • Dec 30, 2026 – Jan 2, 2027"
    assert (context.latitude, context.longitude) == (25.77, -80.1897)


def test_select_past_trip(selector):
    context = selector.select(TripKind.PAST, "trip-1")
    assert context.origin_kind is OriginKind.TRIP_PAST
    assert context.label == "Hyatt Regency San Francisco • Sep 8–11, 2025"


def test_select_unknown_trip(selector):
    assert selector.select(TripKind.PAST, "upcoming-1") is None


def test_trip_without_coordinates_has_no_context(repository):
    repository.upcoming[0].coordinates = None
    assert TripSelector(repository).select(TripKind.UPCOMING, "upcoming-1") is None


@pytest.mark.parametrize(
    "value,expected",
    [
        ("upcoming:upcoming-1", (TripKind.UPCOMING, "upcoming-1")),
        ("past:trip-3", (TripKind.PAST, "trip-3")),
        ("past:", None),
        ("later:trip-3", None),
        ("trip-3", None),
        ("", None),
    ],
)
def test_parse_option_value(value, expected):
    assert TripSelector.parse_option_value(value) == expected


def test_build_options_groups_upcoming_first(selector):
    groups = selector.build_options()
    assert [g["label"] for g in groups] == ["Upcoming Trips", "Past Trips"]
    assert len(groups[0]["options"]) == 3
    assert len(groups[1]["options"]) == 5
    first = groups[0]["options"][0]
    assert first["value"] == "upcoming:upcoming-1"
    assert first["label"] == "Hyatt Regency Boston (Boston) — Nov 9–12, 2026"


def test_trip_for_context_round_trip(selector):
    context = selector.select(TripKind.PAST, "trip-2")
    assert selector.trip_for_context(context).city == "New York"
    assert selector.trip_for_context(None) is None


def test_load_from_file(tmp_path):
    path = tmp_path / "trips.json"
    path.write_text(json.dumps({
        "past": [{"id": "p1", "city": "Denver", "state": "CO", "startDate": "2025-01-02",
                  "endDate": "2025-01-03", "hotel": "Hyatt Denver",
                  "coordinates": {"latitude": 39.74, "longitude": -104.99},
                  "restaurantsVisited": [1, 2]}],
        "upcoming": [],
    }))
    repo = TripRepository.load(str(path), geocode=False)
    assert [t.id for t in repo.past] == ["p1"]
    assert repo.past[0].restaurants_visited == ["1", "2"]
    assert repo.upcoming == []


def test_load_rejects_invalid_file(tmp_path):
    path = tmp_path / "trips.json"
    path.write_text("[1, 2")
    with pytest.raises(ValueError):
        TripRepository.load(str(path), geocode=False)


def test_load_defaults_to_sample_trips(monkeypatch):
    monkeypatch.delenv("ONTHEGO_TRIPS_FILE", raising=False)
    repo = TripRepository.load(geocode=False)
    assert len(repo.past) == 5
    assert len(repo.upcoming) == 3

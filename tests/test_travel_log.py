from onthego.api.models import Trip, TripKind
from onthego.views.travel_log import build_travel_log

from conftest import sample_restaurants


def test_stats_cover_all_past_trips(repository):
    log = build_travel_log(repository.past, sample_restaurants())
    assert log["stats"] == {
        "trips": 5,
        "cities": 5,
        "hotels": 5,
        "restaurantsVisited": 9,
    }


def test_years_are_newest_first(repository):
    log = build_travel_log(repository.past, sample_restaurants())
    assert [y["year"] for y in log["years"]] == [2025, 2024]
    assert [t["id"] for t in log["years"][0]["trips"]] == ["trip-1", "trip-2", "trip-3"]


def test_visited_restaurants_resolve_by_id(repository):
    log = build_travel_log(repository.past, sample_restaurants())
    sf = log["years"][0]["trips"][0]
    assert sf["dateRange"] == "Sep 8–11, 2025"
    assert [r["id"] for r in sf["restaurants"]] == ["1", "2", "7"]


def test_unknown_restaurant_ids_are_dropped(repository):
    log = build_travel_log(repository.past, [])
    assert all(not t["restaurants"] for y in log["years"] for t in y["trips"])
    assert log["stats"]["restaurantsVisited"] == 9


def test_undated_trips_are_grouped_last():
    trips = [
        Trip(id="a", kind=TripKind.PAST, city="Denver", state="CO", country="USA",
             start_date="", end_date="", hotel="Hyatt Denver"),
        Trip(id="b", kind=TripKind.PAST, city="Denver", state="CO", country="USA",
             start_date="2023-05-01", end_date="2023-05-02", hotel="Hyatt Denver"),
    ]
    log = build_travel_log(trips, [])
    assert [y["year"] for y in log["years"]] == [2023, "Unknown"]
    assert log["stats"]["cities"] == 1
    assert log["stats"]["hotels"] == 1


def test_empty_history():
    log = build_travel_log([], [])
    assert log["stats"]["trips"] == 0
    assert log["years"] == []

import pytest

from onthego.api.geoutil import (
    distance_meters,
    format_date,
    format_date_range,
    format_distance,
    parse_date,
    star_rating,
)


def test_distance_between_nearby_points():
    # about 1.1 km north and 0.9 km east of downtown San Francisco
    d = distance_meters(37.7749, -122.4194, 37.7849, -122.4094)
    assert d == pytest.approx(1417, abs=5)


def test_distance_to_self_is_zero():
    assert distance_meters(42.0, -71.0, 42.0, -71.0) == 0


def test_format_distance_uses_feet_for_short_distances():
    assert format_distance(150) == "492 ft"


def test_format_distance_uses_miles():
    assert format_distance(2000) == "1.2 mi"


@pytest.mark.parametrize(
    "start,end,expected",
    [
        ("2026-03-15", "2026-03-19", "Mar 15–19, 2026"),
        ("2026-03-30", "2026-04-02", "Mar 30 – Apr 2, 2026"),
        ("2026-12-30", "2027-01-02", "Dec 30, 2026 – Jan 2, 2027"),
    ],
)
def test_format_date_range(start, end, expected):
    assert format_date_range(start, end) == expected


def test_format_date_range_with_bad_input_echoes_it():
    assert format_date_range("soon", "2026-01-02") == "soon – 2026-01-02"


def test_parse_date_accepts_datetimes_and_rejects_garbage():
    assert parse_date("2026-03-15T09:30:00").day == 15
    assert parse_date("not a date") is None
    assert parse_date(None) is None


def test_format_date():
    assert format_date("2025-09-08") == "Sep 8, 2025"
    assert format_date("") == ""


def test_star_rating_half_stars():
    stars = star_rating(4.5)
    assert stars.count("fas fa-star\"") == 4
    assert stars.count("fa-star-half-alt") == 1
    assert stars.count("far fa-star") == 0


def test_star_rating_clamps():
    assert star_rating(7).count("fas fa-star\"") == 5
    assert star_rating(-1).count("far fa-star") == 5

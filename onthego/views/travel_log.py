# onthego/views/travel_log.py
"""Travel log: stats and a year-by-year history of past trips."""

from typing import Dict, Iterable, List

from onthego.api.geoutil import format_date_range, parse_date
from onthego.api.models import Restaurant, Trip

UNKNOWN_YEAR = "Unknown"


def build_travel_log(past_trips: Iterable[Trip],
                     restaurants: Iterable[Restaurant]) -> dict:
    """Build the travel log from the full set of past trips.

    Visited restaurant ids are resolved against ``restaurants``; ids with
    no match are dropped.
    """
    trips = list(past_trips)
    by_id: Dict[str, Restaurant] = {r.id: r for r in restaurants}

    stats = {
        "trips": len(trips),
        "cities": len({t.city for t in trips}),
        "hotels": len({t.hotel for t in trips}),
        "restaurantsVisited": sum(len(t.restaurants_visited) for t in trips),
    }

    by_year: Dict[object, List[dict]] = {}
    for trip in trips:
        start = parse_date(trip.start_date)
        year = start.year if start else UNKNOWN_YEAR
        visited = [
            {
                "id": by_id[rid].id,
                "name": by_id[rid].name,
                "rating": by_id[rid].rating,
                "price": by_id[rid].price,
            }
            for rid in trip.restaurants_visited
            if rid in by_id
        ]
        by_year.setdefault(year, []).append({
            "id": trip.id,
            "city": trip.city,
            "state": trip.state,
            "hotel": trip.hotel,
            "purpose": trip.purpose,
            "dateRange": format_date_range(trip.start_date, trip.end_date),
            "restaurants": visited,
        })

    # Newest year first, trips with unparseable dates last
    years = sorted((y for y in by_year if y != UNKNOWN_YEAR), reverse=True)
    if UNKNOWN_YEAR in by_year:
        years.append(UNKNOWN_YEAR)

    return {
        "stats": stats,
        "years": [{"year": y, "trips": by_year[y]} for y in years],
    }


__all__ = ["build_travel_log"]

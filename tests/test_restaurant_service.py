import asyncio

import pytest

from onthego.api.services.restaurant_service import RestaurantDataSource, restaurant_links
from onthego.api.yelp import YelpAPIError


class FakeClient:
    def __init__(self, configured=True, data=None, error=None):
        self.configured = configured
        self.data = data or {"businesses": []}
        self.error = error
        self.queries = []

    def search(self, query):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.data


def fetch(source, lat=37.7749, lng=-122.4194):
    return asyncio.run(source.fetch(lat, lng))


def test_unconfigured_client_serves_sample_data_with_distances():
    client = FakeClient(configured=False)
    restaurants = fetch(RestaurantDataSource(client=client, mock_delay_seconds=0))
    assert len(restaurants) == 10
    assert client.queries == []
    first = next(r for r in restaurants if r.id == "1")
    assert first.distance == pytest.approx(1417, abs=5)
    assert all(isinstance(r.distance, int) for r in restaurants)


def test_yelp_failure_falls_back_to_samples():
    client = FakeClient(error=YelpAPIError("Yelp API error", status=500))
    restaurants = fetch(RestaurantDataSource(client=client, mock_delay_seconds=0))
    assert len(restaurants) == 10
    assert len(client.queries) == 1


def test_yelp_businesses_are_mapped():
    client = FakeClient(data={"businesses": [
        {"id": "abc", "name": "Zuni Cafe", "rating": 4.5,
         "coordinates": {"latitude": 37.77, "longitude": -122.42}, "distance": 812.3},
        {"name": "no id"},
    ]})
    source = RestaurantDataSource(client=client, mock_delay_seconds=0, radius=1000, limit=5)
    restaurants = fetch(source)
    assert [r.id for r in restaurants] == ["abc"]
    assert restaurants[0].distance == 812.3
    assert client.queries[0].radius == 1000
    assert client.queries[0].limit == 5


def test_sample_data_is_not_shared_between_fetches():
    source = RestaurantDataSource(client=FakeClient(configured=False), mock_delay_seconds=0)
    near = fetch(source, 37.7849, -122.4094)
    far = fetch(source, 40.0, -74.0)
    assert next(r for r in near if r.id == "1").distance == 0
    assert next(r for r in far if r.id == "1").distance > 1_000_000


def test_restaurant_links():
    links = restaurant_links("Blue Bottle Coffee", "San Francisco")
    assert links["social"]["instagram"] == "https://www.instagram.com/explore/tags/BlueBottleCoffee/"
    assert links["delivery"]["doordash"] == "https://www.doordash.com/search/?query=Blue%20Bottle%20Coffee"
    assert links["reservations"]["opentable"].endswith("&metroId=San%20Francisco")
    assert links["reservations"]["resy"].startswith("https://resy.com/cities/san%20francisco?")


def test_restaurant_links_without_city():
    links = restaurant_links("Zuni")
    assert links["reservations"]["opentable"] == "https://www.opentable.com/s?term=Zuni"
    assert links["reservations"]["resy"] == "https://resy.com/cities/sf?search=Zuni"


@pytest.mark.parametrize("lat, lng", [(float("nan"), -122.4), (37.7, float("inf"))])
def test_unusable_origin_returns_no_restaurants(lat, lng):
    client = FakeClient(configured=False)
    source = RestaurantDataSource(client=client, mock_delay_seconds=0)
    assert fetch(source, lat, lng) == []
    assert client.queries == []


def test_distances_are_left_unset_for_unusable_origin():
    source = RestaurantDataSource(client=FakeClient(configured=False), mock_delay_seconds=0)
    restaurants = asyncio.run(source.sample_restaurants(float("nan"), -122.4))
    assert len(restaurants) == 10
    assert all(r.distance is None for r in restaurants)

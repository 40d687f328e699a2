# onthego/api/services/restaurant_service.py
"""Service layer for restaurant search."""

import asyncio
import copy
import logging
from typing import Dict, List, Optional
from urllib.parse import quote

from onthego.api.config import get_map_config, get_mock_api_delay
from onthego.api.geoutil import distance_meters
from onthego.api.models import Restaurant, is_finite_coordinate
from onthego.api.sample_data import SAMPLE_RESTAURANTS
from onthego.api.yelp import SearchQuery, YelpAPIError, YelpClient, get_yelp_client

logger = logging.getLogger(__name__)


class RestaurantDataSource:
    """Fetches restaurants around a coordinate.

    Goes through the Yelp client when a key is configured and falls back to
    the bundled sample restaurants otherwise, or when Yelp fails.
    """

    def __init__(self, client: Optional[YelpClient] = None,
                 mock_delay_seconds: Optional[float] = None,
                 radius: Optional[int] = None, limit: Optional[int] = None):
        map_cfg = get_map_config()
        self.client = client if client is not None else get_yelp_client()
        self.mock_delay_seconds = (get_mock_api_delay() if mock_delay_seconds is None
                                   else mock_delay_seconds)
        self.radius = radius or map_cfg["search_radius"]
        self.limit = limit or map_cfg["search_limit"]

    async def fetch(self, lat: float, lng: float) -> List[Restaurant]:
        """Return restaurants near (lat, lng). Never raises.

        Args:
            lat: Search latitude
            lng: Search longitude

        Returns:
            Yelp businesses, or the sample restaurants annotated with their
            distance from (lat, lng) when Yelp is unavailable
        """
        if not is_finite_coordinate(lat, lng):
            logger.warning(f"Not searching around unusable coordinates {lat!r}, {lng!r}")
            return []

        if not self.client.configured:
            logger.info("Yelp proxy not configured. Using sample data.")
            return await self.sample_restaurants(lat, lng)

        query = SearchQuery(latitude=lat, longitude=lng,
                            radius=self.radius, limit=self.limit)
        try:
            data = await asyncio.to_thread(self.client.search, query)
        except YelpAPIError as e:
            logger.error(f"Error fetching from Yelp API: {e.message} (status={e.status})")
            logger.info("Falling back to sample data.")
            return await self.sample_restaurants(lat, lng)

        restaurants = []
        for business in data.get("businesses") or []:
            try:
                restaurants.append(Restaurant.from_dict(business))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed Yelp business: {e}")
        return restaurants

    async def sample_restaurants(self, lat: float, lng: float) -> List[Restaurant]:
        if self.mock_delay_seconds > 0:
            await asyncio.sleep(self.mock_delay_seconds)
        return self.annotate_distances(
            [Restaurant.from_dict(copy.deepcopy(r)) for r in SAMPLE_RESTAURANTS],
            lat, lng,
        )

    @staticmethod
    def annotate_distances(restaurants: List[Restaurant], lat: float,
                           lng: float) -> List[Restaurant]:
        """Set each restaurant's distance (rounded meters) from (lat, lng)."""
        if not is_finite_coordinate(lat, lng):
            return restaurants
        for restaurant in restaurants:
            if restaurant.coordinates.is_finite:
                restaurant.distance = round(distance_meters(
                    lat, lng,
                    restaurant.coordinates.latitude,
                    restaurant.coordinates.longitude,
                ))
        return restaurants


def restaurant_links(name: str, city: str = "") -> Dict[str, Dict[str, str]]:
    """Search links for a restaurant on social, delivery and reservation sites."""
    encoded_name = quote(name, safe="")
    encoded_city = quote(city or "", safe="")

    opentable = f"https://www.opentable.com/s?term={encoded_name}"
    if city:
        opentable += f"&metroId={encoded_city}"

    return {
        "social": {
            "instagram": f"https://www.instagram.com/explore/tags/{encoded_name.replace('%20', '')}/",
            "facebook": f"https://www.facebook.com/search/top?q={encoded_name}",
            "twitter": f"https://twitter.com/search?q={encoded_name}",
        },
        "delivery": {
            "ubereats": f"https://www.ubereats.com/search?q={encoded_name}",
            "doordash": f"https://www.doordash.com/search/?query={encoded_name}",
            "grubhub": f"https://www.grubhub.com/search?searchTerm={encoded_name}",
        },
        "reservations": {
            "opentable": opentable,
            "resy": f"https://resy.com/cities/{encoded_city.lower() if encoded_city else 'sf'}?search={encoded_name}",
        },
    }


__all__ = ["RestaurantDataSource", "restaurant_links"]

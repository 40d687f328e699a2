# onthego/views/page.py
"""Server-side model of the single page the browser renders."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from onthego.api.geoutil import format_date, format_distance
from onthego.api.models import Restaurant, Trip, TripKind

logger = logging.getLogger(__name__)

WORLD_VIEW = "worldView"
LOCAL_VIEW = "localView"
TRAVEL_LOG_VIEW = "travelLogView"
VIEW_TOGGLE = "viewToggle"
TRAVEL_LOG_BUTTON = "travelLogBtn"

ALL_CONTAINERS = (WORLD_VIEW, LOCAL_VIEW, TRAVEL_LOG_VIEW, VIEW_TOGGLE, TRAVEL_LOG_BUTTON)

WORLD_MAP_BUTTON = {"label": "World Map", "icon": "globe"}
RESTAURANT_LIST_BUTTON = {"label": "Restaurant List", "icon": "list"}


@dataclass
class Container:
    id: str
    visible: bool = False


class Page:
    """Containers, sidebar lists and labels, as plain state.

    A page built without some containers behaves like a document missing
    those elements: operations that need them do nothing.
    """

    def __init__(self, container_ids: Iterable[str] = ALL_CONTAINERS):
        self.containers: Dict[str, Container] = {cid: Container(cid) for cid in container_ids}
        if WORLD_VIEW in self.containers:
            self.containers[WORLD_VIEW].visible = True

        self.toggle_button = dict(RESTAURANT_LIST_BUTTON)
        self.wired_buttons: set = set()

        self.restaurants: List[dict] = []
        self.highlighted_restaurant_id: Optional[str] = None
        self.loading = False
        self.empty = False

        self.trip_cards: Dict[str, List[dict]] = {TripKind.PAST.value: [], TripKind.UPCOMING.value: []}
        self.trip_options: List[dict] = []
        self.selected_trip_option: Optional[str] = None
        self.active_location_label = ""

        self.travel_log: Optional[dict] = None

    # ------------------------------------------------------------------
    # Containers
    # ------------------------------------------------------------------
    def has(self, *container_ids: str) -> bool:
        return all(cid in self.containers for cid in container_ids)

    def show(self, container_id: str):
        if container_id in self.containers:
            self.containers[container_id].visible = True

    def hide(self, container_id: str):
        if container_id in self.containers:
            self.containers[container_id].visible = False

    def is_visible(self, container_id: str) -> bool:
        container = self.containers.get(container_id)
        return container is not None and container.visible

    def visible_views(self) -> List[str]:
        return [cid for cid in (WORLD_VIEW, LOCAL_VIEW, TRAVEL_LOG_VIEW) if self.is_visible(cid)]

    def set_toggle_button(self, button: dict):
        self.toggle_button = dict(button)

    def wire(self, button_id: str) -> bool:
        if button_id not in self.containers:
            return False
        self.wired_buttons.add(button_id)
        return True

    # ------------------------------------------------------------------
    # Restaurant list
    # ------------------------------------------------------------------
    def show_loading_state(self):
        self.loading = True
        self.empty = False

    def show_empty_state(self):
        self.loading = False
        self.empty = True
        self.restaurants = []
        self.highlighted_restaurant_id = None

    def set_restaurants(self, restaurants: List[Restaurant]):
        self.loading = False
        self.highlighted_restaurant_id = None
        self.restaurants = [self._restaurant_card(r) for r in restaurants]
        self.empty = not self.restaurants

    @staticmethod
    def _restaurant_card(restaurant: Restaurant) -> dict:
        card = restaurant.to_dict()
        card["distanceText"] = (format_distance(restaurant.distance)
                                if restaurant.distance is not None else "")
        card["categoryText"] = ", ".join(restaurant.category_titles)
        card["highlighted"] = False
        return card

    def highlight_restaurant_card(self, restaurant_id: str) -> bool:
        """Highlight exactly one restaurant card."""
        found = False
        for card in self.restaurants:
            card["highlighted"] = card["id"] == restaurant_id
            found = found or card["highlighted"]
        self.highlighted_restaurant_id = restaurant_id if found else None
        return found

    # ------------------------------------------------------------------
    # Trip cards
    # ------------------------------------------------------------------
    def render_trip_cards(self, past: List[Trip], upcoming: List[Trip]):
        self.trip_cards = {
            TripKind.PAST.value: [self._trip_card(t) for t in past],
            TripKind.UPCOMING.value: [self._trip_card(t) for t in upcoming],
        }

    @staticmethod
    def _trip_card(trip: Trip) -> dict:
        return {
            "id": trip.id,
            "kind": trip.kind.value,
            "city": trip.city,
            "state": trip.state,
            "hotel": trip.hotel,
            "purpose": trip.purpose,
            "dates": f"{format_date(trip.start_date)} - {format_date(trip.end_date)}",
            "restaurantCount": len(trip.restaurants_visited) if trip.is_past else 0,
            "active": False,
            "scrolledIntoView": False,
        }

    def highlight_trip_card(self, trip_id: str, kind: TripKind) -> bool:
        """Activate one trip card across both lists and scroll it into view."""
        found = False
        for list_kind, cards in self.trip_cards.items():
            for card in cards:
                active = list_kind == kind.value and card["id"] == trip_id
                card["active"] = active
                card["scrolledIntoView"] = active
                found = found or active
        return found

    def active_trip_cards(self) -> List[dict]:
        return [c for cards in self.trip_cards.values() for c in cards if c["active"]]

    def to_dict(self) -> dict:
        return {
            "containers": {cid: c.visible for cid, c in self.containers.items()},
            "toggleButton": self.toggle_button,
            "wiredButtons": sorted(self.wired_buttons),
            "restaurants": self.restaurants,
            "highlightedRestaurantId": self.highlighted_restaurant_id,
            "loading": self.loading,
            "empty": self.empty,
            "tripCards": self.trip_cards,
            "tripOptions": self.trip_options,
            "selectedTripOption": self.selected_trip_option,
            "activeLocationLabel": self.active_location_label,
            "travelLog": self.travel_log,
        }


__all__ = [
    "Page",
    "Container",
    "WORLD_VIEW",
    "LOCAL_VIEW",
    "TRAVEL_LOG_VIEW",
    "VIEW_TOGGLE",
    "TRAVEL_LOG_BUTTON",
    "WORLD_MAP_BUTTON",
    "RESTAURANT_LIST_BUTTON",
]

# onthego/views/orchestrator.py
"""View and map lifecycle orchestration for one connected browser.

``ViewOrchestrator`` owns which of the three views is visible, sets up and
resizes the two map surfaces as views toggle, and relays the active
search context from trip selection or geolocation to the restaurant data
source and back to the sidebar and the local map.

All methods run on a single asyncio event loop. Fetch results for a
search context that has since been replaced are discarded using a
generation counter; in-flight fetches are never cancelled.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from onthego.api.config import get_map_config
from onthego.api.models import (
    Restaurant,
    SearchContext,
    TripKind,
    ViewState,
    is_finite_coordinate,
)
from onthego.api.services.restaurant_service import RestaurantDataSource
from onthego.api.services.trip_service import TripSelector
from onthego.views.local_map import LocalMap
from onthego.views.page import (
    LOCAL_VIEW,
    RESTAURANT_LIST_BUTTON,
    TRAVEL_LOG_BUTTON,
    TRAVEL_LOG_VIEW,
    VIEW_TOGGLE,
    WORLD_MAP_BUTTON,
    WORLD_VIEW,
    Page,
)
from onthego.views.surfaces import MarkerLayer
from onthego.views.travel_log import build_travel_log
from onthego.views.world_map import WorldMap

logger = logging.getLogger(__name__)

WORLD_CONTAINER_ID = "worldMap"
LOCAL_CONTAINER_ID = "map"

_VIEW_CONTAINERS = {
    ViewState.WORLD: WORLD_VIEW,
    ViewState.LOCAL: LOCAL_VIEW,
    ViewState.TRAVEL_LOG: TRAVEL_LOG_VIEW,
}

Listener = Callable[[str, Dict[str, Any]], Any]


class ViewOrchestrator:
    """Single source of truth for the visible view and the active search."""

    def __init__(self, page: Page, world: WorldMap, local: LocalMap,
                 selector: TripSelector, data_source: RestaurantDataSource,
                 reference_restaurants: Optional[Iterable[Restaurant]] = None,
                 listener: Optional[Listener] = None,
                 map_config: Optional[dict] = None,
                 today: Optional[date] = None):
        self.page = page
        self.world = world
        self.local = local
        self.selector = selector
        self.data_source = data_source
        self.reference_restaurants = list(reference_restaurants or [])
        self.listener = listener
        self.config = map_config or get_map_config()
        self.today = today

        self.view = ViewState.WORLD
        self.active_context: Optional[SearchContext] = None
        self.restaurants: List[Restaurant] = []
        self._generation = 0
        self._pending: Set[asyncio.Task] = set()

        self.local.on_search_context = self.on_search_context_change
        self.local.on_select = self.page.highlight_restaurant_card

    @property
    def generation(self) -> int:
        return self._generation

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------
    async def init(self):
        """Set up both surfaces, the sidebar and the default search context."""
        cfg = self.config
        repo = self.selector.repository

        self.view = ViewState.WORLD
        self._show_only(ViewState.WORLD)

        if self.world.init(WORLD_CONTAINER_ID, cfg["world_center"], cfg["world_zoom"]):
            self.world.replace_markers(repo.upcoming + repo.past)
        self.page.render_trip_cards(repo.past, repo.upcoming)

        self.local.init(LOCAL_CONTAINER_ID, (cfg["default_lat"], cfg["default_lng"]),
                        cfg["default_zoom"])

        self.page.wire(VIEW_TOGGLE)
        self.page.wire(TRAVEL_LOG_BUTTON)
        self.page.trip_options = self.selector.build_options()

        self._surface_updated(self.world)
        self._publish_state()

        # Pre-warm the local view even though it is hidden
        trip = self.selector.default_trip(self.today)
        context = self.selector.context_for(trip) if trip else None
        if context is not None:
            self.page.selected_trip_option = self.selector.option_value(trip)
            await self.on_search_context_change(context)
        else:
            logger.info("No default trip, requesting user location")
            await self.local.request_user_location()

        logger.info(f"Orchestrator ready (world={self.world.mode}, local={self.local.enabled})")

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def _show_only(self, target: ViewState):
        for state, container_id in _VIEW_CONTAINERS.items():
            if state is target:
                self.page.show(container_id)
            else:
                self.page.hide(container_id)

    def _switch_to(self, target: ViewState):
        self._show_only(target)
        self.view = target
        if target is ViewState.LOCAL:
            self.page.set_toggle_button(WORLD_MAP_BUTTON)
            layer = self.local
        else:
            self.page.set_toggle_button(RESTAURANT_LIST_BUTTON)
            layer = self.world
        if layer.initialized:
            self._schedule_resize(layer)
        logger.info(f"View switched to {target.value}")
        self._publish_state()

    def toggle_view(self) -> ViewState:
        """WORLD and LOCAL swap; the travel log always closes to WORLD."""
        if not self.page.has(WORLD_VIEW, LOCAL_VIEW, VIEW_TOGGLE):
            logger.debug("View containers missing, toggle ignored")
            return self.view

        target = ViewState.LOCAL if self.view is ViewState.WORLD else ViewState.WORLD
        self._switch_to(target)
        return self.view

    def show_travel_log(self) -> ViewState:
        """Show the travel log, rebuilt from the past trips on every open."""
        if not self.page.has(WORLD_VIEW, LOCAL_VIEW, TRAVEL_LOG_VIEW):
            logger.debug("Travel log container missing, ignored")
            return self.view

        self._show_only(ViewState.TRAVEL_LOG)
        self.view = ViewState.TRAVEL_LOG
        self.page.set_toggle_button(WORLD_MAP_BUTTON)
        self.page.travel_log = build_travel_log(
            self.selector.repository.past,
            self.reference_restaurants + self.restaurants,
        )
        self._publish_state()
        return self.view

    def _schedule_resize(self, layer: MarkerLayer):
        # A surface can only measure itself after its container is laid out
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._resize(layer)
            return
        task = loop.create_task(self._deferred_resize(layer))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deferred_resize(self, layer: MarkerLayer):
        await asyncio.sleep(self.config["resize_delay_seconds"])
        self._resize(layer)

    def _resize(self, layer: MarkerLayer):
        layer.invalidate_size()
        self._notify("surface_resized", {"surface": layer.surface_name})

    async def settle(self):
        """Wait for scheduled resizes to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    # ------------------------------------------------------------------
    # Search context
    # ------------------------------------------------------------------
    async def on_search_context_change(self, context: SearchContext):
        """Make ``context`` the active search and load its restaurants."""
        if not is_finite_coordinate(context.latitude, context.longitude):
            logger.warning(f"Ignoring search context with unusable coordinates: {context!r}")
            return

        self._generation += 1
        generation = self._generation
        self.active_context = context
        self.page.active_location_label = f"Active: {context.label}"

        if self.local.set_search_center(context.latitude, context.longitude, context.label):
            self._surface_updated(self.local)
        self.page.show_loading_state()
        self._publish_state()

        try:
            restaurants = await self.data_source.fetch(context.latitude, context.longitude)
        except Exception as e:
            logger.error(f"Error loading restaurants for {context.label}: {e}")
            if generation == self._generation:
                self.page.show_empty_state()
                self._publish_state()
            return

        if generation != self._generation:
            logger.debug(f"Discarding stale results for {context.label}")
            return

        logger.info(f"Found {len(restaurants)} restaurants near {context.label}")
        self.restaurants = list(restaurants)
        self.page.set_restaurants(self.restaurants)
        self.local.replace_markers(self.restaurants)
        self._surface_updated(self.local)
        self._publish_state()

    async def select_trip(self, kind: TripKind, trip_id: str) -> bool:
        context = self.selector.select(kind, trip_id)
        if context is None:
            return False
        self.page.selected_trip_option = f"{kind.value}:{trip_id}"
        await self.on_search_context_change(context)
        return True

    async def select_trip_option(self, value: str) -> bool:
        parsed = self.selector.parse_option_value(value)
        if parsed is None:
            return False
        return await self.select_trip(*parsed)

    async def request_user_location(self) -> Optional[SearchContext]:
        return await self.local.request_user_location()

    def on_viewport_changed(self, lat: Any, lng: Any, zoom: Optional[int] = None) -> bool:
        was_offered = self.local.search_area_visible
        changed = self.local.on_viewport_changed(lat, lng, zoom)
        if changed:
            if self.local.search_area_visible and not was_offered:
                # The map document has to be re-rendered to show the button
                self._surface_updated(self.local)
            self._publish_state()
        return changed

    async def search_this_area(self) -> Optional[SearchContext]:
        return await self.local.search_this_area()

    # ------------------------------------------------------------------
    # Cross-highlighting
    # ------------------------------------------------------------------
    async def on_trip_marker_clicked(self, trip_id: str, is_past: bool) -> bool:
        kind = TripKind.PAST if is_past else TripKind.UPCOMING
        trip = self.selector.repository.find(kind, trip_id)
        self.page.highlight_trip_card(trip_id, kind)
        self._publish_state()
        if trip is None:
            logger.warning(f"Trip marker clicked for unknown {kind.value} trip {trip_id}")
            return False

        if self.config.get("route_trip_clicks_to_local"):
            context = self.selector.context_for(trip)
            if self.view is not ViewState.LOCAL and self.page.has(WORLD_VIEW, LOCAL_VIEW):
                self._switch_to(ViewState.LOCAL)
            if context is not None:
                self.page.selected_trip_option = self.selector.option_value(trip)
                await self.on_search_context_change(context)

        if await self.world.fly_to_trip(trip):
            self._surface_updated(self.world)
        return True

    def on_restaurant_marker_clicked(self, restaurant_id: str) -> bool:
        found = self.page.highlight_restaurant_card(restaurant_id)
        self._publish_state()
        return found

    def on_restaurant_card_clicked(self, restaurant_id: str) -> bool:
        found = self.local.highlight_from_external_selection(restaurant_id)
        if found:
            self._surface_updated(self.local)
            self._publish_state()
        return found

    # ------------------------------------------------------------------
    # Concierge
    # ------------------------------------------------------------------
    def concierge_prefill(self) -> dict:
        """Destination and date for the concierge form."""
        trip = self.selector.trip_for_context(self.active_context)
        if trip is None and self.selector.repository.upcoming:
            trip = self.selector.repository.upcoming[0]
        if trip is None:
            return {"destination": "", "date": ""}
        destination = f"{trip.city}, {trip.state}" if trip.state else trip.city
        return {"destination": destination, "date": trip.start_date}

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------
    def snapshot(self) -> dict:
        return {
            "view": self.view.value,
            "generation": self._generation,
            "activeContext": self.active_context.to_dict() if self.active_context else None,
            "page": self.page.to_dict(),
            "surfaces": {
                "world": self.world.state(),
                "local": dict(self.local.state(),
                              searchAreaVisible=self.local.search_area_visible),
            },
        }

    def _publish_state(self):
        if self.listener is not None:
            self._notify("page_state", self.snapshot())

    def _surface_updated(self, layer: MarkerLayer):
        self._notify("surface_updated", {"surface": layer.surface_name, "state": layer.state()})

    def _notify(self, event: str, payload: Dict[str, Any]):
        if self.listener is None:
            return
        self.listener(event, payload)


__all__ = ["ViewOrchestrator", "WORLD_CONTAINER_ID", "LOCAL_CONTAINER_ID"]

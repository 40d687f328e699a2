# onthego/views/local_map.py
"""The local restaurant map (2D Leaflet via folium)."""

from __future__ import annotations

import asyncio
import html
import json
import logging
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from onthego.api.geoutil import star_rating
from onthego.api.models import OriginKind, Restaurant, SearchContext, is_finite_coordinate
from onthego.views.capability import Capability
from onthego.views.location import TIMEOUT, LocationError, LocationProvider
from onthego.views.surfaces import Marker, MarkerLayer, SelectionListener, bridge_script

logger = logging.getLogger(__name__)

MY_LOCATION_LABEL = "My Location"
DEFAULT_LOCATION_LABEL = "San Francisco (default location)"
MAP_AREA_LABEL = "Map area"

SearchContextListener = Callable[[SearchContext], Awaitable[Any]]


def restaurant_popup_html(restaurant: Restaurant) -> str:
    categories = ", ".join(restaurant.category_titles)
    return (
        '<div class="popup-content">'
        f'<div class="popup-name">{html.escape(restaurant.name)}</div>'
        '<div class="popup-rating">'
        f'<span class="stars">{star_rating(restaurant.rating)}</span> '
        f'<span class="rating-number">{restaurant.rating}</span> '
        f'<span class="review-count">({restaurant.review_count} reviews)</span>'
        '</div>'
        f'<div class="popup-categories">{html.escape(categories)}</div>'
        '<div class="popup-actions">'
        f'<a href="{html.escape(restaurant.url)}" target="_blank" '
        'rel="noopener noreferrer" class="popup-btn">View on Yelp</a>'
        '</div></div>'
    )


def viewport_script(map_name: str) -> List[str]:
    """Post user pans and zooms, and clicks on the "search this area" button."""
    return [
        f"var map = {map_name};",
        "var userMoved = false;",
        "['mousedown', 'wheel', 'touchstart'].forEach(function (name) {",
        "  map.getContainer().addEventListener(name, function () { userMoved = true; });",
        "});",
        "map.on('moveend', function () {",
        "  if (!userMoved) { return; }",
        "  var center = map.getCenter();",
        "  post({type: 'viewport_changed', latitude: center.lat, longitude: center.lng,",
        "        zoom: map.getZoom()});",
        "});",
        "var searchAreaBtn = document.getElementById('searchAreaBtn');",
        "if (searchAreaBtn) {",
        "  searchAreaBtn.addEventListener('click', function () { post({type: 'search_area'}); });",
        "}",
    ]


class LocalMap(MarkerLayer):
    """Restaurant results around the active search center.

    Searches started here (GPS, "search this area") are not fetched by the
    map itself: the resulting SearchContext goes to ``on_search_context``.
    """

    surface_name = "local"

    def __init__(self, capability: Capability, location_provider: LocationProvider,
                 on_select: Optional[SelectionListener] = None,
                 on_search_context: Optional[SearchContextListener] = None,
                 default_center: Tuple[float, float] = (37.7749, -122.4194),
                 geolocation_timeout: float = 10):
        super().__init__(capability, on_select=on_select)
        self.location_provider = location_provider
        self.on_search_context = on_search_context
        self.default_center = default_center
        self.geolocation_timeout = geolocation_timeout

        self.search_area_registered = False
        self.search_area_visible = False

    def init(self, container_id: str, initial_center: Tuple[float, float], zoom: int) -> bool:
        ok = super().init(container_id, initial_center, zoom)
        self.search_area_registered = ok
        self.search_area_visible = False
        return ok

    def _marker_for(self, item: Restaurant) -> Optional[Marker]:
        if not item.coordinates.is_finite:
            return None
        return Marker(
            id=item.id,
            latitude=item.coordinates.latitude,
            longitude=item.coordinates.longitude,
            kind="restaurant",
            label=item.name,
            popup_html=restaurant_popup_html(item),
            color="red",
        )

    def set_search_center(self, lat: Any, lng: Any, label: str) -> bool:
        ok = super().set_search_center(lat, lng, label)
        if ok:
            self.search_area_visible = False
        return ok

    # ------------------------------------------------------------------
    # "Search this area"
    # ------------------------------------------------------------------
    def on_viewport_changed(self, lat: Any, lng: Any, zoom: Optional[int] = None) -> bool:
        """The user panned or zoomed; offer to search the new area."""
        if not self.enabled or not is_finite_coordinate(lat, lng):
            return False
        self.center = (lat, lng)
        if zoom is not None:
            self.zoom = zoom
        self.bounds = None
        if self.search_area_registered:
            self.search_area_visible = True
        return True

    async def search_this_area(self) -> Optional[SearchContext]:
        if not self.enabled or not self.search_area_visible:
            return None
        self.search_area_visible = False
        lat, lng = self.center
        context = SearchContext(OriginKind.MAP_AREA, lat, lng, MAP_AREA_LABEL)
        await self._emit(context)
        return context

    # ------------------------------------------------------------------
    # Geolocation
    # ------------------------------------------------------------------
    async def request_user_location(self) -> Optional[SearchContext]:
        """Ask for the user's position and search around it.

        On failure the existing search center is kept; the default
        coordinate is used only when there is none yet.
        """
        if not self.enabled:
            return None

        try:
            lat, lng = await asyncio.wait_for(
                self.location_provider.current_position(),
                timeout=self.geolocation_timeout,
            )
        except asyncio.TimeoutError:
            error = LocationError(TIMEOUT)
        except LocationError as e:
            error = e
        else:
            context = SearchContext(OriginKind.GPS, lat, lng, MY_LOCATION_LABEL)
            await self._emit(context)
            return context

        logger.warning(f"Geolocation error ({error.reason}): {error.describe()}")
        if self.search_pin is not None:
            return None

        lat, lng = self.default_center
        context = SearchContext(OriginKind.GPS, lat, lng, DEFAULT_LOCATION_LABEL)
        await self._emit(context)
        return context

    async def _emit(self, context: SearchContext):
        if self.on_search_context is None:
            logger.debug(f"No search listener for {context.label}")
            return
        await self.on_search_context(context)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def _render(self) -> str:
        folium = self.capability.module
        fmap = folium.Map(
            location=list(self.center),
            zoom_start=self.zoom,
            tiles="OpenStreetMap",
            max_zoom=19,
            control_scale=True,
        )

        if self.search_pin is not None:
            pin = self.search_pin
            folium.Marker(
                location=pin.point,
                popup=folium.Popup(pin.popup_html, show=pin.popup_open),
                tooltip=pin.label,
                icon=folium.Icon(color="blue", icon="user", prefix="fa"),
            ).add_to(fmap)

        clicks = []
        for marker in self.markers.values():
            leaflet_marker = folium.Marker(
                location=marker.point,
                popup=folium.Popup(marker.popup_html, max_width=300, show=marker.popup_open),
                tooltip=marker.label,
                icon=folium.Icon(color="red", icon="cutlery", prefix="fa"),
            ).add_to(fmap)
            clicks.append(
                f"{leaflet_marker.get_name()}.on('click', function () {{ post("
                f"{{type: 'restaurant_marker_clicked', id: {json.dumps(marker.id)}}}); }});"
            )

        if self.bounds is not None:
            fmap.fit_bounds(self.bounds.as_list())

        if self.search_area_visible:
            fmap.get_root().html.add_child(folium.Element(
                '<button id="searchAreaBtn" class="search-area-btn">'
                '<i class="fas fa-search"></i> Search this area</button>'
            ))

        fmap.get_root().script.add_child(folium.Element(
            bridge_script(viewport_script(fmap.get_name()) + clicks)
        ))
        return fmap.get_root().render()


__all__ = [
    "LocalMap",
    "restaurant_popup_html",
    "viewport_script",
    "MY_LOCATION_LABEL",
    "DEFAULT_LOCATION_LABEL",
]

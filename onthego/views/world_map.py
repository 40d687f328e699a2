# onthego/views/world_map.py
"""The world map: trips on a 3D globe (pydeck), or a 2D folium map."""

from __future__ import annotations

import asyncio
import html
import json
import logging
from typing import Dict, List, Optional, Tuple

from onthego.api.geoutil import format_date, star_rating
from onthego.api.models import Trip, TripKind
from onthego.views.capability import Capability
from onthego.views.surfaces import (
    Marker,
    MarkerLayer,
    SelectionListener,
    bridge_script,
    inject_script,
)

logger = logging.getLogger(__name__)

TRIP_COLORS = {TripKind.PAST: "#FF6B35", TripKind.UPCOMING: "#004E89"}
TRIP_MARKER_RADIUS = 15
TRIP_FLY_ZOOM = 13
LOCATION_ZOOM = 8

COUNTRIES_GEOJSON = (
    "https://d2ad6b4ur7yvpq.cloudfront.net/naturalearth-3.3.0/ne_50m_admin_0_scale_rank.geojson"
)

# Simulated venues shown around a trip's hotel; illustrative, not a live query.
NEARBY_OFFSETS = [
    (0.005, 0.003),
    (-0.003, 0.006),
    (0.004, -0.005),
    (-0.006, -0.002),
    (0.002, -0.007),
]

CITY_VENUES: Dict[str, List[dict]] = {
    "San Francisco": [
        {"name": "Golden Gate Grill", "cuisine": "American", "rating": 4.3, "price": "$$"},
        {"name": "Fisherman's Catch", "cuisine": "Seafood", "rating": 4.5, "price": "$$$"},
        {"name": "Chinatown Express", "cuisine": "Chinese", "rating": 4.1, "price": "$"},
        {"name": "Bay Brew Coffee", "cuisine": "Cafe", "rating": 4.6, "price": "$"},
        {"name": "Nob Hill Steakhouse", "cuisine": "Steakhouse", "rating": 4.7, "price": "$$$$"},
    ],
    "New York": [
        {"name": "Manhattan Bistro", "cuisine": "French", "rating": 4.4, "price": "$$$"},
        {"name": "Brooklyn Pizza Co.", "cuisine": "Italian, Pizza", "rating": 4.2, "price": "$"},
        {"name": "Empire Sushi", "cuisine": "Japanese", "rating": 4.6, "price": "$$$"},
        {"name": "Harlem Soul Food", "cuisine": "Southern", "rating": 4.5, "price": "$$"},
        {"name": "The Deli on 5th", "cuisine": "Deli", "rating": 4.0, "price": "$"},
    ],
    "Chicago": [
        {"name": "Deep Dish House", "cuisine": "Pizza", "rating": 4.5, "price": "$$"},
        {"name": "Windy City Steaks", "cuisine": "Steakhouse", "rating": 4.7, "price": "$$$$"},
        {"name": "Lake Shore Sushi", "cuisine": "Japanese", "rating": 4.3, "price": "$$$"},
        {"name": "Magnificent Mile Cafe", "cuisine": "Cafe", "rating": 4.1, "price": "$"},
        {"name": "South Side BBQ", "cuisine": "BBQ", "rating": 4.4, "price": "$$"},
    ],
    "Los Angeles": [
        {"name": "Sunset Tacos", "cuisine": "Mexican", "rating": 4.3, "price": "$"},
        {"name": "Hollywood Grill", "cuisine": "American", "rating": 4.1, "price": "$$"},
        {"name": "Venice Beach Bowls", "cuisine": "Health Food", "rating": 4.5, "price": "$$"},
        {"name": "Beverly Hills Bistro", "cuisine": "French", "rating": 4.8, "price": "$$$$"},
        {"name": "K-Town BBQ", "cuisine": "Korean", "rating": 4.4, "price": "$$"},
    ],
    "Miami": [
        {"name": "Ocean Drive Seafood", "cuisine": "Seafood", "rating": 4.5, "price": "$$$"},
        {"name": "Little Havana Cafe", "cuisine": "Cuban", "rating": 4.6, "price": "$$"},
        {"name": "South Beach Sushi", "cuisine": "Japanese", "rating": 4.2, "price": "$$$"},
        {"name": "Brickell Steakhouse", "cuisine": "Steakhouse", "rating": 4.7, "price": "$$$$"},
        {"name": "Wynwood Tacos", "cuisine": "Mexican", "rating": 4.3, "price": "$"},
    ],
    "Seattle": [
        {"name": "Pike Place Chowder", "cuisine": "Seafood", "rating": 4.6, "price": "$$"},
        {"name": "Capitol Hill Coffee", "cuisine": "Cafe", "rating": 4.4, "price": "$"},
        {"name": "Emerald City Sushi", "cuisine": "Japanese", "rating": 4.3, "price": "$$$"},
        {"name": "Ballard Brewery & Grill", "cuisine": "American", "rating": 4.2, "price": "$$"},
        {"name": "Pioneer Square Pasta", "cuisine": "Italian", "rating": 4.5, "price": "$$"},
    ],
    "Austin": [
        {"name": "Congress Ave BBQ", "cuisine": "BBQ", "rating": 4.7, "price": "$$"},
        {"name": "South Lamar Tacos", "cuisine": "Tex-Mex", "rating": 4.4, "price": "$"},
        {"name": "6th Street Grill", "cuisine": "American", "rating": 4.1, "price": "$$"},
        {"name": "East Side Thai", "cuisine": "Thai", "rating": 4.3, "price": "$$"},
        {"name": "Rainey Street Cafe", "cuisine": "Cafe", "rating": 4.5, "price": "$"},
    ],
    "Boston": [
        {"name": "Beacon Hill Bistro", "cuisine": "French", "rating": 4.5, "price": "$$$"},
        {"name": "North End Pasta", "cuisine": "Italian", "rating": 4.6, "price": "$$"},
        {"name": "Back Bay Oyster Bar", "cuisine": "Seafood", "rating": 4.4, "price": "$$$"},
        {"name": "Fenway Franks", "cuisine": "American", "rating": 4.0, "price": "$"},
        {"name": "Seaport Sushi", "cuisine": "Japanese", "rating": 4.3, "price": "$$$"},
    ],
}

GENERIC_VENUES = [
    {"name": "Local Grill", "cuisine": "American", "rating": 4.2, "price": "$$"},
    {"name": "City Bistro", "cuisine": "French", "rating": 4.4, "price": "$$$"},
    {"name": "Corner Cafe", "cuisine": "Cafe", "rating": 4.0, "price": "$"},
    {"name": "Main Street Sushi", "cuisine": "Japanese", "rating": 4.3, "price": "$$"},
    {"name": "Downtown Steakhouse", "cuisine": "Steakhouse", "rating": 4.6, "price": "$$$$"},
]


def trip_marker_id(trip: Trip) -> str:
    """Trip ids are only unique within past or upcoming, so the kind is part of the key."""
    return f"{trip.kind.value}:{trip.id}"


def trip_popup_html(trip: Trip) -> str:
    date_range = f"{format_date(trip.start_date)} - {format_date(trip.end_date)}"
    visited = len(trip.restaurants_visited) if trip.is_past else 0
    parts = [
        '<div class="trip-popup">',
        f"<h3>{html.escape(trip.city)}, {html.escape(trip.state)}</h3>",
        f"<p><strong>{html.escape(trip.purpose)}</strong></p>",
        f'<p><i class="fas fa-calendar"></i> {date_range}</p>',
        f'<p><i class="fas fa-hotel"></i> {html.escape(trip.hotel)}</p>',
    ]
    if visited:
        parts.append(f'<p><i class="fas fa-utensils"></i> {visited} restaurants visited</p>')
    if not trip.is_past:
        parts.append('<p class="upcoming-label"><i class="fas fa-clock"></i> Upcoming Trip</p>')
    parts.append("</div>")
    return "".join(parts)


# pydeck's HTML export creates the deck as ``deckInstance``
GLOBE_CLICK_SCRIPT = [
    "if (typeof deckInstance === 'undefined') { return; }",
    "deckInstance.setProps({onClick: function (info) {",
    "  if (!info.object || !info.layer || info.layer.id !== 'trips') { return; }",
    "  post({type: 'trip_marker_clicked', id: info.object.tripId, isPast: info.object.isPast});",
    "}});",
]


def trip_click_message(marker: Marker) -> str:
    """JS object literal posted when a trip marker is clicked."""
    return (
        "{type: 'trip_marker_clicked', "
        f"id: {json.dumps(marker.data.get('tripId'))}, "
        f"isPast: {json.dumps(bool(marker.data.get('isPast')))}}}"
    )


def generate_nearby_venues(trip: Trip) -> List[dict]:
    """Five simulated venues at fixed offsets around the trip's coordinate."""
    base_lat = trip.coordinates.latitude
    base_lng = trip.coordinates.longitude
    venues = CITY_VENUES.get(trip.city, GENERIC_VENUES)
    return [
        dict(venue, lat=base_lat + d_lat, lng=base_lng + d_lng)
        for venue, (d_lat, d_lng) in zip(venues, NEARBY_OFFSETS)
    ]


def _hex_to_rgba(color: str, alpha: int = 204) -> List[int]:
    color = color.lstrip("#")
    return [int(color[i:i + 2], 16) for i in (0, 2, 4)] + [alpha]


class WorldMap(MarkerLayer):
    """Past and upcoming trips as colour-coded circle markers.

    Prefers the 3D globe; when pydeck is missing it falls back to a 2D
    folium map instead of disabling itself.
    """

    surface_name = "world"

    def __init__(self, globe: Capability, fallback: Capability,
                 on_select: Optional[SelectionListener] = None,
                 fly_duration: float = 1.0, min_zoom: int = 2, max_zoom: int = 18):
        super().__init__(globe, on_select=on_select)
        self.globe = globe
        self.fallback = fallback
        self.fly_duration = fly_duration
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom

        self.mode: Optional[str] = None
        self.venue_markers: Dict[str, Marker] = {}
        self.fly_count = 0

    def init(self, container_id: str, initial_center: Tuple[float, float], zoom: int) -> bool:
        if self.globe.is_available:
            self.capability = self.globe
            self.mode = "globe"
        elif self.fallback.is_available:
            logger.warning(f"3D globe unavailable ({self.globe.reason}), using 2D world map")
            self.capability = self.fallback
            self.mode = "2d"
        else:
            self.capability = self.fallback
            self.mode = None
        return super().init(container_id, initial_center, zoom)

    def _marker_for(self, item: Trip) -> Optional[Marker]:
        if not item.has_finite_coordinates:
            return None
        return Marker(
            id=trip_marker_id(item),
            latitude=item.coordinates.latitude,
            longitude=item.coordinates.longitude,
            kind="trip",
            label=f"{item.city}, {item.state}",
            popup_html=trip_popup_html(item),
            color=TRIP_COLORS[item.kind],
            data={"tripId": item.id, "isPast": item.is_past},
        )

    def replace_markers(self, items) -> int:
        count = super().replace_markers(items)
        # The world view opens zoomed out even when trips span a small area
        self.bounds = None
        return count

    async def fly_to_trip(self, trip: Trip) -> bool:
        """Move the camera to the trip, then show venues around its hotel."""
        if not self.enabled or not trip.has_finite_coordinates:
            return False
        self.pan_to(trip.coordinates.latitude, trip.coordinates.longitude, TRIP_FLY_ZOOM)
        self.open_popup(trip_marker_id(trip))
        self.fly_count += 1
        if self.fly_duration > 0:
            await asyncio.sleep(self.fly_duration)
        self.show_nearby_venues(trip)
        return True

    def zoom_to_location(self, lat: float, lng: float):
        if self.enabled:
            self.pan_to(lat, lng, LOCATION_ZOOM)

    def show_nearby_venues(self, trip: Trip):
        if not self.enabled or not trip.has_finite_coordinates:
            return
        self.venue_markers.clear()
        self.venue_markers["hotel"] = Marker(
            id="hotel",
            latitude=trip.coordinates.latitude,
            longitude=trip.coordinates.longitude,
            kind="hotel",
            label=trip.hotel,
            popup_html=(
                '<div class="popup-content">'
                f'<div class="popup-name"><i class="fas fa-hotel"></i> {html.escape(trip.hotel)}</div>'
                f"<div>{html.escape(trip.city)}, {html.escape(trip.state)}</div></div>"
            ),
            popup_open=True,
        )
        for idx, venue in enumerate(generate_nearby_venues(trip)):
            self.venue_markers[f"venue-{idx}"] = Marker(
                id=f"venue-{idx}",
                latitude=venue["lat"],
                longitude=venue["lng"],
                kind="venue",
                label=venue["name"],
                popup_html=(
                    '<div class="popup-content">'
                    f'<div class="popup-name">{html.escape(venue["name"])}</div>'
                    f'<div class="popup-rating"><span class="stars">{star_rating(venue["rating"])}</span> '
                    f'<span class="rating-number">{venue["rating"]}</span></div>'
                    f'<div>{html.escape(venue["cuisine"])}</div>'
                    f'<div><i class="fas fa-dollar-sign"></i> {venue["price"]}</div></div>'
                ),
                color="red",
            )
        logger.info(f"Showing {len(self.venue_markers) - 1} nearby venues for {trip.city}")

    def clear_venues(self):
        self.venue_markers.clear()

    def state(self) -> dict:
        state = super().state()
        state["mode"] = self.mode
        state["venueCount"] = len(self.venue_markers)
        return state

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def _render(self) -> str:
        if self.mode == "globe":
            return self._render_globe()
        return self._render_flat()

    def _render_globe(self) -> str:
        pdk = self.capability.module

        def _point(marker: Marker, radius: int, color: List[int]) -> dict:
            return dict(
                marker.data,
                id=marker.id,
                position=[marker.longitude, marker.latitude],
                radius=radius,
                color=color,
                tooltip=marker.label,
            )

        trips = [_point(m, TRIP_MARKER_RADIUS * 4000, _hex_to_rgba(m.color))
                 for m in self.markers.values()]
        venues = [_point(m, 60, [0, 78, 137, 230] if m.kind == "hotel" else [220, 53, 69, 230])
                  for m in self.venue_markers.values()]

        layers = [
            pdk.Layer(
                "GeoJsonLayer",
                COUNTRIES_GEOJSON,
                id="countries",
                stroked=False,
                filled=True,
                get_fill_color=[200, 200, 200],
            ),
            pdk.Layer(
                "ScatterplotLayer",
                trips,
                id="trips",
                get_position="position",
                get_radius="radius",
                get_fill_color="color",
                get_line_color=[255, 255, 255],
                stroked=True,
                line_width_min_pixels=3,
                pickable=True,
            ),
            pdk.Layer(
                "ScatterplotLayer",
                venues,
                id="venues",
                get_position="position",
                get_radius="radius",
                get_fill_color="color",
                radius_min_pixels=4,
                pickable=True,
            ),
        ]

        deck = pdk.Deck(
            views=[pdk.View(type="_GlobeView", controller=True)],
            initial_view_state=pdk.ViewState(
                latitude=self.center[0],
                longitude=self.center[1],
                zoom=self.zoom,
                min_zoom=self.min_zoom,
                max_zoom=self.max_zoom,
            ),
            layers=layers,
            map_provider=None,
            tooltip={"text": "{tooltip}"},
        )
        return inject_script(deck.to_html(as_string=True), bridge_script(GLOBE_CLICK_SCRIPT))

    def _render_flat(self) -> str:
        folium = self.capability.module
        fmap = folium.Map(
            location=list(self.center),
            zoom_start=self.zoom,
            tiles="OpenStreetMap",
            min_zoom=self.min_zoom,
            max_zoom=self.max_zoom,
        )

        clicks = []
        for marker in self.markers.values():
            circle = folium.CircleMarker(
                location=marker.point,
                radius=TRIP_MARKER_RADIUS,
                color="white",
                weight=3,
                opacity=1,
                fill=True,
                fill_color=marker.color,
                fill_opacity=0.8,
                popup=folium.Popup(marker.popup_html, max_width=300, show=marker.popup_open),
                tooltip=marker.label,
            ).add_to(fmap)
            clicks.append(
                f"{circle.get_name()}.on('click', function () {{ post("
                f"{trip_click_message(marker)}); }});"
            )

        for marker in self.venue_markers.values():
            color = "blue" if marker.kind == "hotel" else "red"
            icon = "bed" if marker.kind == "hotel" else "cutlery"
            folium.Marker(
                location=marker.point,
                popup=folium.Popup(marker.popup_html, max_width=300, show=marker.popup_open),
                tooltip=marker.label,
                icon=folium.Icon(color=color, icon=icon, prefix="fa"),
            ).add_to(fmap)

        fmap.get_root().script.add_child(folium.Element(bridge_script(clicks)))
        return fmap.get_root().render()


__all__ = [
    "WorldMap",
    "TRIP_COLORS",
    "NEARBY_OFFSETS",
    "CITY_VENUES",
    "GENERIC_VENUES",
    "generate_nearby_venues",
    "trip_marker_id",
    "trip_click_message",
]

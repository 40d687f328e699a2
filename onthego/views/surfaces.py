# onthego/views/surfaces.py
"""Shared marker bookkeeping for the map surfaces.

A ``MarkerLayer`` keeps its markers, camera and search pin as plain state.
Concrete layers turn that state into a document with their rendering
library in ``_render``; nothing here touches a library directly.
"""

from __future__ import annotations

import html
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from onthego.api.models import is_finite_coordinate
from onthego.views.capability import Capability

logger = logging.getLogger(__name__)

FIT_BOUNDS_PADDING = 0.1
PAN_TO_ZOOM = 16

SelectionListener = Callable[[str], Any]


@dataclass
class Marker:
    """A surface-owned handle bound to one restaurant, trip or pin."""

    id: str
    latitude: float
    longitude: float
    kind: str
    label: str = ""
    popup_html: str = ""
    color: Optional[str] = None
    popup_open: bool = False
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def point(self) -> Tuple[float, float]:
        return self.latitude, self.longitude

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind,
            "lat": self.latitude,
            "lng": self.longitude,
            "label": self.label,
            "color": self.color,
            "popupOpen": self.popup_open,
        }


@dataclass(frozen=True)
class Bounds:
    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_points(cls, points: Iterable[Tuple[float, float]]) -> Optional["Bounds"]:
        points = list(points)
        if not points:
            return None
        lats = [p[0] for p in points]
        lngs = [p[1] for p in points]
        return cls(min(lats), min(lngs), max(lats), max(lngs))

    def pad(self, ratio: float) -> "Bounds":
        """Grow each side by ``ratio`` of the span, like Leaflet's LatLngBounds.pad."""
        height_buffer = abs(self.north - self.south) * ratio
        width_buffer = abs(self.east - self.west) * ratio
        return Bounds(
            self.south - height_buffer,
            self.west - width_buffer,
            self.north + height_buffer,
            self.east + width_buffer,
        )

    def contains(self, lat: float, lng: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lng <= self.east

    def as_list(self) -> List[List[float]]:
        return [[self.south, self.west], [self.north, self.east]]


def bridge_script(statements: List[str]) -> str:
    """JavaScript run on load that can ``post`` map events to the parent page.

    Map documents live in iframes; the page forwards what they post to the
    Socket.IO session.
    """
    body = "".join(f"  {line}\n" for line in statements)
    return (
        "window.addEventListener('load', function () {\n"
        "  function post(msg) { window.parent.postMessage(msg, '*'); }\n"
        f"{body}"
        "});\n"
    )


def inject_script(document: str, script: str) -> str:
    """Append ``script`` just before ``</body>`` of a rendered document."""
    tag = f"<script>\n{script}</script>\n"
    idx = document.rfind("</body>")
    if idx == -1:
        return document + tag
    return document[:idx] + tag + document[idx:]


class MarkerLayer(ABC):
    """A rendering surface and the result markers it currently shows.

    Result markers are always replaced wholesale: ``replace_markers`` clears
    everything before adding, and never touches the search pin.
    """

    surface_name = "surface"

    def __init__(self, capability: Capability,
                 on_select: Optional[SelectionListener] = None):
        self.capability = capability
        self.on_select = on_select

        self.enabled = False
        self.initialized = False
        self.container_id: Optional[str] = None
        self.center: Tuple[float, float] = (0.0, 0.0)
        self.zoom = 2
        self.default_zoom = 2
        self.bounds: Optional[Bounds] = None

        self.markers: Dict[str, Marker] = {}
        self.search_pin: Optional[Marker] = None
        self.resize_count = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def init(self, container_id: str, initial_center: Tuple[float, float], zoom: int) -> bool:
        """Create the surface. Returns False and disables the layer if the
        rendering library is unavailable."""
        self.container_id = container_id
        if not self.capability.is_available:
            logger.warning(
                f"{self.surface_name} map disabled, rendering library unavailable: "
                f"{self.capability.reason or self.capability.name}")
            self.enabled = False
            return False

        self.center = tuple(initial_center)
        self.zoom = zoom
        self.default_zoom = zoom
        self.enabled = True
        self.initialized = True
        logger.info(f"{self.surface_name} map initialized in #{container_id} "
                    f"with {self.capability.name}")
        return True

    def invalidate_size(self):
        if not self.enabled:
            return
        self.resize_count += 1
        logger.debug(f"{self.surface_name} map resized ({self.resize_count})")

    # ------------------------------------------------------------------
    # Markers
    # ------------------------------------------------------------------
    @property
    def marker_count(self) -> int:
        return len(self.markers)

    @abstractmethod
    def _marker_for(self, item: Any) -> Optional[Marker]:
        """Build the marker for one backing item, or None if it cannot be placed."""

    def set_search_center(self, lat: Any, lng: Any, label: str) -> bool:
        """Re-center and replace the search pin. Non-finite input is ignored."""
        if not self.enabled:
            return False
        if not is_finite_coordinate(lat, lng):
            logger.debug(f"Ignoring non-finite search center {lat!r}, {lng!r}")
            return False

        self.center = (lat, lng)
        self.zoom = self.default_zoom
        self.bounds = None
        self.search_pin = Marker(
            id="search-center",
            latitude=lat,
            longitude=lng,
            kind="search",
            label=label,
            popup_html=f"<strong>{html.escape(label)}</strong>",
            popup_open=True,
        )
        return True

    def replace_markers(self, items: Iterable[Any]) -> int:
        """Clear all result markers and add one per item.

        Returns:
            The number of markers now on the surface
        """
        if not self.enabled:
            return 0

        self.markers.clear()
        for item in items:
            marker = self._marker_for(item)
            if marker is None:
                logger.debug(f"Skipping item without usable coordinates: {item!r}")
                continue
            self.markers[marker.id] = marker

        if self.markers:
            points = [m.point for m in self.markers.values()]
            if self.search_pin is not None:
                points.append(self.search_pin.point)
            self.fit_bounds(points)
        return self.marker_count

    def fit_bounds(self, points: Iterable[Tuple[float, float]],
                   padding: float = FIT_BOUNDS_PADDING):
        bounds = Bounds.from_points(points)
        if bounds is None:
            return
        self.bounds = bounds.pad(padding)
        self.center = ((self.bounds.south + self.bounds.north) / 2,
                       (self.bounds.west + self.bounds.east) / 2)

    def pan_to(self, lat: float, lng: float, zoom: Optional[int] = None):
        self.center = (lat, lng)
        if zoom is not None:
            self.zoom = zoom
        self.bounds = None

    def open_popup(self, marker_id: str) -> bool:
        marker = self.markers.get(marker_id)
        if marker is None:
            return False
        for other in self.markers.values():
            other.popup_open = other is marker
        return True

    def highlight_from_external_selection(self, item_id: str) -> bool:
        """Open the bound marker's popup, pan to it and notify the sidebar."""
        if not self.enabled or not self.open_popup(item_id):
            return False
        marker = self.markers[item_id]
        self.pan_to(marker.latitude, marker.longitude, PAN_TO_ZOOM)
        if self.on_select is not None:
            self.on_select(item_id)
        return True

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    @abstractmethod
    def _render(self) -> str:
        """Render the current state into an HTML document."""

    def render_html(self) -> str:
        if not self.enabled:
            return ""
        return self._render()

    def state(self) -> dict:
        return {
            "surface": self.surface_name,
            "enabled": self.enabled,
            "center": {"lat": self.center[0], "lng": self.center[1]},
            "zoom": self.zoom,
            "bounds": self.bounds.as_list() if self.bounds else None,
            "markerCount": self.marker_count,
            "searchPin": self.search_pin.to_dict() if self.search_pin else None,
        }


__all__ = [
    "Marker",
    "Bounds",
    "MarkerLayer",
    "bridge_script",
    "inject_script",
    "FIT_BOUNDS_PADDING",
    "PAN_TO_ZOOM",
]

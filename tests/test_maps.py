import asyncio
import math

import pytest

from onthego.api.models import Coordinate, OriginKind, Restaurant, TripKind
from onthego.views.capability import Capability, probe
from onthego.views.local_map import DEFAULT_LOCATION_LABEL, MY_LOCATION_LABEL, LocalMap
from onthego.views.location import DENIED, TIMEOUT, LocationError, LocationProvider, StaticLocationProvider
from onthego.views.surfaces import Bounds, bridge_script, inject_script
from onthego.views.world_map import TRIP_COLORS, WorldMap, generate_nearby_venues, trip_click_message

from conftest import available, sample_restaurants, unavailable


class NeverAnswers(LocationProvider):
    async def current_position(self):
        await asyncio.sleep(60)


def make_local(cap=None, location=None, **kwargs):
    local = LocalMap(cap or available(), location or StaticLocationProvider((40.0, -74.0)),
                     **kwargs)
    local.init("map", (37.7749, -122.4194), 13)
    return local


def make_world(globe=None, fallback=None):
    world = WorldMap(globe or available("pydeck"), fallback or available("folium"), fly_duration=0)
    world.init("worldMap", (20.0, 0.0), 2)
    return world


class TestCapability:
    def test_probe_missing_module(self):
        cap = probe("onthego_no_such_renderer")
        assert not cap.is_available
        assert cap.name == "onthego_no_such_renderer"
        assert cap.reason

    def test_probe_existing_module(self):
        cap = probe("json")
        assert cap.is_available
        assert cap.module.__name__ == "json"


class TestBounds:
    def test_pad_grows_each_side(self):
        padded = Bounds(10, 20, 20, 40).pad(0.1)
        assert padded == Bounds(9, 18, 21, 42)

    def test_from_no_points(self):
        assert Bounds.from_points([]) is None


class TestLocalMap:
    def test_disabled_without_renderer(self):
        local = make_local(cap=unavailable("folium"))
        assert not local.enabled
        assert not local.search_area_registered
        assert local.replace_markers(sample_restaurants()) == 0
        assert local.set_search_center(1.0, 2.0, "x") is False
        assert local.render_html() == ""

    def test_replace_markers_is_idempotent(self):
        local = make_local()
        restaurants = sample_restaurants()
        assert local.replace_markers(restaurants) == 10
        assert local.replace_markers(restaurants) == 10
        assert local.marker_count == 10

    def test_replace_markers_skips_unplaceable_items(self):
        local = make_local()
        restaurants = sample_restaurants()
        restaurants[0].coordinates = Coordinate(math.nan, math.nan)
        assert local.replace_markers(restaurants) == 9
        assert "1" not in local.markers

    def test_replace_markers_with_nothing_clears(self):
        local = make_local()
        local.replace_markers(sample_restaurants())
        assert local.replace_markers([]) == 0

    def test_bounds_include_markers_and_pin(self):
        local = make_local()
        local.set_search_center(37.70, -122.50, "Pin")
        local.replace_markers(sample_restaurants())
        assert local.bounds.contains(37.70, -122.50)
        for restaurant in sample_restaurants():
            assert local.bounds.contains(restaurant.coordinates.latitude,
                                         restaurant.coordinates.longitude)

    def test_non_finite_center_is_ignored(self):
        local = make_local()
        local.set_search_center(37.7, -122.4, "First")
        assert local.set_search_center(math.nan, -122.4, "Bad") is False
        assert local.set_search_center(None, -122.4, "Bad") is False
        assert local.search_pin.label == "First"

    def test_zero_coordinates_are_valid(self):
        local = make_local()
        assert local.set_search_center(0, 0, "Null Island") is True
        assert local.center == (0, 0)

    def test_search_pin_survives_marker_replacement(self):
        local = make_local()
        local.set_search_center(37.7, -122.4, "Pin")
        local.replace_markers(sample_restaurants())
        assert local.search_pin.label == "Pin"
        assert local.search_pin.popup_open

    def test_highlight_pans_and_notifies(self):
        selected = []
        local = make_local(on_select=selected.append)
        local.replace_markers(sample_restaurants())
        assert local.highlight_from_external_selection("3")
        assert local.zoom == 16
        assert local.center == (37.7799, -122.4134)
        assert local.markers["3"].popup_open
        assert not local.markers["1"].popup_open
        assert selected == ["3"]

    def test_highlight_unknown_id(self):
        local = make_local()
        local.replace_markers(sample_restaurants())
        assert local.highlight_from_external_selection("missing") is False

    def test_search_this_area_after_viewport_change(self):
        contexts = []

        async def on_context(context):
            contexts.append(context)

        local = make_local(on_search_context=on_context)
        assert asyncio.run(local.search_this_area()) is None
        assert local.on_viewport_changed(37.8, -122.3, 14)
        assert local.search_area_visible
        context = asyncio.run(local.search_this_area())
        assert context.origin_kind is OriginKind.MAP_AREA
        assert (context.latitude, context.longitude) == (37.8, -122.3)
        assert not local.search_area_visible
        assert contexts == [context]

    def test_location_success(self):
        contexts = []

        async def on_context(context):
            contexts.append(context)

        local = make_local(on_search_context=on_context)
        context = asyncio.run(local.request_user_location())
        assert context.origin_kind is OriginKind.GPS
        assert context.label == MY_LOCATION_LABEL
        assert (context.latitude, context.longitude) == (40.0, -74.0)
        assert contexts == [context]

    def test_location_denied_keeps_existing_center(self):
        contexts = []

        async def on_context(context):
            contexts.append(context)

        local = make_local(location=StaticLocationProvider(reason=DENIED),
                           on_search_context=on_context)
        local.set_search_center(42.3555, -71.0605, "Boston")
        assert asyncio.run(local.request_user_location()) is None
        assert contexts == []
        assert local.search_pin.label == "Boston"

    def test_location_denied_without_center_uses_default(self):
        contexts = []

        async def on_context(context):
            contexts.append(context)

        local = make_local(location=StaticLocationProvider(reason=DENIED),
                           on_search_context=on_context)
        context = asyncio.run(local.request_user_location())
        assert context.label == DEFAULT_LOCATION_LABEL
        assert (context.latitude, context.longitude) == (37.7749, -122.4194)

    def test_location_times_out(self, caplog):
        local = make_local(location=NeverAnswers(), geolocation_timeout=0.01)
        local.set_search_center(1.0, 2.0, "Here")
        assert asyncio.run(local.request_user_location()) is None
        assert TIMEOUT in caplog.text

    def test_renders_with_folium(self):
        pytest.importorskip("folium")
        local = make_local(cap=probe("folium"))
        local.set_search_center(37.7749, -122.4194, "Hyatt")
        local.replace_markers(sample_restaurants())
        local.on_viewport_changed(37.78, -122.41)
        html = local.render_html()
        assert "Sushi Paradise" in html
        assert "Search this area" in html

    def test_rendered_map_posts_clicks_and_moves_to_the_page(self):
        pytest.importorskip("folium")
        local = make_local(cap=probe("folium"))
        local.replace_markers(sample_restaurants())
        local.on_viewport_changed(37.78, -122.41)
        html = local.render_html()
        assert "window.parent.postMessage" in html
        assert "map.on('moveend'" in html
        assert "type: 'viewport_changed'" in html
        assert "getElementById('searchAreaBtn')" in html
        assert "type: 'search_area'" in html
        assert html.count("type: 'restaurant_marker_clicked'") == 10
        assert "id: \"3\"" in html


class TestWorldMap:
    def test_prefers_globe(self):
        world = make_world()
        assert world.mode == "globe"
        assert world.enabled

    def test_falls_back_to_2d(self):
        world = make_world(globe=unavailable("pydeck"))
        assert world.mode == "2d"
        assert world.enabled
        assert world.capability.name == "folium"

    def test_disabled_without_any_renderer(self):
        world = make_world(globe=unavailable("pydeck"), fallback=unavailable("folium"))
        assert world.mode is None
        assert not world.enabled

    def test_trip_markers_are_colour_coded_and_keyed_by_kind(self, repository):
        world = make_world()
        assert world.replace_markers(repository.upcoming + repository.past) == 8
        assert world.markers["past:trip-1"].color == TRIP_COLORS[TripKind.PAST] == "#FF6B35"
        assert world.markers["upcoming:upcoming-1"].color == "#004E89"
        assert world.markers["past:trip-1"].data == {"tripId": "trip-1", "isPast": True}
        assert world.bounds is None

    def test_fly_to_trip_shows_hotel_and_venues(self, repository):
        world = make_world()
        world.replace_markers(repository.past)
        trip = repository.past[1]
        assert asyncio.run(world.fly_to_trip(trip))
        assert world.zoom == 13
        assert world.center == (40.7527, -73.9772)
        assert world.markers["past:trip-2"].popup_open
        assert len(world.venue_markers) == 6
        assert world.venue_markers["hotel"].label == "Grand Hyatt New York"
        assert world.venue_markers["venue-0"].label == "Manhattan Bistro"
        assert world.state()["venueCount"] == 6

    def test_fly_to_trip_without_coordinates(self, repository):
        world = make_world()
        trip = repository.past[0]
        trip.coordinates = None
        assert asyncio.run(world.fly_to_trip(trip)) is False

    def test_unknown_city_gets_generic_venues(self, repository):
        trip = repository.past[0]
        trip.city = "Reykjavik"
        venues = generate_nearby_venues(trip)
        assert venues[0]["name"] == "Local Grill"
        assert venues[0]["lat"] == pytest.approx(trip.coordinates.latitude + 0.005)

    def test_globe_renders_with_pydeck(self, repository):
        pytest.importorskip("pydeck")
        world = make_world(globe=probe("pydeck"))
        world.replace_markers(repository.past)
        html = world.render_html()
        assert "GlobeView" in html
        assert "deckInstance.setProps" in html
        assert "type: 'trip_marker_clicked'" in html
        assert html.index("window.parent.postMessage") < html.rindex("</body>")

    def test_flat_map_renders_with_folium(self, repository):
        pytest.importorskip("folium")
        world = make_world(globe=Capability.unavailable("disabled", name="pydeck"),
                           fallback=probe("folium"))
        world.replace_markers(repository.past)
        html = world.render_html()
        assert "Sheraton Grand Chicago" in html
        assert html.count("type: 'trip_marker_clicked'") == 5
        assert "id: \"trip-3\", isPast: true" in html


def test_trip_click_message(repository):
    world = make_world()
    world.replace_markers(repository.upcoming)
    message = trip_click_message(world.markers["upcoming:upcoming-1"])
    assert message == "{type: 'trip_marker_clicked', id: \"upcoming-1\", isPast: false}"


def test_bridge_script_waits_for_load_and_posts_to_parent():
    script = bridge_script(["post({type: 'search_area'});"])
    assert script.startswith("window.addEventListener('load'")
    assert "window.parent.postMessage(msg, '*')" in script
    assert "  post({type: 'search_area'});\n" in script


def test_inject_script_goes_before_body_end():
    assert inject_script("<html><body></body></html>", "x();") == (
        "<html><body><script>\nx();</script>\n</body></html>"
    )
    assert inject_script("<div></div>", "x();") == "<div></div><script>\nx();</script>\n"


def test_search_pin_label_is_escaped():
    local = make_local()
    local.set_search_center(37.7749, -122.4194, "<b>Inn & Suites</b>")
    assert local.search_pin.popup_html == "<strong>&lt;b&gt;Inn &amp; Suites&lt;/b&gt;</strong>"

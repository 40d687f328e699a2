"""Shared fixtures: fake rendering capabilities, data sources and orchestrators."""

import asyncio
import concurrent.futures
from datetime import date
from types import SimpleNamespace

import pytest

from onthego.api.config import get_map_config
from onthego.api.models import Restaurant
from onthego.api.sample_data import (
    SAMPLE_PAST_TRIPS,
    SAMPLE_RESTAURANTS,
    SAMPLE_UPCOMING_TRIPS,
)
from onthego.api.services.trip_service import TripRepository, TripSelector
from onthego.views.capability import Capability
from onthego.views.local_map import LocalMap
from onthego.views.location import StaticLocationProvider
from onthego.views.orchestrator import ViewOrchestrator
from onthego.views.page import Page
from onthego.views.world_map import WorldMap

TODAY = date(2026, 10, 18)


def available(name="fake"):
    return Capability.available(object(), name=name)


def unavailable(name="fake"):
    return Capability.unavailable("No module named '%s'" % name, name=name)


def sample_restaurants():
    return [Restaurant.from_dict(r) for r in SAMPLE_RESTAURANTS]


class FakeDataSource:
    """Returns a fixed restaurant list and records every fetch."""

    def __init__(self, restaurants=None, error=None):
        self.restaurants = sample_restaurants() if restaurants is None else restaurants
        self.error = error
        self.calls = []

    async def fetch(self, lat, lng):
        self.calls.append((lat, lng))
        if self.error is not None:
            raise self.error
        return list(self.restaurants)


class GatedDataSource:
    """Each fetch waits until the test releases it with a result."""

    def __init__(self):
        self.calls = []
        self.gates = []

    async def fetch(self, lat, lng):
        future = asyncio.get_running_loop().create_future()
        self.calls.append((lat, lng))
        self.gates.append(future)
        return await future


class CountingLocalMap(LocalMap):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.replace_calls = 0

    def replace_markers(self, items):
        self.replace_calls += 1
        return super().replace_markers(items)


class Recorder:
    """Listener that keeps every (event, payload) it is given."""

    def __init__(self):
        self.events = []

    def __call__(self, event, payload):
        self.events.append((event, payload))

    def names(self):
        return [event for event, _ in self.events]


@pytest.fixture
def map_config():
    cfg = get_map_config()
    cfg.update(
        resize_delay_seconds=0,
        fly_duration_seconds=0,
        route_trip_clicks_to_local=False,
    )
    return cfg


@pytest.fixture
def repository():
    return TripRepository.from_dicts(SAMPLE_PAST_TRIPS, SAMPLE_UPCOMING_TRIPS)


@pytest.fixture
def make_orchestrator(repository, map_config):
    """Factory for orchestrators over fake capabilities."""

    def _make(page=None, data_source=None, location=None, world_caps=None,
              local_cap=None, listener=None, repo=None, **config):
        cfg = dict(map_config, **config)
        globe, fallback = world_caps or (available("pydeck"), available("folium"))
        world = WorldMap(globe=globe, fallback=fallback, fly_duration=0)
        local = CountingLocalMap(
            capability=local_cap or available("folium"),
            location_provider=location or StaticLocationProvider((40.0, -74.0)),
            geolocation_timeout=1,
        )
        return ViewOrchestrator(
            page=page or Page(),
            world=world,
            local=local,
            selector=TripSelector(repo or repository),
            data_source=data_source or FakeDataSource(),
            reference_restaurants=sample_restaurants(),
            listener=listener,
            map_config=cfg,
            today=TODAY,
        )

    return _make


class FakeSessionManager:
    """Runs session actions synchronously on the calling thread."""

    def __init__(self, orchestrator=None, repository=None, location_provider=None):
        self.orchestrator = orchestrator
        self.repository = repository
        self.location_provider = location_provider
        self.sessions = {}
        self.removed = []

    def create_session(self, session_id, user_ip):
        session = SimpleNamespace(session_id=session_id, user_ip=user_ip,
                                  orchestrator=self.orchestrator,
                                  location_provider=self.location_provider)
        self.sessions[session_id] = session
        return session

    def get_session(self, session_id):
        return self.sessions.get(session_id)

    def run(self, session_id, action):
        if session_id not in self.sessions:
            return None
        future = concurrent.futures.Future()
        try:
            result = action(self.orchestrator)
            if asyncio.iscoroutine(result):
                result = asyncio.run(result)
        except Exception as e:
            future.set_exception(e)
        else:
            future.set_result(result)
        return future

    def remove_session(self, session_id, reason="manual"):
        self.sessions.pop(session_id, None)
        self.removed.append((session_id, reason))

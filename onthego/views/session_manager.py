# onthego/views/session_manager.py
"""One view orchestrator per connected browser, all on one event loop."""

import asyncio
import concurrent.futures
import logging
import threading
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, Optional

from onthego.api.config import get_map_config, get_session_config
from onthego.api.models import Restaurant
from onthego.api.sample_data import SAMPLE_RESTAURANTS
from onthego.api.services.restaurant_service import RestaurantDataSource
from onthego.api.services.trip_service import TripRepository, TripSelector
from onthego.views.capability import Capability, rendering_capabilities
from onthego.views.local_map import LocalMap
from onthego.views.location import BrowserLocationProvider, LocationProvider
from onthego.views.orchestrator import ViewOrchestrator
from onthego.views.page import Page
from onthego.views.world_map import WorldMap

logger = logging.getLogger(__name__)

# emitter(event, payload, sid)
Emitter = Callable[[str, Dict[str, Any], str], None]


class EventLoopThread:
    """An asyncio event loop running forever in a daemon thread.

    Socket.IO handlers run on their own threads and hand coroutines over
    with ``submit``; every orchestrator only ever runs on this loop.
    """

    def __init__(self, name: str = "onthego-views"):
        self.name = name
        self.loop = asyncio.new_event_loop()
        self.thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._started = threading.Event()

    def _run(self):
        asyncio.set_event_loop(self.loop)
        self.loop.call_soon(self._started.set)
        self.loop.run_forever()

    def start(self) -> "EventLoopThread":
        if not self.thread.is_alive():
            self.thread.start()
            self._started.wait()
            logger.info(f"Event loop thread '{self.name}' started")
        return self

    def submit(self, coro: Awaitable) -> concurrent.futures.Future:
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def call(self, fn: Callable, *args) -> concurrent.futures.Future:
        """Run a plain function on the loop thread."""
        async def _call():
            return fn(*args)
        return self.submit(_call())

    def stop(self):
        if self.thread.is_alive():
            self.loop.call_soon_threadsafe(self.loop.stop)
            self.thread.join(timeout=5)
            logger.info(f"Event loop thread '{self.name}' stopped")


def build_orchestrator(listener: Optional[Callable[[str, Dict[str, Any]], Any]],
                       location_provider: LocationProvider,
                       repository: TripRepository,
                       data_source: RestaurantDataSource) -> ViewOrchestrator:
    """Wire a page, both map surfaces and the services into an orchestrator."""
    cfg = get_map_config()
    caps = rendering_capabilities()
    globe = caps["pydeck"] if cfg["enable_globe"] else Capability.unavailable(
        "3D globe disabled by configuration", name="pydeck")

    world = WorldMap(
        globe=globe,
        fallback=caps["folium"],
        fly_duration=cfg["fly_duration_seconds"],
        min_zoom=cfg["world_min_zoom"],
        max_zoom=cfg["world_max_zoom"],
    )
    local = LocalMap(
        capability=caps["folium"],
        location_provider=location_provider,
        default_center=(cfg["default_lat"], cfg["default_lng"]),
        geolocation_timeout=cfg["geolocation_timeout_seconds"],
    )
    return ViewOrchestrator(
        page=Page(),
        world=world,
        local=local,
        selector=TripSelector(repository),
        data_source=data_source,
        reference_restaurants=[Restaurant.from_dict(r) for r in SAMPLE_RESTAURANTS],
        listener=listener,
        map_config=cfg,
    )


class OrchestratorSession:
    """A connected browser and its orchestrator."""

    def __init__(self, session_id: str, user_ip: str, orchestrator: ViewOrchestrator,
                 location_provider: LocationProvider):
        self.session_id = session_id
        self.user_ip = user_ip
        self.orchestrator = orchestrator
        self.location_provider = location_provider

        self.created_at = datetime.now()
        self.last_activity = datetime.now()
        self.event_count = 0
        self.ready: Optional[concurrent.futures.Future] = None

    def touch(self):
        self.last_activity = datetime.now()
        self.event_count += 1


class SessionManager:
    """Creates, looks up and expires orchestrator sessions."""

    def __init__(self, emitter: Optional[Emitter] = None,
                 loop_thread: Optional[EventLoopThread] = None,
                 repository: Optional[TripRepository] = None,
                 data_source: Optional[RestaurantDataSource] = None,
                 start_cleanup: bool = True):
        self.config = get_session_config()
        self.emitter = emitter
        self.loop_thread = (loop_thread or EventLoopThread()).start()
        self.repository = repository or TripRepository.load()
        self.data_source = data_source or RestaurantDataSource()
        self.sessions: Dict[str, OrchestratorSession] = {}

        self.lock = threading.Lock()
        self._stop = threading.Event()

        self.cleanup_thread = None
        if start_cleanup:
            self.cleanup_thread = threading.Thread(target=self._cleanup_loop, daemon=True)
            self.cleanup_thread.start()

        logger.info("SessionManager initialized")

    def _emit(self, event: str, payload: Dict[str, Any], session_id: str):
        if self.emitter is not None:
            self.emitter(event, payload, session_id)

    def create_session(self, session_id: str, user_ip: str) -> OrchestratorSession:
        """Create the orchestrator for a new connection and start its init.

        Args:
            session_id: Socket.IO sid of the connection
            user_ip: Client address, for logging

        Returns:
            The session; ``session.ready`` completes once init has run
        """
        with self.lock:
            existing = self.sessions.get(session_id)
            if existing:
                logger.info(f"Reusing existing session {session_id}")
                return existing

            provider = BrowserLocationProvider(
                lambda: self._emit("location_requested", {}, session_id))
            orchestrator = build_orchestrator(
                listener=lambda event, payload: self._emit(event, payload, session_id),
                location_provider=provider,
                repository=self.repository,
                data_source=self.data_source,
            )
            session = OrchestratorSession(session_id, user_ip, orchestrator, provider)
            self.sessions[session_id] = session

        session.ready = self.loop_thread.submit(orchestrator.init())
        logger.info(f"Created session {session_id} for IP {user_ip}")
        return session

    def get_session(self, session_id: str) -> Optional[OrchestratorSession]:
        with self.lock:
            session = self.sessions.get(session_id)
            if session:
                session.touch()
            return session

    def run(self, session_id: str,
            action: Callable[[ViewOrchestrator], Any]) -> Optional[concurrent.futures.Future]:
        """Run ``action(orchestrator)`` on the loop thread.

        ``action`` may return a coroutine, which is awaited there.

        Returns:
            A future for the action's result, or None for an unknown session
        """
        session = self.get_session(session_id)
        if session is None:
            logger.warning(f"No session {session_id}")
            return None

        async def _run():
            result = action(session.orchestrator)
            if asyncio.iscoroutine(result):
                result = await result
            return result

        return self.loop_thread.submit(_run())

    def remove_session(self, session_id: str, reason: str = "manual"):
        with self.lock:
            session = self.sessions.pop(session_id, None)
        if session is None:
            return
        duration = (datetime.now() - session.created_at).total_seconds()
        logger.info(f"Removed session {session_id} - Reason: {reason}, "
                    f"Duration: {duration:.1f}s, Events: {session.event_count}")

    def get_stats(self) -> Dict[str, Any]:
        with self.lock:
            return {
                "total_sessions": len(self.sessions),
                "total_events": sum(s.event_count for s in self.sessions.values()),
                "views": {sid: s.orchestrator.view.value for sid, s in self.sessions.items()},
                "config": {"timeout_seconds": self.config["session_timeout_seconds"]},
            }

    def shutdown(self):
        self._stop.set()
        self.loop_thread.stop()

    def _cleanup_loop(self):
        """Background thread to clean up idle sessions."""
        while not self._stop.wait(self.config["cleanup_interval_seconds"]):
            self._cleanup_expired_sessions()

    def _cleanup_expired_sessions(self):
        cutoff_time = datetime.now() - timedelta(seconds=self.config["session_timeout_seconds"])
        with self.lock:
            expired = [sid for sid, s in self.sessions.items() if s.last_activity < cutoff_time]
        for sid in expired:
            self.remove_session(sid, "timeout")
        if expired:
            logger.info(f"Cleaned up {len(expired)} expired sessions")


# Global session manager instance
_session_manager: Optional[SessionManager] = None
_session_manager_lock = threading.Lock()


def get_session_manager(emitter: Optional[Emitter] = None) -> SessionManager:
    """Get the global SessionManager instance."""
    global _session_manager
    with _session_manager_lock:
        if _session_manager is None:
            _session_manager = SessionManager(emitter=emitter)
        elif emitter is not None and _session_manager.emitter is None:
            _session_manager.emitter = emitter
        return _session_manager


__all__ = [
    "EventLoopThread",
    "OrchestratorSession",
    "SessionManager",
    "build_orchestrator",
    "get_session_manager",
]

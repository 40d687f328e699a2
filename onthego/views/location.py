# onthego/views/location.py
"""User location providers for the local map."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)

DENIED = "denied"
UNAVAILABLE = "unavailable"
TIMEOUT = "timeout"
UNSUPPORTED = "unsupported"

_CAUSES = {
    DENIED: "Location permission denied. Using default location (San Francisco).",
    UNAVAILABLE: "Location information unavailable. Using default location.",
    TIMEOUT: "Location request timed out. Using default location.",
}

# W3C GeolocationPositionError codes
_BROWSER_CODES = {1: DENIED, 2: UNAVAILABLE, 3: TIMEOUT}


class LocationError(Exception):
    """The user's position could not be determined."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(self.describe())

    def describe(self) -> str:
        return "Unable to get your location. " + _CAUSES.get(self.reason, "Using default location.")

    @classmethod
    def from_browser_code(cls, code) -> "LocationError":
        return cls(_BROWSER_CODES.get(code, UNAVAILABLE))


class LocationProvider(ABC):
    @abstractmethod
    async def current_position(self) -> Tuple[float, float]:
        """Return (lat, lng) or raise LocationError."""


class StaticLocationProvider(LocationProvider):
    """Always answers with the same position, or always fails."""

    def __init__(self, position: Optional[Tuple[float, float]] = None,
                 reason: str = UNSUPPORTED):
        self.position = position
        self.reason = reason

    async def current_position(self) -> Tuple[float, float]:
        if self.position is None:
            raise LocationError(self.reason)
        return self.position


class BrowserLocationProvider(LocationProvider):
    """Asks the connected browser for its position and waits for the answer.

    ``request_position`` sends the request to the browser. The Socket.IO
    handler thread later calls ``resolve`` or ``reject``; both hop onto the
    event loop that is waiting.
    """

    def __init__(self, request_position: Callable[[], None]):
        self._request_position = request_position
        self._pending: Optional[asyncio.Future] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def waiting(self) -> bool:
        return self._pending is not None and not self._pending.done()

    async def current_position(self) -> Tuple[float, float]:
        self._loop = asyncio.get_running_loop()
        future = self._loop.create_future()
        self._pending = future
        self._request_position()
        try:
            return await future
        finally:
            if self._pending is future:
                self._pending = None

    def resolve(self, lat: float, lng: float):
        self._settle(lambda f: f.set_result((lat, lng)))

    def reject(self, error: LocationError):
        self._settle(lambda f: f.set_exception(error))

    def _settle(self, apply):
        future, loop = self._pending, self._loop
        if future is None or loop is None:
            logger.debug("Location answer arrived with no pending request")
            return

        def _apply():
            if not future.done():
                apply(future)

        loop.call_soon_threadsafe(_apply)


__all__ = [
    "LocationError",
    "LocationProvider",
    "StaticLocationProvider",
    "BrowserLocationProvider",
    "DENIED",
    "UNAVAILABLE",
    "TIMEOUT",
    "UNSUPPORTED",
]

# onthego/views/capability.py
"""Rendering library availability, probed once per process."""

import importlib
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Capability:
    """Either an importable library handle or the reason it is missing."""

    name: str
    module: Any = None
    reason: str = ""

    @property
    def is_available(self) -> bool:
        return self.module is not None

    @classmethod
    def available(cls, module: Any, name: str = "") -> "Capability":
        return cls(name=name or getattr(module, "__name__", ""), module=module)

    @classmethod
    def unavailable(cls, reason: str, name: str = "") -> "Capability":
        return cls(name=name, reason=reason)


def probe(module_name: str) -> Capability:
    """Import a rendering library, recording why it failed if it did."""
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        logger.warning(f"Rendering library '{module_name}' unavailable: {e}")
        return Capability.unavailable(str(e), name=module_name)
    return Capability.available(module, name=module_name)


@lru_cache(maxsize=1)
def rendering_capabilities() -> Dict[str, Capability]:
    """The 2D map (folium) and 3D globe (pydeck) capabilities."""
    return {
        "folium": probe("folium"),
        "pydeck": probe("pydeck"),
    }


__all__ = ["Capability", "probe", "rendering_capabilities"]

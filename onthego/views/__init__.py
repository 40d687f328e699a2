"""View and map lifecycle orchestration."""

from .capability import Capability
from .local_map import LocalMap
from .orchestrator import ViewOrchestrator
from .page import Page
from .world_map import WorldMap

__all__ = ['Capability', 'LocalMap', 'ViewOrchestrator', 'Page', 'WorldMap']

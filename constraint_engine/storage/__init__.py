"""
Storage layer - constraint store and scenario registry.

Stores are passed to the engine explicitly; there is no process-wide
singleton.
"""

from .base import ConstraintStore, ScenarioRegistry
from .memory import InMemoryConstraintStore, InMemoryScenarioRegistry

__all__ = [
    "ConstraintStore",
    "ScenarioRegistry",
    "InMemoryConstraintStore",
    "InMemoryScenarioRegistry",
]

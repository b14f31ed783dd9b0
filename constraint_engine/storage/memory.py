"""
In-memory, thread-safe implementations of the storage interfaces.

Both stores guard their state with a re-entrant lock so a host may share
one instance between threads: reads return copies of the containers, and
records themselves are immutable pydantic models.
"""

import threading
from typing import Optional

import structlog

from constraint_engine.errors import InvalidInputError
from constraint_engine.models.constraints import Constraint
from constraint_engine.models.scenarios import Scenario

from .base import ConstraintStore, ScenarioRegistry

logger = structlog.get_logger()


def _merge(own: list[str], derived: list[str]) -> list[str]:
    merged = dict.fromkeys(own)
    for item in derived:
        merged.setdefault(item, None)
    return list(merged)


class InMemoryConstraintStore(ConstraintStore):
    """
    Dict-backed constraint registry with a reverse index on the relation.

    Attributes:
        _constraints: Records keyed by id (insertion ordered)
        _dependents: id -> ids whose ``dependencies`` list it
        _triggered_by: id -> ids whose ``downstream_impacts`` list it
        _lock: Guards all of the above
    """

    def __init__(self, constraints: Optional[list[Constraint]] = None):
        self._constraints: dict[str, Constraint] = {}
        self._dependents: dict[str, list[str]] = {}
        self._triggered_by: dict[str, list[str]] = {}
        self._lock = threading.RLock()
        self.logger = structlog.get_logger()

        for constraint in constraints or []:
            self.add(constraint)

    def add(self, constraint: Constraint) -> str:
        """Register or replace a constraint and refresh the reverse index."""
        with self._lock:
            replaced = constraint.id in self._constraints
            self._constraints[constraint.id] = constraint
            self._rebuild_index()

        self.logger.debug(
            "constraint_stored",
            constraint_id=constraint.id,
            replaced=replaced,
            status=constraint.status.value,
        )
        return constraint.id

    def get(self, constraint_id: str) -> Optional[Constraint]:
        with self._lock:
            return self._constraints.get(constraint_id)

    def list_all(self) -> list[Constraint]:
        with self._lock:
            return list(self._constraints.values())

    def downstream_ids(self, constraint_id: str) -> list[str]:
        with self._lock:
            constraint = self._constraints.get(constraint_id)
            own = list(constraint.downstream_impacts) if constraint else []
            return _merge(own, self._dependents.get(constraint_id, []))

    def upstream_ids(self, constraint_id: str) -> list[str]:
        with self._lock:
            constraint = self._constraints.get(constraint_id)
            own = list(constraint.dependencies) if constraint else []
            return _merge(own, self._triggered_by.get(constraint_id, []))

    def __len__(self) -> int:
        with self._lock:
            return len(self._constraints)

    def _rebuild_index(self) -> None:
        """Recompute reverse adjacency. Caller holds the lock."""
        dependents: dict[str, list[str]] = {}
        triggered_by: dict[str, list[str]] = {}
        for constraint in self._constraints.values():
            for upstream_id in constraint.dependencies:
                dependents.setdefault(upstream_id, []).append(constraint.id)
            for downstream_id in constraint.downstream_impacts:
                triggered_by.setdefault(downstream_id, []).append(constraint.id)
        self._dependents = dependents
        self._triggered_by = triggered_by


class InMemoryScenarioRegistry(ScenarioRegistry):
    """Append-only, lock-guarded scenario registry."""

    def __init__(self):
        self._scenarios: dict[str, Scenario] = {}
        self._lock = threading.RLock()

    def save(self, scenario: Scenario) -> str:
        with self._lock:
            if scenario.id in self._scenarios:
                raise InvalidInputError(
                    f"Scenario {scenario.id} already exists; scenarios are immutable"
                )
            self._scenarios[scenario.id] = scenario

        logger.debug("scenario_stored", scenario_id=scenario.id)
        return scenario.id

    def get(self, scenario_id: str) -> Optional[Scenario]:
        with self._lock:
            return self._scenarios.get(scenario_id)

    def list_all(self) -> list[Scenario]:
        with self._lock:
            return list(self._scenarios.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._scenarios)

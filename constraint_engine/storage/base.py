"""
Abstract storage interfaces for the constraint engine.

The engine owns no module-level registries: a ConstraintStore and a
ScenarioRegistry are passed in explicitly. They are the only shared mutable
resources, so implementations used from concurrent hosts must be
synchronized (see InMemoryConstraintStore).
"""

from abc import ABC, abstractmethod
from typing import Optional

from constraint_engine.models.constraints import Constraint
from constraint_engine.models.scenarios import Scenario


class ConstraintStore(ABC):
    """
    Registry of constraint records keyed by id.

    Besides plain CRUD, the store answers both directions of the
    dependency relation, merging what each record declares with what other
    records declare about it.
    """

    @abstractmethod
    def add(self, constraint: Constraint) -> str:
        """
        Register a constraint, replacing any record with the same id.

        Args:
            constraint: Validated constraint record

        Returns:
            The constraint id
        """

    @abstractmethod
    def get(self, constraint_id: str) -> Optional[Constraint]:
        """Retrieve a constraint by id, or None if unknown."""

    @abstractmethod
    def list_all(self) -> list[Constraint]:
        """All constraints in registration order."""

    @abstractmethod
    def downstream_ids(self, constraint_id: str) -> list[str]:
        """
        Ids triggered by the given constraint.

        Union of the record's own ``downstream_impacts`` and every registered
        constraint listing it in ``dependencies``. Own entries come first.
        """

    @abstractmethod
    def upstream_ids(self, constraint_id: str) -> list[str]:
        """
        Ids that trigger the given constraint.

        Union of the record's own ``dependencies`` and every registered
        constraint listing it in ``downstream_impacts``. Own entries come first.
        """

    def __contains__(self, constraint_id: object) -> bool:
        return isinstance(constraint_id, str) and self.get(constraint_id) is not None

    def __len__(self) -> int:
        return len(self.list_all())


class ScenarioRegistry(ABC):
    """Append-only registry of immutable scenarios."""

    @abstractmethod
    def save(self, scenario: Scenario) -> str:
        """
        Persist a scenario.

        Returns:
            The scenario id

        Raises:
            InvalidInputError: If a scenario with the same id already exists
        """

    @abstractmethod
    def get(self, scenario_id: str) -> Optional[Scenario]:
        """Retrieve a scenario by id, or None if unknown."""

    @abstractmethod
    def list_all(self) -> list[Scenario]:
        """All scenarios in creation order."""

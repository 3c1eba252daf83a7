"""Apply contract for declaratively managing a set of objects."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field

from fleet_bootstrap.manifest import BaseResource, NamedResource


@dataclass
class ApplyResult:
    """Summary of the changes made by a call to apply."""

    created: list[NamedResource] = field(default_factory=list)
    updated: list[NamedResource] = field(default_factory=list)
    unchanged: list[NamedResource] = field(default_factory=list)
    deleted: list[NamedResource] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """Return True if any object was created, updated or deleted."""
        return bool(self.created or self.updated or self.deleted)


class Apply(ABC):
    """Abstract base class for applying the complete set of objects for an owner."""

    @abstractmethod
    async def apply_objects(
        self, owner: str, objects: Sequence[BaseResource]
    ) -> ApplyResult:
        """Make the objects owned by `owner` match `objects`.

        Objects that don't exist are created, existing objects with the same
        identity are updated, and objects previously applied for the same
        owner that are not in `objects` are deleted. Callers must always pass
        the complete set of objects.

        Raises:
            ApplyFailure: If the objects could not be applied.
        """

"""Module for an in memory apply engine."""

from collections import defaultdict
from collections.abc import Sequence
from typing import Any, DefaultDict

import logging

from fleet_bootstrap.manifest import BaseResource, NamedResource
from fleet_bootstrap.exceptions import ApplyFailure

from .apply import Apply, ApplyResult


_LOGGER = logging.getLogger(__name__)


class InMemoryApply(Apply):
    """In-memory implementation of the Apply interface.

    Live objects are stored as rendered kubernetes documents keyed by
    NamedResource, along with the owner that last applied them.
    """

    def __init__(self) -> None:
        """Initialize the InMemoryApply."""
        self._objects: dict[NamedResource, dict[str, Any]] = {}
        self._owners: dict[NamedResource, str] = {}
        self._owned: DefaultDict[str, set[NamedResource]] = defaultdict(set)

    def add_object(self, obj: BaseResource) -> None:
        """Add a live object that is not owned by any apply call."""
        resource_id = obj.resource_id
        _LOGGER.debug("Adding unowned object %s", resource_id)
        self._objects[resource_id] = obj.to_doc()

    def get_object(self, resource_id: NamedResource) -> dict[str, Any] | None:
        """Retrieve the live document for an object."""
        return self._objects.get(resource_id)

    def get_owner(self, resource_id: NamedResource) -> str | None:
        """Return the owner that last applied the object, if any."""
        return self._owners.get(resource_id)

    def list_objects(self, owner: str | None = None) -> list[NamedResource]:
        """List live objects, optionally only those applied by `owner`."""
        if owner is None:
            return list(self._objects)
        return [rid for rid in self._objects if self._owners.get(rid) == owner]

    async def apply_objects(
        self, owner: str, objects: Sequence[BaseResource]
    ) -> ApplyResult:
        """Make the objects owned by `owner` match `objects`."""
        if not owner:
            raise ApplyFailure(owner, "owner must not be empty")
        desired: dict[NamedResource, dict[str, Any]] = {}
        for obj in objects:
            resource_id = obj.resource_id
            if resource_id in desired:
                raise ApplyFailure(owner, f"duplicate object {resource_id}")
            desired[resource_id] = obj.to_doc()

        result = ApplyResult()
        for resource_id, doc in desired.items():
            previous_owner = self._owners.get(resource_id)
            if (existing := self._objects.get(resource_id)) is None:
                _LOGGER.debug("Creating %s for %s", resource_id, owner)
                result.created.append(resource_id)
            elif existing == doc and previous_owner == owner:
                result.unchanged.append(resource_id)
            else:
                _LOGGER.debug("Updating %s for %s", resource_id, owner)
                result.updated.append(resource_id)
            if previous_owner is not None and previous_owner != owner:
                self._owned[previous_owner].discard(resource_id)
            self._objects[resource_id] = doc
            self._owners[resource_id] = owner

        for resource_id in sorted(self._owned[owner] - desired.keys(), key=str):
            _LOGGER.debug("Deleting %s for %s", resource_id, owner)
            del self._objects[resource_id]
            del self._owners[resource_id]
            result.deleted.append(resource_id)
        self._owned[owner] = set(desired)
        return result

"""Dependency closure over the component registry.

Given the components a user asked for, the resolver produces the ordered
set that actually has to be deployed: the requested ids first (duplicates
collapsed to their first occurrence), then every dependency that was not
requested, in the order it was discovered.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, Field

from infrakit.errors import DependencyCycleError
from infrakit.utils import log_info

from .registry import ComponentRegistry


class AddedDependency(BaseModel):
    """A dependency the resolver appended on behalf of another component."""

    component: str
    required_by: str


class Resolution(BaseModel):
    """Outcome of :meth:`DependencyResolver.resolve`."""

    requested: list[str] = Field(default_factory=list)
    components: list[str] = Field(default_factory=list)
    added: list[AddedDependency] = Field(default_factory=list)

    @property
    def added_ids(self) -> list[str]:
        return [dep.component for dep in self.added]


class DependencyResolver:
    """Computes the dependency-closed, order-preserving component set."""

    def __init__(self, registry: ComponentRegistry) -> None:
        self.registry = registry

    def resolve(self, requested: Iterable[str]) -> Resolution:
        """Close *requested* over declared dependencies.

        Args:
            requested: Component ids in the order the user supplied them.

        Returns:
            A ``Resolution`` whose ``components`` list starts with the
            deduplicated request and ends with the added dependencies.

        Raises:
            UnknownComponentError: If any requested id is not registered.
                Raised before any other work.
            DependencyCycleError: If a dependency chain revisits a component.
        """
        requested_list = list(requested)
        self.registry.validate(requested_list)

        resolved: list[str] = []
        for component_id in requested_list:
            if component_id not in resolved:
                resolved.append(component_id)
        deduplicated = list(resolved)

        members = set(resolved)
        added: list[AddedDependency] = []

        # ``resolved`` grows while we walk it so added dependencies get
        # their own dependencies resolved in turn.
        index = 0
        while index < len(resolved):
            component_id = resolved[index]
            self._check_chain(component_id)
            dependency = self.registry.dependency_of(component_id)
            if dependency is not None and dependency not in members:
                members.add(dependency)
                resolved.append(dependency)
                added.append(AddedDependency(component=dependency, required_by=component_id))
                log_info(f"Adding dependency: {dependency} (required by {component_id})")
            index += 1

        return Resolution(requested=deduplicated, components=resolved, added=added)

    def _check_chain(self, component_id: str) -> None:
        """Follow the dependency chain of *component_id* and reject loops."""
        visiting = [component_id]
        current = self.registry.dependency_of(component_id)
        while current is not None:
            if current in visiting:
                raise DependencyCycleError(visiting + [current])
            visiting.append(current)
            current = self.registry.dependency_of(current)

"""Static catalog of deployable components.

The registry is an ordered, read-only mapping from a component id to its
``ComponentDescriptor``. Iteration order is the declaration order, which is
also the order used when listing components in ``--help``.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from infrakit.errors import RegistryError, UnknownComponentError


class ComponentDescriptor(BaseModel):
    """A single deployable unit and its (at most one) hard dependency."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique component identifier")
    description: str = Field(default="", description="Human-readable summary")
    dependency: Optional[str] = Field(
        default=None, description="Id of a component that must be deployed alongside"
    )


class ComponentRegistry:
    """Immutable, ordered component catalog.

    Construction checks that ids are unique and that every declared
    dependency names another entry of the same catalog. Cycles are not
    rejected here; the resolver detects them when it walks a chain.
    """

    def __init__(self, descriptors: Iterable[ComponentDescriptor]) -> None:
        entries: dict[str, ComponentDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.id in entries:
                raise RegistryError(f"Duplicate component id: {descriptor.id}")
            entries[descriptor.id] = descriptor

        for descriptor in entries.values():
            if descriptor.dependency is not None and descriptor.dependency not in entries:
                raise RegistryError(
                    f"Component {descriptor.id} depends on unregistered "
                    f"component {descriptor.dependency}"
                )
        self._entries = entries

    # -- Lookups -----------------------------------------------------------

    def get(self, component_id: str) -> ComponentDescriptor:
        """Return the descriptor for *component_id*.

        Raises:
            UnknownComponentError: If the id is not registered.
        """
        try:
            return self._entries[component_id]
        except KeyError:
            raise UnknownComponentError([component_id]) from None

    def describe(self, component_id: str) -> str:
        return self.get(component_id).description

    def dependency_of(self, component_id: str) -> Optional[str]:
        return self.get(component_id).dependency

    def all_ids(self) -> tuple[str, ...]:
        """Every registered id, in declaration order."""
        return tuple(self._entries)

    def items(self) -> list[tuple[str, str]]:
        """``(id, description)`` pairs in declaration order."""
        return [(cid, d.description) for cid, d in self._entries.items()]

    def validate(self, component_ids: Iterable[str]) -> None:
        """Check that every id is registered.

        Raises:
            UnknownComponentError: Listing *all* unknown ids, in input order
                and without duplicates.
        """
        invalid: list[str] = []
        for component_id in component_ids:
            if component_id not in self._entries and component_id not in invalid:
                invalid.append(component_id)
        if invalid:
            raise UnknownComponentError(invalid)

    # -- Container protocol ------------------------------------------------

    def __contains__(self, component_id: object) -> bool:
        return component_id in self._entries

    def __iter__(self) -> Iterator[ComponentDescriptor]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


DEFAULT_REGISTRY = ComponentRegistry(
    [
        ComponentDescriptor(id="core", description="HAProxy + Nginx"),
        ComponentDescriptor(id="postgresql", description="PostgreSQL Database"),
        ComponentDescriptor(id="mongodb", description="MongoDB Database"),
        ComponentDescriptor(id="redis", description="Redis Cache"),
        ComponentDescriptor(id="rabbitmq", description="RabbitMQ Message Queue"),
        ComponentDescriptor(id="prometheus", description="Prometheus Monitoring"),
        ComponentDescriptor(
            id="grafana", description="Grafana Dashboards", dependency="prometheus"
        ),
        ComponentDescriptor(
            id="elk", description="ELK Stack (Elasticsearch, Logstash, Kibana)"
        ),
        ComponentDescriptor(id="jaeger", description="Jaeger Tracing"),
    ]
)

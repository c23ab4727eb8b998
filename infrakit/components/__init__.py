"""Component catalog and dependency resolution.

Usage::

    from infrakit.components import DEFAULT_REGISTRY, DependencyResolver

    resolution = DependencyResolver(DEFAULT_REGISTRY).resolve(["grafana"])
    print(resolution.components)  # ['grafana', 'prometheus']
"""

from infrakit.components.registry import (
    DEFAULT_REGISTRY,
    ComponentDescriptor,
    ComponentRegistry,
)
from infrakit.components.resolver import AddedDependency, DependencyResolver, Resolution

__all__ = [
    "DEFAULT_REGISTRY",
    "AddedDependency",
    "ComponentDescriptor",
    "ComponentRegistry",
    "DependencyResolver",
    "Resolution",
]

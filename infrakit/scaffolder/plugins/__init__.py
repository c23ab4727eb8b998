"""Component plugins and plugin lookup.

Each registry entry that can actually be deployed has exactly one plugin
class here. Components without one are reported by the assembler and left
out of the manifest.
"""

from __future__ import annotations

from collections.abc import Callable

from infrakit.config import Config
from infrakit.errors import MissingPluginError

from ..templates import TemplateRenderer
from .base import ComponentPlugin, EnvDefaults
from .core import CorePlugin
from .mongodb import MongoPlugin
from .postgresql import PostgresPlugin

PLUGINS: dict[str, type[ComponentPlugin]] = {
    CorePlugin.component_id: CorePlugin,
    PostgresPlugin.component_id: PostgresPlugin,
    MongoPlugin.component_id: MongoPlugin,
}

PluginLookup = Callable[[str], ComponentPlugin]


def plugin_lookup(renderer: TemplateRenderer, config: Config) -> PluginLookup:
    """Build a ``component_id -> plugin`` lookup bound to *renderer* and *config*.

    The returned callable raises ``MissingPluginError`` for ids with no
    plugin.
    """

    def lookup(component_id: str) -> ComponentPlugin:
        plugin_cls = PLUGINS.get(component_id)
        if plugin_cls is None:
            raise MissingPluginError(component_id)
        return plugin_cls(renderer, config)

    return lookup


__all__ = [
    "PLUGINS",
    "ComponentPlugin",
    "CorePlugin",
    "EnvDefaults",
    "MongoPlugin",
    "PluginLookup",
    "PostgresPlugin",
    "plugin_lookup",
]

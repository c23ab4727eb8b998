"""infrakit scaffolder -- renders component artifacts and the compose manifest.

Quick usage::

    from infrakit.config import Config
    from infrakit.scaffolder import ManifestAssembler, TemplateRenderer, plugin_lookup

    config = Config(root=Path("."))
    renderer = TemplateRenderer()
    assembler = ManifestAssembler(config, renderer, plugin_lookup(renderer, config))
    result = assembler.assemble(["core", "postgresql"], workspace)
"""

from infrakit.scaffolder.assembler import (
    NETWORK_SUBNETS,
    AssemblyResult,
    ComponentOutput,
    ManifestAssembler,
    merge_env_defaults,
    validate_manifest,
)
from infrakit.scaffolder.plugins import PLUGINS, ComponentPlugin, EnvDefaults, plugin_lookup
from infrakit.scaffolder.templates import TemplateRenderer

__all__ = [
    "NETWORK_SUBNETS",
    "PLUGINS",
    "AssemblyResult",
    "ComponentOutput",
    "ComponentPlugin",
    "EnvDefaults",
    "ManifestAssembler",
    "TemplateRenderer",
    "merge_env_defaults",
    "plugin_lookup",
    "validate_manifest",
]

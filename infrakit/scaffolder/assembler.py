"""Manifest assembly.

Runs each resolved component's plugin in order, writes the per-component
fragments under the workspace and concatenates them into the final
``docker-compose.yml``. Section order is fixed: preamble, services (in
resolved order), networks, volumes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field

from infrakit.config import Config
from infrakit.errors import ManifestValidationError, MissingPluginError, WorkspaceIOError
from infrakit.utils import log_info, log_success, log_warning, write_text
from infrakit.workspace import WorkspaceHandle

from .plugins import ComponentPlugin, EnvDefaults, PluginLookup
from .templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# One bridge network per tier. Order is the order they appear in the manifest.
NETWORK_SUBNETS: tuple[tuple[str, str], ...] = (
    ("frontend", "172.20.0.0/24"),
    ("backend", "172.21.0.0/24"),
    ("database", "172.22.0.0/24"),
    ("monitoring", "172.23.0.0/24"),
)

MANIFEST_TEMPLATE = "docker-compose.yml.j2"
VOLUME_TEMPLATE = "volume.yml.j2"

REQUIRED_SECTIONS: tuple[str, ...] = ("services", "networks", "volumes")


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------


class ComponentOutput(BaseModel):
    """Everything one plugin produced during a run."""

    component: str
    compose_path: Path
    config_files: list[Path] = Field(default_factory=list)
    volumes: list[str] = Field(default_factory=list)
    docs_path: Optional[Path] = None
    env_merged: bool = False


class AssemblyResult(BaseModel):
    """Outcome of :meth:`ManifestAssembler.assemble`."""

    manifest_path: Path
    included: list[ComponentOutput] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    volumes: list[str] = Field(default_factory=list)

    @property
    def included_ids(self) -> list[str]:
        return [output.component for output in self.included]


# ---------------------------------------------------------------------------
# Assembler
# ---------------------------------------------------------------------------


class ManifestAssembler:
    """Drives component plugins and writes the assembled manifest.

    The assembler is the only writer of the manifest. Components are
    processed strictly one after another because their order determines
    the order of the services section.
    """

    def __init__(
        self,
        config: Config,
        renderer: TemplateRenderer,
        lookup: PluginLookup,
    ) -> None:
        self.config = config
        self.renderer = renderer
        self.lookup = lookup

    def assemble(self, components: list[str], workspace: WorkspaceHandle) -> AssemblyResult:
        """Run every plugin and write ``docker-compose.yml``.

        Components without a plugin are skipped with a warning; the
        manifest is still produced from the others.

        Raises:
            WorkspaceIOError: If writing any fragment or the manifest fails.
            ManifestValidationError: If the assembled manifest does not parse.
        """
        result = AssemblyResult(manifest_path=workspace.manifest_path)
        services: list[dict[str, str]] = []

        for component_id in components:
            try:
                plugin = self.lookup(component_id)
            except MissingPluginError as exc:
                log_warning(f"{exc}; skipping")
                result.skipped.append(component_id)
                continue

            log_info(f"Setting up {component_id}...")
            compose, output = self._run_plugin(plugin, workspace)
            services.append({"component": component_id, "compose": compose})
            result.included.append(output)
            for volume in output.volumes:
                if volume not in result.volumes:
                    result.volumes.append(volume)

        manifest = self.render_manifest(services, result.volumes)
        validate_manifest(manifest)
        try:
            write_text(workspace.manifest_path, manifest)
        except OSError as exc:
            raise WorkspaceIOError(
                f"Failed to write {workspace.manifest_path}: {exc}"
            ) from exc

        log_success(f"Manifest written to {workspace.manifest_path}")
        return result

    # -- Per-component work ------------------------------------------------

    def _run_plugin(
        self, plugin: ComponentPlugin, workspace: WorkspaceHandle
    ) -> tuple[str, ComponentOutput]:
        component_id = plugin.component_id
        try:
            config_files = plugin.emit_config(workspace)

            compose = plugin.emit_compose_fragment().rstrip("\n")
            compose_path = write_text(workspace.compose_path(component_id), compose + "\n")

            volumes = plugin.emit_volumes()
            for volume in volumes:
                write_text(workspace.volume_path(volume), self.render_volume(volume))
                log_info(f"Created volume: {volume}")

            env_merged = False
            env_defaults = plugin.emit_env_defaults()
            if env_defaults is not None:
                env_merged = merge_env_defaults(self.config.env_template_path, env_defaults)
                if env_merged:
                    log_success(
                        f"{component_id} environment variables added to "
                        f"{self.config.env_template}"
                    )

            docs_path: Optional[Path] = None
            docs = plugin.emit_docs()
            if docs is not None:
                docs_path = write_text(workspace.docs_path(component_id), docs)
        except OSError as exc:
            raise WorkspaceIOError(f"Failed to write {component_id} output: {exc}") from exc

        output = ComponentOutput(
            component=component_id,
            compose_path=compose_path,
            config_files=config_files,
            volumes=volumes,
            docs_path=docs_path,
            env_merged=env_merged,
        )
        return compose, output

    # -- Rendering ---------------------------------------------------------

    def render_volume(self, volume: str) -> str:
        return self.renderer.render(VOLUME_TEMPLATE, {"volume": volume})

    def render_manifest(self, services: list[dict[str, str]], volumes: list[str]) -> str:
        """Render the full manifest text.

        Args:
            services: ``{"component": id, "compose": fragment}`` dicts in
                resolved order.
            volumes: Volume names in the order they were produced.
        """
        context: dict[str, Any] = {
            "services": services,
            "networks": NETWORK_SUBNETS,
            "volume_blocks": [self.render_volume(v).rstrip("\n") for v in volumes],
        }
        return self.renderer.render(MANIFEST_TEMPLATE, context)


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def merge_env_defaults(template_path: Path, defaults: EnvDefaults) -> bool:
    """Append a component's defaults to the environment template once.

    The block is skipped when ``defaults.sentinel`` already occurs anywhere
    in the template, so repeated runs never duplicate it.

    Returns:
        ``True`` if the block was appended.

    Raises:
        WorkspaceIOError: If the template exists but is not UTF-8 text.
    """
    try:
        existing = template_path.read_text(encoding="utf-8") if template_path.exists() else ""
    except UnicodeDecodeError as exc:
        raise WorkspaceIOError(f"{template_path} is not valid UTF-8: {exc}") from exc

    if defaults.sentinel in existing:
        return False

    if not existing:
        separator = ""
    elif existing.endswith("\n"):
        separator = "\n"
    else:
        separator = "\n\n"

    with template_path.open("a", encoding="utf-8") as handle:
        handle.write(separator + defaults.block.strip("\n") + "\n")
    return True


def validate_manifest(manifest: str) -> dict[str, Any]:
    """Parse *manifest* as YAML and check the top-level sections.

    Returns:
        The parsed document.

    Raises:
        ManifestValidationError: On a YAML error or a missing section.
    """
    try:
        document = yaml.safe_load(manifest)
    except yaml.YAMLError as exc:
        raise ManifestValidationError(f"Assembled manifest is not valid YAML: {exc}") from exc

    if not isinstance(document, dict):
        raise ManifestValidationError("Assembled manifest is not a YAML mapping")

    missing = [section for section in REQUIRED_SECTIONS if section not in document]
    if missing:
        raise ManifestValidationError(
            f"Assembled manifest is missing sections: {', '.join(missing)}"
        )
    return document

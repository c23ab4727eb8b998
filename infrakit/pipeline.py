"""infrakit setup pipeline.

Turns a list of component names into a generated Docker Compose deployment:

1. Validate the names against the component registry.
2. Resolve dependencies (e.g. ``grafana`` pulls in ``prometheus``).
3. Prepare the ``generated/`` workspace (clean or preserve).
4. Run each component plugin and assemble ``docker-compose.yml``.
5. Seed ``.env`` from ``.env.example`` and copy it next to the manifest.
6. Print a summary with next steps.

Usage::

    infrakit core postgresql mongodb
    infrakit --no-clean grafana
    python -m infrakit.pipeline --root ./deploy core
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, NoReturn, Optional

from rich.panel import Panel

from infrakit.components import DEFAULT_REGISTRY, ComponentRegistry, DependencyResolver
from infrakit.config import Config
from infrakit.errors import SetupError, UnknownComponentError, WorkspaceIOError
from infrakit.scaffolder import ManifestAssembler, TemplateRenderer, plugin_lookup
from infrakit.scaffolder.plugins import PluginLookup
from infrakit.utils import (
    console,
    log_error,
    log_info,
    log_warning,
    print_header,
    print_summary_table,
    save_json,
)
from infrakit.workspace import WorkspaceManager, WorkspaceMode


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class SetupPipeline:
    """Drives one setup run from component names to an assembled manifest.

    Attributes:
        config: Run configuration.
        registry: Component catalog used for validation and dependencies.
        state: Accumulates what the run did; persisted to
            ``generated/.setup-state.json`` once the manifest is written.
    """

    def __init__(
        self,
        config: Config,
        registry: ComponentRegistry = DEFAULT_REGISTRY,
        renderer: Optional[TemplateRenderer] = None,
        lookup: Optional[PluginLookup] = None,
    ) -> None:
        self.config = config
        self.registry = registry
        self.renderer = renderer or TemplateRenderer()
        self.resolver = DependencyResolver(registry)
        self.workspace = WorkspaceManager(config)
        self.assembler = ManifestAssembler(
            config, self.renderer, lookup or plugin_lookup(self.renderer, config)
        )
        self.state: dict[str, Any] = {}

    def run(self, components: list[str]) -> dict[str, Any]:
        """Execute a full setup run.

        Args:
            components: Component ids as given on the command line.

        Returns:
            The run state dictionary.

        Raises:
            UnknownComponentError: Before any filesystem change.
            SetupError: Any other fatal condition; earlier output is left
                in place.
        """
        mode = WorkspaceMode.CLEAN if self.config.clean else WorkspaceMode.PRESERVE
        self.state = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "mode": mode.value,
            "requested": list(components),
        }

        if mode == WorkspaceMode.CLEAN:
            log_info("Mode: Clean generation (fresh configuration)")
        else:
            log_warning("Mode: Incremental generation (keeping existing files)")

        resolution = self.resolver.resolve(components)
        log_info(f"Components to setup: {' '.join(resolution.components)}")

        workspace = self.workspace.prepare(mode)
        assembly = self.assembler.assemble(resolution.components, workspace)

        env_created = self.workspace.seed_env_file()
        published_env = self.workspace.publish_env_file()

        self.state.update(
            {
                "resolved": resolution.components,
                "added_dependencies": [dep.model_dump() for dep in resolution.added],
                "included": assembly.included_ids,
                "skipped": assembly.skipped,
                "volumes": assembly.volumes,
                "manifest_path": str(assembly.manifest_path),
                "backup_path": str(workspace.backup_path) if workspace.backup_path else None,
                "env_created": env_created,
                "env_path": str(published_env),
                "finished_at": datetime.now(timezone.utc).isoformat(),
            }
        )
        try:
            save_json(self.state, self.config.state_path)
        except OSError as exc:
            raise WorkspaceIOError(
                f"Failed to write {self.config.state_path}: {exc}"
            ) from exc

        self._print_summary(resolution.components, assembly.skipped)
        return self.state

    def _print_summary(self, components: list[str], skipped: list[str]) -> None:
        """Print the generated-components table and next steps."""
        rows = []
        for component_id in components:
            status = "skipped (no plugin)" if component_id in skipped else "generated"
            rows.append((component_id, self.registry.describe(component_id), status))
        print_summary_table(
            rows, ("Component", "Description", "Status"), title="Setup Complete"
        )

        manifest = self.config.manifest_path
        steps = [
            f"1. Review and update credentials in {self.config.env_file_path}",
            f"2. Review generated configuration in {self.config.generated_path}",
            "3. Start services:",
            f"   docker-compose -f {manifest} up -d",
            "4. For database administration (development):",
            f"   docker-compose -f {manifest} --profile admin up -d",
            "5. Check service status:",
            f"   docker-compose -f {manifest} ps",
        ]
        console.print(
            Panel("\n".join(steps), title="[bold]Next steps[/bold]", border_style="green")
        )


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with exit status 1."""

    def error(self, message: str) -> NoReturn:
        log_error(message)
        self.print_help()
        sys.exit(1)


def _registry_epilog(registry: ComponentRegistry) -> str:
    width = max(len(component_id) for component_id in registry.all_ids())
    lines = ["Available components:"]
    for component_id, description in registry.items():
        lines.append(f"  {component_id.ljust(width)}  {description}")
    lines.extend(
        [
            "",
            "Examples:",
            "  infrakit core postgresql mongodb",
            "  infrakit --clean core postgresql mongodb redis",
            "  infrakit --no-clean core  # keep existing configs",
        ]
    )
    return "\n".join(lines)


def build_parser(registry: ComponentRegistry = DEFAULT_REGISTRY) -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="infrakit",
        allow_abbrev=False,
        description="Infrastructure deployment setup -- renders a Docker Compose stack",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=_registry_epilog(registry),
    )
    parser.add_argument(
        "components",
        nargs="*",
        metavar="component",
        help="Components to set up (see the list below)",
    )
    parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Reset the generated directory before the run (default: on)",
    )
    parser.add_argument(
        "--keep-backups",
        dest="keep_backups",
        action="store_true",
        default=None,
        help="Back up an existing docker-compose.yml before replacing it (default)",
    )
    parser.add_argument(
        "--no-backups",
        dest="keep_backups",
        action="store_false",
        help="Do not back up an existing docker-compose.yml",
    )
    parser.add_argument(
        "--root",
        default=None,
        help="Project root holding .env.example, .env and generated/ "
        "(default: $INFRAKIT_ROOT or the current directory)",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``infrakit`` and ``python -m infrakit.pipeline``."""
    parser = build_parser(DEFAULT_REGISTRY)
    args = parser.parse_intermixed_args(argv)

    if not args.components:
        parser.error("No components specified")

    config = Config.from_env()
    if args.root is not None:
        config.root = Path(args.root)
    if args.clean is not None:
        config.clean = args.clean
    if args.keep_backups is not None:
        config.keep_backups = args.keep_backups

    print_header("Infrastructure Deployment Setup", f"Root: {config.root.resolve()}")

    pipeline = SetupPipeline(config)
    try:
        pipeline.run(args.components)
    except UnknownComponentError as exc:
        parser.error(str(exc))
    except SetupError as exc:
        log_error(str(exc))
        sys.exit(1)


if __name__ == "__main__":
    main()

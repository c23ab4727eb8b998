"""Lifecycle of the generated output tree.

The workspace manager owns ``<root>/generated``: it backs up a previous
manifest, resets (clean mode) or keeps (preserve mode) the generated
artifacts, recreates the standard directory layout and seeds the user's
``.env`` from the environment template.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from infrakit.config import Config
from infrakit.errors import EnvironmentSeedMissingError, WorkspaceIOError
from infrakit.utils import backup_timestamp, ensure_dir, log_info, log_success, log_warning

# Directories every run starts from.
MANAGED_DIRS: tuple[str, ...] = ("config", "compose", "volumes", "static", "docs")

# Removed in clean mode. ``logs`` is created by the core plugin.
CLEANED_DIRS: tuple[str, ...] = MANAGED_DIRS + ("logs",)


class WorkspaceMode(str, Enum):
    """How existing generated artifacts are treated at the start of a run."""

    CLEAN = "clean"
    PRESERVE = "preserve"


@dataclass
class WorkspaceHandle:
    """Paths into a prepared generated tree, handed to the assembler and plugins."""

    root: Path
    manifest_path: Path
    mode: WorkspaceMode
    backup_path: Optional[Path] = None

    @property
    def compose_dir(self) -> Path:
        return self.root / "compose"

    @property
    def volumes_dir(self) -> Path:
        return self.root / "volumes"

    @property
    def static_dir(self) -> Path:
        return self.root / "static"

    @property
    def docs_dir(self) -> Path:
        return self.root / "docs"

    @property
    def logs_dir(self) -> Path:
        return self.root / "logs"

    def config_dir(self, service: str) -> Path:
        """Return (creating it if needed) ``config/<service>/``."""
        return ensure_dir(self.root / "config" / service)

    def compose_path(self, component_id: str) -> Path:
        return self.compose_dir / f"{component_id}.yml"

    def volume_path(self, volume_name: str) -> Path:
        return self.volumes_dir / f"{volume_name}.yml"

    def docs_path(self, component_id: str) -> Path:
        return self.docs_dir / f"{component_id}.md"


class WorkspaceManager:
    """Prepares the generated tree and manages the ``.env`` file."""

    def __init__(self, config: Config) -> None:
        self.config = config

    # ------------------------------------------------------------------
    # Preparation
    # ------------------------------------------------------------------

    def prepare(self, mode: Optional[WorkspaceMode] = None) -> WorkspaceHandle:
        """Back up, reset (in clean mode) and lay out the generated tree.

        Args:
            mode: Explicit mode; defaults to clean or preserve according to
                ``config.clean``.

        Returns:
            A ``WorkspaceHandle`` for the prepared tree.

        Raises:
            EnvironmentSeedMissingError: ``.env`` does not exist and there is
                no template to seed it from. Checked before touching disk.
            WorkspaceIOError: Any create/remove/copy failure. Partial output
                is left in place.
        """
        if mode is None:
            mode = WorkspaceMode.CLEAN if self.config.clean else WorkspaceMode.PRESERVE

        self._require_env_source()

        generated = self.config.generated_path
        backup_path: Optional[Path] = None
        try:
            if self.config.keep_backups:
                backup_path = self.backup_manifest()
            if mode == WorkspaceMode.CLEAN:
                self._clean(generated)

            log_info("Setting up directories...")
            for name in MANAGED_DIRS:
                ensure_dir(generated / name)
        except OSError as exc:
            raise WorkspaceIOError(f"Failed to prepare {generated}: {exc}") from exc

        return WorkspaceHandle(
            root=generated,
            manifest_path=self.config.manifest_path,
            mode=mode,
            backup_path=backup_path,
        )

    def backup_manifest(self) -> Optional[Path]:
        """Copy an existing manifest to a timestamped sibling file.

        Returns:
            The backup path, or ``None`` when there was no manifest.
        """
        manifest = self.config.manifest_path
        if not manifest.is_file():
            return None

        stem = f"{manifest.name}.backup.{backup_timestamp()}"
        target = manifest.with_name(stem)
        counter = 1
        while target.exists():
            target = manifest.with_name(f"{stem}_{counter}")
            counter += 1

        shutil.copy2(manifest, target)
        log_info(f"Backed up existing {manifest.name} to {target.name}")
        return target

    def _clean(self, generated: Path) -> None:
        """Remove generated artifacts, keeping backups and the copied ``.env``."""
        if not generated.is_dir():
            return

        log_warning("Cleaning generated directory to ensure fresh configuration...")
        for name in CLEANED_DIRS:
            target = generated / name
            if target.is_dir():
                shutil.rmtree(target)
        manifest = self.config.manifest_path
        if manifest.exists():
            manifest.unlink()
        log_success("Generated directory cleaned successfully.")

    # ------------------------------------------------------------------
    # Environment file
    # ------------------------------------------------------------------

    def _require_env_source(self) -> None:
        if self.config.env_file_path.exists():
            return
        if not self.config.env_template_path.is_file():
            raise EnvironmentSeedMissingError(
                f"Environment template not found: {self.config.env_template_path}"
            )

    def seed_env_file(self) -> bool:
        """Create ``.env`` from the template unless it already exists.

        An existing ``.env`` is never touched: it holds user-edited
        credentials.

        Returns:
            ``True`` if the file was created by this call.
        """
        env_file = self.config.env_file_path
        if env_file.exists():
            return False

        self._require_env_source()
        try:
            shutil.copyfile(self.config.env_template_path, env_file)
        except OSError as exc:
            raise WorkspaceIOError(f"Failed to create {env_file}: {exc}") from exc

        log_warning(
            f"Created {env_file.name} file from template. "
            "Please review and update credentials."
        )
        return True

    def publish_env_file(self) -> Path:
        """Copy ``.env`` next to the manifest so compose picks it up."""
        source = self.config.env_file_path
        target = self.config.generated_path / self.config.env_file
        try:
            shutil.copyfile(source, target)
        except OSError as exc:
            raise WorkspaceIOError(f"Failed to copy {source} to {target}: {exc}") from exc
        return target

"""infrakit configuration.

Typed configuration for a setup run. All settings use Pydantic v2 models so
they are validated at construction time; the resulting ``Config`` is passed
explicitly to the pipeline, the workspace manager and the assembler instead
of being read from the process environment at arbitrary points.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class PortConfig(BaseModel):
    """Host port allocation for services that are published outside Docker.

    Core infrastructure lives in the 1000-1999 range, database admin UIs in
    the 4000 range. Databases themselves are never published.
    """

    haproxy_http: int = Field(default=1000, ge=1, le=65535)
    haproxy_stats: int = Field(default=1001, ge=1, le=65535)
    nginx_http: int = Field(default=1100, ge=1, le=65535)
    nginx_https: int = Field(default=1101, ge=1, le=65535)
    pgadmin: int = Field(default=4011, ge=1, le=65535)
    mongo_express: int = Field(default=4021, ge=1, le=65535)

    def as_dict(self) -> dict[str, int]:
        """Return a plain ``{service: port}`` mapping."""
        return self.model_dump()


class Config(BaseModel):
    """Global infrakit configuration.

    Holds the run options and the derived paths of the generated tree.
    Instances are created once by the CLI entry point (usually via
    :meth:`from_env` plus command-line overrides) and handed to the rest of
    the system.
    """

    root: Path = Field(default=Path("."), description="Project root directory")
    generated_dir: str = Field(default="generated")
    env_template: str = Field(default=".env.example")
    env_file: str = Field(default=".env")
    manifest_name: str = Field(default="docker-compose.yml")
    clean: bool = Field(default=True, description="Reset the generated tree before a run")
    keep_backups: bool = Field(
        default=True, description="Back up an existing manifest before replacing it"
    )
    ports: PortConfig = Field(default_factory=PortConfig)

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def generated_path(self) -> Path:
        """Root of the generated tree."""
        return self.root / self.generated_dir

    @property
    def manifest_path(self) -> Path:
        """Path to the assembled ``docker-compose.yml``."""
        return self.generated_path / self.manifest_name

    @property
    def env_template_path(self) -> Path:
        """Path to the ``.env.example`` template plugins append to."""
        return self.root / self.env_template

    @property
    def env_file_path(self) -> Path:
        """Path to the user's ``.env`` file (seeded once, never overwritten)."""
        return self.root / self.env_file

    @property
    def state_path(self) -> Path:
        """Path to the persisted run state JSON file."""
        return self.generated_path / ".setup-state.json"

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            INFRAKIT_ROOT, INFRAKIT_GENERATED_DIR, INFRAKIT_CLEAN,
            INFRAKIT_KEEP_BACKUPS.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("INFRAKIT_ROOT"):
            kwargs["root"] = Path(os.environ["INFRAKIT_ROOT"])
        if os.environ.get("INFRAKIT_GENERATED_DIR"):
            kwargs["generated_dir"] = os.environ["INFRAKIT_GENERATED_DIR"]
        if os.environ.get("INFRAKIT_CLEAN"):
            kwargs["clean"] = _parse_bool(os.environ["INFRAKIT_CLEAN"])
        if os.environ.get("INFRAKIT_KEEP_BACKUPS"):
            kwargs["keep_backups"] = _parse_bool(os.environ["INFRAKIT_KEEP_BACKUPS"])
        return cls(**kwargs)


def _parse_bool(value: str) -> bool:
    """Interpret common truthy strings (``1``, ``true``, ``yes``, ``on``)."""
    return value.strip().lower() in ("1", "true", "yes", "on")

"""PostgreSQL plugin: database server plus pgAdmin behind the admin profile."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

from infrakit.utils import log_info, log_success

from .base import ComponentPlugin, EnvDefaults

if TYPE_CHECKING:
    from infrakit.workspace import WorkspaceHandle


class PostgresPlugin(ComponentPlugin):
    component_id = "postgresql"
    volumes = ("postgres_data", "pgadmin_data")

    # (template, service directory, output file)
    _CONFIG_FILES: tuple[tuple[str, str, str], ...] = (
        ("postgresql.conf.j2", "postgresql", "postgresql.conf"),
        ("pg_hba.conf.j2", "postgresql", "pg_hba.conf"),
        ("init.sql.j2", "postgresql", "init.sql"),
        ("servers.json.j2", "pgadmin", "servers.json"),
        ("passfile.template.j2", "pgadmin", "passfile.template"),
    )

    def emit_config(self, workspace: "WorkspaceHandle") -> list[Path]:
        log_info("Setting up PostgreSQL and pgAdmin configuration...")
        context = self.context()
        written = [
            self.renderer.render_to_file(
                self.template(template), workspace.config_dir(service) / filename, context
            )
            for template, service, filename in self._CONFIG_FILES
        ]
        log_success("PostgreSQL configuration created")
        return written

    def emit_env_defaults(self) -> Optional[EnvDefaults]:
        return EnvDefaults(sentinel="POSTGRES_", block=self.render("env.j2"))

    def emit_docs(self) -> Optional[str]:
        return self.render("docs.md.j2")

"""MongoDB plugin: database server plus Mongo Express behind the admin profile."""

from __future__ import annotations

import stat
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from infrakit.utils import log_info, log_success

from .base import ComponentPlugin, EnvDefaults

if TYPE_CHECKING:
    from infrakit.workspace import WorkspaceHandle


class MongoPlugin(ComponentPlugin):
    component_id = "mongodb"
    volumes = ("mongodb_data", "mongodb_logs")

    def emit_config(self, workspace: "WorkspaceHandle") -> list[Path]:
        log_info("Setting up MongoDB and Mongo Express configuration...")
        context = self.context()
        mongo_dir = workspace.config_dir("mongodb")
        express_dir = workspace.config_dir("mongo-express")

        written = [
            self.renderer.render_to_file(
                self.template("mongod.conf.j2"), mongo_dir / "mongod.conf", context
            ),
            self.renderer.render_to_file(
                self.template("init-mongo.js.j2"), mongo_dir / "init-mongo.js", context
            ),
            self.renderer.render_to_file(
                self.template("config.js.j2"), express_dir / "config.js", context
            ),
        ]

        # Mounted into docker-entrypoint-initdb.d, so it has to be executable.
        log_dir_script = self.renderer.render_to_file(
            self.template("create-log-dir.sh.j2"), mongo_dir / "create-log-dir.sh", context
        )
        mode = log_dir_script.stat().st_mode
        log_dir_script.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        written.append(log_dir_script)

        log_success("MongoDB configuration created")
        return written

    def emit_env_defaults(self) -> Optional[EnvDefaults]:
        return EnvDefaults(sentinel="MONGO_", block=self.render("env.j2"))

    def emit_docs(self) -> Optional[str]:
        return self.render("docs.md.j2")

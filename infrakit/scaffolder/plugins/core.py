"""Core infrastructure plugin: HAProxy in front of Nginx."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

from infrakit.utils import log_info, log_success

from .base import ComponentPlugin

if TYPE_CHECKING:
    from infrakit.workspace import WorkspaceHandle


class CorePlugin(ComponentPlugin):
    """HAProxy load balancer, Nginx web server and the static dashboard."""

    component_id = "core"
    volumes = ("nginx_logs",)

    def emit_config(self, workspace: "WorkspaceHandle") -> list[Path]:
        context = self.context()
        written: list[Path] = []

        log_info("Setting up HAProxy configuration...")
        haproxy_dir = workspace.config_dir("haproxy")
        written.append(
            self.renderer.render_to_file(
                self.template("haproxy.cfg.j2"), haproxy_dir / "haproxy.cfg", context
            )
        )

        log_info("Setting up Nginx configuration...")
        nginx_dir = workspace.config_dir("nginx")
        written.append(
            self.renderer.render_to_file(
                self.template("nginx.conf.j2"), nginx_dir / "nginx.conf", context
            )
        )
        written.append(
            self.renderer.render_to_file(
                self.template("default.conf.j2"),
                nginx_dir / "conf.d" / "default.conf",
                context,
            )
        )

        log_info("Creating static content...")
        written.append(
            self.renderer.render_to_file(
                self.template("index.html.j2"), workspace.static_dir / "index.html", context
            )
        )
        (workspace.logs_dir / "nginx").mkdir(parents=True, exist_ok=True)

        log_success(f"Core configuration created under {workspace.root / 'config'}")
        return written

    def emit_docs(self) -> Optional[str]:
        return self.render("docs.md.j2")

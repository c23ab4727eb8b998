"""Contract shared by every component plugin.

A plugin owns the opaque text of one component: its configuration files,
its compose service block, the named volumes it needs, the defaults it adds
to the environment template and its documentation page. The assembler
decides where and in which order those outputs end up.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, Field

from infrakit.config import Config

from ..templates import TemplateRenderer

if TYPE_CHECKING:
    from infrakit.workspace import WorkspaceHandle


class EnvDefaults(BaseModel):
    """A block of ``KEY=value`` lines for the environment template.

    ``sentinel`` is a substring unique to the component's variable
    namespace; the block is appended only while the sentinel is absent.
    """

    sentinel: str = Field(..., min_length=1)
    block: str


class ComponentPlugin(ABC):
    """Base class for component plugins.

    Subclasses set ``component_id`` and ``volumes`` and implement the
    emission methods; most of them delegate to templates under
    ``templates/<component_id>/``.
    """

    component_id: str = ""
    volumes: tuple[str, ...] = ()

    def __init__(self, renderer: TemplateRenderer, config: Config) -> None:
        self.renderer = renderer
        self.config = config

    def context(self) -> dict[str, Any]:
        """Template context shared by all of this plugin's templates."""
        return {
            "component": self.component_id,
            "ports": self.config.ports.as_dict(),
        }

    def template(self, name: str) -> str:
        return f"{self.component_id}/{name}"

    def render(self, name: str) -> str:
        return self.renderer.render(self.template(name), self.context())

    # -- Emission contract ---------------------------------------------------

    @abstractmethod
    def emit_config(self, workspace: "WorkspaceHandle") -> list[Path]:
        """Write service configuration files and return their paths."""

    def emit_compose_fragment(self) -> str:
        """Return the YAML service block(s), indented under ``services:``."""
        return self.render("compose.yml.j2")

    def emit_volumes(self) -> list[str]:
        """Return the named volumes this component declares."""
        return list(self.volumes)

    def emit_env_defaults(self) -> Optional[EnvDefaults]:
        return None

    def emit_docs(self) -> Optional[str]:
        return None

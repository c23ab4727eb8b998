"""Shared pytest fixtures for the infrakit test suite.

Provides reusable fixtures for:
- A temporary project root seeded with an environment template
- Run configuration and workspace handles
- Template renderer and plugin lookup
- Small hand-built registries (including a cyclic one)
"""

from __future__ import annotations

from pathlib import Path

import pytest

from infrakit.components import ComponentDescriptor, ComponentRegistry
from infrakit.config import Config
from infrakit.scaffolder import TemplateRenderer, plugin_lookup
from infrakit.workspace import WorkspaceHandle, WorkspaceManager, WorkspaceMode


ENV_TEMPLATE_TEXT = "# Infrastructure environment\nCOMPOSE_PROJECT_NAME=infra\n"


# ---------------------------------------------------------------------------
# Paths & configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Project root containing only a ``.env.example`` template."""
    root = tmp_path / "project"
    root.mkdir()
    (root / ".env.example").write_text(ENV_TEMPLATE_TEXT, encoding="utf-8")
    return root


@pytest.fixture
def bare_root(tmp_path: Path) -> Path:
    """Project root with no environment template at all."""
    root = tmp_path / "bare"
    root.mkdir()
    return root


@pytest.fixture
def config(project_root: Path) -> Config:
    return Config(root=project_root)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep INFRAKIT_* variables from the developer's shell out of the tests."""
    for name in (
        "INFRAKIT_ROOT",
        "INFRAKIT_GENERATED_DIR",
        "INFRAKIT_CLEAN",
        "INFRAKIT_KEEP_BACKUPS",
    ):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


@pytest.fixture
def workspace_manager(config: Config) -> WorkspaceManager:
    return WorkspaceManager(config)


@pytest.fixture
def workspace(workspace_manager: WorkspaceManager) -> WorkspaceHandle:
    """A freshly prepared (clean) generated tree."""
    return workspace_manager.prepare(WorkspaceMode.CLEAN)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


@pytest.fixture
def renderer() -> TemplateRenderer:
    """Renderer over the templates shipped with the package."""
    return TemplateRenderer()


@pytest.fixture
def lookup(renderer: TemplateRenderer, config: Config):
    return plugin_lookup(renderer, config)


# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------


@pytest.fixture
def chain_registry() -> ComponentRegistry:
    """``dashboards -> metrics -> storage`` plus an unrelated ``cache``."""
    return ComponentRegistry(
        [
            ComponentDescriptor(id="dashboards", description="Dashboards", dependency="metrics"),
            ComponentDescriptor(id="metrics", description="Metrics", dependency="storage"),
            ComponentDescriptor(id="storage", description="Storage"),
            ComponentDescriptor(id="cache", description="Cache"),
        ]
    )


@pytest.fixture
def cyclic_registry() -> ComponentRegistry:
    """``a -> b -> a`` and a self-referencing ``loop``."""
    return ComponentRegistry(
        [
            ComponentDescriptor(id="a", dependency="b"),
            ComponentDescriptor(id="b", dependency="a"),
            ComponentDescriptor(id="loop", dependency="loop"),
            ComponentDescriptor(id="plain"),
        ]
    )

"""Tests for manifest assembly (infrakit.scaffolder.assembler).

Covers:
- Section order and content of the assembled manifest
- Per-component fragments, volume files and docs
- Components without a plugin
- Environment template merging
- Manifest validation and I/O failures
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from infrakit.errors import ManifestValidationError, MissingPluginError, WorkspaceIOError
from infrakit.scaffolder import (
    NETWORK_SUBNETS,
    ComponentPlugin,
    EnvDefaults,
    ManifestAssembler,
    merge_env_defaults,
    validate_manifest,
)
from infrakit.workspace import WorkspaceMode


pytestmark = pytest.mark.unit


@pytest.fixture
def assembler(config, renderer, lookup) -> ManifestAssembler:
    return ManifestAssembler(config, renderer, lookup)


class _BrokenPlugin(ComponentPlugin):
    component_id = "broken"

    def emit_config(self, workspace):
        raise OSError("disk full")


# ---------------------------------------------------------------------------
# Manifest structure
# ---------------------------------------------------------------------------


class TestManifestStructure:
    def test_sections_in_order(self, assembler, workspace):
        assembler.assemble(["core"], workspace)
        text = workspace.manifest_path.read_text(encoding="utf-8")

        assert text.startswith("# Generated by infrakit")
        services_at = text.index("\nservices:\n")
        networks_at = text.index("\nnetworks:\n")
        volumes_at = text.index("\nvolumes:\n")
        assert services_at < networks_at < volumes_at

    def test_services_in_resolved_order(self, assembler, workspace):
        assembler.assemble(["mongodb", "core", "postgresql"], workspace)
        document = yaml.safe_load(workspace.manifest_path.read_text(encoding="utf-8"))

        assert list(document["services"]) == [
            "mongodb",
            "mongo-express",
            "haproxy",
            "nginx",
            "postgresql",
            "pgadmin",
        ]

    def test_component_comment_headers(self, assembler, workspace):
        assembler.assemble(["core", "postgresql"], workspace)
        text = workspace.manifest_path.read_text(encoding="utf-8")

        assert "  # core services\n" in text
        assert text.index("# core services") < text.index("# postgresql services")

    def test_exactly_four_networks(self, assembler, workspace):
        assembler.assemble(["core"], workspace)
        document = yaml.safe_load(workspace.manifest_path.read_text(encoding="utf-8"))

        networks = document["networks"]
        assert list(networks) == ["frontend", "backend", "database", "monitoring"]
        for name, subnet in NETWORK_SUBNETS:
            assert networks[name]["driver"] == "bridge"
            assert networks[name]["ipam"]["config"][0]["subnet"] == subnet

    def test_volumes_section(self, assembler, workspace):
        result = assembler.assemble(["core", "postgresql"], workspace)
        document = yaml.safe_load(workspace.manifest_path.read_text(encoding="utf-8"))

        assert result.volumes == ["nginx_logs", "postgres_data", "pgadmin_data"]
        assert list(document["volumes"]) == result.volumes
        assert document["volumes"]["postgres_data"] == {"driver": "local"}

    def test_deterministic_across_clean_runs(self, assembler, workspace_manager):
        components = ["core", "postgresql", "mongodb"]

        workspace = workspace_manager.prepare(WorkspaceMode.CLEAN)
        assembler.assemble(components, workspace)
        first = workspace.manifest_path.read_bytes()

        workspace = workspace_manager.prepare(WorkspaceMode.CLEAN)
        assembler.assemble(components, workspace)
        second = workspace.manifest_path.read_bytes()

        assert first == second


# ---------------------------------------------------------------------------
# Per-component output
# ---------------------------------------------------------------------------


class TestComponentOutput:
    def test_fragment_volume_and_docs_files(self, assembler, workspace):
        result = assembler.assemble(["postgresql"], workspace)

        output = result.included[0]
        assert output.component == "postgresql"
        assert output.compose_path == workspace.root / "compose" / "postgresql.yml"
        assert output.compose_path.is_file()
        assert (workspace.root / "volumes" / "postgres_data.yml").is_file()
        assert (workspace.root / "volumes" / "pgadmin_data.yml").is_file()
        assert output.docs_path == workspace.root / "docs" / "postgresql.md"
        assert len(output.config_files) == 5

    def test_fragment_file_matches_manifest_block(self, assembler, workspace):
        result = assembler.assemble(["core"], workspace)

        fragment = result.included[0].compose_path.read_text(encoding="utf-8")
        assert fragment.rstrip("\n") in workspace.manifest_path.read_text(encoding="utf-8")

    def test_progress_logged(self, assembler, workspace, capsys):
        assembler.assemble(["core"], workspace)
        out = capsys.readouterr().out
        assert "Setting up core..." in out
        assert "Created volume: nginx_logs" in out


# ---------------------------------------------------------------------------
# Missing plugins
# ---------------------------------------------------------------------------


class TestMissingPlugin:
    def test_component_is_skipped(self, assembler, workspace, capsys):
        result = assembler.assemble(["core", "redis", "postgresql"], workspace)

        assert result.skipped == ["redis"]
        assert result.included_ids == ["core", "postgresql"]
        assert "Setup plugin not found for redis" in capsys.readouterr().out
        assert not (workspace.root / "compose" / "redis.yml").exists()

    def test_manifest_still_written(self, assembler, workspace):
        assembler.assemble(["core", "jaeger"], workspace)
        document = validate_manifest(workspace.manifest_path.read_text(encoding="utf-8"))
        assert "jaeger" not in document["services"]

    def test_only_missing_plugins(self, assembler, workspace):
        result = assembler.assemble(["redis", "rabbitmq"], workspace)

        assert result.included == []
        assert result.skipped == ["redis", "rabbitmq"]
        document = validate_manifest(workspace.manifest_path.read_text(encoding="utf-8"))
        assert len(document["networks"]) == 4

    def test_custom_lookup(self, config, renderer, workspace):
        def lookup(component_id):
            raise MissingPluginError(component_id)

        result = ManifestAssembler(config, renderer, lookup).assemble(["core"], workspace)
        assert result.skipped == ["core"]


# ---------------------------------------------------------------------------
# Environment defaults
# ---------------------------------------------------------------------------


class TestEnvMerge:
    def test_assemble_merges_defaults(self, assembler, workspace, config):
        result = assembler.assemble(["core", "postgresql", "mongodb"], workspace)

        text = config.env_template_path.read_text(encoding="utf-8")
        assert text.startswith("# Infrastructure environment\n")
        assert "POSTGRES_DB=appdb" in text
        assert "MONGO_INITDB_ROOT_USERNAME=admin" in text
        merged = {output.component: output.env_merged for output in result.included}
        assert merged == {"core": False, "postgresql": True, "mongodb": True}

    def test_second_run_does_not_duplicate(self, assembler, workspace_manager, config):
        for _ in range(2):
            workspace = workspace_manager.prepare(WorkspaceMode.CLEAN)
            assembler.assemble(["postgresql"], workspace)

        text = config.env_template_path.read_text(encoding="utf-8")
        assert text.count("POSTGRES_PASSWORD=") == 1

    def test_merge_appends_once(self, tmp_path):
        template = tmp_path / ".env.example"
        template.write_text("A=1\n", encoding="utf-8")
        defaults = EnvDefaults(sentinel="REDIS_", block="REDIS_PASSWORD=x\n")

        assert merge_env_defaults(template, defaults) is True
        assert merge_env_defaults(template, defaults) is False
        assert template.read_text(encoding="utf-8") == "A=1\n\nREDIS_PASSWORD=x\n"

    def test_merge_without_trailing_newline(self, tmp_path):
        template = tmp_path / ".env.example"
        template.write_text("A=1", encoding="utf-8")

        merge_env_defaults(template, EnvDefaults(sentinel="B_", block="B_X=2"))

        assert template.read_text(encoding="utf-8") == "A=1\n\nB_X=2\n"

    def test_merge_into_missing_template(self, tmp_path):
        template = tmp_path / ".env.example"

        merge_env_defaults(template, EnvDefaults(sentinel="B_", block="\nB_X=2\n\n"))

        assert template.read_text(encoding="utf-8") == "B_X=2\n"

    def test_sentinel_anywhere_blocks_merge(self, tmp_path):
        template = tmp_path / ".env.example"
        template.write_text("# POSTGRES_ managed by hand\n", encoding="utf-8")

        assert merge_env_defaults(template, EnvDefaults(sentinel="POSTGRES_", block="X=1")) is False

    def test_non_utf8_template_raises(self, tmp_path):
        template = tmp_path / ".env.example"
        template.write_bytes(b"# caf\xe9\n")

        with pytest.raises(WorkspaceIOError, match="UTF-8"):
            merge_env_defaults(template, EnvDefaults(sentinel="B_", block="B_X=2"))
        assert template.read_bytes() == b"# caf\xe9\n"


# ---------------------------------------------------------------------------
# Validation & failures
# ---------------------------------------------------------------------------


class TestValidation:
    def test_valid_manifest(self):
        document = validate_manifest("services: {}\nnetworks: {}\nvolumes: {}\n")
        assert set(document) == {"services", "networks", "volumes"}

    def test_invalid_yaml(self):
        with pytest.raises(ManifestValidationError, match="not valid YAML"):
            validate_manifest("services: [unclosed\n")

    def test_not_a_mapping(self):
        with pytest.raises(ManifestValidationError, match="mapping"):
            validate_manifest("- a\n- b\n")

    def test_missing_section(self):
        with pytest.raises(ManifestValidationError, match="volumes"):
            validate_manifest("services: {}\nnetworks: {}\n")

    def test_invalid_manifest_is_not_written(self, assembler, workspace):
        with patch.object(ManifestAssembler, "render_manifest", return_value="services: [\n"):
            with pytest.raises(ManifestValidationError):
                assembler.assemble(["core"], workspace)
        assert not workspace.manifest_path.exists()


class TestFailures:
    def test_plugin_os_error(self, config, renderer, workspace):
        assembler = ManifestAssembler(config, renderer, lambda cid: _BrokenPlugin(renderer, config))

        with pytest.raises(WorkspaceIOError, match="disk full"):
            assembler.assemble(["broken"], workspace)

    def test_manifest_write_error(self, assembler, workspace):
        real_write = Path.write_text

        def failing_write(self, *args, **kwargs):
            if self.name == "docker-compose.yml":
                raise OSError("read-only")
            return real_write(self, *args, **kwargs)

        with patch.object(Path, "write_text", failing_write):
            with pytest.raises(WorkspaceIOError, match="read-only"):
                assembler.assemble(["core"], workspace)

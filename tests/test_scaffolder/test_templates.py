"""Tests for the Jinja2 template renderer (infrakit.scaffolder.templates)."""

from __future__ import annotations

import pytest
from jinja2 import TemplateNotFound, UndefinedError

from infrakit.scaffolder import TemplateRenderer


pytestmark = pytest.mark.unit


class TestTemplateRenderer:
    def test_default_template_dir_exists(self, renderer):
        assert renderer.template_dir.is_dir()
        assert (renderer.template_dir / "docker-compose.yml.j2").is_file()

    @pytest.mark.parametrize("component", ["core", "postgresql", "mongodb"])
    def test_component_templates_shipped(self, renderer, component):
        assert (renderer.template_dir / component / "compose.yml.j2").is_file()

    def test_render_volume_template(self, renderer):
        rendered = renderer.render("volume.yml.j2", {"volume": "postgres_data"})
        assert rendered == "  postgres_data:\n    driver: local\n"

    def test_undefined_variable_raises(self, renderer):
        with pytest.raises(UndefinedError):
            renderer.render("volume.yml.j2", {})

    def test_missing_template_raises(self, renderer):
        with pytest.raises(TemplateNotFound):
            renderer.render("nope.j2", {})

    def test_render_to_file_creates_parents(self, renderer, tmp_path):
        target = tmp_path / "a" / "b" / "volume.yml"
        result = renderer.render_to_file("volume.yml.j2", target, {"volume": "v"})

        assert result == target
        assert target.read_text(encoding="utf-8").startswith("  v:")


class TestCustomTemplateDir:
    def test_loads_from_given_dir(self, tmp_path):
        (tmp_path / "greet.txt.j2").write_text("hello {{ name }}\n", encoding="utf-8")
        renderer = TemplateRenderer(tmp_path)

        assert renderer.template_dir == tmp_path
        assert renderer.render("greet.txt.j2", {"name": "infra"}) == "hello infra\n"

    def test_blocks_are_trimmed(self, tmp_path):
        (tmp_path / "list.j2").write_text(
            "items:\n{% for i in items %}\n  - {{ i }}\n{% endfor %}\n", encoding="utf-8"
        )
        rendered = TemplateRenderer(tmp_path).render("list.j2", {"items": ["a", "b"]})
        assert rendered == "items:\n  - a\n  - b\n"

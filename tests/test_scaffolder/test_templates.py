"""Tests for Jinja2 template rendering (modsync.scaffolder.templates)."""

from __future__ import annotations

import json

import pytest

from modsync.scaffolder.paths import ModulePath
from modsync.scaffolder.routing import PLACEHOLDER_COMMENT
from modsync.scaffolder.templates import SKIP, TemplateRenderer, module_context

pytestmark = pytest.mark.unit


def _context(segments: tuple[str, ...], is_child: bool, **extra):
    extra.setdefault("exists", False)
    extra.setdefault("overwrite", False)
    extra.setdefault("with_index", True)
    extra.setdefault("placeholder_comment", PLACEHOLDER_COMMENT)
    return module_context(ModulePath(segments=segments), is_child, **extra)


class TestModuleContext:
    def test_child_route_path_is_the_segment(self) -> None:
        context = module_context(ModulePath(segments=("reports", "monthly-report")), True)
        assert context["route_path"] == "monthly-report"
        assert context["parent_route_file"] == "../../../routes/reports.routes.tsx"

    def test_standalone_route_path_is_the_full_path(self) -> None:
        context = module_context(ModulePath(segments=("reports", "monthly")), False)
        assert context["route_path"] == "reports/monthly"
        assert '"reports/monthly"' in context["path_comment"]

    def test_identifiers(self) -> None:
        context = module_context(ModulePath(segments=("master-data", "client")), True, extra=1)
        assert context["module_id"] == "master-data-client"
        assert context["feature_flag_key"] == "MASTER_DATA_CLIENT"
        assert context["module_parts"] == ["master-data", "client"]
        assert context["extra"] == 1


class TestTemplateRenderer:
    def test_lists_bundled_templates(self, renderer: TemplateRenderer) -> None:
        names = renderer.list_templates()
        assert "route.tsx.j2" in names
        assert "route_scaffold.tsx.j2" in names
        assert "config.ts.j2" in names

    def test_file_name_pattern(self, renderer: TemplateRenderer) -> None:
        pattern = "{{ module_name | kebab_case }}.routes{{ '.child' if is_child }}.tsx"
        assert renderer.render_file_name(pattern, _context(("a", "b"), True)) == "b.routes.child.tsx"
        assert renderer.render_file_name(pattern, _context(("a",), False)) == "a.routes.tsx"

    def test_filters(self, renderer: TemplateRenderer) -> None:
        rendered = renderer.render_string(
            "{{ 'role-add' | capitalize_words }} {{ 'role-add' | camel_case }} "
            "{{ 'role-add' | title_words }}",
            {},
        )
        assert rendered == "RoleAdd roleAdd Role Add"

    def test_child_route_exports_child_binding(self, renderer: TemplateRenderer) -> None:
        content = renderer.render("route.tsx.j2", _context(("reports", "monthly"), True))
        assert "export const monthlyRoutes = createAppRoutes([" in content
        assert "export const monthlyChildRoutes = monthlyRoutes;" in content
        assert "// This is a CHILD ROUTE (nested module)." in content
        assert 'path: "monthly",' in content
        assert PLACEHOLDER_COMMENT in content
        assert "index: true," in content

    def test_standalone_route_has_no_child_marker(self, renderer: TemplateRenderer) -> None:
        content = renderer.render("route.tsx.j2", _context(("reports",), False))
        assert "CHILD ROUTE" not in content
        assert "ChildRoutes" not in content
        assert 'path: "reports",' in content

    def test_existing_standalone_route_is_skipped(self, renderer: TemplateRenderer) -> None:
        result = renderer.render("route.tsx.j2", _context(("reports",), False, exists=True))
        assert result is SKIP
        assert not result

    def test_existing_route_renders_when_overwriting(self, renderer: TemplateRenderer) -> None:
        result = renderer.render(
            "route.tsx.j2", _context(("reports",), False, exists=True, overwrite=True)
        )
        assert isinstance(result, str)

    def test_scaffold_has_empty_children(self, renderer: TemplateRenderer) -> None:
        content = renderer.render(
            "route_scaffold.tsx.j2", _context(("reports",), False, with_index=False)
        )
        assert "index: true" not in content
        assert f"children: [\n      {PLACEHOLDER_COMMENT}\n    ]," in content

    def test_child_config_names_parent(self, renderer: TemplateRenderer) -> None:
        content = renderer.render("config.ts.j2", _context(("master-data", "client"), True))
        assert 'moduleId: "master-data-client"' in content
        assert 'parentModuleId: "master-data"' in content
        assert 'featureFlag: "MASTER_DATA_CLIENT"' in content

    def test_locale_is_valid_json(self, renderer: TemplateRenderer) -> None:
        content = renderer.render("locale.json.j2", _context(("sample-form",), False))
        assert json.loads(content) == {"title": "Sample Form"}

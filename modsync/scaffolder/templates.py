"""Jinja2 template rendering for module scaffolding.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``modsync/scaffolder/templates/`` directory and renders them with the module
context.  A template can opt out of producing a file by calling
``skip_artifact()``; the renderer then returns the ``SKIP`` sentinel instead
of text.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from modsync.utils import camel_case, capitalize, kebab_case, pascal_case, title_words

from .paths import ModulePath


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


class _SkipSentinel:
    """Marker returned in place of content when a template skips itself."""

    _instance: _SkipSentinel | None = None

    def __new__(cls) -> _SkipSentinel:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SKIP"

    def __bool__(self) -> bool:
        return False


SKIP = _SkipSentinel()


class _SkipRender(Exception):
    """Raised from inside a template to abort rendering with ``SKIP``."""


def _skip_artifact() -> str:
    raise _SkipRender()


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for module scaffolding.

    Templates are rendered with a context dictionary describing one module
    (``module_name``, ``module_parts``, ``module_id``, ``is_child``...).
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([], default_for_string=False),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["kebab_case"] = kebab_case
        self.env.filters["camel_case"] = camel_case
        self.env.filters["pascal_case"] = pascal_case
        self.env.filters["capitalize_words"] = capitalize
        self.env.filters["title_words"] = title_words
        self.env.globals["skip_artifact"] = _skip_artifact

    def render(self, template_path: str, context: dict[str, Any]) -> str | _SkipSentinel:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"route.tsx.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered content, or ``SKIP`` when the template called
            ``skip_artifact()``.
        """
        template = self.env.get_template(template_path)
        try:
            return template.render(**context)
        except _SkipRender:
            return SKIP

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string (used for file name patterns)."""
        template = self.env.from_string(template_string)
        return template.render(**context)

    def render_file_name(self, pattern: str, context: dict[str, Any]) -> str:
        return self.render_string(pattern, context).strip()

    def list_templates(self) -> list[str]:
        """Return a sorted list of all ``.j2`` template names."""
        if not self.template_dir.is_dir():
            return []
        return sorted(
            str(p.relative_to(self.template_dir)) for p in self.template_dir.rglob("*.j2")
        )


# ---------------------------------------------------------------------------
# Context building
# ---------------------------------------------------------------------------


def module_context(path: ModulePath, is_child: bool, **extra: Any) -> dict[str, Any]:
    """Build the template context describing one module.

    Child routes declare only their own segment because they are mounted
    inside the parent's ``children``; standalone routes declare the whole
    path for flat registration.
    """
    parts = list(path.segments)
    if is_child:
        route_path = kebab_case(path.name)
        path_comment = (
            "// Child route path uses only the segment name, "
            "as it is nested within a parent route."
        )
    else:
        route_path = "/".join(kebab_case(part) for part in parts)
        path_comment = (
            "// Standalone route path uses the full segment path "
            f'for flat registration: "{route_path}".'
        )

    parent_route_file = ""
    if path.parent is not None:
        parent_route_file = f"../../../routes/{kebab_case(path.parent.name)}.routes.tsx"

    return {
        "module_name": path.name,
        "module_parts": parts,
        "module_id": path.module_id,
        "feature_flag_key": path.feature_flag_key,
        "is_child": is_child,
        "route_path": route_path,
        "path_comment": path_comment,
        "parent_route_file": parent_route_file,
        **extra,
    }

"""Rich rendering of reconstructed route maps and generator settings."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from modsync.config import GeneratorSettings
from modsync.parser.models import RouteMap, RouteTreeNode
from modsync.utils import console as default_console
from modsync.utils import print_summary_table


# ---------------------------------------------------------------------------
# Route map
# ---------------------------------------------------------------------------


def node_label(node: RouteTreeNode) -> Text:
    """Segment on the first line, one bullet per info part below it."""
    label = Text(node.segment, style="magenta")
    for part in node.info_parts():
        label.append("\n• ", style="bright_black")
        if part.startswith("src="):
            label.append("src=", style="bright_black")
            label.append(part[len("src="):], style="bold")
        else:
            label.append(part, style="bright_black")
    return label


def _add_children(branch: Tree, node: RouteTreeNode) -> None:
    for child in node.children:
        _add_children(branch.add(node_label(child)), child)


def build_tree(route_map: RouteMap) -> Tree:
    """Convert *route_map* into a ``rich.tree.Tree``."""
    tree = Tree(Text("Application Route Map", style="bold cyan"), guide_style="bright_black")
    for root in route_map.roots:
        _add_children(tree.add(node_label(root)), root)
    return tree


def print_route_map(
    route_map: RouteMap,
    project_root: Path,
    console: Console | None = None,
) -> None:
    """Print the tree, the totals line and every collected parse issue."""
    out = console or default_console

    for issue in route_map.issues:
        out.print(Text(f"⚠  {issue.format(project_root)}", style="yellow"))

    if not route_map.files:
        out.print(Text("No feature route files found.", style="bold yellow"))
        return

    out.print(build_tree(route_map))
    out.print()
    out.print(
        f"Total feature routes: {route_map.total_routes} "
        f"(absolute: {route_map.absolute_routes}, nested: {route_map.nested_routes})"
    )
    if route_map.issues:
        out.print(Text(f"{len(route_map.issues)} issue(s) reported.", style="yellow"))


# ---------------------------------------------------------------------------
# Generator settings
# ---------------------------------------------------------------------------


def print_generator_info(settings: GeneratorSettings) -> None:
    """Summarise restricted names, presets, prompt choices and kinds."""
    print_summary_table(
        {
            "Restricted modules": ", ".join(settings.restricted_modules) or "(none)",
            "Presets": "; ".join(
                f"{name}: {', '.join(kinds)}" for name, kinds in settings.presets.items()
            )
            or "(none)",
            "Prompt choices": ", ".join(
                f"{choice.name} ({choice.value})" for choice in settings.prompt_choices
            ),
        },
        title="Generator Configuration",
    )
    print_summary_table(
        {
            name: f"{kind.folder or '.'}/{kind.file_name}"
            for name, kind in settings.kinds.items()
        },
        title="Generator Kinds",
    )

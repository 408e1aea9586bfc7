"""Route artifact scaffolding and child-route linking.

Two collaborators live here:

``RouteScaffoldBuilder``
    Guarantees that every ancestor of a module owns a route file before a
    child is linked into it (ancestor materialisation).

``RouteLinkInjector``
    Wires a child module's ``<name>ChildRoutes`` export into its parent's
    route file: one import declaration plus one ``...<name>ChildRoutes`` merge
    entry inside the parent's ``children`` array.  Both edits are idempotent
    and are computed before the single write.

Insertion points are located on the tree-sitter syntax tree of the parent
file.  Files the parser cannot read cleanly fall back to a balanced-bracket
character scan, which only works reliably on the route files this package
generates itself: brackets inside string or comment literals within the
scanned span can mislead it.
"""

from __future__ import annotations

import os
import re
from enum import Enum
from pathlib import Path

from pydantic import BaseModel

from modsync.config import Config
from modsync.parser.syntax import (
    ROUTES_CONSTRUCTOR,
    SourceTree,
    array_elements,
    call_arguments,
    find_calls,
    has_trailing_comma,
    node_text,
    object_properties,
    spread_argument,
    string_value,
    walk,
)
from modsync.utils import (
    camel_case,
    ensure_dir,
    kebab_case,
    print_info,
    print_success,
    print_warning,
    relative_to_root,
)

from .paths import ModulePath, base_path
from .templates import SKIP, TemplateRenderer, module_context

PLACEHOLDER_COMMENT = "// Add other child routes here if needed"


class LinkResult(str, Enum):
    """Outcome of a link attempt."""

    LINKED = "linked"
    ALREADY_LINKED = "already_linked"
    NO_PARENT = "no_parent"
    PARENT_MISSING = "parent_missing"
    INSERTION_POINT_MISSING = "insertion_point_missing"


class RouteScaffold(BaseModel):
    """Route file of one ancestor after materialisation."""

    path: ModulePath
    is_child: bool
    route_file: Path
    created: bool


# ---------------------------------------------------------------------------
# Route file naming
# ---------------------------------------------------------------------------


def route_file_name(path: ModulePath, is_child: bool) -> str:
    suffix = ".routes.child.tsx" if is_child else ".routes.tsx"
    return f"{kebab_case(path.name)}{suffix}"


def route_file_candidates(path: ModulePath, config: Config) -> list[Path]:
    """Both naming conventions, standalone first."""
    routes_dir = base_path(path, config) / "routes"
    return [routes_dir / route_file_name(path, False), routes_dir / route_file_name(path, True)]


def find_route_file(path: ModulePath, config: Config) -> Path | None:
    return next((c for c in route_file_candidates(path, config) if c.exists()), None)


def child_routes_identifier(path: ModulePath) -> str:
    return f"{camel_case(path.name)}ChildRoutes"


def normalize_import_path(relative_path: str) -> str:
    """Strip the extension, force ``/`` separators and a relative prefix."""
    formatted = re.sub(r"\.[tj]sx?$", "", relative_path)
    formatted = "/".join(formatted.split(os.sep))
    if not formatted.startswith("."):
        formatted = f"./{formatted}"
    return formatted


# ---------------------------------------------------------------------------
# Scaffold builder
# ---------------------------------------------------------------------------


class RouteScaffoldBuilder:
    """Creates minimal route files for module ancestors."""

    def __init__(self, config: Config, renderer: TemplateRenderer) -> None:
        self.config = config
        self.renderer = renderer

    def ensure_ancestors(self, path: ModulePath) -> list[RouteScaffold]:
        """Materialise a route file for every proper prefix, shallow first."""
        return [self.ensure(ancestor) for ancestor in path.ancestors()]

    def ensure(self, path: ModulePath) -> RouteScaffold:
        is_child = path.is_nested
        existing = find_route_file(path, self.config)
        if existing is not None:
            return RouteScaffold(path=path, is_child=is_child, route_file=existing, created=False)

        routes_dir = ensure_dir(base_path(path, self.config) / "routes")
        route_file = routes_dir / route_file_name(path, is_child)
        context = module_context(
            path,
            is_child,
            exists=False,
            overwrite=False,
            with_index=False,
            placeholder_comment=PLACEHOLDER_COMMENT,
        )
        content = self.renderer.render("route_scaffold.tsx.j2", context)
        if content is SKIP:
            return RouteScaffold(path=path, is_child=is_child, route_file=route_file, created=False)

        route_file.write_text(content, encoding="utf-8")
        print_success(
            f"Created parent route scaffold: {relative_to_root(route_file, self.config.root)}"
        )
        return RouteScaffold(path=path, is_child=is_child, route_file=route_file, created=True)


# ---------------------------------------------------------------------------
# Link injector
# ---------------------------------------------------------------------------


class RouteLinkInjector:
    """Links a child module's route export into its parent route file."""

    def __init__(self, config: Config) -> None:
        self.config = config

    def inject(self, child: ModulePath, child_route_file: Path) -> LinkResult:
        """Add the import and merge entry for *child* to its parent route file.

        Returns:
            The ``LinkResult`` describing what happened. Only ``LINKED``
            writes to disk; every failure is reported as a warning.
        """
        parent = child.parent
        if parent is None:
            print_info("Skipped auto-link: no parent module detected for child route.")
            return LinkResult.NO_PARENT

        candidates = route_file_candidates(parent, self.config)
        parent_file = next((c for c in candidates if c.exists()), None)
        if parent_file is None:
            looked_in = ", ".join(relative_to_root(c, self.config.root) for c in candidates)
            print_warning(f"Skipped auto-link: parent route file not found. Looked in {looked_in}")
            return LinkResult.PARENT_MISSING

        identifier = child_routes_identifier(child)
        import_path = normalize_import_path(
            os.path.relpath(child_route_file, parent_file.parent)
        )
        shown = relative_to_root(parent_file, self.config.root)

        source = parent_file.read_text(encoding="utf-8")
        updated = source

        if not has_import(updated, identifier, import_path):
            updated = insert_import(updated, f'import {{ {identifier} }} from "{import_path}";')

        if not has_merge_entry(updated, identifier):
            injected = insert_merge_entry(updated, identifier, parent)
            if injected is None:
                print_warning(
                    f"Skipped auto-link: unable to locate a children array in {shown}."
                )
                return LinkResult.INSERTION_POINT_MISSING
            updated = injected

        if updated == source:
            print_info(f"Skipped auto-link: {identifier} already registered in {shown}")
            return LinkResult.ALREADY_LINKED

        parent_file.write_text(updated, encoding="utf-8")
        print_success(f"Linked child routes in {shown}")
        return LinkResult.LINKED


# ---------------------------------------------------------------------------
# Import declarations
# ---------------------------------------------------------------------------

_IMPORT_LINE = re.compile(r"^\s*import\b")


def has_import(source: str, identifier: str, import_path: str) -> bool:
    """``True`` when an import already binds *identifier* from *import_path*."""
    pattern = re.compile(
        r"import\s*(?:type\s+)?\{[^}]*\b"
        + re.escape(identifier)
        + r"\b[^}]*\}\s*from\s*[\"']"
        + re.escape(import_path)
        + r"[\"'];?"
    )
    return bool(pattern.search(source))


def insert_import(source: str, statement: str) -> str:
    """Insert *statement* on the line after the last import (or prepend)."""
    last_line = _last_import_line(source)
    if last_line is None:
        return f"{statement}\n{source}"
    lines = source.split("\n")
    lines.insert(last_line + 1, statement)
    return "\n".join(lines)


def _last_import_line(source: str) -> int | None:
    tree = SourceTree(source)
    if tree.is_clean:
        imports = [n for n in tree.root.named_children if n.type == "import_statement"]
        return imports[-1].end_point[0] if imports else None
    last = None
    for index, line in enumerate(source.split("\n")):
        if _IMPORT_LINE.match(line):
            last = index
    return last


# ---------------------------------------------------------------------------
# Merge entries
# ---------------------------------------------------------------------------


def has_merge_entry(source: str, identifier: str) -> bool:
    """``True`` when ``...identifier`` already sits inside an array literal."""
    tree = SourceTree(source)
    if tree.is_clean:
        return any(
            node.type == "spread_element"
            and node.parent is not None
            and node.parent.type == "array"
            and spread_argument(node) == identifier
            for node in walk(tree.root)
        )
    return re.search(r"\.\.\.\s*" + re.escape(identifier) + r"\b", source) is not None


def insert_merge_entry(source: str, identifier: str, parent: ModulePath) -> str | None:
    """Insert ``...identifier,`` into the parent's children array.

    Returns ``None`` when no insertion point can be found.
    """
    tree = SourceTree(source)
    if tree.is_clean:
        result = _insert_structural(tree, identifier, _anchor_paths(parent))
        if result is not None:
            return result
    return _insert_scanned(source, identifier, _anchor_paths(parent))


def _anchor_paths(parent: ModulePath) -> list[str]:
    anchors = ["/".join(kebab_case(segment) for segment in parent.segments)]
    last = kebab_case(parent.name)
    if last not in anchors:
        anchors.append(last)
    return anchors


def _insert_structural(tree: SourceTree, identifier: str, anchors: list[str]) -> str | None:
    calls = find_calls(tree.root, ROUTES_CONSTRUCTOR)
    if not calls:
        return None
    arguments = call_arguments(calls[0])
    if not arguments or arguments[0].type != "array":
        return None
    routes_array = arguments[0]

    for comment in (n for n in walk(routes_array) if n.type == "comment"):
        if node_text(comment).strip() == PLACEHOLDER_COMMENT:
            return _insert_before_placeholder(tree, comment, identifier)

    children = _target_children_array(routes_array, anchors)
    if children is None:
        return None
    return _insert_before_closing(tree, children, identifier)


def _target_children_array(routes_array, anchors: list[str]):
    route_objects = [n for n in walk(routes_array) if n.type == "object"]

    def children_of(obj):
        value = object_properties(obj).get("children")
        return value if value is not None and value.type == "array" else None

    for anchor in anchors:
        for obj in route_objects:
            path_node = object_properties(obj).get("path")
            if path_node is not None and string_value(path_node) == anchor:
                children = children_of(obj)
                if children is not None:
                    return children
    for obj in route_objects:
        children = children_of(obj)
        if children is not None:
            return children
    return None


def _insert_before_placeholder(tree: SourceTree, comment, identifier: str) -> str:
    edits: list[tuple[int, str]] = []
    container = comment.parent
    if container is not None and container.type == "array":
        preceding = [
            n for n in array_elements(container) if n.end_byte <= comment.start_byte
        ]
        if preceding and not has_trailing_comma(preceding[-1]):
            edits.append((preceding[-1].end_byte, ","))
    indent = tree.line_indent(comment)
    if tree.starts_line(comment):
        edits.append((comment.start_byte, f"...{identifier},\n{indent}"))
    else:
        edits.append((comment.start_byte, f"\n{indent}  ...{identifier},\n{indent}  "))
    return tree.splice(edits)


def _insert_before_closing(tree: SourceTree, children, identifier: str) -> str:
    closing = children.children[-1]
    elements = array_elements(children)
    base_indent = tree.line_indent(children)
    edits: list[tuple[int, str]] = []

    if elements and not has_trailing_comma(elements[-1]):
        edits.append((elements[-1].end_byte, ","))

    first = elements[0] if elements else None
    if first is not None and first.start_point[0] != children.start_point[0]:
        item_indent = tree.line_indent(first)
    else:
        item_indent = base_indent + "  "

    if tree.starts_line(closing):
        line_start = tree.data.rfind(b"\n", 0, closing.start_byte) + 1
        edits.append((line_start, f"{item_indent}...{identifier},\n"))
    else:
        edits.append(
            (closing.start_byte, f"\n{item_indent}...{identifier},\n{base_indent}")
        )
    return tree.splice(edits)


def _insert_scanned(source: str, identifier: str, anchors: list[str]) -> str | None:
    """Character-scan fallback for sources the parser cannot read cleanly."""
    comment_index = source.find(PLACEHOLDER_COMMENT)
    if comment_index != -1:
        line_start = source.rfind("\n", 0, comment_index) + 1
        indentation = re.match(r"\s*", source[line_start:comment_index]).group(0)
        insertion = f"...{identifier},\n{indentation}"
        return source[:comment_index] + insertion + source[comment_index:]

    search_index = -1
    for anchor in anchors:
        candidate = source.find(f'path: "{anchor}"')
        if candidate == -1:
            candidate = source.find(f"path: '{anchor}'")
        if candidate != -1:
            search_index = candidate
            break
    if search_index == -1:
        search_index = source.find("children")
        if search_index == -1:
            return None

    children_index = source.find("children", search_index)
    if children_index == -1:
        return None
    bracket_start = source.find("[", children_index)
    if bracket_start == -1:
        return None

    depth = 1
    cursor = bracket_start + 1
    while cursor < len(source) and depth > 0:
        char = source[cursor]
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        cursor += 1
    if depth != 0:
        return None
    insertion_index = cursor - 1

    children_line_start = source.rfind("\n", 0, children_index) + 1
    base_indent = re.match(r"[ \t]*", source[children_line_start:]).group(0)

    array_body = source[bracket_start + 1 : insertion_index]
    item_match = re.search(r"\n([ \t]*)\S", array_body)
    item_indent = item_match.group(1) if item_match else f"{base_indent}  "

    closing_line_start = source.rfind("\n", 0, insertion_index) + 1
    closing_indent = re.match(r"[ \t]*", source[closing_line_start:insertion_index]).group(0)

    head = source[: bracket_start + 1] + array_body.rstrip()
    last_line = head.rsplit("\n", 1)[-1]
    if array_body.strip() and not head.endswith(",") and "//" not in last_line:
        head += ","
    return f"{head}\n{item_indent}...{identifier},\n{closing_indent}{source[insertion_index:]}"


# ---------------------------------------------------------------------------
# Unlinking
# ---------------------------------------------------------------------------


def remove_import(source: str, identifier: str) -> str:
    """Drop ``import { identifier } from "..."`` declarations."""
    pattern = re.compile(
        r"import\s*\{\s*" + re.escape(identifier) + r"\s*\}\s*from\s*[\"'][^\"']+[\"'];?\n?"
    )
    return pattern.sub("", source)


def remove_merge_entry(source: str, identifier: str) -> str:
    """Drop every ``...identifier`` element from array literals.

    The element's line is removed when it sits on a line of its own.
    """
    tree = SourceTree(source)
    if not tree.is_clean:
        return _remove_scanned(source, identifier)

    spans: list[tuple[int, int]] = []
    for node in walk(tree.root):
        if node.type != "spread_element" or spread_argument(node) != identifier:
            continue
        if node.parent is None or node.parent.type != "array":
            continue
        start, end = node.start_byte, node.end_byte
        sibling = node.next_sibling
        if sibling is not None and sibling.type == ",":
            end = sibling.end_byte
        if tree.starts_line(node):
            newline = tree.data.find(b"\n", end)
            if newline != -1 and not tree.data[end:newline].strip():
                start = tree.data.rfind(b"\n", 0, start) + 1
                end = newline + 1
        spans.append((start, end))
    return tree.cut(spans) if spans else source


def _remove_scanned(source: str, identifier: str) -> str:
    spread = r"\.\.\.\s*" + re.escape(identifier) + r"\b,?[ \t]*"
    updated = re.sub(r"(?m)^[ \t]*" + spread + r"\n", "", source)
    updated = re.sub(spread, "", updated)
    if updated == source:
        return source
    return re.sub(r",(\s*)\]", r"\1]", updated)


# ---------------------------------------------------------------------------
# Full child linking
# ---------------------------------------------------------------------------


def link_child(
    path: ModulePath,
    route_file: Path,
    builder: RouteScaffoldBuilder,
    injector: RouteLinkInjector,
) -> LinkResult:
    """Materialise the ancestors of *path* and link the whole chain.

    Every child ancestor is linked into its own parent (shallow first) before
    *path* itself is linked into its direct parent.
    """
    for scaffold in builder.ensure_ancestors(path):
        if scaffold.is_child:
            injector.inject(scaffold.path, scaffold.route_file)
    return injector.inject(path, route_file)

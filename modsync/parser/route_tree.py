"""Route tree reconstruction.

Reads every feature route file below ``src/modules``, interprets the array
passed to ``createAppRoutes`` and rebuilds the tree the host application
mounts at runtime:

* ``/`` holds the entry point, every absolute route and the ``*`` fallback.
* Relative top-level routes are mounted under the admin base path declared
  in ``roketin.config.ts`` (``/admin`` when absent).

Nothing here writes to disk.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from tree_sitter import Node

from modsync.config import Config

from .models import (
    ParseIssue,
    ParsedRouteFile,
    RouteEntry,
    RouteHandle,
    RouteMap,
    RouteTreeNode,
    SourceLocation,
)
from .syntax import (
    ROUTES_CONSTRUCTOR,
    SourceTree,
    array_elements,
    boolean_value,
    call_arguments,
    find_calls,
    location,
    node_text,
    object_properties,
    spread_argument,
    string_list,
    string_value,
)

PROJECT_CONFIG_CONSTRUCTOR = "defineRoketinConfig"
ROUTE_FILE_PATTERNS = ("**/routes/*.routes.ts", "**/routes/*.routes.tsx")

UNSUPPORTED_ELEMENT = "Unsupported route element encountered."
NON_ARRAY_ARGUMENT = f"{ROUTES_CONSTRUCTOR} must receive an array literal as its first argument."
INVALID_ENCODING = "File is not valid UTF-8 and was skipped."


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def _scan_route_files(config: Config) -> list[Path]:
    modules = config.modules_path
    if not modules.is_dir():
        return []
    found = {
        path
        for pattern in ROUTE_FILE_PATTERNS
        for path in modules.glob(pattern)
        if path.is_file() and path.name != config.app_routes_filename
    }
    return sorted(found)


async def discover_route_files(config: Config) -> list[Path]:
    """Feature route files of the project, sorted, without ``app.routes.tsx``.

    Child route files (``*.routes.child.tsx``) are reached through their
    parent's merge entries and are not listed on their own.
    """
    return await asyncio.to_thread(_scan_route_files, config)


# ---------------------------------------------------------------------------
# Route file parsing
# ---------------------------------------------------------------------------


def _source_location(node: Node, file: Path) -> SourceLocation:
    line, column = location(node)
    return SourceLocation(file=file, line=line, column=column)


def _issue(node: Node, file: Path, message: str) -> ParseIssue:
    line, column = location(node)
    return ParseIssue(file=file, line=line, column=column, message=message)


def _parse_handle(node: Node) -> RouteHandle:
    handle = RouteHandle()
    for name, value in object_properties(node).items():
        if name in ("title", "breadcrumb"):
            setattr(handle, name, string_value(value))
        elif name == "permissions":
            permissions = string_list(value)
            if permissions is not None:
                handle.permissions = permissions
        elif name == "isRequiredAuth":
            handle.requires_auth = bool(boolean_value(value))
    return handle


def _parse_placeholder(node: Node, file: Path) -> RouteEntry:
    return RouteEntry(
        spread_expression=spread_argument(node) or "",
        source=_source_location(node, file),
    )


def _parse_object(node: Node, file: Path) -> RouteEntry:
    entry = RouteEntry(source=_source_location(node, file))
    for name, value in object_properties(node).items():
        if name == "path":
            entry.path = string_value(value)
            entry.raw_path = node_text(value)
        elif name == "name":
            entry.name = string_value(value)
        elif name == "index":
            flag = boolean_value(value)
            if flag is not None:
                entry.index = flag
        elif name == "children" and value.type == "array":
            entry.children = [
                child
                for child in (_parse_element(element, file) for element in array_elements(value))
                if child is not None
            ]
        elif name == "handle" and value.type == "object":
            entry.handle = _parse_handle(value)
    return entry


def _parse_element(node: Node, file: Path) -> Optional[RouteEntry]:
    if node.type == "object":
        return _parse_object(node, file)
    if node.type == "spread_element":
        return _parse_placeholder(node, file)
    return None


def parse_route_source(source: SourceTree, file: Path) -> ParsedRouteFile:
    """Interpret every ``createAppRoutes`` call of an already-parsed file."""
    result = ParsedRouteFile(file=file)
    for call in find_calls(source.root, ROUTES_CONSTRUCTOR):
        arguments = call_arguments(call)
        if not arguments or arguments[0].type != "array":
            result.issues.append(_issue(call, file, NON_ARRAY_ARGUMENT))
            continue
        for element in array_elements(arguments[0]):
            entry = _parse_element(element, file)
            if entry is None:
                result.issues.append(_issue(element, file, UNSUPPORTED_ELEMENT))
            else:
                result.routes.append(entry)
    return result


def parse_route_file(path: Path) -> ParsedRouteFile:
    """Read and interpret one route file (always with the TSX grammar).

    A file that is not valid UTF-8 yields a single issue at the first bad byte.
    """
    data = path.read_bytes()
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        line_start = data.rfind(b"\n", 0, exc.start) + 1
        issue = ParseIssue(
            file=path,
            line=data.count(b"\n", 0, exc.start) + 1,
            column=exc.start - line_start + 1,
            message=INVALID_ENCODING,
        )
        return ParsedRouteFile(file=path, issues=[issue])
    return parse_route_source(SourceTree(text, tsx=True, path=path), path)


# ---------------------------------------------------------------------------
# Admin base path
# ---------------------------------------------------------------------------


def normalize_base_path(value: Optional[str], default: str = "/admin") -> str:
    if not value or not value.strip():
        return default
    return value if value.startswith("/") else f"/{value}"


def _nested_property(node: Node, *names: str) -> Optional[Node]:
    current = node
    for name in names:
        if current.type != "object":
            return None
        current = object_properties(current).get(name)
        if current is None:
            return None
    return current


def read_admin_base_path(config: Config) -> str:
    """``routes.admin.basePath`` of the project config, normalized."""
    default = config.default_admin_base_path
    config_path = config.project_config_path
    if not config_path.exists():
        return normalize_base_path(default, default)

    text = config_path.read_text(encoding="utf-8", errors="replace")
    source = SourceTree(text, tsx=False, path=config_path)
    base_path: Optional[str] = None
    for call in find_calls(source.root, PROJECT_CONFIG_CONSTRUCTOR):
        arguments = call_arguments(call)
        if not arguments or arguments[0].type != "object":
            continue
        value = _nested_property(arguments[0], "routes", "admin", "basePath")
        base_path = string_value(value) if value is not None else None

    return normalize_base_path(base_path or default, default)


# ---------------------------------------------------------------------------
# Path arithmetic
# ---------------------------------------------------------------------------


def join_paths(base: Optional[str], segment: str) -> str:
    """Join a relative *segment* onto *base* with exactly one ``/`` between."""
    clean_base = "" if not base or base == "/" else base.rstrip("/")
    clean_segment = segment.lstrip("/")
    if not clean_base:
        return f"/{clean_segment}"
    if not clean_segment:
        return clean_base or "/"
    return f"{clean_base}/{clean_segment}"


def compute_full_path(parent_path: str, entry: RouteEntry) -> Optional[str]:
    """Absolute URL of *entry* when mounted below *parent_path*.

    Placeholders have no path of their own (``None``); index routes inherit
    the parent path.
    """
    if entry.is_placeholder:
        return None
    if entry.index:
        return parent_path or "/"
    if entry.path and entry.path.startswith("/"):
        return entry.path
    if entry.path:
        return join_paths(parent_path, entry.path)
    return parent_path


# ---------------------------------------------------------------------------
# Tree assembly
# ---------------------------------------------------------------------------


def _relative(file: Path, root: Path) -> str:
    try:
        return file.relative_to(root).as_posix()
    except ValueError:
        return file.as_posix()


def entry_to_node(entry: RouteEntry, parent_path: str, root: Path) -> RouteTreeNode:
    """Convert *entry* and its children into printable nodes."""
    source_file = _relative(entry.source.file, root)
    if entry.is_placeholder:
        return RouteTreeNode(
            segment=f"… {entry.spread_expression}",
            source=entry.source,
            source_file=source_file,
            is_placeholder=True,
        )

    if entry.index:
        segment = "[index]"
    elif entry.path is not None:
        segment = entry.path
    else:
        segment = entry.raw_path or "(pathless)"

    full_path = compute_full_path(parent_path, entry)
    handle = entry.handle or RouteHandle()
    return RouteTreeNode(
        segment=segment,
        full_path=full_path,
        source=entry.source,
        source_file=source_file,
        name=entry.name,
        title=handle.title,
        breadcrumb=handle.breadcrumb,
        permissions=handle.permissions,
        requires_auth=handle.requires_auth,
        is_index=entry.index,
        children=[
            entry_to_node(child, full_path or parent_path, root) for child in entry.children
        ],
    )


def build_route_tree(
    absolute_routes: list[RouteEntry],
    nested_routes: list[RouteEntry],
    admin_base_path: str,
    config: Config,
) -> list[RouteTreeNode]:
    """Assemble the root pseudo nodes around the parsed feature routes."""
    root = config.root
    app_routes = config.app_routes_path.as_posix()

    root_children = [
        RouteTreeNode(
            segment="[index]",
            full_path="/",
            component="AppEntryPoint",
            source_file=app_routes,
        ),
        *(entry_to_node(entry, "/", root) for entry in absolute_routes),
    ]

    if nested_routes:
        root_children.append(
            RouteTreeNode(
                segment=admin_base_path,
                full_path=admin_base_path,
                component="AppLayout",
                source_file=app_routes,
                children=[entry_to_node(entry, admin_base_path, root) for entry in nested_routes],
            )
        )

    root_children.append(
        RouteTreeNode(
            segment="*",
            full_path="*",
            component="AppNotFound",
            source_file=app_routes,
        )
    )

    return [RouteTreeNode(segment="/", full_path="/", children=root_children)]


async def load_route_map(config: Config) -> RouteMap:
    """Discover, parse and assemble the whole application route map."""
    files = await discover_route_files(config)
    route_map = RouteMap(files=files)
    if not files:
        return route_map

    entries: list[RouteEntry] = []
    for file in files:
        parsed = await asyncio.to_thread(parse_route_file, file)
        entries.extend(parsed.routes)
        route_map.issues.extend(parsed.issues)

    absolute_routes = [entry for entry in entries if entry.is_absolute]
    nested_routes = [entry for entry in entries if not entry.is_absolute]
    admin_base_path = await asyncio.to_thread(read_admin_base_path, config)

    route_map.admin_base_path = admin_base_path
    route_map.roots = build_route_tree(absolute_routes, nested_routes, admin_base_path, config)
    route_map.total_routes = len(entries)
    route_map.absolute_routes = len(absolute_routes)
    route_map.nested_routes = len(nested_routes)
    return route_map

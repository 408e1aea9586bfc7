"""modsync route parser.

Reads TypeScript route artifacts with tree-sitter and reconstructs the
application route tree they describe.

Usage::

    from modsync.parser import load_route_map

    route_map = await load_route_map(config)
    for issue in route_map.issues:
        print(issue.format(config.root))
"""

from modsync.parser.models import (
    ParseIssue,
    ParsedRouteFile,
    RouteEntry,
    RouteMap,
    RouteTreeNode,
)
from modsync.parser.route_tree import (
    build_route_tree,
    compute_full_path,
    discover_route_files,
    join_paths,
    load_route_map,
    parse_route_file,
    read_admin_base_path,
)

__all__ = [
    "ParseIssue",
    "ParsedRouteFile",
    "RouteEntry",
    "RouteMap",
    "RouteTreeNode",
    "build_route_tree",
    "compute_full_path",
    "discover_route_files",
    "join_paths",
    "load_route_map",
    "parse_route_file",
    "read_admin_base_path",
]

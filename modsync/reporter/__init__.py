"""Console reporting for modsync commands.

Renders the reconstructed application route map as a ``rich`` tree and
summarises the active generator configuration.
"""

from modsync.reporter.route_map import (
    build_tree,
    node_label,
    print_generator_info,
    print_route_map,
)

__all__ = [
    "build_tree",
    "node_label",
    "print_generator_info",
    "print_route_map",
]

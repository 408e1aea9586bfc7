"""Pydantic v2 models for the route tree reconstructor.

Defines the raw route entries read from ``createAppRoutes([...])`` calls, the
parse issues collected along the way and the printable tree assembled from
them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Source positions & issues
# ---------------------------------------------------------------------------

class SourceLocation(BaseModel):
    """Position of a syntax node in a route file (1-based)."""
    file: Path
    line: int = Field(..., ge=1)
    column: int = Field(..., ge=1)


class ParseIssue(BaseModel):
    """A non-fatal problem found while reading a route file."""
    file: Path
    line: int = Field(..., ge=1)
    column: int = Field(..., ge=1)
    message: str

    def format(self, root: Optional[Path] = None) -> str:
        shown = self.file
        if root is not None:
            try:
                shown = self.file.relative_to(root)
            except ValueError:
                pass
        return f"{shown.as_posix()}:{self.line}:{self.column} - {self.message}"


# ---------------------------------------------------------------------------
# Raw route entries
# ---------------------------------------------------------------------------

class RouteHandle(BaseModel):
    """The ``handle`` object of a route entry."""
    title: Optional[str] = None
    breadcrumb: Optional[str] = None
    permissions: Optional[list[str]] = None
    requires_auth: bool = False


class RouteEntry(BaseModel):
    """One element of a routes array: an object literal or a spread placeholder."""
    path: Optional[str] = Field(default=None, description="Static value of the path property")
    raw_path: Optional[str] = Field(default=None, description="Source text of the path property")
    name: Optional[str] = None
    index: bool = False
    children: list[RouteEntry] = Field(default_factory=list)
    handle: Optional[RouteHandle] = None
    spread_expression: Optional[str] = Field(
        default=None, description="Verbatim expression of a ``...expr`` placeholder"
    )
    source: SourceLocation

    @property
    def is_placeholder(self) -> bool:
        return self.spread_expression is not None

    @property
    def is_absolute(self) -> bool:
        """Placeholders and ``/``-prefixed paths mount at the application root."""
        return self.is_placeholder or bool(self.path and self.path.startswith("/"))


class ParsedRouteFile(BaseModel):
    """Everything read from a single route file."""
    file: Path
    routes: list[RouteEntry] = Field(default_factory=list)
    issues: list[ParseIssue] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Printable tree
# ---------------------------------------------------------------------------

class RouteTreeNode(BaseModel):
    """A node of the reconstructed application route tree."""
    segment: str
    full_path: Optional[str] = None
    source: Optional[SourceLocation] = None
    source_file: Optional[str] = Field(
        default=None, description="Defining file relative to the project root"
    )
    children: list[RouteTreeNode] = Field(default_factory=list)
    name: Optional[str] = None
    title: Optional[str] = None
    breadcrumb: Optional[str] = None
    permissions: Optional[list[str]] = None
    requires_auth: bool = False
    is_index: bool = False
    is_placeholder: bool = False
    component: Optional[str] = Field(
        default=None, description="Application component backing a pseudo node"
    )

    def info_parts(self) -> list[str]:
        """The ``key=value`` details printed under the node."""
        if self.is_placeholder:
            return [f"src={self.source_file}"] if self.source_file else []

        parts: list[str] = []
        if self.full_path:
            parts.append(f"path={self.full_path}")
        if self.name:
            parts.append(f"name={self.name}")
        if self.is_index:
            parts.append("index")
        if self.title:
            parts.append(f"title={self.title}")
        if self.breadcrumb:
            parts.append(f"breadcrumb={self.breadcrumb}")
        if self.permissions:
            parts.append(f"permissions=[{', '.join(self.permissions)}]")
        if self.requires_auth:
            parts.append("requiresAuth=true")
        if self.component:
            parts.append(f"component={self.component}")
        if self.source_file:
            parts.append(f"src={self.source_file}")
        return parts

    def iter_nodes(self):
        """Pre-order iteration over this node and its descendants."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()


class RouteMap(BaseModel):
    """The complete reconstruction result handed to the reporter."""
    roots: list[RouteTreeNode] = Field(default_factory=list)
    files: list[Path] = Field(default_factory=list)
    issues: list[ParseIssue] = Field(default_factory=list)
    admin_base_path: str = "/admin"
    total_routes: int = 0
    absolute_routes: int = 0
    nested_routes: int = 0

    def find(self, full_path: str) -> Optional[RouteTreeNode]:
        """First non-pseudo node whose full path equals *full_path*."""
        for root in self.roots:
            for node in root.iter_nodes():
                if node.component is None and node.full_path == full_path:
                    return node
        return None

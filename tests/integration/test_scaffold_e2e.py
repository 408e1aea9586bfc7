"""Integration tests for the generate -> visualize -> move workflow.

These tests drive the real CLI entry point against a throwaway project tree
and read the results back through the route tree reconstructor, so every
component (templates, linking, flags, parser, mover) runs for real.

No Node.js toolchain is required; the generated TypeScript is only parsed.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from modsync.cli import main
from modsync.config import Config
from modsync.parser.route_tree import load_route_map
from modsync.parser.syntax import SourceTree


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def clean_env():
    cleared = {key: "" for key in os.environ if key.startswith("MODSYNC_")}
    with patch.dict(os.environ, cleared):
        yield


def _cli(project_root: Path, *argv: str) -> None:
    assert main(["--root", str(project_root), *argv]) == 0


def _route_map(project_root: Path):
    return asyncio.run(load_route_map(Config(project_root=project_root)))


def _generated_sources(modules_dir: Path) -> list[Path]:
    return [p for p in modules_dir.rglob("*") if p.suffix in (".ts", ".tsx")]


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

@pytest.mark.integration
class TestModuleWorkflow:
    """Generate a module hierarchy, inspect it, then restructure it."""

    def test_nested_generation_is_visible_in_route_map(
        self, project_root: Path, modules_dir: Path
    ) -> None:
        _cli(project_root, "generate", "reports", "--preset", "view")
        _cli(project_root, "module-child", "reports/monthly", "--kinds", "page,route,config")

        route_map = _route_map(project_root)
        assert route_map.total_routes == 1
        reports = route_map.find("/admin/reports")
        assert reports is not None
        assert [c.segment for c in reports.children] == ["[index]", "… monthlyChildRoutes"]

        flags = (project_root / "feature-flags.config.ts").read_text()
        assert "REPORTS_MONTHLY: {" in flags
        assert "  REPORTS: {" in flags

    def test_every_generated_source_parses(self, project_root: Path, modules_dir: Path) -> None:
        _cli(project_root, "generate", "master-data/client", "--child", "--all")

        sources = _generated_sources(modules_dir)
        assert sources
        broken = [p for p in sources if not SourceTree.from_file(p).is_clean]
        assert broken == []

    def test_move_round_trip(self, project_root: Path, modules_dir: Path) -> None:
        _cli(project_root, "generate", "reports", "--kinds", "route")
        _cli(project_root, "module-child", "reports/monthly", "--kinds", "page,route")
        reports_routes = modules_dir / "reports" / "routes" / "reports.routes.tsx"

        _cli(project_root, "move", "reports/monthly", "monthly", "--yes")

        route_map = _route_map(project_root)
        assert route_map.total_routes == 2
        assert route_map.find("/admin/monthly") is not None
        assert "monthlyChildRoutes" not in reports_routes.read_text()
        assert not (modules_dir / "reports" / "modules").exists()

        _cli(project_root, "move", "monthly", "reports/monthly", "--yes")

        route_map = _route_map(project_root)
        assert route_map.total_routes == 1
        assert reports_routes.read_text().count("...monthlyChildRoutes") == 1
        child = modules_dir / "reports" / "modules" / "monthly" / "routes" / "monthly.routes.child.tsx"
        assert child.read_text().count("CHILD ROUTE") == 1

"""Tests for the artifact generator (modsync.scaffolder.generator).

Covers:
- One file per requested kind, in request order
- Skip / overwrite behaviour for existing files
- Child route linking through every ancestor
- Config and locale side effects (ancestor stubs, feature flags)
- Re-running a generation leaves the tree unchanged
"""

from __future__ import annotations

from pathlib import Path

import pytest

from modsync.config import Config
from modsync.scaffolder.generator import ArtifactGenerator, ArtifactStatus
from modsync.scaffolder.paths import ModuleDescriptor, ModulePath

pytestmark = pytest.mark.unit


def _descriptor(raw: str, is_child: bool = False) -> ModuleDescriptor:
    return ModuleDescriptor(path=ModulePath(segments=tuple(raw.split("/"))), is_child=is_child)


def _snapshot(root: Path) -> dict[str, str]:
    return {
        str(p.relative_to(root)): p.read_text(encoding="utf-8")
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


# ---------------------------------------------------------------------------
# File generation
# ---------------------------------------------------------------------------


class TestGenerate:
    async def test_view_preset_files(self, generator: ArtifactGenerator, modules_dir: Path) -> None:
        kinds = ["page", "route", "locale", "type", "service"]
        artifacts = await generator.generate(_descriptor("billing"), kinds)

        base = modules_dir / "billing"
        assert [a.kind for a in artifacts] == kinds
        assert [a.file_path for a in artifacts] == [
            base / "components" / "pages" / "billing.tsx",
            base / "routes" / "billing.routes.tsx",
            base / "locales" / "billing.en.json",
            base / "types" / "billing.type.ts",
            base / "services" / "billing.service.ts",
        ]
        assert all(a.status is ArtifactStatus.CREATED for a in artifacts)
        assert all(a.file_path.exists() for a in artifacts)

    async def test_unknown_kind_is_ignored(self, generator: ArtifactGenerator) -> None:
        artifacts = await generator.generate(_descriptor("billing"), ["widget", "type"])
        assert [a.kind for a in artifacts] == ["type"]

    async def test_existing_file_is_skipped(
        self, generator: ArtifactGenerator, modules_dir: Path, write_source
    ) -> None:
        target = write_source(modules_dir / "billing" / "types" / "billing.type.ts", "// mine\n")
        [artifact] = await generator.generate(_descriptor("billing"), ["type"])

        assert artifact.status is ArtifactStatus.SKIPPED
        assert artifact.existed_before
        assert not artifact.written
        assert target.read_text() == "// mine\n"

    async def test_overwrite_replaces_existing_file(
        self, generator: ArtifactGenerator, modules_dir: Path, write_source
    ) -> None:
        target = write_source(modules_dir / "billing" / "types" / "billing.type.ts", "// mine\n")
        [artifact] = await generator.generate(_descriptor("billing"), ["type"], overwrite=True)

        assert artifact.status is ArtifactStatus.OVERWRITTEN
        assert artifact.written
        assert target.read_text() != "// mine\n"

    async def test_existing_standalone_route_skips_itself(
        self, generator: ArtifactGenerator, modules_dir: Path, write_source
    ) -> None:
        route = write_source(modules_dir / "billing" / "routes" / "billing.routes.tsx", "// r\n")
        [artifact] = await generator.generate(_descriptor("billing"), ["route"])
        assert artifact.status is ArtifactStatus.SKIPPED
        assert route.read_text() == "// r\n"


# ---------------------------------------------------------------------------
# Child route linking
# ---------------------------------------------------------------------------


class TestChildRoutes:
    async def test_child_is_linked_into_scaffolded_parent(
        self, generator: ArtifactGenerator, modules_dir: Path
    ) -> None:
        await generator.generate(_descriptor("reports/monthly", is_child=True), ["page", "route"])

        parent = (modules_dir / "reports" / "routes" / "reports.routes.tsx").read_text()
        child = modules_dir / "reports" / "modules" / "monthly" / "routes" / "monthly.routes.child.tsx"

        assert child.exists()
        assert parent.count("...monthlyChildRoutes") == 1
        assert (
            'import { monthlyChildRoutes } from "../modules/monthly/routes/monthly.routes.child";'
            in parent
        )

    async def test_depth_three_links_each_level_once(
        self, generator: ArtifactGenerator, modules_dir: Path
    ) -> None:
        await generator.generate(_descriptor("a/b/c", is_child=True), ["route"])

        a_file = modules_dir / "a" / "routes" / "a.routes.tsx"
        b_file = modules_dir / "a" / "modules" / "b" / "routes" / "b.routes.child.tsx"
        c_file = modules_dir / "a" / "modules" / "b" / "modules" / "c" / "routes" / "c.routes.child.tsx"
        assert a_file.exists() and b_file.exists() and c_file.exists()

        a_src, b_src = a_file.read_text(), b_file.read_text()
        assert a_src.count("...bChildRoutes") == 1
        assert "cChildRoutes" not in a_src
        assert b_src.count("...cChildRoutes") == 1
        assert "bChildRoutes" in b_src
        assert "...bChildRoutes" not in b_src

    async def test_existing_parent_route_is_reused(
        self, generator: ArtifactGenerator, modules_dir: Path
    ) -> None:
        await generator.generate(_descriptor("reports"), ["route"])
        await generator.generate(_descriptor("reports/monthly", is_child=True), ["route"])

        routes_dir = modules_dir / "reports" / "routes"
        assert sorted(p.name for p in routes_dir.iterdir()) == ["reports.routes.tsx"]
        assert "...monthlyChildRoutes," in (routes_dir / "reports.routes.tsx").read_text()

    async def test_standalone_nested_module_is_not_linked(
        self, generator: ArtifactGenerator, modules_dir: Path
    ) -> None:
        await generator.generate(_descriptor("reports/archive", is_child=False), ["route"])

        assert not (modules_dir / "reports" / "routes").exists()
        route = modules_dir / "reports" / "modules" / "archive" / "routes" / "archive.routes.tsx"
        assert 'path: "reports/archive",' in route.read_text()

    async def test_rerun_is_idempotent(self, generator: ArtifactGenerator, modules_dir: Path) -> None:
        descriptor = _descriptor("reports/monthly", is_child=True)
        kinds = ["page", "route", "locale", "config"]
        await generator.generate(descriptor, kinds)
        before = _snapshot(modules_dir.parent.parent)

        artifacts = await generator.generate(descriptor, kinds)

        assert all(a.status is ArtifactStatus.SKIPPED for a in artifacts)
        assert _snapshot(modules_dir.parent.parent) == before

    async def test_rerun_repairs_missing_link(
        self, generator: ArtifactGenerator, modules_dir: Path
    ) -> None:
        descriptor = _descriptor("reports/monthly", is_child=True)
        await generator.generate(descriptor, ["route"])
        parent = modules_dir / "reports" / "routes" / "reports.routes.tsx"
        parent.write_text(parent.read_text().replace("      ...monthlyChildRoutes,\n", ""))
        assert "...monthlyChildRoutes" not in parent.read_text()

        await generator.generate(descriptor, ["route"])
        assert parent.read_text().count("...monthlyChildRoutes") == 1


# ---------------------------------------------------------------------------
# Config / locale side effects
# ---------------------------------------------------------------------------


class TestSideEffects:
    async def test_config_registers_flags_for_module_and_ancestors(
        self, generator: ArtifactGenerator, config: Config, modules_dir: Path
    ) -> None:
        await generator.generate(_descriptor("master-data/client", is_child=True), ["config"])

        assert (modules_dir / "master-data" / "master-data.config.ts").exists()
        leaf = modules_dir / "master-data" / "modules" / "client" / "master-data-client.config.ts"
        assert 'parentModuleId: "master-data"' in leaf.read_text()

        flags = config.feature_flags_path.read_text()
        assert flags.count("  MASTER_DATA: {") == 1
        assert flags.count("  MASTER_DATA_CLIENT: {") == 1

    async def test_locale_creates_ancestor_locales(
        self, generator: ArtifactGenerator, modules_dir: Path
    ) -> None:
        await generator.generate(_descriptor("reports/monthly", is_child=True), ["locale"])
        assert (modules_dir / "reports" / "locales" / "reports.en.json").exists()
        assert (
            modules_dir / "reports" / "modules" / "monthly" / "locales" / "monthly.en.json"
        ).exists()

    async def test_page_has_no_side_effects(
        self, generator: ArtifactGenerator, modules_dir: Path
    ) -> None:
        await generator.generate(_descriptor("reports/monthly", is_child=True), ["page"])
        assert not (modules_dir / "reports" / "routes").exists()
        assert not (modules_dir / "reports" / "reports.config.ts").exists()

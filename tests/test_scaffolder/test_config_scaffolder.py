"""Tests for ancestor config/locale stubs (modsync.scaffolder.config_scaffolder)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from modsync.config import Config
from modsync.scaffolder.config_scaffolder import ConfigScaffolder
from modsync.scaffolder.paths import ModulePath
from modsync.scaffolder.templates import TemplateRenderer

pytestmark = pytest.mark.unit


DEEP = ModulePath(segments=("a", "b", "c"))


@pytest.fixture
def scaffolder(config: Config, renderer: TemplateRenderer) -> ConfigScaffolder:
    return ConfigScaffolder(config, renderer)


class TestAncestorConfigs:
    def test_creates_one_config_per_ancestor(
        self, scaffolder: ConfigScaffolder, modules_dir: Path
    ) -> None:
        created = scaffolder.ensure_ancestor_configs(DEEP)

        assert created == [
            modules_dir / "a" / "a.config.ts",
            modules_dir / "a" / "modules" / "b" / "a-b.config.ts",
        ]
        assert "parentModuleId" not in created[0].read_text()
        assert 'parentModuleId: "a"' in created[1].read_text()

    def test_leaf_is_not_touched(self, scaffolder: ConfigScaffolder, modules_dir: Path) -> None:
        scaffolder.ensure_ancestor_configs(DEEP)
        assert not (modules_dir / "a" / "modules" / "b" / "modules" / "c").exists()

    def test_registers_ancestor_flags(self, scaffolder: ConfigScaffolder, config: Config) -> None:
        scaffolder.ensure_ancestor_configs(DEEP)
        flags = config.feature_flags_path.read_text()
        assert "  A: {" in flags
        assert "  A_B: {" in flags
        assert "A_B_C" not in flags

    def test_existing_config_is_kept(
        self, scaffolder: ConfigScaffolder, modules_dir: Path, write_source
    ) -> None:
        existing = write_source(modules_dir / "a" / "a.config.ts", "// custom\n")
        created = scaffolder.ensure_ancestor_configs(DEEP)

        assert existing not in created
        assert len(created) == 1
        assert existing.read_text() == "// custom\n"

    def test_top_level_module_has_no_ancestors(self, scaffolder: ConfigScaffolder) -> None:
        assert scaffolder.ensure_ancestor_configs(ModulePath(segments=("a",))) == []


class TestAncestorLocales:
    def test_creates_locales(self, scaffolder: ConfigScaffolder, modules_dir: Path) -> None:
        created = scaffolder.ensure_ancestor_locales(ModulePath(segments=("sample-form", "item")))

        assert created == [modules_dir / "sample-form" / "locales" / "sample-form.en.json"]
        assert json.loads(created[0].read_text()) == {"title": "Sample Form"}

    def test_second_run_creates_nothing(self, scaffolder: ConfigScaffolder) -> None:
        scaffolder.ensure_ancestor_locales(DEEP)
        assert scaffolder.ensure_ancestor_locales(DEEP) == []

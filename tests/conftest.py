"""Shared pytest fixtures for the modsync test suite.

Provides reusable fixtures for:
- Throwaway project trees (feature flag registry, project config, modules dir)
- A ``Config`` pointing at that tree
- Template renderer and artifact generator instances
- A scripted prompter that answers questions without reading stdin
"""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from modsync.config import Config
from modsync.prompts import Prompter
from modsync.scaffolder.generator import ArtifactGenerator
from modsync.scaffolder.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Project files
# ---------------------------------------------------------------------------

FEATURE_FLAGS_SOURCE = textwrap.dedent(
    """\
    import { defineFeatureFlags } from "@/modules/app/libs/feature-flags";

    const featureFlags = defineFeatureFlags({
      DASHBOARD: {
        env: 'VITE_FEATURE_DASHBOARD',
        description: 'Dashboard module visibility.',
        defaultEnabled: true,
      },
    });

    export default featureFlags;
    """
)

PROJECT_CONFIG_SOURCE = textwrap.dedent(
    """\
    import { defineRoketinConfig } from "./src/modules/app/libs/config";

    export default defineRoketinConfig({
      name: "Sample",
      routes: {
        admin: {
          basePath: '/admin',
        },
      },
    });
    """
)

APP_ROUTES_SOURCE = textwrap.dedent(
    """\
    import { createAppRoutes } from "@/modules/app/libs/routes-utils";

    export const appRoutes = createAppRoutes([]);
    """
)


# ---------------------------------------------------------------------------
# Paths & configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Minimal host application tree (auto-cleanup)."""
    root = tmp_path / "app"
    app_routes = root / "src" / "modules" / "app" / "routes"
    app_routes.mkdir(parents=True)
    (app_routes / "app.routes.tsx").write_text(APP_ROUTES_SOURCE, encoding="utf-8")
    (root / "feature-flags.config.ts").write_text(FEATURE_FLAGS_SOURCE, encoding="utf-8")
    (root / "roketin.config.ts").write_text(PROJECT_CONFIG_SOURCE, encoding="utf-8")
    yield root


@pytest.fixture
def config(project_root: Path) -> Config:
    """A ``Config`` rooted at the throwaway project."""
    return Config(project_root=project_root)


@pytest.fixture
def modules_dir(config: Config) -> Path:
    return config.modules_path


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


@pytest.fixture
def generator(config: Config, renderer: TemplateRenderer) -> ArtifactGenerator:
    return ArtifactGenerator(config, renderer)


@pytest.fixture
def write_source():
    """Write dedented text below a directory, creating parents."""

    def _write(path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(text), encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

class ScriptedPrompter(Prompter):
    """Prompter with canned answers; records every question asked."""

    def __init__(
        self,
        confirm: bool = True,
        destination: str = "promote",
        kinds: list[str] | None = None,
    ) -> None:
        super().__init__(assume_yes=False)
        self.answer = confirm
        self.destination = destination
        self.kinds = kinds or []
        self.asked: list[str] = []

    def confirm(self, message: str, default: bool = True) -> bool:
        self.asked.append(message)
        return self.answer

    def move_destination(self, module_name: str) -> str:
        self.asked.append(f"destination:{module_name}")
        return self.destination

    def generation_kinds(self, settings) -> list[str]:
        self.asked.append("kinds")
        return list(self.kinds)


@pytest.fixture
def scripted_prompter():
    """Factory for ``ScriptedPrompter`` instances."""
    return ScriptedPrompter

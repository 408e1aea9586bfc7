"""modsync configuration.

Centralised, typed configuration for every command. All settings use Pydantic
v2 models so they can be validated at construction time and serialised
to/from JSON or environment variables without boiler-plate.

A single ``Config`` instance is built by the CLI entry point and passed
explicitly into every component; nothing in the package reads module-level
mutable state for the generator kind table, presets or restricted names.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

CONFIG_FILENAME = ".modsync.json"


class GeneratorKind(BaseModel):
    """One artifact kind the generator knows how to produce.

    ``file_name`` is a Jinja2 expression template rendered with the module
    context (``module_name``, ``module_id``, ``is_child``...), ``template``
    is the path of the content template relative to the template directory.
    """

    label: str
    folder: str = Field(default="", description="Subfolder below the module base path")
    file_name: str
    template: str


class PromptChoice(BaseModel):
    """An entry of the interactive "what to generate" question."""

    name: str
    value: str


def _default_kinds() -> dict[str, GeneratorKind]:
    return {
        "page": GeneratorKind(
            label="Page",
            folder="components/pages",
            file_name="{{ module_name | kebab_case }}.tsx",
            template="page.tsx.j2",
        ),
        "route": GeneratorKind(
            label="Route",
            folder="routes",
            file_name="{{ module_name | kebab_case }}.routes{{ '.child' if is_child }}.tsx",
            template="route.tsx.j2",
        ),
        "store": GeneratorKind(
            label="Store",
            folder="stores",
            file_name="{{ module_name | kebab_case }}.store.ts",
            template="store.ts.j2",
        ),
        "hook": GeneratorKind(
            label="Hook",
            folder="hooks",
            file_name="use-{{ module_name | kebab_case }}.ts",
            template="hook.ts.j2",
        ),
        "service": GeneratorKind(
            label="Service",
            folder="services",
            file_name="{{ module_name | kebab_case }}.service.ts",
            template="service.ts.j2",
        ),
        "constant": GeneratorKind(
            label="Constant",
            folder="constants",
            file_name="{{ module_name | kebab_case }}.constant.ts",
            template="constant.ts.j2",
        ),
        "type": GeneratorKind(
            label="Type",
            folder="types",
            file_name="{{ module_name | kebab_case }}.type.ts",
            template="type.ts.j2",
        ),
        "lib": GeneratorKind(
            label="Lib",
            folder="libs",
            file_name="{{ module_name | kebab_case }}-lib.ts",
            template="lib.ts.j2",
        ),
        "context": GeneratorKind(
            label="Context",
            folder="contexts",
            file_name="{{ module_name | kebab_case }}-context.ts",
            template="context.ts.j2",
        ),
        "locale": GeneratorKind(
            label="Locale",
            folder="locales",
            file_name="{{ module_name | kebab_case }}.en.json",
            template="locale.json.j2",
        ),
        "config": GeneratorKind(
            label="Config",
            folder="",
            file_name="{{ module_id }}.config.ts",
            template="config.ts.j2",
        ),
    }


class GeneratorSettings(BaseModel):
    """Generator kind table, presets, prompt choices and restricted names."""

    restricted_modules: list[str] = Field(default=["auth", "app", "dashboard"])
    presets: dict[str, list[str]] = Field(
        default_factory=lambda: {"view": ["page", "route", "locale", "type", "service"]}
    )
    prompt_choices: list[PromptChoice] = Field(
        default_factory=lambda: [
            PromptChoice(
                name="Standard (components/pages, route, locale, type, service)",
                value="view",
            ),
            PromptChoice(name="All folders", value="all"),
            PromptChoice(name="Custom", value="custom"),
        ]
    )
    kinds: dict[str, GeneratorKind] = Field(default_factory=_default_kinds)

    @property
    def restricted_set(self) -> frozenset[str]:
        return frozenset(self.restricted_modules)

    # ------------------------------------------------------------------
    # Registration helpers
    # ------------------------------------------------------------------

    def register_restricted_module(self, module_name: str) -> None:
        """Add a segment name that may never be used in a module path."""
        if module_name and module_name not in self.restricted_modules:
            self.restricted_modules.append(module_name)

    def register_preset(self, name: str, kinds: list[str]) -> None:
        if not name or not isinstance(kinds, list):
            raise ValueError("register_preset requires a name and a list of generator kinds")
        self.presets[name] = list(kinds)

    def register_prompt_choice(self, name: str, value: str) -> None:
        if not name or not value:
            raise ValueError("register_prompt_choice requires a name and a value")
        self.prompt_choices.append(PromptChoice(name=name, value=value))

    def register_generator(self, name: str, kind: GeneratorKind) -> None:
        if not name:
            raise ValueError("register_generator requires a name")
        self.kinds[name] = kind

    def resolve_selection(self, choice: str) -> list[str] | None:
        """Translate a prompt choice into a kind list.

        Returns ``None`` when the choice needs a follow-up custom selection.
        """
        if choice == "all":
            return list(self.kinds)
        if choice in self.presets:
            return list(self.presets[choice])
        return None


class Config(BaseModel):
    """Global modsync configuration.

    Holds the project root, the file conventions of the host application and
    the generator settings. Instances are created once by the CLI entry point
    and then passed through the rest of the system.
    """

    project_root: Path = Field(default=Path("."))
    source_dir: str = Field(default="src")
    modules_dir: str = Field(default="src/modules")
    feature_flags_file: str = Field(default="feature-flags.config.ts")
    project_config_file: str = Field(default="roketin.config.ts")
    app_routes_filename: str = Field(default="app.routes.tsx")
    default_admin_base_path: str = Field(default="/admin")
    generator: GeneratorSettings = Field(default_factory=GeneratorSettings)

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def root(self) -> Path:
        """Absolute project root."""
        return self.project_root.resolve()

    @property
    def source_path(self) -> Path:
        """Directory scanned for module alias references."""
        return self.root / self.source_dir

    @property
    def modules_path(self) -> Path:
        """Directory holding the top-level modules."""
        return self.root / self.modules_dir

    @property
    def feature_flags_path(self) -> Path:
        """Path to the shared feature flag registry."""
        return self.root / self.feature_flags_file

    @property
    def project_config_path(self) -> Path:
        """Path to the host application config declaring the admin base path."""
        return self.root / self.project_config_file

    @property
    def app_routes_path(self) -> Path:
        """Path of the root route aggregator, relative to the project root."""
        return Path(self.modules_dir) / "app" / "routes" / self.app_routes_filename

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file. Defaults to ``<root>/.modsync.json``.

        Returns:
            The resolved path where the file was written.
        """
        target = path or (self.root / CONFIG_FILENAME)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            MODSYNC_ROOT, MODSYNC_MODULES_DIR, MODSYNC_RESTRICTED,
            MODSYNC_ADMIN_BASE_PATH.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("MODSYNC_ROOT"):
            kwargs["project_root"] = Path(os.environ["MODSYNC_ROOT"])
        if os.environ.get("MODSYNC_MODULES_DIR"):
            kwargs["modules_dir"] = os.environ["MODSYNC_MODULES_DIR"]
        if os.environ.get("MODSYNC_ADMIN_BASE_PATH"):
            kwargs["default_admin_base_path"] = os.environ["MODSYNC_ADMIN_BASE_PATH"]

        generator = GeneratorSettings()
        restricted = os.environ.get("MODSYNC_RESTRICTED")
        if restricted:
            generator.restricted_modules = [
                name.strip() for name in restricted.split(",") if name.strip()
            ]

        return cls(generator=generator, **kwargs)

"""Ancestor config and locale stubs.

When ``config`` or ``locale`` artifacts are generated for a nested module,
every ancestor gets the same artifact if it does not have one yet, so the
host application can always resolve the parent chain. Config stubs also
register the ancestor's feature flag.
"""

from __future__ import annotations

from pathlib import Path

from modsync.config import Config
from modsync.utils import ensure_dir, print_created, relative_to_root

from .feature_flags import FeatureFlagRegistry
from .paths import ModulePath, base_path
from .templates import SKIP, TemplateRenderer, module_context


class ConfigScaffolder:
    """Creates missing config/locale artifacts for module ancestors."""

    def __init__(
        self,
        config: Config,
        renderer: TemplateRenderer,
        flags: FeatureFlagRegistry | None = None,
    ) -> None:
        self.config = config
        self.renderer = renderer
        self.flags = flags or FeatureFlagRegistry(config)

    def ensure_ancestor_configs(self, path: ModulePath) -> list[Path]:
        """Create ``<module_id>.config.ts`` for every ancestor lacking one."""
        kind = self.config.generator.kinds["config"]
        created: list[Path] = []
        for ancestor in path.ancestors():
            context = module_context(ancestor, ancestor.is_nested)
            target = self._target(ancestor, kind.folder, kind.file_name, context)
            if target.exists():
                continue
            content = self.renderer.render(kind.template, context)
            if content is SKIP:
                continue
            target.write_text(content, encoding="utf-8")
            self.flags.register(ancestor)
            print_created(relative_to_root(target, self.config.root), existed=False)
            created.append(target)
        return created

    def ensure_ancestor_locales(self, path: ModulePath) -> list[Path]:
        """Create ``locales/<name>.en.json`` for every ancestor lacking one."""
        kind = self.config.generator.kinds["locale"]
        created: list[Path] = []
        for ancestor in path.ancestors():
            context = module_context(ancestor, ancestor.is_nested)
            target = self._target(ancestor, kind.folder, kind.file_name, context)
            if target.exists():
                continue
            content = self.renderer.render(kind.template, context)
            if content is SKIP:
                continue
            target.write_text(content, encoding="utf-8")
            print_created(relative_to_root(target, self.config.root), existed=False)
            created.append(target)
        return created

    def _target(self, path: ModulePath, folder: str, pattern: str, context: dict) -> Path:
        directory = base_path(path, self.config)
        if folder:
            directory = directory / folder
        ensure_dir(directory)
        return directory / self.renderer.render_file_name(pattern, context)

"""Main scaffolding orchestrator.

Takes a ``ModuleDescriptor`` and a list of artifact kinds and writes one file
per kind below the module's base directory, then triggers the downstream
wiring each kind needs:

* ``route`` for a child module: ancestor route scaffolds, then linking of
  every child ancestor into its own parent and of the new leaf into its
  direct parent.
* ``config``: ancestor config stubs and feature flag registration.
* ``locale``: ancestor locale stubs.

Generation is best-effort and non-transactional: a template error aborts the
run but files written by earlier kinds stay on disk.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from pathlib import Path

from pydantic import BaseModel

from modsync.config import Config, GeneratorKind
from modsync.utils import (
    ensure_dir,
    print_created,
    print_skipped,
    print_warning,
    relative_to_root,
)

from .config_scaffolder import ConfigScaffolder
from .feature_flags import FeatureFlagRegistry
from .paths import ModuleDescriptor, base_path
from .routing import (
    PLACEHOLDER_COMMENT,
    RouteLinkInjector,
    RouteScaffoldBuilder,
    link_child,
)
from .templates import SKIP, TemplateRenderer, module_context


# ---------------------------------------------------------------------------
# Result model
# ---------------------------------------------------------------------------


class ArtifactStatus(str, Enum):
    CREATED = "created"
    OVERWRITTEN = "overwritten"
    SKIPPED = "skipped"


class GeneratedArtifact(BaseModel):
    """One file the generator considered."""

    kind: str
    file_path: Path
    status: ArtifactStatus
    existed_before: bool

    @property
    def written(self) -> bool:
        return self.status is not ArtifactStatus.SKIPPED


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------


class ArtifactGenerator:
    """Per-kind file generation for one module.

    All collaborators receive the same explicit ``Config``; the kind table is
    read from ``config.generator.kinds``.
    """

    def __init__(self, config: Config, renderer: TemplateRenderer | None = None) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer()
        self.flags = FeatureFlagRegistry(config)
        self.scaffolds = RouteScaffoldBuilder(config, self.renderer)
        self.injector = RouteLinkInjector(config)
        self.config_scaffolder = ConfigScaffolder(config, self.renderer, self.flags)

    # -- Public API --------------------------------------------------------

    async def generate(
        self,
        descriptor: ModuleDescriptor,
        kinds: list[str],
        overwrite: bool = False,
    ) -> list[GeneratedArtifact]:
        """Generate the requested artifact kinds for *descriptor*.

        Args:
            descriptor: The module being generated.
            kinds: Kind names from the configured kind table, in order.
            overwrite: Replace files that already exist.

        Returns:
            One ``GeneratedArtifact`` per known kind, in request order.
        """
        module_dir = base_path(descriptor.path, self.config)
        await asyncio.to_thread(ensure_dir, module_dir)

        artifacts: list[GeneratedArtifact] = []
        for kind_name in kinds:
            kind = self.config.generator.kinds.get(kind_name)
            if kind is None:
                print_warning(f"Unknown generator type: {kind_name}")
                continue

            artifact = await self._generate_one(descriptor, kind_name, kind, module_dir, overwrite)
            artifacts.append(artifact)
            if artifact.file_path.exists():
                self._wire(descriptor, kind_name, artifact)

        return artifacts

    # -- Single kind -------------------------------------------------------

    async def _generate_one(
        self,
        descriptor: ModuleDescriptor,
        kind_name: str,
        kind: GeneratorKind,
        module_dir: Path,
        overwrite: bool,
    ) -> GeneratedArtifact:
        target_dir = module_dir / kind.folder if kind.folder else module_dir
        await asyncio.to_thread(ensure_dir, target_dir)

        context = module_context(descriptor.path, descriptor.is_child, overwrite=overwrite)
        file_path = target_dir / self.renderer.render_file_name(kind.file_name, context)
        existed = file_path.exists()
        context.update(
            exists=existed,
            with_index=True,
            placeholder_comment=PLACEHOLDER_COMMENT,
        )

        content = self.renderer.render(kind.template, context)
        shown = relative_to_root(file_path, self.config.root)

        if content is SKIP or (existed and not overwrite):
            print_skipped(shown)
            return GeneratedArtifact(
                kind=kind_name,
                file_path=file_path,
                status=ArtifactStatus.SKIPPED,
                existed_before=existed,
            )

        await asyncio.to_thread(file_path.write_text, content, "utf-8")
        print_created(shown, existed)
        return GeneratedArtifact(
            kind=kind_name,
            file_path=file_path,
            status=ArtifactStatus.OVERWRITTEN if existed else ArtifactStatus.CREATED,
            existed_before=existed,
        )

    # -- Downstream wiring -------------------------------------------------

    def _wire(
        self,
        descriptor: ModuleDescriptor,
        kind_name: str,
        artifact: GeneratedArtifact,
    ) -> None:
        path = descriptor.path
        if kind_name == "route" and descriptor.is_child:
            link_child(path, artifact.file_path, self.scaffolds, self.injector)
        elif kind_name == "config":
            self.config_scaffolder.ensure_ancestor_configs(path)
            self.flags.register(path)
        elif kind_name == "locale":
            self.config_scaffolder.ensure_ancestor_locales(path)

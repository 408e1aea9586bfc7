"""modsync scaffolder -- generates module artifacts and keeps routes linked.

Takes a module path such as ``reports/monthly`` and renders the requested
artifact kinds below ``src/modules/reports/modules/monthly``. Child route
files are linked into their parent's ``createAppRoutes`` children array, and
missing ancestors get scaffolded first.

Quick usage::

    from modsync.config import Config
    from modsync.scaffolder import ArtifactGenerator, ModuleDescriptor, normalize

    config = Config(project_root=Path("."))
    path = normalize("reports/monthly", config.generator)
    generator = ArtifactGenerator(config)
    await generator.generate(ModuleDescriptor(path=path, is_child=True), ["route"])
"""

from modsync.scaffolder.generator import ArtifactGenerator, ArtifactStatus, GeneratedArtifact
from modsync.scaffolder.paths import ModuleDescriptor, ModulePath, ValidationError, normalize
from modsync.scaffolder.routing import LinkResult, RouteLinkInjector, RouteScaffoldBuilder
from modsync.scaffolder.templates import TemplateRenderer

__all__ = [
    "ArtifactGenerator",
    "ArtifactStatus",
    "GeneratedArtifact",
    "LinkResult",
    "ModuleDescriptor",
    "ModulePath",
    "RouteLinkInjector",
    "RouteScaffoldBuilder",
    "TemplateRenderer",
    "ValidationError",
    "normalize",
]

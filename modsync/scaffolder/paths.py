"""Module path model.

A module lives at a hierarchical path such as ``master-data/client``. This
module normalises raw user input into a ``ModulePath``, validates it against
the restricted segment names and derives everything else from it: the
on-disk base directory, the import alias and the per-module identifiers.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from modsync.config import Config, GeneratorSettings
from modsync.utils import sanitize_folder_name


class ValidationError(ValueError):
    """Raised when user input cannot be turned into a valid module operation."""


class ModulePath(BaseModel):
    """Ordered, non-empty sequence of normalised segment names."""

    model_config = ConfigDict(frozen=True)

    segments: tuple[str, ...] = Field(..., min_length=1)

    def __str__(self) -> str:
        return "/".join(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def name(self) -> str:
        return self.segments[-1]

    @property
    def is_nested(self) -> bool:
        return len(self.segments) > 1

    @property
    def parent(self) -> ModulePath | None:
        if not self.is_nested:
            return None
        return ModulePath(segments=self.segments[:-1])

    @property
    def module_id(self) -> str:
        return "-".join(self.segments)

    @property
    def feature_flag_key(self) -> str:
        return "_".join(segment.upper().replace("-", "_") for segment in self.segments)

    @property
    def alias(self) -> str:
        """Import alias used across source files, e.g. ``@/modules/a/modules/b``."""
        return "@/modules/" + "/modules/".join(self.segments)

    def ancestors(self) -> list[ModulePath]:
        """Proper prefixes, shallow to deep (the path itself excluded)."""
        return [
            ModulePath(segments=self.segments[:depth])
            for depth in range(1, len(self.segments))
        ]

    def child(self, segment: str) -> ModulePath:
        return ModulePath(segments=(*self.segments, segment))


class ModuleDescriptor(BaseModel):
    """Per-invocation description of the module being generated."""

    path: ModulePath
    is_child: bool = False

    @property
    def module_name(self) -> str:
        return self.path.name

    @property
    def module_id(self) -> str:
        return self.path.module_id

    @property
    def feature_flag_key(self) -> str:
        return self.path.feature_flag_key


def normalize(raw: str | ModulePath, settings: GeneratorSettings) -> ModulePath:
    """Split, sanitise and validate a raw module path.

    Raises:
        ValidationError: If nothing is left after sanitising or any segment is
            a restricted module name.
    """
    text = str(raw)
    segments = [sanitize_folder_name(segment) for segment in text.split("/")]
    segments = [segment for segment in segments if segment]

    if not segments:
        raise ValidationError(f"Module path is invalid: {text!r}")

    restricted = settings.restricted_set
    blocked = [segment for segment in segments if segment in restricted]
    if blocked:
        raise ValidationError(
            "You cannot create a module inside restricted folders: "
            + ", ".join(sorted(restricted))
            + f" (got {', '.join(blocked)})."
        )

    return ModulePath(segments=tuple(segments))


def base_path(path: ModulePath, config: Config) -> Path:
    """Directory of *path*: ``<modules>/<first>(/modules/<segment>)*``."""
    result = config.modules_path / path.segments[0]
    for segment in path.segments[1:]:
        result = result / "modules" / segment
    return result

"""Feature flag registration.

Every module config names a feature flag; the flag itself is declared in the
application's shared ``feature-flags.config.ts`` inside the
``defineFeatureFlags({ ... })`` block. Registration is a plain text insertion
before the block's closing ``});`` and is optional: a missing file or marker
only produces a warning.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field

from modsync.config import Config
from modsync.utils import print_info, print_success, print_warning, title_words

from .paths import ModulePath

DEFINE_FLAGS_MARKER = "const featureFlags = defineFeatureFlags({"
CLOSING_MARKER = "});"


class FeatureFlagEntry(BaseModel):
    """One flag declaration inside ``defineFeatureFlags``."""

    key: str
    env_var: str
    description: str
    default_enabled: bool = Field(default=True)

    @classmethod
    def for_module(cls, path: ModulePath) -> FeatureFlagEntry:
        key = path.feature_flag_key
        readable = " ".join(title_words(segment) for segment in path.segments)
        return cls(
            key=key,
            env_var=f"VITE_FEATURE_{key}",
            description=f"{readable} module visibility.",
        )

    def render(self) -> str:
        enabled = "true" if self.default_enabled else "false"
        description = self.description.replace("'", "\\'")
        return (
            f"  {self.key}: {{\n"
            f"    env: '{self.env_var}',\n"
            f"    description: '{description}',\n"
            f"    defaultEnabled: {enabled},\n"
            f"  }},\n"
        )


class FeatureFlagRegistry:
    """Inserts flag entries into the shared registry file."""

    def __init__(self, config: Config) -> None:
        self.config = config

    def register(self, path: ModulePath) -> bool:
        """Declare the flag of *path* unless it already exists.

        Returns:
            ``True`` when the registry file was modified.
        """
        registry = self.config.feature_flags_path
        entry = FeatureFlagEntry.for_module(path)

        if not registry.exists():
            print_warning(
                f"{self.config.feature_flags_file} not found; skipping flag registration."
            )
            return False

        source = registry.read_text(encoding="utf-8")
        if re.search(rf"\b{re.escape(entry.key)}\s*:", source):
            print_info(f"Feature flag {entry.key} already exists.")
            return False

        marker_index = source.find(DEFINE_FLAGS_MARKER)
        if marker_index == -1:
            print_warning("Unable to locate defineFeatureFlags block.")
            return False

        closing_index = source.find(CLOSING_MARKER, marker_index + len(DEFINE_FLAGS_MARKER))
        if closing_index == -1:
            print_warning("Unable to insert feature flag definition.")
            return False

        updated = source[:closing_index] + entry.render() + source[closing_index:]
        registry.write_text(updated, encoding="utf-8")
        print_success(
            f"Registered feature flag {entry.key} in {self.config.feature_flags_file}"
        )
        return True

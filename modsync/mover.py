"""Module relocation.

Moves a module directory to a new place in the module tree and repairs what
points at it:

1. **VALIDATE** -- normalise the source path, require its directory.
2. **RESOLVE_TARGET** -- take the explicit target or ask (promotion only).
3. **CONFIRM** -- show the plan and ask to proceed.
4. **SCAN_REFERENCES** -- collect source files mentioning the old alias.
5. **UNLINK_OLD_PARENT** -- drop the import and merge entry from the old parent.
6. **MOVE_DIRECTORY** -- rename the directory, then the route file when the
   module switches between child and standalone.
7. **REWRITE_REFERENCES** -- old alias to new alias outside the moved subtree.
8. **RELINK_NEW_PARENT** -- child marker and export, link into the new parent.
9. **CLEANUP** -- prune the old ``modules/`` directory when it is empty.

Nothing is rolled back if a later step fails.
"""

from __future__ import annotations

import asyncio
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from modsync.config import Config
from modsync.prompts import Prompter
from modsync.scaffolder.paths import ModulePath, ValidationError, base_path, normalize
from modsync.scaffolder.routing import (
    LinkResult,
    RouteLinkInjector,
    RouteScaffoldBuilder,
    child_routes_identifier,
    find_route_file,
    insert_import,
    link_child,
    remove_import,
    remove_merge_entry,
    route_file_name,
)
from modsync.scaffolder.templates import TemplateRenderer
from modsync.utils import (
    camel_case,
    console,
    kebab_case,
    print_info,
    print_success,
    print_warning,
    relative_to_root,
)

SCANNED_SUFFIXES = (".ts", ".tsx", ".js", ".jsx", ".json")
SKIPPED_DIRECTORIES = ("node_modules", ".git")

_CHILD_MARKER_BLOCK = re.compile(r"// This is a CHILD ROUTE[^\n]*\n(//[^\n]*\n)*")
_ROUTES_BINDING = re.compile(r"export\s+const\s+(\w+)\s*=\s*createAppRoutes\b")


# ---------------------------------------------------------------------------
# States & report
# ---------------------------------------------------------------------------


class MoveState(str, Enum):
    VALIDATE = "validate"
    RESOLVE_TARGET = "resolve_target"
    CONFIRM = "confirm"
    SCAN_REFERENCES = "scan_references"
    UNLINK_OLD_PARENT = "unlink_old_parent"
    MOVE_DIRECTORY = "move_directory"
    REWRITE_REFERENCES = "rewrite_references"
    RELINK_NEW_PARENT = "relink_new_parent"
    CLEANUP = "cleanup"
    DONE = "done"
    CANCELLED = "cancelled"


class MoveReport(BaseModel):
    """What a move run did."""

    source: Optional[ModulePath] = None
    target: Optional[ModulePath] = None
    states: list[MoveState] = Field(default_factory=list)
    referencing_files: list[Path] = Field(default_factory=list)
    updated_files: list[Path] = Field(default_factory=list)
    route_file: Optional[Path] = None
    link_result: Optional[LinkResult] = None
    warnings: list[str] = Field(default_factory=list)

    @property
    def completed(self) -> bool:
        return bool(self.states) and self.states[-1] is MoveState.DONE

    @property
    def cancelled(self) -> bool:
        return bool(self.states) and self.states[-1] is MoveState.CANCELLED


@dataclass
class _MoveRun:
    raw_source: str
    raw_target: Optional[str]
    assume_yes: bool
    report: MoveReport = field(default_factory=MoveReport)
    source: Optional[ModulePath] = None
    target: Optional[ModulePath] = None
    source_dir: Optional[Path] = None
    target_dir: Optional[Path] = None


# ---------------------------------------------------------------------------
# Alias references
# ---------------------------------------------------------------------------


def _alias_pattern(alias: str) -> re.Pattern[str]:
    # "@/modules/client" must not match inside "@/modules/clients".
    return re.compile(re.escape(alias) + r"(?![\w-])")


def _read_scanned(path: Path) -> str:
    # Bytes that are not UTF-8 (e.g. Latin-1 locale files) survive a rewrite unchanged.
    return path.read_text(encoding="utf-8", errors="surrogateescape")


def find_alias_references(search_dir: Path, alias: str) -> list[Path]:
    """Source files below *search_dir* that mention *alias*, sorted."""
    if not search_dir.is_dir():
        return []
    pattern = _alias_pattern(alias)
    results: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(search_dir):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIPPED_DIRECTORIES)
        for filename in sorted(filenames):
            if not filename.endswith(SCANNED_SUFFIXES):
                continue
            path = Path(dirpath) / filename
            if pattern.search(_read_scanned(path)):
                results.append(path)
    return results


def rewrite_alias(path: Path, old_alias: str, new_alias: str) -> bool:
    """Replace every occurrence of *old_alias* in *path*; ``True`` if changed."""
    content = _read_scanned(path)
    updated = _alias_pattern(old_alias).sub(new_alias, content)
    if updated == content:
        return False
    path.write_text(updated, encoding="utf-8", errors="surrogateescape")
    return True


# ---------------------------------------------------------------------------
# Route file markers
# ---------------------------------------------------------------------------


def mark_as_child(source: str, path: ModulePath) -> str:
    """Add the child marker comment and the ``<name>ChildRoutes`` export.

    An existing marker is replaced so it names the current parent.
    """
    updated = source
    if path.parent is not None:
        updated = _CHILD_MARKER_BLOCK.sub("", updated)
        parent_file = route_file_name(path.parent, False)
        block = (
            "\n// This is a CHILD ROUTE (nested module).\n"
            f"// Auto-linked into parent route: {parent_file}"
        )
        updated = re.sub(r"\n{3,}", "\n\n", insert_import(updated, block))

    identifier = child_routes_identifier(path)
    updated = re.sub(
        rf"\n*export\s+const\s+(?!{re.escape(identifier)}\b)\w+ChildRoutes\s*=\s*[\w$.]+;[ \t]*",
        "",
        updated,
    )
    if not re.search(rf"\bexport\s+const\s+{re.escape(identifier)}\b", updated):
        match = _ROUTES_BINDING.search(updated)
        binding = match.group(1) if match else f"{camel_case(path.name)}Routes"
        updated = updated.rstrip("\n") + f"\n\nexport const {identifier} = {binding};\n"
    return updated


def mark_as_standalone(source: str) -> str:
    """Remove the child marker comment and any ``<name>ChildRoutes`` export."""
    updated = _CHILD_MARKER_BLOCK.sub("", source)
    updated = re.sub(
        r"\n*export\s+const\s+\w+ChildRoutes\s*=\s*[\w$.]+;[ \t]*",
        "",
        updated,
    )
    updated = re.sub(r"\n{3,}", "\n\n", updated)
    if not updated.endswith("\n"):
        updated += "\n"
    return updated


# ---------------------------------------------------------------------------
# Mover
# ---------------------------------------------------------------------------


class ModuleMover:
    """Runs the move state machine for one source/target pair.

    Args:
        config: Project configuration.
        prompter: Used for the target question and the confirmation.
        renderer: Template renderer for ancestor route scaffolds.
    """

    _SEQUENCE: tuple[MoveState, ...] = (
        MoveState.VALIDATE,
        MoveState.RESOLVE_TARGET,
        MoveState.CONFIRM,
        MoveState.SCAN_REFERENCES,
        MoveState.UNLINK_OLD_PARENT,
        MoveState.MOVE_DIRECTORY,
        MoveState.REWRITE_REFERENCES,
        MoveState.RELINK_NEW_PARENT,
        MoveState.CLEANUP,
    )

    _STATE_METHODS: dict[MoveState, str] = {
        MoveState.VALIDATE: "_validate",
        MoveState.RESOLVE_TARGET: "_resolve_target",
        MoveState.CONFIRM: "_confirm",
        MoveState.SCAN_REFERENCES: "_scan_references",
        MoveState.UNLINK_OLD_PARENT: "_unlink_old_parent",
        MoveState.MOVE_DIRECTORY: "_move_directory",
        MoveState.REWRITE_REFERENCES: "_rewrite_references",
        MoveState.RELINK_NEW_PARENT: "_relink_new_parent",
        MoveState.CLEANUP: "_cleanup",
    }

    def __init__(
        self,
        config: Config,
        prompter: Optional[Prompter] = None,
        renderer: Optional[TemplateRenderer] = None,
    ) -> None:
        self.config = config
        self.prompter = prompter or Prompter()
        renderer = renderer or TemplateRenderer()
        self.builder = RouteScaffoldBuilder(config, renderer)
        self.injector = RouteLinkInjector(config)

    async def run(
        self,
        source: str,
        target: Optional[str] = None,
        assume_yes: bool = False,
    ) -> MoveReport:
        """Move *source* to *target*.

        Raises:
            ValidationError: On bad paths, a missing source, an existing
                destination or a target that cannot be resolved. Always
                raised before anything on disk changes.
        """
        run = _MoveRun(raw_source=source, raw_target=target, assume_yes=assume_yes)
        report = run.report

        for state in self._SEQUENCE:
            report.states.append(state)
            handler = getattr(self, self._STATE_METHODS[state])
            if not await handler(run):
                report.states.append(MoveState.CANCELLED)
                print_info("Cancelled.")
                return report

        report.states.append(MoveState.DONE)
        print_success("Module moved successfully!")
        if run.target is not None and not run.target.is_nested:
            print_info(
                f'"{run.target.name}" is now a standalone module; '
                "it is picked up by the application routes automatically."
            )
        return report

    # -- States ------------------------------------------------------------

    async def _validate(self, run: _MoveRun) -> bool:
        run.source = normalize(run.raw_source, self.config.generator)
        run.source_dir = base_path(run.source, self.config)
        run.report.source = run.source
        if not run.source_dir.is_dir():
            raise ValidationError(f"Source module not found: {self._shown(run.source_dir)}")
        return True

    async def _resolve_target(self, run: _MoveRun) -> bool:
        source = run.source
        if run.raw_target:
            target = normalize(run.raw_target, self.config.generator)
        elif run.assume_yes:
            target = ModulePath(segments=(source.name,))
        else:
            choice = self.prompter.move_destination(source.name)
            if choice != "promote":
                raise ValidationError(
                    "Re-run with an explicit target path, "
                    f'e.g. "modsync move {source} user-management/{source.name}".'
                )
            target = ModulePath(segments=(source.name,))

        if target == source:
            raise ValidationError(f"Module '{source}' is already at that location.")
        if target.segments[: len(source)] == source.segments:
            raise ValidationError(f"Cannot move '{source}' into its own subtree.")

        run.target = target
        run.target_dir = base_path(target, self.config)
        run.report.target = target
        self._ensure_destination_free(run)
        return True

    async def _confirm(self, run: _MoveRun) -> bool:
        console.print("[bold]Moving module:[/bold]")
        console.print(f"   From: {run.source} ({self._kind(run.source)})")
        console.print(f"   To:   {run.target} ({self._kind(run.target)})")
        if run.assume_yes:
            return True
        return self.prompter.confirm("Proceed with move?", default=True)

    async def _scan_references(self, run: _MoveRun) -> bool:
        print_info("Scanning for import references...")
        files = await asyncio.to_thread(
            find_alias_references, self.config.source_path, run.source.alias
        )
        run.report.referencing_files = files
        print_info(f"   Found {len(files)} file(s) with imports")
        return True

    async def _unlink_old_parent(self, run: _MoveRun) -> bool:
        parent = run.source.parent
        if parent is None:
            return True
        parent_file = find_route_file(parent, self.config)
        if parent_file is None:
            return True

        content = parent_file.read_text(encoding="utf-8")
        updated = content
        legacy = f"{camel_case(run.source.name)}Routes"
        for identifier in (child_routes_identifier(run.source), legacy):
            updated = remove_import(updated, identifier)
            updated = remove_merge_entry(updated, identifier)

        if updated != content:
            parent_file.write_text(updated, encoding="utf-8")
            print_info(f"Removed from parent route: {self._shown(parent_file)}")
        return True

    async def _move_directory(self, run: _MoveRun) -> bool:
        self._ensure_destination_free(run)
        run.target_dir.parent.mkdir(parents=True, exist_ok=True)
        run.source_dir.rename(run.target_dir)
        print_success(f"Moved to: {self._shown(run.target_dir)}")
        run.report.route_file = self._rename_route_file(run)
        return True

    async def _rewrite_references(self, run: _MoveRun) -> bool:
        old_alias, new_alias = run.source.alias, run.target.alias
        for file in run.report.referencing_files:
            if file.is_relative_to(run.source_dir):
                continue
            if await asyncio.to_thread(rewrite_alias, file, old_alias, new_alias):
                run.report.updated_files.append(file)
        print_info(f"   Updated {len(run.report.updated_files)} file(s)")
        return True

    async def _relink_new_parent(self, run: _MoveRun) -> bool:
        route_file = run.report.route_file
        if route_file is None:
            self._warn(run, "No route file found in the moved module; route links left untouched.")
            return True

        content = route_file.read_text(encoding="utf-8")
        if run.target.is_nested:
            updated = mark_as_child(content, run.target)
        else:
            updated = mark_as_standalone(content)
        if updated != content:
            route_file.write_text(updated, encoding="utf-8")

        if run.target.is_nested:
            result = link_child(run.target, route_file, self.builder, self.injector)
            run.report.link_result = result
            if result not in (LinkResult.LINKED, LinkResult.ALREADY_LINKED):
                run.report.warnings.append(f"Route link into new parent: {result.value}")
        return True

    async def _cleanup(self, run: _MoveRun) -> bool:
        if not run.source.is_nested:
            return True
        old_modules_dir = run.source_dir.parent
        if old_modules_dir.is_dir() and not any(old_modules_dir.iterdir()):
            old_modules_dir.rmdir()
            print_info(f"Removed empty directory: {self._shown(old_modules_dir)}")
        return True

    # -- Helpers -----------------------------------------------------------

    def _ensure_destination_free(self, run: _MoveRun) -> None:
        if run.target_dir.exists():
            raise ValidationError(f"Target already exists: {self._shown(run.target_dir)}")

    def _rename_route_file(self, run: _MoveRun) -> Optional[Path]:
        """Locate the moved route file and align its name with the new role."""
        routes_dir = run.target_dir / "routes"
        old_name = kebab_case(run.source.name)
        current = next(
            (
                candidate
                for candidate in (
                    routes_dir / f"{old_name}.routes.tsx",
                    routes_dir / f"{old_name}.routes.child.tsx",
                )
                if candidate.exists()
            ),
            None,
        )
        if current is None:
            return find_route_file(run.target, self.config)

        desired = routes_dir / route_file_name(run.target, run.target.is_nested)
        if desired == current:
            return current
        if desired.exists():
            self._warn(run, f"Route file not renamed, {self._shown(desired)} already exists.")
            return current
        current.rename(desired)
        print_info(f"Renamed route file to {self._shown(desired)}")
        return desired

    def _warn(self, run: _MoveRun, message: str) -> None:
        run.report.warnings.append(message)
        print_warning(message)

    def _shown(self, path: Path) -> str:
        return relative_to_root(path, self.config.root)

    @staticmethod
    def _kind(path: ModulePath) -> str:
        return "child" if path.is_nested else "standalone"

"""modsync command line interface.

Commands::

    modsync generate <module_path> [--child] [--kinds a,b | --preset name | --all]
                                   [--overwrite] [--yes]
    modsync module-child <module_path> ...
    modsync move <source> [target] [--yes]
    modsync visualize
    modsync info [--save]

Exit status is 1 when the input is rejected (``ValidationError``) or an
operation fails, and 0 otherwise, including runs the user cancels.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import traceback
from pathlib import Path
from typing import Callable, Optional

from jinja2 import TemplateError
from pydantic import ValidationError as PydanticValidationError
from rich.markup import escape

from modsync import __version__
from modsync.config import CONFIG_FILENAME, Config
from modsync.mover import ModuleMover
from modsync.parser.route_tree import load_route_map
from modsync.prompts import Cancelled, Prompter
from modsync.reporter.route_map import print_generator_info, print_route_map
from modsync.scaffolder.generator import ArtifactGenerator, ArtifactStatus
from modsync.scaffolder.paths import ModuleDescriptor, ValidationError, base_path, normalize
from modsync.utils import (
    console,
    print_error,
    print_info,
    print_success,
    print_summary_table,
    print_warning,
    relative_to_root,
)


# ---------------------------------------------------------------------------
# Configuration loading
# ---------------------------------------------------------------------------


def _error_summary(exc: Exception) -> str:
    if isinstance(exc, PydanticValidationError):
        first = exc.errors()[0]
        return f"{first['msg']} ({exc.error_count()} error(s))"
    return str(exc)


def load_config(root: Optional[str] = None, config_file: Optional[str] = None) -> Config:
    """Build the configuration for one invocation.

    Environment variables give the defaults, ``--root`` overrides the project
    root and a saved ``.modsync.json`` (or ``--config``) replaces the rest.
    """
    config = Config.from_env()
    if root:
        config.project_root = Path(root)

    settings_file = Path(config_file) if config_file else config.root / CONFIG_FILENAME
    if config_file and not settings_file.exists():
        raise ValidationError(f"Config file not found: {settings_file}")
    if settings_file.exists():
        try:
            loaded = Config.load(settings_file)
        except (PydanticValidationError, UnicodeDecodeError) as exc:
            raise ValidationError(
                f"Invalid config file {settings_file}: {_error_summary(exc)}"
            ) from exc
        loaded.project_root = config.project_root
        config = loaded
    return config


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _selected_kinds(args: argparse.Namespace, config: Config, prompter: Prompter) -> list[str]:
    settings = config.generator
    if args.kinds:
        return [kind.strip() for kind in args.kinds.split(",") if kind.strip()]
    if args.preset:
        if args.preset not in settings.presets:
            raise ValidationError(
                f"Unknown preset '{args.preset}'. Available: {', '.join(settings.presets)}"
            )
        return list(settings.presets[args.preset])
    if args.all:
        return list(settings.kinds)
    if args.yes:
        return settings.resolve_selection(settings.prompt_choices[0].value) or []
    return prompter.generation_kinds(settings)


def cmd_generate(args: argparse.Namespace, config: Config) -> int:
    prompter = Prompter(assume_yes=args.yes)
    path = normalize(args.module_path, config.generator)

    overwrite = args.overwrite
    module_dir = base_path(path, config)
    if module_dir.exists() and not overwrite:
        overwrite = prompter.overwrite_existing(relative_to_root(module_dir, config.root))

    is_child = args.child
    if is_child and not path.is_nested:
        print_warning(f"'{path}' is a top-level module; generating it as standalone.")
        is_child = False
    elif not is_child and path.is_nested:
        is_child = prompter.confirm_nested(args.module_path, path.name)

    kinds = _selected_kinds(args, config, prompter)
    if not kinds:
        print_info("No generator selected. Nothing to do.")
        return 0

    generator = ArtifactGenerator(config)
    descriptor = ModuleDescriptor(path=path, is_child=is_child)
    artifacts = asyncio.run(generator.generate(descriptor, kinds, overwrite=overwrite))

    counts = {status: 0 for status in ArtifactStatus}
    for artifact in artifacts:
        counts[artifact.status] += 1
    print_summary_table(
        {
            "Module": str(path),
            "Type": "child" if is_child else "standalone",
            "Created": str(counts[ArtifactStatus.CREATED]),
            "Overwritten": str(counts[ArtifactStatus.OVERWRITTEN]),
            "Skipped": str(counts[ArtifactStatus.SKIPPED]),
        },
        title="Generation Summary",
    )
    print_success(f"Module '{path}' generated.")
    return 0


def cmd_move(args: argparse.Namespace, config: Config) -> int:
    mover = ModuleMover(config, Prompter(assume_yes=args.yes))
    report = asyncio.run(mover.run(args.source, args.target, assume_yes=args.yes))
    if report.completed:
        print_summary_table(
            {
                "From": str(report.source),
                "To": str(report.target),
                "References updated": str(len(report.updated_files)),
                "Route link": report.link_result.value if report.link_result else "-",
                "Warnings": str(len(report.warnings)),
            },
            title="Move Summary",
        )
    return 0


def cmd_visualize(args: argparse.Namespace, config: Config) -> int:
    route_map = asyncio.run(load_route_map(config))
    print_route_map(route_map, config.root)
    return 0


def cmd_info(args: argparse.Namespace, config: Config) -> int:
    console.print(f"[bold cyan]modsync v{__version__}[/bold cyan]")
    console.print(f"Project root: {config.root}")
    print_generator_info(config.generator)
    if args.save:
        target = config.save()
        print_success(f"Configuration written to {target}")
    return 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _add_generate_arguments(parser: argparse.ArgumentParser, child_default: bool) -> None:
    parser.add_argument("module_path", help="Module path, e.g. master-data/client")
    parser.add_argument(
        "--child",
        action="store_true",
        default=child_default,
        help="Treat a nested path as a child module without asking",
    )
    selection = parser.add_mutually_exclusive_group()
    selection.add_argument("--kinds", help="Comma-separated artifact kinds, e.g. page,route")
    selection.add_argument("--preset", help="Generate a named preset (e.g. view)")
    selection.add_argument("--all", action="store_true", help="Generate every known kind")
    parser.add_argument("--overwrite", action="store_true", help="Replace existing files")
    parser.add_argument("--yes", "-y", action="store_true", help="Accept defaults without asking")
    parser.set_defaults(handler=cmd_generate)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modsync",
        description="modsync -- module scaffolding and route synchronization",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  modsync generate master-data/client --preset view\n"
            "  modsync move master-data/client client --yes\n"
            "  modsync visualize\n"
        ),
    )
    parser.add_argument(
        "--root",
        default=None,
        help="Project root (default: $MODSYNC_ROOT or the current directory)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"Saved configuration file (default: <root>/{CONFIG_FILENAME} when present)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    commands = parser.add_subparsers(dest="command", metavar="command")
    commands.required = True

    generate = commands.add_parser("generate", aliases=["module"], help="Generate a module")
    _add_generate_arguments(generate, child_default=False)

    generate_child = commands.add_parser("module-child", help="Generate a child module")
    _add_generate_arguments(generate_child, child_default=True)

    move = commands.add_parser("move", help="Move a module and repair references")
    move.add_argument("source", help="Current module path")
    move.add_argument("target", nargs="?", default=None, help="New module path")
    move.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Do not ask for confirmation; without a target, promote to top level",
    )
    move.set_defaults(handler=cmd_move)

    visualize = commands.add_parser(
        "visualize", aliases=["view-router"], help="Print the application route map"
    )
    visualize.set_defaults(handler=cmd_visualize)

    info = commands.add_parser("info", help="Show the generator configuration")
    info.add_argument(
        "--save", action="store_true", help=f"Write the configuration to {CONFIG_FILENAME}"
    )
    info.set_defaults(handler=cmd_info)

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point for ``modsync`` and ``python -m modsync``."""
    args = build_parser().parse_args(argv)
    handler: Callable[[argparse.Namespace, Config], int] = args.handler

    try:
        config = load_config(args.root, args.config)
        return handler(args, config)
    except ValidationError as exc:
        print_error(f"Error: {escape(str(exc))}")
        return 1
    except Cancelled as exc:
        print_info(str(exc))
        return 0
    except (KeyboardInterrupt, EOFError):
        console.print()
        print_info("Cancelled.")
        return 0
    except (OSError, UnicodeDecodeError, TemplateError) as exc:
        print_error(f"Error: {escape(str(exc))}")
        console.print(traceback.format_exc(), style="dim", markup=False)
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""Shared utility functions for modsync.

Provides Rich-based console reporting, the name-case helpers used by the
templates and the path model, and small file-system helpers. Every command
prints through the single ``console`` defined here.
"""

from __future__ import annotations

import re
from pathlib import Path

from rich.console import Console
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------


def sanitize_folder_name(name: str) -> str:
    """Convert a raw path segment to a safe folder name.

    * Trims and lowercases the input.
    * Replaces whitespace runs with a hyphen.
    * Drops every character that is not ``[a-z0-9-]``.

    Examples::

        sanitize_folder_name(" Master Data ") -> "master-data"
        sanitize_folder_name("Billing_2024!") -> "billing2024"
    """
    result = re.sub(r"\s+", "-", name.strip().lower())
    return re.sub(r"[^a-z0-9-]", "", result)


def capitalize(value: str) -> str:
    """``role-add`` -> ``RoleAdd``; inner capitals are preserved."""
    parts = re.split(r"[\s\-_]+", value.strip())
    return "".join(part[:1].upper() + part[1:] for part in parts if part)


def camel_case(value: str) -> str:
    """``monthly-report`` -> ``monthlyReport``."""
    result = capitalize(value)
    return result[:1].lower() + result[1:]


def pascal_case(value: str) -> str:
    """``monthly-REPORT`` -> ``MonthlyReport``."""
    parts = re.split(r"[\s\-_]+", value.strip())
    return "".join(part[:1].upper() + part[1:].lower() for part in parts if part)


def kebab_case(value: str) -> str:
    """``MonthlyReport`` -> ``monthly-report``."""
    parts = re.split(r"[\s_]+", value.strip())
    joined = "-".join(re.sub(r"[A-Z]", lambda m: f"-{m.group(0).lower()}", part) for part in parts)
    return joined.lstrip("-").lower()


def title_words(value: str) -> str:
    """``sample-form`` -> ``Sample Form``."""
    return " ".join(chunk[:1].upper() + chunk[1:] for chunk in value.split("-"))


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist."""
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def relative_to_root(path: Path, root: Path) -> str:
    """Render *path* relative to *root* when possible (for display only)."""
    try:
        return str(path.resolve().relative_to(root.resolve()))
    except ValueError:
        return str(path)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def print_info(message: str) -> None:
    """Print a plain informational message."""
    console.print(message)


def print_created(path: Path | str, existed: bool) -> None:
    """Report a written artifact, distinguishing overwrites."""
    verb = "Overwrote" if existed else "Created"
    console.print(f"  [green]+[/green] {verb} [bold]{path}[/bold]")


def print_skipped(path: Path | str) -> None:
    """Report an artifact that was left untouched."""
    console.print(f"  [dim]- Skipped {path}[/dim]")

"""Interactive questions asked by the commands.

Thin wrappers around ``rich.prompt`` so every question is rendered through the
shared console. ``KeyboardInterrupt`` and ``EOFError`` raised while waiting
for input are not caught here; the CLI treats both as a cancellation.
"""

from __future__ import annotations

from rich.prompt import Confirm, Prompt

from modsync.config import GeneratorSettings, PromptChoice
from modsync.utils import console


class Cancelled(Exception):
    """The user declined to continue."""


class Prompter:
    """Asks questions on the console.

    With ``assume_yes`` every confirmation is answered with its default
    without reading input; selections still require an answer.
    """

    def __init__(self, assume_yes: bool = False) -> None:
        self.assume_yes = assume_yes

    # -- Primitives --------------------------------------------------------

    def confirm(self, message: str, default: bool = True) -> bool:
        if self.assume_yes:
            return default
        return Confirm.ask(message, default=default, console=console)

    def select(self, message: str, choices: list[PromptChoice]) -> str:
        """Pick one of *choices*; returns the chosen ``value``."""
        console.print(f"[bold]{message}[/bold]")
        for number, choice in enumerate(choices, start=1):
            console.print(f"  [cyan]{number}[/cyan]. {choice.name}")
        answer = Prompt.ask(
            "Choice",
            choices=[str(number) for number in range(1, len(choices) + 1)],
            default="1",
            console=console,
        )
        return choices[int(answer) - 1].value

    def checkbox(self, message: str, options: list[str]) -> list[str]:
        """Pick any subset of *options* as a comma separated answer."""
        console.print(f"[bold]{message}[/bold]")
        console.print(f"  [dim]{', '.join(options)}[/dim]")
        while True:
            answer = Prompt.ask("Comma separated", console=console)
            picked = [item.strip() for item in answer.split(",") if item.strip()]
            unknown = [item for item in picked if item not in options]
            if not unknown:
                return picked
            console.print(f"[yellow]Unknown option(s): {', '.join(unknown)}[/yellow]")

    # -- Module questions --------------------------------------------------

    def generation_kinds(self, settings: GeneratorSettings) -> list[str]:
        """Ask which artifact kinds to generate."""
        choice = self.select("Select the module type to generate:", settings.prompt_choices)
        kinds = settings.resolve_selection(choice)
        if kinds is not None:
            return kinds
        return self.checkbox("Select folders/files to generate:", list(settings.kinds))

    def confirm_nested(self, module_path: str, module_name: str) -> bool:
        return self.confirm(
            f"The path '{module_path}' is nested. Treat '{module_name}' as a child module?",
            default=True,
        )

    def overwrite_existing(self, folder: str) -> bool:
        """Ask before generating into an existing folder.

        Raises:
            Cancelled: If the user declines.
        """
        if self.assume_yes:
            return False
        overwrite = Confirm.ask(
            f"The folder '{folder}' already exists. Overwrite existing files?",
            default=False,
            console=console,
        )
        if not overwrite:
            raise Cancelled("Aborted by user.")
        return True

    def move_destination(self, module_name: str) -> str:
        """Ask where a module should go when no target was given."""
        return self.select(
            f'Where do you want to move "{module_name}"?',
            [
                PromptChoice(name="Promote to top-level module", value="promote"),
                PromptChoice(name="Move to another parent module", value="move"),
            ],
        )

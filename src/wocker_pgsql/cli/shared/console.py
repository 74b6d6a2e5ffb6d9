"""Shared console and prompts for CLI commands.

This module provides the Rich console wrapper used for all operator
output, plus the interactive prompts commands fall back to when a
required value was not passed on the command line.
"""

from collections.abc import Callable, Sequence
from typing import Protocol

import typer
from rich.console import Console, ConsoleRenderable
from rich.panel import Panel


class Prompter(Protocol):
    """Interactive prompts used when command arguments are missing."""

    def prompt_text(
        self,
        message: str,
        *,
        default: str | None = None,
        validate: Callable[[str], str | None] | None = None,
    ) -> str: ...

    def prompt_password(self, message: str) -> str: ...

    def prompt_confirm(self, message: str, *, default: bool = False) -> bool: ...

    def prompt_select(
        self, message: str, options: Sequence[str], *, default: str | None = None
    ) -> str: ...


class CLIConsole:
    """Rich console wrapper for consistent CLI output."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the CLI console."""
        self.console = console or Console()
        self.err_console = Console(stderr=True)

    def print(self, msg: ConsoleRenderable | str | None = None) -> None:
        self.console.print(msg)

    def info(self, msg: str) -> None:
        self.console.print(f"[cyan]ℹ[/cyan]  {msg}")

    def ok(self, msg: str) -> None:
        self.console.print(f"[green]✅[/green] {msg}")

    def error(self, msg: str) -> None:
        self.err_console.print(f"[red]❌[/red] {msg}")

    def warn(self, msg: str) -> None:
        self.console.print(f"[yellow]⚠️[/yellow]  {msg}")

    def confirm_action(
        self, action: str, *, warning: str | None = None, force: bool = False
    ) -> bool:
        """Ask before a destructive action; ``force`` answers yes.

        Returns:
            True if the operator confirmed
        """
        if force:
            return True

        body = f"[bold red]⚠️  {action}[/bold red]"
        if warning:
            body += f"\n\n[yellow]{warning}[/yellow]"
        self.console.print(
            Panel(body, title="Confirmation Required", border_style="red")
        )

        return self.prompt_confirm("Are you sure you want to proceed?")

    def handle_error(
        self, message: str, details: str | None = None, exit_code: int = 1
    ) -> None:
        """Handle an error by printing a message and exiting.

        Args:
            message: Error message to display
            details: Optional additional details
            exit_code: Exit code to use
        """
        self.err_console.print(f"\n[bold red]❌ {message}[/bold red]\n")
        if details:
            self.err_console.print(Panel(details, title="Details", border_style="red"))
        raise typer.Exit(exit_code)

    # =========================================================================
    # Prompts
    # =========================================================================

    def _ask(self, message: str, *, password: bool = False) -> str:
        try:
            return self.console.input(message, password=password)
        except (KeyboardInterrupt, EOFError):
            self.console.print("\n[dim]Cancelled.[/dim]")
            raise typer.Exit(130) from None

    def prompt_text(
        self,
        message: str,
        *,
        default: str | None = None,
        validate: Callable[[str], str | None] | None = None,
    ) -> str:
        """Prompt for a line of text.

        Args:
            message: Question to display
            default: Value used when the answer is empty
            validate: Returns an error message for invalid answers, else None

        Returns:
            The validated answer
        """
        suffix = f" [dim]\\[{default}][/dim]" if default else ""
        while True:
            answer = self._ask(f"[bold]{message}[/bold]{suffix}: ").strip()
            if not answer and default is not None:
                answer = default
            if not answer:
                self.console.print("[red]A value is required[/red]")
                continue
            problem = validate(answer) if validate else None
            if problem:
                self.console.print(f"[red]{problem}[/red]")
                continue
            return answer

    def prompt_password(self, message: str) -> str:
        return self._ask(f"[bold]{message}[/bold]: ", password=True)

    def prompt_confirm(self, message: str, *, default: bool = False) -> bool:
        hint = "\\[Y/n]" if default else "\\[y/N]"
        answer = self._ask(f"\n[bold]{message}[/bold] {hint}: ").strip().lower()
        if not answer:
            return default
        return answer in ("y", "yes")

    def prompt_select(
        self, message: str, options: Sequence[str], *, default: str | None = None
    ) -> str:
        """Pick one of ``options`` by number.

        Args:
            message: Question to display
            options: Choices, shown in order
            default: Choice used when the answer is empty

        Returns:
            The chosen option

        Raises:
            typer.Exit: If there is nothing to choose from or the operator
                        enters 0
        """
        if not options:
            self.handle_error(f"{message}: nothing to choose from")

        choices = list(options)
        preselected = choices.index(default) + 1 if default in choices else 1

        self.console.print(f"\n[yellow]{message}[/yellow]")
        for number, option in enumerate(choices, 1):
            marker = "[bold cyan]→[/bold cyan]" if number == preselected else " "
            self.console.print(f"  {marker} [bold]{number}.[/bold] {option}")
        self.console.print("    [bold]0.[/bold] Cancel")

        while True:
            answer = self._ask(f"Enter choice [{preselected}]: ").strip()
            if not answer:
                return choices[preselected - 1]
            if answer == "0":
                self.console.print("[dim]Cancelled.[/dim]")
                raise typer.Exit(1)
            if answer.isdigit() and 1 <= int(answer) <= len(choices):
                return choices[int(answer) - 1]
            self.console.print(
                f"[red]Please enter a number between 0 and {len(choices)}[/red]"
            )


# Shared console instance for consistent output
console = CLIConsole()

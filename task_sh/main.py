"""
Main entry point for task-sh CLI.

This module provides the command-line interface for task-sh,
handling command-line arguments and running the generation pipeline.
"""

import asyncio
import contextlib
import importlib.metadata
import logging
import sys
from enum import IntEnum
from pathlib import Path
from typing import List, Optional

import typer
from keyring.errors import KeyringError
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from typer.completion import get_completion_script

from task_sh import __version__
from task_sh.config import api_manager
from task_sh.config.environment import (
    RuntimeConfig,
    load_env_file,
    load_runtime_config,
)
from task_sh.config.settings import Settings
from task_sh.models.command_models import Shell
from task_sh.models.errors import (
    BackendError,
    BackendErrorReason,
    InvalidInputError,
    ParseError,
)
from task_sh.translator.generator import CommandGenerator
from task_sh.ui.presenter import Presenter
from task_sh.utils import platform_info
from task_sh.utils.logging import initialize_logging
from task_sh.utils.security import secure_string

logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    OK = 0
    INVALID_INPUT = 2
    BACKEND_ERROR = 3
    PARSE_ERROR = 4
    BLOCKED = 5
    CONFIG_ERROR = 6
    INTERRUPTED = 130


COMMAND_NAME = "task"

# Create Typer app
app = typer.Typer(
    name=COMMAND_NAME,
    help="Turn a plain-language task description into a vetted shell command",
    context_settings={"help_option_names": ["-h", "--help"]},
)

# Set up console for rich output
console = Console()


def show_main_help() -> None:
    """Display custom formatted main help."""
    console.print(
        Panel.fit(
            "[bold green]task-sh - Natural Language to Shell Commands[/]",
            border_style="green",
        )
    )

    commands_table = Table(
        title="Available Commands", show_header=True, box=box.ROUNDED
    )
    commands_table.add_column("Command", style="cyan", width=25)
    commands_table.add_column("Description", style="white")
    commands_table.add_row("gen", "Generate a shell command from a description")
    commands_table.add_row("completions", "Print the completion script for bash or zsh")
    console.print(commands_table)

    options_panel = Panel(
        "[bold]Global Options:[/]\n\n"
        "[cyan]--version, -v[/]       Show application version\n"
        "[cyan]--config PATH[/]       Use an alternative settings file\n"
        "[cyan]--reset-api-key[/]     Reset stored OpenAI API key\n"
        "[cyan]--install-completion[/] Install completion for the current shell\n"
        "[cyan]--help, -h[/]          Show this help message",
        title="Global Options",
        border_style="blue",
    )
    console.print(options_panel)

    examples_panel = Panel(
        "[bold]Quick Start:[/]\n\n"
        "# Generate a command\n"
        '[green]task gen "list files in the current directory sorted by size"[/]\n\n'
        "# Target zsh and show the raw model reply\n"
        '[green]task gen --shell zsh --verbose "show the ten largest files"[/]\n\n'
        "# Read the description from stdin\n"
        '[green]echo "count lines in all python files" | task gen[/]',
        title="Usage Examples",
        border_style="green",
    )
    console.print(examples_panel)


def get_version() -> str:
    """Get the installed version of task-sh."""
    try:
        return importlib.metadata.version("task-sh")
    except importlib.metadata.PackageNotFoundError:
        return __version__


def prompt_for_api_key() -> Optional[str]:
    """
    Ask for an API key on the terminal and store it in the keyring.

    Returns:
        Optional[str]: The stored key, or None if it was invalid or could not
        be saved.
    """
    console.print(
        Panel(
            "Please enter your OpenAI API key.\n"
            "Your API key will be stored securely in your system's keyring.\n"
            "You can find your API key at: "
            "[link]https://platform.openai.com/api-keys[/link]",
            title="Set API Key",
            border_style="green",
        )
    )

    api_key = typer.prompt("Enter your OpenAI API key", hide_input=True)

    if not api_manager.is_api_key_valid(api_key):
        console.print("[bold red]Invalid API key format.[/]")
        return None

    if not api_manager.save_api_key(api_key):
        console.print("[bold red]Failed to save API key.[/]")
        return None

    console.print("[bold green]API key saved successfully![/]")
    return api_key


@app.callback(invoke_without_command=True)
def callback(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None, "--version", "-v", help="Show the application version and exit."
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", help="Path to an alternative settings file."
    ),
    reset_api_key: bool = typer.Option(
        False, "--reset-api-key", help="Reset the stored OpenAI API key."
    ),
) -> None:
    """task-sh - Natural language to shell commands."""
    load_env_file()
    ctx.obj = {"config_file": config}

    # Only process these options if no command was invoked
    if ctx.invoked_subcommand is None:
        if version:
            console.print(f"[bold green]task-sh Version:[/] {get_version()}")
            raise typer.Exit()

        if reset_api_key:
            if api_manager.delete_api_key():
                console.print("[bold green]API key deleted successfully.[/]")
            else:
                console.print("[bold red]Failed to delete API key.[/]")
                raise typer.Exit(1)

            set_new_key = typer.confirm(
                "Do you want to set a new API key now?", default=True
            )
            if set_new_key and prompt_for_api_key() is None:
                console.print(
                    "You will be prompted to enter an API key the next time "
                    "you run task-sh."
                )
                raise typer.Exit(1)

            raise typer.Exit()

        show_main_help()
        raise typer.Exit()


def read_description(parts: Optional[List[str]]) -> str:
    """
    Join the positional description words, or read stdin when none are given.

    Args:
        parts (Optional[List[str]]): Words from the command line.

    Returns:
        str: The raw description (may be empty).
    """
    text = " ".join(parts or [])
    if not text.strip() and not sys.stdin.isatty():
        logger.debug("Reading description from stdin")
        text = sys.stdin.read()
    return text


def resolve_shell(flag: Optional[str], settings: Settings) -> str:
    """
    Pick the target shell.

    The ``--shell`` flag wins, then the settings file, then the login shell
    when it is supported, then bash.
    """
    for candidate in (flag, settings.get("generation", "default_shell")):
        if candidate:
            return candidate.strip().lower()
    return platform_info.detect_login_shell() or Shell.BASH.value


def _ensure_credential(config: RuntimeConfig) -> RuntimeConfig:
    if config.test_mode or config.api_key:
        return config
    if not sys.stdin.isatty():
        return config

    api_key = prompt_for_api_key()
    if api_key is None:
        return config
    return config.model_copy(update={"api_key": api_key})


# Define typer arguments at module level to avoid B008
_GEN_DESCRIPTION_ARG = typer.Argument(
    None, help="Plain-language description of the task. Read from stdin if omitted."
)


@app.command()
def gen(
    ctx: typer.Context,
    description: List[str] = _GEN_DESCRIPTION_ARG,
    shell: Optional[str] = typer.Option(
        None, "--shell", "-s", help="Target shell: bash or zsh."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show the raw model reply."
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help="OpenAI model to use. Find more models at https://platform.openai.com/docs/models",
    ),
    system_prompt: Optional[str] = typer.Option(
        None, "--system-prompt", help="Replace the default system prompt."
    ),
    no_spinner: bool = typer.Option(
        False, "--no-spinner", help="Do not show a progress spinner."
    ),
    api_key: Optional[str] = typer.Option(
        None, "--api-key", help="OpenAI API key (overrides stored key)."
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug mode."),
) -> None:
    """
    Generate a shell command from a plain-language description.

    The suggestion is checked by the safety filter before it is shown.
    Nothing is ever executed.
    """
    config_file = (ctx.obj or {}).get("config_file")
    settings = Settings(config_file)
    initialize_logging(settings, debug=debug)

    verbose = verbose or bool(settings.get("ui", "verbose", False))
    spinner = not no_spinner and bool(settings.get("ui", "spinner", True))
    presenter = Presenter(console=console, verbose=verbose)

    if api_key and not api_manager.is_api_key_valid(api_key):
        console.print("[bold red]Invalid API key format.[/]")
        raise typer.Exit(ExitCode.CONFIG_ERROR)

    text = read_description(description)
    target_shell = resolve_shell(shell, settings)

    try:
        runtime_config = load_runtime_config(
            settings, api_key=api_key, model=model, system_prompt=system_prompt
        )
    except KeyringError as e:
        logger.error(f"Keyring error while reading the API key: {e}")
        presenter.render_error(e)
        raise typer.Exit(ExitCode.CONFIG_ERROR) from e

    # Reject bad input before asking for a key
    try:
        request = CommandGenerator(runtime_config).build_request(text, target_shell)
    except InvalidInputError as e:
        presenter.render_error(e)
        raise typer.Exit(ExitCode.INVALID_INPUT) from e

    runtime_config = _ensure_credential(runtime_config)

    if debug:
        console.print(f"[dim]Model: {runtime_config.model}[/]")
        console.print(f"[dim]Shell: {target_shell}[/]")
        console.print(
            f"[dim]API key: {secure_string(runtime_config.api_key or '')}[/]"
        )
        if runtime_config.test_mode:
            console.print("[dim]Test mode: using fixed backend reply[/]")

    generator = CommandGenerator(runtime_config)
    status = (
        console.status("[bold green]Generating command...[/]", spinner="dots")
        if spinner
        else contextlib.nullcontext()
    )

    try:
        with status:
            outcome = asyncio.run(
                generator.run(request, verbose=verbose)
            )
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/]")
        raise typer.Exit(ExitCode.INTERRUPTED) from None
    except BackendError as e:
        presenter.render_error(e)
        if e.reason is BackendErrorReason.MISSING_CREDENTIAL:
            raise typer.Exit(ExitCode.CONFIG_ERROR) from e
        raise typer.Exit(ExitCode.BACKEND_ERROR) from e
    except ParseError as e:
        presenter.render_error(e)
        raise typer.Exit(ExitCode.PARSE_ERROR) from e

    presenter.render(outcome)

    if outcome.refused:
        raise typer.Exit(ExitCode.BLOCKED)


_COMPLETIONS_SHELL_ARG = typer.Argument(
    ..., help="Shell to generate completions for.", case_sensitive=False
)


@app.command()
def completions(shell: Shell = _COMPLETIONS_SHELL_ARG) -> None:
    """Print the shell completion script for bash or zsh."""
    typer.echo(
        get_completion_script(
            prog_name=COMMAND_NAME,
            complete_var=f"_{COMMAND_NAME.upper()}_COMPLETE",
            shell=shell.value,
        )
    )


if __name__ == "__main__":
    app()

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from cargo_check_i18n.config import get_config_path, write_example_config

config_app = typer.Typer(help="Manage the configuration file.")
console = Console()


@config_app.command("path")
def path(
    config: Annotated[Path | None, typer.Option("--config", help="Path to the configuration file.")] = None,
) -> None:
    """Show where the configuration file is read from."""
    console.print(str(get_config_path(config)), highlight=False, soft_wrap=True)


@config_app.command("init")
def init(
    config: Annotated[Path | None, typer.Option("--config", help="Path to the configuration file.")] = None,
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing file.")] = False,
) -> None:
    """Write an example configuration file."""
    config_path = get_config_path(config)
    if not write_example_config(config_path, force=force):
        console.print(f"[yellow]{escape(str(config_path))} already exists.[/yellow] Use --force to overwrite it.")
        raise typer.Exit(1)
    console.print(f"[green]Created[/green] {escape(str(config_path))}. Fill in the api_key to get started.")

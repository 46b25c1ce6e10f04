"""Commands for inspecting and invalidating the translation cache."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from cargo_check_i18n.cache import SqliteCacheStore, default_cache_path, get_engine
from cargo_check_i18n.config import Settings, get_config_path, load_settings
from cargo_check_i18n.errors import CacheError, ConfigError

cache_app = typer.Typer(help="Manage the translation cache.")
console = Console()


def _resolve_cache_path(project: Path, config: Path | None) -> Path:
    config_path = get_config_path(config)
    settings = Settings()
    if config_path.exists():
        try:
            settings = load_settings(config_path, require_api_key=False)
        except ConfigError as exc:
            console.print(f"[red]{escape(str(exc))}[/red]")
            raise typer.Exit(2) from None
    return settings.cache_path or default_cache_path(project.resolve())


@cache_app.command("path")
def path(
    project: Annotated[Path, typer.Argument(help="Path to the Cargo project.")] = Path("."),
    config: Annotated[Path | None, typer.Option("--config", help="Path to the configuration file.")] = None,
) -> None:
    """Show where translations are cached."""
    console.print(str(_resolve_cache_path(project, config)), highlight=False, soft_wrap=True)


@cache_app.command("clear")
def clear(
    project: Annotated[Path, typer.Argument(help="Path to the Cargo project.")] = Path("."),
    config: Annotated[Path | None, typer.Option("--config", help="Path to the configuration file.")] = None,
) -> None:
    """Remove every cached translation."""
    cache_path = _resolve_cache_path(project, config)
    if not cache_path.exists():
        console.print(f"No cache at {escape(str(cache_path))}.")
        return

    store = SqliteCacheStore(get_engine(cache_path))

    async def _run() -> int:
        try:
            return await store.clear()
        finally:
            await store.dispose()

    try:
        removed = asyncio.run(_run())
    except CacheError as exc:
        console.print(f"[red]Could not clear cache: {escape(str(exc))}[/red]")
        raise typer.Exit(1) from None
    console.print(f"[green]Removed[/green] {removed} cached translation(s) from {escape(str(cache_path))}")

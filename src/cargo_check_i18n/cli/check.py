"""The ``check`` command: run ``cargo check`` and translate its diagnostics."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Annotated

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from cargo_check_i18n.cache import InMemoryCacheStore, SqliteCacheStore, default_cache_path, get_engine
from cargo_check_i18n.cli.render import DiagnosticRenderer
from cargo_check_i18n.config import Settings, get_config_path, load_settings, write_example_config
from cargo_check_i18n.core.pipeline import Emit, PipelineStats, run_pipeline
from cargo_check_i18n.core.ports.cache import TranslationCache
from cargo_check_i18n.core.stream import DiagnosticStreamReader
from cargo_check_i18n.errors import CargoLaunchError, ConfigError
from cargo_check_i18n.llm.client import TranslationClient

logger = logging.getLogger(__name__)
console = Console(stderr=True)

# cargo JSON lines embed the full rendered message and can exceed asyncio's 64 KiB default
_STREAM_LIMIT = 16 * 1024 * 1024


def configure_logging(verbose: int) -> None:
    level = logging.WARNING if verbose <= 0 else logging.INFO if verbose == 1 else logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def open_cache(settings: Settings, project_dir: Path, no_cache: bool = False) -> TranslationCache:
    if no_cache or not settings.cache_enabled:
        return InMemoryCacheStore()
    cache_path = settings.cache_path or default_cache_path(project_dir)
    try:
        return SqliteCacheStore(get_engine(cache_path))
    except OSError as exc:
        logger.warning("Cannot open translation cache at %s, continuing without it: %s", cache_path, exc)
        return InMemoryCacheStore()


async def run_check(
    project_dir: Path,
    settings: Settings,
    cache: TranslationCache,
    emit: Emit,
    extra_args: list[str] | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> tuple[int, PipelineStats]:
    """Run ``cargo check`` in *project_dir* and pipe its diagnostics through the translator.

    Returns the cargo exit code and the pipeline statistics.
    """
    cargo = os.getenv("CARGO", "cargo")
    cmd = [cargo, "check", "--message-format=json", *(extra_args or [])]
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(project_dir),
            stdout=asyncio.subprocess.PIPE,
            limit=_STREAM_LIMIT,
        )
    except OSError as exc:
        await cache.dispose()
        raise CargoLaunchError(f"Could not launch '{cargo}': {exc}") from exc

    assert process.stdout is not None

    client = TranslationClient(settings, cache, http_client=http_client)
    try:
        stats = await run_pipeline(DiagnosticStreamReader(process.stdout), client, settings.language, emit)
    except BaseException:
        if process.returncode is None:
            process.kill()
        await process.wait()
        raise
    finally:
        await client.aclose()
        await cache.dispose()

    return await process.wait(), stats


def check(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Path to the Cargo project.")] = Path("."),
    config: Annotated[Path | None, typer.Option("--config", help="Path to the configuration file.")] = None,
    no_cache: Annotated[bool, typer.Option("--no-cache", help="Do not read or write the translation cache.")] = False,
    verbose: Annotated[int, typer.Option("--verbose", "-v", count=True, help="Increase log verbosity.")] = 0,
) -> None:
    """Run cargo check and show its diagnostics translated. Extra arguments are passed to cargo."""
    configure_logging(verbose)

    config_path = get_config_path(config)
    if not config_path.exists():
        write_example_config(config_path)
        console.print(
            f"Example configuration {escape(str(config_path))} has been created. "
            "Please fill in the api_key and try again."
        )
        return

    try:
        settings = load_settings(config_path)
    except ConfigError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(2) from None

    project_dir = path.resolve()
    if not project_dir.is_dir():
        console.print(f"[red]Project directory not found: {escape(str(project_dir))}[/red]")
        raise typer.Exit(2)

    cache = open_cache(settings, project_dir, no_cache)
    renderer = DiagnosticRenderer()
    try:
        exit_code, stats = asyncio.run(run_check(project_dir, settings, cache, renderer, list(ctx.args)))
    except CargoLaunchError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(127) from None

    if stats.untranslated:
        console.print(f"[yellow]{stats.untranslated} message(s) shown untranslated.[/yellow]")
    if exit_code != 0:
        raise typer.Exit(exit_code)

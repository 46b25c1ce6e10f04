import typer

from cargo_check_i18n.cli.cache import cache_app
from cargo_check_i18n.cli.check import check
from cargo_check_i18n.cli.config import config_app

_PASSTHROUGH = {"allow_extra_args": True, "ignore_unknown_options": True}

app = typer.Typer(
    name="cargo-check-i18n",
    help="cargo-check-i18n: run cargo check with diagnostics translated by a language model.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("check", context_settings=_PASSTHROUGH)(check)
# `cargo check-i18n` runs this binary as `cargo-check-i18n check-i18n ...`
app.command("check-i18n", context_settings=_PASSTHROUGH, hidden=True)(check)
app.add_typer(cache_app, name="cache")
app.add_typer(config_app, name="config")


def main() -> None:
    app()

"""Configuration commands."""

from typing import Annotated

import tomli_w
import typer

from appsweep.cli.types import get_config
from appsweep.core.config import ConfigError, SweepConfig, save_config
from appsweep.core.paths import ensure_config_dir, get_config_path
from appsweep.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or create the appsweep configuration.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Print the effective configuration as TOML."""
    config = get_config()
    console.print(f"[dim]# {get_config_path()}[/dim]")
    console.print(tomli_w.dumps(config.model_dump()), markup=False, highlight=False)


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with default settings."""
    path = get_config_path()
    if path.exists() and not force:
        print_info(f"Config already exists: {path} (use --force to overwrite)")
        return

    try:
        ensure_config_dir()
        saved = save_config(SweepConfig(), path)
    except (ConfigError, RuntimeError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {saved}")


@app.command()
def path() -> None:
    """Print the config file location."""
    console.print(str(get_config_path()), markup=False, highlight=False)

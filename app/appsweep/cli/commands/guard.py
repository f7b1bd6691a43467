"""Safety guard commands.

Answers "may I delete this?" and "is this application installed?"
without touching anything.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from appsweep.cli.display import create_check_table
from appsweep.cli.types import OutputFormat, get_config, get_guard
from appsweep.utils.formatting import console, print_info

app = typer.Typer(
    help="Query the deletion safety guard.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def check(
    paths: Annotated[list[Path], typer.Argument(help="Paths to classify.")],
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format.", case_sensitive=False),
    ] = OutputFormat.TABLE,
) -> None:
    """Show whether paths may be deleted and how risky that is."""
    guard = get_guard(get_config())

    checks = []
    for path in paths:
        path_str = str(path.expanduser().absolute())
        checks.append((path_str, guard.is_safe_to_delete(path_str), guard.get_deletion_advice(path_str)))

    if output_format == OutputFormat.JSON:
        data = [
            {
                "path": path_str,
                "safe_to_delete": safe,
                "risk_level": advice.risk_level.name.lower(),
                "advice": advice.message,
            }
            for path_str, safe, advice in checks
        ]
        console.print_json(json.dumps(data))
        return

    console.print(create_check_table(checks))


@app.command()
def installed(
    identifier: Annotated[str, typer.Argument(help="Bundle identifier or application name.")],
) -> None:
    """Check whether an application is installed or running.

    Exits with code 0 if it is, 1 otherwise.
    """
    guard = get_guard(get_config())

    if guard.is_application_installed(identifier):
        print_info(f"{identifier} is installed.")
        return

    print_info(f"{identifier} is not installed.")
    raise typer.Exit(code=1)

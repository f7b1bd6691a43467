"""Residual file commands.

Scans an application's leftovers in ``~/Library`` and cleans the ones
the safety guard allows.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from appsweep.cli.commands.shred import confirm_and_shred
from appsweep.cli.display import create_residue_table
from appsweep.cli.types import AssessedFile, OutputFormat, assess_files, get_config, get_guard
from appsweep.residue.models import ApplicationIdentity
from appsweep.residue.scanner import ResidualFileScanner
from appsweep.safety.models import DeletionRiskLevel
from appsweep.shredder.models import ShredRequest
from appsweep.utils.formatting import (
    console,
    format_size,
    print_error,
    print_info,
    print_success,
)

app = typer.Typer(
    help="Find and remove application leftovers.",
    invoke_without_command=True,
    no_args_is_help=True,
)

NameArgument = Annotated[str, typer.Argument(help="Application display name, e.g. 'Slack'.")]
BundleIdOption = Annotated[
    str | None,
    typer.Option("--bundle-id", "-b", help="Bundle identifier, e.g. 'com.tinyspeck.slackmacgap'."),
]


@app.command()
def scan(
    name: NameArgument,
    bundle_id: BundleIdOption = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format.", case_sensitive=False),
    ] = OutputFormat.TABLE,
    export_path: Annotated[
        Path | None,
        typer.Option("--export", "-e", help="Export results to JSON file."),
    ] = None,
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-l", min=1, help="Limit number of results."),
    ] = None,
) -> None:
    """List leftovers of an application with their safety verdict."""
    identity = _make_identity(name, bundle_id)
    files = _scan(identity)

    if not files:
        if output_format == OutputFormat.JSON:
            console.print_json("[]")
        else:
            print_success(f"No leftovers found for {identity.name}.")
        return

    display_files = files[:limit] if limit is not None else files

    if export_path is not None:
        _export_results(files, export_path)

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps([f.to_dict() for f in display_files]))
        return

    console.print(create_residue_table(display_files, title=f"Leftovers of {identity.name}"))

    total = sum(f.residual.size_bytes for f in files)
    deletable = sum(1 for f in files if f.safe)
    console.print(
        f"\n[dim]Found {len(files)} item(s), {format_size(total)} total, "
        f"{deletable} deletable[/dim]"
    )
    if limit is not None and len(display_files) < len(files):
        console.print(f"[dim](showing {len(display_files)} of {len(files)})[/dim]")


@app.command()
def clean(
    name: NameArgument,
    bundle_id: BundleIdOption = None,
    include_risky: Annotated[
        bool,
        typer.Option("--include-risky", help="Also shred high-risk application settings."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be shredded."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Shred the leftovers of an application that the guard allows.

    Protected items are never touched. High-risk items (settings of
    browsers, IDEs, messengers) are skipped unless --include-risky is set.
    """
    config = get_config()
    guard = get_guard(config)
    identity = _make_identity(name, bundle_id)

    files = assess_files(ResidualFileScanner().scan(identity), guard)
    if not files:
        print_success(f"No leftovers found for {identity.name}.")
        return

    selected = [
        f
        for f in files
        if f.safe and (include_risky or f.advice.risk_level < DeletionRiskLevel.HIGH)
    ]
    skipped = len(files) - len(selected)
    if skipped:
        print_info(f"Skipping {skipped} protected or high-risk item(s).")

    requests = [
        ShredRequest(path=f.residual.path, size_bytes=f.residual.size_bytes) for f in selected
    ]
    confirm_and_shred(requests, config=config, guard=guard, dry_run=dry_run, yes=yes)


def _make_identity(name: str, bundle_id: str | None) -> ApplicationIdentity:
    try:
        return ApplicationIdentity(name=name, bundle_identifier=bundle_id)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def _scan(identity: ApplicationIdentity) -> list[AssessedFile]:
    guard = get_guard(get_config())
    return assess_files(ResidualFileScanner().scan(identity), guard)


def _export_results(files: list[AssessedFile], export_path: Path) -> None:
    """Export scan results to a JSON file."""
    export_path = export_path.resolve()
    if export_path.is_dir():
        print_error(f"Export path is a directory: {export_path}")
        raise typer.Exit(code=1)

    try:
        export_path.parent.mkdir(parents=True, exist_ok=True)
        export_path.write_text(json.dumps([f.to_dict() for f in files], indent=2))
        print_info(f"Results exported to {export_path}")
    except OSError as e:
        print_error(f"Failed to export: {e}")
        raise typer.Exit(code=1) from e

"""Shred command implementation.

Securely deletes arbitrary files and directories after re-checking each
of them with the safety guard.
"""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Annotated

import typer
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from appsweep.cli.display import create_plan_table, create_results_table, print_report_summary
from appsweep.cli.types import get_config, get_guard
from appsweep.core.config import SweepConfig
from appsweep.safety.guard import SafetyGuard
from appsweep.shredder.engine import Shredder
from appsweep.shredder.models import ShredProgress, ShredReport, ShredRequest
from appsweep.utils.formatting import console, print_info, print_warning

_POLL_SECONDS = 0.1


def shred(
    paths: Annotated[
        list[Path],
        typer.Argument(help="Files or directories to destroy."),
    ],
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be shredded."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Overwrite and permanently delete files or directories.

    Paths refused by the safety guard are reported and left untouched.
    This cannot be undone.

    Examples:
        appsweep shred ~/Desktop/old-export.zip
        appsweep shred ~/Library/Caches/com.example.app --dry-run
    """
    config = get_config()
    guard = get_guard(config)

    queue = Shredder(block_size=config.block_size, guard=guard)
    for path in paths:
        queue.add(path)
    requests = [item.request for item in queue.items]

    confirm_and_shred(requests, config=config, guard=guard, dry_run=dry_run, yes=yes)


def confirm_and_shred(
    requests: list[ShredRequest],
    *,
    config: SweepConfig,
    guard: SafetyGuard,
    dry_run: bool,
    yes: bool,
) -> None:
    """Show the plan, ask for confirmation and shred.

    Raises:
        typer.Exit: With code 1 if any item failed.
    """
    if not requests:
        print_info("Nothing to shred.")
        return

    console.print(create_plan_table(requests, dry_run=dry_run))

    if dry_run:
        print_info(f"Dry-run: {len(requests)} path(s) would be shredded.")
        return

    if not yes:
        confirmed = typer.confirm(
            f"\nPermanently shred {len(requests)} path(s)? This cannot be undone.",
            default=config.confirm_by_default,
        )
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    report = run_shredder(requests, config=config, guard=guard)

    console.print(create_results_table(report))
    print_report_summary(report, total=len(requests))

    if report.failed:
        raise typer.Exit(code=1)


def run_shredder(
    requests: list[ShredRequest],
    *,
    config: SweepConfig,
    guard: SafetyGuard,
) -> ShredReport:
    """Shred on a worker thread with a live progress bar.

    Ctrl-C requests cancellation: the block being written completes and
    no further item is started.
    """
    with Progress(
        TextColumn("[info]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Shredding", total=len(requests))

        def on_progress(snapshot: ShredProgress) -> None:
            progress.update(
                task,
                completed=snapshot.completed,
                description=snapshot.current_item_name or "Shredding",
            )

        shredder = Shredder(block_size=config.block_size, guard=guard, on_progress=on_progress)

        with ThreadPoolExecutor(max_workers=1) as pool:
            future = pool.submit(shredder.shred, requests)
            while True:
                try:
                    return future.result(timeout=_POLL_SECONDS)
                except TimeoutError:
                    continue
                except KeyboardInterrupt:
                    print_warning("Cancelling after the current block...")
                    shredder.cancel()
                    return future.result()

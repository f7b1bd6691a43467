"""Rich tables and summaries shared by the CLI commands."""

from rich.table import Table

from appsweep.cli.types import AssessedFile
from appsweep.safety.models import DeletionAdvice
from appsweep.shredder.models import ShredReport, ShredRequest
from appsweep.utils.formatting import console, format_size, print_success, print_warning


def _risk_cell(advice: DeletionAdvice) -> str:
    level = advice.risk_level
    return f"[{level.style}]{level.marker} {level.name.lower()}[/]"


def create_residue_table(files: list[AssessedFile], title: str) -> Table:
    """Build a table of residual files with category, size and risk.

    Args:
        files: Assessed residual files to display.
        title: Table title.

    Returns:
        Rich Table for display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Path", overflow="fold")
    table.add_column("Category", style="category", no_wrap=True)
    table.add_column("Size", justify="right", style="info", no_wrap=True)
    table.add_column("Safe", justify="center", no_wrap=True)
    table.add_column("Risk", no_wrap=True)

    for item in files:
        safe = "[success]yes[/]" if item.safe else "[error]no[/]"
        table.add_row(
            item.residual.path,
            item.residual.category.label,
            format_size(item.residual.size_bytes),
            safe,
            _risk_cell(item.advice),
        )

    return table


def create_check_table(checks: list[tuple[str, bool, DeletionAdvice]]) -> Table:
    """Build a table of guard verdicts for arbitrary paths."""
    table = Table(
        title="Safety Check",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Path", overflow="fold")
    table.add_column("Verdict", no_wrap=True)
    table.add_column("Risk", no_wrap=True)
    table.add_column("Advice", style="muted")

    for path, safe, advice in checks:
        verdict = "[success]deletable[/]" if safe else "[error]protected[/]"
        table.add_row(path, verdict, _risk_cell(advice), advice.message)

    return table


def create_plan_table(requests: list[ShredRequest], dry_run: bool = False) -> Table:
    """Build a table of paths about to be shredded."""
    title = "Planned Shredding (dry-run)" if dry_run else "Planned Shredding"
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Path", overflow="fold")
    table.add_column("Size", justify="right", style="info", no_wrap=True)

    for request in requests:
        table.add_row(request.path, format_size(request.size_bytes))

    return table


def create_results_table(report: ShredReport) -> Table:
    """Build a table of shredding outcomes."""
    table = Table(
        title="Results",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=10, justify="center")
    table.add_column("Path", overflow="fold")
    table.add_column("Details", style="muted")

    for result in report.results:
        if result.success:
            status = "[success]OK[/]"
            detail = format_size(result.bytes_reclaimed)
        elif result.protected:
            status = "[warning]PROTECTED[/]"
            detail = result.error or ""
        else:
            status = "[error]FAIL[/]"
            detail = result.error or "Unknown error"
        table.add_row(status, result.path, detail)

    return table


def print_report_summary(report: ShredReport, total: int) -> None:
    """Print the outcome counts and reclaimed bytes of a batch."""
    reclaimed = format_size(report.bytes_reclaimed)
    done = len(report.succeeded)
    failed = len(report.failed)

    if report.cancelled:
        print_warning(f"Cancelled after {done + failed} of {total} item(s).")
    if failed:
        console.print(
            f"\n[success]{done} shredded[/success], [error]{failed} failed[/error] "
            f"({reclaimed} reclaimed)"
        )
    elif report.cancelled:
        console.print(f"\n[success]{done} shredded[/success] ({reclaimed} reclaimed)")
    else:
        print_success(f"All {done} item(s) shredded, {reclaimed} reclaimed.")

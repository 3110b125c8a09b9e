"""Run extraction for every workspace root."""

import asyncio

import click
from rich.table import Table

from vuetiful.commands._runtime import Runtime, build_runtime
from vuetiful.models import ExtractionReport
from vuetiful.utils.error_handler import handle_exceptions
from vuetiful.utils.exit_codes import ExitCodes
from vuetiful.utils.ui import console, print_header, print_warning


def print_report(runtime: Runtime, report: ExtractionReport) -> None:
    """Summary table: one row per root."""
    if report.cancelled:
        console.print("[warning]Extraction was cancelled[/warning]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Root", style="path")
    table.add_column("Version")
    table.add_column("Status")
    table.add_column("Classes", justify="right")

    for root in runtime.roots:
        installation = runtime.extractor.installation(root)
        version = installation.version if installation else "-"
        count = len(runtime.extractor.get_records(root))

        if root in report.failed:
            status = f"[error]failed[/error] {report.failed[root]}"
        elif root in report.extracted:
            status = "[success]extracted[/success]"
        elif root in report.cached:
            status = "[success]cached[/success]"
        elif root in report.not_detected:
            status = "[dim]not detected[/dim]"
        else:
            status = "[dim]-[/dim]"
        table.add_row(root, version, status, str(count) if count else "-")

    console.print(table)

    stats = runtime.cache.get_stats()
    console.print(
        f"[dim]Cache: {stats['hits']} hit(s), {stats['misses']} miss(es), "
        f"{stats['writes']} write(s), {stats['errors']} storage error(s)[/dim]"
    )


def exit_with_report(ctx, report: ExtractionReport) -> None:
    """Exit with the code summarizing ``report``, explaining any non-zero code."""
    code = ExitCodes.from_report(report)
    if code != ExitCodes.SUCCESS:
        print_warning(ExitCodes.get_description(code))
    ctx.exit(code)


@click.command()
@handle_exceptions
@click.option("--force", is_flag=True, help="Ignore cached results and re-parse every stylesheet")
@click.pass_context
def extract(ctx, force):
    """Extract utility classes for every workspace root.

    Serves each root from the cache when its installed version and
    stylesheet contents are unchanged, parses the stylesheet otherwise.

    \b
    Exit codes:
      0  every detected root was indexed
      1  Vuetify not detected in any root
      2  some roots failed (others were indexed)
      3  discovery failed"""
    runtime = build_runtime(ctx.obj)
    try:
        print_header("EXTRACTION")
        report = asyncio.run(runtime.extractor.extract_all(force_refresh=force))
        print_report(runtime, report)
    finally:
        runtime.close()

    exit_with_report(ctx, report)


@click.command()
@handle_exceptions
@click.pass_context
def refresh(ctx):
    """Force re-extraction of Vuetify utilities.

    Discards cached results for this run, re-parses every stylesheet and
    reports any cache storage failures."""
    runtime = build_runtime(ctx.obj)
    try:
        console.print("[info]Refreshing Vuetify utilities...[/info]")
        report = asyncio.run(runtime.extractor.refresh())
        print_report(runtime, report)
    finally:
        runtime.close()

    exit_with_report(ctx, report)

"""Keep the index current while files change."""

import asyncio

import click

from vuetiful.commands._runtime import Runtime, build_runtime
from vuetiful.commands.extract import print_report
from vuetiful.utils.error_handler import handle_exceptions
from vuetiful.utils.ui import console
from vuetiful.watcher import ChangeMonitor


async def _watch(runtime: Runtime) -> None:
    monitor = ChangeMonitor(
        runtime.extractor,
        runtime.manifests,
        runtime.log_facility,
        debounce_ms=runtime.settings.debounce_ms,
    )

    report = await runtime.extractor.extract_all()
    print_report(runtime, report)

    monitor.start()
    console.print("[info]Watching for package changes. Press Ctrl+C to stop.[/info]")
    try:
        await asyncio.Event().wait()
    finally:
        monitor.stop()


@click.command()
@handle_exceptions
@click.pass_context
def watch(ctx):
    """Watch manifests and the installed package, re-extracting on change.

    A package.json that declares vuetify, or an install/update of
    node_modules/vuetify, schedules a forced re-extraction after a quiet
    period (debounceMs). Removing the package clears the cache."""
    runtime = build_runtime(ctx.obj)
    try:
        asyncio.run(_watch(runtime))
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped watching.[/dim]")
    finally:
        runtime.close()

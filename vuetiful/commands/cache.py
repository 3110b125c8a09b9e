"""Inspect and clear persisted extraction results."""

import asyncio

import click
from rich.table import Table

from vuetiful.commands._runtime import build_runtime
from vuetiful.utils.constants import CACHE_KEY_PREFIX, CACHE_SUBDIR
from vuetiful.utils.error_handler import handle_exceptions
from vuetiful.utils.ui import console, print_success

# sha256 hex digest of the root path
_DIGEST_LEN = 64


def _split_key(key: str) -> tuple[str, str]:
    """(root digest, version) of a stored cache key."""
    rest = key[len(CACHE_KEY_PREFIX):]
    return rest[:_DIGEST_LEN], rest[_DIGEST_LEN + 1:]


@click.group()
def cache():
    """Persisted extraction cache."""
    pass


@cache.command("stats")
@handle_exceptions
@click.pass_context
def stats(ctx):
    """Show stored cache entries, one per (root, version)."""
    runtime = build_runtime(ctx.obj)
    try:
        keys = asyncio.run(runtime.cache.stored_keys())
        cache_dir = runtime.state_path / CACHE_SUBDIR
    finally:
        runtime.close()

    console.print(f"Cache directory: [path]{cache_dir}[/path]")
    if not keys:
        console.print("[dim]No stored entries.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Root digest", style="dim")
    table.add_column("Version")
    for key in sorted(keys):
        digest, version = _split_key(key)
        table.add_row(digest[:12], version)
    console.print(table)
    console.print(f"[dim]{len(keys)} stored entr{'y' if len(keys) == 1 else 'ies'}[/dim]")


@cache.command("clear")
@handle_exceptions
@click.pass_context
def clear(ctx):
    """Remove every stored entry; the next run re-parses."""
    runtime = build_runtime(ctx.obj)
    try:
        asyncio.run(runtime.extractor.clear())
    finally:
        runtime.close()
    print_success("Cache cleared")

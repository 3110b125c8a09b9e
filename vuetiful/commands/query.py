"""Browse extracted utility classes."""

import asyncio
import json

import click
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from vuetiful.commands._runtime import build_runtime
from vuetiful.models import Category
from vuetiful.query import find, render_css, search
from vuetiful.utils.error_handler import handle_exceptions
from vuetiful.utils.ui import console


def _load_records(ctx):
    runtime = build_runtime(ctx.obj)
    try:
        asyncio.run(runtime.extractor.ensure_extracted())
        return runtime.extractor.get_all_records()
    finally:
        runtime.close()


@click.command("list")
@handle_exceptions
@click.option("--prefix", default="", help="Only classes starting with this text")
@click.option(
    "--category",
    type=click.Choice([c.value for c in Category]),
    default=None,
    help="Only classes of this category",
)
@click.option("--json", "as_json", is_flag=True, help="Print records as JSON")
@click.pass_context
def list_command(ctx, prefix, category, as_json):
    """List indexed utility classes.

    Uses cached results when available, extracts first otherwise. Classes
    are ordered by category (spacing, display, flexbox, ...) then name."""
    records = _load_records(ctx)
    matches = search(records, prefix, Category(category) if category else None)

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in matches], indent=2))
        return

    if not matches:
        console.print("[dim]No utility classes match.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Class", style="cmd")
    table.add_column("Category", style="category")
    table.add_column("Description")
    for record in matches:
        table.add_row(record.name, record.category.value, record.description or "")

    console.print(table)
    console.print(f"[dim]{len(matches)} of {len(records)} class(es)[/dim]")


@click.command()
@handle_exceptions
@click.argument("name")
@click.pass_context
def show(ctx, name):
    """Show one utility class: description, category and CSS."""
    records = _load_records(ctx)
    record = find(records, name)
    if record is None:
        raise click.ClickException(f"Unknown utility class: {name}")

    body = Syntax(render_css(record), "css", theme="ansi_dark", background_color="default")
    console.print(
        Panel(
            body,
            title=f"[bold]{record.name}[/bold]",
            subtitle=f"[category]{record.category.value}[/category]",
            expand=False,
        )
    )
    if record.description:
        console.print(record.description)

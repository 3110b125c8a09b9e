"""View and persist workspace settings."""

from dataclasses import asdict

import click
from rich.table import Table

from vuetiful.config_runtime import FILE_KEYS, load_settings, parse_setting_value, save_setting
from vuetiful.utils.error_handler import handle_exceptions
from vuetiful.utils.ui import console, print_success


@click.group()
def config():
    """Workspace settings (.vuetiful/config.json)."""
    pass


@config.command("show")
@handle_exceptions
@click.pass_context
def show_config(ctx):
    """Show effective settings after file and environment overrides."""
    root = ctx.obj["roots"][0]
    values = asdict(load_settings(root))

    table = Table(show_header=True, header_style="bold")
    table.add_column("Key", style="cmd")
    table.add_column("Value")
    for file_key, attr in FILE_KEYS.items():
        table.add_row(file_key, str(values[attr]))

    console.print(f"Config file: [path]{ctx.obj['config_path']}[/path]")
    console.print(table)


@config.command("set")
@handle_exceptions
@click.argument("key", type=click.Choice(list(FILE_KEYS)))
@click.argument("value")
@click.pass_context
def set_config(ctx, key, value):
    """Persist KEY=VALUE, e.g. `vuetiful config set showWarnings false`."""
    try:
        parsed = parse_setting_value(key, value)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="VALUE") from e

    path = save_setting(ctx.obj["roots"][0], key, parsed)
    print_success(f"{key} = {parsed!r} written to {path}")

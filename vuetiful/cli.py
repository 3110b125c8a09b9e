"""vuetiful CLI - Main entry point and command registration hub."""
# ruff: noqa: E402 - Intentional lazy loading: commands imported after cli group definition

import click
from rich.table import Table

from vuetiful import __version__
from vuetiful.config_runtime import config_path
from vuetiful.locator import normalize_root
from vuetiful.utils.constants import COMMAND_REFRESH_UTILITIES
from vuetiful.utils.ui import console


class VerboseGroup(click.Group):
    """Help output grouped by category, rendered with rich."""

    def format_commands(self, ctx, formatter):
        """Suppress the default listing; format_help prints the categorized one."""
        pass

    COMMAND_CATEGORIES = {
        "EXTRACTION": {
            "title": "EXTRACTION",
            "description": "Locate Vuetify, parse its stylesheet, keep the index current",
            "commands": ["extract", "refresh", "watch"],
            "command_meta": {
                "extract": {"use_when": "First run, or to check what is indexed"},
                "refresh": {"use_when": "Stylesheet changed and cache looks stale"},
                "watch": {"run_when": "During development, to follow npm installs"},
            },
        },
        "QUERIES": {
            "title": "QUERIES",
            "description": "Read extracted utility classes",
            "commands": ["list", "show"],
            "command_meta": {
                "list": {"use_when": "Browse classes by prefix or category"},
                "show": {"use_when": "Need the CSS behind one class"},
            },
        },
        "MAINTENANCE": {
            "title": "MAINTENANCE",
            "description": "Cache and settings",
            "commands": ["cache", "config"],
            "command_meta": {
                "cache": {"use_when": "Inspect or wipe persisted extraction results"},
                "config": {"use_when": "Silence prompts or enable verbose logging"},
            },
        },
    }

    def format_help(self, ctx, formatter):
        super().format_help(ctx, formatter)

        registered = {
            name: cmd
            for name, cmd in self.commands.items()
            if not name.startswith("_") and not getattr(cmd, "hidden", False)
        }

        console.print()
        console.rule("[bold]COMMANDS[/bold]")

        for category_data in self.COMMAND_CATEGORIES.values():
            console.print(f"\n[bold cyan]{category_data['title']}[/bold cyan]")
            console.print(f"[dim]{category_data['description']}[/dim]")

            table = Table(show_header=False, box=None, padding=(0, 2, 0, 0))
            table.add_column("Command", style="cmd", width=12)
            table.add_column("Description", style="white")
            table.add_column("Hint", style="dim", width=44)

            for cmd_name in category_data["commands"]:
                if cmd_name not in registered:
                    continue
                cmd = registered[cmd_name]

                first_line = (cmd.help or "").split("\n")[0].strip()
                period_idx = first_line.find(".")
                short_help = first_line[:period_idx] if period_idx > 0 else first_line
                if len(short_help) > 45:
                    short_help = short_help[:45].rsplit(" ", 1)[0] + "..."

                cmd_meta = category_data.get("command_meta", {}).get(cmd_name, {})
                hint = ""
                if "use_when" in cmd_meta:
                    hint = f"USE: {cmd_meta['use_when']}"
                elif "run_when" in cmd_meta:
                    hint = f"RUN: {cmd_meta['run_when']}"

                table.add_row(cmd_name, short_help, hint)

            console.print(table)

        console.print()
        console.rule()
        console.print("For detailed options: [cmd]vuetiful <command> --help[/cmd]")


@click.group(cls=VerboseGroup)
@click.version_option(version=__version__, prog_name="vuetiful")
@click.help_option("-h", "--help")
@click.option(
    "--root",
    "roots",
    multiple=True,
    type=click.Path(file_okay=False),
    help="Workspace root (repeatable, default: current directory)",
)
@click.option("-v", "--verbose", is_flag=True, help="Show DEBUG/INFO log lines")
@click.pass_context
def cli(ctx, roots, verbose):
    """Vuetify utility-class extraction and index.

    Finds the installed Vuetify package in each workspace root, parses its
    generated stylesheet into utility-class records and caches them per
    root and version.

    \b
    QUICK START:
      vuetiful extract              # Index the current project
      vuetiful list --prefix ma-    # Browse margin utilities
      vuetiful watch                # Re-index on npm install

    \b
    The first root holds the state directory (.vuetiful/): cache, logs and
    config.json."""
    ctx.ensure_object(dict)
    normalized = []
    for root in roots or (".",):
        root = normalize_root(root)
        if root not in normalized:
            normalized.append(root)
    ctx.obj["roots"] = normalized
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path(normalized[0])
    ctx.obj.setdefault("state_dir", str(config_path(normalized[0]).parent))


from vuetiful.commands.cache import cache
from vuetiful.commands.config import config
from vuetiful.commands.extract import extract, refresh
from vuetiful.commands.query import list_command, show
from vuetiful.commands.watch import watch

cli.add_command(extract)
cli.add_command(refresh)
# Editor hosts invoke the manual trigger by its command id
cli.add_command(refresh, name=COMMAND_REFRESH_UTILITIES)
cli.add_command(watch)
cli.add_command(list_command, name="list")
cli.add_command(show)
cli.add_command(cache)
cli.add_command(config)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == "__main__":
    main()

"""Central UI handler for vuetiful.

Single source of truth for Rich console styling. Import this instead of
instantiating Console() in every command file.

Usage:
    from vuetiful.utils.ui import console, print_header, print_warning

    console.print("[success]Utilities refreshed[/success]")
    print_header("EXTRACTION")
    print_warning("Vuetify not detected in any workspace root")
"""

import sys

from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

VUETIFUL_THEME = Theme({
    "info": "bold cyan",
    "warning": "bold yellow",
    "error": "bold red",
    "success": "bold green",
    "critical": "bold red",
    "cmd": "bold magenta",
    "path": "bold cyan",
    "dim": "dim white",
    "category": "magenta",
})

# Single console instance - import this, don't create your own
console = Console(
    theme=VUETIFUL_THEME,
    force_terminal=sys.stdout.isatty()
)


def print_header(title: str) -> None:
    """Print a styled section header with horizontal rules."""
    console.rule(f"[bold]{title}[/bold]")


def print_warning(msg: str) -> None:
    console.print(f"[warning]WARNING:[/warning] {msg}")


def print_success(msg: str) -> None:
    console.print(f"[success]OK:[/success] {msg}")


def print_prompt(message: str, actions: list[str], level: str = "info") -> None:
    """Print a prompt panel listing the actions a user can take.

    Args:
        message: Main message line
        actions: Action labels, rendered as a hint line
        level: One of "info", "warning", "error", "critical"
    """
    style_map = {
        "critical": ("bold red", "red"),
        "error": ("bold red", "red"),
        "warning": ("bold yellow", "yellow"),
        "info": ("bold cyan", "cyan"),
    }
    text_style, border_style = style_map.get(level, ("white", "white"))

    parts = [(f"{message}\n", text_style)]
    if actions:
        parts.append(("Actions: " + " | ".join(actions), border_style))

    console.print(Panel(Text.assemble(*parts), border_style=border_style, expand=False))

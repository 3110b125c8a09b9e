"""User-visible prompts raised by extraction.

The extractor only talks to the ``Notifier`` protocol. ``ConsoleNotifier``
renders prompts with rich for the command line; embedding hosts provide
their own implementation.
"""

from enum import Enum
from pathlib import Path
from typing import Protocol

from rich.prompt import Prompt

from vuetiful import __version__
from vuetiful.config_runtime import save_setting
from vuetiful.errors import ArtifactMissing, MalformedArtifact, SizeExceeded
from vuetiful.fs import FileSystemError
from vuetiful.models import ExtractionReport
from vuetiful.utils.constants import CONFIG_SHOW_WARNINGS, DOCS_URL, REINSTALL_COMMAND
from vuetiful.utils.ui import console, print_prompt

LEARN_MORE = "Learn More"
DONT_SHOW_AGAIN = "Don't Show Again"
REINSTALL = "Reinstall Vuetify"
VIEW_LOGS = "View Logs"
REPORT_ISSUE = "Report Issue"


class FailureKind(str, Enum):
    MISSING_ARTIFACT = "missing_artifact"
    MALFORMED_ARTIFACT = "malformed_artifact"
    SIZE_EXCEEDED = "size_exceeded"
    IO_FAILURE = "io_failure"
    OTHER = "other"


def classify_failure(error: BaseException) -> FailureKind:
    if isinstance(error, ArtifactMissing):
        return FailureKind.MISSING_ARTIFACT
    if isinstance(error, MalformedArtifact):
        return FailureKind.MALFORMED_ARTIFACT
    if isinstance(error, SizeExceeded):
        return FailureKind.SIZE_EXCEEDED
    if isinstance(error, (FileSystemError, OSError)):
        return FailureKind.IO_FAILURE
    return FailureKind.OTHER


class Notifier(Protocol):
    def not_detected(self, root: str) -> None:
        """No installation was found under ``root``."""
        ...

    def extraction_failed(self, root: str, error: BaseException) -> None:
        """Extraction for ``root`` failed; other roots were still processed."""
        ...

    def critical_failure(self, error: BaseException) -> None:
        """The whole extraction cycle failed."""
        ...

    def storage_degraded(self, error_count: int) -> None:
        """Cache storage failed during a user-initiated refresh."""
        ...

    def refreshed(self, report: ExtractionReport) -> None:
        """A user-initiated refresh finished."""
        ...


class ConsoleNotifier:
    """Prints prompts to the shared rich console.

    In interactive mode the user picks an action; otherwise the available
    actions are listed together with how to perform them.
    """

    def __init__(self, config_root: str | Path, log_file: Path | None = None, interactive: bool = False):
        self.config_root = Path(config_root)
        self.log_file = log_file
        self.interactive = interactive

    def _choose(self, actions: list[str]) -> str | None:
        if not self.interactive or not actions:
            return None
        choice = Prompt.ask("Action", choices=[*actions, "Dismiss"], default="Dismiss", console=console)
        return None if choice == "Dismiss" else choice

    def _show_logs(self) -> None:
        if self.log_file is None or not self.log_file.exists():
            console.print("[dim]No log file has been written yet.[/dim]")
            return
        console.print(f"Logs: [path]{self.log_file}[/path]")

    def not_detected(self, root: str) -> None:
        actions = [LEARN_MORE, DONT_SHOW_AGAIN]
        print_prompt(
            f"Vuetify not detected in {root}. Install Vuetify to enable utility class completion.",
            actions,
        )
        choice = self._choose(actions)
        if choice == LEARN_MORE:
            console.print(f"See [path]{DOCS_URL}[/path]")
        elif choice == DONT_SHOW_AGAIN:
            save_setting(self.config_root, CONFIG_SHOW_WARNINGS, False)
            console.print("[dim]Not-detected prompts disabled for this workspace.[/dim]")
        elif not self.interactive:
            console.print(f"[dim]To silence: vuetiful config set {CONFIG_SHOW_WARNINGS} false[/dim]")

    def extraction_failed(self, root: str, error: BaseException) -> None:
        kind = classify_failure(error)

        if kind is FailureKind.MISSING_ARTIFACT:
            actions = [REINSTALL]
            print_prompt("Vuetify stylesheet not found. The package may be corrupted.", actions, "error")
            if self._choose(actions) == REINSTALL or not self.interactive:
                console.print(f"Run in [path]{root}[/path]:")
                console.print(f"  [cmd]{' '.join(REINSTALL_COMMAND)}[/cmd]")
            return

        if kind is FailureKind.MALFORMED_ARTIFACT:
            message = "Failed to parse Vuetify stylesheet. The file may be corrupted."
        else:
            message = f"Vuetify extraction failed for {root}: {error}"

        actions = [VIEW_LOGS]
        print_prompt(message, actions, "error")
        if self._choose(actions) == VIEW_LOGS or not self.interactive:
            self._show_logs()

    def critical_failure(self, error: BaseException) -> None:
        actions = [VIEW_LOGS, REPORT_ISSUE]
        print_prompt(f"vuetiful encountered a critical error: {error}", actions, "critical")
        choice = self._choose(actions)
        if choice == VIEW_LOGS or not self.interactive:
            self._show_logs()
        if choice == REPORT_ISSUE or not self.interactive:
            console.print(
                f"When reporting this issue, include vuetiful {__version__}, "
                "the installed Vuetify version and the log file."
            )

    def storage_degraded(self, error_count: int) -> None:
        print_prompt(
            f"Cache storage failed {error_count} time(s); results were not persisted.",
            [VIEW_LOGS],
            "warning",
        )
        self._show_logs()

    def refreshed(self, report: ExtractionReport) -> None:
        if report.ok:
            console.print("[success]Vuetify utilities refreshed![/success]")
        else:
            console.print(f"[warning]Refresh finished with {len(report.failed)} failure(s)[/warning]")


class NullNotifier:
    """Discards every prompt."""

    def not_detected(self, root: str) -> None:
        pass

    def extraction_failed(self, root: str, error: BaseException) -> None:
        pass

    def critical_failure(self, error: BaseException) -> None:
        pass

    def storage_degraded(self, error_count: int) -> None:
        pass

    def refreshed(self, report: ExtractionReport) -> None:
        pass

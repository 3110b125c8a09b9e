"""Logging facility built on Loguru with Pino-compatible output.

One ``LogFacility`` is created by the entry point and handed to every
component at construction time. Components never configure loguru
themselves; they ask the facility for a bound logger:

    facility = LogFacility(verbose=settings.enable_logging)
    log = facility.component("Locator")
    log.debug("probing {path}", path=path)
    ...
    facility.close()

Environment Variables:
    VUETIFUL_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (DEBUG also enables verbose)
    VUETIFUL_LOG_JSON: 0|1 (default: 0, human-readable)
    VUETIFUL_LOG_FILE: path to an NDJSON log file (optional)
"""

import json
import os
import sys
from pathlib import Path

from loguru import logger

# Remove default handler
logger.remove()

# Pino-compatible numeric levels
PINO_LEVELS = {
    "TRACE": 10,
    "DEBUG": 20,
    "INFO": 30,
    "SUCCESS": 30,
    "WARNING": 40,
    "ERROR": 50,
    "CRITICAL": 60,
}

WARNING_LEVEL_NO = 30

# Human-readable format (no emojis - Windows CP1252 compatibility)
_human_format = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> - "
    "<level>{message}</level>"
)

_file_format = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[component]} - {message}"


def _pino_record(record) -> dict:
    """Convert a loguru record into a Pino log line."""
    pino_log = {
        "level": PINO_LEVELS.get(record["level"].name, 30),
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "pid": record["process"].id,
    }

    for key, value in record["extra"].items():
        pino_log[key] = value if isinstance(value, (str, int, float, bool)) else str(value)

    if record["exception"]:
        pino_log["err"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else "Error",
            "message": str(record["exception"].value) if record["exception"].value else "",
        }
    return pino_log


class LogFacility:
    """Owns the loguru handlers for one process.

    Every handler installed here is removed again by ``close()``. The
    verbosity gate is evaluated per record, so ``set_verbose`` takes effect
    immediately for every component holding a bound logger.
    """

    def __init__(
        self,
        verbose: bool = False,
        json_mode: bool | None = None,
        log_file: str | None = None,
        sink=None,
    ):
        """Install handlers.

        Args:
            verbose: Emit DEBUG/INFO lines. WARNING and above always pass.
            json_mode: Pino NDJSON on stdout instead of colored stderr.
                Defaults to ``VUETIFUL_LOG_JSON``.
            log_file: Extra NDJSON file sink. Defaults to ``VUETIFUL_LOG_FILE``.
            sink: Replace the console sink (any loguru sink). Used by tests
                and by hosts that route output elsewhere.
        """
        level = os.environ.get("VUETIFUL_LOG_LEVEL", "").upper()
        self.verbose = verbose or level in ("DEBUG", "TRACE")
        self.json_mode = (
            os.environ.get("VUETIFUL_LOG_JSON", "0") == "1" if json_mode is None else json_mode
        )
        self.log_file: Path | None = None
        self._handler_ids: list[int] = []
        self._closed = False

        if sink is not None:
            self._handler_ids.append(
                logger.add(sink, level="DEBUG", format=_human_format, filter=self._gate, colorize=False)
            )
        elif self.json_mode:
            self._handler_ids.append(
                logger.add(self._pino_sink, level="DEBUG", filter=self._gate, colorize=False)
            )
        else:
            self._handler_ids.append(
                logger.add(
                    sys.stderr,
                    level="DEBUG",
                    format=_human_format,
                    filter=self._gate,
                    colorize=None,  # Auto-detect: colors if TTY, plain if piped
                )
            )

        ndjson_path = log_file or os.environ.get("VUETIFUL_LOG_FILE")
        if ndjson_path:
            self._ndjson_path = ndjson_path
            self._handler_ids.append(logger.add(self._file_pino_sink, level="DEBUG"))

    def _gate(self, record) -> bool:
        if "component" not in record["extra"]:
            return False
        return self.verbose or record["level"].no >= WARNING_LEVEL_NO

    @staticmethod
    def _pino_sink(message):
        # CRITICAL: Never call logger.* inside a sink - causes infinite recursion
        sys.stdout.write(json.dumps(_pino_record(message.record)) + "\n")
        sys.stdout.flush()

    def _file_pino_sink(self, message):
        record = message.record
        if "component" not in record["extra"]:
            return
        with open(self._ndjson_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(_pino_record(record)) + "\n")

    def set_verbose(self, verbose: bool) -> None:
        """Toggle DEBUG/INFO output for every component."""
        self.verbose = verbose

    def component(self, name: str):
        """Return a logger bound to ``name``."""
        return logger.bind(component=name)

    def configure_file_logging(self, log_dir: Path, level: str = "DEBUG") -> Path:
        """Add rotating file handler for persistent logs.

        The file always captures DEBUG regardless of the verbosity gate so
        that "view logs" has something to show after a failure.

        Returns:
            Path of the log file.
        """
        log_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = log_dir / "vuetiful.log"

        self._handler_ids.append(
            logger.add(
                self.log_file,
                rotation="10 MB",
                retention="7 days",
                level=level,
                format=_file_format,
                filter=lambda record: "component" in record["extra"],
            )
        )
        return self.log_file

    def close(self) -> None:
        """Remove every handler this facility installed."""
        if self._closed:
            return
        self._closed = True
        for handler_id in self._handler_ids:
            try:
                logger.remove(handler_id)
            except ValueError:
                pass  # Already removed
        self._handler_ids = []

    def __enter__(self) -> "LogFacility":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


__all__ = [
    "LogFacility",
    "PINO_LEVELS",
]

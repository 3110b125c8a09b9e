"""Centralized error handler for vuetiful commands."""

import traceback
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Any

import click
from loguru import logger

from .constants import ERROR_LOG_NAME, STATE_DIR


def _state_dir() -> Path:
    """State directory of the running command, or ./.vuetiful outside click."""
    ctx = click.get_current_context(silent=True)
    if ctx is not None and isinstance(ctx.obj, dict) and ctx.obj.get("state_dir"):
        return Path(ctx.obj["state_dir"])
    return Path(STATE_DIR)


def handle_exceptions(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator that logs a failing command and turns it into a ClickException."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except click.exceptions.Exit:
            raise
        except click.ClickException:
            raise
        except Exception as e:
            state_dir = _state_dir()
            error_log_path = state_dir / ERROR_LOG_NAME
            error_type = type(e).__name__
            error_msg = str(e)
            tb = traceback.format_exc()

            logger.bind(component="cli").opt(exception=True).error(
                "Command '{cmd}' failed: {err}",
                cmd=func.__name__,
                err=error_msg,
            )

            try:
                state_dir.mkdir(parents=True, exist_ok=True)
                with open(error_log_path, "a", encoding="utf-8") as f:
                    f.write("\n" + "=" * 80 + "\n")
                    f.write(f"[{datetime.now().isoformat()}] Error in command: {func.__name__}\n")
                    f.write("=" * 80 + "\n")
                    f.write(f"{error_type}: {error_msg}\n\n")
                    f.write(tb)
                    f.write("=" * 80 + "\n\n")
                user_message = f"{error_type}: {error_msg}\n\nFull traceback logged to: {error_log_path}"
            except OSError:
                user_message = f"{error_type}: {error_msg}"

            raise click.ClickException(user_message) from e

    return wrapper

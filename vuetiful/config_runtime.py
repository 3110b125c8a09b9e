"""Runtime configuration for vuetiful - typed settings with file and env overrides."""

import copy
import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from vuetiful.utils.constants import (
    CONFIG_ENABLE_LOGGING,
    CONFIG_FILE,
    CONFIG_SHOW_WARNINGS,
    ENV_PREFIX,
    FILE_WATCHER_DEBOUNCE_MS,
    MAX_ARTIFACT_SIZE_BYTES,
    STATE_DIR,
)


@dataclass
class Settings:
    """Settings for one workspace.

    Attributes:
        show_warnings: Show the "Vuetify not detected" prompt (``showWarnings``).
        enable_logging: Emit DEBUG/INFO log lines (``enableLogging``).
            Warnings and errors are always logged.
        debounce_ms: Quiet period before file events trigger re-extraction.
        max_artifact_bytes: Stylesheets larger than this are not parsed.
        state_dir: Directory, relative to the first root, holding the cache,
            logs and config file.
    """

    show_warnings: bool = True
    enable_logging: bool = False
    debounce_ms: int = FILE_WATCHER_DEBOUNCE_MS
    max_artifact_bytes: int = MAX_ARTIFACT_SIZE_BYTES
    state_dir: str = STATE_DIR

    def state_path(self, root: str | Path) -> Path:
        path = Path(self.state_dir)
        return path if path.is_absolute() else Path(root) / path


# camelCase keys used in config.json
FILE_KEYS = {
    CONFIG_SHOW_WARNINGS: "show_warnings",
    CONFIG_ENABLE_LOGGING: "enable_logging",
    "debounceMs": "debounce_ms",
    "maxArtifactBytes": "max_artifact_bytes",
    "stateDir": "state_dir",
}

DEFAULTS = Settings()

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def config_path(root: str | Path = ".") -> Path:
    return Path(root) / STATE_DIR / CONFIG_FILE


def _coerce(raw: str, default: Any) -> Any:
    """Convert an environment string to the type of ``default``."""
    if isinstance(default, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"not a boolean: {raw!r}")
    if isinstance(default, int):
        return int(raw)
    return raw


def _read_config_file(path: Path, warn) -> dict[str, Any]:
    try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                return data
            warn(f"Ignoring {path}: expected a JSON object")
    except (json.JSONDecodeError, OSError) as e:
        warn(f"Could not load config file from {path}: {e}")
    return {}


def load_settings(root: str | Path = ".", log=None) -> Settings:
    """
    Load settings from <root>/.vuetiful/config.json and environment variables.

    Config priority (highest to lowest):
    1. Environment variables (VUETIFUL_* prefixed, e.g. VUETIFUL_SHOW_WARNINGS)
    2. .vuetiful/config.json file (camelCase keys)
    3. Built-in defaults

    Args:
        root: Root directory to look for the config file
        log: Optional bound logger for warnings about ignored values

    Returns:
        A fresh Settings instance
    """

    def warn(message: str) -> None:
        if log is not None:
            log.warning(message)

    settings = copy.deepcopy(DEFAULTS)

    user = _read_config_file(config_path(root), warn)
    for file_key, value in user.items():
        attr = FILE_KEYS.get(file_key)
        if attr is None:
            continue
        default_value = getattr(DEFAULTS, attr)
        if isinstance(value, type(default_value)) and (
            isinstance(default_value, bool) or not isinstance(value, bool)
        ):
            setattr(settings, attr, value)
        else:
            warn(f"Ignoring {file_key}={value!r} in config file: expected {type(default_value).__name__}")

    for f in fields(Settings):
        env_var = f"{ENV_PREFIX}{f.name.upper()}"
        if env_var in os.environ:
            value = os.environ[env_var]
            try:
                setattr(settings, f.name, _coerce(value, getattr(DEFAULTS, f.name)))
            except ValueError as e:
                warn(f"Invalid value for environment variable {env_var}: '{value}' - {e}")

    return settings


def save_setting(root: str | Path, key: str, value: Any) -> Path:
    """Persist one camelCase key into <root>/.vuetiful/config.json.

    Raises:
        KeyError: ``key`` is not a known setting.
        TypeError: ``value`` has the wrong type for the setting.
        OSError: The file could not be written.
    """
    attr = FILE_KEYS[key]
    default_value = getattr(DEFAULTS, attr)
    if not isinstance(value, type(default_value)) or (
        isinstance(value, bool) and not isinstance(default_value, bool)
    ):
        raise TypeError(f"{key} expects {type(default_value).__name__}, got {type(value).__name__}")

    path = config_path(root)
    data = _read_config_file(path, lambda _msg: None)
    data[key] = value

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, sort_keys=True)
        f.write("\n")
    return path


def parse_setting_value(key: str, raw: str) -> Any:
    """Convert command-line text for ``key`` into the setting's type.

    Raises:
        KeyError: unknown key.
        ValueError: text does not convert.
    """
    return _coerce(raw, getattr(DEFAULTS, FILE_KEYS[key]))

from __future__ import annotations

import os
import sys
from pathlib import Path

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for older runtimes
    import tomli as tomllib  # type: ignore

from app_config_parser import parse_app_config
from app_config_schema import (
    DEFAULT_CONFIG_FILE,
    AppConfig,
    AppConfigurationError,
    ProfileSettings,
)

__all__ = [
    "AppConfig",
    "AppConfigurationError",
    "ProfileSettings",
    "load_app_config",
    "load_app_config_from_text",
    "resolve_config_path",
]


def resolve_config_path(config_path: str | None = None) -> Path:
    env_path = os.getenv("APP_CONFIG_FILE")
    raw = config_path or env_path or DEFAULT_CONFIG_FILE
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    if path.exists():
        return path

    # Frozen-build fallback: a config.toml next to the executable.
    if config_path is None and env_path is None and getattr(sys, "frozen", False):
        executable_path = Path(sys.executable).resolve().parent / DEFAULT_CONFIG_FILE
        if executable_path.exists():
            return executable_path

    return path


def load_app_config(config_path: str | None = None) -> AppConfig:
    path = resolve_config_path(config_path)
    if not path.exists():
        raise AppConfigurationError(f"Config file not found: {path}")
    if not path.is_file():
        raise AppConfigurationError(f"Config path is not a file: {path}")

    try:
        with open(path, "rb") as fh:
            raw = tomllib.load(fh)
    except Exception as error:
        raise AppConfigurationError(f"Failed to parse config TOML: {error}") from error

    return parse_app_config(raw, base_dir=path.parent, source_file=str(path))


def load_app_config_from_text(text: str, *, base_dir: Path) -> AppConfig:
    """Parse TOML *text* as if it were a config file located in *base_dir*."""
    try:
        raw = tomllib.loads(text)
    except Exception as error:
        raise AppConfigurationError(f"Failed to parse config TOML: {error}") from error

    return parse_app_config(raw, base_dir=base_dir, source_file="<string>")

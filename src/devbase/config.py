"""TOML configuration loading for devbase."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .discovery import DEFAULT_SKIP_DIRS

DEFAULT_CONFIG_FILENAME = "devbase.toml"
DEFAULT_STATE_PATH = "~/.local/share/devbase/state.toml"


class ConfigError(RuntimeError):
    """Raised when a configuration file cannot be parsed or validated."""


def _expand_path(raw: str | os.PathLike[str] | Path, *, base_dir: Path) -> Path:
    """Return an absolute ``Path`` by expanding env vars and user segments."""

    text = str(raw)
    expanded = Path(os.path.expandvars(text)).expanduser()
    if expanded.is_absolute():
        return expanded.resolve(strict=False)
    return (base_dir / expanded).resolve(strict=False)


class Settings(BaseModel):
    """Global configuration options."""

    model_config = ConfigDict(frozen=True)

    state_path: Path
    default_max_depth: int = Field(default=5, ge=1)
    workers: int = Field(default=4, ge=1)
    skip_dirs: tuple[str, ...] = DEFAULT_SKIP_DIRS
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], *, base_dir: Path) -> "Settings":
        state_path = _expand_path(raw.get("state_path", DEFAULT_STATE_PATH), base_dir=base_dir)
        options = {key: value for key, value in raw.items() if key != "state_path"}
        try:
            return cls(state_path=state_path, **options)
        except ValidationError as exc:
            raise ConfigError(f"Invalid [settings]: {exc}") from exc


class Config(BaseModel):
    """Fully parsed configuration file."""

    model_config = ConfigDict(frozen=True)

    config_path: Path
    settings: Settings


def load_config(path: Path | None = None) -> Config:
    """Load and validate a configuration file.

    Args:
        path: Optional path to the TOML file or the directory holding it.
            Defaults to ``devbase.toml`` in the current working directory.
    """

    config_path = _resolve_config_path(path)

    try:
        with config_path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Configuration file '{config_path}' is not valid TOML: {exc}") from exc

    settings = Settings.from_raw(data.get("settings", {}), base_dir=config_path.parent)
    return Config(config_path=config_path, settings=settings)


def _resolve_config_path(path: Path | None) -> Path:
    if path is None:
        path = Path.cwd() / DEFAULT_CONFIG_FILENAME
    else:
        path = Path(path)

    if not path.exists():
        raise ConfigError(f"Configuration file '{path}' does not exist")
    if path.is_dir():
        candidate = path / DEFAULT_CONFIG_FILENAME
        if not candidate.exists():
            raise ConfigError(f"Expected to find '{DEFAULT_CONFIG_FILENAME}' inside '{path}', but none was located")
        path = candidate

    return path.resolve(strict=False)

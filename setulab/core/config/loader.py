"""
Configuration loader — reads setulab.yml into a Settings model.

The file is optional: without one, every setting takes its default.
Values are resolved in precedence order:

    CLI option  >  SETULAB_* env var  >  setulab.yml  >  default
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# Default config filename
SETTINGS_FILE = "setulab.yml"

DEFAULT_BASE_DIR = Path("/data/setulab")
DEFAULT_NETWORK = "oneclick4j"

# Env var → Settings field
_ENV_OVERRIDES: dict[str, str] = {
    "SETULAB_BASE_DIR": "base_dir",
    "SETULAB_NETWORK": "network",
}


class ConfigError(Exception):
    """Raised when setulab.yml is unreadable or invalid."""


class Settings(BaseModel):
    """Process-wide settings shared by every catalog type."""

    base_dir: Path = DEFAULT_BASE_DIR
    network: str = DEFAULT_NETWORK
    compose_command: list[str] | None = None   # e.g. ["docker-compose"]
    command_timeout: int = Field(default=300, gt=0)

    @field_validator("network")
    @classmethod
    def _network_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("network name must not be empty")
        return v

    @field_validator("compose_command", mode="before")
    @classmethod
    def _split_compose_command(cls, v):
        if isinstance(v, str):
            return v.split()
        return v


def find_settings_file(start_dir: Path | None = None) -> Path | None:
    """Search for setulab.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to setulab.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / SETTINGS_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_settings(
    path: Path | None = None,
    *,
    environ: dict[str, str] | None = None,
    base_dir: Path | None = None,
) -> Settings:
    """Load settings from file, env and explicit overrides.

    Args:
        path: Explicit path to setulab.yml. If None, searches upward;
            no file found means defaults.
        environ: Environment mapping (default: ``os.environ``).
        base_dir: Explicit base directory (the ``--base-dir`` option).

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    env = os.environ if environ is None else environ
    data: dict = {}

    if path is not None and not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    if path is None:
        path = find_settings_file()

    if path is not None:
        data = _read_yaml(path)

    for var, field in _ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            data[field] = value

    if base_dir is not None:
        data["base_dir"] = base_dir

    try:
        settings = Settings.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid setulab configuration: {e}") from e

    logger.debug(
        "Settings: base_dir=%s network=%s (file=%s)",
        settings.base_dir, settings.network, path,
    )
    return settings


def _read_yaml(path: Path) -> dict:
    """Read a YAML mapping, or raise ConfigError."""
    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The file may wrap everything under a "setulab" key or be flat
    if isinstance(data.get("setulab"), dict):
        data = dict(data["setulab"])

    return data

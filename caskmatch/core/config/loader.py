"""
Configuration loader — reads caskmatch.yml into a Settings model.

Lookup order:
    explicit path  >  caskmatch.yml (walking up from cwd)
    >  ~/.config/caskmatch/config.yml  >  built-in defaults

Every setting has a default, so running without any config file is fine.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from caskmatch.core.models.settings import Settings

logger = logging.getLogger(__name__)

# Default config filenames
CONFIG_FILE = "caskmatch.yml"
USER_CONFIG_PATH = Path(".config") / "caskmatch" / "config.yml"


class ConfigError(Exception):
    """Raised when a configuration file is unreadable or invalid."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for caskmatch.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to caskmatch.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def user_config_file(home: Path | None = None) -> Path:
    return (home or Path.home()) / USER_CONFIG_PATH


def resolve_config_path(
    path: Path | None = None,
    start_dir: Path | None = None,
    home: Path | None = None,
) -> Path | None:
    """Pick the config file to load, or None to use defaults."""
    if path is not None:
        return path

    found = find_config_file(start_dir)
    if found is not None:
        return found

    user_file = user_config_file(home)
    if user_file.is_file():
        return user_file
    return None


def load_settings(
    path: Path | None = None,
    start_dir: Path | None = None,
    home: Path | None = None,
) -> Settings:
    """Load and validate configuration.

    Args:
        path: Explicit config path. If None, searches as described above.
        start_dir: Where the upward search starts (default: cwd).
        home: Home directory for the per-user file (default: ~).

    Returns:
        Validated Settings (defaults when no file exists).

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    config_path = resolve_config_path(path, start_dir, home)
    if config_path is None:
        logger.debug("No config file found — using defaults")
        return Settings()

    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")

    logger.debug("Loading config from %s", config_path)

    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ConfigError(
            f"Expected a YAML mapping in {config_path}, got {type(data).__name__}"
        )

    # The YAML may wrap everything under a "caskmatch" key or be flat
    if isinstance(data.get("caskmatch"), dict):
        data = data["caskmatch"]

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e

    logger.info("Loaded config from %s", config_path)
    return settings

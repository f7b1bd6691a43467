"""Locations of appsweep's own files.

appsweep keeps only configuration on disk. The directory follows
``XDG_CONFIG_HOME`` when set and falls back to ``~/.config/appsweep``.
"""

import os
from pathlib import Path

APP_NAME = "appsweep"


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/appsweep/ (or XDG_CONFIG_HOME/appsweep/).
    """
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_config_path() -> Path:
    """Get the main configuration file path (``config.toml``)."""
    return get_config_dir() / "config.toml"


def get_user_theme_path() -> Path:
    """Get the user theme override path (``theme.toml``)."""
    return get_config_dir() / "theme.toml"


def ensure_config_dir() -> Path:
    """Create the configuration directory if it doesn't exist.

    Returns:
        Path to the configuration directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    path = get_config_dir()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create config directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create config directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path

"""User configuration for appsweep.

Settings live in ``~/.config/appsweep/config.toml``. Every option is
additive: configuration can widen what the safety guard protects or
what counts as an installed application, but it can never shrink the
compiled-in protection lists.

Example::

    extra_protected_paths = ["~/Projects", "/Volumes/Backup"]
    extra_safe_identifiers = ["com.example.inhouse"]
    extra_application_dirs = ["/opt/apps"]
    block_size_kib = 1024
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from appsweep.core.paths import get_config_path

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_SIZE_KIB = 1024


class SweepConfig(BaseModel):
    """Validated appsweep settings.

    Attributes:
        extra_protected_paths: Additional path prefixes the guard must deny.
        extra_safe_identifiers: Additional identifiers always treated as installed.
        extra_application_dirs: Additional directories searched for ``.app`` bundles.
        block_size_kib: Overwrite block size for the shredder, in KiB.
        confirm_by_default: Default answer of the deletion confirmation prompt.
    """

    model_config = ConfigDict(extra="forbid")

    extra_protected_paths: Annotated[
        list[str],
        Field(description="Extra protected path prefixes (~ allowed)"),
    ] = []
    extra_safe_identifiers: Annotated[
        list[str],
        Field(description="Identifiers always considered installed"),
    ] = []
    extra_application_dirs: Annotated[
        list[str],
        Field(description="Extra directories containing .app bundles"),
    ] = []
    block_size_kib: Annotated[
        int,
        Field(ge=64, le=16384, description="Shredder block size in KiB (64-16384)"),
    ] = DEFAULT_BLOCK_SIZE_KIB
    confirm_by_default: Annotated[
        bool,
        Field(description="Default answer for deletion prompts"),
    ] = False

    @field_validator("extra_protected_paths", "extra_application_dirs")
    @classmethod
    def validate_paths(cls, value: list[str]) -> list[str]:
        """Reject relative paths; only absolute or ``~`` paths make sense here."""
        for item in value:
            if not (item.startswith("/") or item.startswith("~")):
                msg = f"path must be absolute or start with '~': {item!r}"
                raise ValueError(msg)
        return value

    @property
    def block_size(self) -> int:
        """Block size in bytes."""
        return self.block_size_kib * 1024


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file does not exist."""


class ConfigParseError(ConfigError):
    """Raised when the config file is not valid TOML."""


def load_config(path: Path | None = None) -> SweepConfig:
    """Load configuration from a TOML file.

    Args:
        path: Config file path. Defaults to ``~/.config/appsweep/config.toml``.

    Returns:
        Validated SweepConfig.

    Raises:
        ConfigNotFoundError: If the file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        msg = f"Config not found: {config_path}"
        raise ConfigNotFoundError(msg)

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML syntax: {e}"
        raise ConfigParseError(msg) from e
    except OSError as e:
        msg = f"Failed to read config: {e}"
        raise ConfigError(msg) from e

    try:
        return SweepConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        msg = f"Invalid config content: {e}"
        raise ConfigError(msg) from e


def load_config_or_default(path: Path | None = None) -> SweepConfig:
    """Load configuration, falling back to defaults when no file exists.

    Parse and validation errors are not swallowed.

    Raises:
        ConfigError: If the file exists but is invalid.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        logger.debug("No config file, using defaults")
        return SweepConfig()


def save_config(config: SweepConfig, path: Path | None = None) -> Path:
    """Write configuration to a TOML file atomically.

    Args:
        config: Settings to persist.
        path: Destination. Defaults to ``~/.config/appsweep/config.toml``.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(config.model_dump(), f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        msg = f"Failed to write config: {e}"
        raise ConfigError(msg) from e

    return config_path

"""Unit tests for the appsweep configuration file."""

import tomllib
from pathlib import Path
from unittest.mock import patch

import pytest
from appsweep.core.config import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    SweepConfig,
    load_config,
    load_config_or_default,
    save_config,
)


class TestSweepConfig:
    """Tests for SweepConfig model."""

    def test_defaults(self) -> None:
        """Defaults add nothing to the built-in lists."""
        config = SweepConfig()

        assert config.extra_protected_paths == []
        assert config.extra_safe_identifiers == []
        assert config.extra_application_dirs == []
        assert config.block_size_kib == 1024
        assert config.block_size == 1024 * 1024
        assert config.confirm_by_default is False

    def test_accepts_home_relative_paths(self) -> None:
        """Paths starting with ~ are accepted as-is."""
        config = SweepConfig(extra_protected_paths=["~/Projects", "/Volumes/Backup"])
        assert config.extra_protected_paths == ["~/Projects", "/Volumes/Backup"]

    def test_rejects_relative_paths(self) -> None:
        """Relative paths are rejected."""
        with pytest.raises(ValueError, match="absolute"):
            SweepConfig(extra_application_dirs=["Applications"])

    @pytest.mark.parametrize("value", [0, 63, 16385])
    def test_block_size_bounds(self, value: int) -> None:
        """Block size must stay within 64 KiB and 16 MiB."""
        with pytest.raises(ValueError):
            SweepConfig(block_size_kib=value)

    def test_extra_fields_forbidden(self) -> None:
        """Unknown keys are rejected."""
        with pytest.raises(ValueError):
            SweepConfig(passes=3)  # type: ignore[call-arg]


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_valid_file(self, tmp_path: Path) -> None:
        """A valid file is parsed into SweepConfig."""
        path = tmp_path / "config.toml"
        path.write_text('extra_safe_identifiers = ["com.example.inhouse"]\nblock_size_kib = 64\n')

        config = load_config(path)

        assert config.extra_safe_identifiers == ["com.example.inhouse"]
        assert config.block_size == 64 * 1024

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises ConfigNotFoundError."""
        with pytest.raises(ConfigNotFoundError):
            load_config(tmp_path / "config.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Broken TOML raises ConfigParseError."""
        path = tmp_path / "config.toml"
        path.write_text("block_size_kib = [")

        with pytest.raises(ConfigParseError):
            load_config(path)

    def test_invalid_content(self, tmp_path: Path) -> None:
        """Schema violations raise ConfigError."""
        path = tmp_path / "config.toml"
        path.write_text('extra_protected_paths = ["relative/dir"]\n')

        with pytest.raises(ConfigError, match="Invalid config content"):
            load_config(path)

    def test_uses_default_path(self, tmp_path: Path) -> None:
        """Without an argument the default config path is used."""
        path = tmp_path / "config.toml"
        path.write_text("confirm_by_default = true\n")

        with patch("appsweep.core.config.get_config_path", return_value=path):
            config = load_config()

        assert config.confirm_by_default is True


class TestLoadConfigOrDefault:
    """Tests for load_config_or_default function."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        """A missing file yields the default config."""
        assert load_config_or_default(tmp_path / "config.toml") == SweepConfig()

    def test_invalid_file_still_raises(self, tmp_path: Path) -> None:
        """An invalid file is reported, not replaced by defaults."""
        path = tmp_path / "config.toml"
        path.write_text("nonsense = = 1")

        with pytest.raises(ConfigParseError):
            load_config_or_default(path)


class TestSaveConfig:
    """Tests for save_config function."""

    def test_writes_toml(self, tmp_path: Path) -> None:
        """Saved config can be read back."""
        path = tmp_path / "sub" / "config.toml"
        config = SweepConfig(extra_protected_paths=["~/Projects"], block_size_kib=256)

        result = save_config(config, path)

        assert result == path
        with open(path, "rb") as f:
            data = tomllib.load(f)
        assert data["extra_protected_paths"] == ["~/Projects"]
        assert load_config(path) == config

    def test_leaves_no_temp_files(self, tmp_path: Path) -> None:
        """The atomic write leaves only the target file behind."""
        path = tmp_path / "config.toml"
        save_config(SweepConfig(), path)

        assert [p.name for p in tmp_path.iterdir()] == ["config.toml"]

    def test_write_failure_raises_config_error(self, tmp_path: Path) -> None:
        """OSError during replace is wrapped and the temp file removed."""
        path = tmp_path / "config.toml"

        with (
            patch("appsweep.core.config.os.replace", side_effect=OSError("disk full")),
            pytest.raises(ConfigError, match="disk full"),
        ):
            save_config(SweepConfig(), path)

        assert list(tmp_path.iterdir()) == []

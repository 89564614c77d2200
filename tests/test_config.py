"""Tests for config module."""

import stat
from pathlib import Path
from unittest.mock import Mock

import pytest
import yaml

from tests.factories import TEST_TOKEN, TEST_URL
from vpn_ip_tracker.config import (
    REPORT_URL_ENV_VAR,
    TOKEN_ENV_VAR,
    Config,
    get_config_path,
    get_default_report_url,
    load_config,
    store_config,
)
from vpn_ip_tracker.errors import ConfigInvalidError


class TestConfigDefaults:
    """Test default configuration values."""

    def test_default_config_values(self):
        """Config is empty and incomplete by default."""
        config = Config()

        assert config.token == ""
        assert config.report_url == ""
        assert config.log_level == "INFO"
        assert config.log_file is None
        assert config.is_complete is False

    def test_repr_hides_token(self):
        """Token never appears in the config repr."""
        config = Config(token=TEST_TOKEN, report_url=TEST_URL)

        assert TEST_TOKEN not in repr(config)
        assert TEST_URL in repr(config)


class TestConfigValidate:
    """Test config validation."""

    def test_valid_config(self):
        """Complete config with absolute URL validates."""
        Config(token=TEST_TOKEN, report_url=TEST_URL).validate()

    def test_missing_token(self):
        """Empty token is invalid."""
        with pytest.raises(ConfigInvalidError, match="token"):
            Config(token="", report_url=TEST_URL).validate()

    def test_missing_url(self):
        """Empty report URL is invalid."""
        with pytest.raises(ConfigInvalidError, match="URL"):
            Config(token=TEST_TOKEN, report_url="").validate()

    @pytest.mark.parametrize("url", ["report.example.test/ip", "/ip", "ftp://host/ip"])
    def test_relative_or_unsupported_url(self, url):
        """Report URL must be an absolute http(s) URL."""
        with pytest.raises(ConfigInvalidError):
            Config(token=TEST_TOKEN, report_url=url).validate()

    def test_error_does_not_contain_token(self):
        """Validation errors never echo the token."""
        with pytest.raises(ConfigInvalidError) as exc_info:
            Config(token=TEST_TOKEN, report_url="not a url").validate()

        assert TEST_TOKEN not in str(exc_info.value)


class TestGetConfigPath:
    """Test config path resolution."""

    def test_get_config_path_default(self):
        """Default config path is ~/.config/vpn-ip-tracker/config.yaml."""
        path = get_config_path()
        assert path == Path.home() / ".config" / "vpn-ip-tracker" / "config.yaml"

    def test_get_config_path_custom(self):
        """Can override config path."""
        custom = Path("/custom/config.yaml")
        assert get_config_path(custom) == custom


class TestLoadConfig:
    """Test config loading."""

    def test_load_config_no_file_no_env(self, tmp_path):
        """Nothing configured yields an incomplete config."""
        config = load_config(tmp_path / "missing.yaml", environ={})

        assert config.is_complete is False

    def test_load_config_from_file(self, tmp_path):
        """Config loads values from YAML file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            yaml.dump(
                {
                    "token": TEST_TOKEN,
                    "report_url": TEST_URL,
                    "log_level": "DEBUG",
                    "log_file": "/tmp/tracker.log",
                }
            )
        )

        config = load_config(config_file, environ={})

        assert config.token == TEST_TOKEN
        assert config.report_url == TEST_URL
        assert config.log_level == "DEBUG"
        assert config.log_file == "/tmp/tracker.log"

    def test_file_wins_over_environment(self, tmp_path):
        """A complete file is preferred to environment variables."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"token": TEST_TOKEN, "report_url": TEST_URL}))
        environ = {TOKEN_ENV_VAR: "env-token", REPORT_URL_ENV_VAR: "https://env.test/"}

        config = load_config(config_file, environ=environ)

        assert config.token == TEST_TOKEN
        assert config.report_url == TEST_URL

    def test_environment_fallback(self, tmp_path):
        """Environment supplies credentials when no file exists."""
        environ = {TOKEN_ENV_VAR: "env-token", REPORT_URL_ENV_VAR: "https://env.test/"}

        config = load_config(tmp_path / "missing.yaml", environ=environ)

        assert config.token == "env-token"
        assert config.report_url == "https://env.test/"

    def test_environment_fallback_for_incomplete_file(self, tmp_path):
        """A file with only logging settings still uses the environment."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"log_level": "WARNING"}))
        environ = {TOKEN_ENV_VAR: "env-token", REPORT_URL_ENV_VAR: "https://env.test/"}

        config = load_config(config_file, environ=environ)

        assert config.token == "env-token"
        assert config.log_level == "WARNING"

    def test_environment_requires_both_variables(self, tmp_path):
        """A lone environment variable is ignored."""
        config = load_config(tmp_path / "missing.yaml", environ={TOKEN_ENV_VAR: "env-token"})

        assert config.token == ""
        assert config.is_complete is False

    def test_reads_process_environment_by_default(self, tmp_path, monkeypatch):
        """os.environ is used when no environ is injected."""
        monkeypatch.setenv(TOKEN_ENV_VAR, "env-token")
        monkeypatch.setenv(REPORT_URL_ENV_VAR, "https://env.test/")

        config = load_config(tmp_path / "missing.yaml")

        assert config.token == "env-token"

    def test_load_config_with_injectable_reader(self, tmp_path):
        """Config loading supports injectable file reader for testing."""
        mock_reader = Mock(return_value={"token": TEST_TOKEN, "report_url": TEST_URL})

        config = load_config(tmp_path / "config.yaml", file_reader=mock_reader, environ={})

        assert config.is_complete is True
        mock_reader.assert_called_once_with(tmp_path / "config.yaml")

    def test_load_config_handles_invalid_yaml(self, tmp_path):
        """Invalid YAML is treated as no file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("invalid: yaml: content: [")

        config = load_config(config_file, environ={})

        assert config.is_complete is False

    def test_load_config_handles_empty_file(self, tmp_path):
        """Empty file is treated as no file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        config = load_config(config_file, environ={})

        assert config.log_level == "INFO"

    def test_load_config_handles_non_mapping(self, tmp_path):
        """A YAML list is treated as no file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- just\n- a list\n")

        config = load_config(config_file, environ={})

        assert config.is_complete is False

    def test_null_log_level_uses_default(self, tmp_path):
        """An explicit null log_level falls back to INFO."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("token: x\nlog_level: null\nlog_file: null\n")

        config = load_config(config_file, environ={})

        assert config.log_level == "INFO"
        assert config.log_file is None


class TestStoreConfig:
    """Test config storage."""

    def test_store_then_load(self, tmp_path):
        """Stored config loads back."""
        path = tmp_path / "nested" / "config.yaml"
        store_config(Config(token=TEST_TOKEN, report_url=TEST_URL), path)

        config = load_config(path, environ={})

        assert config.token == TEST_TOKEN
        assert config.report_url == TEST_URL

    def test_store_is_owner_only(self, tmp_path):
        """Config file holding the token is not world readable."""
        path = store_config(Config(token=TEST_TOKEN, report_url=TEST_URL), tmp_path / "c.yaml")

        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_store_overwrites(self, tmp_path):
        """Storing again replaces the previous values."""
        path = tmp_path / "config.yaml"
        store_config(Config(token="old-token", report_url=TEST_URL), path)
        store_config(Config(token=TEST_TOKEN, report_url=TEST_URL), path)

        assert load_config(path, environ={}).token == TEST_TOKEN


class TestDefaultReportUrl:
    """Test default report URL lookup."""

    def test_from_environment(self):
        assert get_default_report_url({"VPN_IP_TRACKER_REPORT_URL": TEST_URL}) == TEST_URL

    def test_missing(self):
        assert get_default_report_url({}) is None

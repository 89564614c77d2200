"""Configuration management for the VPN IP tracker."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping
from urllib.parse import urlparse

import yaml

from vpn_ip_tracker import APP_NAME
from vpn_ip_tracker.errors import ConfigInvalidError

# Environment fallback when no usable config file exists
REPORT_URL_ENV_VAR = "IPREPORT_ADDR"
TOKEN_ENV_VAR = "IPREPORT_APP_TOKEN"
# Report URL used by `configure` when --report-url is omitted
DEFAULT_REPORT_URL_ENV_VAR = "VPN_IP_TRACKER_REPORT_URL"


@dataclass
class Config:
    """Tracker configuration."""

    token: str = field(default="", repr=False)
    report_url: str = ""
    log_level: str = "INFO"
    log_file: str | None = None

    @property
    def is_complete(self) -> bool:
        """Whether both token and report URL are set."""
        return bool(self.token) and bool(self.report_url)

    def validate(self) -> None:
        """Check the config is usable for reporting.

        Raises:
            ConfigInvalidError: If the token or report URL is missing, or
                the URL is not absolute.
        """
        if not self.token:
            raise ConfigInvalidError("Application token is not configured")
        if not self.report_url:
            raise ConfigInvalidError("Report URL is not configured")

        parsed = urlparse(self.report_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigInvalidError(f"Report URL is not absolute: {self.report_url}")


def get_config_path(custom_path: Path | None = None) -> Path:
    """Get the configuration file path.

    Args:
        custom_path: Override path. If None, returns default.

    Returns:
        Path to config file.
    """
    if custom_path is not None:
        return custom_path
    return Path.home() / ".config" / APP_NAME / "config.yaml"


def get_default_report_url(environ: Mapping[str, str] | None = None) -> str | None:
    """Report URL baked into the environment, if any."""
    env = os.environ if environ is None else environ
    return env.get(DEFAULT_REPORT_URL_ENV_VAR) or None


def _default_file_reader(path: Path) -> dict[str, Any] | None:
    """Default file reader that loads YAML from disk."""
    if not path.exists():
        return None
    try:
        content = path.read_text()
        if not content.strip():
            return None
        data = yaml.safe_load(content)
    except yaml.YAMLError:
        return None
    return data if isinstance(data, dict) else None


def load_config(
    path: Path | None = None,
    file_reader: Callable[[Path], dict[str, Any] | None] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Config:
    """Load configuration.

    Token and report URL come from the config file when it holds both;
    otherwise from the IPREPORT_APP_TOKEN and IPREPORT_ADDR environment
    variables when both are set. Logging settings always come from the
    file.

    Args:
        path: Path to config file. If None, uses default path.
        file_reader: Injectable file reader for testing.
        environ: Injectable environment for testing.

    Returns:
        Config object. It may be incomplete; callers validate it.
    """
    config_path = get_config_path(path)
    reader = file_reader or _default_file_reader
    env = os.environ if environ is None else environ

    data = reader(config_path) or {}

    config = Config(
        token=str(data.get("token") or ""),
        report_url=str(data.get("report_url") or ""),
        log_level=data.get("log_level") or Config.log_level,
        log_file=data.get("log_file", Config.log_file),
    )

    if not config.is_complete:
        token = env.get(TOKEN_ENV_VAR)
        report_url = env.get(REPORT_URL_ENV_VAR)
        if token is not None and report_url is not None:
            config.token = token
            config.report_url = report_url

    return config


def store_config(config: Config, path: Path | None = None) -> Path:
    """Write configuration to disk.

    The file is created readable by the owner only since it holds the token.

    Args:
        config: Configuration to store.
        path: Path to config file. If None, uses default path.

    Returns:
        Path the config was written to.
    """
    config_path = get_config_path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {
        "token": config.token,
        "report_url": config.report_url,
        "log_level": config.log_level,
    }
    if config.log_file:
        data["log_file"] = config.log_file

    fd = os.open(config_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=False)
    return config_path

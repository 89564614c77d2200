"""systemd user service installation.

Only Linux is supported. The unit runs ``<executable> run`` and is
restarted by systemd if the tracker exits with an error.
"""

import logging
import platform
import shutil
import sys
from pathlib import Path

from vpn_ip_tracker import APP_NAME
from vpn_ip_tracker.errors import ServiceError

logger = logging.getLogger(__name__)

UNIT_NAME = f"{APP_NAME}.service"

UNIT_TEMPLATE = """\
[Unit]
Description=VPN IP Tracking Service that reports your VPN IP address
After=network-online.target
Wants=network-online.target

[Service]
Type=simple
WorkingDirectory={working_directory}
ExecStart={executable} run
Restart=on-failure
RestartSec=5

[Install]
WantedBy=default.target
"""


def get_unit_dir(custom_dir: Path | None = None) -> Path:
    """Get the systemd user unit directory."""
    if custom_dir is not None:
        return custom_dir
    return Path.home() / ".config" / "systemd" / "user"


def find_executable() -> Path:
    """Locate the installed console script.

    Raises:
        ServiceError: If the executable cannot be found.
    """
    found = shutil.which(APP_NAME)
    if found:
        return Path(found).resolve()

    # Fall back to the script next to the running interpreter (virtualenvs)
    candidate = Path(sys.executable).parent / APP_NAME
    if candidate.exists():
        return candidate.resolve()

    raise ServiceError(f"Cannot find the {APP_NAME} executable on PATH")


def render_unit(executable: Path) -> str:
    """Render the unit file for ``executable``."""
    return UNIT_TEMPLATE.format(
        working_directory=executable.parent,
        executable=executable,
    )


def _require_linux(system: str | None) -> None:
    system = system or platform.system()
    if system != "Linux":
        raise ServiceError(f"Service installation is not supported on {system}")


def install_service(
    executable: Path | None = None,
    unit_dir: Path | None = None,
    system: str | None = None,
) -> Path:
    """Write the systemd user unit.

    Args:
        executable: Tracker executable. If None, looked up on PATH.
        unit_dir: Unit directory. If None, uses ~/.config/systemd/user.
        system: ``platform.system()`` value (for testing).

    Returns:
        Path of the written unit file.

    Raises:
        ServiceError: On unsupported platforms or write failures.
    """
    _require_linux(system)

    executable = executable or find_executable()
    unit_path = get_unit_dir(unit_dir) / UNIT_NAME
    try:
        unit_path.parent.mkdir(parents=True, exist_ok=True)
        unit_path.write_text(render_unit(executable))
    except OSError as e:
        raise ServiceError(f"Failed to write {unit_path}: {e}") from e

    logger.info(f"Installed {unit_path}")
    return unit_path


def uninstall_service(
    unit_dir: Path | None = None,
    system: str | None = None,
) -> Path:
    """Remove the systemd user unit.

    Raises:
        ServiceError: On unsupported platforms, or if the unit is missing.
    """
    _require_linux(system)

    unit_path = get_unit_dir(unit_dir) / UNIT_NAME
    if not unit_path.exists():
        raise ServiceError(f"Service is not installed ({unit_path} not found)")
    try:
        unit_path.unlink()
    except OSError as e:
        raise ServiceError(f"Failed to remove {unit_path}: {e}") from e

    logger.info(f"Removed {unit_path}")
    return unit_path

"""Network interface enumeration.

Provides the ``InterfaceSource`` protocol the monitor polls, a netifaces
backed implementation for real hosts, and a static implementation for
tests and dry runs.
"""

import logging
import platform
import socket
from typing import Callable, Iterable, Protocol, Sequence, Union

import netifaces

from vpn_ip_tracker.errors import EnumerationError
from vpn_ip_tracker.snapshot import AddressFamily, InterfaceAddress, InterfaceRecord

logger = logging.getLogger(__name__)

# Registry class key of network adapters; connection names live below it
NETWORK_CLASS_KEY = r"SYSTEM\CurrentControlSet\Control\Network\{4D36E972-E325-11CE-BFC1-08002BE10318}"

Describe = Callable[[str], Union[str, None]]


class InterfaceSource(Protocol):
    """Protocol for interface enumeration."""

    def list(self) -> list[InterfaceRecord]:
        """Enumerate interfaces.

        Returns:
            Zero or more interface records.

        Raises:
            EnumerationError: If the OS could not be queried.
        """
        ...


class NetifacesInterfaceSource:
    """Enumerates interfaces via netifaces.

    Snapshot identity does not include the interface index: netifaces
    reports addresses per interface name, so name and address are stable
    on their own.

    On Windows netifaces names adapters by GUID, so each record also gets
    the connection name from the registry as its description.

    Example:
        source = NetifacesInterfaceSource()
        records = source.list()  # [InterfaceRecord(name="tun0", ...), ...]
    """

    _FAMILIES = {
        netifaces.AF_INET: AddressFamily.IPV4,
        netifaces.AF_INET6: AddressFamily.IPV6,
    }

    def __init__(self, describe: Describe | None = None, system: str | None = None):
        if describe is None and (system or platform.system()) == "Windows":
            describe = windows_connection_name
        self._describe = describe

    def list(self) -> list[InterfaceRecord]:
        try:
            names = netifaces.interfaces()
            return [self._read(name) for name in names]
        except (OSError, ValueError) as e:
            raise EnumerationError(f"Unable to get network interface info: {e}") from e

    def _read(self, name: str) -> InterfaceRecord:
        addrs = netifaces.ifaddresses(name)
        addresses = []
        for family, entries in addrs.items():
            tag = self._FAMILIES.get(family)
            if tag is None:
                continue
            for entry in entries:
                ip = entry.get("addr")
                if not ip:
                    continue
                # IPv6 link-local addresses carry a zone suffix ("fe80::1%tun0")
                addresses.append(InterfaceAddress(tag, ip.split("%", 1)[0]))
        return InterfaceRecord(
            name=name,
            addresses=tuple(addresses),
            index=_interface_index(name),
            description=self._describe(name) if self._describe else None,
        )


def _interface_index(name: str) -> int | None:
    try:
        return socket.if_nametoindex(name)
    except OSError:
        return None


def windows_connection_name(guid: str) -> str | None:
    """Look up the connection name Windows shows for an adapter GUID.

    Returns:
        The name, e.g. "OpenVPN TAP-Windows6", or None if the adapter has
        no connection entry.
    """
    import winreg

    key_path = f"{NETWORK_CLASS_KEY}\\{guid}\\Connection"
    try:
        with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, key_path) as key:
            name, _ = winreg.QueryValueEx(key, "Name")
    except OSError as e:
        logger.debug(f"No connection name for {guid}: {e}")
        return None
    return str(name) or None


class StaticInterfaceSource:
    """Returns scripted enumeration results.

    Each call to ``list()`` consumes the next entry of ``polls``; the last
    entry repeats once the script is exhausted. An entry that is an
    exception instance is raised instead of returned.

    Example:
        source = StaticInterfaceSource([[record_a], EnumerationError("boom")])
    """

    def __init__(
        self,
        polls: Sequence[Union[Iterable[InterfaceRecord], Exception]],
    ):
        if not polls:
            polls = [[]]
        self._polls = list(polls)
        self._calls = 0

    @property
    def calls(self) -> int:
        """Number of times ``list()`` was called."""
        return self._calls

    def list(self) -> list[InterfaceRecord]:
        entry = self._polls[min(self._calls, len(self._polls) - 1)]
        self._calls += 1
        if isinstance(entry, Exception):
            raise entry
        return list(entry)

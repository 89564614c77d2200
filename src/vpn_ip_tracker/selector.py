"""VPN interface selection.

Narrows an enumeration pass down to the VPN interfaces worth reporting.
The naming convention differs per platform, so it is injected as a
predicate rather than baked into the selector.
"""

import logging
import platform
from typing import Callable, Iterable

from vpn_ip_tracker.snapshot import InterfaceRecord, InterfaceSnapshot

logger = logging.getLogger(__name__)

NamePredicate = Callable[[str], bool]

# Tunnel interfaces on Linux, macOS and the BSDs
POSIX_VPN_PREFIXES = ("tun",)
# Adapter description of the OpenVPN TAP driver on Windows
WINDOWS_VPN_FRAGMENTS = ("OpenVPN TAP",)


def prefix_predicate(*prefixes: str) -> NamePredicate:
    """Match interface names starting with any of ``prefixes``."""
    if not prefixes:
        raise ValueError("At least one prefix is required")

    def matches(name: str) -> bool:
        return name.startswith(prefixes)

    return matches


def contains_predicate(*fragments: str) -> NamePredicate:
    """Match interface names containing any of ``fragments``."""
    if not fragments:
        raise ValueError("At least one fragment is required")

    def matches(name: str) -> bool:
        return any(fragment in name for fragment in fragments)

    return matches


def platform_default_predicate(system: str | None = None) -> NamePredicate:
    """Get the VPN naming convention for a platform.

    Args:
        system: ``platform.system()`` value. If None, uses the current host.

    Returns:
        Predicate matching VPN interface names on that platform.
    """
    system = system or platform.system()
    if system == "Windows":
        return contains_predicate(*WINDOWS_VPN_FRAGMENTS)
    return prefix_predicate(*POSIX_VPN_PREFIXES)


class VpnSelector:
    """Chooses VPN interface candidates from an enumeration pass.

    A record is a candidate when its display name (the adapter description
    where the source provides one) matches the predicate and it has
    at least one IPv4 address. Each candidate is projected to a snapshot of
    its lowest IPv4 address so the pick is stable when an interface carries
    several. Candidates keep enumeration order.

    Example:
        selector = VpnSelector(prefix_predicate("tun", "wg"))
        candidates = selector.select(source.list())
    """

    def __init__(self, name_predicate: NamePredicate | None = None):
        self._matches = name_predicate or platform_default_predicate()

    def select(self, records: Iterable[InterfaceRecord]) -> list[InterfaceSnapshot]:
        candidates = []
        for record in records:
            name = record.display_name
            if not self._matches(name):
                continue

            ipv4 = record.ipv4_addresses()
            if not ipv4:
                logger.debug(f"VPN interface {name} has no IPv4 address")
                continue

            candidates.append(
                InterfaceSnapshot(
                    name=name,
                    address=min(ipv4),
                    index=record.index,
                )
            )
        return candidates

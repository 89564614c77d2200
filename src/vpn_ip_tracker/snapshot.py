"""Interface records and snapshots.

``InterfaceRecord`` is the raw shape produced by an interface source on
every poll. ``InterfaceSnapshot`` is the normalized, comparable value the
change detector keeps as the last reported state.
"""

import ipaddress
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class AddressFamily(Enum):
    """Address family tag of an interface address."""

    IPV4 = "ipv4"
    IPV6 = "ipv6"
    OTHER = "other"


@dataclass(frozen=True)
class InterfaceAddress:
    """One address bound to an interface."""

    family: AddressFamily
    address: str


@dataclass(frozen=True)
class InterfaceRecord:
    """Raw interface data from one enumeration pass."""

    name: str
    addresses: tuple[InterfaceAddress, ...] = ()
    index: int | None = None
    description: str | None = None

    @property
    def display_name(self) -> str:
        """Human readable name; Windows adapters are keyed by GUID otherwise."""
        return self.description or self.name

    def ipv4_addresses(self) -> list[ipaddress.IPv4Address]:
        """Parseable IPv4 addresses of this record, in enumeration order."""
        result = []
        for addr in self.addresses:
            if addr.family is not AddressFamily.IPV4:
                continue
            try:
                result.append(ipaddress.IPv4Address(addr.address))
            except ValueError:
                continue
        return result


@dataclass(frozen=True)
class InterfaceSnapshot:
    """Reportable state of a VPN interface.

    Equality covers ``name`` and ``address`` only. ``index`` is carried for
    logging and never decides whether a change is reported.
    """

    name: str
    address: ipaddress.IPv4Address
    index: int | None = field(default=None, compare=False)

    @property
    def address_text(self) -> str:
        """Dotted-decimal form of the address."""
        return str(self.address)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "address": self.address_text,
            "index": self.index,
        }

    def __str__(self) -> str:
        return f"{self.name}={self.address_text}"

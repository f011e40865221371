"""Configuration snapshot types handed to the appliers.

Snapshots are transient: the comm channel builds one, passes it into a
single applier call, and nothing keeps it afterwards.
"""

from dataclasses import dataclass, field
from typing import Iterator, List


@dataclass
class NtpConfig:
    enabled: bool = False
    servers: List[str] = field(default_factory=list)


@dataclass
class DnsConfig:
    """Resolver settings; list order is resolver preference."""

    search: List[str] = field(default_factory=list)
    servers: List[str] = field(default_factory=list)


@dataclass
class SshKey:
    algorithm: str
    data: str
    comment: str = ""

    def line(self) -> str:
        """Render as an authorized_keys line (written verbatim, never validated)."""
        return f"{self.algorithm} {self.data} {self.comment}"


@dataclass
class SshKeyList:
    owner: str = ""
    keys: List[SshKey] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.keys)

    def __iter__(self) -> Iterator[SshKey]:
        return iter(self.keys)


@dataclass
class User:
    name: str
    password: str = ""
    ssh: SshKeyList = field(default_factory=SshKeyList)


@dataclass
class AuthConfig:
    users: List[User] = field(default_factory=list)


@dataclass
class IpAddress:
    address: str
    prefix: str

    def __str__(self) -> str:
        return f"{self.address}/{self.prefix}"


@dataclass
class Neighbor:
    """Permanent neighbor (ARP/NDP) entry."""

    address: str
    lladdr: str


@dataclass
class AddressFamily:
    """Per-family interface settings. An mtu of 0 means unset."""

    mtu: int = 0
    forwarding: bool = False
    addresses: List[IpAddress] = field(default_factory=list)
    neighbors: List[Neighbor] = field(default_factory=list)
    dhcp: bool = False


@dataclass
class Interface:
    name: str
    ipv4: AddressFamily = field(default_factory=AddressFamily)
    ipv6: AddressFamily = field(default_factory=AddressFamily)

    @property
    def mtu(self) -> int:
        return max(self.ipv4.mtu, self.ipv6.mtu)


@dataclass
class InterfaceList:
    interfaces: List[Interface] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.interfaces)

    def __iter__(self) -> Iterator[Interface]:
        return iter(self.interfaces)

"""Convert snapshot documents into model objects and dispatch them.

A snapshot document is a plain mapping (as produced by tomllib). Each
top-level table describes one configuration domain; tables that are absent
leave their domain alone.
"""

from typing import Any, Dict, List

from .effector import Effector
from .models import (
    AddressFamily,
    AuthConfig,
    DnsConfig,
    Interface,
    InterfaceList,
    IpAddress,
    Neighbor,
    NtpConfig,
    SshKey,
    SshKeyList,
    User,
)


class SnapshotError(ValueError):
    """A snapshot document does not have the expected shape."""


def _table(data: Any, name: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise SnapshotError(f"{name} must be a table")
    return data


def _array(data: Any, name: str) -> List[Any]:
    if not isinstance(data, list):
        raise SnapshotError(f"{name} must be an array")
    return data


def _strings(data: Dict[str, Any], key: str) -> List[str]:
    return [str(v) for v in _array(data.get(key, []), key)]


def parse_ntp(data: Dict[str, Any]) -> NtpConfig:
    data = _table(data, "ntp")
    return NtpConfig(enabled=bool(data.get("enabled", False)),
                     servers=_strings(data, "servers"))


def parse_dns(data: Dict[str, Any]) -> DnsConfig:
    data = _table(data, "dns")
    return DnsConfig(search=_strings(data, "search"),
                     servers=_strings(data, "servers"))


def _parse_family(data: Dict[str, Any]) -> AddressFamily:
    try:
        return AddressFamily(
            mtu=int(data.get("mtu", 0)),
            forwarding=bool(data.get("forwarding", False)),
            addresses=[IpAddress(str(a["address"]), str(a["prefix"]))
                       for a in data.get("addresses", [])],
            neighbors=[Neighbor(str(n["address"]), str(n["lladdr"]))
                       for n in data.get("neighbors", [])],
            dhcp=bool(data.get("dhcp", False)),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise SnapshotError(f"bad address family: {e}") from e


def parse_interfaces(data: List[Dict[str, Any]]) -> InterfaceList:
    interfaces = []
    for entry in _array(data, "interfaces"):
        entry = _table(entry, "interface")
        if "name" not in entry:
            raise SnapshotError("interface without a name")
        interfaces.append(Interface(
            name=str(entry["name"]),
            ipv4=_parse_family(entry.get("ipv4", {})),
            ipv6=_parse_family(entry.get("ipv6", {})),
        ))
    return InterfaceList(interfaces)


def parse_auth(data: Dict[str, Any]) -> AuthConfig:
    data = _table(data, "authentication")
    users = []
    seen = set()
    for entry in _array(data.get("users", []), "users"):
        try:
            name = str(entry["name"])
            keys = [SshKey(str(k["algorithm"]), str(k["data"]), str(k.get("comment", "")))
                    for k in entry.get("ssh_keys", [])]
        except (AttributeError, KeyError, TypeError) as e:
            raise SnapshotError(f"bad user entry: {e}") from e
        if name in seen:
            raise SnapshotError(f"duplicate user {name}")
        seen.add(name)
        users.append(User(name=name,
                          password=str(entry.get("password", "")),
                          ssh=SshKeyList(owner=name, keys=keys)))
    return AuthConfig(users)


def apply_snapshot(effector: Effector, data: Dict[str, Any]) -> None:
    """
    Hand each domain found in ``data`` to its applier.

    The whole document is parsed before anything is applied, so a malformed
    document changes nothing.

    Raises:
        SnapshotError: If the document is malformed
    """
    ntp = parse_ntp(data["ntp"]) if "ntp" in data else None
    dns = parse_dns(data["dns"]) if "dns" in data else None
    interfaces = parse_interfaces(data["interfaces"]) if "interfaces" in data else None
    auth = parse_auth(data["authentication"]) if "authentication" in data else None
    values = _table(data.get("values", {}), "values")

    if ntp is not None:
        effector.set_ntp_server(ntp)
    if dns is not None:
        effector.set_dns(dns)
    if interfaces is not None:
        effector.set_if_addr(interfaces)
        effector.set_if_neigh(interfaces)
    if auth is not None:
        effector.set_authentication(auth)
    for path, value in values.items():
        effector.set_value(path, str(value))

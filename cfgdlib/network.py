"""Interface addressing (systemd-networkd) and the neighbor table."""

import logging
from typing import Optional

from .base import ApplyContext, ApplyResult
from .files import ensure_dir, purge_dir, render_template, write_file
from .models import Interface, InterfaceList
from .services import NETWORKD, flush_permanent_neighbors, reload_or_restart_service, replace_neighbor

logger = logging.getLogger(__name__)

# Linux IFNAMSIZ minus the terminating NUL
MAX_IFNAME = 15


def ip_forward_mode(ipv4: bool, ipv6: bool) -> Optional[str]:
    """
    Get the IPForward= value for a pair of per-family forwarding flags.

    Returns:
        "yes", "ipv4", "ipv6", or None when neither family forwards
    """
    if ipv4 and ipv6:
        return "yes"
    if ipv4:
        return "ipv4"
    if ipv6:
        return "ipv6"
    return None


def valid_ifname(name: str) -> bool:
    """Check that an interface name is also safe to use as a file name."""
    if not name or len(name) > MAX_IFNAME or name in (".", ".."):
        return False
    return not any(c == "/" or c.isspace() for c in name)


def render_network(iface: Interface, ident: str) -> str:
    """Render the .network file for one interface."""
    addresses = [str(a) for a in iface.ipv4.addresses]
    addresses += [str(a) for a in iface.ipv6.addresses]
    return render_template("interface.network.j2", {
        "ident": ident,
        "name": iface.name,
        "mtu": iface.mtu,
        "dhcp": iface.ipv4.dhcp,
        "addresses": addresses,
        "forward": ip_forward_mode(iface.ipv4.forwarding, iface.ipv6.forwarding),
    })


def set_if_addr(interfaces: InterfaceList, ctx: ApplyContext) -> ApplyResult:
    """
    Replace all .network files and reload systemd-networkd.

    Every existing .network file is removed first; that is how an interface
    that disappeared from the snapshot loses its configuration. networkd
    cannot match several interfaces from one file, so each interface gets
    its own. The first file that cannot be written abandons the whole call,
    including the reload.
    """
    network_dir = ctx.paths.networkd_dir
    purge_dir(network_dir, "*.network")
    try:
        ensure_dir(network_dir)
    except OSError as e:
        logger.error("Cannot create %s: %s", network_dir, e.strerror or e)
        return ApplyResult.failed(f"cannot create {network_dir}")

    for iface in interfaces:
        if not valid_ifname(iface.name):
            logger.error("Invalid interface name %r", iface.name)
            return ApplyResult.failed(f"invalid interface name {iface.name!r}")

        path = ctx.paths.network_file(iface.name)
        if not write_file(path, render_network(iface, ctx.ident)):
            return ApplyResult.failed(f"cannot write {path}")

    reload_or_restart_service(ctx.runner, NETWORKD)
    return ApplyResult.applied()


def set_if_neigh(interfaces: InterfaceList, ctx: ApplyContext) -> ApplyResult:
    """
    Replace all permanent neighbor entries.

    Each entry is installed independently; a failed command is logged by
    the runner and the remaining entries are still tried.
    """
    flush_permanent_neighbors(ctx.runner)

    failures = 0
    for iface in interfaces:
        for neigh in iface.ipv4.neighbors + iface.ipv6.neighbors:
            if replace_neighbor(ctx.runner, neigh.address, neigh.lladdr, iface.name) != 0:
                failures += 1

    if failures:
        logger.warning("%d neighbor entr%s could not be installed",
                       failures, "y" if failures == 1 else "ies")
    return ApplyResult.applied()

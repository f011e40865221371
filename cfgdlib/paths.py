"""Centralized path configuration for cfgd.

All system locations the appliers touch are derived from a single root
directory, so the same code can target the live system or a staging tree.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

# Home directory of the superuser on the target platform
ROOT_HOME = "/home/root"

# Service account whose keys live outside any home directory
NETCONF_ACCOUNT = "netconfd"


@dataclass
class SystemPaths:
    """System file locations, relative to ``root``."""

    root: Path = field(default_factory=lambda: Path("/"))

    def __post_init__(self):
        self.root = Path(self.root)

    def rebase(self, path: Union[str, Path]) -> Path:
        """
        Map an absolute system path below ``root``.

        Args:
            path: Absolute path as seen on the live system (e.g. a home directory)

        Returns:
            The same path relative to the configured root
        """
        return self.root / str(path).lstrip("/")

    @property
    def timesyncd_conf(self) -> Path:
        return self.rebase("/etc/systemd/timesyncd.conf")

    @property
    def resolved_conf(self) -> Path:
        return self.rebase("/etc/systemd/resolved.conf")

    @property
    def networkd_dir(self) -> Path:
        return self.rebase("/etc/systemd/network")

    def network_file(self, ifname: str) -> Path:
        """Get the systemd-networkd file for one interface."""
        return self.networkd_dir / f"{ifname}.network"

    @property
    def root_authorized_keys(self) -> Path:
        return self.rebase(f"{ROOT_HOME}/.ssh/authorized_keys")

    @property
    def netconf_authorized_keys(self) -> Path:
        return self.rebase("/etc/netconf/authorized_keys")

    @property
    def spool_dir(self) -> Path:
        return self.rebase("/run/cfgd/spool")

"""The effector: one entry point per configuration domain."""

import logging
from typing import Dict, Optional

from .auth import set_authentication, set_ssh_keys
from .base import ApplyContext, ApplyResult
from .command import CommandRunner
from .models import AuthConfig, DnsConfig, InterfaceList, NtpConfig, SshKeyList
from .network import set_if_addr, set_if_neigh
from .paths import SystemPaths
from .resolver import set_dns
from .timesync import set_ntp_server
from .values import set_value

logger = logging.getLogger(__name__)


class Effector:
    """
    Apply configuration snapshots to the running system.

    Every method returns an ApplyResult and never raises: a failure stays
    within the call (and, for authentication, within the one user).
    """

    def __init__(self, paths: Optional[SystemPaths] = None,
                 runner: Optional[CommandRunner] = None):
        self.ctx = ApplyContext(
            paths=paths or SystemPaths(),
            runner=runner or CommandRunner(),
        )

    def _guard(self, domain: str, func, *args) -> ApplyResult:
        """Run one applier, turning any unexpected exception into a failure."""
        try:
            result = func(*args, self.ctx)
        except Exception as e:
            logger.exception("Applying %s failed", domain)
            return ApplyResult.failed(f"{domain}: {e}")

        if not result.ok:
            logger.error("Applying %s failed: %s", domain, result.reason)
        return result

    # -------------------------------------------------------------------------
    # Time and name resolution
    # -------------------------------------------------------------------------

    def set_ntp_server(self, ntp: NtpConfig) -> ApplyResult:
        return self._guard("ntp", set_ntp_server, ntp)

    def set_dns(self, dns: DnsConfig) -> ApplyResult:
        return self._guard("dns", set_dns, dns)

    # -------------------------------------------------------------------------
    # Interfaces
    # -------------------------------------------------------------------------

    def set_if_addr(self, interfaces: InterfaceList) -> ApplyResult:
        return self._guard("interface addresses", set_if_addr, interfaces)

    def set_if_neigh(self, interfaces: InterfaceList) -> ApplyResult:
        return self._guard("neighbors", set_if_neigh, interfaces)

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    def set_ssh_keys(self, name: str, keys: SshKeyList) -> ApplyResult:
        return self._guard(f"ssh keys for {name}", set_ssh_keys, name, keys)

    def set_authentication(self, auth: AuthConfig) -> Dict[str, ApplyResult]:
        try:
            return set_authentication(
                auth, self.ctx,
                on_user=lambda name, keys, ctx: self.set_ssh_keys(name, keys),
            )
        except Exception:
            logger.exception("Applying authentication failed")
            return {}

    # -------------------------------------------------------------------------
    # Scalar values
    # -------------------------------------------------------------------------

    def set_value(self, path: str, value: str) -> ApplyResult:
        return self._guard(path, set_value, path, value)

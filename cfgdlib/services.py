"""Service manager and neighbor table commands."""

from .command import CommandRunner

TIMESYNCD = "systemd-timesyncd"
RESOLVED = "systemd-resolved"
NETWORKD = "systemd-networkd"


def _systemctl(runner: CommandRunner, *args: str) -> int:
    """Run a systemctl command."""
    return runner.run(["systemctl"] + list(args))


def stop_service(runner: CommandRunner, service: str) -> int:
    """Stop a service."""
    return _systemctl(runner, "stop", service)


def reload_or_restart_service(runner: CommandRunner, service: str) -> int:
    """
    Reload a service, or start it if it is not running.

    Succeeds regardless of the service's prior state.
    """
    return _systemctl(runner, "reload-or-restart", service)


def set_ntp(runner: CommandRunner, enabled: bool) -> int:
    """Enable or disable network time synchronization."""
    return runner.runf("timedatectl set-ntp {}", int(enabled))


def flush_permanent_neighbors(runner: CommandRunner) -> int:
    """Remove every permanent neighbor entry on the system."""
    return runner.run(["ip", "neigh", "flush", "nud", "permanent"])


def replace_neighbor(runner: CommandRunner, address: str, lladdr: str, dev: str) -> int:
    """Add or replace one permanent neighbor entry on ``dev``."""
    return runner.runf("ip neigh replace {} lladdr {} nud permanent dev {}",
                       address, lladdr, dev)

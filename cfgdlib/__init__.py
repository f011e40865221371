"""cfgd - apply configuration snapshots to a systemd-based host."""

__version__ = "0.1.0"

from .base import ApplyResult, Status
from .command import CommandRunner
from .effector import Effector
from .paths import SystemPaths

__all__ = [
    "ApplyResult",
    "Status",
    "CommandRunner",
    "Effector",
    "SystemPaths",
]

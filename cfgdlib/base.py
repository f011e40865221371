"""Shared types for the cfgd domain appliers."""

from dataclasses import dataclass, field
from enum import Enum

from . import __version__
from .command import CommandRunner
from .paths import SystemPaths

IDENT = f"cfgd v{__version__}"


class Status(Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ApplyResult:
    """
    Outcome of one applier call.

    Skips are ordinary control flow (unknown account, nothing to write) and
    carry the reason so callers and tests can tell them apart from failures.
    """

    status: Status
    reason: str = ""

    @classmethod
    def applied(cls) -> "ApplyResult":
        return cls(Status.APPLIED)

    @classmethod
    def skipped(cls, reason: str) -> "ApplyResult":
        return cls(Status.SKIPPED, reason)

    @classmethod
    def failed(cls, reason: str) -> "ApplyResult":
        return cls(Status.FAILED, reason)

    @property
    def ok(self) -> bool:
        return self.status is not Status.FAILED


@dataclass
class ApplyContext:
    """
    Everything an applier needs besides its snapshot.

    Args:
        paths: Where generated files go
        runner: Command executor used for service reloads
        ident: Generator name written into every file header
    """

    paths: SystemPaths = field(default_factory=SystemPaths)
    runner: CommandRunner = field(default_factory=CommandRunner)
    ident: str = IDENT

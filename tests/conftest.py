"""
Pytest configuration and shared fixtures.

Commands are never really executed: subprocess.run inside the command
module is replaced by a recorder, and every file lands below tmp_path.
"""

import os
import signal
import subprocess
from pathlib import Path
from types import SimpleNamespace
from typing import Dict, List

import pytest

from cfgdlib import command
from cfgdlib.base import ApplyContext
from cfgdlib.command import CommandRunner
from cfgdlib.effector import Effector
from cfgdlib.paths import SystemPaths


class CommandRecorder:
    """
    Stand-in for subprocess.run that records argument vectors.

    Like the real one it refuses arguments containing a NUL byte.
    """

    def __init__(self):
        self.calls: List[List[str]] = []
        self.returncodes: Dict[str, int] = {}

    def __call__(self, argv, **kwargs):
        if any("\x00" in arg for arg in argv):
            raise ValueError("embedded null byte")
        self.calls.append(list(argv))
        rc = self.returncodes.get(" ".join(argv), 0)
        return subprocess.CompletedProcess(argv, rc, stdout="", stderr="")

    def fail(self, cmdline: str, rc: int = 1) -> None:
        self.returncodes[cmdline] = rc


@pytest.fixture
def commands(monkeypatch) -> CommandRecorder:
    recorder = CommandRecorder()
    monkeypatch.setattr(command.subprocess, "run", recorder)
    return recorder


@pytest.fixture
def paths(tmp_path: Path) -> SystemPaths:
    root = tmp_path / "root"
    for d in ("etc/systemd/network", "etc/netconf", "home/root/.ssh"):
        (root / d).mkdir(parents=True)
    return SystemPaths(root=root)


@pytest.fixture
def ctx(paths: SystemPaths, commands: CommandRecorder) -> ApplyContext:
    return ApplyContext(paths=paths, runner=CommandRunner(), ident="cfgd vtest")


@pytest.fixture
def effector(paths: SystemPaths, commands: CommandRecorder) -> Effector:
    return Effector(paths=paths)


@pytest.fixture
def accounts(monkeypatch, paths: SystemPaths) -> Dict[str, str]:
    """
    Fake password database.

    Add entries as name -> home directory; unknown names raise KeyError
    like the real pwd.getpwnam. Every account is owned by the test user so
    chown works without privileges.
    """
    db: Dict[str, str] = {}

    def getpwnam(name):
        if name not in db:
            raise KeyError(f"getpwnam(): name not found: '{name}'")
        return SimpleNamespace(pw_name=name, pw_dir=db[name],
                               pw_uid=os.getuid(), pw_gid=os.getgid())

    monkeypatch.setattr("cfgdlib.auth.pwd.getpwnam", getpwnam)
    return db


@pytest.fixture
def restore_signals():
    """Put back every handler the daemon tests may replace."""
    signums = (signal.SIGUSR1, signal.SIGUSR2, signal.SIGPIPE,
               signal.SIGHUP, signal.SIGINT, signal.SIGTERM)
    saved = {s: signal.getsignal(s) for s in signums}
    yield
    for s, handler in saved.items():
        signal.signal(s, handler)

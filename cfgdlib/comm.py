"""Comm channel: deliver snapshots from a spool directory to the effector.

Snapshot files are TOML documents (see snapshot.py). The directory is
polled from the event loop, so deliveries are serialized with each other
and with signal handling.
"""

import asyncio
import logging
import tomllib
from pathlib import Path
from typing import Optional, Union

from .effector import Effector
from .files import ensure_dir
from .snapshot import SnapshotError, apply_snapshot

logger = logging.getLogger(__name__)

POLL_INTERVAL = 2.0


class CommChannel:
    """Interface the daemon uses to start and stop snapshot delivery."""

    def start(self, loop: asyncio.AbstractEventLoop, effector: Effector) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError


class SpoolChannel(CommChannel):
    """
    Apply ``*.toml`` snapshot files dropped into a spool directory.

    Files are processed in name order and removed afterwards, whether or
    not they could be applied.

    Producers must write a snapshot under a name starting with "." and
    rename it into place once complete; dot files are never picked up, so
    a half-written snapshot is not applied or removed.
    """

    def __init__(self, spool_dir: Union[str, Path], interval: float = POLL_INTERVAL):
        self.spool_dir = Path(spool_dir)
        self.interval = interval
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._effector: Optional[Effector] = None
        self._handle: Optional[asyncio.Handle] = None

    def start(self, loop: asyncio.AbstractEventLoop, effector: Effector) -> None:
        try:
            ensure_dir(self.spool_dir, mode=0o700)
        except OSError as e:
            logger.error("Cannot create spool directory %s: %s", self.spool_dir, e.strerror or e)
            return

        self._loop = loop
        self._effector = effector
        logger.info("Watching %s for configuration snapshots", self.spool_dir)
        self._handle = loop.call_soon(self._poll)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _poll(self) -> None:
        try:
            self.process_pending()
        finally:
            self._handle = self._loop.call_later(self.interval, self._poll)

    def process_pending(self) -> int:
        """
        Apply every snapshot file currently in the spool directory.

        Returns:
            Number of files processed
        """
        count = 0
        for path in sorted(self.spool_dir.glob("*.toml")):
            if path.name.startswith("."):
                continue
            self._deliver(path)
            count += 1
        return count

    def _deliver(self, path: Path) -> None:
        logger.debug("Processing snapshot %s", path.name)
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
            apply_snapshot(self._effector, data)
        except (OSError, tomllib.TOMLDecodeError, SnapshotError) as e:
            logger.error("Rejected snapshot %s: %s", path.name, e)
        finally:
            try:
                path.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.error("Cannot remove snapshot %s: %s", path.name, e.strerror or e)

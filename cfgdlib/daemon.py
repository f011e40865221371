"""Signal handling and the event loop driver.

Everything, including every applier call, runs on the one event loop
thread. Commands block that thread while they run.
"""

import asyncio
import logging
import signal
from enum import Enum
from typing import Optional

from .comm import CommChannel
from .effector import Effector
from .log import NOTICE, toggle_verbosity

logger = logging.getLogger(__name__)

TERMINATION_SIGNALS = (signal.SIGHUP, signal.SIGINT, signal.SIGTERM)


class State(Enum):
    RUNNING = "running"
    SHUTTING_DOWN = "shutting down"


class Daemon:
    """
    Own the event loop and the process signal handlers.

    SIGUSR1 is accepted and ignored, SIGUSR2 toggles debug logging, SIGPIPE
    is only logged. SIGHUP, SIGINT and SIGTERM stop the loop; the handler
    for the signal that arrived is removed at the same time, so a second
    delivery kills the process even if shutdown hangs.
    """

    def __init__(self, effector: Effector, comm: Optional[CommChannel] = None,
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        self.effector = effector
        self.comm = comm
        self.loop = loop or asyncio.new_event_loop()
        self.state = State.RUNNING

    def install_signal_handlers(self) -> None:
        self.loop.add_signal_handler(signal.SIGUSR1, self._on_usr1)
        self.loop.add_signal_handler(signal.SIGUSR2, self._on_usr2)
        self.loop.add_signal_handler(signal.SIGPIPE, self._on_pipe)
        for signum in TERMINATION_SIGNALS:
            self.loop.add_signal_handler(signum, self._on_term, signum)

    def _on_usr1(self) -> None:
        logger.debug("SIGUSR1 received")

    def _on_usr2(self) -> None:
        toggle_verbosity()

    def _on_pipe(self) -> None:
        logger.debug("sig_pipe")

    def _on_term(self, signum: int) -> None:
        name = signal.Signals(signum).name
        logger.info("Signal %s received. Shutting down gracefully...", name)

        self.state = State.SHUTTING_DOWN
        if self.comm is not None:
            self.comm.stop()
        self.loop.stop()

        # The next delivery of this signal takes the default action
        self.loop.remove_signal_handler(signum)
        signal.signal(signum, signal.SIG_DFL)

    def start(self) -> None:
        """Register signal handlers and start snapshot delivery."""
        self.install_signal_handlers()
        if self.comm is not None:
            self.comm.start(self.loop, self.effector)

    def run(self, banner: str = "") -> None:
        """Run until a termination signal arrives, then close the loop."""
        self.start()
        if banner:
            logger.log(NOTICE, "startup %s", banner)
        try:
            if self.state is State.RUNNING:
                self.loop.run_forever()
        finally:
            if self.comm is not None:
                self.comm.stop()
            self.loop.close()

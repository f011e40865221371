"""Log sink and process-wide verbosity.

The verbosity level lives on the root logger: it is set once at startup
and afterwards only changed by the SIGUSR2 handler. Everything runs on the
event loop thread, so no locking is needed.
"""

import logging
import logging.handlers
import queue
import sys
from typing import List, Optional

NOTICE = 25
logging.addLevelName(NOTICE, "NOTICE")

SYSLOG_PORT = 514
SYSLOG_SOCKET = "/dev/log"

_listener: Optional[logging.handlers.QueueListener] = None
_remote: Optional[str] = None


class _SysLogHandler(logging.handlers.SysLogHandler):
    priority_map = dict(logging.handlers.SysLogHandler.priority_map, NOTICE="notice")


def _syslog_handler(ident: str, remote: Optional[str]) -> Optional[logging.Handler]:
    address = (remote, SYSLOG_PORT) if remote else SYSLOG_SOCKET
    try:
        handler = _SysLogHandler(address=address,
                                 facility=logging.handlers.SysLogHandler.LOG_DAEMON)
    except OSError as e:
        print(f"{ident}: syslog unavailable at {address}: {e}", file=sys.stderr)
        return None
    handler.setFormatter(logging.Formatter(f"{ident}[%(process)d]: %(message)s"))
    return handler


def setup_logging(ident: str, level: int = logging.INFO,
                  remote: Optional[str] = None) -> None:
    """
    Route all logging through a queue to stderr and syslog.

    Log calls only enqueue a record; a listener thread does the I/O, so a
    slow or missing log destination never holds up the caller.

    Args:
        ident: Program name used as the syslog tag
        level: Initial verbosity
        remote: IPv4 address of a remote syslog server, if any
    """
    global _listener, _remote

    shutdown_logging()
    logging.raiseExceptions = False
    _remote = remote

    stderr = logging.StreamHandler(sys.stderr)
    stderr.setFormatter(logging.Formatter(
        f"{ident}[%(process)d]: %(levelname)s %(message)s"))
    handlers: List[logging.Handler] = [stderr]

    syslog = _syslog_handler(ident, remote)
    if syslog is not None:
        handlers.append(syslog)

    records: queue.SimpleQueue = queue.SimpleQueue()
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.addHandler(logging.handlers.QueueHandler(records))
    root.setLevel(level)

    _listener = logging.handlers.QueueListener(records, *handlers)
    _listener.start()


def shutdown_logging() -> None:
    """Flush queued records and stop the listener thread."""
    global _listener
    if _listener is not None:
        _listener.stop()
        _listener = None


def remote_destination() -> Optional[str]:
    return _remote


def toggle_verbosity() -> int:
    """
    Flip between DEBUG and INFO.

    Returns:
        The new level
    """
    root = logging.getLogger()
    level = logging.INFO if root.level == logging.DEBUG else logging.DEBUG
    root.setLevel(level)
    root.log(NOTICE, "Log level set to %s", logging.getLevelName(level))
    return level

#!/usr/bin/env python3
"""
cfgd - configuration effector daemon.

Receives configuration snapshots (NTP, DNS, interfaces, neighbors, SSH keys)
and makes the running system match them by regenerating systemd
configuration files and reloading the affected services.

Usage:
    cfgd                    # Run with defaults
    cfgd -x                 # Debug logging
    cfgd -l 192.0.2.10      # Also send the log to a remote syslog server
    cfgd -s /tmp/spool      # Read snapshots from another spool directory

Signals:
    SIGUSR2                 Toggle debug logging
    SIGHUP, SIGINT, SIGTERM Shut down (a second signal kills immediately)
"""

import argparse
import itertools
import logging
import os
import platform
import resource
import socket
import sys
from pathlib import Path
from typing import List, Optional

from cfgdlib import __version__
from cfgdlib.base import IDENT
from cfgdlib.comm import SpoolChannel
from cfgdlib.daemon import Daemon
from cfgdlib.effector import Effector
from cfgdlib.log import setup_logging, shutdown_logging
from cfgdlib.paths import SystemPaths

logger = logging.getLogger("cfgd")

BUILD = f"build with python {platform.python_version()}"

# options whose value may be the next word on the command line
VALUE_OPTIONS = ("-l", "--log", "-s", "--spool", "--root")
SHORT_VALUE_LETTERS = "ls"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cfgd",
        description=f"cfgd, Version: {__version__}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "-l", "--log",
        metavar="IP",
        help="write log to syslog at this IP",
    )
    parser.add_argument(
        "-x",
        dest="debug",
        action="store_true",
        help="debug logging",
    )
    parser.add_argument(
        "-s", "--spool",
        metavar="DIR",
        help="directory to read configuration snapshots from",
    )
    parser.add_argument(
        "--root",
        metavar="DIR",
        default="/",
        help="apply configuration below this directory instead of /",
    )
    return parser


def split_short_options(argv: List[str]) -> List[str]:
    """
    Split clustered short options (``-xq`` into ``-x -q``) the way getopt
    reads them, so an unknown letter in a cluster is only reported.
    """
    result = []
    args = iter(argv)
    for arg in args:
        if arg == "--":
            result.append(arg)
            result.extend(args)
            break
        if arg in VALUE_OPTIONS:
            result.append(arg)
            result.extend(itertools.islice(args, 1))
            continue
        clustered = len(arg) > 2 and arg[0] == "-" and arg[1].isalpha()
        if not clustered:
            result.append(arg)
            continue

        for i, letter in enumerate(arg[1:], start=1):
            if letter in SHORT_VALUE_LETTERS:
                # the rest of the cluster, or else the next word, is the value
                result.append("-" + arg[i:])
                if i == len(arg) - 1:
                    result.extend(itertools.islice(args, 1))
                break
            result.append("-" + letter)
    return result


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse the command line.

    Unknown options are reported and otherwise ignored. An invalid log
    address is fatal.
    """
    if argv is None:
        argv = sys.argv[1:]
    args, unknown = build_parser().parse_known_args(split_short_options(argv))
    for opt in unknown:
        print(f"cfgd: ignoring unknown option '{opt}'", file=sys.stderr)

    if args.log is not None:
        try:
            socket.inet_aton(args.log)
        except OSError:
            print(f"Invalid IP address: '{args.log}'", file=sys.stderr)
            sys.exit(1)

    return args


def enable_core_dumps() -> None:
    """Allow core files of unlimited size."""
    try:
        resource.setrlimit(resource.RLIMIT_CORE,
                           (resource.RLIM_INFINITY, resource.RLIM_INFINITY))
    except (ValueError, OSError) as e:
        logger.warning("Cannot raise core file limit: %s", e)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)

    setup_logging(
        os.path.basename(sys.argv[0]) or "cfgd",
        level=logging.DEBUG if args.debug else logging.INFO,
        remote=args.log,
    )
    enable_core_dumps()

    paths = SystemPaths(root=Path(args.root))
    spool_dir = Path(args.spool) if args.spool else paths.spool_dir

    daemon = Daemon(Effector(paths=paths), comm=SpoolChannel(spool_dir))
    try:
        daemon.run(banner=f"{IDENT} {BUILD}")
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)
    finally:
        shutdown_logging()


if __name__ == "__main__":
    main()

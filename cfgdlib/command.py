"""External command execution for the appliers.

Commands are always run from an argument vector, never through a shell, so
configuration values interpolated into a command stay single arguments.
"""

import logging
import os
import subprocess
from typing import List, Sequence

logger = logging.getLogger(__name__)

# Longest command line (in characters) that runf() will render
MAX_COMMAND_LINE = 1023

# Exit status reported when the program cannot be started at all
EXEC_FAILED = 127


def render_argv(fmt: str, *args) -> List[str]:
    """
    Render a command template into an argument vector.

    The template is split on whitespace first; each ``{}`` placeholder is
    then filled with the next argument. A value containing spaces or shell
    metacharacters therefore ends up as exactly one argument.

    Args:
        fmt: Command template, e.g. ``"timedatectl set-ntp {}"``
        *args: Values for the placeholders, in order

    Returns:
        The argument vector
    """
    argv = []
    pos = 0
    for token in fmt.split():
        count = token.count("{}")
        argv.append(token.format(*args[pos:pos + count]))
        pos += count
    if pos != len(args):
        raise ValueError(f"{len(args)} arguments for {pos} placeholders in {fmt!r}")
    return argv


def _truncate(argv: Sequence[str], limit: int) -> List[str]:
    """Cut an argument vector so its command line fits in ``limit`` characters."""
    result = []
    used = 0
    for arg in argv:
        room = limit - used - (1 if result else 0)
        if room <= 0:
            break
        if len(arg) > room:
            result.append(arg[:room])
            break
        result.append(arg)
        used += len(arg) + (1 if len(result) > 1 else 0)
    return result


class CommandRunner:
    """
    Run commands synchronously and log the outcome.

    A non-zero exit status is never raised; callers decide what a failure
    means, and today every caller just carries on.
    """

    def run(self, argv: Sequence[str]) -> int:
        """
        Run a command and wait for it to exit.

        Args:
            argv: Program and arguments

        Returns:
            The exit status, or EXEC_FAILED if the program could not be started
        """
        cmdline = " ".join(argv)
        logger.info("cmd=[%s]", cmdline)

        error = os.strerror(0)
        try:
            result = subprocess.run(list(argv), capture_output=True, text=True, check=False)
            rc = result.returncode
            if result.stderr:
                logger.debug("cmd=[%s] stderr: %s", cmdline, result.stderr.strip())
        except OSError as e:
            rc = EXEC_FAILED
            error = os.strerror(e.errno) if e.errno else str(e)
        except ValueError as e:
            # arguments the OS cannot take at all, e.g. an embedded NUL byte
            rc = EXEC_FAILED
            error = str(e)

        logger.info("cmd=[%s], rc=%d, error=%s", cmdline, rc, error)
        return rc

    def runf(self, fmt: str, *args) -> int:
        """
        Render a command template (see render_argv) and run it.

        Lines longer than MAX_COMMAND_LINE are truncated with a warning.
        """
        argv = render_argv(fmt, *args)
        if len(" ".join(argv)) > MAX_COMMAND_LINE:
            logger.warning("Command line truncated to %d characters: %s",
                           MAX_COMMAND_LINE, " ".join(argv)[:80])
            argv = _truncate(argv, MAX_COMMAND_LINE)
        return self.run(argv)

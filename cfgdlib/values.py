"""Scalar settings addressed by dotted parameter path."""

import logging
from typing import Callable, Dict

from .base import ApplyContext, ApplyResult

logger = logging.getLogger(__name__)

ValueHandler = Callable[[str, ApplyContext], ApplyResult]

_handlers: Dict[str, ValueHandler] = {}


def value_handler(path: str):
    """Register a function as the handler for one parameter path."""
    def register(func: ValueHandler) -> ValueHandler:
        _handlers[path] = func
        return func
    return register


@value_handler("system.hostname")
def _set_hostname(value: str, ctx: ApplyContext) -> ApplyResult:
    # Deliberately inert: hostnamectl is broken on the target platform.
    # Re-enable with ctx.runner.runf("hostnamectl set-hostname {}", value)
    # once it works there.
    return ApplyResult.skipped("hostname updates are disabled")


def set_value(path: str, value: str, ctx: ApplyContext) -> ApplyResult:
    """
    Apply a single scalar setting.

    Args:
        path: Dotted parameter path, e.g. "system.hostname"
        value: New value
        ctx: Apply context

    Returns:
        The handler's result, or skipped when nothing handles ``path``
    """
    logger.debug('Parameter "%s" changed to "%s"', path, value)

    handler = _handlers.get(path)
    if handler is None:
        return ApplyResult.skipped(f"no handler for {path}")
    return handler(value, ctx)

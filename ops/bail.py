"""ops/bail.py

Centralized fatal path.

Every unrecoverable condition (RPC failure, stalled chain) is reported
through the notifier at CRITICAL level and then raised as ActivationAborted.
Only the top-level tool turns that into a process exit, so library code and
tests never terminate the interpreter.
"""

from __future__ import annotations

import logging
from typing import Any, NoReturn

logger = logging.getLogger(__name__)


class ActivationAborted(Exception):
    """Raised after a fatal condition has been reported to the operator."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


def bail(notifier: Any, message: str) -> NoReturn:
    """Report `message` as critical and abort the wait.

    Args:
        notifier: Sink with a `critical(message)` method.
        message: Operator-facing reason.

    Raises:
        ActivationAborted: Always.
    """
    logger.error(f"[bail] {message}")
    notifier.critical(message)
    raise ActivationAborted(message)

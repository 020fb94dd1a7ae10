"""ops/panic.py

Operator kill-switch for a running activation wait.

Activation via flag file (default /tmp/stake_wait_abort.flag). The waiter
checks the flag before every sleep, so a long multi-epoch wait can be
stopped without killing the process mid-request.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

# Configure logging to stderr only (no print() in ops/)
logger = logging.getLogger(__name__)
logger.addHandler(logging.StreamHandler(sys.stderr))
logger.setLevel(logging.CRITICAL)

DEFAULT_PANIC_FLAG_PATH = "/tmp/stake_wait_abort.flag"


def is_panic_active(flag_path: str = DEFAULT_PANIC_FLAG_PATH) -> bool:
    """Check if the kill-switch flag file exists.

    Args:
        flag_path: Path to panic flag file.

    Returns:
        True if panic is active, False otherwise.
    """
    try:
        return os.path.exists(flag_path)
    except (OSError, PermissionError):
        # On error, default to safe state (no panic)
        logger.warning(f"panic: Failed to check flag at {flag_path}, defaulting to inactive")
        return False


def get_panic_reason(flag_path: str = DEFAULT_PANIC_FLAG_PATH) -> Optional[str]:
    """Read panic reason from flag file.

    Returns:
        Reason string if the file exists, None otherwise.
    """
    if not os.path.exists(flag_path):
        return None

    try:
        with open(flag_path, "r") as f:
            content = f.read().strip()
            return content if content else "Activation wait cancelled"
    except (OSError, PermissionError):
        return "Activation wait cancelled (reason unreadable)"


def create_panic_flag(
    flag_path: str = DEFAULT_PANIC_FLAG_PATH,
    reason: str = "Manual activation",
) -> None:
    """Create panic flag file (for testing/automation)."""
    parent = os.path.dirname(flag_path)
    if parent:
        os.makedirs(parent, exist_ok=True)

    with open(flag_path, "w") as f:
        f.write(reason)


def clear_panic_flag(flag_path: str = DEFAULT_PANIC_FLAG_PATH) -> bool:
    """Remove panic flag file.

    Returns:
        True if a flag was removed, False otherwise.
    """
    try:
        if os.path.exists(flag_path):
            os.remove(flag_path)
            return True
    except (OSError, PermissionError):
        logger.warning(f"panic: Failed to remove flag at {flag_path}")
    return False


class ActivationCancelled(Exception):
    """Raised when the operator cancels a running wait via the flag file."""

    def __init__(self, reason: str = "Activation wait cancelled"):
        self.reason = reason
        super().__init__(reason)


def require_no_panic(flag_path: str = DEFAULT_PANIC_FLAG_PATH) -> None:
    """Raise ActivationCancelled if the flag file exists."""
    if is_panic_active(flag_path):
        reason = get_panic_reason(flag_path) or "Unknown"
        logger.critical(f"PANIC ACTIVATED: {reason}")
        raise ActivationCancelled(reason)

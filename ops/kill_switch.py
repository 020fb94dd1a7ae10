"""ops/kill_switch.py

Wires the panic flag into the activation waiter.

Usage:
    from ops.kill_switch import KillSwitchConfig, make_cancel_check

    waiter = ActivationWaiter(..., cancel_check=make_cancel_check(KillSwitchConfig()))
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ops.panic import DEFAULT_PANIC_FLAG_PATH, require_no_panic

logger = logging.getLogger(__name__)


class KillSwitchConfig:
    """Configuration for kill switch behavior."""

    def __init__(
        self,
        enabled: bool = True,
        flag_path: str = DEFAULT_PANIC_FLAG_PATH,
    ):
        self.enabled = enabled
        self.flag_path = flag_path


def check_panic(config: Optional[KillSwitchConfig] = None) -> None:
    """Check panic state and raise if active.

    Raises:
        ActivationCancelled: If panic is active.
    """
    if config is None:
        config = KillSwitchConfig()

    if not config.enabled:
        return

    require_no_panic(config.flag_path)


def make_cancel_check(config: Optional[KillSwitchConfig] = None) -> Callable[[], None]:
    """Return a zero-arg callable suitable for ActivationWaiter.cancel_check."""
    if config is None:
        config = KillSwitchConfig()

    logger.debug(f"kill_switch: watching {config.flag_path} (enabled={config.enabled})")

    def _check() -> None:
        check_panic(config)

    return _check

"""stake/activation.py - Activation Waiter

Blocks until stake delegated at a given epoch is fully active.

Flow:
1. Sleep until the activation epoch has finished.
2. Poll: fetch epoch info and the current slot, then the stake history entry
   of the last completed epoch, and simulate the remaining warmup.
3. If warmup is still pending, sleep to the end of the current epoch and
   verify the chain advanced while we slept, then poll again.

Missing history entries are retried after a short wall-clock backoff.
RPC failures and a stalled chain go through ops.bail and abort the wait.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from ingestion.rpc.errors import RpcError
from ops.bail import bail

from . import clock
from .models import ActivationRequest, EpochInfo, EpochSchedule, WarmupConfig
from .warmup import (
    DEFAULT_MAX_WARMUP_EPOCHS,
    DEFAULT_WARMUP_THRESHOLD,
    calculate_stake_warmup,
)

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_BACKOFF_S = 5.0


def _no_cancel() -> None:
    return None


class ActivationWaiter:
    """Polls chain state until the warmup simulation reports zero epochs left.

    Collaborators:
        rpc_client: get_epoch_info(), get_slot(), get_stake_history_entry(epoch)
        notifier: info(message), critical(message)
        sleep_slots: (n_slots, schedule) -> None, epoch-aligned suspension
        sleep_seconds: (seconds) -> None, fixed backoff suspension
        cancel_check: () -> None, raises to cancel before any suspension
    """

    def __init__(
        self,
        rpc_client: Any,
        warmup_config: WarmupConfig,
        schedule: EpochSchedule,
        notifier: Any,
        *,
        threshold: float = DEFAULT_WARMUP_THRESHOLD,
        history_backoff_s: float = DEFAULT_HISTORY_BACKOFF_S,
        max_warmup_epochs: int = DEFAULT_MAX_WARMUP_EPOCHS,
        sleep_slots: Callable[[int, EpochSchedule], None] = clock.sleep_n_slots,
        sleep_seconds: Callable[[float], None] = clock.sleep_seconds,
        cancel_check: Callable[[], None] = _no_cancel,
    ):
        self.rpc_client = rpc_client
        self.warmup_config = warmup_config
        self.schedule = schedule
        self.notifier = notifier
        self.threshold = threshold
        self.history_backoff_s = history_backoff_s
        self.max_warmup_epochs = max_warmup_epochs
        self._sleep_slots = sleep_slots
        self._sleep_seconds = sleep_seconds
        self._cancel_check = cancel_check

    def _epoch_info(self) -> EpochInfo:
        try:
            return self.rpc_client.get_epoch_info()
        except RpcError as e:
            bail(self.notifier, f"Error: get_epoch_info RPC call failed: {e}")

    def _slot(self) -> int:
        try:
            return self.rpc_client.get_slot()
        except RpcError as e:
            bail(self.notifier, f"Error: get_slot RPC call failed: {e}")

    def _suspend_slots(self, n_slots: int) -> None:
        self._cancel_check()
        self._sleep_slots(n_slots, self.schedule)

    def _suspend_seconds(self, seconds: float) -> None:
        self._cancel_check()
        self._sleep_seconds(seconds)

    def wait_for_epoch_boundary(self, request: ActivationRequest, epoch_info: EpochInfo) -> int:
        """Sleep until `request.activation_epoch` has finished.

        Returns:
            Number of slots slept (0 if the epoch is already over).
        """
        sleep_epochs = max(0, request.activation_epoch + 1 - epoch_info.epoch)
        if sleep_epochs == 0:
            return 0

        sleep_slots = max(0, sleep_epochs * self.schedule.slots_per_epoch - epoch_info.slot_index)
        self.notifier.info(f"Waiting until epoch {request.activation_epoch} is finished...")
        self._suspend_slots(sleep_slots)
        return sleep_slots

    def poll_once(self) -> bool:
        """Run one polling iteration.

        Returns:
            True once activation is complete, False to keep polling.

        Raises:
            ActivationAborted: RPC failure or the slot did not advance.
        """
        epoch_info = self._epoch_info()
        slot = self._slot()
        logger.info(f"[activation] Current slot is {slot}")

        if epoch_info.epoch == 0:
            logger.warning("[activation] Cluster is still in epoch 0, no completed epoch yet")
            self._suspend_seconds(self.history_backoff_s)
            return False

        current_epoch = epoch_info.epoch - 1
        logger.debug(f"[activation] Fetching stake history entry for epoch: {current_epoch}...")
        stake_entry = self.rpc_client.get_stake_history_entry(current_epoch)

        if stake_entry is None:
            logger.warning(f"[activation] Failed to fetch stake history entry for epoch: {current_epoch}")
            self._suspend_seconds(self.history_backoff_s)
            return False

        logger.debug(f"[activation] Stake history entry: {stake_entry}")
        warm_up_epochs = calculate_stake_warmup(
            stake_entry,
            self.warmup_config,
            threshold=self.threshold,
            max_epochs=self.max_warmup_epochs,
        )
        if warm_up_epochs == 0:
            return True

        self.notifier.info(
            f"Waiting until epoch {current_epoch + warm_up_epochs} for stake to warmup "
            f"(current epoch is {current_epoch})..."
        )
        self._suspend_slots(epoch_info.slots_remaining)

        latest_slot = self._slot()
        if latest_slot == slot:
            bail(self.notifier, f"Slot did not advance from {slot}")
        return False

    def wait(self, request: ActivationRequest, epoch_info: EpochInfo) -> None:
        """Block until the stake delegated at `request.activation_epoch` is active."""
        self.wait_for_epoch_boundary(request, epoch_info)
        while not self.poll_once():
            pass
        logger.info(f"[activation] Stake delegated at epoch {request.activation_epoch} is active")


def wait_for_activation(
    activation_epoch: int,
    epoch_info: EpochInfo,
    rpc_client: Any,
    warmup_config: WarmupConfig,
    schedule: EpochSchedule,
    notifier: Any,
    **kwargs: Any,
) -> None:
    """Convenience wrapper around ActivationWaiter.wait()."""
    waiter = ActivationWaiter(rpc_client, warmup_config, schedule, notifier, **kwargs)
    waiter.wait(ActivationRequest(activation_epoch=activation_epoch), epoch_info)

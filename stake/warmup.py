"""stake/warmup.py - Stake Warmup Simulator

Predicts how many epochs the cluster needs before activating and
deactivating stake settle into effective stake.

Architecture:
- `apply_epoch_step()`: one epoch of settlement (warmup, then cooldown)
- `calculate_stake_warmup()`: iterate steps until both fractions are below
  the threshold

HARD RULES:
1. Pure: no I/O besides logging, no randomness.
2. Entries are never mutated; every step returns a new StakeHistoryEntry.
3. Cooldown cap is computed from effective stake AFTER warmup is applied.
"""

from __future__ import annotations

import logging
from typing import Tuple

from .models import StakeHistoryEntry, WarmupConfig

logger = logging.getLogger(__name__)

DEFAULT_WARMUP_THRESHOLD = 0.05  # both fractions below 5% = settled
DEFAULT_MAX_WARMUP_EPOCHS = 1000


def warmup_fractions(entry: StakeHistoryEntry) -> Tuple[float, float]:
    """Return (percent_warming_up, percent_cooling_down) as ratios.

    Zero effective stake is floored to 1 so the ratios stay finite.
    """
    denominator = float(max(entry.effective, 1))
    return entry.activating / denominator, entry.deactivating / denominator


def apply_epoch_step(
    entry: StakeHistoryEntry,
    config: WarmupConfig,
) -> Tuple[StakeHistoryEntry, int, int]:
    """Settle one epoch of warmup and cooldown.

    Args:
        entry: Stake totals at the start of the epoch.
        config: Warmup/cooldown rates.

    Returns:
        Tuple of (next entry, stake warmed up, stake cooled down).
    """
    effective = entry.effective
    activating = entry.activating
    deactivating = entry.deactivating

    max_warmup_stake = int(effective * config.warmup_rate)
    warmup_stake = min(activating, max_warmup_stake)
    effective += warmup_stake
    activating -= warmup_stake

    max_cooldown_stake = int(effective * config.cooldown_rate)
    cooldown_stake = min(deactivating, max_cooldown_stake)
    effective -= cooldown_stake
    deactivating -= cooldown_stake

    next_entry = StakeHistoryEntry(
        effective=effective,
        activating=activating,
        deactivating=deactivating,
    )
    return next_entry, warmup_stake, cooldown_stake


def calculate_stake_warmup(
    entry: StakeHistoryEntry,
    config: WarmupConfig,
    threshold: float = DEFAULT_WARMUP_THRESHOLD,
    max_epochs: int = DEFAULT_MAX_WARMUP_EPOCHS,
) -> int:
    """Count future epochs until warming up and cooling down both drop below threshold.

    Returns 0 if the entry is already settled. If a step moves no stake while
    still above threshold (e.g. zero effective stake), or `max_epochs` is
    reached, the simulation cannot settle and `max_epochs` is returned.

    Args:
        entry: Stake history entry of the last completed epoch.
        config: Warmup/cooldown rates.
        threshold: Fraction below which stake counts as settled.
        max_epochs: Upper bound on simulated epochs.

    Returns:
        Number of additional epochs needed.
    """
    epochs = 0
    while True:
        percent_warming_up, percent_cooling_down = warmup_fractions(entry)
        logger.debug(
            f"[warmup] epoch +{epochs}: stake warming up {percent_warming_up * 100:.1f}%, "
            f"cooling down {percent_cooling_down * 100:.1f}%"
        )

        if percent_warming_up < threshold and percent_cooling_down < threshold:
            break

        if epochs >= max_epochs:
            logger.warning(f"[warmup] Stake did not settle within {max_epochs} epochs")
            return max_epochs

        entry, warmup_stake, cooldown_stake = apply_epoch_step(entry, config)
        logger.debug(
            f"[warmup] epoch +{epochs}: stake warming up {warmup_stake}, cooling down {cooldown_stake}"
        )

        if warmup_stake == 0 and cooldown_stake == 0:
            logger.warning(
                f"[warmup] No stake can move (effective={entry.effective}), "
                f"capping estimate at {max_epochs} epochs"
            )
            return max_epochs

        epochs += 1

    logger.info(f"[warmup] {(1 - threshold) * 100:.0f}% stake warmup will take {epochs} epochs")
    return epochs

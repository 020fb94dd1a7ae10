"""
stake package

Stake warmup simulation and activation waiting against live chain state.
"""
from .models import (
    ActivationRequest,
    EpochInfo,
    EpochSchedule,
    StakeHistoryEntry,
    WarmupConfig,
)
from .warmup import apply_epoch_step, calculate_stake_warmup, warmup_fractions
from .activation import ActivationWaiter, wait_for_activation

__all__ = [
    'ActivationRequest',
    'EpochInfo',
    'EpochSchedule',
    'StakeHistoryEntry',
    'WarmupConfig',
    'apply_epoch_step',
    'calculate_stake_warmup',
    'warmup_fractions',
    'ActivationWaiter',
    'wait_for_activation',
]

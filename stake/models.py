"""stake/models.py

Value types shared by the warmup simulator and the activation waiter.

All types are frozen: stake history entries are immutable once recorded by
the chain, and the simulator works on fresh copies rather than mutating them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


# Cluster defaults (mainnet-beta genesis)
DEFAULT_WARMUP_RATE = 0.25
DEFAULT_COOLDOWN_RATE = 0.25
DEFAULT_SLOTS_PER_EPOCH = 432_000
DEFAULT_TICKS_PER_SLOT = 64
DEFAULT_TICKS_PER_SECOND = 160


def _require_non_negative(name: str, value: int) -> None:
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def _require_rate(name: str, value: float) -> None:
    if not 0.0 < value <= 1.0:
        raise ValueError(f"{name} must be in (0, 1], got {value}")


@dataclass(frozen=True)
class StakeHistoryEntry:
    """Cluster-wide stake totals for one epoch (lamports)."""
    effective: int
    activating: int
    deactivating: int

    def __post_init__(self):
        _require_non_negative("effective", self.effective)
        _require_non_negative("activating", self.activating)
        _require_non_negative("deactivating", self.deactivating)

    @property
    def total(self) -> int:
        return self.effective + self.activating + self.deactivating

    def to_dict(self) -> Dict[str, int]:
        return {
            "effective": self.effective,
            "activating": self.activating,
            "deactivating": self.deactivating,
        }


@dataclass(frozen=True)
class WarmupConfig:
    """Per-epoch caps on stake moving in/out of effective stake."""
    warmup_rate: float = DEFAULT_WARMUP_RATE
    cooldown_rate: float = DEFAULT_COOLDOWN_RATE

    def __post_init__(self):
        _require_rate("warmup_rate", self.warmup_rate)
        _require_rate("cooldown_rate", self.cooldown_rate)


@dataclass(frozen=True)
class EpochSchedule:
    """Epoch length and slot timing taken from the cluster genesis."""
    slots_per_epoch: int = DEFAULT_SLOTS_PER_EPOCH
    ticks_per_slot: int = DEFAULT_TICKS_PER_SLOT
    ticks_per_second: int = DEFAULT_TICKS_PER_SECOND

    def __post_init__(self):
        if self.slots_per_epoch <= 0:
            raise ValueError(f"slots_per_epoch must be positive, got {self.slots_per_epoch}")
        if self.ticks_per_slot <= 0:
            raise ValueError(f"ticks_per_slot must be positive, got {self.ticks_per_slot}")
        if self.ticks_per_second <= 0:
            raise ValueError(f"ticks_per_second must be positive, got {self.ticks_per_second}")

    @property
    def slot_duration_s(self) -> float:
        return self.ticks_per_slot / self.ticks_per_second


@dataclass(frozen=True)
class EpochInfo:
    """Snapshot of the cluster's position in the current epoch.

    Describes a moving target, so callers re-fetch it on every poll.
    """
    epoch: int
    slot_index: int
    slots_in_epoch: int
    absolute_slot: int = 0

    def __post_init__(self):
        _require_non_negative("epoch", self.epoch)
        _require_non_negative("slot_index", self.slot_index)
        if self.slots_in_epoch <= 0:
            raise ValueError(f"slots_in_epoch must be positive, got {self.slots_in_epoch}")

    @property
    def slots_remaining(self) -> int:
        return max(0, self.slots_in_epoch - self.slot_index)

    @classmethod
    def from_rpc(cls, result: Dict[str, Any]) -> "EpochInfo":
        """Build from a getEpochInfo JSON-RPC result."""
        try:
            return cls(
                epoch=int(result["epoch"]),
                slot_index=int(result["slotIndex"]),
                slots_in_epoch=int(result["slotsInEpoch"]),
                absolute_slot=int(result.get("absoluteSlot", 0)),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed getEpochInfo result: {result!r}") from e


@dataclass(frozen=True)
class ActivationRequest:
    """Stake delegated to activate at `activation_epoch`."""
    activation_epoch: int

    def __post_init__(self):
        _require_non_negative("activation_epoch", self.activation_epoch)

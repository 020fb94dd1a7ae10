"""config/waiter_schema.py

Configuration schema for the activation waiter.
Implements manual validation to avoid Pydantic dependency.
"""

from dataclasses import dataclass, fields
from typing import Any, Optional

from ops.panic import DEFAULT_PANIC_FLAG_PATH
from stake.models import EpochSchedule, WarmupConfig


@dataclass(frozen=True)
class WaiterConfig:
    """
    Static parameters, loaded once before the wait starts.
    """
    # RPC
    rpc_url: str = "https://api.mainnet-beta.solana.com"
    rpc_timeout_s: float = 30.0
    rpc_max_retries: int = 5

    # Stake config (cluster warmup/cooldown caps)
    warmup_rate: float = 0.25
    cooldown_rate: float = 0.25

    # Epoch schedule (genesis)
    slots_per_epoch: int = 432_000
    ticks_per_slot: int = 64
    ticks_per_second: int = 160

    # Policy
    warmup_threshold: float = 0.05  # both fractions below this = active
    history_backoff_s: float = 5.0  # wall-clock retry for missing history
    max_warmup_epochs: int = 1000  # simulation safety bound

    # Kill switch
    panic_flag_path: str = DEFAULT_PANIC_FLAG_PATH
    panic_enabled: bool = True

    def __post_init__(self):
        """Validate constraints manually since we don't have Pydantic."""
        if not isinstance(self.rpc_url, str) or not self.rpc_url:
            raise ValueError("rpc_url must be a non-empty string")
        self._validate_range("rpc_timeout_s", self.rpc_timeout_s, 0.1, None)
        self._validate_range("rpc_max_retries", self.rpc_max_retries, 0, 20)

        self._validate_range("warmup_rate", self.warmup_rate, 1e-9, 1.0)
        self._validate_range("cooldown_rate", self.cooldown_rate, 1e-9, 1.0)

        self._validate_range("slots_per_epoch", self.slots_per_epoch, 1, None)
        self._validate_range("ticks_per_slot", self.ticks_per_slot, 1, None)
        self._validate_range("ticks_per_second", self.ticks_per_second, 1, None)

        self._validate_range("warmup_threshold", self.warmup_threshold, 1e-9, 1.0)
        self._validate_range("history_backoff_s", self.history_backoff_s, 0.0, 3600.0)
        self._validate_range("max_warmup_epochs", self.max_warmup_epochs, 1, None)

    def _validate_range(self, name: str, value: Any, min_val: float, max_val: Optional[float] = None) -> None:
        if isinstance(value, bool):
            raise ValueError(f"{name} must be numeric, got {value}")
        try:
            val = float(value)
        except (TypeError, ValueError):
            raise ValueError(f"{name} must be numeric, got {value}")

        if val < min_val:
            raise ValueError(f"{name} {val} is below minimum {min_val}")
        if max_val is not None and val > max_val:
            raise ValueError(f"{name} {val} is above maximum {max_val}")

    @classmethod
    def field_names(cls) -> set:
        return {f.name for f in fields(cls)}

    def warmup_config(self) -> WarmupConfig:
        return WarmupConfig(warmup_rate=self.warmup_rate, cooldown_rate=self.cooldown_rate)

    def epoch_schedule(self) -> EpochSchedule:
        return EpochSchedule(
            slots_per_epoch=int(self.slots_per_epoch),
            ticks_per_slot=int(self.ticks_per_slot),
            ticks_per_second=int(self.ticks_per_second),
        )

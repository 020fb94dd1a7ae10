from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Union

import pytest

from ingestion.rpc.errors import RpcError
from stake.models import EpochInfo, EpochSchedule, StakeHistoryEntry, WarmupConfig


class FakeChain:
    """Scripted data source.

    epoch_infos and slots are consumed one per call, repeating the last value.
    history is either {epoch: entry} or a scripted list of lookup results.
    """

    def __init__(
        self,
        epoch_infos: Sequence[Union[EpochInfo, Exception]],
        slots: Sequence[Union[int, Exception]],
        history: Union[Dict[int, StakeHistoryEntry], List[Optional[StakeHistoryEntry]]],
    ):
        self._epoch_infos = list(epoch_infos)
        self._slots = list(slots)
        self._history = history if isinstance(history, dict) else list(history)
        self.history_requests: List[int] = []
        self.epoch_info_calls = 0
        self.slot_calls = 0

    @staticmethod
    def _next(values: list):
        value = values.pop(0) if len(values) > 1 else values[0]
        if isinstance(value, Exception):
            raise value
        return value

    def get_epoch_info(self) -> EpochInfo:
        self.epoch_info_calls += 1
        return self._next(self._epoch_infos)

    def get_slot(self) -> int:
        self.slot_calls += 1
        return self._next(self._slots)

    def get_stake_history_entry(self, epoch: int) -> Optional[StakeHistoryEntry]:
        self.history_requests.append(epoch)
        if isinstance(self._history, dict):
            return self._history.get(epoch)
        return self._next(self._history)


class RecordingNotifier:
    def __init__(self):
        self.infos: List[str] = []
        self.warnings: List[str] = []
        self.criticals: List[str] = []

    def info(self, message: str) -> bool:
        self.infos.append(message)
        return True

    def warning(self, message: str) -> bool:
        self.warnings.append(message)
        return True

    def critical(self, message: str) -> bool:
        self.criticals.append(message)
        return True


class RecordingSleeper:
    def __init__(self):
        self.slot_sleeps: List[int] = []
        self.second_sleeps: List[float] = []

    def sleep_slots(self, n_slots: int, schedule: EpochSchedule) -> None:
        self.slot_sleeps.append(n_slots)

    def sleep_seconds(self, seconds: float) -> None:
        self.second_sleeps.append(seconds)


@pytest.fixture
def warmup_config() -> WarmupConfig:
    return WarmupConfig(warmup_rate=0.25, cooldown_rate=0.25)


@pytest.fixture
def schedule() -> EpochSchedule:
    return EpochSchedule(slots_per_epoch=432_000)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def sleeper() -> RecordingSleeper:
    return RecordingSleeper()


@pytest.fixture
def rpc_failure() -> RpcError:
    return RpcError("connection refused")

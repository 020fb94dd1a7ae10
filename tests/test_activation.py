from __future__ import annotations

import pytest

from conftest import FakeChain
from ops.bail import ActivationAborted
from ops.kill_switch import KillSwitchConfig, make_cancel_check
from ops.panic import ActivationCancelled, create_panic_flag
from stake.activation import ActivationWaiter, wait_for_activation
from stake.models import ActivationRequest, EpochInfo, StakeHistoryEntry

SETTLED = StakeHistoryEntry(effective=1_000_000, activating=100, deactivating=0)
WARMING = StakeHistoryEntry(effective=100, activating=100, deactivating=0)


def _waiter(chain, warmup_config, schedule, notifier, sleeper, **kwargs):
    return ActivationWaiter(
        chain,
        warmup_config,
        schedule,
        notifier,
        sleep_slots=sleeper.sleep_slots,
        sleep_seconds=sleeper.sleep_seconds,
        **kwargs,
    )


def test_no_boundary_sleep_once_activation_epoch_is_over(warmup_config, schedule, notifier, sleeper):
    chain = FakeChain([EpochInfo(epoch=12, slot_index=10, slots_in_epoch=432_000)], [5000], {11: SETTLED})
    waiter = _waiter(chain, warmup_config, schedule, notifier, sleeper)

    waiter.wait(ActivationRequest(activation_epoch=10), EpochInfo(epoch=12, slot_index=10, slots_in_epoch=432_000))

    assert sleeper.slot_sleeps == []
    assert sleeper.second_sleeps == []
    assert notifier.infos == []
    assert chain.history_requests == [11]


def test_boundary_sleep_covers_rest_of_activation_epoch(warmup_config, schedule, notifier, sleeper):
    chain = FakeChain([EpochInfo(epoch=11, slot_index=3, slots_in_epoch=432_000)], [9000], {10: SETTLED})
    waiter = _waiter(chain, warmup_config, schedule, notifier, sleeper)

    slept = waiter.wait_for_epoch_boundary(
        ActivationRequest(activation_epoch=10),
        EpochInfo(epoch=9, slot_index=100_000, slots_in_epoch=432_000),
    )

    assert slept == 2 * 432_000 - 100_000
    assert sleeper.slot_sleeps == [2 * 432_000 - 100_000]
    assert notifier.infos == ["Waiting until epoch 10 is finished..."]


def test_data_gap_is_retried_without_abort(warmup_config, schedule, notifier, sleeper):
    chain = FakeChain(
        [EpochInfo(epoch=12, slot_index=10, slots_in_epoch=432_000)],
        [1000, 1000, 1000],
        [None, None, SETTLED],
    )
    waiter = _waiter(chain, warmup_config, schedule, notifier, sleeper)

    waiter.wait(ActivationRequest(activation_epoch=10), EpochInfo(epoch=12, slot_index=10, slots_in_epoch=432_000))

    assert sleeper.second_sleeps == [5.0, 5.0]
    assert sleeper.slot_sleeps == []
    assert notifier.criticals == []
    assert chain.epoch_info_calls == 3


def test_history_backoff_is_configurable(warmup_config, schedule, notifier, sleeper):
    chain = FakeChain([EpochInfo(epoch=12, slot_index=10, slots_in_epoch=432_000)], [1], [None, SETTLED])
    waiter = _waiter(chain, warmup_config, schedule, notifier, sleeper, history_backoff_s=0.5)

    assert waiter.poll_once() is False
    assert waiter.poll_once() is True
    assert sleeper.second_sleeps == [0.5]


def test_stalled_chain_aborts_once(warmup_config, schedule, notifier, sleeper):
    chain = FakeChain([EpochInfo(epoch=12, slot_index=400_000, slots_in_epoch=432_000)], [5000], {11: WARMING})
    waiter = _waiter(chain, warmup_config, schedule, notifier, sleeper)

    with pytest.raises(ActivationAborted) as exc_info:
        waiter.wait(ActivationRequest(activation_epoch=10), EpochInfo(epoch=12, slot_index=0, slots_in_epoch=432_000))

    assert exc_info.value.reason == "Slot did not advance from 5000"
    assert notifier.criticals == ["Slot did not advance from 5000"]
    assert sleeper.slot_sleeps == [32_000]
    assert chain.epoch_info_calls == 1


def test_settled_poll_skips_liveness_check(warmup_config, schedule, notifier, sleeper):
    chain = FakeChain([EpochInfo(epoch=12, slot_index=10, slots_in_epoch=432_000)], [7777], {11: SETTLED})
    waiter = _waiter(chain, warmup_config, schedule, notifier, sleeper)

    assert waiter.poll_once() is True
    assert chain.slot_calls == 1
    assert notifier.criticals == []


def test_epoch_info_failure_is_fatal(warmup_config, schedule, notifier, sleeper, rpc_failure):
    chain = FakeChain([rpc_failure], [1], {})
    waiter = _waiter(chain, warmup_config, schedule, notifier, sleeper)

    with pytest.raises(ActivationAborted):
        waiter.poll_once()

    assert notifier.criticals == ["Error: get_epoch_info RPC call failed: connection refused"]


def test_slot_failure_after_sleep_is_fatal(warmup_config, schedule, notifier, sleeper, rpc_failure):
    chain = FakeChain(
        [EpochInfo(epoch=12, slot_index=10, slots_in_epoch=432_000)],
        [100, rpc_failure],
        {11: WARMING},
    )
    waiter = _waiter(chain, warmup_config, schedule, notifier, sleeper)

    with pytest.raises(ActivationAborted):
        waiter.poll_once()

    assert notifier.criticals == ["Error: get_slot RPC call failed: connection refused"]
    assert sleeper.slot_sleeps == [431_990]


def test_epoch_zero_waits_for_first_completed_epoch(warmup_config, schedule, notifier, sleeper):
    chain = FakeChain(
        [
            EpochInfo(epoch=0, slot_index=50, slots_in_epoch=432_000),
            EpochInfo(epoch=1, slot_index=5, slots_in_epoch=432_000),
        ],
        [50, 432_005],
        {0: SETTLED},
    )
    waiter = _waiter(chain, warmup_config, schedule, notifier, sleeper)

    waiter.wait(ActivationRequest(activation_epoch=0), EpochInfo(epoch=1, slot_index=5, slots_in_epoch=432_000))

    assert sleeper.second_sleeps == [5.0]
    assert chain.history_requests == [0]


def test_end_to_end_warmup_from_zero_effective(warmup_config, schedule, notifier, sleeper):
    history = {
        9: StakeHistoryEntry(effective=0, activating=5000, deactivating=0),
        10: StakeHistoryEntry(effective=0, activating=5000, deactivating=0),
        11: StakeHistoryEntry(effective=5000, activating=0, deactivating=0),
    }
    chain = FakeChain(
        [
            EpochInfo(epoch=11, slot_index=50, slots_in_epoch=432_000, absolute_slot=4_752_050),
            EpochInfo(epoch=12, slot_index=20, slots_in_epoch=432_000, absolute_slot=5_184_020),
        ],
        [4_752_050, 5_184_000, 5_184_020],
        history,
    )
    waiter = _waiter(chain, warmup_config, schedule, notifier, sleeper)

    waiter.wait(
        ActivationRequest(activation_epoch=10),
        EpochInfo(epoch=10, slot_index=1000, slots_in_epoch=432_000),
    )

    assert sleeper.slot_sleeps == [431_000, 431_950]
    assert chain.history_requests == [10, 11]
    assert notifier.infos[0] == "Waiting until epoch 10 is finished..."
    assert notifier.infos[1] == "Waiting until epoch 1010 for stake to warmup (current epoch is 10)..."
    assert notifier.criticals == []


def test_cancel_flag_stops_before_sleeping(tmp_path, warmup_config, schedule, notifier, sleeper):
    flag = tmp_path / "abort.flag"
    create_panic_flag(str(flag), "operator requested stop")
    chain = FakeChain([EpochInfo(epoch=12, slot_index=10, slots_in_epoch=432_000)], [1], [None])
    waiter = _waiter(
        chain,
        warmup_config,
        schedule,
        notifier,
        sleeper,
        cancel_check=make_cancel_check(KillSwitchConfig(flag_path=str(flag))),
    )

    with pytest.raises(ActivationCancelled) as exc_info:
        waiter.poll_once()

    assert exc_info.value.reason == "operator requested stop"
    assert sleeper.second_sleeps == []


def test_wait_for_activation_wrapper(warmup_config, schedule, notifier, sleeper):
    chain = FakeChain([EpochInfo(epoch=5, slot_index=0, slots_in_epoch=432_000)], [1], {4: SETTLED})

    wait_for_activation(
        3,
        EpochInfo(epoch=5, slot_index=0, slots_in_epoch=432_000),
        chain,
        warmup_config,
        schedule,
        notifier,
        sleep_slots=sleeper.sleep_slots,
        sleep_seconds=sleeper.sleep_seconds,
    )

    assert chain.history_requests == [4]

"""
ingestion/rpc/stake_history.py

Decoder for the StakeHistory sysvar account.

Layout (bincode, little-endian):
    u64 entry_count
    entry_count * (u64 epoch, u64 effective, u64 activating, u64 deactivating)

Entries are stored newest epoch first.
"""
import struct
from typing import Dict, Optional

from stake.models import StakeHistoryEntry

STAKE_HISTORY_SYSVAR_ID = "SysvarStakeHistory1111111111111111111111111"

_COUNT = struct.Struct("<Q")
_ENTRY = struct.Struct("<QQQQ")


class StakeHistoryDecodeError(ValueError):
    pass


def decode_stake_history(data: bytes) -> Dict[int, StakeHistoryEntry]:
    """
    Decode raw sysvar account data into {epoch: entry}.

    Raises:
        StakeHistoryDecodeError: if the data is shorter than its declared length
    """
    if len(data) < _COUNT.size:
        raise StakeHistoryDecodeError(f"Stake history data too short: {len(data)} bytes")

    (count,) = _COUNT.unpack_from(data, 0)
    needed = _COUNT.size + count * _ENTRY.size
    if len(data) < needed:
        raise StakeHistoryDecodeError(
            f"Stake history declares {count} entries ({needed} bytes) but has {len(data)} bytes"
        )

    history: Dict[int, StakeHistoryEntry] = {}
    offset = _COUNT.size
    for _ in range(count):
        epoch, effective, activating, deactivating = _ENTRY.unpack_from(data, offset)
        offset += _ENTRY.size
        history[epoch] = StakeHistoryEntry(
            effective=effective,
            activating=activating,
            deactivating=deactivating,
        )
    return history


def encode_stake_history(history: Dict[int, StakeHistoryEntry]) -> bytes:
    """Inverse of decode_stake_history, newest epoch first (fixtures and tests)."""
    parts = [_COUNT.pack(len(history))]
    for epoch in sorted(history, reverse=True):
        entry = history[epoch]
        parts.append(_ENTRY.pack(epoch, entry.effective, entry.activating, entry.deactivating))
    return b"".join(parts)


def find_stake_history_entry(data: bytes, epoch: int) -> Optional[StakeHistoryEntry]:
    return decode_stake_history(data).get(epoch)

"""
ingestion/rpc package

JSON-RPC data source: epoch info, current slot and stake history entries.
"""
from .client import RpcError, SolanaRpcClient
from .stake_history import (
    STAKE_HISTORY_SYSVAR_ID,
    StakeHistoryDecodeError,
    decode_stake_history,
    encode_stake_history,
)

__all__ = [
    'RpcError',
    'SolanaRpcClient',
    'STAKE_HISTORY_SYSVAR_ID',
    'StakeHistoryDecodeError',
    'decode_stake_history',
    'encode_stake_history',
]

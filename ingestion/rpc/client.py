"""
ingestion/rpc/client.py

SolanaRpcClient: JSON-RPC data source for the activation waiter.

Supplies epoch info, the current slot and stake history entries.
"""
import base64
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from stake.models import EpochInfo, StakeHistoryEntry

from .errors import RpcError
from .stake_history import (
    STAKE_HISTORY_SYSVAR_ID,
    StakeHistoryDecodeError,
    decode_stake_history,
)

logger = logging.getLogger(__name__)


DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"

# Retry configuration
MAX_RETRIES = 5
INITIAL_DELAY_MS = 100
DEFAULT_TIMEOUT_S = 30


def _is_rate_limited(error: Exception) -> bool:
    error_str = str(error).lower()
    return "429" in error_str or "rate limit" in error_str or "too many requests" in error_str


class SolanaRpcClient:
    """
    Minimal Solana JSON-RPC client.

    Features:
    - Exponential backoff on 429 / rate-limit errors
    - JSON-RPC error objects surfaced as RpcError
    - Injectable http_callable for tests (payload dict -> response dict)

    Retries only cover rate limiting; any other failure propagates so the
    caller decides whether it is fatal.
    """

    def __init__(
        self,
        rpc_url: str = DEFAULT_RPC_URL,
        timeout: float = DEFAULT_TIMEOUT_S,
        max_retries: int = MAX_RETRIES,
        initial_delay_ms: float = INITIAL_DELAY_MS,
        http_callable: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize SolanaRpcClient.

        Args:
            rpc_url: JSON-RPC endpoint
            timeout: HTTP timeout (seconds)
            max_retries: Max retries for 429 errors
            initial_delay_ms: Initial delay for exponential backoff (ms)
            http_callable: Optional transport override, used by tests
            sleep: Sleep function used between retries
        """
        self._rpc_url = rpc_url
        self._timeout = timeout
        self._max_retries = max_retries
        self._initial_delay_ms = initial_delay_ms
        self._http_callable = http_callable
        self._sleep = sleep
        self._session = None
        self._request_id = 0

        # Metrics for monitoring
        self._http_calls = 0
        self._rate_limited = 0

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if self._http_callable is not None:
            return self._http_callable(payload)

        import requests

        if self._session is None:
            self._session = requests.Session()
        try:
            resp = self._session.post(
                self._rpc_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
            resp.raise_for_status()
            return resp.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise RpcError(f"HTTP {status}: {e}", code=status) from e
        except (requests.exceptions.RequestException, ValueError) as e:
            raise RpcError(str(e)) from e

    def _make_request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Make a JSON-RPC request with rate-limit retries.

        Returns:
            The `result` member of the response

        Raises:
            RpcError: on transport failure or JSON-RPC error
        """
        self._request_id += 1
        payload: Dict[str, Any] = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
        }
        if params:
            payload["params"] = params

        delay_ms = self._initial_delay_ms
        last_error: Optional[Exception] = None

        for attempt in range(self._max_retries + 1):
            try:
                response = self._post(payload)
                self._http_calls += 1

                if "error" in response:
                    error = response.get("error") or {}
                    error_msg = error.get("message", "Unknown error")
                    error_code = error.get("code", -1)
                    raise RpcError(f"RPC error {error_code}: {error_msg}", code=error_code)

                return response.get("result")

            except Exception as e:
                last_error = e
                if _is_rate_limited(e) and attempt < self._max_retries:
                    self._rate_limited += 1
                    logger.warning(f"[rpc] {method} rate limited, retrying in {delay_ms:.0f}ms")
                    self._sleep(delay_ms / 1000.0)
                    delay_ms *= 2
                    continue

                if isinstance(e, RpcError):
                    raise
                raise RpcError(f"{method} failed: {e}") from e

        raise RpcError(f"{method} failed after {self._max_retries} retries: {last_error}")

    def get_epoch_info(self) -> EpochInfo:
        result = self._make_request("getEpochInfo")
        try:
            return EpochInfo.from_rpc(result or {})
        except ValueError as e:
            raise RpcError(str(e)) from e

    def get_slot(self) -> int:
        result = self._make_request("getSlot")
        if not isinstance(result, int):
            raise RpcError(f"Unexpected getSlot result: {result!r}")
        return result

    def get_epoch_schedule(self) -> Dict[str, Any]:
        """Return the raw getEpochSchedule result (slotsPerEpoch, warmup, ...)."""
        result = self._make_request("getEpochSchedule")
        if not isinstance(result, dict) or "slotsPerEpoch" not in result:
            raise RpcError(f"Unexpected getEpochSchedule result: {result!r}")
        return result

    def get_account_data(self, pubkey: str) -> Optional[bytes]:
        """
        Fetch raw account data.

        Returns:
            Decoded account bytes, or None if the account does not exist
        """
        result = self._make_request("getAccountInfo", [pubkey, {"encoding": "base64"}])
        value = (result or {}).get("value")
        if value is None:
            return None

        data = value.get("data")
        if not isinstance(data, list) or not data:
            raise RpcError(f"Unexpected account data encoding for {pubkey}: {data!r}")
        try:
            return base64.b64decode(data[0])
        except ValueError as e:
            raise RpcError(f"Invalid base64 account data for {pubkey}: {e}") from e

    def get_stake_history_entry(self, epoch: int) -> Optional[StakeHistoryEntry]:
        """
        Look up the stake history entry for `epoch`.

        Returns None when the entry is not available for any reason: sysvar
        fetch failed, account missing or undecodable, or epoch not recorded.
        """
        try:
            data = self.get_account_data(STAKE_HISTORY_SYSVAR_ID)
        except RpcError as e:
            logger.warning(f"[rpc] Failed to fetch stake history sysvar: {e}")
            return None

        if data is None:
            logger.warning("[rpc] Stake history sysvar account not found")
            return None

        try:
            history = decode_stake_history(data)
        except StakeHistoryDecodeError as e:
            logger.warning(f"[rpc] {e}")
            return None

        return history.get(epoch)

    def get_metrics(self) -> Dict[str, Any]:
        return {
            "http_calls": self._http_calls,
            "rate_limited": self._rate_limited,
        }

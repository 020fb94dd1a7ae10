"""
ingestion/rpc/errors.py

Errors raised by the JSON-RPC data source.
"""
from typing import Optional


class RpcError(Exception):
    """Transport failure or JSON-RPC error response."""

    def __init__(self, message: str, code: Optional[int] = None):
        self.code = code
        super().__init__(message)

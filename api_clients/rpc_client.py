import logging
import itertools
import requests
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class RpcError(Exception):
    """Raised when a JSON-RPC request fails at the transport or protocol level."""
    pass


class RpcClient:
    """Minimal JSON-RPC client for read-only calls against an EVM node."""

    def __init__(self, url: str, timeout: int = 30):
        self.url = url
        self.timeout = timeout
        self._ids = itertools.count(1)
        self.session = requests.Session()
        self.session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        })

    def _post(self, method: str, params: List[Any]) -> Any:
        """
        Perform a single JSON-RPC request and return its `result` field.
        """
        payload = {
            'jsonrpc': '2.0',
            'id': next(self._ids),
            'method': method,
            'params': params,
        }
        try:
            resp = self.session.post(self.url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            body = resp.json()
        except requests.exceptions.RequestException as e:
            raise RpcError(f"{method} request failed: {e}") from e
        except ValueError as e:
            raise RpcError(f"{method} returned invalid JSON: {e}") from e

        if not isinstance(body, dict):
            raise RpcError(f"{method} returned unexpected payload type {type(body).__name__}")
        if body.get('error'):
            error: Dict[str, Any] = body['error']
            raise RpcError(f"{method} error {error.get('code')}: {error.get('message')}")
        if 'result' not in body:
            raise RpcError(f"{method} response has no result")
        return body['result']

    def eth_call(self, to: str, data: bytes, block: str = "latest") -> bytes:
        """
        Execute eth_call against `to` with raw calldata and return the raw return bytes.
        """
        result: Optional[str] = self._post('eth_call', [{'to': to, 'data': '0x' + data.hex()}, block])
        if not isinstance(result, str) or not result.startswith('0x'):
            raise RpcError(f"eth_call returned non-hex result: {result!r}")
        try:
            return bytes.fromhex(result[2:])
        except ValueError as e:
            raise RpcError(f"eth_call returned malformed hex: {e}") from e

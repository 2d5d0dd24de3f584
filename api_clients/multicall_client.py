"""
Batched balance reads through the Multicall3 contract.

One aggregate3 call carries many independent balance reads, each allowed to
fail on its own. Calls are sent in fixed-size chunks, one chunk at a time, so
a few hundred wallets cost a handful of RPC round trips instead of thousands.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from eth_abi import encode, decode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import function_signature_to_4byte_selector, is_hex_address

from api_clients.rpc_client import RpcClient, RpcError

logger = logging.getLogger(__name__)

# Multicall3 is deployed at the same address on all major chains
MULTICALL3_ADDRESS = "0xca11bde05977b3631167028862be2a173976ca11"

AGGREGATE3_SELECTOR = function_signature_to_4byte_selector("aggregate3((address,bool,bytes)[])")
GET_ETH_BALANCE_SELECTOR = function_signature_to_4byte_selector("getEthBalance(address)")
BALANCE_OF_SELECTOR = bytes.fromhex("70a08231")  # balanceOf(address)

WORD_SIZE = 32
NATIVE_DECIMALS = 18
DEFAULT_CHUNK_SIZE = 500


@dataclass(frozen=True)
class TokenConfig:
    symbol: str
    address: str
    decimals: int


@dataclass(frozen=True)
class Call3:
    target: str
    call_data: bytes
    allow_failure: bool = True


class CallKind(Enum):
    NATIVE = "native"
    TOKEN = "token"


@dataclass(frozen=True)
class CallOutcome:
    """Result of one call inside a batch: either ok with its return bytes, or failed."""
    success: bool
    return_data: bytes = b""

    @classmethod
    def ok(cls, return_data: bytes) -> "CallOutcome":
        return cls(True, return_data)

    @classmethod
    def failed(cls) -> "CallOutcome":
        return cls(False, b"")


@dataclass
class BalanceResult:
    address: str
    native_balance: str = "0"
    token_balances: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class _CallMeta:
    address: str
    kind: CallKind
    token: Optional[TokenConfig] = None


def canonical_address(address: str) -> str:
    return address.strip().lower()


def tokens_from_config(entries: Iterable[Sequence]) -> List[TokenConfig]:
    """Build TokenConfig objects from (symbol, address, decimals) tuples."""
    return [TokenConfig(symbol, canonical_address(address), int(decimals)) for symbol, address, decimals in entries]


def encode_balance_of(wallet: str) -> bytes:
    """balanceOf(address) calldata: selector followed by the address left-padded to one word."""
    return BALANCE_OF_SELECTOR + bytes.fromhex(canonical_address(wallet)[2:]).rjust(WORD_SIZE, b"\x00")


def encode_get_eth_balance(wallet: str) -> bytes:
    return GET_ETH_BALANCE_SELECTOR + encode(['address'], [canonical_address(wallet)])


def encode_aggregate3(calls: Sequence[Call3]) -> bytes:
    return AGGREGATE3_SELECTOR + encode(
        ['(address,bool,bytes)[]'],
        [[(c.target, c.allow_failure, c.call_data) for c in calls]]
    )


def decode_aggregate3(return_data: bytes) -> List[CallOutcome]:
    (results,) = decode(['(bool,bytes)[]'], return_data)
    return [CallOutcome(bool(success), bytes(data)) for success, data in results]


def decode_balance(return_data: bytes) -> int:
    """
    Decode a uint256 balance. Empty or short payloads and undecodable data read as zero.
    """
    if not return_data or len(return_data) < WORD_SIZE:
        return 0
    try:
        (value,) = decode(['uint256'], return_data[:WORD_SIZE])
        return int(value)
    except (DecodingError, ValueError, TypeError):
        return 0


def format_units(value: int, decimals: int) -> str:
    """
    Exact decimal rendering of an integer amount with `decimals` implied places,
    e.g. format_units(1500000, 6) == "1.5" and format_units(0, 18) == "0.0".
    """
    whole, fraction = divmod(value, 10 ** decimals)
    fraction_digits = str(fraction).rjust(decimals, "0").rstrip("0") if decimals else ""
    return f"{whole}.{fraction_digits or '0'}"


def decode_native_balance(outcome: CallOutcome) -> str:
    if not outcome.success:
        return "0"
    return format_units(decode_balance(outcome.return_data), NATIVE_DECIMALS)


def decode_token_balance(outcome: CallOutcome, token: TokenConfig) -> Optional[str]:
    """Formatted token balance, or None when the call failed or the balance is zero."""
    if not outcome.success:
        return None
    raw = decode_balance(outcome.return_data)
    if raw <= 0:
        return None
    return format_units(raw, token.decimals)


class MulticallBalanceReader:
    """
    Reads native and ERC-20 balances for many wallets through Multicall3.
    """

    def __init__(self, rpc: RpcClient, chunk_size: int = DEFAULT_CHUNK_SIZE, multicall_address: str = MULTICALL3_ADDRESS):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.rpc = rpc
        self.chunk_size = chunk_size
        self.multicall_address = canonical_address(multicall_address)

    def aggregate3(self, calls: Sequence[Call3]) -> Optional[List[CallOutcome]]:
        """
        Submit one aggregate3 batch. Returns one outcome per call, or None when
        the batch as a whole could not be executed or decoded.
        """
        if not calls:
            return []
        try:
            return_data = self.rpc.eth_call(self.multicall_address, encode_aggregate3(calls))
            outcomes = decode_aggregate3(return_data)
        except RpcError as e:
            logger.error(f"aggregate3 call with {len(calls)} calls failed: {e}")
            return None
        except (DecodingError, EncodingError, ValueError) as e:
            logger.error(f"aggregate3 payload for {len(calls)} calls could not be processed: {e}")
            return None
        if len(outcomes) != len(calls):
            logger.error(f"aggregate3 returned {len(outcomes)} results for {len(calls)} calls")
            return None
        return outcomes

    def execute(self, calls: Sequence[Call3]) -> List[CallOutcome]:
        """
        Run calls in sequential chunks. A chunk that fails outright yields a
        failed outcome for every call it carried; it is not retried.
        """
        outcomes: List[CallOutcome] = []
        for index, start in enumerate(range(0, len(calls), self.chunk_size)):
            chunk = calls[start:start + self.chunk_size]
            chunk_outcomes = self.aggregate3(chunk)
            if chunk_outcomes is None:
                logger.warning(f"Multicall chunk {index} failed; marking {len(chunk)} calls as failed")
                chunk_outcomes = [CallOutcome.failed()] * len(chunk)
            outcomes.extend(chunk_outcomes)
        return outcomes

    def batch_get_balances(self, addresses: Iterable[str], tokens: Sequence[TokenConfig] = ()) -> Dict[str, BalanceResult]:
        """
        Fetch native and token balances for every distinct address.

        The result has exactly one entry per canonical (lowercased) address.
        Failed reads leave the native balance at "0"; token balances are only
        listed when strictly positive.
        """
        results: Dict[str, BalanceResult] = {}
        for address in addresses:
            if not address:
                continue
            key = canonical_address(address)
            if key not in results:
                results[key] = BalanceResult(address=key)

        if not results:
            return results

        calls: List[Call3] = []
        metas: List[_CallMeta] = []
        for address in results:
            if not is_hex_address(address):
                logger.warning(f"Skipping balance reads for malformed address {address}")
                continue
            calls.append(Call3(self.multicall_address, encode_get_eth_balance(address)))
            metas.append(_CallMeta(address, CallKind.NATIVE))
            for token in tokens:
                calls.append(Call3(canonical_address(token.address), encode_balance_of(address)))
                metas.append(_CallMeta(address, CallKind.TOKEN, token))

        outcomes = self.execute(calls)

        for meta, outcome in zip(metas, outcomes):
            result = results[meta.address]
            if meta.kind is CallKind.NATIVE:
                result.native_balance = decode_native_balance(outcome)
            else:
                balance = decode_token_balance(outcome, meta.token)
                if balance is not None:
                    result.token_balances[meta.token.symbol] = balance

        logger.info(f"Read balances for {len(results)} addresses with {len(calls)} calls")
        return results

    def batch_get_native_balances(self, addresses: Iterable[str]) -> Dict[str, str]:
        """Native balance only, keyed by canonical address."""
        return {
            address: result.native_balance
            for address, result in self.batch_get_balances(addresses).items()
        }

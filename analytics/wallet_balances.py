"""
Balances of every platform-controlled wallet: agent profit receivers,
deployment safe wallets and per-user venue agent addresses.

An address that appears under several roles is read once and reported once
per role, under the spelling it was stored with.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from api_clients.multicall_client import MulticallBalanceReader, TokenConfig, canonical_address
from analytics.guarded import fetch_or_default
from database.ledger import Ledger

logger = logging.getLogger(__name__)

PROFIT_RECEIVER = "profit_receiver"
SAFE_WALLET = "safe_wallet"
AGENT_ADDRESS = "agent_address"


@dataclass(frozen=True)
class WalletLabel:
    original_address: str
    type: str
    agent_id: Optional[str] = None
    agent_name: Optional[str] = None
    deployment_id: Optional[str] = None
    user_wallet: Optional[str] = None


def collect_wallet_labels(agents, deployments, user_addresses) -> Dict[str, List[WalletLabel]]:
    """Group every labelled wallet under its canonical address, in discovery order."""
    labels: Dict[str, List[WalletLabel]] = {}

    def add(address: Optional[str], **meta):
        if not address:
            return
        labels.setdefault(canonical_address(address), []).append(WalletLabel(original_address=address, **meta))

    agent_names = {}
    for agent_id, name, receiver in agents:
        agent_names[agent_id] = name
        add(receiver, type=PROFIT_RECEIVER, agent_id=agent_id, agent_name=name)

    for deployment_id, agent_id, user_wallet, safe_wallet in deployments:
        add(
            safe_wallet,
            type=SAFE_WALLET,
            agent_id=agent_id,
            agent_name=agent_names.get(agent_id),
            deployment_id=deployment_id,
            user_wallet=user_wallet,
        )

    for user_wallet, hyperliquid_address, ostium_address in user_addresses:
        add(hyperliquid_address, type=AGENT_ADDRESS, user_wallet=user_wallet)
        add(ostium_address, type=AGENT_ADDRESS, user_wallet=user_wallet)

    return labels


def _wallet_entry(label: WalletLabel, eth_balance: str, token_balances: Dict[str, str]) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"address": label.original_address, "type": label.type}
    optional = {
        "agentId": label.agent_id,
        "agentName": label.agent_name,
        "deploymentId": label.deployment_id,
        "userWallet": label.user_wallet,
    }
    entry.update({key: value for key, value in optional.items() if value is not None})
    entry["ethBalance"] = eth_balance
    entry["tokenBalances"] = dict(token_balances)
    return entry


async def build_wallet_balances(
    ledger: Ledger,
    balance_reader: MulticallBalanceReader,
    tokens: Sequence[TokenConfig],
) -> Dict[str, Any]:
    started = time.monotonic()

    agents, deployments, user_addresses = await asyncio.gather(
        fetch_or_default("agent profit receivers", ledger.agents.get_profit_receivers, default=[]),
        fetch_or_default("deployment safe wallets", ledger.deployments.get_safe_wallets, default=[]),
        fetch_or_default("user agent addresses", ledger.user_addresses.get_agent_addresses, default=[]),
    )

    labels = collect_wallet_labels(agents, deployments, user_addresses)
    addresses = list(labels)
    logger.info(f"[Wallet Balances] Fetching {len(addresses)} unique addresses using Multicall3...")
    balances = await fetch_or_default(
        "wallet balances", balance_reader.batch_get_balances, addresses, tokens, default={}
    )

    wallets: List[Dict[str, Any]] = []
    total_eth = Decimal(0)
    total_by_token: Dict[str, Decimal] = {}
    for address, address_labels in labels.items():
        result = balances.get(address)
        eth_balance = result.native_balance if result else "0"
        token_balances = result.token_balances if result else {}
        for label in address_labels:
            wallets.append(_wallet_entry(label, eth_balance, token_balances))
            total_eth += Decimal(eth_balance)
            for symbol, balance in token_balances.items():
                total_by_token[symbol] = total_by_token.get(symbol, Decimal(0)) + Decimal(balance)

    duration_ms = int((time.monotonic() - started) * 1000)
    logger.info(f"[Wallet Balances] Completed in {duration_ms}ms ({len(addresses)} addresses)")

    return {
        "wallets": wallets,
        "totals": {
            "totalEth": float(total_eth),
            "totalByToken": {symbol: float(amount) for symbol, amount in total_by_token.items()},
            "walletCount": len(wallets),
        },
        "meta": {
            "fetchedAt": datetime.now(timezone.utc).isoformat(),
            "duration": f"{duration_ms}ms",
            "addressCount": len(addresses),
        },
    }

"""
Ostium trading volume, split by network.

Positions that carry an Ostium trade id are looked up on the matching
subgraph (mainnet or testnet) and their notional converted to USD. Volume and
trade counts are bucketed by the day each position opened.
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from api_clients.ostium_subgraph_client import OstiumSubgraphClient, SubgraphTrade
from analytics.date_buckets import DateBucketAggregator, round_currency
from analytics.guarded import fetch_or_default
from analytics.notional import parse_notional
from config import SUBGRAPH_MAX_CONCURRENCY
from database.ledger import Ledger

logger = logging.getLogger(__name__)

MAINNET = "mainnet"
TESTNET = "testnet"


def trade_volume(trade: Optional[SubgraphTrade]):
    if trade is None:
        return 0
    return parse_notional(trade.notional, trade.trade_notional)


async def build_trading_volume(ledger: Ledger, subgraphs: Mapping[str, OstiumSubgraphClient]) -> Dict[str, Any]:
    positions = await fetch_or_default("ostium trade positions", ledger.positions.get_ostium_trade_positions, default=[])

    trade_ids: Dict[str, List[str]] = {MAINNET: [], TESTNET: []}
    for _position_id, trade_id, _opened_at, is_testnet in positions:
        if trade_id:
            trade_ids[TESTNET if is_testnet else MAINNET].append(trade_id)

    logger.info(
        f"[Trading Volume] Fetching {len(trade_ids[MAINNET])} mainnet trades, "
        f"{len(trade_ids[TESTNET])} testnet trades from subgraph"
    )
    mainnet_trades, testnet_trades = await asyncio.gather(
        fetch_or_default("mainnet subgraph trades", subgraphs[MAINNET].get_trades_by_ids, trade_ids[MAINNET], default={}),
        fetch_or_default("testnet subgraph trades", subgraphs[TESTNET].get_trades_by_ids, trade_ids[TESTNET], default={}),
    )
    logger.info(
        f"[Trading Volume] Retrieved {len(mainnet_trades)} mainnet trades, "
        f"{len(testnet_trades)} testnet trades from subgraph"
    )

    aggregator = DateBucketAggregator(
        counts=("mainnetTrades", "testnetTrades"),
        currency=("mainnetVolume", "testnetVolume"),
    )
    for _position_id, trade_id, opened_at, is_testnet in positions:
        if not trade_id or opened_at is None:
            continue
        if is_testnet:
            aggregator.add(opened_at, testnetTrades=1, testnetVolume=trade_volume(testnet_trades.get(trade_id)))
        else:
            aggregator.add(opened_at, mainnetTrades=1, mainnetVolume=trade_volume(mainnet_trades.get(trade_id)))

    data = [
        {
            "date": bucket.date,
            "mainnetVolume": bucket.daily["mainnetVolume"],
            "testnetVolume": bucket.daily["testnetVolume"],
            "mainnetTrades": bucket.daily["mainnetTrades"],
            "testnetTrades": bucket.daily["testnetTrades"],
            "cumulativeMainnetVolume": bucket.cumulative["mainnetVolume"],
            "cumulativeTestnetVolume": bucket.cumulative["testnetVolume"],
            "cumulativeMainnetTrades": bucket.cumulative["mainnetTrades"],
            "cumulativeTestnetTrades": bucket.cumulative["testnetTrades"],
        }
        for bucket in aggregator.rollup()
    ]

    return {
        "data": data,
        "totals": {
            "mainnetVolume": aggregator.total("mainnetVolume"),
            "testnetVolume": aggregator.total("testnetVolume"),
            "mainnetTrades": aggregator.total("mainnetTrades"),
            "testnetTrades": aggregator.total("testnetTrades"),
        },
    }


async def build_wallet_trading_volume(
    ledger: Ledger,
    subgraph: OstiumSubgraphClient,
    max_concurrency: int = SUBGRAPH_MAX_CONCURRENCY,
) -> Dict[str, Any]:
    """
    Volume per Ostium agent wallet, read from the subgraph by trader address.
    A wallet whose lookup fails reports zero trades; the others are unaffected.
    """
    rows = await fetch_or_default("ostium agent addresses", ledger.user_addresses.get_ostium_agent_addresses, default=[])
    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def wallet_volume(user_wallet: str, agent_address: str) -> Tuple[Any, Dict[str, Any]]:
        async with semaphore:
            trades = await fetch_or_default(
                f"trades for {agent_address}", subgraph.get_trades_by_trader, agent_address, default=[]
            )
        volume = sum((trade_volume(t) for t in trades), 0)
        return volume, {
            "userWallet": user_wallet,
            "agentAddress": agent_address,
            "trades": len(trades),
            "openTrades": sum(1 for t in trades if t.is_open),
            "volume": round_currency(volume),
        }

    results = await asyncio.gather(*(wallet_volume(u, a) for u, a in rows))
    ranked = sorted(results, key=lambda item: item[0], reverse=True)
    wallets = [row for _, row in ranked]
    total_volume = sum((volume for volume, _ in ranked), 0)

    return {
        "wallets": wallets,
        "totals": {
            "walletCount": len(wallets),
            "trades": sum(w["trades"] for w in wallets),
            "volume": round_currency(total_volume),
        },
    }

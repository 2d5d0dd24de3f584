"""
Overview document for the admin dashboard: platform counters, per-agent
breakdown with wallet balances, venue breakdown, recent activity and the last
days of signal/position/PnL activity.
"""

import asyncio
import logging
import time
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from api_clients.multicall_client import MulticallBalanceReader, canonical_address
from analytics.date_buckets import DateBucketAggregator, DateWindow, round_currency, to_utc_iso
from analytics.guarded import fetch_or_default
from config import (
    AGENT_STATUSES,
    DASHBOARD_DAILY_DAYS,
    DEPLOYMENT_ACTIVE,
    DEPLOYMENT_PAUSED,
    POSITION_OPEN,
    RECENT_ACTIVITY_LIMIT,
    VENUES,
)
from database.ledger import Ledger

logger = logging.getLogger(__name__)


async def _fetch_overview(ledger: Ledger) -> Dict[str, Any]:
    counters = [
        ("totalAgents", ledger.agents.count_agents, {}),
        ("publicAgents", ledger.agents.count_agents, {"status": AGENT_STATUSES[0]}),
        ("privateAgents", ledger.agents.count_agents, {"status": AGENT_STATUSES[1]}),
        ("draftAgents", ledger.agents.count_agents, {"status": AGENT_STATUSES[2]}),
        ("totalDeployments", ledger.deployments.count_deployments, {}),
        ("activeDeployments", ledger.deployments.count_deployments, {"status": DEPLOYMENT_ACTIVE}),
        ("pausedDeployments", ledger.deployments.count_deployments, {"status": DEPLOYMENT_PAUSED}),
        ("totalPositions", ledger.positions.count_positions, {}),
        ("openPositions", ledger.positions.count_positions, {"status": POSITION_OPEN}),
        ("closedPositions", ledger.positions.count_positions, {"closed": True}),
        ("totalSignals", ledger.signals.count_signals, {}),
        ("totalBillingEvents", ledger.activity.count_billing_events, {}),
        ("totalTelegramUsers", ledger.activity.count_telegram_users, {}),
        ("totalCtAccounts", ledger.activity.count_ct_accounts, {}),
        ("totalResearchInstitutes", ledger.activity.count_research_institutes, {}),
    ]
    counts = await asyncio.gather(*(
        fetch_or_default(key, func, default=0, **kwargs) for key, func, kwargs in counters
    ))
    total_pnl = await fetch_or_default("total pnl", ledger.positions.sum_pnl, default=None)

    overview = {key: value for (key, _, _), value in zip(counters, counts)}
    overview["totalPnl"] = round_currency(total_pnl) if total_pnl is not None else 0.0
    return overview


async def _fetch_venue_breakdown(ledger: Ledger) -> List[Dict[str, Any]]:
    """One count per venue and entity, all in flight together."""

    async def venue_counts(venue: str) -> Dict[str, Any]:
        agent_count, deployment_count, position_count = await asyncio.gather(
            fetch_or_default(f"{venue} agent count", ledger.agents.count_agents, venue=venue, default=0),
            fetch_or_default(f"{venue} deployment count", ledger.deployments.count_deployments, venue=venue, default=0),
            fetch_or_default(f"{venue} position count", ledger.positions.count_positions, venue=venue, default=0),
        )
        return {
            "venue": venue,
            "agentCount": agent_count,
            "deploymentCount": deployment_count,
            "positionCount": position_count,
        }

    return list(await asyncio.gather(*(venue_counts(v) for v in VENUES)))


async def _fetch_daily_stats(ledger: Ledger, window: DateWindow) -> List[Dict[str, Any]]:
    since = window.start_datetime
    signals, opened, closed = await asyncio.gather(
        fetch_or_default("daily signals", ledger.signals.get_signals_since, since, default=[]),
        fetch_or_default("daily opened positions", ledger.positions.get_opened_since, since, default=[]),
        fetch_or_default("daily closed pnl", ledger.positions.get_closed_pnl_since, since, default=[]),
    )

    aggregator = DateBucketAggregator(counts=("signals", "positions"), currency=("pnl",), window=window)
    for created_at, _venue in signals:
        aggregator.add(created_at, signals=1)
    for opened_at in opened:
        aggregator.add(opened_at, positions=1)
    for closed_at, pnl in closed:
        aggregator.add(closed_at, pnl=pnl)

    return [
        {
            "date": bucket.date,
            "signals": bucket.daily["signals"],
            "positions": bucket.daily["positions"],
            "pnl": bucket.daily["pnl"],
        }
        for bucket in aggregator.rollup()
    ]


def summarize_agent(agent: Dict[str, Any], signal_count: int, balances: Dict[str, str]) -> Dict[str, Any]:
    """Fold an agent's nested deployments and positions into its dashboard row."""
    deployments = agent.get("deployments") or []
    total_positions = 0
    open_positions = 0
    total_pnl = Decimal(0)
    for deployment in deployments:
        positions = deployment.get("positions") or []
        total_positions += len(positions)
        for position in positions:
            if position.get("status") == POSITION_OPEN:
                open_positions += 1
            if position.get("pnl") is not None:
                total_pnl += Decimal(str(position["pnl"]))

    receiver = agent.get("profit_receiver_address")
    wallet_balance = balances.get(canonical_address(receiver), "0") if receiver else "0"

    return {
        "id": agent["id"],
        "name": agent["name"],
        "venue": agent.get("venue"),
        "creatorWallet": agent.get("creator_wallet"),
        "profitReceiverAddress": receiver,
        "status": agent.get("status"),
        "apr30d": agent.get("apr_30d"),
        "apr90d": agent.get("apr_90d"),
        "sharpe30d": agent.get("sharpe_30d"),
        "subscriberCount": len(deployments),
        "activeSubscribers": sum(1 for d in deployments if d.get("status") == DEPLOYMENT_ACTIVE),
        "totalPositions": total_positions,
        "openPositions": open_positions,
        "totalSignals": signal_count,
        "totalPnl": round_currency(total_pnl),
        "walletBalance": wallet_balance,
    }


def _activity_entry(log: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": log["event_name"],
        "description": f"{log['event_name']} on {log.get('subject_type') or 'system'}",
        "timestamp": to_utc_iso(log.get("occurred_at")),
        "metadata": log.get("payload"),
    }


async def build_dashboard_stats(
    ledger: Ledger,
    balance_reader: MulticallBalanceReader,
    today: Optional[date] = None,
    daily_days: int = DASHBOARD_DAILY_DAYS,
    activity_limit: int = RECENT_ACTIVITY_LIMIT,
) -> Dict[str, Any]:
    started = time.monotonic()
    window = DateWindow.last_days(daily_days, today)

    overview, agents, signal_counts, audit_logs, venue_breakdown, daily_stats = await asyncio.gather(
        _fetch_overview(ledger),
        fetch_or_default("agents with activity", ledger.agents.get_agents_with_activity, default=[]),
        fetch_or_default("signal counts by agent", ledger.signals.count_by_agent, default={}),
        fetch_or_default("recent audit logs", ledger.activity.get_recent_audit_logs, activity_limit, default=[]),
        _fetch_venue_breakdown(ledger),
        _fetch_daily_stats(ledger, window),
    )

    receivers = [a["profit_receiver_address"] for a in agents if a.get("profit_receiver_address")]
    logger.info(f"[Dashboard Stats] Batch fetching {len(receivers)} agent balances...")
    balances = await fetch_or_default(
        "agent wallet balances", balance_reader.batch_get_native_balances, receivers, default={}
    )

    agent_rows = [summarize_agent(a, signal_counts.get(a["id"], 0), balances) for a in agents]

    duration_ms = int((time.monotonic() - started) * 1000)
    logger.info(f"[Dashboard Stats] Completed in {duration_ms}ms")

    return {
        "overview": overview,
        "agents": agent_rows,
        "recentActivity": [_activity_entry(log) for log in audit_logs],
        "venueBreakdown": venue_breakdown,
        "dailyStats": daily_stats,
        "meta": {
            "duration": f"{duration_ms}ms",
            "fetchedAt": datetime.now(timezone.utc).isoformat(),
        },
    }

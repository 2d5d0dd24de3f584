"""
Agent analytics: subscriber growth, realized PnL and signal activity over a
trailing window, one bucket per UTC day.
"""

import asyncio
import logging
from datetime import date, timedelta
from typing import Any, Dict, Optional

from analytics.date_buckets import DateBucketAggregator, DateWindow, format_currency, utc_today
from analytics.guarded import fetch_or_default
from config import ANALYTICS_WINDOW_DAYS, DEPLOYMENT_ACTIVE
from database.ledger import Ledger

logger = logging.getLogger(__name__)


async def build_agent_analytics(
    ledger: Ledger,
    today: Optional[date] = None,
    window_days: int = ANALYTICS_WINDOW_DAYS,
) -> Dict[str, Any]:
    """
    Daily series from `window_days` ago through today, both days included.

    The cumulative deployment count starts from the number of deployments
    that began before the window, so the curve shows the true total. The
    30-day net PnL in topStats comes from a separate SUM query rather than
    from the series.
    """
    today = today or utc_today()
    window = DateWindow.since(today - timedelta(days=window_days), today)
    since = window.start_datetime

    (
        deployment_starts,
        closed_pnl,
        signals,
        prior_deployments,
        total_subscribers,
        active_subscribers,
        signals_in_window,
        net_pnl,
    ) = await asyncio.gather(
        fetch_or_default("deployment starts", ledger.deployments.get_deployment_starts, since, default=[]),
        fetch_or_default("closed position pnl", ledger.positions.get_closed_pnl_since, since, default=[]),
        fetch_or_default("signals in window", ledger.signals.get_signals_since, since, default=[]),
        fetch_or_default("deployments before window", ledger.deployments.count_deployments, started_before=since, default=0),
        fetch_or_default("total subscribers", ledger.deployments.count_deployments, default=0),
        fetch_or_default("active subscribers", ledger.deployments.count_deployments, status=DEPLOYMENT_ACTIVE, default=0),
        fetch_or_default("signal count in window", ledger.signals.count_signals, since=since, default=0),
        fetch_or_default("net pnl in window", ledger.positions.sum_pnl, closed_since=since, default=None),
    )

    aggregator = DateBucketAggregator(
        counts=("deployments", "signals"),
        currency=("pnl",),
        window=window,
        starting_offsets={"deployments": prior_deployments},
        breakdowns=("signalsByVenue",),
    )
    for started_at in deployment_starts:
        aggregator.add(started_at, deployments=1)
    for closed_at, pnl in closed_pnl:
        aggregator.add(closed_at, pnl=pnl)
    for created_at, venue in signals:
        aggregator.add(created_at, signals=1)
        aggregator.add_breakdown(created_at, "signalsByVenue", venue)

    daily = [
        {
            "date": bucket.date,
            "deployments": bucket.cumulative["deployments"],
            "newDeployments": bucket.daily["deployments"],
            "pnl": bucket.daily["pnl"],
            "cumulativePnL": bucket.cumulative["pnl"],
            "signals": bucket.daily["signals"],
            "signalsByVenue": bucket.breakdowns["signalsByVenue"],
        }
        for bucket in aggregator.rollup()
    ]

    return {
        "daily": daily,
        "topStats": {
            "totalSubscribers": total_subscribers,
            "activeSubscribers": active_subscribers,
            "totalSignals30d": signals_in_window,
            "netPnL30d": format_currency(net_pnl if net_pnl is not None else 0),
        },
    }

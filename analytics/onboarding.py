"""
Onboarding growth: users who registered venue agent addresses, per UTC day,
over every day on which someone onboarded.
"""

import logging
from typing import Any, Dict

from analytics.date_buckets import DateBucketAggregator
from analytics.guarded import fetch_or_default
from database.ledger import Ledger

logger = logging.getLogger(__name__)


async def build_onboarded_users(ledger: Ledger) -> Dict[str, Any]:
    users = await fetch_or_default("onboarded users", ledger.user_addresses.get_onboarded_users, default=[])

    aggregator = DateBucketAggregator(counts=("total", "hyperliquid", "ostium"))
    for created_at, hyperliquid_address, ostium_address in users:
        aggregator.add(
            created_at,
            total=1,
            hyperliquid=1 if hyperliquid_address else 0,
            ostium=1 if ostium_address else 0,
        )

    data = [
        {
            "date": bucket.date,
            "total": bucket.daily["total"],
            "hyperliquid": bucket.daily["hyperliquid"],
            "ostium": bucket.daily["ostium"],
            "cumulativeTotal": bucket.cumulative["total"],
            "cumulativeHyperliquid": bucket.cumulative["hyperliquid"],
            "cumulativeOstium": bucket.cumulative["ostium"],
        }
        for bucket in aggregator.rollup()
    ]
    logger.info(f"[Onboarded Users] {len(users)} users over {len(data)} days")

    return {
        "data": data,
        "totalUsers": len(users),
    }

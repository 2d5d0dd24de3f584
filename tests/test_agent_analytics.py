import asyncio
import unittest
from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from analytics.agent_analytics import build_agent_analytics


def count_deployments(status=None, venue=None, started_before=None):
    if started_before is not None:
        return 10
    if status is not None:
        return 4
    return 15


def make_ledger():
    ledger = MagicMock()
    ledger.deployments.count_deployments.side_effect = count_deployments
    ledger.deployments.get_deployment_starts.return_value = [datetime(2024, 1, 1, 5), datetime(2024, 1, 3)]
    ledger.positions.get_closed_pnl_since.return_value = [
        (datetime(2024, 1, 1, 1), Decimal("10")),
        (datetime(2024, 1, 1, 12), Decimal("-3")),
        (datetime(2024, 1, 3, 9), Decimal("5")),
    ]
    ledger.signals.get_signals_since.return_value = [
        (datetime(2024, 1, 2, 1), "OSTIUM"),
        (datetime(2024, 1, 2, 2), "HYPERLIQUID"),
        (datetime(2024, 1, 2, 3), "OSTIUM"),
    ]
    ledger.signals.count_signals.return_value = 3
    ledger.positions.sum_pnl.return_value = Decimal("12")
    return ledger


class TestAgentAnalytics(unittest.TestCase):

    def build(self, ledger):
        return asyncio.run(build_agent_analytics(ledger, today=date(2024, 1, 31), window_days=30))

    def test_window_has_one_bucket_per_day(self):
        daily = self.build(make_ledger())["daily"]
        self.assertEqual(len(daily), 31)
        self.assertEqual(daily[0]["date"], "2024-01-01")
        self.assertEqual(daily[-1]["date"], "2024-01-31")

    def test_window_start_is_passed_as_cutoff(self):
        ledger = make_ledger()
        self.build(ledger)
        cutoff = datetime(2024, 1, 1, tzinfo=timezone.utc)
        ledger.deployments.get_deployment_starts.assert_called_once_with(cutoff)
        ledger.positions.sum_pnl.assert_called_once_with(closed_since=cutoff)

    def test_deployments_start_from_prior_total(self):
        daily = self.build(make_ledger())["daily"]
        self.assertEqual([d["deployments"] for d in daily[:4]], [11, 11, 12, 12])
        self.assertEqual([d["newDeployments"] for d in daily[:4]], [1, 0, 1, 0])
        self.assertEqual(daily[-1]["deployments"], 12)

    def test_pnl_series(self):
        daily = self.build(make_ledger())["daily"]
        self.assertEqual([d["pnl"] for d in daily[:3]], [7.0, 0.0, 5.0])
        self.assertEqual([d["cumulativePnL"] for d in daily[:3]], [7.0, 7.0, 12.0])
        self.assertEqual(daily[-1]["cumulativePnL"], 12.0)

    def test_signals_by_venue(self):
        daily = self.build(make_ledger())["daily"]
        self.assertEqual(daily[1]["signals"], 3)
        self.assertEqual(daily[1]["signalsByVenue"], {"HYPERLIQUID": 1, "OSTIUM": 2})
        self.assertEqual(daily[0]["signalsByVenue"], {})

    def test_top_stats(self):
        top = self.build(make_ledger())["topStats"]
        self.assertEqual(top, {
            "totalSubscribers": 15,
            "activeSubscribers": 4,
            "totalSignals30d": 3,
            "netPnL30d": "12.00",
        })

    def test_failed_queries_use_neutral_defaults(self):
        ledger = make_ledger()
        ledger.positions.sum_pnl.side_effect = RuntimeError("boom")
        ledger.signals.get_signals_since.side_effect = RuntimeError("boom")
        ledger.deployments.count_deployments.side_effect = RuntimeError("boom")

        result = self.build(ledger)

        self.assertEqual(result["topStats"]["netPnL30d"], "0.00")
        self.assertEqual(result["topStats"]["totalSubscribers"], 0)
        self.assertTrue(all(d["signals"] == 0 for d in result["daily"]))
        self.assertEqual(result["daily"][0]["deployments"], 1)


if __name__ == '__main__':
    unittest.main()

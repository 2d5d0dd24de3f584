import unittest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from analytics.date_buckets import (
    DateBucketAggregator,
    DateWindow,
    TimestampedRecord,
    date_key,
    format_currency,
    round_currency,
    to_utc_iso,
)


class TestDateKey(unittest.TestCase):

    def test_naive_datetime_is_utc(self):
        self.assertEqual(date_key(datetime(2024, 1, 1, 23, 59)), "2024-01-01")

    def test_aware_datetime_is_converted_to_utc(self):
        eastern = timezone(timedelta(hours=-5))
        self.assertEqual(date_key(datetime(2024, 1, 1, 23, 0, tzinfo=eastern)), "2024-01-02")

    def test_epoch_seconds(self):
        self.assertEqual(date_key(0), "1970-01-01")
        self.assertEqual(date_key(1704153600), "2024-01-02")

    def test_iso_strings(self):
        self.assertEqual(date_key("2024-03-05"), "2024-03-05")
        self.assertEqual(date_key("2024-03-05T23:30:00Z"), "2024-03-05")
        self.assertEqual(date_key("2024-03-05T23:30:00-05:00"), "2024-03-06")

    def test_date(self):
        self.assertEqual(date_key(date(2024, 2, 29)), "2024-02-29")


class TestCurrency(unittest.TestCase):

    def test_round_half_up(self):
        self.assertEqual(round_currency(Decimal("2.675")), 2.68)
        self.assertEqual(round_currency(0.125), 0.13)
        self.assertEqual(round_currency(Decimal("-1.005")), -1.01)

    def test_format_currency(self):
        self.assertEqual(format_currency(12.3), "12.30")
        self.assertEqual(format_currency(0), "0.00")
        self.assertEqual(format_currency(Decimal("7.125")), "7.13")

    def test_to_utc_iso(self):
        self.assertIsNone(to_utc_iso(None))
        self.assertEqual(to_utc_iso(datetime(2024, 1, 1, 12)), "2024-01-01T12:00:00+00:00")


class TestDateWindow(unittest.TestCase):

    def test_last_days_ends_today(self):
        today = date(2024, 3, 31)
        window = DateWindow.last_days(30, today)
        dates = window.dates()
        self.assertEqual(len(window), 30)
        self.assertEqual(len(dates), 30)
        self.assertEqual(dates[0], "2024-03-02")
        self.assertEqual(dates[-1], "2024-03-31")

    def test_since_includes_both_ends(self):
        today = date(2024, 3, 31)
        window = DateWindow.since(today - timedelta(days=30), today)
        self.assertEqual(len(window), 31)
        self.assertEqual(window.dates()[0], "2024-03-01")

    def test_start_datetime_is_utc_midnight(self):
        window = DateWindow(date(2024, 1, 5), date(2024, 1, 6))
        self.assertEqual(window.start_datetime, datetime(2024, 1, 5, tzinfo=timezone.utc))

    def test_invalid_windows(self):
        with self.assertRaises(ValueError):
            DateWindow(date(2024, 1, 2), date(2024, 1, 1))
        with self.assertRaises(ValueError):
            DateWindow.last_days(0, date(2024, 1, 1))


class TestDateBucketAggregator(unittest.TestCase):

    def setUp(self):
        self.window = DateWindow(date(2024, 1, 1), date(2024, 1, 3))

    def test_pnl_scenario(self):
        aggregator = DateBucketAggregator(currency=("pnl",), window=self.window)
        landed = aggregator.add_records([
            TimestampedRecord("2024-01-01", {"pnl": 10}),
            TimestampedRecord("2024-01-01", {"pnl": -3}),
            TimestampedRecord("2024-01-03", {"pnl": 5}),
        ])
        series = aggregator.rollup()

        self.assertEqual(landed, 3)
        self.assertEqual([b.date for b in series], ["2024-01-01", "2024-01-02", "2024-01-03"])
        self.assertEqual([b.daily["pnl"] for b in series], [7.0, 0.0, 5.0])
        self.assertEqual([b.cumulative["pnl"] for b in series], [7.0, 7.0, 12.0])

    def test_fixed_window_is_zero_filled(self):
        window = DateWindow.last_days(30, date(2024, 6, 30))
        aggregator = DateBucketAggregator(counts=("signals",), window=window)
        series = aggregator.rollup()
        self.assertEqual(len(series), 30)
        self.assertTrue(all(b.daily["signals"] == 0 for b in series))
        self.assertTrue(all(b.cumulative["signals"] == 0 for b in series))

    def test_records_outside_window_are_dropped(self):
        aggregator = DateBucketAggregator(counts=("signals",), window=self.window)
        self.assertFalse(aggregator.add(datetime(2023, 12, 31, 23, 59), signals=1))
        self.assertFalse(aggregator.add(datetime(2024, 1, 4), signals=1))
        self.assertFalse(aggregator.add(None, signals=1))
        self.assertTrue(aggregator.add(datetime(2024, 1, 2), signals=1))
        self.assertEqual(aggregator.total("signals"), 1)
        self.assertEqual(len(aggregator), 3)

    def test_open_range_creates_observed_days_only(self):
        aggregator = DateBucketAggregator(counts=("total",))
        aggregator.add(datetime(2024, 2, 10), total=1)
        aggregator.add(datetime(2024, 1, 5), total=2)
        aggregator.add(datetime(2024, 2, 10, 18), total=1)
        series = aggregator.rollup()
        self.assertEqual([b.date for b in series], ["2024-01-05", "2024-02-10"])
        self.assertEqual([b.daily["total"] for b in series], [2, 2])
        self.assertEqual([b.cumulative["total"] for b in series], [2, 4])

    def test_starting_offset_shifts_cumulative_only(self):
        aggregator = DateBucketAggregator(
            counts=("deployments",), window=self.window, starting_offsets={"deployments": 10}
        )
        aggregator.add(datetime(2024, 1, 2), deployments=1)
        series = aggregator.rollup()
        self.assertEqual([b.daily["deployments"] for b in series], [0, 1, 0])
        self.assertEqual([b.cumulative["deployments"] for b in series], [10, 11, 11])
        self.assertEqual(aggregator.total("deployments"), 11)

    def test_cumulative_invariant(self):
        aggregator = DateBucketAggregator(
            counts=("trades",), currency=("volume",), window=DateWindow(date(2024, 1, 1), date(2024, 1, 20))
        )
        for day in range(20):
            for _ in range(day % 4):
                aggregator.add(datetime(2024, 1, 1 + day, 6), trades=1, volume=Decimal("0.105"))
        series = aggregator.rollup()
        for previous, current in zip(series, series[1:]):
            self.assertEqual(current.cumulative["trades"], previous.cumulative["trades"] + current.daily["trades"])
            # daily and cumulative are rounded separately, so they may disagree by one cent
            drift = (
                Decimal(str(current.cumulative["volume"]))
                - Decimal(str(previous.cumulative["volume"]))
                - Decimal(str(current.daily["volume"]))
            )
            self.assertLessEqual(abs(drift), Decimal("0.01"))

    def test_currency_does_not_drift(self):
        aggregator = DateBucketAggregator(currency=("pnl",))
        for _ in range(1000):
            aggregator.add("2024-01-01", pnl=0.1)
        self.assertEqual(aggregator.total("pnl"), 100.0)

    def test_rollup_is_idempotent(self):
        aggregator = DateBucketAggregator(counts=("signals",), currency=("pnl",), window=self.window)
        aggregator.add("2024-01-02", signals=2, pnl=Decimal("1.234"))
        self.assertEqual(aggregator.rollup(), aggregator.rollup())

    def test_none_deltas_are_skipped(self):
        aggregator = DateBucketAggregator(currency=("pnl",), window=self.window)
        self.assertTrue(aggregator.add("2024-01-01", pnl=None))
        self.assertEqual(aggregator.rollup()[0].daily["pnl"], 0.0)

    def test_breakdowns(self):
        aggregator = DateBucketAggregator(counts=("signals",), window=self.window, breakdowns=("byVenue",))
        aggregator.add_breakdown("2024-01-01", "byVenue", "OSTIUM")
        aggregator.add_breakdown("2024-01-01", "byVenue", "HYPERLIQUID")
        aggregator.add_breakdown("2024-01-01", "byVenue", "OSTIUM")
        self.assertFalse(aggregator.add_breakdown("2024-01-01", "byVenue", None))
        self.assertFalse(aggregator.add_breakdown("2024-02-01", "byVenue", "GMX"))

        series = aggregator.rollup()
        self.assertEqual(series[0].breakdowns["byVenue"], {"HYPERLIQUID": 1, "OSTIUM": 2})
        self.assertEqual(series[1].breakdowns["byVenue"], {})

    def test_unknown_names_raise(self):
        aggregator = DateBucketAggregator(counts=("signals",), breakdowns=("byVenue",))
        with self.assertRaises(ValueError):
            aggregator.add("2024-01-01", trades=1)
        with self.assertRaises(ValueError):
            aggregator.add_breakdown("2024-01-01", "byAgent", "a1")
        with self.assertRaises(ValueError):
            aggregator.total("pnl")
        with self.assertRaises(ValueError):
            DateBucketAggregator(counts=("pnl",), currency=("pnl",))


if __name__ == '__main__':
    unittest.main()

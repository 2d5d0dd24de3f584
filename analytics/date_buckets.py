"""
UTC calendar-day bucketing of timestamped records.

A DateBucketAggregator folds records into per-day sums and then produces, in
ascending date order, both the daily values and a running cumulative series.
Two modes:

- fixed window: every date of the window exists (zero-filled) and records
  falling outside the window are ignored;
- open range: buckets are created lazily for the dates actually observed.

Currency measures are accumulated as exact Decimals and only rounded to cents
when a bucket is emitted, so long series do not drift.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Union

import pandas as pd

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

Timestamp = Union[datetime, date, str, int, float]


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round_currency(value: Any) -> float:
    """Round half-up to cents and return a float for JSON output."""
    return float(to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def format_currency(value: Any) -> str:
    """Fixed two-decimal string, e.g. '12.30'."""
    return str(to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def date_key(timestamp: Timestamp) -> str:
    """
    The UTC calendar date of a timestamp as YYYY-MM-DD.

    Naive datetimes are taken to be UTC already; ints and floats are Unix
    seconds; strings are parsed as ISO 8601.
    """
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is not None:
            timestamp = timestamp.astimezone(timezone.utc)
        return timestamp.date().isoformat()
    if isinstance(timestamp, date):
        return timestamp.isoformat()
    if isinstance(timestamp, (int, float)):
        return datetime.fromtimestamp(timestamp, timezone.utc).date().isoformat()
    parsed = pd.Timestamp(timestamp)
    if parsed.tzinfo is not None:
        parsed = parsed.tz_convert("UTC")
    return parsed.date().isoformat()


@dataclass(frozen=True)
class DateWindow:
    """An inclusive range of UTC calendar dates."""
    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Window start {self.start} is after its end {self.end}")

    @classmethod
    def last_days(cls, days: int, today: Optional[date] = None) -> "DateWindow":
        """`days` buckets ending today (today included)."""
        if days <= 0:
            raise ValueError("days must be positive")
        end = today or utc_today()
        return cls(end - timedelta(days=days - 1), end)

    @classmethod
    def since(cls, start: date, today: Optional[date] = None) -> "DateWindow":
        return cls(start, today or utc_today())

    @property
    def start_datetime(self) -> datetime:
        """UTC midnight at the start of the window, for ledger cut-offs."""
        return datetime(self.start.year, self.start.month, self.start.day, tzinfo=timezone.utc)

    def dates(self) -> List[str]:
        return [ts.date().isoformat() for ts in pd.date_range(self.start, self.end, freq="D")]

    def __len__(self) -> int:
        return (self.end - self.start).days + 1


class TimestampedRecord(NamedTuple):
    timestamp: Optional[Timestamp]
    deltas: Mapping[str, Any]


@dataclass(frozen=True)
class DateBucket:
    date: str
    daily: Dict[str, Any]
    cumulative: Dict[str, Any]
    breakdowns: Dict[str, Dict[str, int]] = field(default_factory=dict)


class DateBucketAggregator:
    """
    Folds timestamped numeric deltas into an ascending daily series.

    Args:
        counts: names of integer measures (e.g. signals, deployments)
        currency: names of monetary measures, summed exactly and emitted in cents
        window: fixed DateWindow; None for buckets over observed dates only
        starting_offsets: per-measure value the cumulative series starts from,
            for entities that pre-date the window
        breakdowns: names of keyed per-day counters (e.g. signals per venue)
    """

    def __init__(
        self,
        counts: Sequence[str] = (),
        currency: Sequence[str] = (),
        window: Optional[DateWindow] = None,
        starting_offsets: Optional[Mapping[str, Any]] = None,
        breakdowns: Sequence[str] = (),
    ):
        overlap = set(counts) & set(currency)
        if overlap:
            raise ValueError(f"Measures declared as both count and currency: {sorted(overlap)}")
        self.count_measures = tuple(counts)
        self.currency_measures = tuple(currency)
        self.measures = self.count_measures + self.currency_measures
        self.breakdown_names = tuple(breakdowns)
        self.window = window

        self.starting_offsets: Dict[str, Any] = {m: self._zero(m) for m in self.measures}
        for measure, offset in (starting_offsets or {}).items():
            self._check_measure(measure)
            self.starting_offsets[measure] = self._coerce(measure, offset)

        self._daily: Dict[str, Dict[str, Any]] = {}
        self._breakdowns: Dict[str, Dict[str, Counter]] = {}
        if window is not None:
            for key in window.dates():
                self._new_bucket(key)

    def _zero(self, measure: str):
        return Decimal(0) if measure in self.currency_measures else 0

    def _coerce(self, measure: str, value: Any):
        if measure in self.currency_measures:
            return to_decimal(value)
        return int(value)

    def _check_measure(self, measure: str) -> None:
        if measure not in self.measures:
            raise ValueError(f"Unknown measure '{measure}'")

    def _new_bucket(self, key: str) -> Dict[str, Any]:
        bucket = {m: self._zero(m) for m in self.measures}
        self._daily[key] = bucket
        self._breakdowns[key] = {name: Counter() for name in self.breakdown_names}
        return bucket

    def _bucket_for(self, timestamp: Optional[Timestamp]) -> Optional[str]:
        """Bucket key for a timestamp, or None when the record does not land in the series."""
        if timestamp is None:
            return None
        key = date_key(timestamp)
        if key in self._daily:
            return key
        if self.window is not None:
            return None
        self._new_bucket(key)
        return key

    def add(self, timestamp: Optional[Timestamp], **deltas) -> bool:
        """
        Add deltas to the bucket of `timestamp`. Returns False when the record
        was dropped (no timestamp, or outside the fixed window).
        """
        for measure in deltas:
            self._check_measure(measure)
        key = self._bucket_for(timestamp)
        if key is None:
            return False
        bucket = self._daily[key]
        for measure, delta in deltas.items():
            if delta is None:
                continue
            bucket[measure] += self._coerce(measure, delta)
        return True

    def add_records(self, records: Iterable[TimestampedRecord]) -> int:
        """Add many records; returns how many landed in the series."""
        return sum(1 for record in records if self.add(record.timestamp, **record.deltas))

    def add_breakdown(self, timestamp: Optional[Timestamp], name: str, key: Optional[str], amount: int = 1) -> bool:
        if name not in self.breakdown_names:
            raise ValueError(f"Unknown breakdown '{name}'")
        if key is None:
            return False
        bucket_key = self._bucket_for(timestamp)
        if bucket_key is None:
            return False
        self._breakdowns[bucket_key][name][str(key)] += amount
        return True

    def _emit(self, measure: str, value):
        if measure in self.currency_measures:
            return round_currency(value)
        return value

    def rollup(self) -> List[DateBucket]:
        """
        Produce the series in ascending date order. Each bucket's cumulative
        value is the previous cumulative plus its own daily value; the first
        bucket starts from the starting offset. Does not modify the aggregator.
        """
        running = dict(self.starting_offsets)
        series: List[DateBucket] = []
        for key in sorted(self._daily):
            daily = self._daily[key]
            for measure in self.measures:
                running[measure] += daily[measure]
            series.append(DateBucket(
                date=key,
                daily={m: self._emit(m, daily[m]) for m in self.measures},
                cumulative={m: self._emit(m, running[m]) for m in self.measures},
                breakdowns={
                    name: dict(sorted(counter.items()))
                    for name, counter in self._breakdowns[key].items()
                },
            ))
        return series

    def total(self, measure: str):
        """Starting offset plus every daily value of the measure, rounded like the series."""
        self._check_measure(measure)
        value = self.starting_offsets[measure]
        for bucket in self._daily.values():
            value += bucket[measure]
        return self._emit(measure, value)

    def __len__(self) -> int:
        return len(self._daily)


def to_utc_iso(timestamp: Optional[datetime]) -> Optional[str]:
    """ISO 8601 in UTC; naive datetimes are taken to be UTC already."""
    if timestamp is None:
        return None
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc).isoformat()

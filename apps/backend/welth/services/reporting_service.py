from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterable, Iterator, Optional, Protocol

from welth import models


class DateRange(str, Enum):
    LAST_7_DAYS = "7D"
    LAST_MONTH = "1M"
    LAST_3_MONTHS = "3M"
    LAST_6_MONTHS = "6M"
    ALL = "ALL"

    @property
    def days(self) -> Optional[int]:
        return _RANGE_DAYS[self]

    @property
    def label(self) -> str:
        return _RANGE_LABELS[self]


_RANGE_DAYS: dict[DateRange, Optional[int]] = {
    DateRange.LAST_7_DAYS: 7,
    DateRange.LAST_MONTH: 30,
    DateRange.LAST_3_MONTHS: 90,
    DateRange.LAST_6_MONTHS: 180,
    DateRange.ALL: None,
}

_RANGE_LABELS: dict[DateRange, str] = {
    DateRange.LAST_7_DAYS: "Last 7 Days",
    DateRange.LAST_MONTH: "Last Month",
    DateRange.LAST_3_MONTHS: "Last 3 Months",
    DateRange.LAST_6_MONTHS: "Last 6 Months",
    DateRange.ALL: "All Time",
}


class _Entry(Protocol):
    type: models.TxnType
    amount: Decimal
    date: datetime


@dataclass(frozen=True)
class DailyTotals:
    date: date
    income: Decimal
    expense: Decimal


@dataclass(frozen=True)
class WindowTotals:
    income: Decimal
    expense: Decimal

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


class DailySeries:
    """Per-day income/expense buckets, recomputed on every iteration."""

    def __init__(
        self,
        transactions: Iterable[_Entry],
        window_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> None:
        if window_days is not None and window_days < 0:
            raise ValueError("window_days must not be negative")
        self._transactions = tuple(transactions)
        self.window_days = window_days
        self.now = now or models.now_local_naive()

    @property
    def bounds(self) -> tuple[Optional[datetime], datetime]:
        end = datetime.combine(self.now.date(), time.max)
        if self.window_days is None:
            return None, end
        start = datetime.combine((self.now - timedelta(days=self.window_days)).date(), time.min)
        return start, end

    def _in_window(self, value: datetime) -> bool:
        if self.window_days is None:
            return True
        start, end = self.bounds
        return start <= value <= end

    def __iter__(self) -> Iterator[DailyTotals]:
        buckets: dict[date, list[Decimal]] = {}
        for txn in self._transactions:
            if not self._in_window(txn.date):
                continue
            bucket = buckets.setdefault(txn.date.date(), [Decimal("0"), Decimal("0")])
            if txn.type == models.TxnType.INCOME:
                bucket[0] += Decimal(txn.amount)
            else:
                bucket[1] += Decimal(txn.amount)
        for day in sorted(buckets):
            income, expense = buckets[day]
            yield DailyTotals(date=day, income=income, expense=expense)


def aggregate(
    transactions: Iterable[_Entry],
    window_days: Optional[int] = None,
    now: Optional[datetime] = None,
) -> DailySeries:
    """Bucket ``transactions`` by calendar day for the trailing window.

    ``window_days=None`` keeps every transaction. Otherwise the window runs
    from the start of the day ``window_days`` before ``now`` through the end
    of today.
    """
    return DailySeries(transactions, window_days, now)


def totals(series: Iterable[DailyTotals]) -> WindowTotals:
    income = Decimal("0")
    expense = Decimal("0")
    for day in series:
        income += day.income
        expense += day.expense
    return WindowTotals(income=income, expense=expense)

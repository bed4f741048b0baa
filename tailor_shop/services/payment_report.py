"""Weekly and date-range payment aggregation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable

from tailor_shop.services.urgency import to_decimal
from tailor_shop.utils.time import local_now, to_local_date, week_window


@dataclass
class MethodTotals:
    count: int = 0
    total: Decimal = Decimal("0.00")


@dataclass
class DayBucket:
    date: date
    day_name: str
    total: Decimal = Decimal("0.00")
    count: int = 0
    payments: list[Any] = field(default_factory=list)


@dataclass
class PaymentReport:
    start_date: date
    end_date: date
    total_amount: Decimal
    total_count: int
    by_method: dict[str, MethodTotals]
    by_day: list[DayBucket]
    payments: list[Any]


def aggregate(payments: Iterable[Any], start_date: date, end_date: date) -> PaymentReport:
    """Summarise payments already filtered to ``[start_date, end_date]``.

    Every day in the range gets a bucket, including days without payments.
    Payments are matched to days by local calendar date.
    """
    if end_date < start_date:
        raise ValueError("End date must not be before start date")

    rows = list(payments)
    buckets: dict[date, DayBucket] = {}
    day = start_date
    while day <= end_date:
        buckets[day] = DayBucket(date=day, day_name=day.strftime("%A"))
        day += timedelta(days=1)

    by_method: dict[str, MethodTotals] = {}
    total = Decimal("0.00")
    for payment in rows:
        amount = to_decimal(payment.amount)
        total += amount

        method_totals = by_method.setdefault(payment.payment_method, MethodTotals())
        method_totals.count += 1
        method_totals.total += amount

        bucket = buckets.get(to_local_date(payment.payment_date))
        if bucket is not None:
            bucket.count += 1
            bucket.total += amount
            bucket.payments.append(payment)

    return PaymentReport(
        start_date=start_date,
        end_date=end_date,
        total_amount=total,
        total_count=len(rows),
        by_method=by_method,
        by_day=list(buckets.values()),
        payments=rows,
    )


def current_week(now: datetime | None = None) -> tuple[datetime, datetime]:
    """Monday 00:00 to Sunday 23:59:59.999999 of this week, local time."""
    return week_window(now or local_now())


def last_week(now: datetime | None = None) -> tuple[datetime, datetime]:
    return week_window((now or local_now()) - timedelta(days=7))

from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from tailor_shop.services.payment_report import aggregate, current_week, last_week


def _payment(amount: str, method: str, when: datetime) -> SimpleNamespace:
    return SimpleNamespace(amount=Decimal(amount), payment_method=method, payment_date=when)


def test_week_has_seven_buckets_including_empty_days() -> None:
    payments = [
        _payment("100.00", "CASH", datetime(2024, 5, 13, 9, 30, tzinfo=timezone.utc)),
        _payment("50.00", "MOMO", datetime(2024, 5, 13, 16, 0, tzinfo=timezone.utc)),
        _payment("75.50", "CASH", datetime(2024, 5, 17, 12, 0, tzinfo=timezone.utc)),
    ]

    report = aggregate(payments, date(2024, 5, 13), date(2024, 5, 19))

    assert len(report.by_day) == 7
    assert [bucket.day_name for bucket in report.by_day][:2] == ["Monday", "Tuesday"]
    assert sum(1 for bucket in report.by_day if bucket.count == 0) == 5
    assert report.by_day[0].total == Decimal("150.00")
    assert report.by_day[0].count == 2
    assert report.by_day[4].total == Decimal("75.50")
    assert report.total_amount == Decimal("225.50")
    assert report.total_count == 3
    assert report.by_method["CASH"].count == 2
    assert report.by_method["CASH"].total == Decimal("175.50")
    assert report.by_method["MOMO"].total == Decimal("50.00")


def test_empty_range_still_lists_days() -> None:
    report = aggregate([], date(2024, 5, 1), date(2024, 5, 3))
    assert [bucket.date for bucket in report.by_day] == [date(2024, 5, 1), date(2024, 5, 2), date(2024, 5, 3)]
    assert report.total_amount == Decimal("0.00")
    assert report.by_method == {}


def test_inverted_range_is_rejected() -> None:
    with pytest.raises(ValueError):
        aggregate([], date(2024, 5, 3), date(2024, 5, 1))


def test_current_and_last_week_run_monday_to_sunday() -> None:
    wednesday = datetime(2024, 5, 15, 14, 0, tzinfo=timezone.utc)

    start, end = current_week(wednesday)
    assert start.date() == date(2024, 5, 13)
    assert end.date() == date(2024, 5, 19)
    assert (start.hour, start.minute) == (0, 0)
    assert (end.hour, end.minute, end.second, end.microsecond) == (23, 59, 59, 999999)

    previous_start, previous_end = last_week(wednesday)
    assert previous_start.date() == date(2024, 5, 6)
    assert previous_end.date() == date(2024, 5, 12)

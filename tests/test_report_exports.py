from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from tailor_shop.services.payment_report import aggregate
from tailor_shop.services.report_exports import (
    render_payments_csv,
    render_payments_pdf,
    report_filename,
    sanitize_filename,
)


def _report():
    customer = SimpleNamespace(full_name="Adwoa Sarpong")
    order = SimpleNamespace(order_number="T-2024-0007", customer=customer)
    payments = [
        SimpleNamespace(
            amount=Decimal("80.00"),
            payment_method="MOMO",
            payment_date=datetime(2024, 5, 14, 11, 15, tzinfo=timezone.utc),
            note="Deposit",
            order=order,
        ),
        SimpleNamespace(
            amount=Decimal("20.00"),
            payment_method="CASH",
            payment_date=datetime(2024, 5, 16, 9, 0, tzinfo=timezone.utc),
            note=None,
            order=order,
        ),
    ]
    return aggregate(payments, date(2024, 5, 13), date(2024, 5, 19))


def test_csv_lists_each_payment_and_total() -> None:
    lines = render_payments_csv(_report()).strip().splitlines()
    assert lines[0] == "Date,Order Number,Customer,Method,Amount,Note"
    assert lines[1] == "2024-05-14 11:15,T-2024-0007,Adwoa Sarpong,MOMO,80.00,Deposit"
    assert lines[-1].startswith("Total,,,,100.00")


def test_filenames_are_safe() -> None:
    assert sanitize_filename("  week: 1/2 ") == "week_1_2"
    assert sanitize_filename("") == "report"
    assert report_filename(_report(), "pdf") == "payments_2024-05-13_2024-05-19.pdf"


def test_pdf_renders_with_and_without_payments() -> None:
    pytest.importorskip("reportlab")
    payload = render_payments_pdf(_report(), {"branch": "Accra", "generated_at": "2024-05-19 18:00"})
    assert payload.startswith(b"%PDF")

    empty = render_payments_pdf(aggregate([], date(2024, 5, 13), date(2024, 5, 19)))
    assert empty.startswith(b"%PDF")

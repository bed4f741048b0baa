"""Dashboard, payment report and analytics queries."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from tailor_shop.models import Customer, Order, Payment
from tailor_shop.services.branch_access import BranchScope
from tailor_shop.services.order_status import CLOSED_STATUSES, ORDER_STATUSES, is_active_status
from tailor_shop.services.payment_report import PaymentReport, aggregate, current_week, last_week
from tailor_shop.services.urgency import EnrichedOrder, Urgency, enrich_order, to_decimal
from tailor_shop.utils.time import day_window, local_now, month_window, to_utc

ZERO = Decimal("0.00")


def list_payments(
    db: Session,
    scope: BranchScope,
    *,
    order_id: int | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Payment]:
    """Payments visible in ``scope``, newest first, with their order and customer loaded."""
    statement = scope.apply(select(Payment).join(Payment.order), Order.branch_id)
    if order_id is not None:
        statement = statement.where(Payment.order_id == order_id)
    if start is not None:
        statement = statement.where(Payment.payment_date >= to_utc(start))
    if end is not None:
        statement = statement.where(Payment.payment_date <= to_utc(end))
    statement = statement.options(selectinload(Payment.order).selectinload(Order.customer)).order_by(
        Payment.payment_date.desc(), Payment.id.desc()
    )
    return list(db.scalars(statement).all())


def payment_report(db: Session, scope: BranchScope, start_date: date, end_date: date) -> PaymentReport:
    """Aggregate payments for every local day between the two dates, inclusive."""
    if end_date < start_date:
        raise ValueError("End date must not be before start date")
    start, end = day_window(start_date, end_date)
    payments = list_payments(db, scope, start=start, end=end)
    payments.reverse()
    return aggregate(payments, start_date, end_date)


def _active_orders(db: Session, scope: BranchScope) -> list[Order]:
    statement = scope.apply(
        select(Order)
        .where(Order.status.not_in(CLOSED_STATUSES))
        .options(selectinload(Order.customer), selectinload(Order.payments)),
        Order.branch_id,
    )
    return list(db.scalars(statement.order_by(Order.due_date.asc(), Order.id.asc())).all())


@dataclass
class Dashboard:
    active_orders_count: int
    total_outstanding: Decimal
    total_received_this_week: Decimal
    upcoming: dict[Urgency, list[EnrichedOrder]] = field(default_factory=dict)


def dashboard(db: Session, scope: BranchScope, now: datetime | None = None) -> Dashboard:
    """Headline numbers plus active orders bucketed by urgency tier."""
    now = now or local_now()
    views = [enrich_order(order, now) for order in _active_orders(db, scope)]

    week_start, week_end = current_week(now)
    received = db.scalar(
        scope.apply(
            select(func.coalesce(func.sum(Payment.amount), 0))
            .join(Payment.order)
            .where(Payment.payment_date >= to_utc(week_start), Payment.payment_date <= to_utc(week_end)),
            Order.branch_id,
        )
    )

    upcoming: dict[Urgency, list[EnrichedOrder]] = {
        Urgency.OVERDUE: [],
        Urgency.WARNING_1: [],
        Urgency.WARNING_3: [],
        Urgency.WARNING_5: [],
    }
    for view in views:
        if view.urgency in upcoming:
            upcoming[view.urgency].append(view)

    return Dashboard(
        active_orders_count=len(views),
        total_outstanding=sum((view.balance for view in views), ZERO),
        total_received_this_week=to_decimal(received or 0),
        upcoming=upcoming,
    )


@dataclass
class Analytics:
    overview: dict[str, Any]
    monthly_revenue: list[dict[str, Any]]
    top_customers: list[dict[str, Any]]
    payment_method_stats: list[dict[str, Any]]
    order_status_stats: list[dict[str, Any]]


def _shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def analytics(
    db: Session,
    scope: BranchScope,
    now: datetime | None = None,
    months: int = 6,
    top_n: int = 10,
) -> Analytics:
    """Business overview for the scope: revenue trend, best customers, mixes."""
    now = now or local_now()
    orders = list(
        db.scalars(
            scope.apply(
                select(Order).options(selectinload(Order.customer), selectinload(Order.payments)),
                Order.branch_id,
            )
        ).all()
    )
    payments = [payment for order in orders for payment in order.payments]

    total_revenue = sum((to_decimal(payment.amount) for payment in payments), ZERO)
    active_views = [enrich_order(order, now) for order in orders if is_active_status(order.status)]
    customer_count = db.scalar(scope.apply(select(func.count(Customer.id)), Customer.branch_id)) or 0

    monthly: list[dict[str, Any]] = []
    for offset in range(months - 1, -1, -1):
        year, month = _shift_month(now.year, now.month, -offset)
        start, end = month_window(year, month)
        start_utc, end_utc = to_utc(start), to_utc(end)
        in_month = [
            to_decimal(payment.amount)
            for payment in payments
            if start_utc <= to_utc(payment.payment_date) <= end_utc
        ]
        revenue = sum(in_month, ZERO)
        monthly.append(
            {
                "month": start.strftime("%b %Y"),
                "month_key": f"{year:04d}-{month:02d}",
                "revenue": revenue,
                "payment_count": len(in_month),
                "average_payment": (revenue / len(in_month)).quantize(Decimal("0.01")) if in_month else ZERO,
            }
        )

    per_customer: dict[int, dict[str, Any]] = {}
    for order in orders:
        entry = per_customer.setdefault(
            order.customer_id,
            {
                "customer_id": order.customer_id,
                "customer_name": order.customer.full_name,
                "phone_number": order.customer.phone_number,
                "total_orders": 0,
                "total_spent": ZERO,
            },
        )
        entry["total_orders"] += 1
        entry["total_spent"] += sum((to_decimal(payment.amount) for payment in order.payments), ZERO)
    top_customers = sorted(per_customer.values(), key=lambda item: (-item["total_spent"], item["customer_id"]))[:top_n]
    for entry in top_customers:
        entry["average_order_value"] = (entry["total_spent"] / entry["total_orders"]).quantize(Decimal("0.01"))

    method_totals: dict[str, dict[str, Any]] = defaultdict(lambda: {"total": ZERO, "count": 0})
    for payment in payments:
        method_totals[payment.payment_method]["total"] += to_decimal(payment.amount)
        method_totals[payment.payment_method]["count"] += 1

    status_counts: dict[str, int] = defaultdict(int)
    for order in orders:
        status_counts[order.status] += 1

    return Analytics(
        overview={
            "total_revenue": total_revenue,
            "total_orders": len(orders),
            "active_orders": len(active_views),
            "total_outstanding": sum((view.balance for view in active_views), ZERO),
            "total_customers": customer_count,
        },
        monthly_revenue=monthly,
        top_customers=top_customers,
        payment_method_stats=[
            {"method": method, "total": totals["total"], "count": totals["count"]}
            for method, totals in sorted(method_totals.items())
        ],
        order_status_stats=[
            {"status": status, "count": status_counts[status]}
            for status in ORDER_STATUSES
            if status_counts.get(status)
        ],
    )


def week_bounds(week: str, now: datetime | None = None) -> tuple[date, date]:
    """Resolve ``current`` or ``last`` to local Monday and Sunday dates."""
    now = now or local_now()
    if week == "current":
        start, end = current_week(now)
    elif week == "last":
        start, end = last_week(now)
    else:
        raise ValueError("week must be 'current' or 'last'")
    return start.date(), end.date()

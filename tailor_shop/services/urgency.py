"""Derived payment, balance and due-date urgency state for orders.

Everything here is pure: the functions read already-fetched order and payment
objects and never touch the database. Money is summed as ``Decimal``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Protocol

from tailor_shop.utils.time import local_today, to_local_date


class Urgency(str, Enum):
    """Due-date urgency tier; drives color-coding and reminder eligibility."""

    SAFE = "safe"
    WARNING_5 = "warning-5"
    WARNING_3 = "warning-3"
    WARNING_1 = "warning-1"
    OVERDUE = "overdue"


class HasAmount(Protocol):
    amount: Decimal


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def amount_paid(payments: Iterable[HasAmount]) -> Decimal:
    """Return the sum of payment amounts."""
    return sum((to_decimal(payment.amount) for payment in payments), Decimal("0.00"))


def balance(total_amount: Decimal, paid: Decimal) -> Decimal:
    """Return the outstanding balance for an order."""
    return to_decimal(total_amount) - to_decimal(paid)


def days_to_due(due_date: date | datetime, today: date | datetime | None = None) -> int:
    """Return calendar days until due; zero is due today, negative is overdue.

    Both sides are reduced to their local calendar date before subtracting, so
    the time of day never shifts the result.
    """
    due_day = to_local_date(due_date)
    today_day = to_local_date(today) if today is not None else local_today()
    return (due_day - today_day).days


def urgency(days: int) -> Urgency:
    """Map a day difference to its urgency tier."""
    if days <= 0:
        return Urgency.OVERDUE
    if days == 1:
        return Urgency.WARNING_1
    if days <= 3:
        return Urgency.WARNING_3
    if days <= 5:
        return Urgency.WARNING_5
    return Urgency.SAFE


def urgency_label(tier: Urgency, days: int) -> str:
    """Return the badge text shown next to an order."""
    if tier is Urgency.OVERDUE:
        return "Due Today" if days == 0 else f"{abs(days)} days overdue"
    if days == 1:
        return "Due Tomorrow"
    return f"{days} days left"


@dataclass(frozen=True)
class EnrichedOrder:
    """Read-only view of an order plus its derived money and urgency fields."""

    order: Any
    amount_paid: Decimal
    balance: Decimal
    days_to_due: int
    urgency: Urgency
    urgency_label: str

    @property
    def is_fully_paid(self) -> bool:
        return self.balance <= 0


def enrich_order(order: Any, today: date | datetime | None = None) -> EnrichedOrder:
    """Compute the derived view for an order with loaded ``payments``."""
    paid = amount_paid(order.payments)
    days = days_to_due(order.due_date, today)
    tier = urgency(days)
    return EnrichedOrder(
        order=order,
        amount_paid=paid,
        balance=balance(order.total_amount, paid),
        days_to_due=days,
        urgency=tier,
        urgency_label=urgency_label(tier, days),
    )

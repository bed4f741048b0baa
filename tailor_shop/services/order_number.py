"""Sequential human-readable order numbers (``T-<year>-<seq>``)."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tailor_shop.models.order import Order

ORDER_NUMBER_WIDTH = 4
MAX_SEQUENCE = 10**ORDER_NUMBER_WIDTH - 1


class OrderNumberExhaustedError(ValueError):
    """Raised when a year's fixed-width sequence has no numbers left."""


def order_number_prefix(year: int) -> str:
    return f"T-{year}-"


def next_order_number(last_issued: str | None, current_year: int) -> str:
    """Return the order number following ``last_issued`` for ``current_year``.

    A missing number or one from another year restarts the sequence at 0001.
    """
    prefix = order_number_prefix(current_year)
    if not last_issued or not last_issued.startswith(prefix):
        return f"{prefix}{1:0{ORDER_NUMBER_WIDTH}d}"

    suffix = last_issued[len(prefix):]
    if not suffix.isdigit():
        raise ValueError(f"Malformed order number: {last_issued}")

    next_sequence = int(suffix) + 1
    if next_sequence > MAX_SEQUENCE:
        raise OrderNumberExhaustedError(f"Order numbers for {current_year} are exhausted")
    return f"{prefix}{next_sequence:0{ORDER_NUMBER_WIDTH}d}"


def latest_order_number(db: Session, year: int) -> str | None:
    """Return the numerically largest order number issued in ``year``."""
    prefix = order_number_prefix(year)
    return db.scalar(
        select(Order.order_number)
        .where(Order.order_number.like(f"{prefix}%"))
        .order_by(func.length(Order.order_number).desc(), Order.order_number.desc())
        .limit(1)
    )


def generate_order_number(db: Session, year: int) -> str:
    return next_order_number(latest_order_number(db, year), year)

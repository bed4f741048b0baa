"""Payment validation and atomic recording."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tailor_shop.models.order import PAYMENT_METHODS, Order, Payment
from tailor_shop.services.urgency import HasAmount, amount_paid, balance, to_decimal
from tailor_shop.utils.time import to_utc, utc_now

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class InvalidPaymentAmountError(ValueError):
    """Raised when a payment amount is not a positive number."""


class PaymentExceedsBalanceError(ValueError):
    """Raised when a payment is larger than the outstanding balance."""


class ConcurrentPaymentError(ValueError):
    """Raised when a concurrent writer pushed the order past its total."""


def normalize_payment_method(method: str | None) -> str:
    normalized = str(method or "CASH").strip().upper()
    if normalized not in PAYMENT_METHODS:
        raise ValueError(f"Invalid payment method. Must be one of {', '.join(PAYMENT_METHODS)}")
    return normalized


def validate_payment(total_amount: Decimal, payments: Iterable[HasAmount], new_amount: object) -> Decimal:
    """Check a new payment against the order and return the resulting balance.

    Paying exactly the outstanding balance is allowed and yields zero.
    """
    try:
        amount = to_decimal(new_amount)  # type: ignore[arg-type]
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidPaymentAmountError("Payment amount must be a positive number") from exc
    if not amount.is_finite() or amount <= 0:
        raise InvalidPaymentAmountError("Payment amount must be a positive number")
    if amount != amount.quantize(CENT):
        raise InvalidPaymentAmountError("Payment amount must not have more than 2 decimal places")

    current_balance = balance(total_amount, amount_paid(payments))
    if amount > current_balance:
        raise PaymentExceedsBalanceError(
            f"Payment amount exceeds outstanding balance ({current_balance:.2f})"
        )
    return current_balance - amount


def _paid_total(db: Session, order_id: int) -> Decimal:
    value = db.scalar(select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.order_id == order_id))
    return to_decimal(value or 0)


def record_payment(
    db: Session,
    *,
    order_id: int,
    amount: object,
    payment_method: str | None = "CASH",
    payment_date: datetime | None = None,
    note: str | None = None,
    created_by: int | None = None,
) -> tuple[Payment, Decimal]:
    """Validate and insert a payment atomically; return it with the new balance.

    The order row is locked for the duration of the check so two concurrent
    payments cannot both pass against the same balance. After flushing, the
    total is re-read inside the transaction as a second line of defence for
    backends that ignore row locks.
    """
    method = normalize_payment_method(payment_method)
    order = db.scalar(select(Order).where(Order.id == order_id).with_for_update())
    if order is None:
        raise LookupError("Order not found")

    payments = db.scalars(select(Payment).where(Payment.order_id == order.id)).all()
    try:
        new_balance = validate_payment(order.total_amount, payments, amount)
    except ValueError:
        db.rollback()
        raise

    payment = Payment(
        order_id=order.id,
        amount=to_decimal(amount),  # type: ignore[arg-type]
        payment_date=to_utc(payment_date) if payment_date else utc_now(),
        payment_method=method,
        note=note or None,
        created_by=created_by,
    )
    db.add(payment)
    db.flush()

    if _paid_total(db, order.id) > to_decimal(order.total_amount):
        db.rollback()
        logger.warning("[PAYMENT] Concurrent payment conflict on order_id=%s", order_id)
        raise ConcurrentPaymentError("Order balance changed while recording payment; please retry")

    db.commit()
    db.refresh(payment)
    logger.info("[PAYMENT] Recorded %s on order %s; balance now %s", payment.amount, order.order_number, new_balance)
    return payment, new_balance

"""Order creation, lookup and editing."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from tailor_shop.models import Customer, Order, Payment
from tailor_shop.schemas.order import InitialPayment
from tailor_shop.services.branch_access import BranchScope
from tailor_shop.services.order_number import generate_order_number
from tailor_shop.services.order_status import normalize_status
from tailor_shop.services.payment_service import normalize_payment_method, validate_payment
from tailor_shop.services.urgency import amount_paid, to_decimal
from tailor_shop.utils.time import local_today, to_utc, utc_now

logger = logging.getLogger(__name__)


class OrderNumberConflictError(Exception):
    """Raised when another writer took the generated order number first."""


class TotalBelowPaidError(ValueError):
    """Raised when an edit would push the total under what is already paid."""


def _order_select():
    return select(Order).options(
        selectinload(Order.customer),
        selectinload(Order.payments),
        selectinload(Order.branch),
    )


def list_orders(
    db: Session,
    scope: BranchScope,
    *,
    search: str | None = None,
    status: str | None = None,
    customer_id: int | None = None,
) -> list[Order]:
    statement = scope.apply(_order_select(), Order.branch_id)
    if search:
        pattern = f"%{search.strip()}%"
        statement = statement.join(Order.customer).where(
            or_(
                Order.order_number.ilike(pattern),
                Order.description.ilike(pattern),
                Customer.full_name.ilike(pattern),
            )
        )
    if status:
        statement = statement.where(Order.status == normalize_status(status))
    if customer_id is not None:
        statement = statement.where(Order.customer_id == customer_id)
    statement = statement.order_by(Order.due_date.asc(), Order.id.asc())
    return list(db.scalars(statement).all())


def get_order(db: Session, order_id: int) -> Order | None:
    return db.scalar(_order_select().where(Order.id == order_id))


def create_order(
    db: Session,
    *,
    customer: Customer,
    description: str,
    total_amount: Decimal,
    due_date: date,
    actor_id: int,
    order_date: date | None = None,
    status: str = "PENDING",
    images: list[str] | None = None,
    initial_payment: InitialPayment | None = None,
) -> Order:
    """Create an order in the customer's branch, with an optional deposit."""
    canonical_status = normalize_status(status)
    total = to_decimal(total_amount)
    if total < 0:
        raise ValueError("Total amount must not be negative")
    placed_on = order_date or local_today()

    deposit: Payment | None = None
    if initial_payment is not None and to_decimal(initial_payment.amount) != 0:
        validate_payment(total, [], initial_payment.amount)
        deposit = Payment(
            amount=to_decimal(initial_payment.amount),
            payment_method=normalize_payment_method(initial_payment.payment_method),
            payment_date=to_utc(initial_payment.payment_date) if initial_payment.payment_date else utc_now(),
            note=initial_payment.note or "Initial deposit",
            created_by=actor_id,
        )

    order = Order(
        order_number=generate_order_number(db, local_today().year),
        customer_id=customer.id,
        branch_id=customer.branch_id,
        description=description.strip(),
        images=list(images or []),
        total_amount=total,
        status=canonical_status,
        order_date=placed_on,
        due_date=due_date,
        created_by=actor_id,
        updated_by=actor_id,
    )
    if deposit is not None:
        order.payments.append(deposit)
    db.add(order)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("[ORDER] Order number collision on %s", order.order_number)
        raise OrderNumberConflictError("Order number already taken; please retry") from exc
    return get_order(db, order.id)  # type: ignore[return-value]


def update_order(db: Session, order: Order, *, changes: dict, actor_id: int) -> list[str]:
    """Apply edits to an order and return a human-readable change list."""
    summary: list[str] = []

    description = changes.get("description")
    if description and description != order.description:
        summary.append("description updated")
        order.description = description.strip()

    if changes.get("total_amount") is not None:
        new_total = to_decimal(changes["total_amount"])
        if new_total != to_decimal(order.total_amount):
            paid = amount_paid(order.payments)
            if new_total < paid:
                raise TotalBelowPaidError(f"Total amount cannot be less than amount already paid ({paid:.2f})")
            summary.append(f"amount: {to_decimal(order.total_amount):.2f} → {new_total:.2f}")
            order.total_amount = new_total

    due_date = changes.get("due_date")
    if due_date and due_date != order.due_date:
        summary.append(f"due date: {order.due_date.isoformat()} → {due_date.isoformat()}")
        order.due_date = due_date

    if changes.get("status"):
        new_status = normalize_status(changes["status"])
        if new_status != order.status:
            summary.append(f"status: {order.status} → {new_status}")
            order.status = new_status

    if changes.get("images") is not None and list(changes["images"]) != list(order.images or []):
        summary.append("images updated")
        order.images = list(changes["images"])

    if summary:
        order.updated_by = actor_id
        db.commit()
        db.refresh(order)
    return summary

"""Customer service operations."""

from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from tailor_shop.models import Branch, Customer, Order
from tailor_shop.services.branch_access import BranchScope


def list_customers(db: Session, scope: BranchScope, search: str | None = None) -> list[tuple[Customer, int]]:
    """Return (customer, order count) pairs visible in ``scope``, newest first."""
    order_count = (
        select(func.count(Order.id)).where(Order.customer_id == Customer.id).correlate(Customer).scalar_subquery()
    )
    statement = scope.apply(select(Customer, order_count), Customer.branch_id)
    if search:
        pattern = f"%{search.strip()}%"
        statement = statement.where(or_(Customer.full_name.ilike(pattern), Customer.phone_number.like(pattern)))
    statement = statement.options(selectinload(Customer.branch)).order_by(Customer.created_at.desc(), Customer.id.desc())
    return [(customer, count) for customer, count in db.execute(statement).all()]


def get_customer(db: Session, customer_id: int) -> Customer | None:
    return db.scalar(
        select(Customer)
        .where(Customer.id == customer_id)
        .options(
            selectinload(Customer.branch),
            selectinload(Customer.orders).selectinload(Order.payments),
        )
    )


def create_customer(
    db: Session,
    *,
    full_name: str,
    phone_number: str,
    email: str | None,
    branch_id: int,
    actor_id: int,
) -> Customer:
    if db.get(Branch, branch_id) is None:
        raise LookupError("Branch not found")
    customer = Customer(
        full_name=full_name.strip(),
        phone_number=phone_number.strip(),
        email=(email or "").strip() or None,
        branch_id=branch_id,
        created_by=actor_id,
        updated_by=actor_id,
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


def update_customer(db: Session, customer: Customer, *, changes: dict, actor_id: int) -> list[str]:
    """Apply edits and return the list of human-readable changes.

    Moving a customer to another branch is an administrative exception; the
    caller decides whether ``branch_id`` may appear in ``changes``.
    """
    summary: list[str] = []
    full_name = changes.get("full_name")
    if full_name and full_name != customer.full_name:
        summary.append(f"name: {customer.full_name} → {full_name}")
        customer.full_name = full_name.strip()
    phone_number = changes.get("phone_number")
    if phone_number and phone_number != customer.phone_number:
        summary.append(f"phone: {customer.phone_number} → {phone_number}")
        customer.phone_number = phone_number.strip()
    if "email" in changes:
        email = (changes["email"] or "").strip() or None
        if email != customer.email:
            summary.append(f"email: {customer.email or 'none'} → {email or 'none'}")
            customer.email = email
    branch_id = changes.get("branch_id")
    if branch_id is not None and branch_id != customer.branch_id:
        if db.get(Branch, branch_id) is None:
            raise LookupError("Branch not found")
        summary.append(f"branch: {customer.branch_id} → {branch_id}")
        customer.branch_id = branch_id
        # Orders always live in their customer's branch.
        for order in customer.orders:
            order.branch_id = branch_id

    if summary:
        customer.updated_by = actor_id
        db.commit()
        db.refresh(customer)
    return summary

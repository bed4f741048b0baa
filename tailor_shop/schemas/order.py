"""Order and payment API schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from tailor_shop.services.urgency import EnrichedOrder


class PaymentRead(BaseModel):
    """Serialized payment."""

    id: int
    order_id: int
    amount: Decimal
    payment_date: datetime
    payment_method: str
    note: str | None = None
    created_by: int | None = None

    model_config = ConfigDict(from_attributes=True)


class InitialPayment(BaseModel):
    """Deposit taken when the order is placed."""

    amount: Decimal
    payment_method: str = "CASH"
    payment_date: datetime | None = None
    note: str | None = None


class OrderCreate(BaseModel):
    customer_id: int
    description: str = Field(min_length=1)
    total_amount: Decimal = Field(ge=0)
    order_date: date | None = None
    due_date: date
    status: str = "PENDING"
    images: list[str] = Field(default_factory=list)
    initial_payment: InitialPayment | None = None


class OrderUpdate(BaseModel):
    description: str | None = Field(default=None, min_length=1)
    total_amount: Decimal | None = Field(default=None, ge=0)
    due_date: date | None = None
    status: str | None = None
    images: list[str] | None = None


class OrderRead(BaseModel):
    """Order with derived balance and urgency; recomputed on every read."""

    id: int
    order_number: str
    customer_id: int
    customer_name: str
    branch_id: int
    description: str
    images: list[str]
    total_amount: Decimal
    status: str
    order_date: date
    due_date: date
    amount_paid: Decimal
    balance: Decimal
    days_to_due: int
    urgency: str
    urgency_label: str
    payments: list[PaymentRead]
    created_at: datetime

    @classmethod
    def from_enriched(cls, view: EnrichedOrder) -> "OrderRead":
        order = view.order
        return cls(
            id=order.id,
            order_number=order.order_number,
            customer_id=order.customer_id,
            customer_name=order.customer.full_name,
            branch_id=order.branch_id,
            description=order.description,
            images=list(order.images or []),
            total_amount=order.total_amount,
            status=order.status,
            order_date=order.order_date,
            due_date=order.due_date,
            amount_paid=view.amount_paid,
            balance=view.balance,
            days_to_due=view.days_to_due,
            urgency=view.urgency.value,
            urgency_label=view.urgency_label,
            payments=[PaymentRead.model_validate(payment) for payment in order.payments],
            created_at=order.created_at,
        )

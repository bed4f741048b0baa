"""Payment recording schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from tailor_shop.schemas.order import PaymentRead


class PaymentCreate(BaseModel):
    order_id: int
    amount: Decimal
    payment_method: str = "CASH"
    payment_date: datetime | None = None
    note: str | None = None


class PaymentRecorded(PaymentRead):
    order_number: str
    balance: Decimal


class PaymentListItem(PaymentRead):
    order_number: str
    customer_name: str
    branch_id: int

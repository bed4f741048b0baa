"""Customer schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from tailor_shop.schemas.order import OrderRead


class CustomerCreate(BaseModel):
    full_name: str = Field(min_length=1, max_length=255)
    phone_number: str = Field(min_length=1, max_length=32)
    email: str | None = None
    branch_id: int | None = None


class CustomerUpdate(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    phone_number: str | None = Field(default=None, min_length=1, max_length=32)
    email: str | None = None
    branch_id: int | None = None


class CustomerRead(BaseModel):
    id: int
    full_name: str
    phone_number: str
    email: str | None
    branch_id: int
    branch_name: str | None = None
    order_count: int = 0
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CustomerDetail(CustomerRead):
    orders: list[OrderRead] = []

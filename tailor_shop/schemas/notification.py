"""Notification endpoint schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class ReminderResponse(BaseModel):
    order_number: str
    customer_name: str
    urgency: str
    sent: bool
    email_sent: bool = False
    sms_sent: bool = False
    message: str | None = None


class ReminderRunResponse(BaseModel):
    total_orders: int
    notifications_sent: int
    emails_sent: int
    sms_sent: int
    skipped: int
    failed: int
    details: list[dict[str, Any]]

    model_config = ConfigDict(from_attributes=True)

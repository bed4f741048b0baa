"""Customer reminders and payment confirmations over email and SMS.

Delivery is best-effort: every sender returns ``False`` on failure and logs
the reason, and callers never depend on the outcome.
"""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from email.message import EmailMessage
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload
from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

from tailor_shop.core.config import settings
from tailor_shop.models import Order
from tailor_shop.services.order_status import CLOSED_STATUSES
from tailor_shop.services.urgency import EnrichedOrder, Urgency, enrich_order

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomerContact:
    full_name: str
    phone_number: str
    email: str | None = None


@dataclass(frozen=True)
class ReminderPayload:
    customer: CustomerContact
    order_number: str
    description: str
    due_date: date
    balance: Decimal
    days_to_due: int
    urgency: Urgency


@dataclass
class NotificationResult:
    email: bool = False
    sms: bool = False


def format_money(amount: Decimal) -> str:
    return f"{settings.currency} {Decimal(amount):,.2f}"


def reminder_payload_for(enriched: EnrichedOrder) -> ReminderPayload:
    order = enriched.order
    customer = order.customer
    return ReminderPayload(
        customer=CustomerContact(
            full_name=customer.full_name,
            phone_number=customer.phone_number,
            email=customer.email,
        ),
        order_number=order.order_number,
        description=order.description,
        due_date=order.due_date,
        balance=enriched.balance,
        days_to_due=enriched.days_to_due,
        urgency=enriched.urgency,
    )


def build_reminder_sms(payload: ReminderPayload) -> str | None:
    """Return SMS text for an urgent order, or None for safe ones."""
    name = payload.customer.full_name
    shop = settings.business_name
    if payload.urgency is Urgency.OVERDUE:
        return f"Hi {name}, your order {payload.order_number} is OVERDUE. Please collect it from {shop}. Thank you!"
    if payload.urgency is Urgency.WARNING_1:
        return f"Hi {name}, reminder: Order {payload.order_number} is due TOMORROW at {shop}. Thank you!"
    if payload.urgency is Urgency.WARNING_3:
        return f"Hi {name}, your order {payload.order_number} will be ready in {payload.days_to_due} days at {shop}."
    if payload.urgency is Urgency.WARNING_5:
        return f"Hi {name}, reminder: Order {payload.order_number} is due in {payload.days_to_due} days. {shop}."
    return None


def build_reminder_email(payload: ReminderPayload) -> tuple[str, str] | None:
    """Return (subject, body) for an urgent order, or None for safe ones."""
    if payload.urgency is Urgency.SAFE:
        return None
    shop = settings.business_name
    if payload.urgency is Urgency.OVERDUE:
        subject = f"Order {payload.order_number} is Overdue - {shop}"
        lead = f"Your order is now overdue. Please visit {shop} to collect it at your earliest convenience."
    elif payload.urgency is Urgency.WARNING_1:
        subject = f"Order {payload.order_number} Due Tomorrow - {shop}"
        lead = "This is a friendly reminder that your order will be due tomorrow."
    else:
        subject = f"Order {payload.order_number} Due in {payload.days_to_due} Days - {shop}"
        lead = "This is a friendly reminder about your upcoming order."
    body = "\n".join(
        [
            f"Dear {payload.customer.full_name},",
            "",
            lead,
            "",
            f"Order Number: {payload.order_number}",
            f"Description: {payload.description}",
            f"Due Date: {payload.due_date.strftime('%b %d, %Y')}",
            f"Outstanding Balance: {format_money(payload.balance)}",
            "",
            f"Thank you for choosing {shop}!",
        ]
    )
    return subject, body


def build_payment_confirmation_sms(full_name: str, order_number: str, amount: Decimal, new_balance: Decimal) -> str:
    shop = settings.business_name
    if new_balance > 0:
        return (
            f"Hi {full_name}, payment of {format_money(amount)} received for order {order_number}. "
            f"Balance: {format_money(new_balance)}. Thank you! - {shop}"
        )
    return f"Hi {full_name}, payment of {format_money(amount)} received for order {order_number}. Fully paid! Thank you! - {shop}"


def send_email(to_address: str, subject: str, body: str) -> bool:
    if not settings.enable_email_notifications:
        logger.info("[NOTIFY] Email notifications disabled")
        return False
    if not settings.smtp_host:
        logger.info("[NOTIFY] No email service configured")
        return False

    message = EmailMessage()
    message["From"] = settings.from_email or settings.smtp_user
    message["To"] = to_address
    message["Subject"] = subject
    message.set_content(body)
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as smtp:
            smtp.starttls()
            if settings.smtp_user:
                smtp.login(settings.smtp_user, settings.smtp_password)
            smtp.send_message(message)
    except Exception:
        logger.exception("[NOTIFY] Email to %s failed", to_address)
        return False
    logger.info("[NOTIFY] Email sent to %s", to_address)
    return True


def send_sms(phone_number: str, body: str) -> bool:
    if not settings.enable_sms_notifications:
        logger.info("[NOTIFY] SMS notifications disabled")
        return False
    if not settings.twilio_account_sid or not settings.twilio_auth_token:
        logger.warning("[NOTIFY] Twilio credentials not configured")
        return False

    try:
        client = Client(settings.twilio_account_sid, settings.twilio_auth_token)
        message = client.messages.create(body=body, from_=settings.twilio_phone_number, to=phone_number)
    except TwilioRestException as exc:
        logger.error("[NOTIFY] Twilio error for %s: %s", phone_number, exc)
        return False
    except Exception:
        logger.exception("[NOTIFY] SMS to %s failed", phone_number)
        return False
    logger.info("[NOTIFY] SMS sent to %s sid=%s", phone_number, message.sid)
    return True


def send_order_reminder(payload: ReminderPayload) -> NotificationResult:
    """Send email (when the customer has one) and SMS for an urgent order."""
    result = NotificationResult()
    sms_body = build_reminder_sms(payload)
    if sms_body is None:
        return result

    email = build_reminder_email(payload)
    if payload.customer.email and email is not None:
        subject, body = email
        result.email = send_email(payload.customer.email, subject, body)
    result.sms = send_sms(payload.customer.phone_number, sms_body)
    return result


def dispatch_payment_confirmation(
    contact: CustomerContact,
    order_number: str,
    amount: Decimal,
    new_balance: Decimal,
) -> None:
    """Background task: confirm a payment to the customer; never raises."""
    try:
        sent = send_sms(
            contact.phone_number,
            build_payment_confirmation_sms(contact.full_name, order_number, amount, new_balance),
        )
        logger.info("[NOTIFY] Payment confirmation for %s sms=%s", order_number, sent)
    except Exception:
        logger.exception("[NOTIFY] Payment confirmation for %s failed", order_number)


@dataclass
class ReminderRunSummary:
    total_orders: int = 0
    notifications_sent: int = 0
    emails_sent: int = 0
    sms_sent: int = 0
    skipped: int = 0
    failed: int = 0
    details: list[dict[str, Any]] = field(default_factory=list)


def run_due_reminders(db: Session, today: date | None = None) -> ReminderRunSummary:
    """Send reminders for every active order that is not in the safe tier."""
    orders = db.scalars(
        select(Order)
        .where(Order.status.not_in(CLOSED_STATUSES))
        .options(selectinload(Order.customer), selectinload(Order.payments))
        .order_by(Order.due_date.asc(), Order.id.asc())
    ).all()

    summary = ReminderRunSummary(total_orders=len(orders))
    for order in orders:
        enriched = enrich_order(order, today)
        if enriched.urgency is Urgency.SAFE:
            summary.skipped += 1
            continue

        detail: dict[str, Any] = {
            "order_number": order.order_number,
            "customer_name": order.customer.full_name,
            "urgency": enriched.urgency.value,
        }
        try:
            result = send_order_reminder(reminder_payload_for(enriched))
        except Exception:
            logger.exception("[NOTIFY] Reminder for order %s failed", order.order_number)
            summary.failed += 1
            detail["error"] = "Failed to send"
        else:
            summary.notifications_sent += 1
            summary.emails_sent += int(result.email)
            summary.sms_sent += int(result.sms)
            detail["email_sent"] = result.email
            detail["sms_sent"] = result.sms
        summary.details.append(detail)

    logger.info(
        "[NOTIFY] Reminder run finished: total=%s sent=%s skipped=%s failed=%s",
        summary.total_orders,
        summary.notifications_sent,
        summary.skipped,
        summary.failed,
    )
    return summary

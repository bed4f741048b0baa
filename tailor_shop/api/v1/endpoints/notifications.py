"""Customer reminder endpoints."""

import hmac
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from tailor_shop.core.config import settings
from tailor_shop.core.security import get_optional_session_user, get_session_user
from tailor_shop.db.session import get_db
from tailor_shop.schemas.notification import ReminderResponse, ReminderRunResponse
from tailor_shop.services.branch_access import SessionUser
from tailor_shop.services.notification_service import reminder_payload_for, run_due_reminders, send_order_reminder
from tailor_shop.services.order_service import get_order
from tailor_shop.services.security_guards import ensure_branch_access, ensure_can_write
from tailor_shop.services.urgency import Urgency, enrich_order

router: APIRouter = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/orders/{order_id}/remind", response_model=ReminderResponse)
def remind_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> ReminderResponse:
    ensure_can_write(current_user)
    order = ensure_branch_access(current_user, get_order(db, order_id), entity="Order")
    view = enrich_order(order)
    base = {
        "order_number": order.order_number,
        "customer_name": order.customer.full_name,
        "urgency": view.urgency.value,
    }
    if view.urgency is Urgency.SAFE:
        return ReminderResponse(**base, sent=False, message="Order is not urgent; no reminder sent")

    result = send_order_reminder(reminder_payload_for(view))
    return ReminderResponse(
        **base,
        sent=result.email or result.sms,
        email_sent=result.email,
        sms_sent=result.sms,
    )


@router.post("/reminders/run", response_model=ReminderRunResponse)
def run_reminders(
    x_cron_secret: str | None = Header(default=None),
    db: Session = Depends(get_db),
    current_user: SessionUser | None = Depends(get_optional_session_user),
) -> ReminderRunResponse:
    secret_ok = bool(x_cron_secret) and hmac.compare_digest(x_cron_secret.encode("utf-8"), settings.cron_secret.encode("utf-8"))
    if not secret_ok and (current_user is None or not current_user.is_admin):
        logger.warning("[NOTIFY] Rejected reminder run without valid secret or admin token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return ReminderRunResponse.model_validate(run_due_reminders(db))

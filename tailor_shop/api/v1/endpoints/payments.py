"""Payment endpoints."""

from datetime import date

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from tailor_shop.core.security import get_session_user
from tailor_shop.db.session import get_db
from tailor_shop.schemas.order import PaymentRead
from tailor_shop.schemas.payment import PaymentCreate, PaymentListItem, PaymentRecorded
from tailor_shop.services.activity_log_service import ActivityEntry, log_activity
from tailor_shop.services.branch_access import SessionUser
from tailor_shop.services.notification_service import CustomerContact, dispatch_payment_confirmation, format_money
from tailor_shop.services.order_service import get_order
from tailor_shop.services.payment_service import record_payment
from tailor_shop.services.reporting_service import list_payments
from tailor_shop.services.security_guards import branch_scope, ensure_branch_access, ensure_can_write
from tailor_shop.utils.time import end_of_day, start_of_day

router: APIRouter = APIRouter()


@router.get("", response_model=list[PaymentListItem])
def get_payments(
    order_id: int | None = Query(default=None),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> list[PaymentListItem]:
    scope = branch_scope(current_user)
    payments = list_payments(
        db,
        scope,
        order_id=order_id,
        start=start_of_day(start_date) if start_date else None,
        end=end_of_day(end_date) if end_date else None,
    )
    return [
        PaymentListItem(
            **PaymentRead.model_validate(payment).model_dump(),
            order_number=payment.order.order_number,
            customer_name=payment.order.customer.full_name,
            branch_id=payment.order.branch_id,
        )
        for payment in payments
    ]


@router.post("", response_model=PaymentRecorded, status_code=status.HTTP_201_CREATED)
def post_payment(
    payload: PaymentCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> PaymentRecorded:
    ensure_can_write(current_user)
    order = ensure_branch_access(current_user, get_order(db, payload.order_id), entity="Order")
    order_number = order.order_number
    branch_id = order.branch_id
    contact = CustomerContact(
        full_name=order.customer.full_name,
        phone_number=order.customer.phone_number,
        email=order.customer.email,
    )

    try:
        payment, new_balance = record_payment(
            db,
            order_id=order.id,
            amount=payload.amount,
            payment_method=payload.payment_method,
            payment_date=payload.payment_date,
            note=payload.note,
            created_by=current_user.id,
        )
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found") from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    background_tasks.add_task(
        log_activity,
        ActivityEntry.for_user(
            current_user,
            branch_id=branch_id,
            action="CREATE",
            entity="PAYMENT",
            entity_id=payment.id,
            description=f"Recorded payment of {format_money(payment.amount)} for order {order_number}",
            metadata={
                "order_id": payment.order_id,
                "amount": str(payment.amount),
                "payment_method": payment.payment_method,
                "new_balance": str(new_balance),
            },
        ),
    )
    background_tasks.add_task(dispatch_payment_confirmation, contact, order_number, payment.amount, new_balance)
    return PaymentRecorded(
        **PaymentRead.model_validate(payment).model_dump(),
        order_number=order_number,
        balance=new_balance,
    )

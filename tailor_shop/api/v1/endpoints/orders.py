"""Order endpoints."""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from tailor_shop.core.security import get_session_user
from tailor_shop.db.session import get_db
from tailor_shop.schemas.order import OrderCreate, OrderRead, OrderUpdate
from tailor_shop.services.activity_log_service import ActivityEntry, log_activity
from tailor_shop.services.branch_access import SessionUser
from tailor_shop.services.customer_service import get_customer
from tailor_shop.services.order_service import (
    OrderNumberConflictError,
    create_order,
    get_order,
    list_orders,
    update_order,
)
from tailor_shop.services.security_guards import branch_scope, ensure_admin, ensure_branch_access, ensure_can_write
from tailor_shop.services.urgency import Urgency, enrich_order

router: APIRouter = APIRouter()


@router.get("", response_model=list[OrderRead])
def get_orders(
    search: str | None = Query(default=None),
    order_status: str | None = Query(default=None, alias="status"),
    customer_id: int | None = Query(default=None),
    urgency: Urgency | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> list[OrderRead]:
    scope = branch_scope(current_user)
    try:
        orders = list_orders(db, scope, search=search, status=order_status, customer_id=customer_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    views = [enrich_order(order) for order in orders]
    if urgency is not None:
        views = [view for view in views if view.urgency is urgency]
    return [OrderRead.from_enriched(view) for view in views]


@router.post("", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
def post_order(
    payload: OrderCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> OrderRead:
    ensure_can_write(current_user)
    customer = ensure_branch_access(current_user, get_customer(db, payload.customer_id), entity="Customer")
    try:
        order = create_order(
            db,
            customer=customer,
            description=payload.description,
            total_amount=payload.total_amount,
            due_date=payload.due_date,
            actor_id=current_user.id,
            order_date=payload.order_date,
            status=payload.status,
            images=payload.images,
            initial_payment=payload.initial_payment,
        )
    except OrderNumberConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    view = enrich_order(order)
    background_tasks.add_task(
        log_activity,
        ActivityEntry.for_user(
            current_user,
            branch_id=order.branch_id,
            action="CREATE",
            entity="ORDER",
            entity_id=order.id,
            description=f"Created order {order.order_number} for {customer.full_name}",
            metadata={
                "order_number": order.order_number,
                "total_amount": str(order.total_amount),
                "initial_payment": str(view.amount_paid),
            },
        ),
    )
    return OrderRead.from_enriched(view)


@router.get("/{order_id}", response_model=OrderRead)
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> OrderRead:
    order = ensure_branch_access(current_user, get_order(db, order_id), entity="Order")
    return OrderRead.from_enriched(enrich_order(order))


@router.patch("/{order_id}", response_model=OrderRead)
def patch_order(
    order_id: int,
    payload: OrderUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> OrderRead:
    ensure_can_write(current_user)
    order = ensure_branch_access(current_user, get_order(db, order_id), entity="Order")
    try:
        summary = update_order(db, order, changes=payload.model_dump(exclude_unset=True), actor_id=current_user.id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    if summary:
        background_tasks.add_task(
            log_activity,
            ActivityEntry.for_user(
                current_user,
                branch_id=order.branch_id,
                action="UPDATE",
                entity="ORDER",
                entity_id=order.id,
                description=f"Updated order {order.order_number}: {', '.join(summary)}",
                metadata={"changes": summary},
            ),
        )
    return OrderRead.from_enriched(enrich_order(get_order(db, order.id)))


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(
    order_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> None:
    ensure_admin(current_user)
    order = ensure_branch_access(current_user, get_order(db, order_id), entity="Order")
    entry = ActivityEntry.for_user(
        current_user,
        branch_id=order.branch_id,
        action="DELETE",
        entity="ORDER",
        entity_id=order.id,
        description=f"Deleted order {order.order_number}",
        metadata={"order_number": order.order_number, "total_amount": str(order.total_amount)},
    )
    db.delete(order)
    db.commit()
    background_tasks.add_task(log_activity, entry)

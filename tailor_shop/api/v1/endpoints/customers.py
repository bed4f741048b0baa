"""Customer endpoints; every read and write is confined to the caller's branch."""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from tailor_shop.core.security import get_session_user
from tailor_shop.db.session import get_db
from tailor_shop.models import Customer
from tailor_shop.schemas.customer import CustomerCreate, CustomerDetail, CustomerRead, CustomerUpdate
from tailor_shop.schemas.order import OrderRead
from tailor_shop.services.activity_log_service import ActivityEntry, log_activity
from tailor_shop.services.branch_access import SessionUser, has_access_to_branch, resolve_branch_id
from tailor_shop.services.customer_service import create_customer, get_customer, list_customers, update_customer
from tailor_shop.services.security_guards import branch_scope, ensure_admin, ensure_branch_access, ensure_can_write
from tailor_shop.services.urgency import enrich_order

router: APIRouter = APIRouter()


def _read(customer: Customer, order_count: int) -> CustomerRead:
    return CustomerRead(
        id=customer.id,
        full_name=customer.full_name,
        phone_number=customer.phone_number,
        email=customer.email,
        branch_id=customer.branch_id,
        branch_name=customer.branch.name if customer.branch is not None else None,
        order_count=order_count,
        created_at=customer.created_at,
    )


def _detail(customer: Customer, current_user: SessionUser) -> CustomerDetail:
    visible = [order for order in customer.orders if has_access_to_branch(current_user, order.branch_id)]
    orders = sorted(visible, key=lambda order: order.created_at, reverse=True)
    return CustomerDetail(
        **_read(customer, len(orders)).model_dump(),
        orders=[OrderRead.from_enriched(enrich_order(order)) for order in orders],
    )


@router.get("", response_model=list[CustomerRead])
def get_customers(
    search: str | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> list[CustomerRead]:
    scope = branch_scope(current_user)
    return [_read(customer, count) for customer, count in list_customers(db, scope, search)]


@router.post("", response_model=CustomerRead, status_code=status.HTTP_201_CREATED)
def post_customer(
    payload: CustomerCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> CustomerRead:
    ensure_can_write(current_user)
    try:
        branch_id = resolve_branch_id(current_user, payload.branch_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if branch_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Branch is required")

    try:
        customer = create_customer(
            db,
            full_name=payload.full_name,
            phone_number=payload.phone_number,
            email=payload.email,
            branch_id=branch_id,
            actor_id=current_user.id,
        )
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    background_tasks.add_task(
        log_activity,
        ActivityEntry.for_user(
            current_user,
            branch_id=customer.branch_id,
            action="CREATE",
            entity="CUSTOMER",
            entity_id=customer.id,
            description=f"Created customer {customer.full_name}",
            metadata={"phone_number": customer.phone_number},
        ),
    )
    return _read(customer, 0)


@router.get("/{customer_id}", response_model=CustomerDetail)
def get_customer_detail(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> CustomerDetail:
    customer = ensure_branch_access(current_user, get_customer(db, customer_id), entity="Customer")
    return _detail(customer, current_user)


@router.patch("/{customer_id}", response_model=CustomerDetail)
def patch_customer(
    customer_id: int,
    payload: CustomerUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> CustomerDetail:
    ensure_can_write(current_user)
    customer = ensure_branch_access(current_user, get_customer(db, customer_id), entity="Customer")
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("branch_id") is not None and changes["branch_id"] != customer.branch_id:
        ensure_admin(current_user)

    try:
        summary = update_customer(db, customer, changes=changes, actor_id=current_user.id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    if summary:
        background_tasks.add_task(
            log_activity,
            ActivityEntry.for_user(
                current_user,
                branch_id=customer.branch_id,
                action="UPDATE",
                entity="CUSTOMER",
                entity_id=customer.id,
                description=f"Updated customer {customer.full_name}: {', '.join(summary)}",
                metadata={"changes": summary},
            ),
        )
    return _detail(get_customer(db, customer.id), current_user)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> None:
    ensure_admin(current_user)
    customer = ensure_branch_access(current_user, get_customer(db, customer_id), entity="Customer")
    entry = ActivityEntry.for_user(
        current_user,
        branch_id=customer.branch_id,
        action="DELETE",
        entity="CUSTOMER",
        entity_id=customer.id,
        description=f"Deleted customer {customer.full_name} and {len(customer.orders)} orders",
    )
    db.delete(customer)
    db.commit()
    background_tasks.add_task(log_activity, entry)

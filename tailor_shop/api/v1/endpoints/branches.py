"""Branch endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from tailor_shop.core.security import get_session_user
from tailor_shop.db.session import get_db
from tailor_shop.models import Branch
from tailor_shop.schemas.branch import BranchCreate, BranchRead, BranchUpdate
from tailor_shop.services.branch_access import SessionUser
from tailor_shop.services.branch_service import create_branch, list_branches, update_branch
from tailor_shop.services.security_guards import ensure_admin

router: APIRouter = APIRouter()


def _read(branch: Branch, users: int = 0, customers: int = 0, orders: int = 0) -> BranchRead:
    return BranchRead(
        id=branch.id,
        name=branch.name,
        location=branch.location,
        is_active=branch.is_active,
        created_at=branch.created_at,
        user_count=users,
        customer_count=customers,
        order_count=orders,
    )


@router.get("", response_model=list[BranchRead])
def get_branches(
    active_only: bool = Query(default=False),
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> list[BranchRead]:
    return [_read(*row) for row in list_branches(db, active_only=active_only)]


@router.post("", response_model=BranchRead, status_code=status.HTTP_201_CREATED)
def post_branch(
    payload: BranchCreate,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> BranchRead:
    ensure_admin(current_user)
    try:
        branch = create_branch(db, name=payload.name, location=payload.location)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _read(branch)


@router.patch("/{branch_id}", response_model=BranchRead)
def patch_branch(
    branch_id: int,
    payload: BranchUpdate,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> BranchRead:
    ensure_admin(current_user)
    branch = db.get(Branch, branch_id)
    if branch is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Branch not found")
    try:
        update_branch(db, branch, changes=payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return next(_read(*row) for row in list_branches(db) if row[0].id == branch.id)

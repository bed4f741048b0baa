"""Activity log endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from tailor_shop.core.security import get_session_user
from tailor_shop.db.session import get_db
from tailor_shop.models.activity_log import ACTIVITY_ACTIONS, ACTIVITY_ENTITIES
from tailor_shop.schemas.activity_log import ActivityLogRead, BranchActivitySummaryRead, UserActivitySummaryRead
from tailor_shop.services.activity_log_service import (
    ActivityFilters,
    branch_activity_summary,
    list_activity_logs,
    user_activity_summary,
)
from tailor_shop.services.branch_access import SessionUser, has_access_to_branch
from tailor_shop.services.security_guards import branch_scope
from tailor_shop.services.user_service import get_user_by_id
from tailor_shop.utils.time import end_of_day, start_of_day

router: APIRouter = APIRouter()


@router.get("", response_model=list[ActivityLogRead])
def get_activity_logs(
    user_id: int | None = Query(default=None),
    entity: str | None = Query(default=None),
    action: str | None = Query(default=None),
    branch_id: int | None = Query(default=None),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> list[ActivityLogRead]:
    if entity and entity.upper() not in ACTIVITY_ENTITIES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid entity")
    if action and action.upper() not in ACTIVITY_ACTIONS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid action")
    scope = branch_scope(current_user)
    filters = ActivityFilters(
        user_id=user_id,
        entity=entity.upper() if entity else None,
        action=action.upper() if action else None,
        start=start_of_day(start_date) if start_date else None,
        end=end_of_day(end_date) if end_date else None,
        limit=limit,
        branch_id=branch_id if current_user.is_admin else None,
    )
    return [ActivityLogRead.model_validate(row) for row in list_activity_logs(db, scope, filters)]


@router.get("/summary/users/{user_id}", response_model=UserActivitySummaryRead)
def get_user_summary(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> UserActivitySummaryRead:
    target = get_user_by_id(db, user_id)
    if target is None or not has_access_to_branch(current_user, target.branch_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserActivitySummaryRead.model_validate(user_activity_summary(db, user_id))


@router.get("/summary/branches/{branch_id}", response_model=BranchActivitySummaryRead)
def get_branch_summary(
    branch_id: int,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> BranchActivitySummaryRead:
    if not has_access_to_branch(current_user, branch_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Branch not found")
    return BranchActivitySummaryRead.model_validate(branch_activity_summary(db, branch_id))

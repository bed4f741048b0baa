"""User management endpoints (admin only)."""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tailor_shop.core.security import get_password_hash, get_session_user
from tailor_shop.db.session import get_db
from tailor_shop.schemas.user import UserCreate, UserRead, UserUpdate
from tailor_shop.services.activity_log_service import ActivityEntry, log_activity
from tailor_shop.services.branch_access import SessionUser
from tailor_shop.services.security_guards import ensure_admin
from tailor_shop.services.user_service import create_user, get_user_by_id, list_users, update_user

router: APIRouter = APIRouter()


@router.get("", response_model=list[UserRead])
def get_users(
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> list[UserRead]:
    ensure_admin(current_user)
    return [UserRead.model_validate(user) for user in list_users(db)]


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def post_user(
    payload: UserCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> UserRead:
    ensure_admin(current_user)
    try:
        user = create_user(
            db,
            name=payload.name,
            email=payload.email,
            hashed_password=get_password_hash(payload.password),
            role=payload.role,
            branch_id=payload.branch_id,
        )
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    background_tasks.add_task(
        log_activity,
        ActivityEntry.for_user(
            current_user,
            branch_id=user.branch_id,
            action="CREATE",
            entity="USER",
            entity_id=user.id,
            description=f"Created {user.role.lower()} user {user.name}",
            metadata={"email": user.email, "role": user.role},
        ),
    )
    return UserRead.model_validate(user)


@router.patch("/{user_id}", response_model=UserRead)
def patch_user(
    user_id: int,
    payload: UserUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> UserRead:
    ensure_admin(current_user)
    user = get_user_by_id(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    changes = payload.model_dump(exclude_unset=True, exclude={"password"})
    try:
        summary = update_user(
            db,
            user,
            acting_user_id=current_user.id,
            changes=changes,
            hashed_password=get_password_hash(payload.password) if payload.password else None,
        )
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    if summary:
        background_tasks.add_task(
            log_activity,
            ActivityEntry.for_user(
                current_user,
                branch_id=user.branch_id,
                action="UPDATE",
                entity="USER",
                entity_id=user.id,
                description=f"Updated user {user.name}: {', '.join(summary)}",
                metadata={"changes": summary},
            ),
        )
    return UserRead.model_validate(user)

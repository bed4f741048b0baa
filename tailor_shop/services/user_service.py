"""User service operations."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tailor_shop.models import Branch, User
from tailor_shop.models.user import normalize_user_role
from tailor_shop.services.branch_access import validate_role_branch


class DuplicateEmailError(ValueError):
    """Raised when another user already owns an email address."""


class SelfDeactivationError(ValueError):
    """Raised when an admin tries to deactivate their own account."""


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(func.lower(User.email) == email.strip().lower()).limit(1))


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def list_users(db: Session) -> list[User]:
    return list(db.scalars(select(User).order_by(User.name, User.id)).all())


def _ensure_branch_exists(db: Session, branch_id: int | None) -> None:
    if branch_id is not None and db.get(Branch, branch_id) is None:
        raise LookupError("Branch not found")


def create_user(
    db: Session,
    *,
    name: str,
    email: str,
    hashed_password: str,
    role: str,
    branch_id: int | None = None,
) -> User:
    canonical_role = normalize_user_role(role)
    validate_role_branch(canonical_role, branch_id)
    if get_user_by_email(db, email) is not None:
        raise DuplicateEmailError("A user with this email already exists")
    _ensure_branch_exists(db, branch_id)

    user = User(
        name=name.strip(),
        email=email.strip().lower(),
        password_hash=hashed_password,
        role=canonical_role,
        branch_id=branch_id,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_user(
    db: Session,
    user: User,
    *,
    acting_user_id: int,
    changes: dict,
    hashed_password: str | None = None,
) -> list[str]:
    """Apply admin edits to a user and return a human-readable change list.

    The role/branch rule is checked against the resulting state before
    anything is written.
    """
    new_role = normalize_user_role(changes["role"]) if changes.get("role") else user.role
    new_branch_id = changes["branch_id"] if "branch_id" in changes else user.branch_id
    validate_role_branch(new_role, new_branch_id)

    if user.id == acting_user_id and changes.get("is_active") is False:
        raise SelfDeactivationError("You cannot deactivate your own account")

    new_email = changes.get("email")
    if new_email and new_email.strip().lower() != user.email:
        if get_user_by_email(db, new_email) is not None:
            raise DuplicateEmailError("A user with this email already exists")
    if new_branch_id != user.branch_id:
        _ensure_branch_exists(db, new_branch_id)

    summary: list[str] = []
    if changes.get("name") and changes["name"] != user.name:
        summary.append(f"name: {user.name} → {changes['name']}")
        user.name = changes["name"].strip()
    if new_email and new_email.strip().lower() != user.email:
        summary.append(f"email: {user.email} → {new_email}")
        user.email = new_email.strip().lower()
    if new_role != user.role:
        summary.append(f"role: {user.role} → {new_role}")
        user.role = new_role
    if new_branch_id != user.branch_id:
        summary.append(f"branch: {user.branch_id or 'all'} → {new_branch_id or 'all'}")
        user.branch_id = new_branch_id
    if "is_active" in changes and changes["is_active"] is not None and changes["is_active"] != user.is_active:
        summary.append("activated" if changes["is_active"] else "deactivated")
        user.is_active = changes["is_active"]
    if hashed_password:
        summary.append("password changed")
        user.password_hash = hashed_password

    db.commit()
    db.refresh(user)
    return summary

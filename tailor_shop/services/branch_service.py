"""Branch service operations."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tailor_shop.models import Branch, Customer, Order, User


class DuplicateBranchNameError(ValueError):
    """Raised when a branch name is already taken."""


def _count(model, column):
    return select(func.count(model.id)).where(column == Branch.id).correlate(Branch).scalar_subquery()


def list_branches(db: Session, active_only: bool = False) -> list[tuple[Branch, int, int, int]]:
    """Return (branch, user count, customer count, order count) rows by name."""
    statement = select(
        Branch,
        _count(User, User.branch_id),
        _count(Customer, Customer.branch_id),
        _count(Order, Order.branch_id),
    )
    if active_only:
        statement = statement.where(Branch.is_active.is_(True))
    return [tuple(row) for row in db.execute(statement.order_by(Branch.name)).all()]  # type: ignore[misc]


def _ensure_unique_name(db: Session, name: str, exclude_id: int | None = None) -> None:
    statement = select(Branch.id).where(func.lower(Branch.name) == name.strip().lower())
    if exclude_id is not None:
        statement = statement.where(Branch.id != exclude_id)
    if db.scalar(statement) is not None:
        raise DuplicateBranchNameError("A branch with this name already exists")


def create_branch(db: Session, *, name: str, location: str = "") -> Branch:
    _ensure_unique_name(db, name)
    branch = Branch(name=name.strip(), location=(location or "").strip(), is_active=True)
    db.add(branch)
    db.commit()
    db.refresh(branch)
    return branch


def update_branch(db: Session, branch: Branch, *, changes: dict) -> list[str]:
    summary: list[str] = []
    name = changes.get("name")
    if name and name.strip() != branch.name:
        _ensure_unique_name(db, name, exclude_id=branch.id)
        summary.append(f"name: {branch.name} → {name.strip()}")
        branch.name = name.strip()
    if changes.get("location") is not None and changes["location"].strip() != branch.location:
        summary.append(f"location: {branch.location or 'none'} → {changes['location'].strip()}")
        branch.location = changes["location"].strip()
    if changes.get("is_active") is not None and changes["is_active"] != branch.is_active:
        summary.append("activated" if changes["is_active"] else "deactivated")
        branch.is_active = changes["is_active"]
    if summary:
        db.commit()
        db.refresh(branch)
    return summary

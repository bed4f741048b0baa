"""Centralized role and branch access guards for API operations."""

from __future__ import annotations

from typing import TypeVar

from fastapi import HTTPException, status

from tailor_shop.services.branch_access import (
    BranchNotAssignedError,
    BranchScope,
    SessionUser,
    build_branch_filter,
    has_access_to_branch,
)

WRITE_ROLES: set[str] = {"ADMIN", "STAFF"}

T = TypeVar("T")


def ensure_role(user: SessionUser, allowed_roles: set[str]) -> None:
    """Ensure user role is one of allowed roles."""
    if user.role not in allowed_roles:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")


def ensure_can_write(user: SessionUser) -> None:
    ensure_role(user, WRITE_ROLES)


def ensure_admin(user: SessionUser) -> None:
    ensure_role(user, {"ADMIN"})


def ensure_branch_access(user: SessionUser, resource: T | None, *, entity: str) -> T:
    """Return the resource or 404 when missing or owned by another branch.

    Cross-branch resources are reported exactly like missing ones so that
    existence never leaks between branches.
    """
    if resource is None or not has_access_to_branch(user, getattr(resource, "branch_id", None)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity} not found")
    return resource


def branch_scope(user: SessionUser) -> BranchScope:
    """Build the branch filter or fail with 400 for unassigned accounts."""
    try:
        return build_branch_filter(user)
    except BranchNotAssignedError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

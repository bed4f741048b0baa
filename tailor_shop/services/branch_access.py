"""Branch-scoped authorization decisions.

Admins work across every branch; STAFF and VIEWER accounts are pinned to the
branch they are assigned to. These functions only decide; turning a decision
into an HTTP response happens in ``security_guards``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from sqlalchemy import Select

ADMIN_ROLE = "ADMIN"
BRANCH_BOUND_ROLES: frozenset[str] = frozenset({"STAFF", "VIEWER"})


class NoBranchAvailableError(ValueError):
    """Raised when an operation needs a concrete branch and none resolves."""


class BranchNotAssignedError(ValueError):
    """Raised when a non-admin account carries no branch."""


class RoleBranchMismatchError(ValueError):
    """Raised when a role and branch assignment contradict each other."""


@dataclass(frozen=True)
class SessionUser:
    """Authenticated user descriptor used for every access decision."""

    id: int
    name: str
    email: str
    role: str
    branch_id: int | None = None
    branch_name: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


@dataclass(frozen=True)
class Unrestricted:
    """Branch scope that sees all branches."""

    def apply(self, statement: Select, column: Any) -> Select:
        return statement

    def allows(self, branch_id: int | None) -> bool:
        return True


@dataclass(frozen=True)
class Scoped:
    """Branch scope limited to a single branch."""

    branch_id: int

    def apply(self, statement: Select, column: Any) -> Select:
        return statement.where(column == self.branch_id)

    def allows(self, branch_id: int | None) -> bool:
        return branch_id == self.branch_id


BranchScope = Union[Unrestricted, Scoped]


def resolve_branch_id(user: SessionUser, requested_branch_id: int | None = None) -> int | None:
    """Return the branch an operation should act on.

    Admins may pick a branch; for everyone else the request is ignored and
    their own branch is used.
    """
    if user.is_admin:
        return requested_branch_id if requested_branch_id is not None else user.branch_id
    if user.branch_id is None:
        raise NoBranchAvailableError("User not assigned to a branch")
    return user.branch_id


def has_access_to_branch(user: SessionUser, target_branch_id: int | None) -> bool:
    if user.is_admin:
        return True
    return user.branch_id is not None and user.branch_id == target_branch_id


def build_branch_filter(user: SessionUser) -> BranchScope:
    """Return the query scope for the user's list and read operations."""
    if user.is_admin:
        return Unrestricted()
    if user.branch_id is None:
        raise BranchNotAssignedError("User not assigned to a branch")
    return Scoped(user.branch_id)


def validate_role_branch(role: str, branch_id: int | None) -> None:
    if role in BRANCH_BOUND_ROLES and branch_id is None:
        raise RoleBranchMismatchError("Staff and Viewer users must be assigned to a branch")
    if role == ADMIN_ROLE and branch_id is not None:
        raise RoleBranchMismatchError("Admin users cannot be assigned to a specific branch")

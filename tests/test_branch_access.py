import pytest
from fastapi import HTTPException
from types import SimpleNamespace

from tailor_shop.services.branch_access import (
    BranchNotAssignedError,
    NoBranchAvailableError,
    RoleBranchMismatchError,
    Scoped,
    SessionUser,
    Unrestricted,
    build_branch_filter,
    has_access_to_branch,
    resolve_branch_id,
    validate_role_branch,
)
from tailor_shop.services.security_guards import branch_scope, ensure_branch_access, ensure_can_write

ADMIN = SessionUser(id=1, name="Admin", email="admin@example.com", role="ADMIN")
STAFF_B1 = SessionUser(id=2, name="Kofi", email="kofi@example.com", role="STAFF", branch_id=1, branch_name="Accra")
VIEWER_B1 = SessionUser(id=3, name="Esi", email="esi@example.com", role="VIEWER", branch_id=1)
STAFF_NO_BRANCH = SessionUser(id=4, name="Yaw", email="yaw@example.com", role="STAFF")


def test_staff_cannot_redirect_to_another_branch() -> None:
    assert resolve_branch_id(STAFF_B1, 2) == 1
    assert resolve_branch_id(STAFF_B1) == 1


def test_admin_picks_branch_or_none() -> None:
    assert resolve_branch_id(ADMIN, 2) == 2
    assert resolve_branch_id(ADMIN) is None


def test_unassigned_staff_has_no_branch() -> None:
    with pytest.raises(NoBranchAvailableError):
        resolve_branch_id(STAFF_NO_BRANCH, 3)
    with pytest.raises(BranchNotAssignedError):
        build_branch_filter(STAFF_NO_BRANCH)


def test_has_access_to_branch() -> None:
    assert has_access_to_branch(ADMIN, 7) is True
    assert has_access_to_branch(ADMIN, None) is True
    assert has_access_to_branch(STAFF_B1, 1) is True
    assert has_access_to_branch(STAFF_B1, 2) is False
    assert has_access_to_branch(STAFF_NO_BRANCH, None) is False


def test_build_branch_filter() -> None:
    assert isinstance(build_branch_filter(ADMIN), Unrestricted)
    scope = build_branch_filter(VIEWER_B1)
    assert scope == Scoped(1)
    assert scope.allows(1) and not scope.allows(2)


def test_role_branch_rules() -> None:
    validate_role_branch("ADMIN", None)
    validate_role_branch("STAFF", 1)
    with pytest.raises(RoleBranchMismatchError):
        validate_role_branch("STAFF", None)
    with pytest.raises(RoleBranchMismatchError):
        validate_role_branch("VIEWER", None)
    with pytest.raises(RoleBranchMismatchError):
        validate_role_branch("ADMIN", 1)


def test_cross_branch_resource_is_reported_as_missing() -> None:
    resource = SimpleNamespace(branch_id=2)
    with pytest.raises(HTTPException) as excinfo:
        ensure_branch_access(STAFF_B1, resource, entity="Order")
    assert excinfo.value.status_code == 404
    assert excinfo.value.detail == "Order not found"
    assert ensure_branch_access(ADMIN, resource, entity="Order") is resource


def test_viewer_cannot_write_and_unassigned_user_gets_400() -> None:
    with pytest.raises(HTTPException) as excinfo:
        ensure_can_write(VIEWER_B1)
    assert excinfo.value.status_code == 403

    with pytest.raises(HTTPException) as excinfo:
        branch_scope(STAFF_NO_BRANCH)
    assert excinfo.value.status_code == 400

"""Best-effort activity logging and activity summaries."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tailor_shop.db import session as db_session
from tailor_shop.models import ActivityLog
from tailor_shop.services.branch_access import BranchScope, SessionUser
from tailor_shop.utils.time import to_utc, utc_now

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 100


@dataclass(frozen=True)
class ActivityEntry:
    user_id: int | None
    user_name: str
    branch_id: int | None
    action: str
    entity: str
    description: str
    entity_id: int | None = None
    metadata: dict[str, Any] | None = None

    @classmethod
    def for_user(cls, user: SessionUser, *, branch_id: int | None, **kwargs: Any) -> "ActivityEntry":
        return cls(user_id=user.id, user_name=user.name, branch_id=branch_id, **kwargs)


def log_activity(entry: ActivityEntry, session_factory: Callable[[], Session] | None = None) -> None:
    """Write one audit row in its own session; failures are logged, never raised."""
    factory = session_factory or db_session.SessionLocal
    try:
        with factory() as db:
            db.add(
                ActivityLog(
                    user_id=entry.user_id,
                    user_name=entry.user_name,
                    branch_id=entry.branch_id,
                    action=entry.action,
                    entity=entry.entity,
                    entity_id=entry.entity_id,
                    description=entry.description,
                    details=entry.metadata,
                )
            )
            db.commit()
    except Exception:
        logger.exception("[ACTIVITY] Failed to log %s %s: %s", entry.action, entry.entity, entry.description)


@dataclass
class ActivityFilters:
    user_id: int | None = None
    entity: str | None = None
    action: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    limit: int = DEFAULT_LIST_LIMIT
    branch_id: int | None = None


def list_activity_logs(db: Session, scope: BranchScope, filters: ActivityFilters) -> list[ActivityLog]:
    statement = scope.apply(select(ActivityLog), ActivityLog.branch_id)
    if filters.branch_id is not None:
        statement = statement.where(ActivityLog.branch_id == filters.branch_id)
    if filters.user_id is not None:
        statement = statement.where(ActivityLog.user_id == filters.user_id)
    if filters.entity:
        statement = statement.where(ActivityLog.entity == filters.entity)
    if filters.action:
        statement = statement.where(ActivityLog.action == filters.action)
    if filters.start is not None:
        statement = statement.where(ActivityLog.created_at >= to_utc(filters.start))
    if filters.end is not None:
        statement = statement.where(ActivityLog.created_at <= to_utc(filters.end))
    statement = statement.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).limit(filters.limit)
    return list(db.scalars(statement).all())


@dataclass
class UserActivitySummary:
    total_activities: int
    recent_activities: int
    activity_by_type: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class BranchActivitySummary:
    total_activities: int
    recent_activities: int
    top_users: list[dict[str, Any]] = field(default_factory=list)


def user_activity_summary(db: Session, user_id: int, now: datetime | None = None) -> UserActivitySummary:
    """Counts for one user: all time, last 7 days, and per entity."""
    now = to_utc(now or utc_now())
    total = db.scalar(select(func.count(ActivityLog.id)).where(ActivityLog.user_id == user_id)) or 0
    recent = db.scalar(
        select(func.count(ActivityLog.id)).where(
            ActivityLog.user_id == user_id,
            ActivityLog.created_at >= now - timedelta(days=7),
        )
    ) or 0
    by_type = db.execute(
        select(ActivityLog.entity, func.count(ActivityLog.id))
        .where(ActivityLog.user_id == user_id)
        .group_by(ActivityLog.entity)
        .order_by(ActivityLog.entity)
    ).all()
    return UserActivitySummary(
        total_activities=total,
        recent_activities=recent,
        activity_by_type=[{"entity": entity, "count": count} for entity, count in by_type],
    )


def branch_activity_summary(
    db: Session,
    branch_id: int,
    now: datetime | None = None,
    top_n: int = 5,
) -> BranchActivitySummary:
    """Counts for one branch: all time, last 24 hours, and the most active users."""
    now = to_utc(now or utc_now())
    total = db.scalar(select(func.count(ActivityLog.id)).where(ActivityLog.branch_id == branch_id)) or 0
    recent = db.scalar(
        select(func.count(ActivityLog.id)).where(
            ActivityLog.branch_id == branch_id,
            ActivityLog.created_at >= now - timedelta(hours=24),
        )
    ) or 0
    activity_count = func.count(ActivityLog.id).label("activity_count")
    top_users = db.execute(
        select(ActivityLog.user_id, ActivityLog.user_name, activity_count)
        .where(ActivityLog.branch_id == branch_id)
        .group_by(ActivityLog.user_id, ActivityLog.user_name)
        .order_by(activity_count.desc(), ActivityLog.user_name)
        .limit(top_n)
    ).all()
    return BranchActivitySummary(
        total_activities=total,
        recent_activities=recent,
        top_users=[
            {"user_id": user_id, "user_name": user_name, "activity_count": count}
            for user_id, user_name, count in top_users
        ],
    )

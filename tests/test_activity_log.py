from datetime import datetime, timedelta, timezone

from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from tailor_shop.db.base import Base
from tailor_shop.models import ActivityLog, Branch
from tailor_shop.services.activity_log_service import (
    ActivityEntry,
    ActivityFilters,
    branch_activity_summary,
    list_activity_logs,
    log_activity,
    user_activity_summary,
)
from tailor_shop.services.branch_access import Scoped, SessionUser, Unrestricted


def _session_local() -> sessionmaker:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def _seed_branches(session_local: sessionmaker) -> tuple[int, int]:
    with session_local() as session:
        first = Branch(name="Osu", location="Accra")
        second = Branch(name="Tema", location="Tema")
        session.add_all([first, second])
        session.commit()
        return first.id, second.id


def test_log_activity_writes_row_with_metadata() -> None:
    session_local = _session_local()
    branch_id, _ = _seed_branches(session_local)
    user = SessionUser(id=5, name="Abena", email="abena@example.com", role="STAFF", branch_id=branch_id)

    log_activity(
        ActivityEntry.for_user(
            user,
            branch_id=branch_id,
            action="CREATE",
            entity="ORDER",
            entity_id=9,
            description="Created order T-2024-0001",
            metadata={"total_amount": "120.00"},
        ),
        session_factory=session_local,
    )

    with session_local() as session:
        row = session.scalar(select(ActivityLog))
        assert row is not None
        assert row.user_name == "Abena"
        assert row.branch_id == branch_id
        assert row.details == {"total_amount": "120.00"}


def test_log_activity_failure_is_swallowed(caplog) -> None:
    def broken_factory():
        raise RuntimeError("database unavailable")

    entry = ActivityEntry(
        user_id=1,
        user_name="Admin",
        branch_id=None,
        action="DELETE",
        entity="CUSTOMER",
        description="Deleted customer",
    )

    log_activity(entry, session_factory=broken_factory)

    assert "[ACTIVITY] Failed to log" in caplog.text


def _add(session, *, user_id, user_name, branch_id, entity, created_at):
    session.add(
        ActivityLog(
            user_id=user_id,
            user_name=user_name,
            branch_id=branch_id,
            action="CREATE",
            entity=entity,
            description=f"{entity} by {user_name}",
            created_at=created_at,
        )
    )


def test_summaries_and_scoped_listing() -> None:
    session_local = _session_local()
    first, second = _seed_branches(session_local)
    now = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)

    with session_local() as session:
        _add(session, user_id=1, user_name="Ama", branch_id=first, entity="ORDER", created_at=now - timedelta(hours=2))
        _add(session, user_id=1, user_name="Ama", branch_id=first, entity="PAYMENT", created_at=now - timedelta(days=3))
        _add(session, user_id=1, user_name="Ama", branch_id=first, entity="ORDER", created_at=now - timedelta(days=10))
        _add(session, user_id=2, user_name="Kojo", branch_id=first, entity="CUSTOMER", created_at=now - timedelta(hours=1))
        _add(session, user_id=3, user_name="Efua", branch_id=second, entity="ORDER", created_at=now - timedelta(hours=1))
        session.commit()

        user_summary = user_activity_summary(session, 1, now=now)
        assert user_summary.total_activities == 3
        assert user_summary.recent_activities == 2
        assert {"entity": "ORDER", "count": 2} in user_summary.activity_by_type

        branch_summary = branch_activity_summary(session, first, now=now)
        assert branch_summary.total_activities == 4
        assert branch_summary.recent_activities == 2
        assert branch_summary.top_users[0] == {"user_id": 1, "user_name": "Ama", "activity_count": 3}

        scoped = list_activity_logs(session, Scoped(second), ActivityFilters())
        assert [row.user_name for row in scoped] == ["Efua"]

        orders_only = list_activity_logs(session, Unrestricted(), ActivityFilters(entity="ORDER", limit=2))
        assert len(orders_only) == 2
        assert orders_only[0].created_at >= orders_only[1].created_at

"""Order status vocabulary and helpers."""

from __future__ import annotations

ORDER_STATUSES: list[str] = ["PENDING", "IN_PROGRESS", "READY", "COLLECTED", "CANCELLED"]

# Orders in these statuses are finished and drop out of dashboards and reminders.
CLOSED_STATUSES: frozenset[str] = frozenset({"COLLECTED", "CANCELLED"})


def normalize_status(status: str) -> str:
    """Return canonical status or raise for unknown values."""
    normalized = str(status or "").strip().upper()
    if normalized not in ORDER_STATUSES:
        raise ValueError(f"Invalid status. Must be one of {', '.join(ORDER_STATUSES)}")
    return normalized


def is_active_status(status: str) -> bool:
    return status not in CLOSED_STATUSES

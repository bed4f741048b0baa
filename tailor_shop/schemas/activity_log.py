"""Activity log schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ActivityLogRead(BaseModel):
    id: int
    user_id: int | None
    user_name: str
    branch_id: int | None
    action: str
    entity: str
    entity_id: int | None
    description: str
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="details")
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EntityCount(BaseModel):
    entity: str
    count: int


class UserActivitySummaryRead(BaseModel):
    total_activities: int
    recent_activities: int
    activity_by_type: list[EntityCount]

    model_config = ConfigDict(from_attributes=True)


class TopUser(BaseModel):
    user_id: int | None
    user_name: str
    activity_count: int


class BranchActivitySummaryRead(BaseModel):
    total_activities: int
    recent_activities: int
    top_users: list[TopUser]

    model_config = ConfigDict(from_attributes=True)

"""Branch schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BranchCreate(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    location: str = ""


class BranchUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=128)
    location: str | None = None
    is_active: bool | None = None


class BranchRead(BaseModel):
    id: int
    name: str
    location: str
    is_active: bool
    created_at: datetime
    user_count: int = 0
    customer_count: int = 0
    order_count: int = 0

    model_config = ConfigDict(from_attributes=True)

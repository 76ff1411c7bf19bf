from datetime import datetime
from typing import List, Optional

from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel

from codenotes.data.schemas.base import ApiModel, TimestampedModel, utc_now


class User(TimestampedModel, table=True):
    """Per-owner profile row. Created lazily on first access."""

    __tablename__ = "users"

    owner_id: str = Field(primary_key=True)
    name: Optional[str] = Field(default=None, max_length=100)


class Membership(SQLModel, table=True):
    """Junction row: problem `problem_id` is in the owner's `list_name` set."""

    __tablename__ = "memberships"

    owner_id: str = Field(primary_key=True)
    list_name: str = Field(primary_key=True)
    problem_id: str = Field(primary_key=True)
    added_at: datetime = Field(default_factory=utc_now)


class UserRead(ApiModel):
    owner_id: str
    name: Optional[str] = None
    favorites: List[str] = PydanticField(default_factory=list)
    saved_for_later: List[str] = PydanticField(default_factory=list)
    solved_problems: List[str] = PydanticField(default_factory=list)


class UserUpdate(ApiModel):
    name: Optional[str] = PydanticField(None, max_length=100)


class MembershipRequest(ApiModel):
    problem_id: str = PydanticField(..., min_length=1)


class MessageResponse(ApiModel):
    message: str


class ReconcileReport(ApiModel):
    entries_written: int = 0
    entries_removed: int = 0
    topics_created: int = 0
    topics_pruned: int = 0
    memberships_added: int = 0
    memberships_removed: int = 0

    @property
    def drift_found(self) -> bool:
        return any(value for value in self.model_dump().values())

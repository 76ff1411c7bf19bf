from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field as PydanticField
from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from codenotes.data.schemas.base import ApiModel, TimestampedModel
from codenotes.data.schemas.problem import ProblemRead


class Topic(TimestampedModel, table=True):
    """A named group of problems. `topic_id` is unique per owner."""

    __tablename__ = "topics"

    owner_id: str = Field(primary_key=True)
    topic_id: str = Field(primary_key=True)
    title: str = Field(nullable=False)


class TopicEntry(SQLModel, table=True):
    """
    One slot `problems.<problem_id>` of a topic's embedded map.

    Each slot is its own row so that writes to different problems of the same
    topic never overwrite each other.
    """

    __tablename__ = "topic_entries"

    owner_id: str = Field(primary_key=True)
    topic_id: str = Field(primary_key=True)
    problem_id: str = Field(primary_key=True)
    snapshot: Dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )


class TopicCreate(ApiModel):
    topic_id: Optional[str] = PydanticField(None, min_length=1, max_length=128)
    title: str = PydanticField(..., min_length=1, examples=["Arrays"])


class TopicUpdate(ApiModel):
    title: Optional[str] = PydanticField(None, min_length=1)


class TopicRead(ApiModel):
    topic_id: str
    title: str
    owner_id: str
    problems: Dict[str, ProblemRead] = PydanticField(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

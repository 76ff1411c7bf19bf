from datetime import datetime
from typing import Optional

from pydantic import Field as PydanticField
from sqlalchemy import Column, String, Text
from sqlmodel import Field

from codenotes.data.schemas.base import ApiModel, TimestampedModel
from codenotes.data.schemas.enums import Difficulty, Language


class Problem(TimestampedModel, table=True):
    """
    Canonical record of a code snippet.

    The same record is also copied into its topic's embedded `problems` map
    (see `TopicEntry`); both must be written on every mutation.
    """

    __tablename__ = "problems"

    problem_id: str = Field(
        sa_column=Column(String(64), primary_key=True),
        description="Server-assigned identity, immutable.",
    )
    owner_id: str = Field(index=True, nullable=False)
    topic_id: str = Field(index=True, nullable=False)
    title: str = Field(nullable=False)
    statement: str = Field(sa_column=Column(Text, nullable=False))
    difficulty: str = Field(nullable=False)
    language: str = Field(nullable=False)
    constraints: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    explanation: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    code: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    time_complexity: Optional[str] = Field(default=None, nullable=True)
    space_complexity: Optional[str] = Field(default=None, nullable=True)
    is_favorite: bool = Field(default=False)
    is_saved_for_later: bool = Field(default=False)
    is_solved: bool = Field(default=False)


class ProblemBase(ApiModel):
    title: str = PydanticField(..., min_length=1, examples=["Two Sum"])
    statement: str = PydanticField(..., min_length=1)
    difficulty: Difficulty
    language: Language
    constraints: Optional[str] = None
    explanation: Optional[str] = None
    code: Optional[str] = None
    time_complexity: Optional[str] = None
    space_complexity: Optional[str] = None


class ProblemCreate(ProblemBase):
    topic_id: str = PydanticField(..., min_length=1, examples=["Arrays"])
    topic_title: Optional[str] = None


class ProblemUpdate(ApiModel):
    """
    Partial update. Identity, owner, topic and membership flags are not part
    of the patch; unknown keys are dropped.
    """

    title: Optional[str] = PydanticField(None, min_length=1)
    statement: Optional[str] = PydanticField(None, min_length=1)
    difficulty: Optional[Difficulty] = None
    language: Optional[Language] = None
    constraints: Optional[str] = None
    explanation: Optional[str] = None
    code: Optional[str] = None
    time_complexity: Optional[str] = None
    space_complexity: Optional[str] = None


class ProblemRead(ProblemBase):
    problem_id: str
    topic_id: str
    owner_id: str
    is_favorite: bool = False
    is_saved_for_later: bool = False
    is_solved: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

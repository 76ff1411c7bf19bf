from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    """Timezone-aware current time; timestamp columns reject naive values."""
    return datetime.now(timezone.utc)


class TimestampedModel(SQLModel, table=False):
    """Abstract base model for database entities with common fields."""

    created_at: datetime = Field(
        default_factory=utc_now,
        description="Timestamp when the entity was created.",
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        description="Timestamp when the entity was last updated.",
    )


class ApiModel(BaseModel):
    """Wire schema: snake_case attributes, camelCase JSON keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

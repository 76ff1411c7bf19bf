from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from codenotes.config import logger
from codenotes.data.schemas import Topic, TopicEntry, utc_now
from codenotes.errors import DatabaseException, DuplicateKeyException, ResourceNotFoundException

topic_logger = logger.getChild("topic_repository")


async def find_topic(db: AsyncSession, owner_id: str, topic_id: str) -> Optional[Topic]:
    result = await db.execute(
        select(Topic)
        .where(Topic.owner_id == owner_id, Topic.topic_id == topic_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_topic(db: AsyncSession, owner_id: str, topic_id: str) -> Topic:
    topic = await find_topic(db, owner_id, topic_id)
    if not topic:
        raise ResourceNotFoundException(detail="Topic not found")
    return topic


async def insert_topic(db: AsyncSession, topic: Topic) -> Topic:
    if await find_topic(db, topic.owner_id, topic.topic_id):
        raise DuplicateKeyException(detail=f"Topic {topic.topic_id} already exists")
    db.add(topic)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateKeyException(detail=f"Topic {topic.topic_id} already exists")
    except SQLAlchemyError as e:
        await db.rollback()
        topic_logger.error(f"Failed to insert topic {topic.topic_id}: {str(e)}")
        raise DatabaseException(detail="Failed to create topic")
    await db.refresh(topic)
    topic_logger.info(f"Inserted topic {topic.topic_id} for owner {topic.owner_id}")
    return topic


async def list_topics(db: AsyncSession, owner_id: str) -> List[Topic]:
    try:
        result = await db.execute(
            select(Topic)
            .where(Topic.owner_id == owner_id)
            .order_by(Topic.created_at)
            .execution_options(populate_existing=True)
        )
    except SQLAlchemyError as e:
        topic_logger.error(f"Failed to list topics for owner {owner_id}: {str(e)}")
        raise DatabaseException(detail="Failed to list topics")
    return list(result.scalars().all())


async def update_topic_fields(
    db: AsyncSession, owner_id: str, topic_id: str, values: Dict[str, Any]
) -> Topic:
    topic = await get_topic(db, owner_id, topic_id)
    for key, value in values.items():
        setattr(topic, key, value)
    topic.updated_at = utc_now()
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        topic_logger.error(f"Failed to update topic {topic_id}: {str(e)}")
        raise DatabaseException(detail="Failed to update topic")
    await db.refresh(topic)
    return topic


async def delete_topic(db: AsyncSession, owner_id: str, topic_id: str) -> Topic:
    topic = await get_topic(db, owner_id, topic_id)
    try:
        await db.delete(topic)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        topic_logger.error(f"Failed to delete topic {topic_id}: {str(e)}")
        raise DatabaseException(detail="Failed to delete topic")
    topic_logger.info(f"Deleted topic {topic_id}")
    return topic


# Embedded `problems` map, one row per slot


async def upsert_entry(
    db: AsyncSession, owner_id: str, topic_id: str, problem_id: str, snapshot: Dict[str, Any]
) -> TopicEntry:
    """Positional write of `problems.<problem_id>`; other slots are untouched."""
    try:
        result = await db.execute(
            select(TopicEntry)
            .where(
                TopicEntry.owner_id == owner_id,
                TopicEntry.topic_id == topic_id,
                TopicEntry.problem_id == problem_id,
            )
            .execution_options(populate_existing=True)
        )
        entry = result.scalar_one_or_none()
        if entry:
            entry.snapshot = dict(snapshot)
        else:
            entry = TopicEntry(
                owner_id=owner_id,
                topic_id=topic_id,
                problem_id=problem_id,
                snapshot=dict(snapshot),
            )
            db.add(entry)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        topic_logger.error(f"Failed to write problems.{problem_id} of topic {topic_id}: {str(e)}")
        raise DatabaseException(detail="Failed to update topic problems")
    return entry


async def remove_entry(db: AsyncSession, owner_id: str, topic_id: str, problem_id: str) -> bool:
    try:
        result = await db.execute(
            delete(TopicEntry).where(
                TopicEntry.owner_id == owner_id,
                TopicEntry.topic_id == topic_id,
                TopicEntry.problem_id == problem_id,
            )
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        topic_logger.error(f"Failed to unset problems.{problem_id} of topic {topic_id}: {str(e)}")
        raise DatabaseException(detail="Failed to update topic problems")
    return result.rowcount > 0


async def remove_entries_for_topic(db: AsyncSession, owner_id: str, topic_id: str) -> int:
    try:
        result = await db.execute(
            delete(TopicEntry).where(
                TopicEntry.owner_id == owner_id, TopicEntry.topic_id == topic_id
            )
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        topic_logger.error(f"Failed to clear problems of topic {topic_id}: {str(e)}")
        raise DatabaseException(detail="Failed to update topic problems")
    return result.rowcount


async def count_entries(db: AsyncSession, owner_id: str, topic_id: str) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(TopicEntry)
        .where(TopicEntry.owner_id == owner_id, TopicEntry.topic_id == topic_id)
    )
    return result.scalar_one()


async def list_entries(
    db: AsyncSession, owner_id: str, topic_id: Optional[str] = None
) -> List[TopicEntry]:
    query = select(TopicEntry).where(TopicEntry.owner_id == owner_id)
    if topic_id is not None:
        query = query.where(TopicEntry.topic_id == topic_id)
    try:
        result = await db.execute(query.execution_options(populate_existing=True))
    except SQLAlchemyError as e:
        topic_logger.error(f"Failed to list topic entries for owner {owner_id}: {str(e)}")
        raise DatabaseException(detail="Failed to list topic problems")
    return list(result.scalars().all())

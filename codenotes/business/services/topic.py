import uuid
from collections import defaultdict
from typing import Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from codenotes.config import logger
from codenotes.data import repositories as repo
from codenotes.data.schemas import (
    MessageResponse,
    ProblemRead,
    Topic,
    TopicCreate,
    TopicEntry,
    TopicRead,
    TopicUpdate,
)
from codenotes.errors import DatabaseException, ValidationException, report_inconsistency

topic_logger = logger.getChild("topic")


def new_topic_id(owner_id: str) -> str:
    return f"{owner_id}_{uuid.uuid4().hex[:12]}"


def to_topic_read(topic: Topic, entries: List[TopicEntry]) -> TopicRead:
    problems: Dict[str, ProblemRead] = {
        entry.problem_id: ProblemRead.model_validate(entry.snapshot) for entry in entries
    }
    return TopicRead(
        topic_id=topic.topic_id,
        title=topic.title,
        owner_id=topic.owner_id,
        problems=problems,
        created_at=topic.created_at,
        updated_at=topic.updated_at,
    )


async def list_topics(db: AsyncSession, owner_id: str) -> List[TopicRead]:
    topics = await repo.list_topics(db, owner_id)
    entries_by_topic: Dict[str, List[TopicEntry]] = defaultdict(list)
    for entry in await repo.list_entries(db, owner_id):
        entries_by_topic[entry.topic_id].append(entry)
    topic_logger.info(f"Listed {len(topics)} topics for owner {owner_id}")
    return [to_topic_read(topic, entries_by_topic[topic.topic_id]) for topic in topics]


async def get_topic(db: AsyncSession, owner_id: str, topic_id: str) -> TopicRead:
    topic = await repo.get_topic(db, owner_id, topic_id)
    return to_topic_read(topic, await repo.list_entries(db, owner_id, topic_id))


async def create_topic(db: AsyncSession, owner_id: str, data: TopicCreate) -> TopicRead:
    topic = Topic(
        owner_id=owner_id,
        topic_id=data.topic_id or new_topic_id(owner_id),
        title=data.title,
    )
    topic = await repo.insert_topic(db, topic)
    topic_logger.info(f"Created topic {topic.topic_id} for owner {owner_id}")
    return to_topic_read(topic, [])


async def update_topic(
    db: AsyncSession, owner_id: str, topic_id: str, patch: TopicUpdate
) -> TopicRead:
    # Title is the only mutable field
    if patch.title is None:
        raise ValidationException(detail="title is required")
    topic = await repo.update_topic_fields(db, owner_id, topic_id, {"title": patch.title})
    topic_logger.info(f"Renamed topic {topic_id} to '{patch.title}'")
    return to_topic_read(topic, await repo.list_entries(db, owner_id, topic_id))


async def delete_topic(db: AsyncSession, owner_id: str, topic_id: str) -> MessageResponse:
    """
    Cascade delete. Problems go first and unconditionally, so the topic row
    is never removed while problems still point at it.
    """
    problem_ids = [p.problem_id for p in await repo.list_problems(db, owner_id, topic_id)]
    await repo.delete_problems_for_topic(db, owner_id, topic_id)

    try:
        await repo.remove_entries_for_topic(db, owner_id, topic_id)
        await repo.remove_memberships_for_problems(db, owner_id, problem_ids)
    except DatabaseException as e:
        report_inconsistency("delete_topic", owner_id, f"topics/{topic_id}", e.detail)

    await repo.delete_topic(db, owner_id, topic_id)
    topic_logger.info(f"Deleted topic {topic_id} with {len(problem_ids)} problems")
    return MessageResponse(message="Topic and its problems deleted successfully")

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from codenotes.business import services
from codenotes.business.services import CurrentOwner, get_current_owner
from codenotes.config import logger
from codenotes.data.repositories import get_session
from codenotes.data.schemas import MessageResponse, TopicCreate, TopicRead, TopicUpdate

topic_logger = logger.getChild("topic")
topic_router = APIRouter(prefix="/topics", tags=["topics"])


@topic_router.get(
    "",
    response_model=List[TopicRead],
    summary="List topics",
    description="Lists every topic of the authenticated owner with its embedded problems.",
)
async def list_topics(
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    topic_logger.info(f"Listing topics for owner {owner.id}")
    return await services.list_topics(db, owner.id)


@topic_router.get("/{topic_id}", response_model=TopicRead, summary="Get a topic")
async def get_topic(
    topic_id: str,
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    topic_logger.info(f"Fetching topic ID: {topic_id}")
    return await services.get_topic(db, owner.id, topic_id)


@topic_router.post(
    "",
    response_model=TopicRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a topic",
    description="Creates an empty topic. A topic ID is generated when none is given.",
)
async def create_topic(
    topic_data: TopicCreate,
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    topic_logger.info(f"Creating topic '{topic_data.title}' for owner {owner.id}")
    return await services.create_topic(db, owner.id, topic_data)


@topic_router.put("/{topic_id}", response_model=TopicRead, summary="Update a topic")
async def update_topic(
    topic_id: str,
    topic_update: TopicUpdate,
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    topic_logger.info(f"Updating topic ID: {topic_id}")
    return await services.update_topic(db, owner.id, topic_id, topic_update)


@topic_router.delete(
    "/{topic_id}",
    response_model=MessageResponse,
    summary="Delete a topic",
    description="Deletes every problem of the topic, then the topic itself.",
)
async def delete_topic(
    topic_id: str,
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    topic_logger.info(f"Deleting topic ID: {topic_id}")
    return await services.delete_topic(db, owner.id, topic_id)

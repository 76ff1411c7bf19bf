from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from codenotes.business import services
from codenotes.business.services import CurrentOwner, get_current_owner
from codenotes.config import logger
from codenotes.data.repositories import get_session
from codenotes.data.schemas import MessageResponse, ProblemCreate, ProblemRead, ProblemUpdate

problem_logger = logger.getChild("problem")
problem_router = APIRouter(prefix="/problems", tags=["problems"])


@problem_router.get(
    "",
    response_model=List[ProblemRead],
    summary="List problems",
    description="Lists every problem of the authenticated owner.",
)
async def list_problems(
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    problem_logger.info(f"Listing problems for owner {owner.id}")
    return await services.list_problems(db, owner.id)


@problem_router.get(
    "/{problem_id}",
    response_model=ProblemRead,
    summary="Get a problem",
    description="Retrieves a problem by its ID.",
)
async def get_problem(
    problem_id: str,
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    problem_logger.info(f"Fetching problem ID: {problem_id}")
    return await services.get_problem(db, owner.id, problem_id)


@problem_router.post(
    "",
    response_model=ProblemRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a problem",
    description="Creates a problem and embeds it into its topic, creating the topic if needed.",
)
async def create_problem(
    problem_data: ProblemCreate,
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    problem_logger.info(f"Creating problem in topic {problem_data.topic_id} for owner {owner.id}")
    return await services.create_problem(db, owner.id, problem_data)


@problem_router.put(
    "/{problem_id}",
    response_model=ProblemRead,
    summary="Update a problem",
    description="Updates a problem and its embedded copy. Topic and owner cannot change.",
)
async def update_problem(
    problem_id: str,
    problem_update: ProblemUpdate,
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    problem_logger.info(f"Updating problem ID: {problem_id}")
    return await services.update_problem(db, owner.id, problem_id, problem_update)


@problem_router.delete(
    "/{problem_id}",
    response_model=MessageResponse,
    summary="Delete a problem",
    description="Deletes a problem, removes it from its topic and prunes the topic if it is left empty.",
)
async def delete_problem(
    problem_id: str,
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    problem_logger.info(f"Deleting problem ID: {problem_id}")
    return await services.delete_problem(db, owner.id, problem_id)

from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from codenotes.config import logger
from codenotes.data.schemas import Problem, utc_now
from codenotes.errors import DatabaseException, DuplicateKeyException, ResourceNotFoundException

problem_logger = logger.getChild("problem_repository")


def _owned(owner_id: str, problem_id: str):
    return (Problem.problem_id == problem_id, Problem.owner_id == owner_id)


async def insert_problem(db: AsyncSession, problem: Problem) -> Problem:
    """Writes a new canonical problem. Fails on identity collision."""
    db.add(problem)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        problem_logger.warning(f"Duplicate problem ID: {problem.problem_id}")
        raise DuplicateKeyException(detail=f"Problem {problem.problem_id} already exists")
    except SQLAlchemyError as e:
        await db.rollback()
        problem_logger.error(f"Failed to insert problem {problem.problem_id}: {str(e)}")
        raise DatabaseException(detail="Failed to create problem")
    await db.refresh(problem)
    problem_logger.info(f"Inserted problem {problem.problem_id} into topic {problem.topic_id}")
    return problem


async def find_problem(db: AsyncSession, owner_id: str, problem_id: str) -> Optional[Problem]:
    result = await db.execute(
        select(Problem)
        .where(*_owned(owner_id, problem_id))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_problem(db: AsyncSession, owner_id: str, problem_id: str) -> Problem:
    """Point lookup scoped by owner."""
    problem = await find_problem(db, owner_id, problem_id)
    if not problem:
        raise ResourceNotFoundException(detail="Problem not found")
    return problem


async def list_problems(
    db: AsyncSession, owner_id: str, topic_id: Optional[str] = None
) -> List[Problem]:
    query = select(Problem).where(Problem.owner_id == owner_id)
    if topic_id is not None:
        query = query.where(Problem.topic_id == topic_id)
    try:
        result = await db.execute(
            query.order_by(Problem.created_at).execution_options(populate_existing=True)
        )
    except SQLAlchemyError as e:
        problem_logger.error(f"Failed to list problems for owner {owner_id}: {str(e)}")
        raise DatabaseException(detail="Failed to list problems")
    return list(result.scalars().all())


async def update_problem_fields(
    db: AsyncSession, owner_id: str, problem_id: str, values: Dict[str, Any]
) -> Problem:
    """Update-by-filter on (problem_id, owner_id); returns the fresh record."""
    values = {**values, "updated_at": utc_now()}
    try:
        result = await db.execute(
            update(Problem)
            .where(*_owned(owner_id, problem_id))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            raise ResourceNotFoundException(detail="Problem not found")
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        problem_logger.error(f"Failed to update problem {problem_id}: {str(e)}")
        raise DatabaseException(detail="Failed to update problem")
    return await get_problem(db, owner_id, problem_id)


async def set_problem_flag(
    db: AsyncSession, owner_id: str, problem_id: str, field: str, value: bool
) -> Problem:
    return await update_problem_fields(db, owner_id, problem_id, {field: value})


async def delete_problem(db: AsyncSession, owner_id: str, problem_id: str) -> Problem:
    """Deletes the canonical record and returns it."""
    problem = await get_problem(db, owner_id, problem_id)
    try:
        await db.delete(problem)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        problem_logger.error(f"Failed to delete problem {problem_id}: {str(e)}")
        raise DatabaseException(detail="Failed to delete problem")
    problem_logger.info(f"Deleted problem {problem_id}")
    return problem


async def delete_problems_for_topic(db: AsyncSession, owner_id: str, topic_id: str) -> int:
    try:
        result = await db.execute(
            delete(Problem).where(Problem.owner_id == owner_id, Problem.topic_id == topic_id)
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        problem_logger.error(f"Failed to delete problems of topic {topic_id}: {str(e)}")
        raise DatabaseException(detail="Failed to delete topic problems")
    problem_logger.info(f"Deleted {result.rowcount} problems of topic {topic_id}")
    return result.rowcount

"""
Problem mutations.

Every write hits the canonical `problems` row first and then the embedded
copy in the owning topic. A failed embedded write is reported as an
inconsistency and left for reconcile; the canonical write is not undone.
"""

import uuid
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from codenotes.config import logger
from codenotes.data import repositories as repo
from codenotes.data.schemas import (
    MembershipFlag,
    MessageResponse,
    Problem,
    ProblemCreate,
    ProblemRead,
    ProblemUpdate,
    Topic,
)
from codenotes.errors import DatabaseException, DuplicateKeyException, report_inconsistency

problem_logger = logger.getChild("problem")

# Columns that cannot be cleared through a patch
NON_NULLABLE_FIELDS = {"title", "statement", "difficulty", "language"}


def new_problem_id() -> str:
    return uuid.uuid4().hex


def to_read(problem: Problem) -> ProblemRead:
    return ProblemRead.model_validate(problem)


def snapshot_of(problem: ProblemRead) -> dict:
    return problem.model_dump(mode="json")


async def embed_problem(
    db: AsyncSession, owner_id: str, problem: ProblemRead, topic_title: Optional[str] = None
) -> bool:
    """
    Writes `problem` into `Topic.problems[problem_id]`, creating the topic
    when it does not exist. Returns True if the topic was created.
    """
    created = False
    if await repo.find_topic(db, owner_id, problem.topic_id) is None:
        try:
            await repo.insert_topic(
                db,
                Topic(
                    owner_id=owner_id,
                    topic_id=problem.topic_id,
                    title=topic_title or problem.topic_id,
                ),
            )
            created = True
        except DuplicateKeyException:
            # Created by a concurrent request; fall through to the entry write
            pass
    await repo.upsert_entry(
        db, owner_id, problem.topic_id, problem.problem_id, snapshot_of(problem)
    )
    return created


async def list_problems(db: AsyncSession, owner_id: str) -> List[ProblemRead]:
    problems = await repo.list_problems(db, owner_id)
    problem_logger.info(f"Listed {len(problems)} problems for owner {owner_id}")
    return [to_read(problem) for problem in problems]


async def get_problem(db: AsyncSession, owner_id: str, problem_id: str) -> ProblemRead:
    return to_read(await repo.get_problem(db, owner_id, problem_id))


async def create_problem(db: AsyncSession, owner_id: str, data: ProblemCreate) -> ProblemRead:
    fields = data.model_dump(mode="json", exclude={"topic_id", "topic_title"})
    problem = Problem(
        problem_id=new_problem_id(),
        owner_id=owner_id,
        topic_id=data.topic_id,
        **fields,
    )
    created = to_read(await repo.insert_problem(db, problem))

    try:
        if await embed_problem(db, owner_id, created, topic_title=data.topic_title):
            problem_logger.info(f"Created topic {created.topic_id} for problem {created.problem_id}")
    except DatabaseException as e:
        report_inconsistency(
            "create_problem",
            owner_id,
            f"topics/{created.topic_id}/problems.{created.problem_id}",
            e.detail,
        )
    problem_logger.info(f"Created problem {created.problem_id} in topic {created.topic_id}")
    return created


async def update_problem(
    db: AsyncSession, owner_id: str, problem_id: str, patch: ProblemUpdate
) -> ProblemRead:
    values = {
        key: value
        for key, value in patch.model_dump(mode="json", exclude_unset=True).items()
        if value is not None or key not in NON_NULLABLE_FIELDS
    }
    if values:
        problem = await repo.update_problem_fields(db, owner_id, problem_id, values)
    else:
        problem = await repo.get_problem(db, owner_id, problem_id)
    updated = to_read(problem)

    try:
        await embed_problem(db, owner_id, updated)
    except DatabaseException as e:
        report_inconsistency(
            "update_problem",
            owner_id,
            f"topics/{updated.topic_id}/problems.{problem_id}",
            e.detail,
        )
    problem_logger.info(f"Updated problem {problem_id} ({', '.join(values) or 'no fields'})")
    return updated


async def unembed_problem(db: AsyncSession, owner_id: str, topic_id: str, problem_id: str) -> bool:
    """Unsets `problems.<problem_id>`; deletes the topic once its map is empty."""
    await repo.remove_entry(db, owner_id, topic_id, problem_id)
    if await repo.count_entries(db, owner_id, topic_id) > 0:
        return False
    if await repo.find_topic(db, owner_id, topic_id) is None:
        return False
    await repo.delete_topic(db, owner_id, topic_id)
    problem_logger.info(f"Pruned empty topic {topic_id}")
    return True


async def delete_problem(db: AsyncSession, owner_id: str, problem_id: str) -> MessageResponse:
    deleted = await repo.delete_problem(db, owner_id, problem_id)

    try:
        await unembed_problem(db, owner_id, deleted.topic_id, problem_id)
    except DatabaseException as e:
        report_inconsistency(
            "delete_problem",
            owner_id,
            f"topics/{deleted.topic_id}/problems.{problem_id}",
            e.detail,
        )
    try:
        await repo.remove_memberships_for_problems(db, owner_id, [problem_id])
    except DatabaseException as e:
        report_inconsistency(
            "delete_problem",
            owner_id,
            f"users/{owner_id}/{'|'.join(flag.list_name for flag in MembershipFlag)}",
            e.detail,
        )
    return MessageResponse(message="Problem deleted successfully")

from sqlalchemy.ext.asyncio import AsyncSession

from codenotes.business.services.problem import embed_problem, to_read
from codenotes.config import logger
from codenotes.data import repositories as repo
from codenotes.data.schemas import MembershipFlag, UserRead, UserUpdate
from codenotes.errors import AppException, DatabaseException, report_inconsistency

user_logger = logger.getChild("user")


async def get_user(db: AsyncSession, owner_id: str) -> UserRead:
    user = await repo.get_or_create_user(db, owner_id)
    lists = await repo.list_memberships(db, owner_id)
    return UserRead(
        owner_id=user.owner_id,
        name=user.name,
        **{flag.list_name: lists.get(flag.list_name, []) for flag in MembershipFlag},
    )


async def update_profile(db: AsyncSession, owner_id: str, patch: UserUpdate) -> UserRead:
    values = patch.model_dump(exclude_unset=True)
    if values:
        await repo.update_user_fields(db, owner_id, values)
    user_logger.info(f"Updated profile of {owner_id}")
    return await get_user(db, owner_id)


async def set_membership_flag(
    db: AsyncSession, owner_id: str, problem_id: str, flag: MembershipFlag, value: bool
) -> UserRead:
    """
    Sets one boolean fact in both of its encodings: the user's membership set
    and the problem's flag (plus the topic's embedded copy of the problem).

    Both writes are always attempted. Idempotent: repeating a call in the
    desired state changes nothing and raises nothing.
    """
    list_error = None
    try:
        await repo.get_or_create_user(db, owner_id)
        if value:
            changed = await repo.add_membership(db, owner_id, flag.list_name, problem_id)
        else:
            changed = await repo.remove_membership(db, owner_id, flag.list_name, problem_id)
        if not changed:
            user_logger.debug(f"{problem_id} already {'in' if value else 'out of'} {flag.list_name}")
    except DatabaseException as e:
        list_error = e

    flag_error = None
    try:
        problem = await repo.set_problem_flag(db, owner_id, problem_id, flag.problem_field, value)
    except AppException as e:
        flag_error = e
    else:
        try:
            await embed_problem(db, owner_id, to_read(problem))
        except DatabaseException as e:
            report_inconsistency(
                f"set_{flag.value}",
                owner_id,
                f"topics/{problem.topic_id}/problems.{problem_id}",
                e.detail,
            )

    if list_error and flag_error:
        user_logger.error(f"Both writes failed for {flag.value}={value} on {problem_id}")
        raise DatabaseException(detail=f"Failed to update {flag.list_name}")
    if list_error:
        report_inconsistency(f"set_{flag.value}", owner_id, f"users/{owner_id}/{flag.list_name}", list_error.detail)
    if flag_error:
        report_inconsistency(f"set_{flag.value}", owner_id, f"problems/{problem_id}.{flag.problem_field}", flag_error.detail)

    user_logger.info(f"Set {flag.value}={value} for problem {problem_id} of {owner_id}")
    return await get_user(db, owner_id)

from collections import defaultdict
from typing import Any, Dict, List

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from codenotes.config import logger
from codenotes.data.schemas import Membership, User, utc_now
from codenotes.errors import DatabaseException

user_logger = logger.getChild("user_repository")


async def get_or_create_user(db: AsyncSession, owner_id: str) -> User:
    """Get the owner's profile row, creating it on first access."""
    try:
        user = await db.get(User, owner_id, populate_existing=True)
        if user:
            return user
        user = User(owner_id=owner_id)
        db.add(user)
        await db.commit()
    except IntegrityError:
        # Created concurrently by another request
        await db.rollback()
        return await db.get(User, owner_id)
    except SQLAlchemyError as e:
        await db.rollback()
        user_logger.error(f"Error retrieving user {owner_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve user due to database error")
    await db.refresh(user)
    user_logger.info(f"Created profile for owner {owner_id}")
    return user


async def update_user_fields(db: AsyncSession, owner_id: str, values: Dict[str, Any]) -> User:
    user = await get_or_create_user(db, owner_id)
    for key, value in values.items():
        setattr(user, key, value)
    user.updated_at = utc_now()
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        user_logger.error(f"Error updating user {owner_id}: {str(e)}")
        raise DatabaseException(detail="Failed to update user")
    await db.refresh(user)
    return user


async def add_membership(db: AsyncSession, owner_id: str, list_name: str, problem_id: str) -> bool:
    """Adds `problem_id` to the set. Returns False if it was already present."""
    try:
        existing = await db.get(Membership, (owner_id, list_name, problem_id))
        if existing:
            return False
        db.add(Membership(owner_id=owner_id, list_name=list_name, problem_id=problem_id))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        return False
    except SQLAlchemyError as e:
        await db.rollback()
        user_logger.error(f"Error adding {problem_id} to {list_name} of {owner_id}: {str(e)}")
        raise DatabaseException(detail="Failed to update user lists")
    return True


async def remove_membership(
    db: AsyncSession, owner_id: str, list_name: str, problem_id: str
) -> bool:
    """Removes `problem_id` from the set. Returns False if it was absent."""
    try:
        result = await db.execute(
            delete(Membership).where(
                Membership.owner_id == owner_id,
                Membership.list_name == list_name,
                Membership.problem_id == problem_id,
            )
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        user_logger.error(f"Error removing {problem_id} from {list_name} of {owner_id}: {str(e)}")
        raise DatabaseException(detail="Failed to update user lists")
    return result.rowcount > 0


async def remove_memberships_for_problems(
    db: AsyncSession, owner_id: str, problem_ids: List[str]
) -> int:
    """Drops the given problems from every list of the owner."""
    if not problem_ids:
        return 0
    try:
        result = await db.execute(
            delete(Membership).where(
                Membership.owner_id == owner_id,
                Membership.problem_id.in_(problem_ids),
            )
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        user_logger.error(f"Error clearing lists of {owner_id}: {str(e)}")
        raise DatabaseException(detail="Failed to update user lists")
    return result.rowcount


async def list_memberships(db: AsyncSession, owner_id: str) -> Dict[str, List[str]]:
    """Returns list_name -> problem ids, in insertion order."""
    try:
        result = await db.execute(
            select(Membership)
            .where(Membership.owner_id == owner_id)
            .order_by(Membership.added_at)
        )
    except SQLAlchemyError as e:
        user_logger.error(f"Error retrieving lists of {owner_id}: {str(e)}")
        raise DatabaseException(detail="Failed to retrieve user lists")
    lists: Dict[str, List[str]] = defaultdict(list)
    for membership in result.scalars().all():
        lists[membership.list_name].append(membership.problem_id)
    return lists

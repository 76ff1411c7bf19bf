from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from codenotes.business import services
from codenotes.business.services import CurrentOwner, get_current_owner
from codenotes.config import logger
from codenotes.data.repositories import get_session
from codenotes.data.schemas import MembershipFlag, MembershipRequest, UserRead, UserUpdate

user_logger = logger.getChild("user")
user_router = APIRouter(prefix="/users", tags=["users"])


async def _set_flag(
    db: AsyncSession, owner: CurrentOwner, body: MembershipRequest, flag: MembershipFlag, value: bool
) -> UserRead:
    user_logger.info(
        f"{'Adding' if value else 'Removing'} problem {body.problem_id} "
        f"{'to' if value else 'from'} {flag.list_name} of {owner.id}"
    )
    return await services.set_membership_flag(db, owner.id, body.problem_id, flag, value)


@user_router.get("/profile", response_model=UserRead, summary="Get current user")
async def get_profile(
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    return await services.get_user(db, owner.id)


@user_router.put("/profile", response_model=UserRead, summary="Update current user")
async def update_profile(
    profile: UserUpdate,
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    return await services.update_profile(db, owner.id, profile)


@user_router.post("/favorites", response_model=UserRead, summary="Mark a problem favorite")
async def add_favorite(
    body: MembershipRequest,
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    return await _set_flag(db, owner, body, MembershipFlag.FAVORITE, True)


@user_router.delete("/favorites", response_model=UserRead, summary="Unmark a favorite problem")
async def remove_favorite(
    body: MembershipRequest,
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    return await _set_flag(db, owner, body, MembershipFlag.FAVORITE, False)


@user_router.post("/saved", response_model=UserRead, summary="Save a problem for later")
async def add_saved_for_later(
    body: MembershipRequest,
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    return await _set_flag(db, owner, body, MembershipFlag.SAVED, True)


@user_router.delete("/saved", response_model=UserRead, summary="Remove a problem from saved")
async def remove_saved_for_later(
    body: MembershipRequest,
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    return await _set_flag(db, owner, body, MembershipFlag.SAVED, False)


@user_router.post("/solved", response_model=UserRead, summary="Mark a problem solved")
async def mark_solved(
    body: MembershipRequest,
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    return await _set_flag(db, owner, body, MembershipFlag.SOLVED, True)


@user_router.delete("/solved", response_model=UserRead, summary="Unmark a solved problem")
async def unmark_solved(
    body: MembershipRequest,
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    return await _set_flag(db, owner, body, MembershipFlag.SOLVED, False)

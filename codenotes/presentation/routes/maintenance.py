from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from codenotes.business.services import CurrentOwner, get_current_owner, reconcile_owner
from codenotes.config import logger
from codenotes.data.repositories import get_session
from codenotes.data.schemas import ReconcileReport

maintenance_logger = logger.getChild("maintenance")
maintenance_router = APIRouter(tags=["maintenance"])


@maintenance_router.post(
    "/maintenance/reconcile",
    response_model=ReconcileReport,
    summary="Repair drift",
    description="Rebuilds topic entries and membership lists of the owner from the canonical problems.",
)
async def reconcile(
    db: AsyncSession = Depends(get_session),
    owner: CurrentOwner = Depends(get_current_owner),
):
    maintenance_logger.info(f"Reconcile requested by owner {owner.id}")
    return await reconcile_owner(db, owner.id)


@maintenance_router.get("/health", summary="Health check")
async def health():
    return {"status": "ok"}

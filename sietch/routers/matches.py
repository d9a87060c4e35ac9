from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sietch.database import get_db
from sietch.dependencies import get_current_user
from sietch.models.user import User
from sietch.schemas.group import MatchResponse
from sietch.services.ledger_service import (
    accept_match,
    decline_match,
    list_applications_for_player,
)

router = APIRouter(prefix="/matches", tags=["matches"])


@router.get("/mine", response_model=list[MatchResponse])
async def my_applications(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await list_applications_for_player(db, current_user.id)


@router.post("/{match_id}/accept", response_model=MatchResponse)
async def accept(
    match_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await accept_match(db, match_id=match_id, acting_host_id=current_user.id)


@router.post("/{match_id}/decline", response_model=MatchResponse)
async def decline(
    match_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Host rejects or removes a candidate, or the candidate withdraws."""
    return await decline_match(db, match_id=match_id, acting_id=current_user.id)

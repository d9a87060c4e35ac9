from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from sietch.database import get_db
from sietch.dependencies import get_current_user
from sietch.models.user import User
from sietch.schemas.player import PlayerCreate, PlayerResponse, PlayerUpdate
from sietch.schemas.rating import RatingResponse, RecentComment, ReputationResponse
from sietch.services.errors import NotFound
from sietch.services.player_service import create_player, get_player_by_user_id, update_player
from sietch.services.rating_service import get_player_reputation, list_ratings_for_player

router = APIRouter(prefix="/players", tags=["players"])


async def reputation_response(db: AsyncSession, user_id: int) -> ReputationResponse:
    reputation = await get_player_reputation(db, user_id)
    return ReputationResponse(
        player_id=reputation.player_id,
        average_rating=reputation.average_rating,
        total_ratings=reputation.total_ratings,
        recent_comments=[
            RecentComment(
                stars=rating.stars,
                comment=rating.comment,
                from_nickname=nickname,
                created_at=rating.created_at,
            )
            for rating, nickname in reputation.recent_comments
        ],
    )


@router.post("/me", response_model=PlayerResponse, status_code=status.HTTP_201_CREATED)
async def register_profile(
    body: PlayerCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await create_player(db, current_user.id, body)


@router.put("/me", response_model=PlayerResponse)
async def edit_profile(
    body: PlayerUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await update_player(db, current_user.id, body)


@router.get("/me", response_model=PlayerResponse)
async def my_profile(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    player = await get_player_by_user_id(db, current_user.id)
    if player is None:
        raise NotFound("Player profile not found")
    return player


@router.get("/{user_id}", response_model=PlayerResponse)
async def get_profile(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    player = await get_player_by_user_id(db, user_id)
    if player is None:
        raise NotFound("Player profile not found")
    return player


@router.get("/{user_id}/reputation", response_model=ReputationResponse)
async def get_reputation(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await reputation_response(db, user_id)


@router.get("/{user_id}/ratings", response_model=list[RatingResponse])
async def get_ratings(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await list_ratings_for_player(db, user_id)

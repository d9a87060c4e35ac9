from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from sietch.database import get_db
from sietch.dependencies import get_current_user
from sietch.models.user import User
from sietch.schemas.rating import (
    CounterpartResponse,
    PendingRatingResponse,
    RatingCreate,
    RatingResponse,
)
from sietch.services.errors import NotFound
from sietch.services.group_service import get_group
from sietch.services.player_service import get_players_by_user_ids
from sietch.services.rating_service import (
    create_rating,
    list_pending_ratings,
    rated_by,
    rating_counterparts,
)
from sietch.timeutils import utcnow

router = APIRouter(tags=["ratings"])


async def pending_rating_responses(db: AsyncSession, user_id: int) -> list[PendingRatingResponse]:
    pending = await list_pending_ratings(db, user_id, utcnow())
    profiles = await get_players_by_user_ids(db, {pid for p in pending for pid in p.to_rate})
    return [
        PendingRatingResponse(
            group_id=p.group.id,
            title=p.group.title,
            closed_at=p.group.closed_at,
            seconds_remaining=p.seconds_remaining,
            players_to_rate=[
                CounterpartResponse(
                    player_id=pid,
                    nickname=profiles[pid].nickname if pid in profiles else None,
                    already_rated=False,
                )
                for pid in p.to_rate
            ],
        )
        for p in pending
    ]


@router.post(
    "/groups/{group_id}/ratings",
    response_model=RatingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def rate_player(
    group_id: int,
    body: RatingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await create_rating(
        db,
        from_player_id=current_user.id,
        to_player_id=body.to_player_id,
        group_id=group_id,
        stars=body.stars,
        comment=body.comment,
    )


@router.get("/groups/{group_id}/ratings/counterparts", response_model=list[CounterpartResponse])
async def rating_counterparts_endpoint(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Squadmates the current user can rate in this group."""
    group = await get_group(db, group_id)
    if group is None:
        raise NotFound("Group not found")
    counterparts = await rating_counterparts(db, group, current_user.id)
    already = await rated_by(db, current_user.id, group.id)
    profiles = await get_players_by_user_ids(db, set(counterparts))
    return [
        CounterpartResponse(
            player_id=pid,
            nickname=profiles[pid].nickname if pid in profiles else None,
            already_rated=pid in already,
        )
        for pid in counterparts
    ]


@router.get("/ratings/pending", response_model=list[PendingRatingResponse])
async def pending_ratings(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await pending_rating_responses(db, current_user.id)

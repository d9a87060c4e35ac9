from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sietch.database import get_db
from sietch.dependencies import get_current_user
from sietch.models.user import User
from sietch.routers.groups import group_response
from sietch.routers.players import reputation_response
from sietch.routers.ratings import pending_rating_responses
from sietch.schemas.dashboard import DashboardResponse
from sietch.schemas.group import EngagementResponse
from sietch.schemas.player import PlayerResponse
from sietch.services.group_service import get_group_listing
from sietch.services.ledger_service import get_active_engagement
from sietch.services.player_service import get_player_by_user_id
from sietch.timeutils import utcnow

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Profile, current group, pending ratings and reputation in one poll."""
    now = utcnow()
    player = await get_player_by_user_id(db, current_user.id)

    current_group = None
    engagement = await get_active_engagement(db, current_user.id, now)
    if engagement is not None:
        listing = await get_group_listing(db, engagement.group, now)
        current_group = EngagementResponse(
            group=group_response(listing, now), role=engagement.role
        )

    return DashboardResponse(
        player=PlayerResponse.model_validate(player) if player else None,
        current_group=current_group,
        pending_ratings=await pending_rating_responses(db, current_user.id),
        reputation=await reputation_response(db, current_user.id),
    )

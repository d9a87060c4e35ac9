from typing import Optional

from pydantic import BaseModel

from sietch.schemas.group import EngagementResponse
from sietch.schemas.player import PlayerResponse
from sietch.schemas.rating import PendingRatingResponse, ReputationResponse


class DashboardResponse(BaseModel):
    """Everything the landing screen polls for in one request."""

    player: Optional[PlayerResponse]
    current_group: Optional[EngagementResponse]
    pending_ratings: list[PendingRatingResponse]
    reputation: ReputationResponse

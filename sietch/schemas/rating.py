from datetime import datetime
from typing import Optional

from pydantic import BaseModel

MAX_COMMENT_LENGTH = 200


class RatingCreate(BaseModel):
    to_player_id: int
    stars: int
    comment: Optional[str] = None


class RatingResponse(BaseModel):
    id: int
    from_player_id: int
    to_player_id: int
    group_id: int
    stars: int
    comment: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class CounterpartResponse(BaseModel):
    player_id: int
    nickname: Optional[str]
    already_rated: bool


class PendingRatingResponse(BaseModel):
    group_id: int
    title: str
    closed_at: datetime
    seconds_remaining: int
    players_to_rate: list[CounterpartResponse]


class RecentComment(BaseModel):
    stars: int
    comment: str
    from_nickname: Optional[str]
    created_at: datetime


class ReputationResponse(BaseModel):
    player_id: int
    average_rating: float
    total_ratings: int
    recent_comments: list[RecentComment]

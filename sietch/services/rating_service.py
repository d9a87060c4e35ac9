"""Post-game ratings between the members of a closed group.

Ratings open when the host closes the group and stay open for
``settings.rating_window_minutes``. Participants are the host plus every
member accepted at closing time; each participant may rate each other
participant once per group.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sietch.config import settings
from sietch.models.group_ad import GroupAd, GroupStatus
from sietch.models.match import Match, MatchStatus
from sietch.models.player import Player
from sietch.models.rating import Rating
from sietch.schemas.rating import MAX_COMMENT_LENGTH
from sietch.services.errors import (
    DuplicateRating,
    NotFound,
    NotParticipant,
    RatingWindowClosed,
    ValidationError,
)
from sietch.services.ledger_service import list_accepted_members
from sietch.timeutils import as_utc, remaining, utcnow

logger = logging.getLogger(__name__)

MIN_STARS = 1
MAX_STARS = 5
RECENT_COMMENTS_LIMIT = 5


def rating_window() -> timedelta:
    return timedelta(minutes=settings.rating_window_minutes)


def rating_deadline(group: GroupAd) -> datetime | None:
    if group.status != GroupStatus.closed or group.closed_at is None:
        return None
    return as_utc(group.closed_at) + rating_window()


def can_rate(group: GroupAd, now: datetime) -> bool:
    deadline = rating_deadline(group)
    return deadline is not None and as_utc(now) < deadline


def rating_time_remaining(group: GroupAd, now: datetime) -> timedelta:
    deadline = rating_deadline(group)
    if deadline is None:
        return timedelta(0)
    return remaining(deadline, now)


async def list_participants(db: AsyncSession, group: GroupAd) -> list[int]:
    """Host first, then accepted members in the order they joined."""
    members = await list_accepted_members(db, group.id)
    participants = [group.host_id]
    for match in members:
        if match.player_id not in participants:
            participants.append(match.player_id)
    return participants


async def rating_counterparts(db: AsyncSession, group: GroupAd, player_id: int) -> list[int]:
    """Participants *player_id* may rate, host first."""
    participants = await list_participants(db, group)
    if player_id not in participants:
        raise NotParticipant()
    return [pid for pid in participants if pid != player_id]


async def has_rated(db: AsyncSession, from_player_id: int, to_player_id: int, group_id: int) -> bool:
    result = await db.execute(
        select(Rating.id).where(
            Rating.from_player_id == from_player_id,
            Rating.to_player_id == to_player_id,
            Rating.group_id == group_id,
        )
    )
    return result.scalar_one_or_none() is not None


async def rated_by(db: AsyncSession, from_player_id: int, group_id: int) -> set[int]:
    result = await db.execute(
        select(Rating.to_player_id).where(
            Rating.from_player_id == from_player_id, Rating.group_id == group_id
        )
    )
    return set(result.scalars().all())


async def create_rating(
    db: AsyncSession,
    from_player_id: int,
    to_player_id: int,
    group_id: int,
    stars: int,
    comment: str | None = None,
    now: datetime | None = None,
) -> Rating:
    now = now or utcnow()

    result = await db.execute(select(GroupAd).where(GroupAd.id == group_id))
    group = result.scalar_one_or_none()
    if group is None:
        raise NotFound("Group not found")

    if from_player_id == to_player_id:
        raise ValidationError("You cannot rate yourself")
    if isinstance(stars, bool) or not MIN_STARS <= stars <= MAX_STARS:
        raise ValidationError(f"Stars must be between {MIN_STARS} and {MAX_STARS}")
    comment = comment.strip() if comment else None
    if comment and len(comment) > MAX_COMMENT_LENGTH:
        raise ValidationError(f"Comment must be at most {MAX_COMMENT_LENGTH} characters")

    if not can_rate(group, now):
        if group.status != GroupStatus.closed:
            raise RatingWindowClosed("Ratings open once the host closes the group")
        raise RatingWindowClosed()

    participants = await list_participants(db, group)
    if from_player_id not in participants:
        raise NotParticipant()
    if to_player_id not in participants:
        raise NotParticipant("That player was not a member of this group")

    if await has_rated(db, from_player_id, to_player_id, group.id):
        raise DuplicateRating()

    rating = Rating(
        from_player_id=from_player_id,
        to_player_id=to_player_id,
        group_id=group.id,
        stars=stars,
        comment=comment or None,
        created_at=now,
    )
    db.add(rating)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateRating()
    await db.refresh(rating)
    logger.info("Rating %s recorded in group %s", rating.id, group.id)
    return rating


@dataclass
class PendingRating:
    group: GroupAd
    deadline: datetime
    seconds_remaining: int
    to_rate: list[int] = field(default_factory=list)


async def list_pending_ratings(
    db: AsyncSession, player_id: int, now: datetime | None = None
) -> list[PendingRating]:
    """Closed groups whose window is still open and where *player_id* has
    someone left to rate, most recently closed first."""
    now = now or utcnow()

    hosted = await db.execute(
        select(GroupAd).where(GroupAd.host_id == player_id, GroupAd.status == GroupStatus.closed)
    )
    joined = await db.execute(
        select(GroupAd)
        .join(Match, Match.group_id == GroupAd.id)
        .where(
            Match.player_id == player_id,
            Match.status == MatchStatus.accepted,
            GroupAd.status == GroupStatus.closed,
        )
    )
    groups = {g.id: g for g in [*hosted.scalars().all(), *joined.scalars().all()]}

    pending: list[PendingRating] = []
    for group in groups.values():
        if not can_rate(group, now):
            continue
        already = await rated_by(db, player_id, group.id)
        to_rate = [
            pid for pid in await list_participants(db, group)
            if pid != player_id and pid not in already
        ]
        if not to_rate:
            continue
        pending.append(
            PendingRating(
                group=group,
                deadline=rating_deadline(group),
                seconds_remaining=int(rating_time_remaining(group, now).total_seconds()),
                to_rate=to_rate,
            )
        )
    pending.sort(key=lambda p: p.deadline, reverse=True)
    return pending


async def list_ratings_for_player(db: AsyncSession, player_id: int) -> list[Rating]:
    result = await db.execute(
        select(Rating).where(Rating.to_player_id == player_id).order_by(Rating.created_at.desc())
    )
    return list(result.scalars().all())


@dataclass
class Reputation:
    player_id: int
    average_rating: float
    total_ratings: int
    # (rating, author nickname)
    recent_comments: list[tuple[Rating, str | None]]


async def get_player_reputation(
    db: AsyncSession, player_id: int, recent_limit: int = RECENT_COMMENTS_LIMIT
) -> Reputation:
    totals = await db.execute(
        select(func.avg(Rating.stars), func.count(Rating.id)).where(
            Rating.to_player_id == player_id
        )
    )
    average, total = totals.one()

    recent = await db.execute(
        select(Rating, Player.nickname)
        .outerjoin(Player, Player.user_id == Rating.from_player_id)
        .where(Rating.to_player_id == player_id, Rating.comment.is_not(None))
        .order_by(Rating.created_at.desc())
        .limit(recent_limit)
    )
    return Reputation(
        player_id=player_id,
        average_rating=round(float(average), 2) if average is not None else 0.0,
        total_ratings=total,
        recent_comments=[(rating, nickname) for rating, nickname in recent.all()],
    )

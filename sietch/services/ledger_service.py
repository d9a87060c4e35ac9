"""Application ledger: one Match row per (group, candidate).

invited -> accepted (host, while a slot is free)
invited | accepted -> declined (host rejects/removes, or the candidate leaves)

``declined`` is terminal. Both writes are conditional UPDATEs so a concurrent
accept or decline is decided by the database, not by a value read earlier.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from sietch.models.group_ad import GroupAd, GroupStatus
from sietch.models.match import ACTIVE_MATCH_STATUSES, Match, MatchStatus
from sietch.schemas.group import GroupFilters
from sietch.services.eligibility import explain_ineligibility
from sietch.services.errors import (
    AlreadyApplied,
    AlreadyEngaged,
    GroupFull,
    GroupUnavailable,
    HostSelfApply,
    MatchAlreadyDecided,
    NotEligible,
    NotFound,
    NotHost,
    NotParticipant,
    ValidationError,
)
from sietch.services.lifecycle import GroupState, group_state, is_active, is_expired
from sietch.services.notification_service import (
    notify_application_accepted,
    notify_application_declined,
    notify_member_left,
    notify_new_application,
)
from sietch.services.player_service import get_player_by_user_id
from sietch.timeutils import utcnow

logger = logging.getLogger(__name__)


@dataclass
class Engagement:
    """The one active group a player is tied to, and in which role."""

    group: GroupAd
    role: str  # "host", "invited" or "accepted"
    match: Match | None = None


async def _get_group(db: AsyncSession, group_id: int) -> GroupAd | None:
    result = await db.execute(select(GroupAd).where(GroupAd.id == group_id))
    return result.scalar_one_or_none()


async def get_match(db: AsyncSession, match_id: int) -> Match | None:
    result = await db.execute(select(Match).where(Match.id == match_id))
    return result.scalar_one_or_none()


async def get_match_for_player(db: AsyncSession, group_id: int, player_id: int) -> Match | None:
    result = await db.execute(
        select(Match).where(Match.group_id == group_id, Match.player_id == player_id)
    )
    return result.scalar_one_or_none()


async def count_accepted(db: AsyncSession, group_id: int) -> int:
    result = await db.execute(
        select(func.count(Match.id)).where(
            Match.group_id == group_id, Match.status == MatchStatus.accepted
        )
    )
    return result.scalar_one()


async def count_accepted_by_group(db: AsyncSession, group_ids: list[int]) -> dict[int, int]:
    if not group_ids:
        return {}
    result = await db.execute(
        select(Match.group_id, func.count(Match.id))
        .where(Match.group_id.in_(group_ids), Match.status == MatchStatus.accepted)
        .group_by(Match.group_id)
    )
    return {group_id: count for group_id, count in result.all()}


async def list_open_applications_for_group(db: AsyncSession, group_id: int) -> list[Match]:
    """Applications still waiting for the host, oldest first."""
    result = await db.execute(
        select(Match)
        .where(Match.group_id == group_id, Match.status == MatchStatus.invited)
        .order_by(Match.created_at, Match.id)
    )
    return list(result.scalars().all())


async def list_group_members(db: AsyncSession, group_id: int) -> list[Match]:
    """Invited and accepted records of a group, oldest first."""
    result = await db.execute(
        select(Match)
        .where(Match.group_id == group_id, Match.status.in_(ACTIVE_MATCH_STATUSES))
        .order_by(Match.created_at, Match.id)
    )
    return list(result.scalars().all())


async def list_accepted_members(db: AsyncSession, group_id: int) -> list[Match]:
    result = await db.execute(
        select(Match)
        .where(Match.group_id == group_id, Match.status == MatchStatus.accepted)
        .order_by(Match.accepted_at, Match.id)
    )
    return list(result.scalars().all())


async def list_applications_for_player(db: AsyncSession, player_id: int) -> list[Match]:
    result = await db.execute(
        select(Match).where(Match.player_id == player_id).order_by(Match.created_at.desc())
    )
    return list(result.scalars().all())


async def get_active_engagement(
    db: AsyncSession, player_id: int, now: datetime | None = None
) -> Engagement | None:
    """Return the active group *player_id* hosts or belongs to, if any.

    This is the single check behind "one active group per player": both
    group creation and applications go through it.
    """
    now = now or utcnow()

    hosted = await db.execute(
        select(GroupAd)
        .where(GroupAd.host_id == player_id, GroupAd.status == GroupStatus.open)
        .order_by(GroupAd.created_at.desc())
    )
    for group in hosted.scalars().all():
        if is_active(group, now):
            return Engagement(group=group, role="host")

    joined = await db.execute(
        select(Match, GroupAd)
        .join(GroupAd, GroupAd.id == Match.group_id)
        .where(
            Match.player_id == player_id,
            Match.status.in_(ACTIVE_MATCH_STATUSES),
            GroupAd.status == GroupStatus.open,
        )
        .order_by(Match.created_at.desc())
    )
    for match, group in joined.all():
        if is_active(group, now):
            return Engagement(group=group, role=match.status.value, match=match)

    return None


async def apply_to_group(
    db: AsyncSession, group_id: int, player_id: int, now: datetime | None = None
) -> Match:
    now = now or utcnow()

    group = await _get_group(db, group_id)
    if group is None:
        raise NotFound("Group not found")
    if group.host_id == player_id:
        raise HostSelfApply()

    profile = await get_player_by_user_id(db, player_id)
    if profile is None:
        raise ValidationError("Complete your player profile before applying to groups")

    if await get_active_engagement(db, player_id, now) is not None:
        raise AlreadyEngaged()

    accepted = await count_accepted(db, group.id)
    state = group_state(group, accepted, now)
    if state != GroupState.open:
        raise GroupUnavailable(f"This group is {state.value} and not taking applications")

    failed = explain_ineligibility(GroupFilters.model_validate(group.filters), profile)
    if failed:
        raise NotEligible(
            "Your profile does not meet this group's requirements: " + ", ".join(failed)
        )

    if await get_match_for_player(db, group.id, player_id) is not None:
        raise AlreadyApplied()

    match = Match(group_id=group.id, player_id=player_id, status=MatchStatus.invited, created_at=now)
    db.add(match)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise AlreadyApplied()
    await db.refresh(match)
    logger.info("User %s applied to group %s (match %s)", player_id, group.id, match.id)

    await notify_new_application(db, group, match)
    return match


async def accept_match(
    db: AsyncSession, match_id: int, acting_host_id: int, now: datetime | None = None
) -> Match:
    now = now or utcnow()

    match = await get_match(db, match_id)
    if match is None:
        raise NotFound("Application not found")
    group = await _get_group(db, match.group_id)
    if group.host_id != acting_host_id:
        raise NotHost()
    if group.status != GroupStatus.open or is_expired(group, now):
        raise GroupUnavailable("This group is no longer open")
    if match.status != MatchStatus.invited:
        raise MatchAlreadyDecided(f"This application is already {match.status.value}")

    # Capacity guard evaluated by the database together with the write
    counted = aliased(Match)
    accepted_count = (
        select(func.count(counted.id))
        .where(counted.group_id == group.id, counted.status == MatchStatus.accepted)
        .scalar_subquery()
    )
    result = await db.execute(
        update(Match)
        .where(
            Match.id == match.id,
            Match.status == MatchStatus.invited,
            accepted_count < group.max_members - 1,
        )
        .values(status=MatchStatus.accepted, accepted_at=now, decided_at=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        await db.refresh(match)
        if match.status != MatchStatus.invited:
            raise MatchAlreadyDecided(f"This application is already {match.status.value}")
        raise GroupFull()

    await db.commit()
    await db.refresh(match)
    logger.info("Match %s accepted into group %s", match.id, group.id)

    await notify_application_accepted(db, group, match)
    return match


async def decline_match(
    db: AsyncSession, match_id: int, acting_id: int, now: datetime | None = None
) -> Match:
    """Decline an application or membership.

    The host uses this to reject or remove a candidate; the candidate uses it
    to withdraw or leave. Either way the record ends ``declined``.
    """
    now = now or utcnow()

    match = await get_match(db, match_id)
    if match is None:
        raise NotFound("Application not found")
    group = await _get_group(db, match.group_id)
    by_host = group.host_id == acting_id
    if not by_host and match.player_id != acting_id:
        raise NotParticipant()
    if match.status == MatchStatus.declined:
        raise MatchAlreadyDecided("This application was already declined")
    if group.status != GroupStatus.open:
        raise GroupUnavailable("This group is closed")

    result = await db.execute(
        update(Match)
        .where(Match.id == match.id, Match.status != MatchStatus.declined)
        .values(status=MatchStatus.declined, decided_at=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise MatchAlreadyDecided("This application was already declined")

    await db.commit()
    await db.refresh(match)
    logger.info(
        "Match %s in group %s declined by %s", match.id, group.id, "host" if by_host else "candidate"
    )

    if by_host:
        await notify_application_declined(db, group, match)
    else:
        await notify_member_left(db, group, match)
    return match


async def leave_group(
    db: AsyncSession, group_id: int, player_id: int, now: datetime | None = None
) -> Match:
    match = await get_match_for_player(db, group_id, player_id)
    if match is None or match.status == MatchStatus.declined:
        raise NotFound("You are not part of this group")
    return await decline_match(db, match.id, player_id, now)

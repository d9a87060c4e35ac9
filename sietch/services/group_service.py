import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sietch.models.group_ad import GROUP_CAPACITY, GroupAd, GroupObjective, GroupStatus, RoleType
from sietch.models.player import Player
from sietch.schemas.group import GroupFilters
from sietch.schemas.player import LEVEL_MAX, LEVEL_MIN, SECTORS
from sietch.services.eligibility import eligible_players, is_eligible
from sietch.services.errors import (
    AlreadyEngaged,
    GroupUnavailable,
    HostAlreadyActive,
    NotFound,
    NotHost,
    ValidationError,
)
from sietch.services.ledger_service import (
    count_accepted,
    count_accepted_by_group,
    get_active_engagement,
    list_accepted_members,
)
from sietch.services.lifecycle import (
    GroupState,
    available_slots,
    group_state,
    occupied_slots,
)
from sietch.services.notification_service import notify_group_closed
from sietch.services.player_service import (
    get_player_by_user_id,
    get_players_by_user_ids,
    list_players,
)
from sietch.services.tiers import tier_rank
from sietch.timeutils import utcnow

logger = logging.getLogger(__name__)


@dataclass
class GroupListing:
    """A group together with the ledger facts its derived state depends on."""

    group: GroupAd
    accepted_count: int
    state: GroupState
    host_nickname: str | None = None
    eligible: bool | None = None

    @property
    def occupied(self) -> int:
        return occupied_slots(self.accepted_count)

    @property
    def available(self) -> int:
        return available_slots(self.group, self.accepted_count)


async def get_group(db: AsyncSession, group_id: int) -> GroupAd | None:
    result = await db.execute(select(GroupAd).where(GroupAd.id == group_id))
    return result.scalar_one_or_none()


async def list_groups_for_host(db: AsyncSession, host_id: int) -> list[GroupAd]:
    result = await db.execute(
        select(GroupAd).where(GroupAd.host_id == host_id).order_by(GroupAd.created_at.desc())
    )
    return list(result.scalars().all())


async def get_group_listing(
    db: AsyncSession, group: GroupAd, now: datetime | None = None, viewer_id: int | None = None
) -> GroupListing:
    now = now or utcnow()
    accepted = await count_accepted(db, group.id)
    host = await get_player_by_user_id(db, group.host_id)
    eligible = None
    if viewer_id is not None and viewer_id != group.host_id:
        viewer = await get_player_by_user_id(db, viewer_id)
        eligible = viewer is not None and is_eligible(
            GroupFilters.model_validate(group.filters), viewer
        )
    return GroupListing(
        group=group,
        accepted_count=accepted,
        state=group_state(group, accepted, now),
        host_nickname=host.nickname if host else None,
        eligible=eligible,
    )


def _validate_filters(filters: GroupFilters) -> None:
    if filters.min_level is not None and not LEVEL_MIN <= filters.min_level <= LEVEL_MAX:
        raise ValidationError(f"min_level must be between {LEVEL_MIN} and {LEVEL_MAX}")
    for field in ("min_weapon_tier", "min_armor_tier", "min_vehicle_tier"):
        label = getattr(filters, field)
        if label is not None and tier_rank(label) == 0:
            raise ValidationError(f"{field} must be a tier such as 'T3'")
    if filters.requires_base and not filters.specific_sector:
        raise ValidationError("specific_sector is required when a base is required")
    if filters.specific_sector is not None and filters.specific_sector not in SECTORS:
        raise ValidationError("specific_sector must be between A1 and I9")


async def create_group_ad(
    db: AsyncSession,
    host_id: int,
    title: str,
    objective: GroupObjective | None,
    roles: list[RoleType],
    filters: GroupFilters | None = None,
    now: datetime | None = None,
) -> GroupAd:
    now = now or utcnow()
    filters = filters or GroupFilters()

    if not title or not title.strip():
        raise ValidationError("Group title is required")
    if objective is None:
        raise ValidationError("Group objective is required")
    if len(roles) != GROUP_CAPACITY:
        raise ValidationError(f"A group has exactly {GROUP_CAPACITY} role slots")
    _validate_filters(filters)

    engagement = await get_active_engagement(db, host_id, now)
    if engagement is not None:
        if engagement.role == "host":
            raise HostAlreadyActive()
        raise AlreadyEngaged("Leave your current group before creating a new one")

    group = GroupAd(
        host_id=host_id,
        title=title.strip(),
        objective=objective,
        roles=[RoleType(r).value for r in roles],
        max_members=GROUP_CAPACITY,
        status=GroupStatus.open,
        filters=filters.model_dump(mode="json"),
        created_at=now,
    )
    db.add(group)
    await db.commit()
    await db.refresh(group)
    logger.info("Group %s created by user %s", group.id, host_id)
    return group


async def close_group(
    db: AsyncSession, group_id: int, acting_host_id: int, now: datetime | None = None
) -> GroupAd:
    """Close a group for good and open its rating window."""
    now = now or utcnow()

    group = await get_group(db, group_id)
    if group is None:
        raise NotFound("Group not found")
    if group.host_id != acting_host_id:
        raise NotHost()
    if group.status == GroupStatus.closed:
        raise GroupUnavailable("This group is already closed")

    group.status = GroupStatus.closed
    group.closed_at = now
    await db.commit()
    await db.refresh(group)
    logger.info("Group %s closed by host", group.id)

    members = await list_accepted_members(db, group.id)
    await notify_group_closed(db, group, [m.player_id for m in members])
    return group


async def browse_open_groups(
    db: AsyncSession,
    viewer_id: int,
    now: datetime | None = None,
    objective: GroupObjective | None = None,
    min_available: int | None = None,
    search: str | None = None,
) -> list[GroupListing]:
    """Groups a viewer could apply to right now, newest first.

    Expired and full groups are left out even though their stored status is
    still ``open``. Each listing says whether the viewer's profile passes the
    group's filters.
    """
    now = now or utcnow()

    query = select(GroupAd).where(GroupAd.status == GroupStatus.open, GroupAd.host_id != viewer_id)
    if objective is not None:
        query = query.where(GroupAd.objective == objective)
    result = await db.execute(query.order_by(GroupAd.created_at.desc(), GroupAd.id.desc()))
    groups = list(result.scalars().all())

    accepted = await count_accepted_by_group(db, [g.id for g in groups])
    hosts = await get_players_by_user_ids(db, {g.host_id for g in groups})
    viewer = await get_player_by_user_id(db, viewer_id)
    needle = search.strip().casefold() if search else ""

    listings: list[GroupListing] = []
    for group in groups:
        count = accepted.get(group.id, 0)
        state = group_state(group, count, now)
        if state != GroupState.open:
            continue
        host = hosts.get(group.host_id)
        host_nickname = host.nickname if host else None
        if needle and needle not in group.title.casefold() and (
            host_nickname is None or needle not in host_nickname.casefold()
        ):
            continue
        listing = GroupListing(
            group=group,
            accepted_count=count,
            state=state,
            host_nickname=host_nickname,
            eligible=viewer is not None
            and is_eligible(GroupFilters.model_validate(group.filters), viewer),
        )
        if min_available is not None and listing.available < min_available:
            continue
        listings.append(listing)
    return listings


async def find_eligible_players(
    db: AsyncSession, group_id: int, acting_host_id: int
) -> list[Player]:
    """Registered players, other than the host, whose profile passes the filters."""
    group = await get_group(db, group_id)
    if group is None:
        raise NotFound("Group not found")
    if group.host_id != acting_host_id:
        raise NotHost()
    candidates = [p for p in await list_players(db) if p.user_id != group.host_id]
    return eligible_players(GroupFilters.model_validate(group.filters), candidates)

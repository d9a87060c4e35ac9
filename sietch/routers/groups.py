from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sietch.database import get_db
from sietch.dependencies import get_current_user
from sietch.models.group_ad import GroupObjective
from sietch.models.user import User
from sietch.schemas.group import (
    ApplicationResponse,
    GroupCreate,
    GroupFilters,
    GroupResponse,
    MatchResponse,
    MemberResponse,
)
from sietch.schemas.player import PlayerResponse
from sietch.services.errors import NotFound, NotHost
from sietch.services.group_service import (
    GroupListing,
    browse_open_groups,
    close_group,
    create_group_ad,
    find_eligible_players,
    get_group,
    get_group_listing,
    list_groups_for_host,
)
from sietch.services.ledger_service import (
    apply_to_group,
    leave_group,
    list_accepted_members,
    list_open_applications_for_group,
)
from sietch.services.lifecycle import expires_at, time_remaining
from sietch.services.player_service import get_players_by_user_ids
from sietch.timeutils import utcnow

router = APIRouter(prefix="/groups", tags=["groups"])


def group_response(
    listing: GroupListing, now: datetime, members: list[MemberResponse] | None = None
) -> GroupResponse:
    group = listing.group
    return GroupResponse(
        id=group.id,
        host_id=group.host_id,
        host_nickname=listing.host_nickname,
        title=group.title,
        objective=group.objective,
        roles=group.roles,
        max_members=group.max_members,
        status=group.status,
        state=listing.state.value,
        occupied=listing.occupied,
        available=listing.available,
        filters=GroupFilters.model_validate(group.filters),
        created_at=group.created_at,
        closed_at=group.closed_at,
        expires_at=expires_at(group),
        seconds_remaining=int(time_remaining(group, now).total_seconds()),
        eligible=listing.eligible,
        members=members or [],
    )


async def _members(db: AsyncSession, listing: GroupListing) -> list[MemberResponse]:
    group = listing.group
    accepted = await list_accepted_members(db, group.id)
    profiles = await get_players_by_user_ids(db, {group.host_id, *(m.player_id for m in accepted)})

    def _member(player_id: int, match_id: int | None, member_status: str) -> MemberResponse:
        profile = profiles.get(player_id)
        return MemberResponse(
            match_id=match_id,
            player_id=player_id,
            nickname=profile.nickname if profile else None,
            level=profile.level if profile else None,
            status=member_status,
            is_host=player_id == group.host_id,
        )

    return [_member(group.host_id, None, "host")] + [
        _member(m.player_id, m.id, m.status.value) for m in accepted
    ]


async def _get_group_or_404(db: AsyncSession, group_id: int):
    group = await get_group(db, group_id)
    if group is None:
        raise NotFound("Group not found")
    return group


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_new_group(
    body: GroupCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    now = utcnow()
    group = await create_group_ad(
        db,
        host_id=current_user.id,
        title=body.title,
        objective=body.objective,
        roles=body.roles,
        filters=body.filters,
        now=now,
    )
    listing = await get_group_listing(db, group, now)
    return group_response(listing, now, await _members(db, listing))


@router.get("", response_model=list[GroupResponse])
async def browse_groups(
    objective: Optional[GroupObjective] = None,
    min_available: Optional[int] = Query(default=None, ge=1, le=3),
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Groups the current user could apply to right now."""
    now = utcnow()
    listings = await browse_open_groups(
        db,
        viewer_id=current_user.id,
        now=now,
        objective=objective,
        min_available=min_available,
        search=search,
    )
    return [group_response(listing, now) for listing in listings]


@router.get("/mine", response_model=list[GroupResponse])
async def my_groups(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    now = utcnow()
    responses: list[GroupResponse] = []
    for group in await list_groups_for_host(db, current_user.id):
        listing = await get_group_listing(db, group, now)
        responses.append(group_response(listing, now, await _members(db, listing)))
    return responses


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group_info(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    now = utcnow()
    group = await _get_group_or_404(db, group_id)
    listing = await get_group_listing(db, group, now, viewer_id=current_user.id)
    return group_response(listing, now, await _members(db, listing))


@router.post("/{group_id}/apply", response_model=MatchResponse, status_code=status.HTTP_201_CREATED)
async def apply(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await apply_to_group(db, group_id=group_id, player_id=current_user.id)


@router.post("/{group_id}/leave", response_model=MatchResponse)
async def leave(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await leave_group(db, group_id=group_id, player_id=current_user.id)


@router.post("/{group_id}/close", response_model=GroupResponse)
async def close(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    now = utcnow()
    group = await close_group(db, group_id=group_id, acting_host_id=current_user.id, now=now)
    listing = await get_group_listing(db, group, now)
    return group_response(listing, now, await _members(db, listing))


@router.get("/{group_id}/applications", response_model=list[ApplicationResponse])
async def pending_applications(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Applications waiting for the host's decision."""
    group = await _get_group_or_404(db, group_id)
    if group.host_id != current_user.id:
        raise NotHost()
    matches = await list_open_applications_for_group(db, group.id)
    profiles = await get_players_by_user_ids(db, {m.player_id for m in matches})
    responses: list[ApplicationResponse] = []
    for match in matches:
        profile = profiles.get(match.player_id)
        response = ApplicationResponse.model_validate(match)
        if profile is not None:
            response.nickname = profile.nickname
            response.level = profile.level
        responses.append(response)
    return responses


@router.get("/{group_id}/eligible-players", response_model=list[PlayerResponse])
async def eligible_players_for_group(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await find_eligible_players(db, group_id=group_id, acting_host_id=current_user.id)

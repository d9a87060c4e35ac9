"""Service-level tests for group advertisements and their derived state."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from sietch.models.group_ad import GroupAd, GroupObjective, GroupStatus, RoleType
from sietch.models.player import Player
from sietch.models.user import User
from sietch.schemas.group import GroupFilters
from sietch.services.errors import (
    AlreadyEngaged,
    GroupUnavailable,
    HostAlreadyActive,
    NotFound,
    NotHost,
    ValidationError,
)
from sietch.services.group_service import (
    browse_open_groups,
    close_group,
    create_group_ad,
    find_eligible_players,
    get_group_listing,
    list_groups_for_host,
)
from sietch.services.ledger_service import accept_match, apply_to_group
from sietch.services.lifecycle import (
    GroupState,
    available_slots,
    expires_at,
    group_state,
    is_expired,
    occupied_slots,
    time_remaining,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
ROLES = [RoleType.collection, RoleType.collection, RoleType.attack, RoleType.attack]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _make_player(db: AsyncSession, tag: str, **profile) -> User:
    user = User(email=f"gs_{tag}@test.com", username=f"gs_{tag}", hashed_password="hashed")
    db.add(user)
    await db.flush()
    fields = dict(level=30, interests=["Collection"])
    fields.update(profile)
    db.add(Player(user_id=user.id, nickname=f"nick_{tag}", game_id=f"gid_{tag}", **fields))
    await db.commit()
    return user


async def _make_group(
    db: AsyncSession,
    host: User,
    title: str = "Spice run",
    objective: GroupObjective = GroupObjective.collection,
    filters: GroupFilters | None = None,
    now: datetime = NOW,
) -> GroupAd:
    return await create_group_ad(
        db,
        host_id=host.id,
        title=title,
        objective=objective,
        roles=ROLES,
        filters=filters,
        now=now,
    )


async def _fill(db: AsyncSession, group: GroupAd, host: User, count: int, tag: str) -> None:
    for i in range(count):
        member = await _make_player(db, f"{tag}_{i}")
        match = await apply_to_group(db, group.id, member.id, NOW)
        await accept_match(db, match.id, host.id, NOW)


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


class TestCreateGroup:
    async def test_create(self, db_session: AsyncSession):
        host = await _make_player(db_session, "h1")
        group = await _make_group(
            db_session, host, filters=GroupFilters(min_level=10, interests=["Collection"])
        )
        assert group.id is not None
        assert group.status == GroupStatus.open
        assert group.max_members == 4
        assert group.roles == ["Collection", "Collection", "Attack", "Attack"]
        assert GroupFilters.model_validate(group.filters).min_level == 10
        assert [g.id for g in await list_groups_for_host(db_session, host.id)] == [group.id]

    async def test_title_required(self, db_session: AsyncSession):
        host = await _make_player(db_session, "h2")
        with pytest.raises(ValidationError):
            await _make_group(db_session, host, title="   ")

    async def test_objective_required(self, db_session: AsyncSession):
        host = await _make_player(db_session, "h3")
        with pytest.raises(ValidationError):
            await create_group_ad(
                db_session, host_id=host.id, title="No goal", objective=None, roles=ROLES, now=NOW
            )

    async def test_exactly_four_roles(self, db_session: AsyncSession):
        host = await _make_player(db_session, "h4")
        with pytest.raises(ValidationError):
            await create_group_ad(
                db_session,
                host_id=host.id,
                title="Short",
                objective=GroupObjective.pvp,
                roles=ROLES[:3],
                now=NOW,
            )

    @pytest.mark.parametrize(
        "filters",
        [
            GroupFilters(min_level=0),
            GroupFilters(min_level=201),
            GroupFilters(min_weapon_tier="Tier three"),
            GroupFilters(requires_base=True),
            GroupFilters(requires_base=True, specific_sector="Z9"),
        ],
    )
    async def test_invalid_filters(self, db_session: AsyncSession, filters: GroupFilters):
        host = await _make_player(db_session, "h5")
        with pytest.raises(ValidationError):
            await _make_group(db_session, host, filters=filters)

    async def test_one_active_group_per_host(self, db_session: AsyncSession):
        host = await _make_player(db_session, "h6")
        await _make_group(db_session, host)
        with pytest.raises(HostAlreadyActive):
            await _make_group(db_session, host, title="Second")

    async def test_new_group_after_close(self, db_session: AsyncSession):
        host = await _make_player(db_session, "h7")
        first = await _make_group(db_session, host)
        await close_group(db_session, first.id, host.id, NOW)
        second = await _make_group(db_session, host, title="Second")
        assert second.id != first.id

    async def test_new_group_after_expiry(self, db_session: AsyncSession):
        host = await _make_player(db_session, "h8")
        await _make_group(db_session, host)
        second = await _make_group(db_session, host, title="Later", now=NOW + timedelta(hours=6))
        assert second.status == GroupStatus.open

    async def test_member_cannot_host(self, db_session: AsyncSession):
        host = await _make_player(db_session, "h9")
        member = await _make_player(db_session, "m9")
        group = await _make_group(db_session, host)
        await apply_to_group(db_session, group.id, member.id, NOW)
        with pytest.raises(AlreadyEngaged):
            await _make_group(db_session, member, title="Mine")


# ---------------------------------------------------------------------------
# derived state
# ---------------------------------------------------------------------------


class TestLifecycle:
    def _group(self, **overrides) -> GroupAd:
        fields = dict(
            host_id=1,
            title="t",
            objective=GroupObjective.pvp,
            roles=[r.value for r in ROLES],
            max_members=4,
            status=GroupStatus.open,
            filters={},
            created_at=NOW,
        )
        fields.update(overrides)
        return GroupAd(**fields)

    def test_slots(self):
        group = self._group()
        assert occupied_slots(0) == 1
        assert available_slots(group, 0) == 3
        assert available_slots(group, 3) == 0

    def test_expiry_boundary(self):
        group = self._group()
        assert expires_at(group) == NOW + timedelta(hours=6)
        assert not is_expired(group, NOW + timedelta(hours=6) - timedelta(seconds=1))
        assert is_expired(group, NOW + timedelta(hours=6))

    def test_time_remaining_clamped(self):
        group = self._group()
        assert time_remaining(group, NOW + timedelta(hours=1)) == timedelta(hours=5)
        assert time_remaining(group, NOW + timedelta(hours=9)) == timedelta(0)

    def test_naive_timestamps_are_utc(self):
        group = self._group(created_at=NOW.replace(tzinfo=None))
        assert expires_at(group) == NOW + timedelta(hours=6)

    def test_precedence(self):
        later = NOW + timedelta(hours=7)
        assert group_state(self._group(), 0, NOW) == GroupState.open
        assert group_state(self._group(), 3, NOW) == GroupState.full
        assert group_state(self._group(), 3, later) == GroupState.expired
        assert group_state(self._group(status=GroupStatus.closed), 3, later) == GroupState.closed
        assert (
            group_state(self._group(status=GroupStatus.in_progress), 0, later)
            == GroupState.in_progress
        )

    async def test_listing_state(self, db_session: AsyncSession):
        host = await _make_player(db_session, "hl1")
        group = await _make_group(db_session, host)

        listing = await get_group_listing(db_session, group, NOW)
        assert listing.state == GroupState.open
        assert listing.occupied == 1
        assert listing.available == 3
        assert listing.host_nickname == "nick_hl1"

        await _fill(db_session, group, host, 3, "fl1")
        listing = await get_group_listing(db_session, group, NOW)
        assert listing.state == GroupState.full
        assert listing.available == 0
        # stored status never changes on its own
        assert group.status == GroupStatus.open

        listing = await get_group_listing(db_session, group, NOW + timedelta(hours=6))
        assert listing.state == GroupState.expired

    async def test_listing_eligibility_for_viewer(self, db_session: AsyncSession):
        host = await _make_player(db_session, "hl2")
        strong = await _make_player(db_session, "sl2", level=80)
        weak = await _make_player(db_session, "wl2", level=5)
        group = await _make_group(db_session, host, filters=GroupFilters(min_level=50))

        assert (await get_group_listing(db_session, group, NOW, viewer_id=strong.id)).eligible
        assert not (await get_group_listing(db_session, group, NOW, viewer_id=weak.id)).eligible
        assert (await get_group_listing(db_session, group, NOW, viewer_id=host.id)).eligible is None


# ---------------------------------------------------------------------------
# close
# ---------------------------------------------------------------------------


class TestCloseGroup:
    async def test_close_notifies_members(self, db_session: AsyncSession, outbox):
        host = await _make_player(db_session, "hc1")
        group = await _make_group(db_session, host)
        await _fill(db_session, group, host, 2, "fc1")
        outbox.reset_mock()

        closed = await close_group(db_session, group.id, host.id, NOW + timedelta(hours=1))

        assert closed.status == GroupStatus.closed
        assert closed.closed_at is not None
        recipients = sorted(call.args[0] for call in outbox.await_args_list)
        assert recipients == ["gs_fc1_0@test.com", "gs_fc1_1@test.com"]

    async def test_only_host_closes(self, db_session: AsyncSession):
        host = await _make_player(db_session, "hc2")
        other = await _make_player(db_session, "oc2")
        group = await _make_group(db_session, host)
        with pytest.raises(NotHost):
            await close_group(db_session, group.id, other.id, NOW)

    async def test_close_twice(self, db_session: AsyncSession):
        host = await _make_player(db_session, "hc3")
        group = await _make_group(db_session, host)
        await close_group(db_session, group.id, host.id, NOW)
        with pytest.raises(GroupUnavailable):
            await close_group(db_session, group.id, host.id, NOW)

    async def test_close_expired_group(self, db_session: AsyncSession):
        host = await _make_player(db_session, "hc4")
        group = await _make_group(db_session, host)
        closed = await close_group(db_session, group.id, host.id, NOW + timedelta(hours=8))
        assert closed.status == GroupStatus.closed

    async def test_close_unknown_group(self, db_session: AsyncSession):
        host = await _make_player(db_session, "hc5")
        with pytest.raises(NotFound):
            await close_group(db_session, 31337, host.id, NOW)


# ---------------------------------------------------------------------------
# browse
# ---------------------------------------------------------------------------


class TestBrowse:
    async def test_browse_hides_unavailable_groups(self, db_session: AsyncSession):
        viewer = await _make_player(db_session, "vb1")
        open_host = await _make_player(db_session, "ob1")
        full_host = await _make_player(db_session, "fb1")
        old_host = await _make_player(db_session, "eb1")
        closed_host = await _make_player(db_session, "cb1")

        open_group = await _make_group(db_session, open_host, title="Open one")
        full_group = await _make_group(db_session, full_host, title="Full one")
        await _fill(db_session, full_group, full_host, 3, "fb1")
        await _make_group(db_session, old_host, title="Old one", now=NOW - timedelta(hours=7))
        closed_group = await _make_group(db_session, closed_host, title="Closed one")
        await close_group(db_session, closed_group.id, closed_host.id, NOW)
        await _make_group(db_session, viewer, title="Own one")

        listings = await browse_open_groups(db_session, viewer.id, NOW)

        assert [listing.group.id for listing in listings] == [open_group.id]
        assert listings[0].eligible is True

    async def test_browse_filters(self, db_session: AsyncSession):
        viewer = await _make_player(db_session, "vb2", level=5)
        a_host = await _make_player(db_session, "ab2")
        b_host = await _make_player(db_session, "bb2")
        c_host = await _make_player(db_session, "zz2")

        spice = await _make_group(db_session, a_host, title="Spice harvest")
        pvp = await _make_group(
            db_session,
            b_host,
            title="Deep desert raid",
            objective=GroupObjective.pvp,
            filters=GroupFilters(min_level=50),
        )
        busy = await _make_group(db_session, c_host, title="Almost full")
        await _fill(db_session, busy, c_host, 2, "fz2")

        by_objective = await browse_open_groups(
            db_session, viewer.id, NOW, objective=GroupObjective.pvp
        )
        assert [listing.group.id for listing in by_objective] == [pvp.id]
        assert by_objective[0].eligible is False

        roomy = await browse_open_groups(db_session, viewer.id, NOW, min_available=2)
        assert {listing.group.id for listing in roomy} == {spice.id, pvp.id}

        by_title = await browse_open_groups(db_session, viewer.id, NOW, search="SPICE")
        assert [listing.group.id for listing in by_title] == [spice.id]

        by_host = await browse_open_groups(db_session, viewer.id, NOW, search="nick_zz2")
        assert [listing.group.id for listing in by_host] == [busy.id]

    async def test_browse_newest_first(self, db_session: AsyncSession):
        viewer = await _make_player(db_session, "vb3")
        first_host = await _make_player(db_session, "fb3")
        second_host = await _make_player(db_session, "sb3")
        older = await _make_group(db_session, first_host, now=NOW - timedelta(minutes=30))
        newer = await _make_group(db_session, second_host, now=NOW - timedelta(minutes=5))

        listings = await browse_open_groups(db_session, viewer.id, NOW)
        assert [listing.group.id for listing in listings] == [newer.id, older.id]


# ---------------------------------------------------------------------------
# eligible players
# ---------------------------------------------------------------------------


class TestFindEligiblePlayers:
    async def test_find_eligible_players(self, db_session: AsyncSession):
        host = await _make_player(db_session, "he1", level=90)
        strong = await _make_player(db_session, "se1", level=60, interests=["PvP"])
        await _make_player(db_session, "we1", level=10, interests=["PvP"])
        await _make_player(db_session, "ce1", level=70, interests=["Collection"])
        group = await _make_group(
            db_session, host, filters=GroupFilters(min_level=50, interests=["PvP"])
        )

        players = await find_eligible_players(db_session, group.id, host.id)
        assert [p.user_id for p in players] == [strong.id]

    async def test_only_host_may_search(self, db_session: AsyncSession):
        host = await _make_player(db_session, "he2")
        other = await _make_player(db_session, "oe2")
        group = await _make_group(db_session, host)
        with pytest.raises(NotHost):
            await find_eligible_players(db_session, group.id, other.id)

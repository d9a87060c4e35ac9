"""Derived, read-time state of a group advertisement.

Fullness and expiry are never written back to ``GroupAd.status``; they are
recomputed from the persisted status, the creation time and the number of
accepted members every time a group is read. Only an explicit close by the
host persists a transition.
"""

import enum
from datetime import datetime, timedelta

from sietch.config import settings
from sietch.models.group_ad import GroupAd, GroupStatus
from sietch.timeutils import as_utc, remaining


class GroupState(str, enum.Enum):
    open = "open"
    full = "full"
    expired = "expired"
    closed = "closed"
    in_progress = "in_progress"


def group_ttl() -> timedelta:
    return timedelta(hours=settings.group_ttl_hours)


def expires_at(group: GroupAd) -> datetime:
    return as_utc(group.created_at) + group_ttl()


def is_expired(group: GroupAd, now: datetime) -> bool:
    return as_utc(now) >= expires_at(group)


def time_remaining(group: GroupAd, now: datetime) -> timedelta:
    return remaining(expires_at(group), now)


def occupied_slots(accepted_count: int) -> int:
    # The host always holds slot 0
    return 1 + accepted_count


def available_slots(group: GroupAd, accepted_count: int) -> int:
    return max(0, group.max_members - occupied_slots(accepted_count))


def is_full(group: GroupAd, accepted_count: int) -> bool:
    return occupied_slots(accepted_count) >= group.max_members


def group_state(group: GroupAd, accepted_count: int, now: datetime) -> GroupState:
    """Effective state of *group*.

    Precedence: closed, in_progress, expired, full, open.
    """
    if group.status == GroupStatus.closed:
        return GroupState.closed
    if group.status == GroupStatus.in_progress:
        return GroupState.in_progress
    if is_expired(group, now):
        return GroupState.expired
    if is_full(group, accepted_count):
        return GroupState.full
    return GroupState.open


def is_active(group: GroupAd, now: datetime) -> bool:
    """True while the group still ties up its host and members.

    A full group is still active; an expired or closed one is not.
    """
    return group.status == GroupStatus.open and not is_expired(group, now)

"""Notification service: composes and dispatches emails for group events."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sietch.config import settings
from sietch.models.group_ad import GroupAd
from sietch.models.match import Match
from sietch.models.player import Player
from sietch.models.user import User
from sietch.tasks.email_sender import send_email

logger = logging.getLogger(__name__)


async def _get_user_email(db: AsyncSession, user_id: int) -> str | None:
    result = await db.execute(select(User.email).where(User.id == user_id))
    return result.scalar_one_or_none()


async def _display_name(db: AsyncSession, user_id: int) -> str:
    result = await db.execute(select(Player.nickname).where(Player.user_id == user_id))
    return result.scalar_one_or_none() or f"Player {user_id}"


def _group_link(group: GroupAd) -> str:
    return f"{settings.base_url}/groups/{group.id}"


async def _notify(db: AsyncSession, user_id: int, subject: str, body: str) -> None:
    email = await _get_user_email(db, user_id)
    if not email:
        logger.warning("No email found for user_id=%s", user_id)
        return
    await send_email(email, subject, body)


async def notify_new_application(db: AsyncSession, group: GroupAd, match: Match) -> None:
    """Tell the host someone applied to their group."""
    applicant = await _display_name(db, match.player_id)
    subject = f"Sietch: new application to '{group.title}'"
    body = (
        f"Hello!\n\n"
        f"{applicant} applied to join your group '{group.title}'.\n\n"
        f"Review applications here: {_group_link(group)}\n"
    )
    await _notify(db, group.host_id, subject, body)


async def notify_application_accepted(db: AsyncSession, group: GroupAd, match: Match) -> None:
    subject = f"Sietch: you joined '{group.title}'"
    body = (
        f"Hello!\n\n"
        f"The host accepted your application to '{group.title}'.\n\n"
        f"Group details: {_group_link(group)}\n"
    )
    await _notify(db, match.player_id, subject, body)


async def notify_application_declined(db: AsyncSession, group: GroupAd, match: Match) -> None:
    subject = f"Sietch: update on '{group.title}'"
    body = (
        f"Hello!\n\n"
        f"The host of '{group.title}' did not keep your application.\n"
        f"You are free to apply to another group.\n"
    )
    await _notify(db, match.player_id, subject, body)


async def notify_member_left(db: AsyncSession, group: GroupAd, match: Match) -> None:
    member = await _display_name(db, match.player_id)
    subject = f"Sietch: {member} left '{group.title}'"
    body = (
        f"Hello!\n\n"
        f"{member} left your group '{group.title}'. A slot is free again.\n\n"
        f"Group details: {_group_link(group)}\n"
    )
    await _notify(db, group.host_id, subject, body)


async def notify_group_closed(db: AsyncSession, group: GroupAd, member_ids: list[int]) -> None:
    """Tell accepted members the group is closed and ratings are open."""
    subject = f"Sietch: '{group.title}' is closed"
    body = (
        f"Hello!\n\n"
        f"The host closed '{group.title}'.\n"
        f"You have {settings.rating_window_minutes} minutes to rate your squadmates.\n\n"
        f"Rate them here: {_group_link(group)}\n"
    )
    for user_id in member_ids:
        await _notify(db, user_id, subject, body)

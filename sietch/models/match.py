import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from sietch.models.base import Base
from sietch.timeutils import utcnow


class MatchStatus(str, enum.Enum):
    invited = "invited"
    accepted = "accepted"
    declined = "declined"


ACTIVE_MATCH_STATUSES = (MatchStatus.invited, MatchStatus.accepted)


class Match(Base):
    """A candidate's application to, and membership of, a group."""

    __tablename__ = "group_matches"
    __table_args__ = (
        UniqueConstraint("group_id", "player_id", name="uq_group_match_group_player"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("group_ads.id"), nullable=False, index=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    status: Mapped[MatchStatus] = mapped_column(
        Enum(MatchStatus), nullable=False, default=MatchStatus.invited
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    accepted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )
    decided_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

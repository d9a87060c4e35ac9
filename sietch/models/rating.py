from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from sietch.models.base import Base
from sietch.timeutils import utcnow


class Rating(Base):
    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint(
            "from_player_id", "to_player_id", "group_id", name="uq_rating_from_to_group"
        ),
        CheckConstraint("stars >= 1 AND stars <= 5", name="ck_rating_stars_range"),
        CheckConstraint("from_player_id <> to_player_id", name="ck_rating_not_self"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    from_player_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    to_player_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("group_ads.id"), nullable=False, index=True)
    stars: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(String(200), nullable=True, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

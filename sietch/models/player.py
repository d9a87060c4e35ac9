import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from sietch.models.base import Base
from sietch.timeutils import utcnow


class Interest(str, enum.Enum):
    collection = "Collection"
    pvp = "PvP"


class ToolCategory(str, enum.Enum):
    mining = "mining"
    spice = "spice"


class Player(Base):
    """Game profile of a registered user.

    ``user_id`` is the identity used across groups, matches and ratings.
    nickname and game_id are fixed once the profile exists.
    """

    __tablename__ = "players"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, unique=True, index=True
    )
    nickname: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    game_id: Mapped[str] = mapped_column(String(100), nullable=False)
    server: Mapped[str | None] = mapped_column(String(100), nullable=True, default=None)
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    # Tier labels as entered, e.g. "T3 - Tier 3"; empty means not owned
    weapon_tier: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    armor_tier: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    vehicle_tier: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    mining_tool_tier: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    spice_tool_tier: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    # list of Interest values
    interests: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    has_base: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    base_sector: Mapped[str | None] = mapped_column(String(8), nullable=True, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

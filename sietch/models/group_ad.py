import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from sietch.models.base import Base
from sietch.timeutils import utcnow

GROUP_CAPACITY = 4


class GroupStatus(str, enum.Enum):
    open = "open"
    # Reserved for a future "session running" step; no transition produces it yet.
    in_progress = "in_progress"
    closed = "closed"


class GroupObjective(str, enum.Enum):
    collection = "Collection"
    pvp = "PvP"


class RoleType(str, enum.Enum):
    collection = "Collection"
    attack = "Attack"


class GroupAd(Base):
    __tablename__ = "group_ads"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    host_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    objective: Mapped[GroupObjective] = mapped_column(Enum(GroupObjective), nullable=False)
    # Four RoleType values; slot 0 is the host's own role
    roles: Mapped[list] = mapped_column(JSON, nullable=False)
    max_members: Mapped[int] = mapped_column(Integer, nullable=False, default=GROUP_CAPACITY)
    status: Mapped[GroupStatus] = mapped_column(
        Enum(GroupStatus), nullable=False, default=GroupStatus.open, index=True
    )
    # GroupFilters document; see sietch.schemas.group.GroupFilters
    filters: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    closed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

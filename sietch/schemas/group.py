from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from sietch.models.group_ad import GroupObjective, GroupStatus, RoleType
from sietch.models.match import MatchStatus
from sietch.models.player import Interest, ToolCategory


class GroupFilters(BaseModel):
    """Eligibility filters attached to a group advertisement.

    Every field is optional; an unset field places no constraint.
    """

    min_level: Optional[int] = None
    interests: list[Interest] = []
    min_weapon_tier: Optional[str] = None
    min_armor_tier: Optional[str] = None
    min_vehicle_tier: Optional[str] = None
    requires_base: bool = False
    specific_sector: Optional[str] = None
    required_tools: list[ToolCategory] = []

    @field_validator(
        "min_level",
        "min_weapon_tier",
        "min_armor_tier",
        "min_vehicle_tier",
        "specific_sector",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class GroupCreate(BaseModel):
    title: str
    objective: Optional[GroupObjective] = None
    roles: list[RoleType]
    filters: GroupFilters = Field(default_factory=GroupFilters)


class MemberResponse(BaseModel):
    match_id: Optional[int]
    player_id: int
    nickname: Optional[str]
    level: Optional[int]
    status: str
    is_host: bool


class GroupResponse(BaseModel):
    id: int
    host_id: int
    host_nickname: Optional[str] = None
    title: str
    objective: GroupObjective
    roles: list[RoleType]
    max_members: int
    status: GroupStatus
    state: str
    occupied: int
    available: int
    filters: GroupFilters
    created_at: datetime
    closed_at: Optional[datetime]
    expires_at: datetime
    seconds_remaining: int
    eligible: Optional[bool] = None
    members: list[MemberResponse] = []


class MatchResponse(BaseModel):
    id: int
    group_id: int
    player_id: int
    status: MatchStatus
    created_at: datetime
    accepted_at: Optional[datetime]
    decided_at: Optional[datetime]

    model_config = {"from_attributes": True}


class EngagementResponse(BaseModel):
    group: GroupResponse
    role: str


class ApplicationResponse(MatchResponse):
    nickname: Optional[str] = None
    level: Optional[int] = None

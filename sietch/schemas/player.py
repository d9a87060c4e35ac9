from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from sietch.models.player import Interest

LEVEL_MIN = 1
LEVEL_MAX = 200
NICKNAME_MIN_LENGTH = 3

# Base sectors run A1..I9
SECTORS = [f"{letter}{number}" for letter in "ABCDEFGHI" for number in range(1, 10)]


class PlayerAttributes(BaseModel):
    """Editable part of a profile."""

    server: Optional[str] = None
    level: int = Field(ge=LEVEL_MIN, le=LEVEL_MAX)
    weapon_tier: str = ""
    armor_tier: str = ""
    vehicle_tier: str = ""
    mining_tool_tier: str = ""
    spice_tool_tier: str = ""
    interests: list[Interest] = Field(min_length=1)
    has_base: bool = False
    base_sector: Optional[str] = None

    @field_validator(
        "weapon_tier", "armor_tier", "vehicle_tier", "mining_tool_tier", "spice_tool_tier"
    )
    @classmethod
    def strip_tier(cls, v: str) -> str:
        return v.strip()

    @field_validator("base_sector")
    @classmethod
    def validate_sector(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        v = v.strip().upper()
        if v not in SECTORS:
            raise ValueError("base_sector must be between A1 and I9")
        return v


class PlayerCreate(PlayerAttributes):
    nickname: str = Field(min_length=NICKNAME_MIN_LENGTH, max_length=50)
    game_id: str = Field(min_length=1, max_length=100)

    @field_validator("nickname", "game_id")
    @classmethod
    def strip_identity(cls, v: str) -> str:
        return v.strip()


class PlayerUpdate(PlayerAttributes):
    # Identity fields may be echoed back but never changed
    nickname: Optional[str] = None
    game_id: Optional[str] = None


class PlayerResponse(BaseModel):
    id: int
    user_id: int
    nickname: str
    game_id: str
    server: Optional[str]
    level: int
    weapon_tier: str
    armor_tier: str
    vehicle_tier: str
    mining_tool_tier: str
    spice_tool_tier: str
    interests: list[Interest]
    has_base: bool
    base_sector: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

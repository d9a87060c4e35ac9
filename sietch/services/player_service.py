import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sietch.models.player import Player
from sietch.schemas.player import PlayerAttributes, PlayerCreate, PlayerUpdate
from sietch.services.errors import NicknameTaken, NotFound, ProfileExists, ValidationError

logger = logging.getLogger(__name__)


async def get_player_by_user_id(db: AsyncSession, user_id: int) -> Player | None:
    result = await db.execute(select(Player).where(Player.user_id == user_id))
    return result.scalar_one_or_none()


async def get_player_by_nickname(db: AsyncSession, nickname: str) -> Player | None:
    result = await db.execute(select(Player).where(Player.nickname == nickname))
    return result.scalar_one_or_none()


async def get_players_by_user_ids(db: AsyncSession, user_ids: set[int]) -> dict[int, Player]:
    if not user_ids:
        return {}
    result = await db.execute(select(Player).where(Player.user_id.in_(user_ids)))
    return {p.user_id: p for p in result.scalars().all()}


async def list_players(db: AsyncSession) -> list[Player]:
    result = await db.execute(select(Player).order_by(Player.created_at))
    return list(result.scalars().all())


def _apply_attributes(player: Player, data: PlayerAttributes) -> None:
    if data.has_base and not data.base_sector:
        raise ValidationError("base_sector is required when the player has a base")

    player.server = data.server
    player.level = data.level
    player.weapon_tier = data.weapon_tier
    player.armor_tier = data.armor_tier
    player.vehicle_tier = data.vehicle_tier
    player.mining_tool_tier = data.mining_tool_tier
    player.spice_tool_tier = data.spice_tool_tier
    player.interests = [i.value for i in data.interests]
    player.has_base = data.has_base
    player.base_sector = data.base_sector if data.has_base else None


async def create_player(db: AsyncSession, user_id: int, data: PlayerCreate) -> Player:
    if await get_player_by_user_id(db, user_id) is not None:
        raise ProfileExists()
    if await get_player_by_nickname(db, data.nickname) is not None:
        raise NicknameTaken()

    player = Player(user_id=user_id, nickname=data.nickname, game_id=data.game_id)
    _apply_attributes(player, data)
    db.add(player)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise NicknameTaken()
    await db.refresh(player)
    logger.info("Player profile %s created for user %s", player.id, user_id)
    return player


async def update_player(db: AsyncSession, user_id: int, data: PlayerUpdate) -> Player:
    player = await get_player_by_user_id(db, user_id)
    if player is None:
        raise NotFound("Player profile not found")

    if data.nickname is not None and data.nickname.strip() != player.nickname:
        raise ValidationError("Nickname cannot be changed after registration")
    if data.game_id is not None and data.game_id.strip() != player.game_id:
        raise ValidationError("Game id cannot be changed after registration")

    _apply_attributes(player, data)
    await db.commit()
    await db.refresh(player)
    return player

"""Campaign service - lookups for NPCs, areas and the world description."""

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from gm_assistant.models.area import Area, DEFAULT_AREAS
from gm_assistant.models.npc import NPC
from gm_assistant.models.world import WorldSettings, WORLD_ROW_ID


class CampaignService:
    @staticmethod
    async def get_npc(db: AsyncSession, npc_id: str) -> NPC | None:
        return await db.get(NPC, npc_id)

    @staticmethod
    async def get_area_name(db: AsyncSession, area_id: str) -> str:
        """Display name of an area; falls back to the raw id for unknown areas."""
        if not area_id:
            return ""
        area = await db.get(Area, area_id)
        return area.name if area else area_id

    @staticmethod
    async def get_world_description(db: AsyncSession) -> str:
        world = await db.get(WorldSettings, WORLD_ROW_ID)
        return world.description if world else ""

    @staticmethod
    async def set_world_description(db: AsyncSession, description: str) -> str:
        world = await db.get(WorldSettings, WORLD_ROW_ID)
        if world is None:
            world = WorldSettings(id=WORLD_ROW_ID, description=description)
            db.add(world)
        else:
            world.description = description
        await db.flush()
        return world.description

    @staticmethod
    async def seed_defaults(db: AsyncSession) -> None:
        """Insert the default areas into an empty campaign."""
        count = await db.scalar(select(func.count()).select_from(Area))
        if count:
            return
        db.add_all(Area(**area) for area in DEFAULT_AREAS)
        await db.flush()


campaign_service = CampaignService()

"""World endpoints - the campaign's world description used in NPC prompts."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gm_assistant.db.database import get_db
from gm_assistant.schemas.world import WorldDescription
from gm_assistant.services.campaign_service import campaign_service

router = APIRouter()


@router.get("/", response_model=WorldDescription)
async def get_world(db: AsyncSession = Depends(get_db)):
    description = await campaign_service.get_world_description(db)
    return WorldDescription(world_description=description)


@router.put("/", response_model=WorldDescription)
async def update_world(data: WorldDescription, db: AsyncSession = Depends(get_db)):
    description = await campaign_service.set_world_description(db, data.world_description)
    return WorldDescription(world_description=description)

"""Area endpoints - manage the locations NPCs live in."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gm_assistant.db.database import get_db
from gm_assistant.models.area import Area
from gm_assistant.schemas.area import AreaCreate, AreaOut, AreaUpdate

router = APIRouter()


async def _get_area_or_404(area_id: str, db: AsyncSession) -> Area:
    area = await db.get(Area, area_id)
    if area is None:
        raise HTTPException(status_code=404, detail="Area not found")
    return area


@router.get("/", response_model=list[AreaOut])
async def list_areas(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Area).order_by(Area.name))
    return result.scalars().all()


@router.post("/", response_model=AreaOut, status_code=201)
async def create_area(data: AreaCreate, db: AsyncSession = Depends(get_db)):
    if await db.get(Area, data.id) is not None:
        raise HTTPException(status_code=409, detail="Area id already exists")
    area = Area(**data.model_dump())
    db.add(area)
    await db.flush()
    return area


@router.patch("/{area_id}", response_model=AreaOut)
async def update_area(area_id: str, data: AreaUpdate, db: AsyncSession = Depends(get_db)):
    area = await _get_area_or_404(area_id, db)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(area, field, value)
    await db.flush()
    return area


@router.delete("/{area_id}", status_code=204)
async def delete_area(area_id: str, db: AsyncSession = Depends(get_db)):
    """Delete an area. NPCs keep the area id and show it as their location."""
    area = await _get_area_or_404(area_id, db)
    await db.delete(area)
    await db.flush()

"""NPC endpoints - create, read, update and delete campaign NPCs."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gm_assistant.db.database import get_db
from gm_assistant.models.npc import NPC
from gm_assistant.schemas.npc import NPCCreate, NPCState, NPCUpdate
from gm_assistant.services.memory_service import memory_service

router = APIRouter()


async def _get_npc_or_404(npc_id: str, db: AsyncSession) -> NPC:
    """Fetch an NPC by ID or raise 404."""
    npc = await db.get(NPC, npc_id)
    if npc is None:
        raise HTTPException(status_code=404, detail="NPC not found")
    return npc


def _npc_to_response(npc: NPC) -> NPCState:
    """Convert ORM model to response schema."""
    return NPCState(
        id=npc.id,
        name=npc.name,
        area=npc.area,
        role=npc.role,
        summary=npc.summary,
        appearance=npc.appearance,
        personality=npc.personality,
        motivations=npc.motivations,
        hooks=npc.hooks or [],
        danger_level=npc.danger_level,
        combat_notes=npc.combat_notes,
        voice=npc.voice,
        chat_state=memory_service.from_record(npc) if npc.chat_state else None,
        created_at=npc.created_at,
        updated_at=npc.updated_at,
    )


@router.get("/", response_model=list[NPCState])
async def list_npcs(area: str | None = None, db: AsyncSession = Depends(get_db)):
    """List all NPCs, optionally only those in one area."""
    query = select(NPC).order_by(NPC.name)
    if area:
        query = query.where(NPC.area == area)
    result = await db.execute(query)
    return [_npc_to_response(npc) for npc in result.scalars().all()]


@router.post("/", response_model=NPCState, status_code=201)
async def create_npc(data: NPCCreate, db: AsyncSession = Depends(get_db)):
    """Create a new NPC. Its conversation memory starts empty."""
    if await db.get(NPC, data.id) is not None:
        raise HTTPException(status_code=409, detail="NPC id already exists")
    npc = NPC(**data.model_dump())
    db.add(npc)
    await db.flush()
    await db.refresh(npc)
    return _npc_to_response(npc)


@router.get("/{npc_id}", response_model=NPCState)
async def get_npc(npc_id: str, db: AsyncSession = Depends(get_db)):
    npc = await _get_npc_or_404(npc_id, db)
    return _npc_to_response(npc)


@router.patch("/{npc_id}", response_model=NPCState)
async def update_npc(npc_id: str, data: NPCUpdate, db: AsyncSession = Depends(get_db)):
    """Update identity fields and/or the voice preference."""
    npc = await _get_npc_or_404(npc_id, db)

    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(npc, field, value)

    await db.flush()
    await db.refresh(npc)
    return _npc_to_response(npc)


@router.delete("/{npc_id}", status_code=204)
async def delete_npc(npc_id: str, db: AsyncSession = Depends(get_db)):
    """Delete an NPC together with its conversation memory."""
    npc = await _get_npc_or_404(npc_id, db)
    await db.delete(npc)
    await db.flush()

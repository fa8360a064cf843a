"""NPC chat endpoints - play one conversation turn, read an NPC's memory."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from gm_assistant.db.database import get_db
from gm_assistant.schemas.chat import ChatTurnRequest, ChatTurnResponse, ConversationMemory
from gm_assistant.services.campaign_service import campaign_service
from gm_assistant.services.chat_service import ChatService, chat_service
from gm_assistant.services.memory_service import memory_service

router = APIRouter()


def get_chat_service() -> ChatService:
    """FastAPI dependency returning the shared chat service (overridden in tests)."""
    return chat_service


@router.post("/", response_model=ChatTurnResponse)
async def npc_chat(req: ChatTurnRequest, service: ChatService = Depends(get_chat_service)):
    """Send a player message to an NPC and get the in-character reply.

    Errors are raised as ``GMAssistantError`` subclasses and rendered by the
    app-level exception handler.
    """
    result = await service.handle_turn(req.npc_id, req.message)
    return ChatTurnResponse(response=result.reply, npc_name=result.npc_name)


@router.get("/{npc_id}/memory", response_model=ConversationMemory)
async def get_npc_memory(npc_id: str, db: AsyncSession = Depends(get_db)):
    """Current memory summary and recent messages for an NPC."""
    npc = await campaign_service.get_npc(db, npc_id)
    if npc is None:
        raise HTTPException(status_code=404, detail="NPC not found")
    return memory_service.from_record(npc)

"""Memory service - per-NPC conversation memory (summary + recent buffer)."""

import time

import structlog
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gm_assistant.core.errors import NPCNotFoundError, PersistenceError
from gm_assistant.db.database import async_session
from gm_assistant.models.npc import NPC
from gm_assistant.schemas.chat import ChatMessage, ConversationMemory

logger = structlog.get_logger(__name__)

# Stored beside the live memory when an unreadable chat state gets replaced
DISCARDED_STATE_KEY = "discardedChatState"


def now_ms() -> int:
    return time.time_ns() // 1_000_000


class MemoryService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession] = async_session):
        self.session_factory = session_factory

    @staticmethod
    def from_record(npc: NPC) -> ConversationMemory:
        """Memory stored on an NPC row, or an empty one if it has none yet."""
        if not npc.chat_state:
            return ConversationMemory()
        try:
            return ConversationMemory.model_validate(npc.chat_state)
        except ValidationError as exc:
            # persist() keeps the unreadable state under DISCARDED_STATE_KEY
            logger.error("chat_state_unreadable", npc_id=npc.id, error=str(exc))
            return ConversationMemory()

    async def get(self, npc_id: str) -> ConversationMemory:
        """Return the NPC's memory; empty if the NPC or its memory does not exist."""
        async with self.session_factory() as db:
            npc = await db.get(NPC, npc_id)
        if npc is None:
            return ConversationMemory()
        return self.from_record(npc)

    @staticmethod
    def append(
        memory: ConversationMemory, player: str, npc: str, now: int
    ) -> ConversationMemory:
        """Return a new memory with one player message and one NPC reply appended.

        The reply is stamped ``now + 1`` so it always sorts after the player
        message. ``now`` is raised to the newest stored timestamp if the
        clock went backwards.
        """
        if memory.recent_messages:
            now = max(now, memory.recent_messages[-1].timestamp)
        return ConversationMemory(
            memory_summary=memory.memory_summary,
            recent_messages=[
                *memory.recent_messages,
                ChatMessage(role="player", content=player, timestamp=now),
                ChatMessage(role="npc", content=npc, timestamp=now + 1),
            ],
        )

    @staticmethod
    def _merge_discarded(previous, state: dict) -> dict:
        """Carry an unreadable earlier state along instead of overwriting it."""
        if isinstance(previous, dict) and DISCARDED_STATE_KEY in previous:
            state[DISCARDED_STATE_KEY] = previous[DISCARDED_STATE_KEY]
        elif previous:
            try:
                ConversationMemory.model_validate(previous)
            except ValidationError:
                state[DISCARDED_STATE_KEY] = previous
        return state

    async def persist(self, npc_id: str, memory: ConversationMemory) -> None:
        """Write the memory back onto the NPC row, replacing the stored summary and buffer."""
        try:
            async with self.session_factory() as db:
                npc = await db.get(NPC, npc_id)
                if npc is None:
                    raise NPCNotFoundError(npc_id)
                npc.chat_state = self._merge_discarded(npc.chat_state, memory.to_chat_state())
                await db.commit()
        except SQLAlchemyError as exc:
            logger.error("chat_state_save_failed", npc_id=npc_id, error=str(exc))
            raise PersistenceError(f"Failed to save the conversation for NPC {npc_id}") from exc


memory_service = MemoryService()

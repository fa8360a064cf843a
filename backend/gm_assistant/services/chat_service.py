"""Chat service - runs one NPC conversation turn end to end.

A turn is: validate, lock the NPC, build the prompt from persona + memory,
generate the reply, append both messages, compact the memory if the buffer
is over the threshold, and persist. Nothing is written unless a reply was
generated, and no reply is returned unless it was saved.
"""

from collections.abc import Callable
from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gm_assistant.core.errors import (
    ChatValidationError,
    CompactionError,
    GenerationError,
    GenerationErrorKind,
    GenerationNotConfiguredError,
    NPCNotFoundError,
)
from gm_assistant.core.turn_lock import LocalTurnLocks, RedisTurnLocks, build_turn_locks
from gm_assistant.db.database import async_session
from gm_assistant.schemas.chat import ConversationMemory
from gm_assistant.services.campaign_service import campaign_service
from gm_assistant.services.compactor import Compactor
from gm_assistant.services.llm_service import TextGenerator, llm_service
from gm_assistant.services.memory_service import MemoryService, now_ms
from gm_assistant.services.prompt_builder import (
    build_persona_prompt,
    build_turn_prompt,
    clean_reply,
)

logger = structlog.get_logger(__name__)


@dataclass
class TurnResult:
    reply: str
    npc_name: str
    memory: ConversationMemory
    compacted: bool = False


class ChatService:
    def __init__(
        self,
        llm: TextGenerator,
        session_factory: async_sessionmaker[AsyncSession] = async_session,
        locks: LocalTurnLocks | RedisTurnLocks | None = None,
        compactor: Compactor | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.llm = llm
        self.session_factory = session_factory
        self.locks = locks or LocalTurnLocks()
        self.memory = MemoryService(session_factory)
        self.compactor = compactor or Compactor(llm)
        self.clock = clock

    async def handle_turn(self, npc_id: str | None, player_message: str | None) -> TurnResult:
        """Process one player message for an NPC and return the NPC's reply."""
        npc_id = (npc_id or "").strip()
        message = (player_message or "").strip()
        if not npc_id:
            raise ChatValidationError("npcId is required.")
        if not message:
            raise ChatValidationError("message is required.")
        if not self.llm.is_configured:
            raise GenerationNotConfiguredError("Text generation is not configured.")

        async with self.locks.hold(npc_id):
            return await self._run_turn(npc_id, message)

    async def _run_turn(self, npc_id: str, message: str) -> TurnResult:
        async with self.session_factory() as db:
            npc = await campaign_service.get_npc(db, npc_id)
            if npc is None:
                raise NPCNotFoundError(npc_id)
            area_name = await campaign_service.get_area_name(db, npc.area)
            world_description = await campaign_service.get_world_description(db)

        memory = self.memory.from_record(npc)
        persona = build_persona_prompt(npc, area_name, world_description, memory.memory_summary)
        prompt = build_turn_prompt(persona, memory, npc.name, message)

        try:
            raw = await self.llm.generate(prompt)
        except GenerationError as exc:
            logger.warning("generation_failed", npc_id=npc_id, kind=exc.kind.value)
            raise

        reply = clean_reply(raw, npc.name)
        if not reply:
            raise GenerationError(GenerationErrorKind.EMPTY_RESPONSE)

        memory = self.memory.append(memory, message, reply, self.clock())

        compacted = False
        if self.compactor.needs_compaction(memory):
            try:
                memory = await self.compactor.compact(npc.name, memory)
                compacted = True
            except CompactionError as exc:
                # Old context is dropped rather than failing the turn.
                logger.warning("compaction_failed", npc_id=npc_id, error=exc.message)
                memory = self.compactor.truncate(memory)

        await self.memory.persist(npc_id, memory)

        logger.info(
            "turn_completed",
            npc_id=npc_id,
            recent_messages=len(memory.recent_messages),
            compacted=compacted,
        )
        return TurnResult(reply=reply, npc_name=npc.name, memory=memory, compacted=compacted)


chat_service = ChatService(llm_service, locks=build_turn_locks())

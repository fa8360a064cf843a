"""Compactor - folds the oldest chat messages into the NPC's running summary."""

import structlog

from gm_assistant.config import settings
from gm_assistant.core.errors import CompactionError, GenerationError
from gm_assistant.schemas.chat import ChatMessage, ConversationMemory
from gm_assistant.services.llm_service import TextGenerator
from gm_assistant.services.prompt_builder import build_summary_prompt, load_prompts

logger = structlog.get_logger(__name__)


class Compactor:
    """Keeps the recent buffer bounded.

    Once the buffer grows past ``threshold`` messages, everything except the
    newest ``max_recent`` is summarized together with the previous summary,
    and the new summary replaces the old one.
    """

    def __init__(
        self,
        llm: TextGenerator,
        max_recent: int | None = None,
        threshold: int | None = None,
    ):
        self.llm = llm
        self.max_recent = max_recent or settings.MAX_RECENT_MESSAGES
        self.threshold = threshold or settings.SUMMARIZE_THRESHOLD
        if self.threshold <= self.max_recent:
            raise ValueError("threshold must be greater than max_recent")
        self._params = load_prompts().get("summary_model_params", {})

    def needs_compaction(self, memory: ConversationMemory) -> bool:
        return len(memory.recent_messages) > self.threshold

    def partition(
        self, memory: ConversationMemory
    ) -> tuple[list[ChatMessage], list[ChatMessage]]:
        """Split into (to_summarize, to_keep); to_keep is the newest max_recent."""
        messages = memory.recent_messages
        return messages[:-self.max_recent], messages[-self.max_recent:]

    def truncate(self, memory: ConversationMemory) -> ConversationMemory:
        """Lossy fallback: drop everything but the newest max_recent, keep the summary."""
        _, to_keep = self.partition(memory)
        return ConversationMemory(memory_summary=memory.memory_summary, recent_messages=to_keep)

    async def compact(self, npc_name: str, memory: ConversationMemory) -> ConversationMemory:
        """Summarize the older messages; raises ``CompactionError`` if that fails."""
        to_summarize, to_keep = self.partition(memory)
        if not to_summarize:
            return memory

        prompt = build_summary_prompt(npc_name, memory.memory_summary, to_summarize)
        try:
            summary = await self.llm.generate(prompt, **self._params)
        except GenerationError as exc:
            raise CompactionError(f"Summarization failed: {exc.message}") from exc

        summary = (summary or "").strip()
        if not summary:
            raise CompactionError("Summarization returned an empty summary")

        logger.info(
            "memory_compacted",
            npc_name=npc_name,
            summarized=len(to_summarize),
            kept=len(to_keep),
        )
        return ConversationMemory(memory_summary=summary, recent_messages=to_keep)

"""Tests for the compactor - partitioning, summarization and the truncation fallback."""

import pytest

from gm_assistant.core.errors import CompactionError, GenerationError, GenerationErrorKind
from gm_assistant.schemas.chat import ChatMessage, ConversationMemory
from gm_assistant.services.compactor import Compactor


def _memory(count: int, summary: str = "") -> ConversationMemory:
    messages = [
        ChatMessage(role="player" if i % 2 == 0 else "npc", content=f"m{i}", timestamp=i)
        for i in range(count)
    ]
    return ConversationMemory(memory_summary=summary, recent_messages=messages)


def test_threshold_must_exceed_max_recent(fake_llm):
    with pytest.raises(ValueError):
        Compactor(fake_llm, max_recent=5, threshold=5)


def test_defaults_come_from_settings(fake_llm):
    compactor = Compactor(fake_llm)
    assert compactor.max_recent == 20
    assert compactor.threshold == 30


def test_needs_compaction_only_above_threshold(fake_llm):
    compactor = Compactor(fake_llm, max_recent=4, threshold=6)
    assert not compactor.needs_compaction(_memory(0))
    assert not compactor.needs_compaction(_memory(6))
    assert compactor.needs_compaction(_memory(7))


def test_partition(fake_llm):
    compactor = Compactor(fake_llm, max_recent=4, threshold=6)
    to_summarize, to_keep = compactor.partition(_memory(7))
    assert [m.content for m in to_summarize] == ["m0", "m1", "m2"]
    assert [m.content for m in to_keep] == ["m3", "m4", "m5", "m6"]


async def test_compact_replaces_summary_and_keeps_newest(fake_llm):
    fake_llm.summary = "  Neue Zusammenfassung.  "
    compactor = Compactor(fake_llm, max_recent=4, threshold=6)

    result = await compactor.compact("Elira", _memory(8, summary="Alte Zusammenfassung."))

    assert result.memory_summary == "Neue Zusammenfassung."
    assert [m.content for m in result.recent_messages] == ["m4", "m5", "m6", "m7"]
    prompt = fake_llm.summary_prompts[0]
    assert "BISHERIGE ERINNERUNGEN:\nAlte Zusammenfassung." in prompt
    assert "Spieler: m0\nElira: m1\nSpieler: m2\nElira: m3" in prompt
    assert "m4" not in prompt


async def test_compact_with_nothing_to_summarize_is_a_no_op(fake_llm):
    compactor = Compactor(fake_llm, max_recent=4, threshold=6)
    memory = _memory(3, summary="S")

    assert await compactor.compact("Elira", memory) is memory
    assert fake_llm.summary_prompts == []


async def test_compact_generation_failure(fake_llm):
    fake_llm.summary_error = GenerationError(GenerationErrorKind.QUOTA_EXHAUSTED)
    compactor = Compactor(fake_llm, max_recent=4, threshold=6)

    with pytest.raises(CompactionError) as exc_info:
        await compactor.compact("Elira", _memory(8))
    assert isinstance(exc_info.value.__cause__, GenerationError)


async def test_compact_empty_summary_is_a_failure(fake_llm):
    fake_llm.summary = "   "
    compactor = Compactor(fake_llm, max_recent=4, threshold=6)
    with pytest.raises(CompactionError):
        await compactor.compact("Elira", _memory(8))


def test_truncate_keeps_summary_and_newest(fake_llm):
    compactor = Compactor(fake_llm, max_recent=4, threshold=6)
    result = compactor.truncate(_memory(9, summary="S"))

    assert result.memory_summary == "S"
    assert [m.timestamp for m in result.recent_messages] == [5, 6, 7, 8]

"""Prompt builder - persona, turn and summarization prompts for NPC chat.

All functions here are pure: they read the packaged prompt YAML (cached) and
the values passed in, and never touch the database or the LLM.
"""

from collections.abc import Iterable
from functools import lru_cache
from pathlib import Path
from typing import Protocol

import yaml

from gm_assistant.schemas.chat import ChatMessage, ConversationMemory

PROMPT_FILE = Path(__file__).parent.parent / "data" / "prompts" / "npc_chat.yaml"


class PersonaSource(Protocol):
    """The NPC attributes the persona prompt reads (satisfied by the NPC model)."""
    name: str
    role: str
    personality: str
    appearance: str
    motivations: str
    danger_level: str
    combat_notes: str


@lru_cache(maxsize=1)
def load_prompts() -> dict:
    """Load the prompt texts and model params from the packaged YAML."""
    with open(PROMPT_FILE, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def build_persona_prompt(
    npc: PersonaSource,
    area_name: str,
    world_description: str | None,
    memory_summary: str = "",
) -> str:
    """Build the identity and instruction block for one NPC.

    ``memory_summary`` only toggles the instruction to use remembered events;
    the summary text itself is added by ``build_turn_prompt``.
    """
    prompts = load_prompts()

    instructions = [line.format(name=npc.name) for line in prompts["instructions"]]
    if memory_summary:
        instructions.insert(3, prompts["memory_instruction"])

    combat_notes = ""
    if npc.combat_notes:
        combat_notes = prompts["combat_notes_line"].format(combat_notes=npc.combat_notes)

    return prompts["persona_template"].format(
        name=npc.name,
        world_description=(world_description or "").strip() or prompts["default_world_description"],
        area_name=area_name,
        role=npc.role,
        personality=npc.personality,
        appearance=npc.appearance,
        motivations=npc.motivations,
        danger_level=npc.danger_level,
        combat_notes=combat_notes,
        instructions="\n".join(f"- {line}" for line in instructions),
    )


def render_transcript(messages: Iterable[ChatMessage], npc_name: str) -> str:
    """Render messages as alternating ``Speaker: text`` lines."""
    player_label = load_prompts()["player_label"]
    return "\n".join(
        f"{player_label if m.role == 'player' else npc_name}: {m.content}"
        for m in messages
    )


def build_turn_prompt(
    persona: str,
    memory: ConversationMemory,
    npc_name: str,
    player_message: str,
) -> str:
    """Concatenate persona, memory, recent turns and the new message, cueing the NPC."""
    prompts = load_prompts()
    sections = [persona]

    if memory.memory_summary:
        sections.append(f"{prompts['memory_heading']}\n{memory.memory_summary}")

    transcript = render_transcript(memory.recent_messages, npc_name)
    if transcript:
        sections.append(f"{prompts['recent_heading']}\n{transcript}")

    sections.append(f"{prompts['player_label']}: {player_message}")
    sections.append(f"{npc_name}:")
    return "\n\n".join(sections)


def build_summary_prompt(
    npc_name: str,
    previous_summary: str,
    messages: Iterable[ChatMessage],
) -> str:
    """Prompt asking for an updated 2-4 sentence summary that supersedes the old one."""
    prompts = load_prompts()
    previous = ""
    if previous_summary:
        previous = prompts["previous_summary_block"].format(summary=previous_summary)
    return prompts["summary_template"].format(
        name=npc_name,
        previous_summary=previous,
        transcript=render_transcript(messages, npc_name),
    )


def clean_reply(raw: str | None, npc_name: str) -> str:
    """Trim the reply and strip at most one leading ``"<npc_name>:"``.

    Completion-style models often echo the speaker cue. Only the exact
    name followed by a colon is removed, so in-character lines that merely
    start with the name (``"Elira kennt den Weg."``) are left alone.
    """
    text = (raw or "").strip()
    prefix = f"{npc_name}:"
    if npc_name and text.startswith(prefix):
        text = text[len(prefix):].strip()
    return text

"""Tests for the prompt builder - persona, turn and summary prompts, reply cleanup."""

from types import SimpleNamespace

from gm_assistant.schemas.chat import ChatMessage, ConversationMemory
from gm_assistant.services.prompt_builder import (
    build_persona_prompt,
    build_summary_prompt,
    build_turn_prompt,
    clean_reply,
    render_transcript,
)


def _npc(**overrides):
    data = dict(
        name="Borin",
        role="Schmied",
        personality="Mürrisch",
        appearance="Rußige Schürze",
        motivations="Will seine Schmiede behalten",
        danger_level="potenziell gefährlich",
        combat_notes="",
    )
    data.update(overrides)
    return SimpleNamespace(**data)


def _messages():
    return [
        ChatMessage(role="player", content="Guten Tag", timestamp=1),
        ChatMessage(role="npc", content="Was willst du?", timestamp=2),
    ]


def test_persona_contains_identity_and_instructions():
    prompt = build_persona_prompt(_npc(), "Stadt", "Ein düsteres Königreich.")

    assert prompt.startswith("Du bist Borin")
    for expected in [
        "Ein düsteres Königreich.",
        "Stadt",
        "Schmied",
        "Mürrisch",
        "Rußige Schürze",
        "Will seine Schmiede behalten",
        "potenziell gefährlich",
        "- Sprich als Borin, nicht als Erzähler.",
        "- Bleib konsequent in der Rolle dieses NPCs.",
    ]:
        assert expected in prompt
    assert "Kampfnotizen" not in prompt


def test_persona_default_world_description():
    assert "Eine klassische Fantasywelt" in build_persona_prompt(_npc(), "Stadt", None)
    assert "Eine klassische Fantasywelt" in build_persona_prompt(_npc(), "Stadt", "   ")


def test_persona_combat_notes_line():
    prompt = build_persona_prompt(_npc(combat_notes="Kämpft mit Hammer"), "Stadt", "")
    assert "potenziell gefährlich\nKampfnotizen: Kämpft mit Hammer" in prompt


def test_persona_memory_instruction_only_with_summary():
    without = build_persona_prompt(_npc(), "Stadt", "")
    with_summary = build_persona_prompt(_npc(), "Stadt", "", memory_summary="Kennt den Spieler.")

    assert "Erinnerungszusammenfassung" not in without
    assert "Erinnerungszusammenfassung" in with_summary
    # The summary text itself is not part of the persona block
    assert "Kennt den Spieler." not in with_summary


def test_persona_is_deterministic():
    npc = _npc()
    assert build_persona_prompt(npc, "Stadt", "W", "S") == build_persona_prompt(npc, "Stadt", "W", "S")


def test_render_transcript():
    assert render_transcript(_messages(), "Borin") == "Spieler: Guten Tag\nBorin: Was willst du?"
    assert render_transcript([], "Borin") == ""


def test_turn_prompt_for_empty_memory():
    prompt = build_turn_prompt("PERSONA", ConversationMemory(), "Borin", "Hallo")
    assert prompt == "PERSONA\n\nSpieler: Hallo\n\nBorin:"


def test_turn_prompt_with_summary_and_history():
    memory = ConversationMemory(memory_summary="Der Spieler schuldet Borin Geld.", recent_messages=_messages())
    prompt = build_turn_prompt("PERSONA", memory, "Borin", "Hier ist dein Gold.")

    assert prompt == (
        "PERSONA\n\n"
        "ERINNERUNGSZUSAMMENFASSUNG (was bisher geschah):\nDer Spieler schuldet Borin Geld.\n\n"
        "LETZTE NACHRICHTEN:\nSpieler: Guten Tag\nBorin: Was willst du?\n\n"
        "Spieler: Hier ist dein Gold.\n\n"
        "Borin:"
    )


def test_summary_prompt_with_and_without_previous_summary():
    first = build_summary_prompt("Borin", "", _messages())
    assert "BISHERIGE ERINNERUNGEN" not in first
    assert "NEUE NACHRICHTEN ZUM ZUSAMMENFASSEN:\nSpieler: Guten Tag\nBorin: Was willst du?" in first
    assert '"Borin"' in first
    assert "2-4 Sätze" in first

    second = build_summary_prompt("Borin", "Borin kennt den Spieler.", _messages())
    assert "BISHERIGE ERINNERUNGEN:\nBorin kennt den Spieler." in second


def test_clean_reply_strips_one_name_prefix():
    assert clean_reply("Elira: Grüße, Reisender.", "Elira") == "Grüße, Reisender."
    assert clean_reply("  \nElira:   Grüße.  ", "Elira") == "Grüße."
    assert clean_reply("Elira: Elira: doppelt", "Elira") == "Elira: doppelt"


def test_clean_reply_keeps_dialogue_starting_with_the_name():
    assert clean_reply("Elira kennt den Weg.", "Elira") == "Elira kennt den Weg."
    assert clean_reply("Eliras Schwester ist fort.", "Elira") == "Eliras Schwester ist fort."
    assert clean_reply("Bram: Hallo", "Elira") == "Bram: Hallo"


def test_clean_reply_empty():
    assert clean_reply(None, "Elira") == ""
    assert clean_reply("   ", "Elira") == ""

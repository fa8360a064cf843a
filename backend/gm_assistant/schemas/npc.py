"""NPC-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gm_assistant.schemas.chat import ConversationMemory

DangerLevel = Literal["harmlos", "unterstützend", "potenziell gefährlich", "sehr gefährlich"]
Voice = Literal["male_epic", "female_epic"]


class NPCBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, max_length=200)
    area: str = ""
    role: str = ""
    summary: str = ""
    appearance: str = ""
    personality: str = ""
    motivations: str = ""
    hooks: list[str] = Field(default_factory=list)
    danger_level: DangerLevel = Field(default="harmlos", alias="dangerLevel")
    combat_notes: str = Field(default="", alias="combatNotes")
    voice: Voice | None = None


class NPCCreate(NPCBase):
    id: str = Field(min_length=1, max_length=64)


class NPCUpdate(BaseModel):
    """Partial update. The conversation memory is not writable here."""
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, min_length=1, max_length=200)
    area: str | None = None
    role: str | None = None
    summary: str | None = None
    appearance: str | None = None
    personality: str | None = None
    motivations: str | None = None
    hooks: list[str] | None = None
    danger_level: DangerLevel | None = Field(default=None, alias="dangerLevel")
    combat_notes: str | None = Field(default=None, alias="combatNotes")
    voice: Voice | None = None  # null clears the preference

    @field_validator(
        "name", "area", "role", "summary", "appearance", "personality",
        "motivations", "hooks", "danger_level", "combat_notes",
        mode="before",
    )
    @classmethod
    def _not_null(cls, value):
        # Omit a field to leave it unchanged; these columns cannot be cleared.
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class NPCState(NPCBase):
    id: str
    chat_state: ConversationMemory | None = Field(default=None, alias="chatState")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

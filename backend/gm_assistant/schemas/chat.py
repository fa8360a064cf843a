"""Chat-related Pydantic schemas, including the per-NPC conversation memory."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ChatMessage(BaseModel):
    """A single message in an NPC conversation. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    role: Literal["player", "npc"]
    content: str
    timestamp: int  # milliseconds

    @field_validator("role", mode="before")
    @classmethod
    def _legacy_role(cls, value):
        # Older stored conversations used "user" for the player side
        return "player" if value == "user" else value


class ConversationMemory(BaseModel):
    """Running summary plus the verbatim tail of an NPC conversation (oldest first)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    memory_summary: str = ""
    recent_messages: list[ChatMessage] = Field(default_factory=list)

    def to_chat_state(self) -> dict:
        """Serialize to the stored/wire form with camelCase keys."""
        return self.model_dump(by_alias=True)


class ChatTurnRequest(BaseModel):
    """One player message for an NPC. Blank fields are rejected by the chat service."""
    model_config = ConfigDict(populate_by_name=True)

    npc_id: str | None = Field(default=None, alias="npcId")
    message: str | None = None


class ChatTurnResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    response: str
    npc_name: str = Field(alias="npcName")

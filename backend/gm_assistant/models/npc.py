"""NPC model - campaign NPCs and their embedded conversation memory."""

from datetime import datetime
from typing import get_args

from sqlalchemy import String, Text, DateTime, JSON, func
from sqlalchemy.orm import Mapped, mapped_column

from gm_assistant.db.database import Base
from gm_assistant.schemas.npc import DangerLevel

DANGER_LEVELS = get_args(DangerLevel)


class NPC(Base):
    __tablename__ = "npcs"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    area: Mapped[str] = mapped_column(String(64), default="")  # area id, not a foreign key

    # Identity attributes used by the persona prompt
    role: Mapped[str] = mapped_column(Text, default="")
    summary: Mapped[str] = mapped_column(Text, default="")
    appearance: Mapped[str] = mapped_column(Text, default="")
    personality: Mapped[str] = mapped_column(Text, default="")
    motivations: Mapped[str] = mapped_column(Text, default="")
    hooks: Mapped[list] = mapped_column(JSON, default=list)
    danger_level: Mapped[str] = mapped_column(String(50), default=DANGER_LEVELS[0])
    combat_notes: Mapped[str] = mapped_column(Text, default="")

    # Stored for the TTS frontend only
    voice: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Conversation memory, absent until the first chat turn:
    # {"memorySummary": "...", "recentMessages": [{"role", "content", "timestamp"}]}
    chat_state: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

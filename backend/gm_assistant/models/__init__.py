"""Database models package."""

from gm_assistant.models.npc import NPC
from gm_assistant.models.area import Area
from gm_assistant.models.world import WorldSettings

__all__ = ["NPC", "Area", "WorldSettings"]

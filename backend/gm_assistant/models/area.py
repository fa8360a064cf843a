"""Area model - locations NPCs are placed in."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from gm_assistant.db.database import Base

# Seeded on first start
DEFAULT_AREAS = [
    {"id": "cave", "name": "Höhle", "icon": "🕳️"},
    {"id": "forest", "name": "Wald", "icon": "🌲"},
    {"id": "mountains", "name": "Gebirge", "icon": "⛰️"},
    {"id": "lake", "name": "See", "icon": "🌊"},
    {"id": "city", "name": "Stadt", "icon": "🏰"},
]


class Area(Base):
    __tablename__ = "areas"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    icon: Mapped[str] = mapped_column(String(16), default="")

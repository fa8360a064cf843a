"""World settings model - a single row holding the campaign's world description."""

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from gm_assistant.db.database import Base

WORLD_ROW_ID = 1


class WorldSettings(Base):
    __tablename__ = "world_settings"

    id: Mapped[int] = mapped_column(primary_key=True)
    description: Mapped[str] = mapped_column(Text, default="")

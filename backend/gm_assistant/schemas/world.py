"""World description schema."""

from pydantic import BaseModel, ConfigDict, Field


class WorldDescription(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    world_description: str = Field(default="", alias="worldDescription")

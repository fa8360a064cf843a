"""Area-related Pydantic schemas."""

from pydantic import BaseModel, Field, field_validator


class AreaCreate(BaseModel):
    id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=200)
    icon: str = ""


class AreaUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    icon: str | None = None

    @field_validator("name", "icon", mode="before")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class AreaOut(BaseModel):
    id: str
    name: str
    icon: str

    model_config = {"from_attributes": True}

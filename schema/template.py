from pydantic import Field, field_validator

from schema.base import CamelModel


class CreateTemplateRequest(CamelModel):
    title: str = Field(min_length=1)
    type: str = "custom"
    content: str | None = None


class UpdateTemplateRequest(CamelModel):
    title: str | None = Field(default=None, min_length=1)
    type: str | None = None
    content: str | None = None

    @field_validator("title", "type")
    @classmethod
    def not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

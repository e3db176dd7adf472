from pydantic import Field, field_validator

from schema.base import CamelModel


class CreateUserRequest(CamelModel):
    email: str = Field(min_length=1)
    name: str | None = None


class UpdateUserRequest(CamelModel):
    email: str | None = Field(default=None, min_length=1)
    name: str | None = None

    @field_validator("email")
    @classmethod
    def email_not_null(cls, v):
        if v is None:
            raise ValueError("email cannot be null")
        return v

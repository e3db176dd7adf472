from typing import Literal

from pydantic import Field, field_validator

from schema.base import CamelModel


class CreateSessionRequest(CamelModel):
    patient_id: str = Field(min_length=1)
    patient_name: str | None = None


class UpdateSessionRequest(CamelModel):
    patient_name: str | None = None
    status: Literal["in_progress", "completed"] | None = None
    end_time: str | None = None
    template_id: str | None = None
    model: str | None = None
    session_title: str | None = None
    session_summary: str | None = None
    transcript_status: str | None = None
    transcript: str | None = None
    duration: str | None = None

    @field_validator("status")
    @classmethod
    def status_not_null(cls, v):
        if v is None:
            raise ValueError("status cannot be null")
        return v

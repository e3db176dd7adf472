from pydantic import Field, field_validator

from schema.base import CamelModel


class PatientDetails(CamelModel):
    pronouns: str | None = None
    email: str | None = None
    background: str | None = None
    medical_history: str | None = None
    family_history: str | None = None
    social_history: str | None = None
    previous_treatment: str | None = None


class CreatePatientRequest(PatientDetails):
    name: str = Field(min_length=1)


class UpdatePatientRequest(PatientDetails):
    name: str | None = Field(default=None, min_length=1)

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v):
        if v is None:
            raise ValueError("name cannot be null")
        return v

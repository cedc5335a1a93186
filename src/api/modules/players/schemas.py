from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from api.db.enums import PlayerRole


def _clean_name(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError("Player name cannot be empty.")
    return cleaned


class PlayerCreateRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Alice",
                "role": "forward",
                "is_present": True,
            }
        }
    )

    name: str = Field(min_length=1, max_length=32)
    role: PlayerRole = PlayerRole.ALL_ROUND
    is_present: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _clean_name(value)


class PlayerUpdateRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Alice B.",
                "role": "defender",
                "is_present": None,
            }
        }
    )

    name: str | None = Field(default=None, min_length=1, max_length=32)
    role: PlayerRole | None = None
    is_present: bool | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str | None) -> str | None:
        return _clean_name(value) if value is not None else None

    @model_validator(mode="after")
    def validate_has_changes(self) -> PlayerUpdateRequest:
        if self.name is None and self.role is None and self.is_present is None:
            raise ValueError("At least one field must be provided.")
        return self


class PlayerPresenceRequest(BaseModel):
    is_present: bool


class PlayerResponse(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "5f6e8d34-292d-434f-a8ff-f48f4f3040f9",
                "name": "Alice",
                "role": "forward",
                "is_present": True,
                "created_at": "2024-05-02T20:20:10.000000",
                "updated_at": "2024-05-02T20:20:10.000000",
            }
        },
    )

    id: UUID
    name: str
    role: PlayerRole
    is_present: bool
    created_at: datetime
    updated_at: datetime


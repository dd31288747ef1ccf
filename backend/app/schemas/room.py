"""Room Schemas — request/response models for rooms, users and votes.

Invariants:
    - Names are stripped and must be non-empty after stripping
    - Vote payloads in responses are already sanitized dicts (no card fields pre-reveal)

Design Decisions:
    - from_attributes: responses are built straight from ORM rows
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _strip_non_empty(value: str, field_name: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{field_name} cannot be empty or whitespace")
    return value


class RoomCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    voting_categorized: bool = True
    auto_complete_voting: bool = False

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_non_empty(v, "name")


class RoomResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    voting_categorized: bool
    auto_complete_voting: bool
    room_type: str
    is_game_over: bool
    created_at: int
    last_activity_at: int


class UserJoin(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    is_spectator: bool = False

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_non_empty(v, "name")


class UserUpdate(BaseModel):
    """Partial edit — omitted fields are left unchanged."""
    name: str | None = Field(None, min_length=1, max_length=100)
    is_spectator: bool | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        return _strip_non_empty(v, "name") if v is not None else v


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    room_id: UUID
    name: str
    is_spectator: bool
    joined_at: int


class VoteCast(BaseModel):
    card_label: str = Field(min_length=1, max_length=20)
    card_value: float | None = None
    card_icon: str | None = Field(None, max_length=50)


class RoomSnapshot(BaseModel):
    """The polled room read model."""
    room: RoomResponse
    users: list[UserResponse]
    votes: list[dict]


class NameTakenResponse(BaseModel):
    name: str
    taken: bool

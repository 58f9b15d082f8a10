from typing import Optional

from pydantic import BaseModel, Field, field_validator

from api.db.models import Playlist, User


class PlaylistCreate(BaseModel):
    name: str = Field(..., max_length=100)
    description: Optional[str] = Field(default="", max_length=500)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError('Playlist name is required')
        return v.strip()

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        return v.strip() if v else ""


class PlaylistUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Playlist name cannot be empty')
        return v.strip() if v is not None else None

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        return v.strip() if v is not None else None


def playlist_payload(playlist: Playlist, owner: Optional[User] = None, **extra) -> dict:
    data = playlist.model_dump()
    data["owner"] = owner.public_profile() if owner else None
    data.update(extra)
    return data

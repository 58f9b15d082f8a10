from typing import Optional

from pydantic import BaseModel, Field, field_validator

from api.db.models import User, Video

SORTABLE_FIELDS = {
    "created_at": Video.created_at,
    "views": Video.views,
    "duration": Video.duration,
    "title": Video.title,
}


class VideoUpdate(BaseModel):
    """Editable text fields of a video. Empty strings count as not supplied."""
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=5000)

    @field_validator('title', 'description')
    @classmethod
    def strip_blank(cls, v):
        if v is None:
            return None
        return v.strip() or None


def video_payload(video: Video, owner: Optional[User] = None) -> dict:
    data = video.model_dump()
    data["owner"] = owner.public_profile() if owner else None
    return data

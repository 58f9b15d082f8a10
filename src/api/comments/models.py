from typing import Optional

from pydantic import BaseModel, Field, field_validator

from api.db.models import Comment, User


class CommentContent(BaseModel):
    content: str = Field(..., max_length=1000)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        if not v or not v.strip():
            raise ValueError('Comment content is required')
        return v.strip()


def comment_payload(comment: Comment, owner: Optional[User] = None) -> dict:
    data = comment.model_dump()
    data["owner"] = owner.public_profile() if owner else None
    return data

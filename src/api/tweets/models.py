from typing import Optional

from pydantic import BaseModel, Field, field_validator

from api.db.models import Tweet, User


class TweetContent(BaseModel):
    content: str = Field(..., max_length=280)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        if not v or not v.strip():
            raise ValueError('Tweet content is required')
        return v.strip()


def tweet_payload(tweet: Tweet, owner: Optional[User] = None) -> dict:
    data = tweet.model_dump()
    data["owner"] = owner.public_profile() if owner else None
    return data

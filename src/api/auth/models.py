from typing import Optional

from pydantic import BaseModel, Field, field_validator
import re

USERNAME_PATTERN = re.compile(r'^[a-zA-Z0-9_-]+$')
EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


def normalize_username(value: str) -> str:
    """Usernames are matched case-insensitively and stored lowercase."""
    username = value.strip()
    if not username:
        raise ValueError('Username cannot be empty')
    return username.lower()


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=8)
    full_name: Optional[str] = Field(default="", max_length=100)
    avatar: Optional[str] = Field(default=None, max_length=500)

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        username = normalize_username(v)
        if not USERNAME_PATTERN.match(username):
            raise ValueError('Username can only contain letters, numbers, hyphens, and underscores')
        return username

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        email = v.strip().lower()
        if not EMAIL_PATTERN.match(email):
            raise ValueError('Invalid email format')
        return email

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        missing = [
            label for pattern, label in (
                (r'[A-Z]', 'one uppercase letter'),
                (r'[a-z]', 'one lowercase letter'),
                (r'\d', 'one number'),
            )
            if not re.search(pattern, v)
        ]
        if missing:
            raise ValueError(f"Password must contain at least {', '.join(missing)}")
        return v

    @field_validator('full_name', 'avatar')
    @classmethod
    def strip_profile_text(cls, v):
        return v.strip() if v else v


class UserLogin(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=8)

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        return normalize_username(v)

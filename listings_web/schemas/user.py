"""User request schemas - signup validation."""

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    # bcrypt accepts max 72 bytes; longer passwords fail in the hasher.
    password: str = Field(..., min_length=1, max_length=72)

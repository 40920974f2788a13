from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str
    full_name: Optional[str] = Field(None, max_length=200)

    @field_validator("password")
    @classmethod
    def validate_password_policy(cls, v: str):
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters long.")
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password must not exceed 72 bytes.")
        if not any(c.isdigit() for c in v):
            raise ValueError("Password must contain a digit.")
        if not any(c.isupper() for c in v):
            raise ValueError("Password must contain an upper-case letter.")
        if not any(c.islower() for c in v):
            raise ValueError("Password must contain a lower-case letter.")
        if all(c.isalnum() for c in v):
            raise ValueError("Password must contain a non-alphanumeric character.")
        return v

class LoginRequest(BaseModel):
    username: str
    password: str

class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)

class User(BaseModel):
    id: int
    username: str
    email: EmailStr
    full_name: Optional[str] = None
    role: str

    class Config:
        from_attributes = True

class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: datetime

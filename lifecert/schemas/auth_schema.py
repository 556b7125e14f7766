from pydantic import BaseModel, Field, EmailStr
from datetime import date
from typing import Optional

from lifecert.core.config import settings

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class TokenPayload(BaseModel):
    sub: Optional[str] = None
    jti: Optional[str] = None
    exp: Optional[int] = None

class UserCreate(BaseModel):
    """Self-registration form. Any ``role`` sent by the client is ignored."""
    email: EmailStr
    password: str = Field(..., min_length=settings.MIN_PASSWORD_LENGTH)
    full_name: str = Field(..., min_length=1, max_length=100)
    pension_number: str = Field(..., min_length=1, max_length=50)
    phone_number: str = Field(..., min_length=1, max_length=20)
    address: str = Field(..., min_length=1)
    date_of_birth: date

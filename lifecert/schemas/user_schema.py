from pydantic import BaseModel
from datetime import date, datetime
from typing import Literal, Optional
from uuid import UUID

class UserOut(BaseModel):
    id: UUID
    email: str
    full_name: str
    pension_number: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    role: Literal["pensioner", "admin"]
    created_at: datetime

    model_config = {
        "from_attributes": True
    }

from pydantic import BaseModel
from typing import Optional
from app.models.user import UserRole

class UserOut(BaseModel):
    user_id: int
    nickname: str
    email: Optional[str] = None
    role: UserRole

    class Config:
        from_attributes = True

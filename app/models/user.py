from sqlalchemy import String, Integer, DateTime, Enum
from sqlalchemy.orm import Mapped, mapped_column
from app.core.database import Base, utcnow
from datetime import datetime
from typing import Optional
import enum

class UserRole(str, enum.Enum):
    VISITOR = "visitor"
    ARTIST = "artist"
    ADMIN = "admin"

USERROLE_ENUM = Enum(
    UserRole,
    name="user_role",
    native_enum=True,
    values_callable=lambda enum_cls: [e.value for e in enum_cls],
)

class User(Base):
    __tablename__ = "users"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nickname: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[UserRole] = mapped_column(USERROLE_ENUM, default=UserRole.VISITOR, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __init__(self, nickname: str, email: Optional[str] = None, role: UserRole = UserRole.VISITOR):
        self.nickname = nickname
        self.email = email
        self.role = role
        self.created_at = utcnow()

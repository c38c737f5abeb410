from sqlalchemy import String, Integer, DateTime, Enum, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from app.core.database import Base, utcnow
from datetime import datetime
from typing import Optional
import enum

class MediaType(str, enum.Enum):
    IMAGE = "image"
    GIF = "gif"
    VIDEO = "video"

MEDIATYPE_ENUM = Enum(
    MediaType,
    name="media_type",
    native_enum=True,
    values_callable=lambda enum_cls: [e.value for e in enum_cls],
)

class Media(Base):
    __tablename__ = "media"

    media_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    artwork_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("artworks.artwork_id", ondelete="CASCADE"), nullable=True, index=True
    )
    media_type: Mapped[MediaType] = mapped_column(MEDIATYPE_ENUM, nullable=False)
    file_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __init__(self, user_id: int, media_type: MediaType, file_url: str, artwork_id: Optional[int] = None):
        self.user_id = user_id
        self.media_type = media_type
        self.file_url = file_url
        self.artwork_id = artwork_id
        self.created_at = utcnow()

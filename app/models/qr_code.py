from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey, Index, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column
from app.core.database import Base, utcnow
from datetime import datetime
from typing import Optional
import uuid

class QrCode(Base):
    """A QR token issued for an artwork.

    Lifecycle is one-way: a code is created active and can only be
    deactivated. At most one active row exists per artwork, enforced by the
    partial unique index below.
    """

    __tablename__ = "qr_codes"
    __table_args__ = (
        Index(
            "qr_codes_active_artwork_uk",
            "artwork_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    qr_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    artwork_id: Mapped[int] = mapped_column(
        ForeignKey("artworks.artwork_id", ondelete="CASCADE"), nullable=False, index=True
    )
    qr_token: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, unique=True)
    qr_image_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __init__(self, artwork_id: int, qr_token: uuid.UUID, qr_image_url: Optional[str] = None):
        self.artwork_id = artwork_id
        self.qr_token = qr_token
        self.qr_image_url = qr_image_url
        self.is_active = True
        self.created_at = self.updated_at = utcnow()

    def deactivate(self):
        self.is_active = False
        self.updated_at = utcnow()

    def attach_image(self, qr_image_url: str):
        self.qr_image_url = qr_image_url
        self.updated_at = utcnow()

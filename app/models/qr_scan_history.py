from sqlalchemy import Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from app.core.database import Base, utcnow
from datetime import datetime
from typing import Optional

class QrScanHistory(Base):
    __tablename__ = "qr_scan_history"

    scan_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    qr_id: Mapped[int] = mapped_column(
        ForeignKey("qr_codes.qr_id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True
    )
    scanned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __init__(self, qr_id: int, user_id: Optional[int] = None):
        self.qr_id = qr_id
        self.user_id = user_id
        self.scanned_at = utcnow()

import uuid
from typing import List, Optional

from sqlalchemy import select, update, exists
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import utcnow
from app.models.qr_code import QrCode
from app.models.qr_scan_history import QrScanHistory


class QrCodeStore:
    """Persistence for QR codes.

    Methods flush but never commit; the calling service owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def save(self, qr_code: QrCode) -> QrCode:
        self.db.add(qr_code)
        await self.db.flush()
        return qr_code

    async def find_by_token(self, qr_token: uuid.UUID) -> Optional[QrCode]:
        return await self.db.scalar(select(QrCode).where(QrCode.qr_token == qr_token))

    async def exists_by_token(self, qr_token: uuid.UUID) -> bool:
        return bool(await self.db.scalar(select(exists().where(QrCode.qr_token == qr_token))))

    async def find_active_by_artwork(self, artwork_id: int) -> Optional[QrCode]:
        return await self.db.scalar(
            select(QrCode).where(QrCode.artwork_id == artwork_id, QrCode.is_active.is_(True))
        )

    async def list_by_artwork(self, artwork_id: int) -> List[QrCode]:
        result = await self.db.execute(
            select(QrCode)
            .where(QrCode.artwork_id == artwork_id)
            .order_by(QrCode.created_at.desc(), QrCode.qr_id.desc())
        )
        return list(result.scalars().all())

    async def disable(self, artwork_id: int) -> int:
        """Deactivate the artwork's active codes. Returns how many changed."""
        result = await self.db.execute(
            update(QrCode)
            .where(QrCode.artwork_id == artwork_id, QrCode.is_active.is_(True))
            .values(is_active=False, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def record_scan(self, qr_code: QrCode, user_id: Optional[int] = None) -> QrScanHistory:
        scan = QrScanHistory(qr_id=qr_code.qr_id, user_id=user_id)
        self.db.add(scan)
        await self.db.flush()
        return scan

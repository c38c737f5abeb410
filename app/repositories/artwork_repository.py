from typing import Optional

from sqlalchemy import select, delete, exists
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.artwork import Artwork, VisibilityType
from app.models.qr_code import QrCode
from app.models.qr_scan_history import QrScanHistory


class ArtworkRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, artwork_id: int, for_update: bool = False) -> Optional[Artwork]:
        stmt = select(Artwork).where(Artwork.artwork_id == artwork_id)
        if for_update:
            stmt = stmt.with_for_update()
        return await self.db.scalar(stmt)

    async def exists_by_id(self, artwork_id: int) -> bool:
        return bool(await self.db.scalar(select(exists().where(Artwork.artwork_id == artwork_id))))

    async def get_visibility(self, artwork_id: int) -> Optional[VisibilityType]:
        return await self.db.scalar(select(Artwork.visibility).where(Artwork.artwork_id == artwork_id))

    async def get_owner_id(self, artwork_id: int, for_update: bool = False) -> Optional[int]:
        stmt = select(Artwork.user_id).where(Artwork.artwork_id == artwork_id)
        if for_update:
            stmt = stmt.with_for_update()
        return await self.db.scalar(stmt)

    async def add(self, artwork: Artwork) -> Artwork:
        self.db.add(artwork)
        await self.db.flush()
        return artwork

    async def delete_cascade(self, artwork: Artwork):
        """Remove an artwork and every row that hangs off it.

        QR rows are deleted explicitly; media goes through the ORM cascade.
        """
        qr_ids = select(QrCode.qr_id).where(QrCode.artwork_id == artwork.artwork_id)
        await self.db.execute(
            delete(QrScanHistory)
            .where(QrScanHistory.qr_id.in_(qr_ids))
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(
            delete(QrCode)
            .where(QrCode.artwork_id == artwork.artwork_id)
            .execution_options(synchronize_session=False)
        )
        await self.db.delete(artwork)
        await self.db.flush()

import logging
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import atomic
from app.core.exceptions import ArtworkNotFound, QrNotFound
from app.models.artwork import VisibilityType
from app.repositories.artwork_repository import ArtworkRepository
from app.repositories.qr_code_store import QrCodeStore
from app.schemas.artwork import ArtworkProjection

logger = logging.getLogger(__name__)


class QrScanService:
    def __init__(self, db: AsyncSession, store: QrCodeStore, artworks: ArtworkRepository):
        self.db = db
        self.store = store
        self.artworks = artworks

    async def validate_and_resolve(
        self, qr_token: uuid.UUID, requester_id: Optional[int] = None
    ) -> ArtworkProjection:
        """Resolve a scanned token to the artwork it points at.

        Unknown tokens, disabled tokens and tokens of private artworks scanned
        by anyone but the owner all raise the same QrNotFound. The reason is
        only logged.
        """
        async with atomic(self.db):
            qr_code = await self.store.find_by_token(qr_token)
            if qr_code is None:
                logger.warning("QR scan rejected (unknown token) - %s", qr_token)
                raise QrNotFound()

            if not qr_code.is_active:
                logger.warning("QR scan rejected (inactive token) - %s", qr_token)
                raise QrNotFound()

            artwork_id = qr_code.artwork_id
            if not await self.artworks.exists_by_id(artwork_id):
                logger.error("QR %s points at missing artwork %s", qr_token, artwork_id)
                raise ArtworkNotFound()

            if await self.artworks.get_visibility(artwork_id) != VisibilityType.PUBLIC:
                owner_id = await self.artworks.get_owner_id(artwork_id)
                if requester_id is None or owner_id != requester_id:
                    logger.warning(
                        "QR scan rejected (private artwork %s) - %s, requester %s",
                        artwork_id, qr_token, requester_id,
                    )
                    raise QrNotFound()

            artwork = await self.artworks.get(artwork_id)
            projection = ArtworkProjection.from_artwork(artwork, qr_image_url=qr_code.qr_image_url)
            await self.store.record_scan(qr_code, requester_id)

        logger.info("QR scan resolved - token %s, artwork %s", qr_token, artwork_id)
        return projection

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import atomic, read_guard
from app.core.exceptions import ArtworkAccessDenied, ArtworkNotFound, StorageError
from app.models.artwork import Artwork, VisibilityType
from app.models.qr_code import QrCode
from app.repositories.artwork_repository import ArtworkRepository
from app.repositories.qr_code_store import QrCodeStore
from app.schemas.artwork import ArtworkCreate
from app.services.storage import ImageStorage

logger = logging.getLogger(__name__)


class ArtworkService:
    def __init__(
        self,
        db: AsyncSession,
        artworks: ArtworkRepository,
        store: QrCodeStore,
        storage: ImageStorage,
    ):
        self.db = db
        self.artworks = artworks
        self.store = store
        self.storage = storage

    async def create(self, owner_id: int, data: ArtworkCreate) -> Artwork:
        async with atomic(self.db):
            artwork = await self.artworks.add(
                Artwork(
                    user_id=owner_id,
                    title=data.title,
                    glb_url=data.glb_url,
                    description=data.description,
                    thumbnail_url=data.thumbnail_url,
                )
            )
        logger.info("Artwork %s created by user %s", artwork.artwork_id, owner_id)
        return artwork

    async def get_visible(self, artwork_id: int, requester_id: Optional[int]) -> Artwork:
        async with read_guard():
            artwork = await self.artworks.get(artwork_id)
        # Private artworks look absent to everyone but the owner
        if artwork is None or not (artwork.is_public() or artwork.is_owned_by(requester_id)):
            raise ArtworkNotFound()
        return artwork

    async def get_owned(self, artwork_id: int, user_id: int, for_update: bool = False) -> Artwork:
        async with read_guard():
            artwork = await self.artworks.get(artwork_id, for_update=for_update)
        if artwork is None:
            raise ArtworkNotFound()
        if not artwork.is_owned_by(user_id):
            raise ArtworkAccessDenied()
        return artwork

    async def qr_history(self, artwork_id: int, user_id: int) -> List[QrCode]:
        """All QR codes ever issued for an owned artwork, newest first."""
        await self.get_owned(artwork_id, user_id)
        async with read_guard():
            return await self.store.list_by_artwork(artwork_id)

    async def change_visibility(self, artwork_id: int, user_id: int, visibility: VisibilityType) -> Artwork:
        async with atomic(self.db):
            artwork = await self.get_owned(artwork_id, user_id, for_update=True)
            artwork.change_visibility(visibility)
        logger.info("Artwork %s visibility set to %s", artwork_id, visibility.value)
        return artwork

    async def delete(self, artwork_id: int, user_id: int):
        async with atomic(self.db):
            artwork = await self.get_owned(artwork_id, user_id, for_update=True)
            image_urls = [qr.qr_image_url for qr in await self.store.list_by_artwork(artwork_id)]
            await self.artworks.delete_cascade(artwork)
        logger.info("Artwork %s deleted with %d QR code(s)", artwork_id, len(image_urls))

        # Rows are gone; a leftover image file is harmless, so only log failures.
        for url in filter(None, image_urls):
            try:
                self.storage.delete(url)
            except StorageError as exc:
                logger.warning("Could not remove QR image %s: %s", url, exc)

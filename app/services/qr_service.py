import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import atomic
from app.core.exceptions import ArtworkNotFound, GenerationExhausted, StorageError
from app.models.qr_code import QrCode
from app.repositories.artwork_repository import ArtworkRepository
from app.repositories.qr_code_store import QrCodeStore
from app.services.qr_encoder import ImageFormat, QREncoder
from app.services.storage import ImageStorage, StorageContext
from app.services.token_generator import TokenGenerator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedQr:
    token: uuid.UUID
    image_url: str


class QrIssuanceService:
    """Issues QR codes for artworks, keeping one active code per artwork.

    The whole issuance (lock artwork, disable old code, insert new code,
    render and store the image) runs in a single transaction. If any step
    fails the transaction rolls back and the previous code stays active.
    """

    def __init__(
        self,
        db: AsyncSession,
        store: QrCodeStore,
        artworks: ArtworkRepository,
        encoder: QREncoder,
        storage: ImageStorage,
        token_generator: TokenGenerator,
        web_ar_base_url: str = settings.WEB_AR_BASE_URL,
        image_size: int = settings.QR_SIZE,
        image_format: str = settings.QR_FORMAT,
        max_attempts: int = settings.QR_TOKEN_MAX_ATTEMPTS,
    ):
        self.db = db
        self.store = store
        self.artworks = artworks
        self.encoder = encoder
        self.storage = storage
        self.token_generator = token_generator
        self.web_ar_base_url = web_ar_base_url.rstrip("/")
        self.image_size = image_size
        self.image_format = ImageFormat.parse(image_format)
        self.max_attempts = max_attempts

    def deep_link(self, qr_token: uuid.UUID) -> str:
        return f"{self.web_ar_base_url}/qr/{qr_token}"

    async def _generate_unique_token(self) -> uuid.UUID:
        for attempt in range(1, self.max_attempts + 1):
            token = self.token_generator.generate()
            if not await self.store.exists_by_token(token):
                return token
            logger.warning("QR token collision on attempt %d/%d", attempt, self.max_attempts)
        raise GenerationExhausted(f"No unique QR token after {self.max_attempts} attempts")

    def _discard_image(self, image_url: str):
        try:
            self.storage.delete(image_url)
        except StorageError as exc:
            logger.warning("Could not remove orphaned QR image %s: %s", image_url, exc)

    async def issue(self, artwork_id: int) -> IssuedQr:
        logger.info("QR issue requested - artwork %s", artwork_id)

        image_url = None
        try:
            async with atomic(self.db):
                # Locks the artwork row so concurrent issues for it serialize
                owner_id = await self.artworks.get_owner_id(artwork_id, for_update=True)
                if owner_id is None:
                    raise ArtworkNotFound(f"Artwork {artwork_id} not found")

                disabled = await self.store.disable(artwork_id)
                if disabled:
                    logger.info("Disabled %d active QR code(s) for artwork %s", disabled, artwork_id)

                token = await self._generate_unique_token()
                qr_code = await self.store.save(QrCode(artwork_id=artwork_id, qr_token=token))

                image = self.encoder.encode(self.deep_link(token), self.image_size, self.image_format)
                image_url = self.storage.store(
                    image,
                    f"{token}.{self.image_format.extension}",
                    StorageContext.for_qr_code(owner_id, artwork_id),
                    content_type=self.image_format.media_type,
                )
                qr_code.attach_image(image_url)
                await self.store.save(qr_code)
        except Exception:
            # The row never committed, so the stored image points at nothing
            if image_url:
                self._discard_image(image_url)
            raise

        logger.info("QR issued - artwork %s, token %s, image %s", artwork_id, token, image_url)
        return IssuedQr(token=token, image_url=image_url)

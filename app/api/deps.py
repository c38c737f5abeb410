from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.repositories.artwork_repository import ArtworkRepository
from app.repositories.qr_code_store import QrCodeStore
from app.services.artwork_service import ArtworkService
from app.services.qr_encoder import qr_encoder
from app.services.qr_scan_service import QrScanService
from app.services.qr_service import QrIssuanceService
from app.services.storage import ImageStorage, get_image_storage
from app.services.token_generator import token_generator


def get_artwork_service(
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
) -> ArtworkService:
    return ArtworkService(db, ArtworkRepository(db), QrCodeStore(db), storage)


def get_qr_issuance_service(
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
) -> QrIssuanceService:
    return QrIssuanceService(
        db,
        store=QrCodeStore(db),
        artworks=ArtworkRepository(db),
        encoder=qr_encoder,
        storage=storage,
        token_generator=token_generator,
    )


def get_qr_scan_service(db: AsyncSession = Depends(get_db)) -> QrScanService:
    return QrScanService(db, QrCodeStore(db), ArtworkRepository(db))

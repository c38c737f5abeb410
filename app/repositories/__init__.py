from app.repositories.artwork_repository import ArtworkRepository
from app.repositories.qr_code_store import QrCodeStore

__all__ = ["ArtworkRepository", "QrCodeStore"]

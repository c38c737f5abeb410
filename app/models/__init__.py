from app.models.user import User, UserRole
from app.models.artwork import Artwork, VisibilityType
from app.models.media import Media, MediaType
from app.models.qr_code import QrCode
from app.models.qr_scan_history import QrScanHistory

__all__ = [
    "User",
    "UserRole",
    "Artwork",
    "VisibilityType",
    "Media",
    "MediaType",
    "QrCode",
    "QrScanHistory",
]

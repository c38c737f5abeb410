from fastapi import APIRouter, Depends
from typing import List, Optional
import uuid
from app.api.deps import (
    get_artwork_service,
    get_qr_issuance_service,
    get_qr_scan_service,
)
from app.core.security import get_current_user, get_optional_user
from app.models.user import User
from app.schemas.artwork import ArtworkProjection
from app.schemas.qr import QRGenerate, QRGenerateResponse, QRCodeOut
from app.services.artwork_service import ArtworkService
from app.services.qr_scan_service import QrScanService
from app.services.qr_service import QrIssuanceService

router = APIRouter(prefix="/qr", tags=["QR Code"])

@router.post("/generate", response_model=QRGenerateResponse)
async def generate_qr(
    qr_data: QRGenerate,
    current_user: User = Depends(get_current_user),
    artworks: ArtworkService = Depends(get_artwork_service),
    issuance: QrIssuanceService = Depends(get_qr_issuance_service),
):
    await artworks.get_owned(qr_data.artwork_id, current_user.user_id)
    issued = await issuance.issue(qr_data.artwork_id)
    return QRGenerateResponse(qr_token=issued.token, qr_image_url=issued.image_url)

@router.get("/scan/{qr_token}", response_model=ArtworkProjection)
async def scan_qr(
    qr_token: uuid.UUID,
    current_user: Optional[User] = Depends(get_optional_user),
    scanner: QrScanService = Depends(get_qr_scan_service),
):
    requester_id = current_user.user_id if current_user else None
    return await scanner.validate_and_resolve(qr_token, requester_id=requester_id)

@router.get("/artworks/{artwork_id}/history", response_model=List[QRCodeOut])
async def qr_history(
    artwork_id: int,
    current_user: User = Depends(get_current_user),
    artworks: ArtworkService = Depends(get_artwork_service),
):
    return await artworks.qr_history(artwork_id, current_user.user_id)

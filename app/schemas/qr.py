from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
import uuid

class QRGenerate(BaseModel):
    artwork_id: int = Field(..., ge=1)

class QRGenerateResponse(BaseModel):
    qr_token: uuid.UUID
    qr_image_url: str

class QRCodeOut(BaseModel):
    qr_token: uuid.UUID
    qr_image_url: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

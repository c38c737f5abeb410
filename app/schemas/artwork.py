from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from app.models.artwork import Artwork, VisibilityType, MAX_TITLE_LENGTH, MAX_DESCRIPTION_LENGTH
from app.models.media import MediaType

class ArtworkCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    glb_url: str = Field(..., min_length=1, max_length=2048)
    thumbnail_url: Optional[str] = Field(None, max_length=2048)

    @field_validator('title', 'glb_url')
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError('must not be blank')
        return v.strip()

class ArtworkVisibilityUpdate(BaseModel):
    visibility: VisibilityType

class ArtworkOut(BaseModel):
    artwork_id: int
    user_id: int
    title: str
    description: Optional[str] = None
    glb_url: str
    thumbnail_url: Optional[str] = None
    visibility: VisibilityType
    favorite_count: int
    view_count: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class MediaRef(BaseModel):
    media_id: int
    media_type: MediaType
    file_url: str

    class Config:
        from_attributes = True
        frozen = True

class ArtworkProjection(BaseModel):
    """Read-only view of an artwork as shown to whoever scanned its QR code."""

    artwork_id: int
    title: str
    description: Optional[str] = None
    glb_url: str
    thumbnail_url: Optional[str] = None
    visibility: VisibilityType
    owner_id: int
    owner_nickname: Optional[str] = None
    media_refs: List[MediaRef] = []
    qr_image_url: Optional[str] = None
    created_at: datetime

    class Config:
        frozen = True

    @classmethod
    def from_artwork(cls, artwork: Artwork, qr_image_url: Optional[str] = None) -> "ArtworkProjection":
        return cls(
            artwork_id=artwork.artwork_id,
            title=artwork.title,
            description=artwork.description,
            glb_url=artwork.glb_url,
            thumbnail_url=artwork.thumbnail_url,
            visibility=artwork.visibility,
            owner_id=artwork.user_id,
            owner_nickname=artwork.owner.nickname if artwork.owner else None,
            media_refs=[MediaRef.model_validate(m) for m in artwork.media],
            qr_image_url=qr_image_url,
            created_at=artwork.created_at,
        )

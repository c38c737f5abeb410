from fastapi import APIRouter, Depends
from typing import Optional
from app.api.deps import get_artwork_service
from app.core.security import get_current_user, get_optional_user
from app.models.user import User
from app.schemas.artwork import ArtworkCreate, ArtworkOut, ArtworkVisibilityUpdate
from app.services.artwork_service import ArtworkService

router = APIRouter(prefix="/artworks", tags=["Artworks"])

@router.post("", response_model=ArtworkOut, status_code=201)
async def create_artwork(
    artwork_in: ArtworkCreate,
    current_user: User = Depends(get_current_user),
    artworks: ArtworkService = Depends(get_artwork_service),
):
    return await artworks.create(current_user.user_id, artwork_in)

@router.get("/{artwork_id}", response_model=ArtworkOut)
async def get_artwork(
    artwork_id: int,
    current_user: Optional[User] = Depends(get_optional_user),
    artworks: ArtworkService = Depends(get_artwork_service),
):
    requester_id = current_user.user_id if current_user else None
    return await artworks.get_visible(artwork_id, requester_id)

@router.patch("/{artwork_id}/visibility", response_model=ArtworkOut)
async def change_visibility(
    artwork_id: int,
    update: ArtworkVisibilityUpdate,
    current_user: User = Depends(get_current_user),
    artworks: ArtworkService = Depends(get_artwork_service),
):
    return await artworks.change_visibility(artwork_id, current_user.user_id, update.visibility)

@router.delete("/{artwork_id}", status_code=200)
async def delete_artwork(
    artwork_id: int,
    current_user: User = Depends(get_current_user),
    artworks: ArtworkService = Depends(get_artwork_service),
):
    await artworks.delete(artwork_id, current_user.user_id)
    return {"status": "success"}

from fastapi import APIRouter
from .users import router as users_router

router = APIRouter()
router.include_router(users_router)

from .artworks import router as artworks_router
router.include_router(artworks_router)

from .qr import router as qr_router
router.include_router(qr_router)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from app.core.config import settings
from app.core.exceptions import DomainError, domain_error_handler
from app.core.logging_config import setup_logging
from app.api.v1 import endpoints
from pathlib import Path

setup_logging()

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(DomainError, domain_error_handler)

# Health check
@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.VERSION}

app.include_router(endpoints.router, prefix=settings.API_V1_STR)

# Locally stored QR images are served by the app itself
if settings.STORAGE_BACKEND == "local":
    Path(settings.QR_LOCAL_PATH).mkdir(parents=True, exist_ok=True)
    app.mount(
        settings.QR_WEB_PATH.rstrip("/"),
        StaticFiles(directory=settings.QR_LOCAL_PATH),
        name="qr-images",
    )

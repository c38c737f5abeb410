from minio import Minio
from minio.error import S3Error
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse
import io
import logging

from app.core.config import settings
from app.core.exceptions import StorageError

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class StorageContext:
    """Where a stored file belongs; decides the folder it is written to."""

    user_id: int
    artwork_id: Optional[int] = None
    kind: str = "qr-codes"

    def folder(self) -> str:
        if self.artwork_id is None:
            return f"{self.kind}/user-{self.user_id}"
        return f"{self.kind}/user-{self.user_id}/artwork-{self.artwork_id}"

    @classmethod
    def for_qr_code(cls, user_id: int, artwork_id: int) -> "StorageContext":
        return cls(user_id=user_id, artwork_id=artwork_id, kind="qr-codes")

class ImageStorage:
    def store(
        self,
        data: bytes,
        file_name: str,
        context: StorageContext,
        content_type: Optional[str] = None,
    ) -> str:
        """Persist `data` and return a web-accessible URL for it."""
        raise NotImplementedError

    def delete(self, url: str):
        raise NotImplementedError

class LocalImageStorage(ImageStorage):
    def __init__(self, root: str, web_prefix: str):
        self.root = Path(root).resolve()
        self.web_prefix = web_prefix if web_prefix.endswith("/") else web_prefix + "/"
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create storage directory {self.root}") from exc

    def _resolve(self, relative: str) -> Path:
        path = (self.root / relative).resolve()
        if self.root not in path.parents:
            raise StorageError(f"Path escapes storage root: {relative}")
        return path

    def store(
        self,
        data: bytes,
        file_name: str,
        context: StorageContext,
        content_type: Optional[str] = None,
    ) -> str:
        relative = f"{context.folder()}/{file_name}"
        path = self._resolve(relative)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            logger.error("Local file write failed for %s: %s", relative, exc)
            raise StorageError("Could not store image") from exc
        return self.web_prefix + relative

    def delete(self, url: str):
        if not url:
            return
        if not url.startswith(self.web_prefix):
            logger.warning("Not a local storage URL, skipping delete: %s", url)
            return
        path = self._resolve(url[len(self.web_prefix):])
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError("Could not delete image") from exc

class MinIOImageStorage(ImageStorage):
    def __init__(self):
        # Internal client for operations within Docker network
        self.client = Minio(
            settings.MINIO_ENDPOINT,
            access_key=settings.MINIO_ACCESS_KEY,
            secret_key=settings.MINIO_SECRET_KEY,
            secure=settings.MINIO_SECURE,
            region="us-east-1"  # Explicit region to avoid lookup
        )
        self.public_endpoint = settings.MINIO_PUBLIC_ENDPOINT or settings.MINIO_ENDPOINT
        self.bucket = settings.MINIO_BUCKET
        self._ensure_bucket()

    def _ensure_bucket(self):
        try:
            if not self.client.bucket_exists(self.bucket):
                self.client.make_bucket(self.bucket)
        except S3Error as exc:
            logger.warning("MinIO bucket check failed: %s", exc)

    def _public_url(self, object_name: str) -> str:
        scheme = "https" if settings.MINIO_SECURE else "http"
        return f"{scheme}://{self.public_endpoint}/{self.bucket}/{object_name}"

    def store(
        self,
        data: bytes,
        file_name: str,
        context: StorageContext,
        content_type: Optional[str] = None,
    ) -> str:
        object_name = f"{context.folder()}/{file_name}"
        try:
            self.client.put_object(
                self.bucket, object_name, io.BytesIO(data),
                length=len(data),
                content_type=content_type or "application/octet-stream",
                metadata={"user_id": str(context.user_id), "artwork_id": str(context.artwork_id)},
            )
        except S3Error as exc:
            logger.error("MinIO upload failed for %s: %s", object_name, exc)
            raise StorageError("Could not store image") from exc
        return self._public_url(object_name)

    def delete(self, url: str):
        if not url:
            return
        prefix = f"/{self.bucket}/"
        path = urlparse(url).path
        if not path.startswith(prefix):
            logger.warning("Not a MinIO object URL, skipping delete: %s", url)
            return
        try:
            self.client.remove_object(self.bucket, path[len(prefix):])
        except S3Error as exc:
            raise StorageError("Could not delete image") from exc

@lru_cache
def get_image_storage() -> ImageStorage:
    if settings.STORAGE_BACKEND == "minio":
        return MinIOImageStorage()
    return LocalImageStorage(settings.QR_LOCAL_PATH, settings.QR_WEB_PATH)

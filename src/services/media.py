"""Media storage service for Cloudinary uploads."""

import hashlib
import logging
import shutil
import time
import uuid
from dataclasses import dataclass
from pathlib import Path

import httpx
from fastapi import UploadFile

from src.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class MediaUploadResult:
    """A file stored in external media storage."""

    url: str
    public_id: str | None = None


def save_upload_to_temp(upload: UploadFile, temp_dir: str | Path) -> Path:
    """Copy an uploaded file to the local staging directory."""
    directory = Path(temp_dir)
    directory.mkdir(parents=True, exist_ok=True)
    suffix = Path(upload.filename or "").suffix
    path = directory / f"{uuid.uuid4().hex}{suffix}"
    with path.open("wb") as buffer:
        shutil.copyfileobj(upload.file, buffer)
    return path


class MediaStorageService:
    """Service for uploading local files to Cloudinary."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.cloud_name = self.settings.cloudinary_cloud_name
        self.api_key = self.settings.cloudinary_api_key
        self.api_secret = self.settings.cloudinary_api_secret
        self.base_url = self.settings.cloudinary_upload_url
        self.temp_dir = self.settings.upload_temp_dir
        self.timeout = 60.0

    @property
    def is_configured(self) -> bool:
        """Check if Cloudinary credentials are present."""
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _sign(self, params: dict[str, str]) -> str:
        # Cloudinary signs the sorted params joined as a query string plus the secret
        to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode()).hexdigest()  # noqa: S324

    async def upload(self, local_path: str | Path | None) -> MediaUploadResult | None:
        """Upload a local file and return its public URL.

        The local file is removed whether or not the upload succeeds.
        Returns None when there is nothing to upload or the upload fails.
        """
        if not local_path:
            return None

        path = Path(local_path)
        if not path.exists():
            logger.warning(f"Upload skipped, file not found: {path.name}")
            return None

        try:
            if not self.is_configured:
                logger.error("Cloudinary is not configured")
                return None

            params = {"timestamp": str(int(time.time()))}
            data = {**params, "api_key": self.api_key, "signature": self._sign(params)}

            async with httpx.AsyncClient(timeout=self.timeout) as client:
                with path.open("rb") as fh:
                    response = await client.post(
                        f"{self.base_url}/{self.cloud_name}/auto/upload",
                        data=data,
                        files={"file": (path.name, fh)},
                    )
                response.raise_for_status()
                payload = response.json()

            url = payload.get("secure_url") or payload.get("url")
            if not url:
                logger.warning(f"Upload of {path.name} returned no URL")
                return None
            logger.info(f"Uploaded {path.name} to media storage")
            return MediaUploadResult(url=url, public_id=payload.get("public_id"))
        except httpx.HTTPError as e:
            logger.error(f"HTTP error uploading {path.name}: {e}")
            return None
        finally:
            path.unlink(missing_ok=True)

    async def upload_file(self, upload: UploadFile | None) -> MediaUploadResult | None:
        """Stage an uploaded file locally, then upload it."""
        if upload is None or not upload.filename:
            return None
        local_path = save_upload_to_temp(upload, self.temp_dir)
        return await self.upload(local_path)


def get_media_service() -> MediaStorageService:
    """Get a media storage service instance."""
    return MediaStorageService()

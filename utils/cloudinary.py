"""
Cloudinary upload client
Signed uploads over the REST API; every asset lands in a fixed folder
"""
import hashlib
import time
from typing import Optional

import httpx

from core.config import (
    CLOUDINARY_API_BASE,
    CLOUDINARY_API_KEY,
    CLOUDINARY_API_SECRET,
    CLOUDINARY_CLOUD_NAME,
    CLOUDINARY_FOLDER,
    UPLOAD_TIMEOUT_SEC,
    logger,
)
from core.errors import UploadError


def sign_params(params: dict, api_secret: str) -> str:
    """
    Cloudinary signature: sha1 of the sorted ``key=value`` pairs joined by ``&``
    with the API secret appended.
    """
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k] not in (None, ""))
    return hashlib.sha1((to_sign + api_secret).encode("utf-8")).hexdigest()


class CloudinaryUploader:
    def __init__(
        self,
        cloud_name: str = CLOUDINARY_CLOUD_NAME,
        api_key: str = CLOUDINARY_API_KEY,
        api_secret: str = CLOUDINARY_API_SECRET,
        folder: str = CLOUDINARY_FOLDER,
        timeout: float = UPLOAD_TIMEOUT_SEC,
        api_base: str = CLOUDINARY_API_BASE,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.api_base = api_base.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    @property
    def upload_url(self) -> str:
        return f"{self.api_base}/{self.cloud_name}/image/upload"

    async def upload(self, buffer: bytes, filename: Optional[str] = None) -> str:
        """Upload raw image bytes and return the asset's secure URL."""
        if not self.configured:
            raise UploadError("Cloudinary is not configured")
        if not buffer:
            raise UploadError(f"Empty file{(' ' + repr(filename)) if filename else ''}")

        params = {"folder": self.folder, "timestamp": str(int(time.time()))}
        data = dict(params)
        data["api_key"] = self.api_key
        data["signature"] = sign_params(params, self.api_secret)
        files = {"file": (filename or "upload", buffer, "application/octet-stream")}

        try:
            resp = await self._client.post(self.upload_url, data=data, files=files)
        except httpx.HTTPError as ex:
            logger.warning(f"[cloudinary] upload request failed: {ex!r}")
            raise UploadError(f"Image upload failed: {ex}", ex) from ex

        if resp.status_code >= 400:
            detail = ""
            try:
                detail = ((resp.json() or {}).get("error") or {}).get("message") or ""
            except ValueError:
                detail = resp.text[:200]
            logger.warning(f"[cloudinary] upload rejected status={resp.status_code} detail={detail}")
            raise UploadError(f"Image upload rejected ({resp.status_code}): {detail or 'unknown error'}")

        try:
            url = (resp.json() or {}).get("secure_url")
        except ValueError as ex:
            raise UploadError("Image upload returned an invalid response", ex) from ex
        if not url:
            raise UploadError("Image upload response missing secure_url")
        logger.info(f"[cloudinary] uploaded {len(buffer)} bytes to folder={self.folder}")
        return url

    async def close(self) -> None:
        await self._client.aclose()

"""Image upload pass-through to the remote asset host (Cloudinary)."""

from __future__ import annotations

import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import unquote, urlsplit

import httpx

from app.config import Settings, settings
from app.core.validation.pipeline import UploadedFile
from app.utils.exceptions import ImageUploadError
from app.utils.metrics import IMAGE_UPLOADS_TOTAL
from app.utils.observability import log_duration

logger = logging.getLogger(__name__)

CLOUDINARY_API_BASE = "https://api.cloudinary.com/v1_1"


class ImageUploader(Protocol):
    async def upload(self, image: UploadedFile) -> str:
        """Store ``image`` and return its public https URL."""
        ...


@dataclass(frozen=True)
class CloudinaryCredentials:
    cloud_name: str
    api_key: str
    api_secret: str

    @classmethod
    def from_url(cls, url: str) -> "CloudinaryCredentials":
        parts = urlsplit(url)
        if parts.scheme != "cloudinary" or not parts.hostname or not parts.username or not parts.password:
            raise ValueError("CLOUDINARY_URL must look like cloudinary://<api_key>:<api_secret>@<cloud_name>")
        return cls(
            cloud_name=parts.hostname,
            api_key=unquote(parts.username),
            api_secret=unquote(parts.password),
        )


def sign_params(params: dict[str, str], api_secret: str) -> str:
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


class CloudinaryUploader:
    def __init__(
        self,
        credentials: CloudinaryCredentials,
        *,
        folder: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.credentials = credentials
        self.folder = folder
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, s: Settings | None = None) -> "CloudinaryUploader":
        s = s or settings
        return cls(
            CloudinaryCredentials.from_url(s.CLOUDINARY_URL),
            folder=s.CLOUDINARY_FOLDER,
            timeout=s.CLOUDINARY_TIMEOUT_SECONDS,
        )

    @property
    def endpoint(self) -> str:
        return f"{CLOUDINARY_API_BASE}/{self.credentials.cloud_name}/image/upload"

    async def upload(self, image: UploadedFile) -> str:
        params = {"timestamp": str(int(time.time()))}
        if self.folder:
            params["folder"] = self.folder
        data = {
            **params,
            "api_key": self.credentials.api_key,
            "signature": sign_params(params, self.credentials.api_secret),
        }
        files = {"file": (image.filename or "upload", image.content, image.content_type)}

        try:
            with log_duration(logger, "images.upload", filename=image.filename):
                async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                    response = await client.post(self.endpoint, data=data, files=files)
                    response.raise_for_status()
                    payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            IMAGE_UPLOADS_TOTAL.labels(result="error").inc()
            logger.error("images.upload_failed filename=%s error=%s", image.filename, exc)
            raise ImageUploadError() from exc

        secure_url = payload.get("secure_url") if isinstance(payload, dict) else None
        if not secure_url:
            IMAGE_UPLOADS_TOTAL.labels(result="error").inc()
            logger.error("images.upload_failed filename=%s error=no secure_url in response", image.filename)
            raise ImageUploadError("no secure_url from image host")
        IMAGE_UPLOADS_TOTAL.labels(result="success").inc()
        return secure_url

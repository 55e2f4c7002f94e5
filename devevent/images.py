"""Event image checks and upload to Cloudinary.

Uploads go straight to Cloudinary's signed upload endpoint over ``httpx``:
https://cloudinary.com/documentation/upload_images#uploading_with_a_direct_call_to_the_rest_api
"""

import hashlib
import logging
import time
from dataclasses import dataclass

import httpx

from devevent.config import CloudinarySettings, UploadSettings
from devevent.errors import ImageUploadError, InvalidFieldError

logger = logging.getLogger(__name__)

UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"


@dataclass(frozen=True)
class ImageFile:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def check_image(image: ImageFile | None, limits: UploadSettings) -> ImageFile:
    """Reject a missing, oversized or non-image upload before anything is stored."""
    if image is None or not image.data:
        raise InvalidFieldError("image", "Image file is required")
    if image.size > limits.max_bytes:
        raise InvalidFieldError(
            "image", f"File size exceeds {limits.max_bytes // (1024 * 1024)}MB limit"
        )
    if (image.content_type or "").lower() not in limits.allowed_types:
        raise InvalidFieldError(
            "image", "Invalid file type. Only JPEG, PNG, WebP, and GIF are allowed"
        )
    return image


def sign_params(params: dict[str, str], api_secret: str) -> str:
    """Cloudinary request signature: sha1 of sorted ``k=v`` pairs plus the secret."""
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()


class ImageUploader:
    """Stores image bytes on Cloudinary and returns their public URL."""

    def __init__(self, settings: CloudinarySettings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._client = client or httpx.AsyncClient(timeout=settings.timeout)

    async def upload(self, image: ImageFile, folder: str | None = None) -> str:
        params = {
            "folder": folder or self._settings.folder,
            "timestamp": str(int(time.time())),
        }
        data = {
            **params,
            "api_key": self._settings.api_key,
            "signature": sign_params(params, self._settings.api_secret),
        }
        url = UPLOAD_URL.format(cloud_name=self._settings.cloud_name)
        try:
            r = await self._client.post(
                url,
                data=data,
                files={"file": (image.filename or "upload", image.data, image.content_type)},
            )
            r.raise_for_status()
            secure_url = r.json().get("secure_url")
        except (httpx.HTTPError, ValueError) as e:
            logger.exception("Image upload to Cloudinary failed")
            raise ImageUploadError() from e
        if not secure_url:
            logger.error("Cloudinary response carried no secure_url")
            raise ImageUploadError()
        logger.info("Uploaded image %s (%d bytes) to %s", image.filename, image.size, secure_url)
        return secure_url

    async def aclose(self) -> None:
        await self._client.aclose()

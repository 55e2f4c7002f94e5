"""Dependency injection for FastAPI endpoints.

Usage in controllers:
    from devevent.dependencies import AppSettings, get_image_uploader

    @router.post("/events")
    async def create_event(request: Request, settings: AppSettings):
        ...
        url = await get_image_uploader().upload(image)
"""

from typing import Annotated

from fastapi import Depends

from devevent import state
from devevent.config import Settings, get_settings
from devevent.errors import ServiceUnavailableError
from devevent.images import ImageUploader


def get_image_uploader() -> ImageUploader:
    """Get the image uploader.

    Raises:
        ServiceUnavailableError: If image hosting credentials are not configured.
    """
    if state.image_uploader is None:
        raise ServiceUnavailableError(detail="Image uploads are not configured")
    return state.image_uploader


def get_app_settings() -> Settings:
    return get_settings()


AppSettings = Annotated[Settings, Depends(get_app_settings)]

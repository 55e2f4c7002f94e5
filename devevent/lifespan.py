"""Lifespan management for the FastAPI application.

Startup validates configuration and builds the image uploader. The
database pool is not opened here; the first query opens it.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI

from devevent import db, state
from devevent.config import get_settings
from devevent.images import ImageUploader

logger = logging.getLogger(__name__)


@dataclass
class LifespanResources:
    """Container for resources initialized during lifespan."""

    image_uploader: ImageUploader | None = None


def init_image_uploader() -> ImageUploader | None:
    """Build the Cloudinary uploader if credentials are configured."""
    settings = get_settings().cloudinary
    if not settings.configured:
        logger.warning("Cloudinary credentials not set; event creation is disabled")
        return None
    return ImageUploader(settings)


async def setup_resources() -> LifespanResources:
    """Set up all shared resources.

    Raises ``pydantic.ValidationError`` when required settings are missing.
    """
    get_settings()
    resources = LifespanResources(image_uploader=init_image_uploader())
    state.image_uploader = resources.image_uploader
    return resources


async def cleanup_resources(resources: LifespanResources) -> None:
    """Clean up all resources on shutdown."""
    if resources.image_uploader:
        await resources.image_uploader.aclose()
    await db.close_pool()
    state.image_uploader = None


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    resources = await setup_resources()
    try:
        yield
    finally:
        await cleanup_resources(resources)

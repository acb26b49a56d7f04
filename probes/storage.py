"""Screenshot upload to Cloudinary."""

import asyncio
import io
import logging
from concurrent.futures import ThreadPoolExecutor

import cloudinary
import cloudinary.uploader

from models import ScreenshotResult

logger = logging.getLogger(__name__)

_upload_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="upload")


class StorageNotConfigured(RuntimeError):
    """Raised when an upload is attempted without Cloudinary credentials."""


class CloudinaryUploader:
    """Uploads screenshots and returns their public HTTPS URL.

    Unlike the probes this collaborator raises on failure; the caller decides
    how to degrade.
    """

    def __init__(
        self,
        cloud_name: str = "",
        api_key: str = "",
        api_secret: str = "",
        folder: str = "screenshots",
    ):
        self.folder = folder
        self.configured = bool(cloud_name and api_key and api_secret)
        if self.configured:
            cloudinary.config(
                cloud_name=cloud_name,
                api_key=api_key,
                api_secret=api_secret,
                secure=True,
            )

    def _upload(self, shot: ScreenshotResult) -> str:
        result = cloudinary.uploader.upload(
            io.BytesIO(shot.data),
            resource_type="image",
            folder=self.folder,
        )
        return result["secure_url"]

    async def __call__(self, shot: ScreenshotResult) -> str:
        if not self.configured:
            raise StorageNotConfigured("Cloudinary credentials are not configured")

        loop = asyncio.get_running_loop()
        url = await loop.run_in_executor(_upload_executor, self._upload, shot)
        logger.info("Screenshot uploaded successfully to Cloudinary: %s", url)
        return url

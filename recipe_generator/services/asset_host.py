"""Permanent image hosting on Cloudinary.

Generated images only come back as transient references (a data URL built
from the image model's bytes). CloudinaryAssetHost uploads them with the
Cloudinary SDK and returns the permanent HTTPS URL.
"""

import asyncio
from typing import Any, Optional

import cloudinary.uploader

from recipe_generator.models.errors import AssetHostingError
from recipe_generator.utils.config import config
from recipe_generator.utils.logger import logger


class CloudinaryAssetHost:
    """Upload images to Cloudinary for durable storage."""

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        folder: str = "recipe-images",
        timeout_seconds: int = 30,
    ) -> None:
        """Initialize the host with credentials.

        Raises:
            ValueError: If any credential is missing.
        """
        if not (cloud_name and api_key and api_secret):
            raise ValueError(
                "Cloudinary credentials are not configured. Set CLOUDINARY_CLOUD_NAME, "
                "CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET."
            )

        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_config(cls) -> "CloudinaryAssetHost":
        return cls(
            cloud_name=config.CLOUDINARY_CLOUD_NAME,
            api_key=config.CLOUDINARY_API_KEY,
            api_secret=config.CLOUDINARY_API_SECRET,
            folder=config.CLOUDINARY_FOLDER,
            timeout_seconds=config.ASSET_UPLOAD_TIMEOUT_SECONDS,
        )

    def upload_options(self) -> dict[str, Any]:
        """Per-call SDK options: account credentials plus the storage policy."""
        return {
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "api_secret": self.api_secret,
            "secure": True,
            "folder": self.folder,
            "resource_type": "image",
            "overwrite": False,
            "unique_filename": True,
            "timeout": self.timeout_seconds,
        }

    async def upload(self, source: str) -> str:
        """Upload an image (remote URL or data URL) and return its permanent secure URL.

        Args:
            source: Transient image reference.

        Returns:
            The secure (HTTPS) URL of the stored image.

        Raises:
            AssetHostingError: On API errors, timeouts or a response without secure_url.
        """
        try:
            result = await asyncio.to_thread(cloudinary.uploader.upload, source, **self.upload_options())
        except Exception as e:
            raise AssetHostingError(f"Cloudinary upload failed: {e}") from e

        secure_url = (result or {}).get("secure_url")
        if not secure_url:
            raise AssetHostingError("Cloudinary response did not include secure_url")

        logger.info(f"Image stored permanently: {secure_url}")
        return secure_url


async def host_image(source: str) -> str:
    """Upload a transient image reference using the configured Cloudinary account."""
    return await CloudinaryAssetHost.from_config().upload(source)

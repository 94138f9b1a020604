"""Configuration management for the Recipe Generator.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os
from typing import Optional

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Recipe generation model. Default: gemini-2.5-flash (fast, follows JSON output mode well)
        # For best results on heavily constrained requests: gemini-2.5-pro
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        # Safety classification and nutrition analysis model: defaults to the generation model
        self.SAFETY_MODEL: str = os.getenv("SAFETY_MODEL", self.GEMINI_MODEL)
        # Image model used for the plated-dish photo
        self.IMAGE_MODEL: str = os.getenv("IMAGE_MODEL", "imagen-4.0-generate-001")

        # LLM Model Parameters
        # TEMPERATURE: used for simple requests (0-2 filters without known hard combinations)
        self.TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.7"))
        # COMPLEX_TEMPERATURE: elevated sampling for requests that need more constraint reasoning
        self.COMPLEX_TEMPERATURE: float = float(os.getenv("COMPLEX_TEMPERATURE", "1.2"))
        # Max Output Tokens: a full recipe with nutrition fits comfortably in 4096
        self.MAX_OUTPUT_TOKENS: int = int(os.getenv("MAX_OUTPUT_TOKENS", "4096"))

        # Pipeline toggles for best-effort stages
        # ENABLE_SAFETY_CHECK: run the independent safety classification pass
        self.ENABLE_SAFETY_CHECK: bool = _env_flag("ENABLE_SAFETY_CHECK", "true")
        # ENABLE_IMAGE_GENERATION: synthesize and host a plated-dish image
        self.ENABLE_IMAGE_GENERATION: bool = _env_flag("ENABLE_IMAGE_GENERATION", "true")
        # ANALYZE_NUTRITION: ask the model for a dedicated nutrition analysis before reconciling
        # Trade-off: one extra LLM call per recipe for noticeably better macro estimates
        self.ANALYZE_NUTRITION: bool = _env_flag("ANALYZE_NUTRITION", "false")

        # Asset hosting (Cloudinary). Images are dropped (imageUrl=None) if credentials are missing.
        self.CLOUDINARY_CLOUD_NAME: Optional[str] = os.getenv("CLOUDINARY_CLOUD_NAME")
        self.CLOUDINARY_API_KEY: Optional[str] = os.getenv("CLOUDINARY_API_KEY")
        self.CLOUDINARY_API_SECRET: Optional[str] = os.getenv("CLOUDINARY_API_SECRET")
        self.CLOUDINARY_FOLDER: str = os.getenv("CLOUDINARY_FOLDER", "recipe-images")
        # Upload timeout in seconds for the hosting request
        self.ASSET_UPLOAD_TIMEOUT_SECONDS: int = int(os.getenv("ASSET_UPLOAD_TIMEOUT_SECONDS", "30"))
        # Image Compression: re-encode generated images as progressive JPEG before upload
        self.COMPRESS_IMG: bool = _env_flag("COMPRESS_IMG", "true")

    @property
    def cloudinary_configured(self) -> bool:
        """True when all three Cloudinary credentials are set."""
        return bool(self.CLOUDINARY_CLOUD_NAME and self.CLOUDINARY_API_KEY and self.CLOUDINARY_API_SECRET)

    def validate(self) -> None:
        """Validate required configuration.

        Raises:
            ValueError: If required API keys are missing or invalid values provided.
        """
        if not self.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is required")
        if not (0.0 <= self.TEMPERATURE <= 2.0):
            raise ValueError(
                f"TEMPERATURE must be between 0.0 and 2.0, got: {self.TEMPERATURE}"
            )
        if not (0.0 <= self.COMPLEX_TEMPERATURE <= 2.0):
            raise ValueError(
                f"COMPLEX_TEMPERATURE must be between 0.0 and 2.0, got: {self.COMPLEX_TEMPERATURE}"
            )
        if self.MAX_OUTPUT_TOKENS < 512:
            raise ValueError(
                f"MAX_OUTPUT_TOKENS must be at least 512, got: {self.MAX_OUTPUT_TOKENS}"
            )
        if self.ASSET_UPLOAD_TIMEOUT_SECONDS < 1:
            raise ValueError(
                f"ASSET_UPLOAD_TIMEOUT_SECONDS must be at least 1 second, got: {self.ASSET_UPLOAD_TIMEOUT_SECONDS}"
            )


# Create module-level config instance and validate immediately
config = Config()
config.validate()

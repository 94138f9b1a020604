"""Unit tests for Cloudinary asset hosting."""

from unittest.mock import patch

import cloudinary.exceptions
import pytest

from recipe_generator.models.errors import AssetHostingError
from recipe_generator.services.asset_host import CloudinaryAssetHost, host_image
from recipe_generator.utils.config import config

SDK_UPLOAD = "recipe_generator.services.asset_host.cloudinary.uploader.upload"


@pytest.fixture
def host():
    return CloudinaryAssetHost("demo", "123456", "s3cr3t", folder="recipe-images", timeout_seconds=5)


class TestCloudinaryAssetHost:
    @pytest.mark.parametrize("missing", ["cloud_name", "api_key", "api_secret"])
    def test_missing_credentials(self, missing):
        credentials = {"cloud_name": "demo", "api_key": "1", "api_secret": "s"}
        credentials[missing] = None

        with pytest.raises(ValueError, match="Cloudinary credentials"):
            CloudinaryAssetHost(**credentials)

    def test_upload_options(self, host):
        options = host.upload_options()

        assert options["cloud_name"] == "demo"
        assert options["api_key"] == "123456"
        assert options["api_secret"] == "s3cr3t"
        assert options["folder"] == "recipe-images"
        assert options["resource_type"] == "image"
        assert options["overwrite"] is False
        assert options["unique_filename"] is True
        assert options["secure"] is True
        assert options["timeout"] == 5

    @pytest.mark.asyncio
    async def test_upload_returns_secure_url(self, host):
        result = {"secure_url": "https://res.cloudinary.com/demo/a.jpg", "public_id": "recipe-images/a"}

        with patch(SDK_UPLOAD, return_value=result) as mock_upload:
            url = await host.upload("data:image/jpeg;base64,AAAA")

        assert url == "https://res.cloudinary.com/demo/a.jpg"
        mock_upload.assert_called_once()
        assert mock_upload.call_args.args == ("data:image/jpeg;base64,AAAA",)
        assert mock_upload.call_args.kwargs == host.upload_options()

    @pytest.mark.asyncio
    async def test_api_error_wrapped(self, host):
        with patch(SDK_UPLOAD, side_effect=cloudinary.exceptions.AuthorizationRequired("Invalid Signature")):
            with pytest.raises(AssetHostingError, match="Invalid Signature") as exc:
                await host.upload("https://example.com/a.png")

        assert isinstance(exc.value.__cause__, cloudinary.exceptions.Error)

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self, host):
        with patch(SDK_UPLOAD, side_effect=ConnectionResetError("connection reset")):
            with pytest.raises(AssetHostingError, match="connection reset"):
                await host.upload("https://example.com/a.png")

    @pytest.mark.asyncio
    async def test_missing_secure_url(self, host):
        with patch(SDK_UPLOAD, return_value={"public_id": "abc"}):
            with pytest.raises(AssetHostingError, match="secure_url"):
                await host.upload("https://example.com/a.png")


class TestHostImage:
    @pytest.mark.asyncio
    async def test_uses_configured_account(self, monkeypatch):
        monkeypatch.setattr(config, "CLOUDINARY_CLOUD_NAME", "kitchen")
        monkeypatch.setattr(config, "CLOUDINARY_API_KEY", "key")
        monkeypatch.setattr(config, "CLOUDINARY_API_SECRET", "secret")
        result = {"secure_url": "https://res.cloudinary.com/kitchen/b.jpg"}

        with patch(SDK_UPLOAD, return_value=result) as mock_upload:
            assert await host_image("data:image/png;base64,AAAA") == "https://res.cloudinary.com/kitchen/b.jpg"

        assert mock_upload.call_args.kwargs["cloud_name"] == "kitchen"
        assert mock_upload.call_args.kwargs["folder"] == config.CLOUDINARY_FOLDER

    @pytest.mark.asyncio
    async def test_unconfigured_account(self, monkeypatch):
        monkeypatch.setattr(config, "CLOUDINARY_API_SECRET", None)

        with pytest.raises(ValueError):
            await host_image("data:image/png;base64,AAAA")

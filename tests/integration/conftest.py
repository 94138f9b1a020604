"""Pytest configuration and fixtures for integration tests.

Integration tests call the live Gemini API and are skipped unless a real
GEMINI_API_KEY is available (environment or .env).
"""

import os

import pytest

PLACEHOLDER_API_KEY = "test-gemini-key"


def pytest_configure(config):
    """Disable image hosting so integration runs never write to a Cloudinary account."""
    os.environ["ENABLE_IMAGE_GENERATION"] = "false"
    config.addinivalue_line("markers", "integration: tests that call the live Gemini API")


@pytest.fixture(scope="session", autouse=True)
def check_api_keys():
    """Skip the whole integration session when no real API key is configured."""
    gemini_key = os.getenv("GEMINI_API_KEY")

    if not gemini_key or gemini_key == PLACEHOLDER_API_KEY:
        pytest.skip(
            "Integration tests skipped. Missing GEMINI_API_KEY. Please set it in your .env file.",
            allow_module_level=True,
        )


@pytest.fixture(autouse=True)
def no_image_generation(monkeypatch):
    from recipe_generator.utils.config import config as app_config

    monkeypatch.setattr(app_config, "ENABLE_IMAGE_GENERATION", False)

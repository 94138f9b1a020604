"""Shared pytest configuration.

Config is validated at import time, so a placeholder API key must be in the
environment before any recipe_generator module is imported. A real key from
.env takes precedence (unit tests mock every external call either way).
"""

import os

from dotenv import load_dotenv

load_dotenv()

PLACEHOLDER_API_KEY = "test-gemini-key"
os.environ.setdefault("GEMINI_API_KEY", PLACEHOLDER_API_KEY)
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest  # noqa: E402

from recipe_generator.models.models import RecipeDraft  # noqa: E402


def make_draft_payload(**overrides) -> dict:
    """A complete camelCase recipe payload as the generation service returns it."""
    payload = {
        "title": "Chana Masala",
        "description": "A hearty North Indian chickpea curry.",
        "ingredients": [
            {"name": "chickpeas", "quantity": "2 cups"},
            {"name": "coconut milk", "quantity": "1 cup"},
            {"name": "olive oil", "quantity": "2 tbsp"},
            {"name": "cumin seeds", "quantity": "1 tsp"},
            {"name": "turmeric", "quantity": "1 tsp"},
            {"name": "garam masala", "quantity": "2 tsp"},
        ],
        "instructions": [
            "Heat oil and temper the cumin seeds until they crackle for the tadka.",
            "Add turmeric and garam masala, then simmer the chickpeas in coconut milk.",
        ],
        "cookingTime": 35,
        "servings": 4,
        "dietaryTags": ["vegan", "vegetarian", "gluten-free"],
        "nutritionInfo": {"calories": 320, "protein": 12, "fat": 14, "carbs": 38},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def draft_payload() -> dict:
    return make_draft_payload()


@pytest.fixture
def draft(draft_payload) -> RecipeDraft:
    return RecipeDraft.model_validate(draft_payload)

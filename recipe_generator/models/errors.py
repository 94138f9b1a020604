"""Exceptions raised by the recipe generation pipeline.

Generation and compliance failures are fatal and reach the caller; asset
hosting errors are raised internally and always degrade to a missing image.
"""

from typing import Iterable


class RecipeServiceError(Exception):
    """Base class for pipeline errors surfaced to callers."""


class RecipeGenerationError(RecipeServiceError):
    """Transport failure, unparseable output or a draft missing mandatory fields."""


class ComplianceError(RecipeServiceError):
    """Forbidden ingredients survived the single correction attempt."""

    def __init__(self, terms: Iterable[str], message: str = "Unable to generate compliant vegan recipe"):
        self.terms = list(terms)
        super().__init__(f"{message}: {', '.join(self.terms)}")


class AssetHostingError(Exception):
    """Permanent storage of a generated image failed."""

"""Nutrition reconciliation.

Cross-checks the calories reported for a draft against the macro arithmetic
identity (4 kcal/g protein and carbs, 9 kcal/g fat) and a conservative floor
derived from ingredient quantities. Never raises; discrepancies are logged.
"""

import re
from fractions import Fraction
from typing import Optional, Tuple

from recipe_generator.models.models import (
    Ingredient,
    IngredientCategory,
    NutritionEstimate,
    NutritionInfo,
)
from recipe_generator.prompts.prompts import NUTRITION_SYSTEM_INSTRUCTIONS, build_nutrition_prompt
from recipe_generator.services.gemini import generate_json
from recipe_generator.utils.config import config
from recipe_generator.utils.helpers import parse_json_payload, safe_execute_async
from recipe_generator.utils.logger import logger

DISCREPANCY_THRESHOLD = 0.10
MIN_FLOOR_CALORIES = 100

PROTEIN_KEYWORDS = ("chicken", "beef", "pork", "fish", "tofu", "shrimp", "tuna", "salmon")
CARBOHYDRATE_KEYWORDS = ("rice", "pasta", "potato", "bread", "quinoa")
FAT_KEYWORDS = ("oil", "butter", "cream")

UNIT_ALIASES = {
    "lb": "lb", "lbs": "lb", "pound": "lb", "pounds": "lb",
    "g": "g", "gram": "g", "grams": "g",
    "oz": "oz", "ounce": "oz", "ounces": "oz",
    "cup": "cup", "cups": "cup",
    "tbsp": "tbsp", "tbsps": "tbsp", "tablespoon": "tbsp", "tablespoons": "tbsp",
}

# Grams (or floor calories) per unit, per category
PROTEIN_GRAMS_PER_UNIT = {"lb": 454.0, "oz": 28.35, "g": 1.0}
CARBOHYDRATE_GRAMS_PER_UNIT = {"cup": 150.0, "g": 1.0}
FAT_CALORIES_PER_TBSP = 100.0

_QUANTITY_PATTERN = re.compile(
    r"^\s*(?P<amount>\d+\s+\d+/\d+|\d+/\d+|\d+(?:\.\d+)?)\s*(?P<unit>[a-z]+)\b"
)


def arithmetic_calories(info: NutritionInfo) -> float:
    """Calories implied by the macros: 4*protein + 4*carbs + 9*fat."""
    return 4 * info.protein + 4 * info.carbs + 9 * info.fat


def parse_quantity(text: str) -> Optional[Tuple[float, str]]:
    """Parse "2 lb", "1 1/2 cups" or "200g" into (amount, canonical unit).

    Returns None when there is no numeric prefix or the unit is not recognised.
    """
    match = _QUANTITY_PATTERN.match((text or "").lower())
    if not match:
        return None

    unit = UNIT_ALIASES.get(match.group("unit"))
    if unit is None:
        return None

    amount = sum(Fraction(part) for part in match.group("amount").split())
    return float(amount), unit


def classify_ingredient(name: str) -> IngredientCategory:
    lowered = name.lower()
    if any(k in lowered for k in PROTEIN_KEYWORDS):
        return IngredientCategory.PROTEIN
    if any(k in lowered for k in CARBOHYDRATE_KEYWORDS):
        return IngredientCategory.CARBOHYDRATE
    if any(k in lowered for k in FAT_KEYWORDS):
        return IngredientCategory.FAT
    return IngredientCategory.OTHER


def _ingredient_floor(category: IngredientCategory, quantity: str) -> float:
    parsed = parse_quantity(quantity)
    if parsed is None:
        return 0.0

    amount, unit = parsed
    if category is IngredientCategory.PROTEIN:
        return amount * PROTEIN_GRAMS_PER_UNIT.get(unit, 0.0)
    if category is IngredientCategory.CARBOHYDRATE:
        return amount * CARBOHYDRATE_GRAMS_PER_UNIT.get(unit, 0.0)
    if category is IngredientCategory.FAT and unit == "tbsp":
        return amount * FAT_CALORIES_PER_TBSP
    return 0.0


def estimate_floor_calories(ingredients: list[Ingredient], servings: int) -> Tuple[float, bool]:
    """Conservative per-serving calorie lower bound.

    Returns:
        (floor calories per serving, whether any protein source was found)
    """
    total = 0.0
    has_protein_source = False

    for ingredient in ingredients:
        category = classify_ingredient(ingredient.name)
        if category is IngredientCategory.PROTEIN:
            has_protein_source = True
        total += _ingredient_floor(category, ingredient.quantity)

    return total / max(servings, 1), has_protein_source


def _exceeds_threshold(reported: float, computed: float) -> bool:
    if reported == 0:
        return computed > 0
    return abs(computed - reported) / reported > DISCREPANCY_THRESHOLD


def reconcile_nutrition(
    ingredients: list[Ingredient],
    servings: int,
    reported: NutritionInfo,
    request_id: Optional[str] = None,
) -> NutritionEstimate:
    """Reconcile reported calories against macro arithmetic and the ingredient floor."""
    log_extra = {"request_id": request_id}
    computed = arithmetic_calories(reported)
    calories = reported.calories

    if _exceeds_threshold(reported.calories, computed):
        logger.warning(
            f"Nutrition calculation adjusted: reported calories={reported.calories}, calculated={computed}",
            extra=log_extra,
        )
        calories = float(round(computed))

    floor, has_protein_source = estimate_floor_calories(ingredients, servings)
    logger.debug(f"Minimum calorie sanity check: {floor:.1f} calories per serving", extra=log_extra)

    if has_protein_source and floor > MIN_FLOOR_CALORIES and calories < floor:
        logger.warning(
            f"Calorie count suspiciously low. Minimum estimate: {floor:.1f}, reported: {calories}",
            extra=log_extra,
        )
        calories = max(calories, float(round(floor)))

    return NutritionEstimate(
        reported=reported,
        arithmetic_calories=computed,
        floor_calories=floor,
        has_protein_source=has_protein_source,
        final=reported.model_copy(update={"calories": calories}),
    )


async def _request_nutrition(ingredients: list[Ingredient], servings: int) -> Optional[NutritionInfo]:
    text = await generate_json(
        NUTRITION_SYSTEM_INSTRUCTIONS,
        build_nutrition_prompt(ingredients, servings),
        temperature=0.2,
        model=config.SAFETY_MODEL,
    )
    payload = parse_json_payload(text)
    if payload is None:
        raise ValueError("Nutrition analysis returned no JSON object")
    return NutritionInfo.model_validate(payload)


async def analyze_nutrition(ingredients: list[Ingredient], servings: int) -> Optional[NutritionInfo]:
    """Ask the model for a dedicated per-serving nutrition analysis.

    Returns None on any failure so the caller keeps the draft's reported values.
    """
    return await safe_execute_async(
        _request_nutrition(ingredients, servings),
        "Nutrition analysis",
        default_return=None,
    )

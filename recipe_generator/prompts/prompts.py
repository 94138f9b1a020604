"""System prompts and instructions for the Recipe Generator.

Provides factory functions that turn a CompiledConstraints set and the user's
request into the messages sent to the generation, safety and nutrition calls.
The required recipe JSON shape is echoed verbatim in every recipe prompt so the
model's JSON output mode stays bound to it.

The only source of randomness is the protein-focus steer, which is confined to
requests without a protein-restrictive filter and takes an injectable rng.
"""

import json
import random
from typing import Optional

from recipe_generator.models.models import CompiledConstraints, Ingredient, PromptBundle, RecipeDraft


RECIPE_JSON_SHAPE = """{
  "title": "Recipe title",
  "description": "Brief appetizing description",
  "ingredients": [{"name": "ingredient name", "quantity": "amount with units"}],
  "instructions": ["First instruction without numbering", "Second instruction without numbering", ...],
  "cookingTime": total time in minutes (number),
  "servings": number of servings (number),
  "dietaryTags": ["tag1", "tag2", ...],
  "nutritionInfo": {
    "calories": number,
    "protein": number in grams,
    "fat": number in grams,
    "carbs": number in grams
  }
}"""

PROTEIN_RESTRICTIVE_FILTERS = frozenset({"vegan", "vegetarian", "pescatarian"})

# Cumulative probability buckets (upper bound, category)
PROTEIN_CATEGORIES: tuple[tuple[float, str], ...] = (
    (0.2, "poultry (such as chicken, turkey, or duck)"),
    (0.4, "fish (such as salmon, cod, tuna, or halibut)"),
    (0.6, "seafood (such as shrimp, scallops, crab, or mussels)"),
    (0.8, "red meat (such as beef, lamb, or pork)"),
    (1.0, "vegetarian proteins (such as eggs, cheese, tofu, beans, or lentils)"),
)


# ============================================================================
# Authenticity guidance (diet + cuisine combinations prone to fusion results)
# ============================================================================

VEGAN_INDIAN_GUIDANCE = """
CRITICAL: This MUST be an AUTHENTIC traditional Indian dish, not a Western dish with Indian spices.

REQUIRED INDIAN AUTHENTICITY:
- Use traditional Indian cooking techniques: tadka/tempering (heat oil, add whole spices until they crackle), bhuna (sautéing spices in oil), dum (slow cooking), roasting whole spices
- Traditional spice combinations: garam masala, curry powder, panch phoron (Bengali), sambar powder (South Indian)
- Regional cooking styles: North Indian (tomato-onion-cashew base), South Indian (coconut-tamarind base), East Indian (mustard oil and seeds)
- Authentic garnishes: fresh coriander leaves, curry leaves, ginger julienne, lemon wedges
- Traditional accompaniments: mention serving with basmati rice, roti, paratha, or dosa
- Indian names: Use Hindi/regional names (Chana Masala NOT "chickpea curry", Dal Tadka NOT "lentil soup")

ESSENTIAL INGREDIENTS FOR VEGAN INDIAN:
- Legumes: masoor dal, moong dal, toor dal, chana dal, chickpeas, rajma
- Vegetables: bhindi (okra), baingan (eggplant), karela (bitter gourd), lauki (bottle gourd), green chilies
- Bases: coconut milk for South Indian, cashew paste for North Indian, tomato-onion masala base
- Tempering: mustard seeds (rai), cumin seeds (jeera), curry leaves, dried red chilies, asafoetida (hing)
- Spices: turmeric (haldi), coriander powder (dhaniya), cumin powder, garam masala, kasuri methi, amchur
- Oils: mustard oil (East/North), coconut oil (South), sesame oil

VEGAN SUBSTITUTIONS (Indian-appropriate):
- NO ghee: use coconut oil (South Indian style) or mustard oil (East/North Indian)
- NO paneer: use firm tofu pressed and marinated in turmeric and salt, or cashew cream for gravies
- NO cream/malai: use coconut cream (South) or cashew cream (North)
- NO yogurt/dahi: use coconut yogurt or cashew-based raita with lemon juice for tang

AVOID THESE (Not authentically Indian):
- "Indian-spiced" Western dishes (quinoa bowls, wraps, grain bowls with curry powder)
- Fusion concepts ("Indian tacos", "curry pasta", "naan pizza")
- Generic "curry" without regional specificity or proper name
- Dishes that sound like Western food with Indian names ("Indian Buddha bowl")

COOKING TECHNIQUE REQUIREMENTS:
1. Start with tadka/tempering: heat oil, add whole spices, let them crackle and release aroma
2. Build a proper masala base: sauté onions until golden, add ginger-garlic paste, then tomatoes and spices
3. Use traditional methods: slow simmering for dal, bhuna for masala, dum for biryani
4. Finish with fresh garnishes and specify the consistency (thick/thin gravy, dry/semi-dry)
"""

# (diet key, cuisine key) -> (system guidance block, short user-message reminder)
AUTHENTICITY_GUIDANCE: dict[tuple[str, str], tuple[str, str]] = {
    ("vegan", "indian"): (
        VEGAN_INDIAN_GUIDANCE,
        'IMPORTANT: This MUST be an authentic traditional Indian dish with proper Indian cooking techniques '
        '(tadka/tempering, masala base). Use authentic Indian names (e.g., "Chana Masala" NOT "chickpea '
        'curry"). Include traditional spices and regional cooking methods. Avoid Western fusion or '
        '"Indian-inspired" dishes.',
    ),
}


def get_authenticity_pair(constraints: CompiledConstraints) -> Optional[tuple[str, str]]:
    """Return the first (diet, cuisine) pair with authenticity guidance, if both are selected."""
    for diet, cuisine in AUTHENTICITY_GUIDANCE:
        if constraints.has(diet) and constraints.has(cuisine):
            return diet, cuisine
    return None


def get_authenticity_addendum(constraints: CompiledConstraints) -> Optional[str]:
    """Return the authenticity guidance block for the selected diet + cuisine, or None."""
    pair = get_authenticity_pair(constraints)
    return AUTHENTICITY_GUIDANCE[pair][0] if pair else None


def get_authenticity_reminder(constraints: CompiledConstraints) -> Optional[str]:
    """Return the short user-message reminder for the selected diet + cuisine, or None."""
    pair = get_authenticity_pair(constraints)
    return AUTHENTICITY_GUIDANCE[pair][1] if pair else None


def choose_protein_focus(
    constraints: CompiledConstraints, rng: Optional[random.Random] = None
) -> Optional[str]:
    """Pick a protein category to steer diversity across repeated identical requests.

    Returns None (no steer) when vegan, vegetarian or pescatarian is selected.
    """
    if any(constraints.has(key) for key in PROTEIN_RESTRICTIVE_FILTERS):
        return None
    roll = (rng or random).random()
    for upper_bound, category in PROTEIN_CATEGORIES:
        if roll < upper_bound:
            return category
    return PROTEIN_CATEGORIES[-1][1]


def _get_dietary_section(constraints: CompiledConstraints, addendum: Optional[str]) -> str:
    """Generate the dietary requirements block (empty when no filters are selected).

    This section covers:
    - One requirement clause per filter
    - Forbidden ingredients
    - Known contradictions and how to resolve them
    - Authenticity guidance for risky diet + cuisine combinations
    """
    if not constraints.requirement_clauses:
        return ""

    requirements = "\n".join(f"- {clause}" for clause in constraints.requirement_clauses)
    section = (
        "CRITICAL DIETARY REQUIREMENTS - The recipe MUST strictly comply with ALL of these requirements:\n"
        f"{requirements}\n"
    )

    if constraints.forbidden_terms:
        section += (
            "\nFORBIDDEN INGREDIENTS - These ingredients are COMPLETELY PROHIBITED: "
            f"{', '.join(constraints.forbidden_terms)}\n"
        )

    if constraints.contradictions:
        conflicts = "\n".join(f"- {c.message}" for c in constraints.contradictions)
        section += (
            "\nCONFLICTING REQUIREMENTS - These filters pull in different directions. Satisfy both; where "
            f"that is impossible, the stricter restriction wins:\n{conflicts}\n"
        )

    if addendum:
        section += f"\n{addendum}\n"

    section += (
        "\nVALIDATION: Before finalizing the recipe, double-check that EVERY ingredient complies with ALL "
        "dietary requirements. Include ONLY the appropriate dietary tags in the dietaryTags array (e.g., if "
        'vegan filters are applied, the recipe must be tagged as "vegan", NOT "vegetarian").'
    )
    return section


def get_system_instructions(constraints: CompiledConstraints, addendum: Optional[str] = None) -> str:
    """Generate the system instruction for a recipe generation call.

    Args:
        constraints: Compiled constraint set for this request.
        addendum: Optional authenticity guidance block.

    Returns:
        str: Role, rules, dietary block and the required JSON shape.
    """
    return f"""You are a professional chef and nutritionist specializing in creating delicious recipes with accurate nutritional information. Create diverse recipes that include a variety of dietary approaches including meat, fish, poultry, and plant-based options unless specific dietary restrictions are requested.

{_get_dietary_section(constraints, addendum)}

Generate a complete recipe with clear instructions and accurate measurements.
Ensure all dietary requirements are strictly followed and reflected in the dietaryTags.

IMPORTANT: Write instructions WITHOUT step numbers (like "1.", "2.", etc.) - numbering is added when the recipe is displayed.

Format your response as a JSON object with the following structure:
{RECIPE_JSON_SHAPE}"""


def build_user_prompt(
    request_text: str,
    authenticity_reminder: Optional[str] = None,
    protein_focus: Optional[str] = None,
) -> str:
    """Build the user message: request text, authenticity reminder and protein steer."""
    message = f'Create a recipe for: "{request_text}"'
    if authenticity_reminder:
        message += f"\n\n{authenticity_reminder}"
    if protein_focus:
        message += f"\n\nIMPORTANT: This recipe MUST prominently feature {protein_focus} as the main protein source."
    return message


def assemble_prompt(
    request_text: str,
    constraints: CompiledConstraints,
    rng: Optional[random.Random] = None,
) -> PromptBundle:
    """Assemble the system and user messages for a generation call.

    Args:
        request_text: Free-text dish description (already validated, 1-1000 chars).
        constraints: Compiled constraint set.
        rng: Optional random source for the protein steer (pass a seeded Random for reproducibility).

    Returns:
        PromptBundle with system/user messages plus the addendum and protein steer that were applied.
    """
    addendum = get_authenticity_addendum(constraints)
    reminder = get_authenticity_reminder(constraints)
    protein_focus = choose_protein_focus(constraints, rng)

    return PromptBundle(
        system=get_system_instructions(constraints, addendum),
        user=build_user_prompt(request_text, reminder, protein_focus),
        authenticity_addendum=addendum,
        protein_focus=protein_focus,
    )


# ============================================================================
# Strict vegan correction prompt
# ============================================================================

STRICT_VEGAN_SYSTEM_INSTRUCTIONS = """You are a vegan chef specializing in 100% plant-based recipes.
Generate a complete recipe with clear instructions and accurate measurements.
IMPORTANT: Write instructions WITHOUT step numbers - numbering is added when the recipe is displayed.
Format your response as a JSON object exactly as specified."""

VEGAN_FORBIDDEN_SECTION = """
ABSOLUTELY FORBIDDEN INGREDIENTS:
- NO dairy products (milk, cheese, butter, cream, yogurt, ghee, whey, casein)
- NO animal products (meat, chicken, beef, fish, seafood, eggs)
- NO honey (use maple syrup, agave, or date syrup instead)
- NO gelatin (use agar-agar instead)"""

VEGAN_REQUIRED_SECTION = """
REQUIRED: Use only plant-based ingredients like:
- Plant milks (almond, oat, soy, coconut)
- Plant-based proteins (tofu, tempeh, legumes, nuts, seeds)
- Vegetables, fruits, grains, herbs, spices
- Plant-based fats (olive oil, coconut oil, avocado)"""

KETO_VEGAN_SECTION = """
KETO REQUIREMENTS:
- High fat (70-80% of calories), moderate protein (20-25%), very low carbs (5-10%)
- Use high-fat plant sources: avocados, coconut oil, olive oil, nuts, seeds
- Avoid grains, potatoes, most fruits (except berries in small amounts)
- Target: 20-30g fat, 15-20g protein, 5-10g net carbs per serving"""


def build_strict_vegan_prompt(
    request_text: str,
    constraints: CompiledConstraints,
    violations: Optional[list[str]] = None,
) -> str:
    """Build the single corrective prompt issued after vegan violations are detected.

    Restates the forbidden and required ingredient classes, repeats any
    authenticity guidance and asks for the same JSON shape.
    """
    parts = [f'CRITICAL VEGAN REQUIREMENT: Create a 100% plant-based recipe for: "{request_text}"']

    addendum = get_authenticity_addendum(constraints)
    reminder = get_authenticity_reminder(constraints)
    if reminder:
        parts.append(f"\n{reminder}")

    if violations:
        parts.append(
            f"\nThe previous attempt used non-vegan ingredients ({', '.join(violations)}). Replace every one of them."
        )

    parts.append(VEGAN_FORBIDDEN_SECTION)
    parts.append(VEGAN_REQUIRED_SECTION)

    if constraints.has("keto"):
        parts.append(KETO_VEGAN_SECTION)
    if addendum:
        parts.append(addendum)
    if constraints.has("highprotein"):
        parts.append(
            "\nENSURE high protein (25g+ per serving) using plant sources like tofu, tempeh, legumes, quinoa, hemp seeds."
        )
    if constraints.has("lowoxalate"):
        parts.append(
            "\nAVOID high-oxalate foods: spinach, beets, chocolate, nuts, sweet potatoes. "
            "Use low-oxalate vegetables like cabbage, cauliflower, broccoli."
        )

    parts.append(f"\nRESPONSE FORMAT: Return a complete JSON object with ALL required fields:\n{RECIPE_JSON_SHAPE}")
    return "\n".join(parts)


# ============================================================================
# Safety classification and nutrition analysis prompts
# ============================================================================

SAFETY_SYSTEM_INSTRUCTIONS = """You are a recipe safety validator with expertise in food safety, allergens, and nutrition.
Your task is to analyze recipes and identify potential safety issues including:
1. Dangerous food combinations
2. Allergen risks not properly labeled
3. Contradictions between dietary tags and actual ingredients (e.g., "vegan" recipe with animal products)
4. Unsafe cooking instructions
5. Improper food handling guidance

Respond with JSON containing "safe" (boolean) and "issues" (array of strings describing problems found).
If the recipe is safe, the "issues" array should be empty."""


def build_safety_prompt(draft: RecipeDraft) -> str:
    """Build the user message for the safety classification call."""
    ingredients = json.dumps([i.model_dump() for i in draft.ingredients])
    return f"""Validate this recipe for safety issues:
Title: {draft.title}
Description: {draft.description}
Ingredients: {ingredients}
Instructions: {json.dumps(draft.instructions)}
Dietary Tags: {json.dumps(draft.dietary_tags)}"""


NUTRITION_SYSTEM_INSTRUCTIONS = """You are a registered dietitian specializing in precise recipe nutrition analysis.
Calculate the nutritional values for the given ingredients and quantities.

CRITICAL: Analyze EVERY ingredient listed: proteins, carbohydrates, vegetables and fruits, oils and fats, sauces and seasonings.

STEP 1: For each ingredient, calculate its nutritional values based on quantity.
STEP 2: Sum all ingredients to get total recipe values.
STEP 3: Divide by the number of servings for per-serving values.
STEP 4: Verify using the formula: calories = (protein*4) + (carbs*4) + (fat*9)

REFERENCE VALUES per 100g: chicken breast 165 kcal (31g protein, 3.6g fat), salmon 208 kcal (22g protein, 12g fat),
ground beef 85% lean 250 kcal (26g protein, 15g fat), tofu (firm) 144 kcal (17g protein, 8.7g fat, 2.8g carbs),
lentils (cooked) 116 kcal (9g protein, 0.4g fat, 20g carbs), white rice (cooked) 130 kcal (2.7g protein, 28g carbs),
pasta (cooked) 158 kcal (5.8g protein, 31g carbs). Olive oil 119 kcal per tablespoon.

CONVERSIONS: 1 pound = 454 grams, 1 ounce = 28.35 grams, 1 cup = ~240mL, 1 tablespoon = 15mL.

Respond with JSON: {"calories": number, "protein": number, "fat": number, "carbs": number} (grams, PER SERVING)."""


def build_nutrition_prompt(ingredients: list[Ingredient], servings: int) -> str:
    """Build the user message for the nutrition analysis call."""
    payload = json.dumps([i.model_dump() for i in ingredients])
    return f"Analyze the nutrition for these ingredients. The recipe makes {servings} servings:\n{payload}"

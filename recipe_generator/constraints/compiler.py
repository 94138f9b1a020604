"""Constraint compiler: turns selected filter identifiers into a CompiledConstraints set.

Provides:
- normalize_filter(): canonical comparison key ("High Protein" -> "highprotein")
- dedupe_filters(): drop duplicates by normalized key, keep first label
- compile_constraints(): requirement clauses, forbidden terms, contradictions, complexity tier

All tables are fixed literal maps. compile_constraints() is a pure function:
compiling the same filter list twice yields identical output.
"""

import re
from typing import Iterable, List, Optional, Sequence

from recipe_generator.models.models import CompiledConstraints, ComplexityTier, Contradiction


# ============================================================================
# Requirement clauses
# ============================================================================

REQUIREMENT_CLAUSES: dict[str, str] = {
    "vegan": (
        "VEGAN: ABSOLUTELY NO ANIMAL PRODUCTS - This means ZERO dairy (no milk, cheese, yogurt, butter, "
        "cream, ghee), ZERO eggs, ZERO meat, ZERO fish, ZERO honey, ZERO gelatin. Use only plant-based "
        "alternatives like coconut oil, plant-based milk, cashew cream, nutritional yeast, plant-based "
        "protein sources."
    ),
    "vegetarian": "VEGETARIAN: No meat or fish, but dairy and eggs are allowed",
    "pescatarian": "PESCATARIAN: No meat or poultry; fish, seafood, dairy and eggs are allowed",
    "lowoxalate": (
        "LOW OXALATE: STRICTLY AVOID spinach, beets, rhubarb, nuts (if not nut-free), chocolate, and wheat. "
        "Use ONLY low-oxalate vegetables like cauliflower, cabbage, lettuce, cucumber, zucchini, carrots, "
        "bell peppers."
    ),
    "keto": (
        "KETO: Very low carb (under 10g net carbs), high fat, moderate protein. If combined with high "
        "protein, aim for 25g+ protein while keeping carbs under 10g."
    ),
    "paleo": "PALEO: No grains, legumes, dairy, refined sugar or processed foods",
    "lowcarb": "LOW CARB: Keep total carbs under 20g per serving, focus on protein and healthy fats",
    "glutenfree": "GLUTEN-FREE: No wheat, barley, rye, or other gluten-containing grains",
    "celiacfriendly": "GLUTEN-FREE: No wheat, barley, rye, or other gluten-containing grains",
    "dairyfree": "DAIRY-FREE: No milk, cheese, butter, cream, yogurt, ghee, whey or casein",
    "nutallergy": "NUT-FREE: No tree nuts, peanuts, or nut-derived products",
    "nutfree": "NUT-FREE: No tree nuts, peanuts, or nut-derived products",
    "hearthealthy": "HEART HEALTHY: Low sodium, low saturated fat, high fiber, include omega-3 fatty acids",
}

HIGH_PROTEIN_BASE = "HIGH PROTEIN: Recipe must contain at least 25g of protein per serving."
HIGH_PROTEIN_VEGAN = (
    " For vegan recipes, strictly use plant-based protein sources such as lentils, chickpeas, black beans, "
    "tofu, tempeh, seitan, hemp seeds, chia seeds, spirulina, or plant-based protein powder. Absolutely NO "
    "animal proteins."
)
HIGH_PROTEIN_KETO = (
    " For keto recipes, ensure the protein sources are high in protein but low in net carbs, such as "
    "chicken, fish, eggs, greek yogurt, cheese, or unsweetened protein powder. Maintain keto macros while "
    "hitting the protein goal."
)
HIGH_PROTEIN_GENERAL = (
    " Use lean, high-quality protein sources (e.g., poultry, fish, legumes, tofu, or lean beef) and clearly "
    "state protein content."
)


# ============================================================================
# Forbidden ingredient vocabularies
# ============================================================================

FORBIDDEN_TERMS: dict[str, tuple[str, ...]] = {
    "vegan": (
        "dairy products (milk, cheese, yogurt, butter, cream, ghee)",
        "eggs",
        "meat",
        "fish",
        "seafood",
        "honey",
        "gelatin",
        "whey",
        "casein",
    ),
    "lowoxalate": (
        "spinach",
        "beets",
        "rhubarb",
        "chocolate",
        "wheat flour",
        "cocoa powder",
        "dark chocolate",
    ),
    "nutallergy": ("nuts", "peanuts", "almond", "walnut", "cashew", "pecan"),
}


# ============================================================================
# Contradictions
# ============================================================================

CONTRADICTIONS: tuple[tuple[tuple[str, ...], str], ...] = (
    (
        ("vegan", "keto"),
        "Vegan and keto conflict: most plant proteins are carb-heavy, so the recipe must rely on tofu, "
        "tempeh, seeds and plant fats to stay under the carb limit.",
    ),
    (
        ("vegan", "paleo"),
        "Vegan and paleo conflict: paleo excludes legumes and grains, leaving very few vegan protein sources.",
    ),
    (
        ("keto", "dairyfree"),
        "Keto and dairy-free conflict: keto usually leans on cheese, butter and cream for fat; use coconut, "
        "avocado and olive oil instead.",
    ),
    (
        ("paleo", "vegetarian"),
        "Paleo and vegetarian conflict: paleo excludes legumes, grains and dairy, leaving eggs as the main "
        "vegetarian protein.",
    ),
)


# ============================================================================
# Complexity classification
# ============================================================================

INDIVIDUALLY_COMPLEX = frozenset({"vegan", "highprotein", "lowoxalate"})

COMPLEX_PAIRINGS: tuple[tuple[str, str], ...] = (
    ("keto", "highprotein"),
    ("lowcarb", "highprotein"),
    ("vegan", "highprotein"),
)

# Cuisines that work well with vegan diets naturally (normalized keys)
VEGAN_FRIENDLY_CUISINES = frozenset({
    "mediterranean", "middleeastern", "lebanese", "thai", "vietnamese",
    "ethiopian", "mexican", "moroccan", "chinese", "japanese", "korean",
})

CUISINE_FILTERS = VEGAN_FRIENDLY_CUISINES | frozenset({
    "indian", "italian", "french", "german", "american", "southern",
    "british", "russian", "polish", "scandinavian",
})


def normalize_filter(label: str) -> str:
    """Return the comparison key for a filter: lowercase letters only."""
    return re.sub(r"[^a-z]", "", label.lower())


def dedupe_filters(filters: Optional[Iterable[str]]) -> List[str]:
    """Remove duplicate filters (by normalized key), preserving the first label seen."""
    seen: dict[str, str] = {}
    for label in filters or []:
        if not isinstance(label, str):
            continue
        label = label.strip()
        key = normalize_filter(label)
        if key and key not in seen:
            seen[key] = label
    return list(seen.values())


def _clause_for(label: str, key: str, active: frozenset[str]) -> str:
    if key == "highprotein":
        is_vegan = "vegan" in active
        is_keto = "keto" in active
        clause = HIGH_PROTEIN_BASE
        if is_vegan:
            clause += HIGH_PROTEIN_VEGAN
        if is_keto:
            clause += HIGH_PROTEIN_KETO
        if not is_vegan and not is_keto:
            clause += HIGH_PROTEIN_GENERAL
        return clause
    return REQUIREMENT_CLAUSES.get(key, label)


def find_contradictions(normalized: Sequence[str]) -> List[Contradiction]:
    """Report every fully matched incompatible combination exactly once."""
    active = set(normalized)
    reported: set[tuple[str, ...]] = set()
    found = []
    for combination, message in CONTRADICTIONS:
        key = tuple(sorted(combination))
        if key in reported or not active.issuperset(combination):
            continue
        reported.add(key)
        found.append(Contradiction(filters=key, message=message))
    return found


def classify_complexity(normalized: Sequence[str]) -> ComplexityTier:
    """Decide whether a request needs the complex (reasoning-oriented) strategy."""
    active = set(normalized)
    if len(active) >= 3:
        return ComplexityTier.COMPLEX
    if active & INDIVIDUALLY_COMPLEX:
        return ComplexityTier.COMPLEX
    if any(a in active and b in active for a, b in COMPLEX_PAIRINGS):
        return ComplexityTier.COMPLEX
    if "vegan" in active and any(
        key in CUISINE_FILTERS and key not in VEGAN_FRIENDLY_CUISINES for key in active
    ):
        return ComplexityTier.COMPLEX
    return ComplexityTier.SIMPLE


def compile_constraints(filters: Optional[Iterable[str]] = None) -> CompiledConstraints:
    """Compile selected filter identifiers into requirement clauses, forbidden terms,
    contradictions and a complexity tier.

    Args:
        filters: Filter identifiers as selected by the user (may be empty or contain duplicates).

    Returns:
        CompiledConstraints. An empty filter list yields empty fields and SIMPLE complexity.
    """
    labels = dedupe_filters(filters)
    normalized = tuple(normalize_filter(label) for label in labels)
    active = frozenset(normalized)

    clauses = tuple(_clause_for(label, key, active) for label, key in zip(labels, normalized))

    forbidden: set[str] = set()
    for key in normalized:
        forbidden.update(FORBIDDEN_TERMS.get(key, ()))
    if "nutfree" in active:
        forbidden.update(FORBIDDEN_TERMS["nutallergy"])

    return CompiledConstraints(
        filters=tuple(labels),
        normalized=normalized,
        requirement_clauses=clauses,
        forbidden_terms=tuple(sorted(forbidden)),
        contradictions=tuple(find_contradictions(normalized)),
        complexity_tier=classify_complexity(normalized),
    )

"""Data models and schemas for the recipe generation pipeline.

Defines Pydantic models for request validation, the compiled constraint set,
the generated recipe draft and the reports produced by each pipeline stage.
All models use Pydantic v2. Recipe models accept and emit the camelCase wire
shape of the generation service (use ``model_dump(by_alias=True)``).
"""

import re
from enum import Enum
from typing import Annotated, Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

_NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")
_STEP_NUMBER_PATTERN = re.compile(r"^\s*(?:step\s*)?\d+\s*[.):\-]\s*", re.IGNORECASE)
_DURATION_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(hours?|hrs?|h|minutes?|mins?|m)(?![a-z])", re.IGNORECASE)


def _first_number(value: Any) -> Any:
    """Pull the leading number out of strings like "25g" or "30 minutes"; pass other values through."""
    if isinstance(value, str):
        match = _NUMBER_PATTERN.search(value)
        if match:
            return float(match.group())
    return value


def _duration_minutes(value: Any) -> Any:
    """Minutes in "1 hour 30 minutes", "1.5 hrs" or "1h30m"; text without units falls back to the first number."""
    if isinstance(value, str):
        parts = _DURATION_PATTERN.findall(value)
        if parts:
            return sum(float(amount) * (60 if unit.lower().startswith("h") else 1) for amount, unit in parts)
    return _first_number(value)


class ComplexityTier(str, Enum):
    """How much constraint reasoning a request needs; drives the generation strategy."""

    SIMPLE = "simple"
    COMPLEX = "complex"


class IngredientCategory(str, Enum):
    """Coarse ingredient classes used by the calorie floor heuristic."""

    PROTEIN = "protein"
    CARBOHYDRATE = "carbohydrate"
    FAT = "fat"
    OTHER = "other"


class RecipeGenerationRequest(BaseModel):
    """Inbound request: free-text dish description plus optional filter identifiers."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    prompt: Annotated[
        str,
        Field(min_length=1, max_length=1000, description="Desired dish in natural language (1-1000 chars)"),
    ]
    dietary_filters: Annotated[
        List[str],
        Field(
            default_factory=list,
            alias="dietaryFilters",
            description="Dietary, allergy or cuisine filter identifiers (e.g. vegan, highProtein, indian)",
        ),
    ]

    @field_validator("dietary_filters", mode="before")
    @classmethod
    def drop_blank_filters(cls, filters: Optional[List[str]]) -> List[str]:
        """Treat a missing list as empty and drop blank entries."""
        if not filters:
            return []
        return [f for f in filters if isinstance(f, str) and f.strip()]


class Contradiction(BaseModel):
    """A known-incompatible combination found in the selected filters."""

    model_config = ConfigDict(frozen=True)

    filters: Tuple[str, ...]
    message: str


class CompiledConstraints(BaseModel):
    """Immutable, per-request result of compiling the selected filters.

    Set-valued fields are stored as sorted tuples so that compiling the same
    filters always serializes to the same bytes.
    """

    model_config = ConfigDict(frozen=True)

    filters: Tuple[str, ...] = ()
    normalized: Tuple[str, ...] = ()
    requirement_clauses: Tuple[str, ...] = ()
    forbidden_terms: Tuple[str, ...] = ()
    contradictions: Tuple[Contradiction, ...] = ()
    complexity_tier: ComplexityTier = ComplexityTier.SIMPLE

    def has(self, key: str) -> bool:
        """Check whether a normalized filter key (e.g. "highprotein") is active."""
        return key in self.normalized


class Ingredient(BaseModel):
    """One ingredient line: name plus free-text quantity including its unit."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Annotated[str, Field(min_length=1)]
    quantity: Annotated[str, Field("", description="Amount with units, e.g. '2 lb' or '1 tbsp'")]

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, value: Any) -> str:
        """Models occasionally return bare numbers for quantities."""
        if value is None:
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        return value


class NutritionInfo(BaseModel):
    """Per-serving nutrition: calories plus macros in grams."""

    calories: Annotated[float, Field(0, ge=0)]
    protein: Annotated[float, Field(0, ge=0)]
    fat: Annotated[float, Field(0, ge=0)]
    carbs: Annotated[float, Field(0, ge=0)]

    @field_validator("calories", "protein", "fat", "carbs", mode="before")
    @classmethod
    def parse_numeric(cls, value: Any) -> Any:
        return _first_number(value)


class RecipeDraft(BaseModel):
    """Parsed structured output of a generation call.

    Title, description, ingredients, instructions, cookingTime and servings are
    mandatory and must be non-empty; dietaryTags and nutritionInfo default to
    empty values. imageUrl is filled in by the pipeline after generation.
    """

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    title: Annotated[str, Field(min_length=1)]
    description: Annotated[str, Field(min_length=1)]
    ingredients: Annotated[List[Ingredient], Field(min_length=1)]
    instructions: Annotated[List[str], Field(min_length=1)]
    cooking_time: Annotated[int, Field(alias="cookingTime", gt=0, description="Total time in minutes")]
    servings: Annotated[int, Field(gt=0)]
    dietary_tags: Annotated[List[str], Field(default_factory=list, alias="dietaryTags")]
    nutrition_info: Annotated[NutritionInfo, Field(default_factory=NutritionInfo, alias="nutritionInfo")]
    image_url: Annotated[Optional[str], Field(None, alias="imageUrl")]

    @field_validator("instructions", mode="before")
    @classmethod
    def strip_step_numbers(cls, steps: Any) -> Any:
        """Remove leading "1." / "Step 2:" numbering and blank steps."""
        if not isinstance(steps, list):
            return steps
        cleaned = []
        for step in steps:
            if not isinstance(step, str):
                continue
            text = _STEP_NUMBER_PATTERN.sub("", step).strip()
            if text:
                cleaned.append(text)
        return cleaned

    @field_validator("cooking_time", "servings", mode="before")
    @classmethod
    def parse_whole_number(cls, value: Any, info: ValidationInfo) -> Any:
        number = _duration_minutes(value) if info.field_name == "cooking_time" else _first_number(value)
        if isinstance(number, float):
            return int(round(number))
        return number

    @field_validator("dietary_tags", mode="before")
    @classmethod
    def clean_tags(cls, tags: Any) -> Any:
        if tags is None:
            return []
        if isinstance(tags, list):
            return [t.strip() for t in tags if isinstance(t, str) and t.strip()]
        return tags

    @field_validator("nutrition_info", mode="before")
    @classmethod
    def default_nutrition(cls, value: Any) -> Any:
        return value if value is not None else {}


class ComplianceFinding(BaseModel):
    """A forbidden term found in a draft, and whether a plant-based phrase excused every occurrence."""

    term: str
    excused: bool


class ComplianceReport(BaseModel):
    """Result of scanning a draft against the forbidden vocabulary."""

    findings: List[ComplianceFinding] = Field(default_factory=list)

    @property
    def violations(self) -> List[str]:
        """Terms with at least one occurrence not covered by an exception phrase."""
        return [f.term for f in self.findings if not f.excused]

    @property
    def is_compliant(self) -> bool:
        return not self.violations


class AuthenticityReport(BaseModel):
    """Soft authenticity markers for a diet + cuisine combination (logged, never enforced)."""

    spices_found: List[str] = Field(default_factory=list)
    techniques_found: List[str] = Field(default_factory=list)
    fusion_terms: List[str] = Field(default_factory=list)

    @property
    def warnings(self) -> List[str]:
        messages = []
        if len(self.spices_found) < 3:
            messages.append(
                f"Only {len(self.spices_found)} traditional spices found, expected at least 3"
            )
        if not self.techniques_found:
            messages.append("No traditional cooking technique mentioned")
        if self.fusion_terms:
            messages.append(f"Possible fusion influence in title: {', '.join(self.fusion_terms)}")
        return messages


class NutritionEstimate(BaseModel):
    """Reported nutrition plus the derived numbers used to reconcile it."""

    reported: NutritionInfo
    arithmetic_calories: float
    floor_calories: float
    has_protein_source: bool
    final: NutritionInfo


class SafetyVerdict(BaseModel):
    """Response contract of the safety classification call."""

    safe: bool
    issues: List[str] = Field(default_factory=list)

    @field_validator("issues", mode="before")
    @classmethod
    def default_issues(cls, issues: Any) -> Any:
        return issues or []


class PromptBundle(BaseModel):
    """System and user messages for one generation call."""

    model_config = ConfigDict(frozen=True)

    system: str
    user: str
    authenticity_addendum: Optional[str] = None
    protein_focus: Optional[str] = None

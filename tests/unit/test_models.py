"""Unit tests for Pydantic models validation."""

import pytest
from pydantic import ValidationError

from recipe_generator.models.errors import (
    ComplianceError,
    RecipeGenerationError,
    RecipeServiceError,
)
from recipe_generator.models.models import (
    AuthenticityReport,
    ComplianceFinding,
    ComplianceReport,
    CompiledConstraints,
    Ingredient,
    NutritionInfo,
    RecipeDraft,
    RecipeGenerationRequest,
    SafetyVerdict,
)


class TestRecipeGenerationRequest:
    """Test inbound request validation."""

    def test_valid_request_prompt_only(self):
        request = RecipeGenerationRequest(prompt="Spicy lentil soup")
        assert request.prompt == "Spicy lentil soup"
        assert request.dietary_filters == []

    def test_camel_case_filters(self):
        request = RecipeGenerationRequest.model_validate(
            {"prompt": "Curry", "dietaryFilters": ["vegan", "indian"]}
        )
        assert request.dietary_filters == ["vegan", "indian"]

    def test_prompt_whitespace_stripped(self):
        assert RecipeGenerationRequest(prompt="  Pad thai  ").prompt == "Pad thai"

    @pytest.mark.parametrize("prompt", ["", "   "])
    def test_empty_prompt_rejected(self, prompt):
        with pytest.raises(ValidationError) as exc:
            RecipeGenerationRequest(prompt=prompt)
        assert "prompt" in str(exc.value)

    def test_prompt_length_limit(self):
        RecipeGenerationRequest(prompt="a" * 1000)
        with pytest.raises(ValidationError):
            RecipeGenerationRequest(prompt="a" * 1001)

    def test_blank_and_missing_filters(self):
        assert RecipeGenerationRequest(prompt="x", dietaryFilters=None).dietary_filters == []
        assert RecipeGenerationRequest(prompt="x", dietaryFilters=["vegan", " ", ""]).dietary_filters == ["vegan"]


class TestRecipeDraft:
    """Test RecipeDraft parsing of generation output."""

    def test_valid_draft(self, draft_payload):
        draft = RecipeDraft.model_validate(draft_payload)

        assert draft.title == "Chana Masala"
        assert draft.cooking_time == 35
        assert draft.servings == 4
        assert draft.nutrition_info.calories == 320
        assert draft.image_url is None

    @pytest.mark.parametrize(
        "field", ["title", "description", "ingredients", "instructions", "cookingTime", "servings"]
    )
    def test_missing_mandatory_field(self, draft_payload, field):
        draft_payload.pop(field)
        with pytest.raises(ValidationError):
            RecipeDraft.model_validate(draft_payload)

    @pytest.mark.parametrize(
        "field,value",
        [("title", ""), ("ingredients", []), ("instructions", []), ("cookingTime", 0), ("servings", 0)],
    )
    def test_empty_mandatory_field(self, draft_payload, field, value):
        draft_payload[field] = value
        with pytest.raises(ValidationError):
            RecipeDraft.model_validate(draft_payload)

    def test_optional_fields_default(self, draft_payload):
        draft_payload.pop("dietaryTags")
        draft_payload["nutritionInfo"] = None

        draft = RecipeDraft.model_validate(draft_payload)

        assert draft.dietary_tags == []
        assert draft.nutrition_info == NutritionInfo()

    def test_step_numbers_stripped(self, draft_payload):
        draft_payload["instructions"] = ["1. Soak the dal.", "Step 2: Boil it.", "3) Temper spices.", "  ", "Serve hot."]

        draft = RecipeDraft.model_validate(draft_payload)

        assert draft.instructions == ["Soak the dal.", "Boil it.", "Temper spices.", "Serve hot."]

    def test_numeric_strings_parsed(self, draft_payload):
        draft_payload["cookingTime"] = "45 minutes"
        draft_payload["servings"] = "4"
        draft_payload["nutritionInfo"] = {"calories": "410 kcal", "protein": "25g", "fat": "12.5g", "carbs": "40g"}

        draft = RecipeDraft.model_validate(draft_payload)

        assert draft.cooking_time == 45
        assert draft.servings == 4
        assert draft.nutrition_info.protein == 25
        assert draft.nutrition_info.fat == 12.5

    @pytest.mark.parametrize(
        "value,minutes",
        [("1 hour 30 minutes", 90), ("1.5 hrs", 90), ("1h30m", 90), ("2 hours", 120), ("20 mins", 20), ("35", 35)],
    )
    def test_cooking_time_units(self, draft_payload, value, minutes):
        draft_payload["cookingTime"] = value

        assert RecipeDraft.model_validate(draft_payload).cooking_time == minutes

    def test_long_cook_and_large_batch_accepted(self, draft_payload):
        """Overnight braises and catering batches are valid drafts."""
        draft_payload["cookingTime"] = 1500
        draft_payload["servings"] = 120
        draft_payload["title"] = "Slow Braised " + "Jackfruit " * 30

        draft = RecipeDraft.model_validate(draft_payload)

        assert draft.cooking_time == 1500
        assert draft.servings == 120

    def test_negative_nutrition_rejected(self, draft_payload):
        draft_payload["nutritionInfo"] = {"calories": -5, "protein": 1, "fat": 1, "carbs": 1}
        with pytest.raises(ValidationError):
            RecipeDraft.model_validate(draft_payload)

    def test_dump_uses_camel_case(self, draft):
        dumped = draft.model_dump(by_alias=True)
        assert {"cookingTime", "dietaryTags", "nutritionInfo", "imageUrl"} <= dumped.keys()


class TestIngredient:
    def test_numeric_quantity_coerced(self):
        assert Ingredient(name="eggs", quantity=2).quantity == "2"

    def test_missing_quantity(self):
        assert Ingredient(name="salt", quantity=None).quantity == ""


class TestReports:
    """Test report models and their derived properties."""

    def test_compliance_report_violations(self):
        report = ComplianceReport(
            findings=[ComplianceFinding(term="milk", excused=True), ComplianceFinding(term="ghee", excused=False)]
        )
        assert report.violations == ["ghee"]
        assert report.is_compliant is False

    def test_empty_compliance_report_is_compliant(self):
        assert ComplianceReport().is_compliant is True

    def test_authenticity_warnings(self):
        report = AuthenticityReport(spices_found=["cumin"], techniques_found=[], fusion_terms=["bowl"])
        warnings = report.warnings

        assert len(warnings) == 3
        assert "Only 1 traditional spices" in warnings[0]
        assert "bowl" in warnings[2]

    def test_authentic_dish_has_no_warnings(self):
        report = AuthenticityReport(spices_found=["cumin", "turmeric", "hing"], techniques_found=["tadka"])
        assert report.warnings == []

    def test_safety_verdict_null_issues(self):
        assert SafetyVerdict.model_validate({"safe": True, "issues": None}).issues == []

    def test_compiled_constraints_frozen(self):
        constraints = CompiledConstraints(normalized=("vegan",))
        assert constraints.has("vegan")
        with pytest.raises(ValidationError):
            constraints.normalized = ()


class TestErrors:
    def test_compliance_error_carries_terms(self):
        error = ComplianceError(["ghee", "honey"])

        assert isinstance(error, RecipeServiceError)
        assert error.terms == ["ghee", "honey"]
        assert str(error) == "Unable to generate compliant vegan recipe: ghee, honey"

    def test_generation_error_hierarchy(self):
        assert issubclass(RecipeGenerationError, RecipeServiceError)
        assert not issubclass(ComplianceError, RecipeGenerationError)

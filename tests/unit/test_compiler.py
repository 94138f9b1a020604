"""Unit tests for the constraint compiler."""

import pytest

from recipe_generator.constraints.compiler import (
    HIGH_PROTEIN_BASE,
    REQUIREMENT_CLAUSES,
    classify_complexity,
    compile_constraints,
    dedupe_filters,
    find_contradictions,
    normalize_filter,
)
from recipe_generator.models.models import ComplexityTier


class TestNormalization:
    """Test filter keys and deduplication."""

    @pytest.mark.parametrize(
        "label,key",
        [("Vegan", "vegan"), ("High Protein", "highprotein"), ("gluten-free", "glutenfree"), ("Low_Oxalate", "lowoxalate")],
    )
    def test_normalize_filter(self, label, key):
        assert normalize_filter(label) == key

    def test_dedupe_keeps_first_label(self):
        assert dedupe_filters(["Vegan", "vegan", "VEGAN", "keto"]) == ["Vegan", "keto"]

    def test_dedupe_handles_none_and_blanks(self):
        assert dedupe_filters(None) == []
        assert dedupe_filters(["", "  ", "---"]) == []

    def test_duplicates_do_not_change_output(self):
        once = compile_constraints(["vegan", "highProtein"])
        repeated = compile_constraints(["vegan", "Vegan", "highProtein", "high protein"])

        assert repeated.requirement_clauses == once.requirement_clauses
        assert repeated.forbidden_terms == once.forbidden_terms
        assert repeated.complexity_tier == once.complexity_tier


class TestRequirementClauses:
    """Test one clause per distinct filter."""

    def test_empty_filters(self):
        constraints = compile_constraints([])

        assert constraints.requirement_clauses == ()
        assert constraints.forbidden_terms == ()
        assert constraints.contradictions == ()
        assert constraints.complexity_tier is ComplexityTier.SIMPLE

    def test_known_filter_clause(self):
        constraints = compile_constraints(["vegan"])
        assert constraints.requirement_clauses == (REQUIREMENT_CLAUSES["vegan"],)

    def test_unknown_filter_passes_through_label(self):
        assert compile_constraints(["Low FODMAP"]).requirement_clauses == ("Low FODMAP",)

    def test_high_protein_general(self):
        (clause,) = compile_constraints(["highProtein"]).requirement_clauses

        assert clause.startswith(HIGH_PROTEIN_BASE)
        assert "lean, high-quality protein" in clause

    def test_high_protein_with_vegan_uses_plant_sources(self):
        clauses = compile_constraints(["vegan", "highProtein"]).requirement_clauses
        protein_clause = clauses[1]

        assert "plant-based protein sources" in protein_clause
        assert "lean beef" not in protein_clause

    def test_high_protein_with_keto(self):
        clauses = compile_constraints(["keto", "highProtein"]).requirement_clauses
        assert "low in net carbs" in clauses[1]


class TestForbiddenTerms:
    def test_vegan_forbidden_terms(self):
        terms = compile_constraints(["vegan"]).forbidden_terms

        assert "honey" in terms
        assert "gelatin" in terms
        assert list(terms) == sorted(terms)

    def test_nut_free_aliases_nut_allergy(self):
        assert compile_constraints(["nutFree"]).forbidden_terms == compile_constraints(["nutAllergy"]).forbidden_terms

    def test_union_of_forbidden_terms(self):
        terms = compile_constraints(["vegan", "lowOxalate"]).forbidden_terms
        assert "spinach" in terms and "eggs" in terms


class TestContradictions:
    """Test known-incompatible combinations."""

    @pytest.mark.parametrize(
        "filters",
        [["vegan", "keto"], ["keto", "vegan"], ["Vegan", "KETO", "vegan"], ["keto", "dairyFree"], ["paleo", "vegetarian"]],
    )
    def test_single_report_per_pair(self, filters):
        assert len(find_contradictions(compile_constraints(filters).normalized)) == 1

    def test_order_does_not_matter(self):
        assert compile_constraints(["vegan", "keto"]).contradictions == compile_constraints(["keto", "vegan"]).contradictions

    @pytest.mark.parametrize("filters", [["vegan"], ["keto", "highProtein"], ["vegetarian", "glutenFree"]])
    def test_no_contradiction(self, filters):
        assert compile_constraints(filters).contradictions == ()

    def test_multiple_contradictions(self):
        found = compile_constraints(["vegan", "keto", "paleo", "dairyFree"]).contradictions
        assert {c.filters for c in found} == {("keto", "vegan"), ("paleo", "vegan"), ("dairyfree", "keto")}


class TestComplexity:
    """Test complexity tier classification."""

    @pytest.mark.parametrize(
        "filters",
        [
            ["vegan"],
            ["highProtein"],
            ["lowOxalate"],
            ["keto", "highProtein"],
            ["lowCarb", "highProtein"],
            ["glutenFree", "dairyFree", "keto"],
            ["vegan", "indian"],
        ],
    )
    def test_complex(self, filters):
        assert compile_constraints(filters).complexity_tier is ComplexityTier.COMPLEX

    @pytest.mark.parametrize(
        "filters", [[], ["keto"], ["vegetarian", "italian"], ["glutenFree", "dairyFree"], ["lowCarb", "thai"]]
    )
    def test_simple(self, filters):
        assert compile_constraints(filters).complexity_tier is ComplexityTier.SIMPLE

    def test_vegan_with_non_friendly_cuisine(self):
        # vegan alone is already complex; the cuisine rule must agree
        assert classify_complexity(["vegan", "german"]) is ComplexityTier.COMPLEX
        assert classify_complexity(["vegan", "thai"]) is ComplexityTier.COMPLEX


class TestIdempotence:
    def test_compile_twice_serializes_identically(self):
        filters = ["Vegan", "keto", "highProtein", "indian", "vegan"]

        first = compile_constraints(filters).model_dump_json()
        second = compile_constraints(filters).model_dump_json()

        assert first == second

    def test_compiling_normalized_output_is_stable(self):
        constraints = compile_constraints(["High Protein", "Keto"])
        again = compile_constraints(constraints.normalized)

        assert again.normalized == constraints.normalized
        assert again.requirement_clauses == constraints.requirement_clauses
        assert again.complexity_tier == constraints.complexity_tier

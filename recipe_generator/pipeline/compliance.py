"""Compliance verification for generated drafts.

Vegan is the only filter verified after generation and enforced:
DRAFT -> CHECKED -> [RETRIED -> CHECKED] -> ACCEPTED | FAILED
with at most one strict corrective generation call.

Low-oxalate and cuisine authenticity checks are soft: they only log warnings.
"""

import re
from enum import Enum
from typing import List, Optional

from recipe_generator.models.errors import ComplianceError, RecipeGenerationError
from recipe_generator.models.models import (
    AuthenticityReport,
    CompiledConstraints,
    ComplianceFinding,
    ComplianceReport,
    RecipeDraft,
)
from recipe_generator.pipeline.generator import request_draft
from recipe_generator.prompts.prompts import (
    STRICT_VEGAN_SYSTEM_INSTRUCTIONS,
    build_strict_vegan_prompt,
    get_authenticity_pair,
)
from recipe_generator.utils.config import config
from recipe_generator.utils.logger import logger

MAX_COMPLIANCE_RETRIES = 1

NON_VEGAN_TERMS: tuple[str, ...] = (
    "yogurt", "milk", "cheese", "butter", "cream", "egg", "honey",
    "ghee", "whey", "casein", "meat", "chicken", "beef", "fish",
    "seafood", "gelatin", "dairy",
)

# "<prefix> <term>" or "<prefix>-<term>" phrases that name a plant-based product
PLANT_BASED_PREFIXES: tuple[str, ...] = (
    "coconut", "almond", "oat", "soy", "plant", "vegan", "cashew", "hemp",
    "rice", "pea", "plant-based", "non-dairy", "dairy-free", "non", "peanut", "nut",
    "cocoa", "flax", "chia",
)

# "<term> <suffix>" phrases, e.g. "egg replacer", "dairy-free"
PLANT_BASED_SUFFIXES: tuple[str, ...] = ("substitute", "replacer", "alternative", "free")

HIGH_OXALATE_INGREDIENTS: tuple[str, ...] = (
    "spinach", "beets", "rhubarb", "chocolate", "cocoa powder", "dark chocolate",
    "sweet potato", "almonds", "cashews", "peanuts", "sesame seeds", "tahini",
)

INDIAN_SPICES: tuple[str, ...] = (
    "turmeric", "haldi", "cumin", "jeera", "coriander", "dhaniya",
    "garam masala", "curry leaves", "mustard seeds", "rai",
    "asafoetida", "hing", "cardamom", "cinnamon", "cloves",
    "fenugreek", "kasuri methi", "curry powder", "sambar powder",
)
INDIAN_TECHNIQUES: tuple[str, ...] = ("tadka", "tempering", "temper", "masala", "bhuna", "dum")
FUSION_TITLE_TERMS: tuple[str, ...] = ("bowl", "wrap", "buddha", "quinoa", "pasta", "taco", "pizza", "fusion")


class ComplianceState(str, Enum):
    DRAFT = "draft"
    CHECKED = "checked"
    RETRIED = "retried"
    ACCEPTED = "accepted"
    FAILED = "failed"


def _draft_text(draft: RecipeDraft) -> str:
    """Lowercased ingredient names, quantities and instructions."""
    lines = [f"{i.name} {i.quantity}" for i in draft.ingredients]
    lines.extend(draft.instructions)
    return "\n".join(lines).lower()


def _contains_word(text: str, word: str) -> bool:
    return re.search(rf"\b{re.escape(word)}\b", text) is not None


def _term_pattern(term: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(term)}s?\b")


def _exception_pattern(term: str) -> re.Pattern:
    prefixes = "|".join(re.escape(p) for p in PLANT_BASED_PREFIXES)
    suffixes = "|".join(re.escape(s) for s in PLANT_BASED_SUFFIXES)
    escaped = re.escape(term)
    return re.compile(
        rf"\b(?:{prefixes})[ \t-]+{escaped}s?\b|\b{escaped}s?[ \t-]+(?:{suffixes})\b"
    )


def scan_for_vegan_violations(draft: RecipeDraft) -> ComplianceReport:
    """Scan a draft's ingredients and instructions for non-vegan terms.

    Each whole-word occurrence is excused only when it is part of a plant-based
    phrase ("coconut milk", "egg replacer"); a term counts as a violation if any
    occurrence remains unexcused.
    """
    text = _draft_text(draft)
    findings = []
    for term in NON_VEGAN_TERMS:
        term_re = _term_pattern(term)
        if not term_re.search(text):
            continue
        remainder = _exception_pattern(term).sub(" ", text)
        findings.append(ComplianceFinding(term=term, excused=term_re.search(remainder) is None))
    return ComplianceReport(findings=findings)


def normalize_vegan_tags(tags: List[str]) -> List[str]:
    """Ensure "vegan" is present and "vegetarian" is not."""
    normalized = [t for t in tags if t.lower() != "vegetarian"]
    if not any(t.lower() == "vegan" for t in normalized):
        normalized.append("vegan")
    return normalized


class ComplianceVerifier:
    """Bounded verify-and-correct loop for vegan requests.

    Holds the state history of a single enforcement run, so create one
    verifier per request.
    """

    def __init__(self, max_corrections: int = MAX_COMPLIANCE_RETRIES, request_id: Optional[str] = None) -> None:
        self.max_corrections = max_corrections
        self.request_id = request_id
        self.states: List[ComplianceState] = []

    def _transition(self, state: ComplianceState) -> None:
        self.states.append(state)
        logger.debug(f"Compliance state={state.value}", extra={"request_id": self.request_id})

    async def enforce(
        self, draft: RecipeDraft, request_text: str, constraints: CompiledConstraints
    ) -> RecipeDraft:
        """Return a compliant draft, correcting it at most max_corrections times.

        Drafts for requests without the vegan filter are returned unchanged.

        Raises:
            ComplianceError: If violations persist after the correction, or the corrective call fails.
        """
        if not constraints.has("vegan"):
            return draft

        log_extra = {"request_id": self.request_id}
        self._transition(ComplianceState.DRAFT)
        corrections = 0

        while True:
            report = scan_for_vegan_violations(draft)
            self._transition(ComplianceState.CHECKED)

            if report.is_compliant:
                self._transition(ComplianceState.ACCEPTED)
                if corrections:
                    logger.info("Vegan compliance restored after strict retry", extra=log_extra)
                return draft.model_copy(update={"dietary_tags": normalize_vegan_tags(draft.dietary_tags)})

            if corrections >= self.max_corrections:
                self._transition(ComplianceState.FAILED)
                logger.error(
                    f"Vegan violations persist after {corrections} correction(s): {', '.join(report.violations)}",
                    extra=log_extra,
                )
                raise ComplianceError(report.violations)

            logger.warning(
                f"Vegan violations detected: {', '.join(report.violations)}. Retrying with stricter instructions...",
                extra=log_extra,
            )
            try:
                draft = await request_draft(
                    STRICT_VEGAN_SYSTEM_INSTRUCTIONS,
                    build_strict_vegan_prompt(request_text, constraints, report.violations),
                    temperature=config.TEMPERATURE,
                    max_attempts=1,
                    request_id=self.request_id,
                )
            except RecipeGenerationError as e:
                self._transition(ComplianceState.FAILED)
                logger.error(f"Strict vegan retry failed: {e}", extra=log_extra)
                raise ComplianceError(report.violations) from e

            corrections += 1
            self._transition(ComplianceState.RETRIED)


def check_low_oxalate(draft: RecipeDraft) -> List[str]:
    """Return high-oxalate ingredients found in the draft (advisory only)."""
    text = _draft_text(draft)
    return [
        ingredient
        for ingredient in HIGH_OXALATE_INGREDIENTS
        if ingredient in text
        and f"{ingredient} substitute" not in text
        and f"low-oxalate {ingredient}" not in text
    ]


def check_cuisine_authenticity(draft: RecipeDraft) -> AuthenticityReport:
    """Count traditional Indian spices and techniques, and fusion terms in the title."""
    title = draft.title.lower()
    text = f"{title}\n{_draft_text(draft)}"
    return AuthenticityReport(
        spices_found=[s for s in INDIAN_SPICES if _contains_word(text, s)],
        techniques_found=[t for t in INDIAN_TECHNIQUES if _contains_word(text, t)],
        fusion_terms=[f for f in FUSION_TITLE_TERMS if _contains_word(title, f)],
    )


def run_soft_checks(
    draft: RecipeDraft, constraints: CompiledConstraints, request_id: Optional[str] = None
) -> None:
    """Log advisory findings that never block acceptance."""
    log_extra = {"request_id": request_id}

    if constraints.has("lowoxalate"):
        found = check_low_oxalate(draft)
        if found:
            logger.warning(f"Low oxalate violations detected: {', '.join(found)}", extra=log_extra)

    if get_authenticity_pair(constraints) == ("vegan", "indian"):
        report = check_cuisine_authenticity(draft)
        for warning in report.warnings:
            logger.warning(f"Indian authenticity warning: {warning}", extra=log_extra)
        logger.info(
            f"Indian authenticity check: {len(report.spices_found)} spices, "
            f"{len(report.techniques_found)} techniques found",
            extra=log_extra,
        )

"""Safety annotation: one independent classification pass over the final draft.

Unsafe verdicts never fail the request. The first issue is appended to the
description as a note, and allergen issues add a "Contains Allergens" tag.
"""

from typing import Optional

from recipe_generator.models.models import RecipeDraft, SafetyVerdict
from recipe_generator.prompts.prompts import SAFETY_SYSTEM_INSTRUCTIONS, build_safety_prompt
from recipe_generator.services.gemini import generate_json
from recipe_generator.utils.config import config
from recipe_generator.utils.helpers import parse_json_payload, safe_execute_async
from recipe_generator.utils.logger import logger

ALLERGEN_KEYWORDS = ("allergen", "allergy", "allergic")
ALLERGEN_TAG = "Contains Allergens"


async def classify_safety(draft: RecipeDraft) -> SafetyVerdict:
    """Run the safety classification call.

    Raises:
        ValueError: If the response holds no JSON object.
        Exception: Transport and validation errors are propagated.
    """
    text = await generate_json(
        SAFETY_SYSTEM_INSTRUCTIONS,
        build_safety_prompt(draft),
        temperature=0.0,
        model=config.SAFETY_MODEL,
    )
    payload = parse_json_payload(text)
    if payload is None:
        raise ValueError("Safety classification returned no JSON object")
    return SafetyVerdict.model_validate(payload)


def apply_safety_verdict(draft: RecipeDraft, verdict: SafetyVerdict) -> RecipeDraft:
    if verdict.safe or not verdict.issues:
        return draft

    update = {"description": f"{draft.description} (Note: {verdict.issues[0]})"}
    mentions_allergen = any(
        keyword in issue.lower() for issue in verdict.issues for keyword in ALLERGEN_KEYWORDS
    )
    if mentions_allergen and ALLERGEN_TAG not in draft.dietary_tags:
        update["dietary_tags"] = [*draft.dietary_tags, ALLERGEN_TAG]

    return draft.model_copy(update=update)


async def annotate_safety(draft: RecipeDraft, request_id: Optional[str] = None) -> RecipeDraft:
    """Classify the draft and annotate it; the draft is returned unchanged if the call fails."""
    if not config.ENABLE_SAFETY_CHECK:
        return draft

    verdict = await safe_execute_async(classify_safety(draft), "Safety classification")
    if verdict is None:
        return draft

    if not verdict.safe:
        logger.warning(f"Recipe safety warning: {', '.join(verdict.issues)}", extra={"request_id": request_id})
    return apply_safety_verdict(draft, verdict)

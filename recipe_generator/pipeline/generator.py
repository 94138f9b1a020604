"""Generation orchestrator: issues recipe generation calls and parses drafts.

State machine per call: DRAFT -> PARSED -> ACCEPTED | FAILED

- Complex tier: elevated temperature, one retry of the same prompt when the
  call fails in transport or returns no decodable JSON object.
- Simple tier: base temperature, single call.
- A decoded object missing mandatory fields is terminal (FAILED) in both tiers.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError

from recipe_generator.models.errors import RecipeGenerationError
from recipe_generator.models.models import CompiledConstraints, ComplexityTier, PromptBundle, RecipeDraft
from recipe_generator.services.gemini import generate_json
from recipe_generator.utils.config import config
from recipe_generator.utils.helpers import parse_json_payload
from recipe_generator.utils.logger import logger

COMPLEX_MAX_ATTEMPTS = 2
SIMPLE_MAX_ATTEMPTS = 1


class GenerationState(str, Enum):
    DRAFT = "draft"
    PARSED = "parsed"
    ACCEPTED = "accepted"
    FAILED = "failed"


def log_constraint_diagnostics(
    raw_filters: list[str], constraints: CompiledConstraints, request_id: Optional[str] = None
) -> None:
    """Emit an audit record of the filters received, their normalized form and the chosen tier."""
    diagnostics = {
        "filters_received": list(raw_filters),
        "filters_normalized": list(constraints.normalized),
        "complexity_tier": constraints.complexity_tier.value,
        "forbidden_terms": len(constraints.forbidden_terms),
        "contradictions": [list(c.filters) for c in constraints.contradictions],
    }
    logger.info(
        f"Constraints compiled: filters={diagnostics['filters_normalized']} "
        f"tier={diagnostics['complexity_tier']} contradictions={diagnostics['contradictions']}",
        extra={"request_id": request_id, "diagnostics": diagnostics},
    )


def validate_draft(payload: dict[str, Any]) -> RecipeDraft:
    """Validate a decoded JSON object into a RecipeDraft.

    Raises:
        RecipeGenerationError: If mandatory fields are missing, empty or malformed.
    """
    try:
        return RecipeDraft.model_validate(payload)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise RecipeGenerationError(
            f"Generated recipe is incomplete - invalid or missing fields: {', '.join(fields)}"
        ) from e


async def request_draft(
    system: str,
    user: str,
    temperature: float,
    max_attempts: int = 1,
    request_id: Optional[str] = None,
) -> RecipeDraft:
    """Run one generation call (plus optional retries) through the DRAFT -> PARSED -> ACCEPTED states.

    Args:
        system: System instruction.
        user: User message.
        temperature: Sampling temperature.
        max_attempts: Total calls allowed for transport/JSON decode failures.
        request_id: Correlation id for log records.

    Returns:
        Accepted RecipeDraft.

    Raises:
        RecipeGenerationError: When every attempt failed, or the draft is missing mandatory fields.
    """
    log_extra = {"request_id": request_id}
    last_error: Optional[Exception] = None

    for attempt in range(1, max_attempts + 1):
        state = GenerationState.DRAFT
        logger.debug(f"Generation attempt {attempt}/{max_attempts} state={state.value}", extra=log_extra)

        try:
            text = await generate_json(system, user, temperature=temperature)
        except Exception as e:
            last_error = e
            logger.warning(f"Generation call failed (attempt {attempt}/{max_attempts}): {e}", extra=log_extra)
            continue

        payload = parse_json_payload(text)
        if payload is None:
            last_error = ValueError("Response did not contain a JSON object")
            logger.warning(
                f"Generation returned no JSON object (attempt {attempt}/{max_attempts})", extra=log_extra
            )
            continue

        state = GenerationState.PARSED
        logger.debug(f"Generation attempt {attempt} state={state.value}", extra=log_extra)

        try:
            draft = validate_draft(payload)
        except RecipeGenerationError as e:
            state = GenerationState.FAILED
            logger.error(f"Generation state={state.value}: {e}", extra=log_extra)
            raise

        state = GenerationState.ACCEPTED
        logger.info(f"Draft accepted: '{draft.title}' (attempt {attempt}, state={state.value})", extra=log_extra)
        return draft

    logger.error(
        f"Generation state={GenerationState.FAILED.value} after {max_attempts} attempt(s): {last_error}",
        extra=log_extra,
    )
    raise RecipeGenerationError(f"Recipe generation failed after {max_attempts} attempt(s)") from last_error


async def generate_draft(
    bundle: PromptBundle,
    tier: ComplexityTier,
    request_id: Optional[str] = None,
) -> RecipeDraft:
    """Generate a recipe draft using the strategy for the given complexity tier."""
    if tier is ComplexityTier.COMPLEX:
        temperature, max_attempts = config.COMPLEX_TEMPERATURE, COMPLEX_MAX_ATTEMPTS
    else:
        temperature, max_attempts = config.TEMPERATURE, SIMPLE_MAX_ATTEMPTS

    logger.info(
        f"Generating recipe: tier={tier.value}, model={config.GEMINI_MODEL}, temperature={temperature}",
        extra={"request_id": request_id},
    )
    return await request_draft(
        bundle.system, bundle.user, temperature=temperature, max_attempts=max_attempts, request_id=request_id
    )

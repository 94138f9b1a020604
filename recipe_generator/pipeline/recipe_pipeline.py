"""End-to-end recipe generation.

Steps run strictly in order for a single request:
validate -> compile constraints -> assemble prompt -> generate draft ->
vegan compliance -> soft checks -> nutrition -> safety -> image.

Failure semantics:
- Invalid request: pydantic ValidationError, raised before any external call
- Vegan violations surviving the correction: ComplianceError (propagated as-is)
- Any other failure up to compliance: RecipeGenerationError("Failed to generate recipe")
- Nutrition, safety and image steps degrade gracefully and never raise
"""

import random
import uuid
from typing import Optional, Union

from recipe_generator.constraints.compiler import compile_constraints
from recipe_generator.models.errors import ComplianceError, RecipeGenerationError
from recipe_generator.models.models import RecipeDraft, RecipeGenerationRequest
from recipe_generator.pipeline.compliance import ComplianceVerifier, run_soft_checks
from recipe_generator.pipeline.generator import generate_draft, log_constraint_diagnostics
from recipe_generator.pipeline.images import synthesize_recipe_image
from recipe_generator.pipeline.nutrition import analyze_nutrition, reconcile_nutrition
from recipe_generator.pipeline.safety import annotate_safety
from recipe_generator.prompts.prompts import assemble_prompt
from recipe_generator.utils.config import config
from recipe_generator.utils.logger import logger


async def _finalize_nutrition(draft: RecipeDraft, request_id: str) -> RecipeDraft:
    reported = draft.nutrition_info
    if config.ANALYZE_NUTRITION:
        analyzed = await analyze_nutrition(draft.ingredients, draft.servings)
        if analyzed is not None:
            reported = analyzed

    estimate = reconcile_nutrition(draft.ingredients, draft.servings, reported, request_id=request_id)
    return draft.model_copy(update={"nutrition_info": estimate.final})


async def generate_recipe(
    request: Union[RecipeGenerationRequest, dict],
    rng: Optional[random.Random] = None,
) -> RecipeDraft:
    """Generate a complete recipe for a dish description and dietary filters.

    Args:
        request: RecipeGenerationRequest, or a dict with "prompt" and optional "dietaryFilters".
        rng: Optional random source for the protein steer (seed it for reproducible prompts).

    Returns:
        Final RecipeDraft with reconciled nutrition, safety notes and imageUrl (None if unavailable).

    Raises:
        ValidationError: If the request is invalid.
        ComplianceError: If a vegan recipe could not be made compliant.
        RecipeGenerationError: If generation failed.
    """
    if not isinstance(request, RecipeGenerationRequest):
        request = RecipeGenerationRequest.model_validate(request)

    request_id = uuid.uuid4().hex[:12]
    log_extra = {"request_id": request_id}
    logger.info(f"Generating recipe for: {request.prompt[:80]!r}", extra=log_extra)

    try:
        constraints = compile_constraints(request.dietary_filters)
        log_constraint_diagnostics(request.dietary_filters, constraints, request_id=request_id)

        bundle = assemble_prompt(request.prompt, constraints, rng=rng)
        draft = await generate_draft(bundle, constraints.complexity_tier, request_id=request_id)

        verifier = ComplianceVerifier(request_id=request_id)
        draft = await verifier.enforce(draft, request.prompt, constraints)
    except ComplianceError:
        raise
    except Exception as e:
        logger.error(f"Recipe generation error: {e}", extra=log_extra)
        raise RecipeGenerationError("Failed to generate recipe") from e

    run_soft_checks(draft, constraints, request_id=request_id)
    draft = await _finalize_nutrition(draft, request_id)
    draft = await annotate_safety(draft, request_id=request_id)

    image_url = await synthesize_recipe_image(draft, request_id=request_id)
    draft = draft.model_copy(update={"image_url": image_url})

    logger.info(f"Recipe ready: '{draft.title}' (image={'yes' if image_url else 'no'})", extra=log_extra)
    return draft

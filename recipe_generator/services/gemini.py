"""Google Gemini calls used by the pipeline (single attempt, no retries).

- generate_json(): text generation in JSON output mode (recipes, safety verdicts, nutrition)
- generate_image(): one square image, returned as raw bytes

Retry policy lives in the callers (generator.py, compliance.py). The sync
google-genai client is called through asyncio.to_thread so the event loop is
never blocked.
"""

import asyncio
from typing import Optional

from google import genai
from google.genai import types

from recipe_generator.utils.config import config
from recipe_generator.utils.logger import logger


def _client() -> genai.Client:
    return genai.Client(api_key=config.GEMINI_API_KEY)


async def generate_json(
    system_instruction: str,
    user_prompt: str,
    temperature: Optional[float] = None,
    model: Optional[str] = None,
) -> str:
    """Call Gemini in JSON output mode and return the raw response text.

    Args:
        system_instruction: Role, rules and required JSON shape.
        user_prompt: User message.
        temperature: Sampling temperature (defaults to config.TEMPERATURE).
        model: Model name (defaults to config.GEMINI_MODEL).

    Returns:
        Response text (expected to be a JSON object, parsed by the caller).

    Raises:
        RuntimeError: If the model returned no text.
        Exception: Transport/API errors from google-genai are propagated unchanged.
    """
    model_name = model or config.GEMINI_MODEL
    temperature = config.TEMPERATURE if temperature is None else temperature
    logger.debug(f"Gemini JSON call: model={model_name}, temperature={temperature}")

    response = await asyncio.to_thread(
        _client().models.generate_content,
        model=model_name,
        contents=user_prompt,
        config=types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=temperature,
            max_output_tokens=config.MAX_OUTPUT_TOKENS,
            response_mime_type="application/json",
        ),
    )

    text = response.text
    if not text:
        raise RuntimeError("No response content from Gemini")
    return text


async def generate_image(prompt: str) -> bytes:
    """Generate a single square image and return its bytes.

    Raises:
        RuntimeError: If the service returned no image.
    """
    logger.debug(f"Gemini image call: model={config.IMAGE_MODEL}")

    response = await asyncio.to_thread(
        _client().models.generate_images,
        model=config.IMAGE_MODEL,
        prompt=prompt,
        config=types.GenerateImagesConfig(number_of_images=1, aspect_ratio="1:1"),
    )

    images = response.generated_images or []
    if not images or not images[0].image or not images[0].image.image_bytes:
        raise RuntimeError("No image returned from image model")
    return images[0].image.image_bytes

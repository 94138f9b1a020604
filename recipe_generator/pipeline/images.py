"""Image synthesis for finished recipes.

Flow: preparation hint from the instructions -> plated-dish prompt -> one
square image from the image model -> optional JPEG compression -> data URL ->
permanent Cloudinary URL. Any failure yields None; the recipe is still returned.
"""

import base64
import re
from io import BytesIO
from typing import Optional

import filetype
from PIL import Image

from recipe_generator.models.models import RecipeDraft
from recipe_generator.services.asset_host import host_image
from recipe_generator.services.gemini import generate_image
from recipe_generator.utils.config import config
from recipe_generator.utils.helpers import safe_execute_async, safe_execute_sync
from recipe_generator.utils.logger import logger

# First matching pattern wins
PREPARATION_HINTS: tuple[tuple[re.Pattern, str], ...] = (
    (re.compile(r"mash|puree|blend|crush"), "Show in mashed, pureed, or blended form with smooth, creamy texture."),
    (re.compile(r"layer|arrange|stack"), "Show the layered presentation with visible distinct layers."),
    (re.compile(r"mix|toss|combine|stir together"), "Show ingredients thoroughly mixed and combined in the dish."),
    (re.compile(r"simmer|stew|braise"), "Show as a simmered dish with rich sauce or gravy coating the ingredients."),
    (re.compile(r"roast|bake"), "Show the roasted/baked dish with golden-brown caramelization."),
    (re.compile(r"fry|sauté|pan.?fry"), "Show the fried/sautéed dish with golden, crispy appearance."),
    (re.compile(r"grill|char|smoke"), "Show grill marks or charred appearance."),
    (re.compile(r"stuff|fill"), "Show the stuffed presentation with filling visible."),
)


def extract_preparation_style(instructions: list[str]) -> str:
    """Return the presentation hint for the first cooking verb family found, or ""."""
    text = " ".join(instructions).lower()
    for pattern, hint in PREPARATION_HINTS:
        if pattern.search(text):
            return hint
    return ""


def build_image_prompt(title: str, description: str, instructions: list[str]) -> str:
    prep_style = extract_preparation_style(instructions)
    lines = [
        f"A professional, realistic food photography image of {title}.",
        f"{description.rstrip('.')}.",
    ]
    if prep_style:
        lines.append(prep_style)
    lines.extend([
        "IMPORTANT: Show the FINISHED, PLATED DISH as it would be served to a customer, "
        "not raw ingredients or cooking process.",
        "Close-up shot with soft natural lighting, shallow depth of field, photographed on a rustic wooden "
        "table with elegant tableware. Include fresh garnishes and complementary ingredients in the background.",
        "Use warm, appetizing colors. Ensure all details are photo-realistic and not illustrations.",
        "High-resolution, magazine-quality food photography of the completed, ready-to-eat dish.",
    ])
    return "\n".join(lines)


def compress_image(image_bytes: bytes, max_width: int = 1024) -> bytes:
    """Re-encode as progressive JPEG (quality 85), resizing wider images.

    Returns the original bytes if Pillow cannot decode them.
    """

    def _compress():
        img = Image.open(BytesIO(image_bytes))

        # Convert RGBA/LA/P to RGB for JPEG
        if img.mode in ("RGBA", "LA", "P"):
            rgb_img = Image.new("RGB", img.size, (255, 255, 255))
            if img.mode == "RGBA":
                rgb_img.paste(img, mask=img.split()[-1])
            else:
                rgb_img.paste(img)
            img = rgb_img

        if img.width > max_width:
            ratio = max_width / img.width
            img = img.resize((max_width, int(img.height * ratio)), Image.Resampling.LANCZOS)

        output = BytesIO()
        img.save(output, format="JPEG", quality=85, optimize=True, progressive=True)
        compressed = output.getvalue()
        logger.debug(f"Image compressed: {len(image_bytes) / 1024:.1f}KB -> {len(compressed) / 1024:.1f}KB")
        return compressed

    return safe_execute_sync(_compress, "Image compression", default_return=image_bytes)


def to_data_url(image_bytes: bytes) -> str:
    """Encode image bytes as a data URL, detecting the MIME type from magic bytes."""
    kind = filetype.guess(image_bytes)
    mime = kind.mime if kind is not None else "image/png"
    return f"data:{mime};base64,{base64.b64encode(image_bytes).decode('ascii')}"


async def _generate_and_host(draft: RecipeDraft) -> str:
    prompt = build_image_prompt(draft.title, draft.description, draft.instructions)
    image_bytes = await generate_image(prompt)
    if config.COMPRESS_IMG:
        image_bytes = compress_image(image_bytes)
    return await host_image(to_data_url(image_bytes))


async def synthesize_recipe_image(draft: RecipeDraft, request_id: Optional[str] = None) -> Optional[str]:
    """Generate and permanently host a plated-dish image for the draft.

    Returns:
        Permanent image URL, or None when disabled, unconfigured or on any failure.
    """
    log_extra = {"request_id": request_id}
    if not config.ENABLE_IMAGE_GENERATION:
        return None
    if not config.cloudinary_configured:
        logger.warning("Cloudinary is not configured, skipping recipe image", extra=log_extra)
        return None

    url = await safe_execute_async(_generate_and_host(draft), "Recipe image generation")
    if url:
        logger.info(f"Recipe image ready: {url}", extra=log_extra)
    return url

"""Error handling and parsing helpers shared by the pipeline stages.

- safe_execute_async / safe_execute_sync: consistent try/log/default pattern for
  best-effort operations (safety annotation, image hosting, nutrition analysis)
- parse_json_payload: lenient JSON parsing for LLM responses
"""

import json
import re
from typing import Any, Optional

from recipe_generator.utils.logger import logger


def _log_error(operation_name: str, exception: Exception, log_level: str = "warning") -> None:
    """Log error with appropriate level.

    Args:
        operation_name: Description for logging
        exception: Exception that occurred
        log_level: Logging level ("debug", "warning", "error"). Default: "warning".
    """
    msg = f"{operation_name}: {exception}"
    if log_level == "debug":
        logger.debug(msg)
    elif log_level == "error":
        logger.error(msg)
    else:
        logger.warning(msg)


async def safe_execute_async(
    coro,
    operation_name: str,
    log_level: str = "warning",
    default_return=None,
):
    """Safely execute async operation with consistent error logging.

    Used for pipeline stages whose failure must degrade gracefully:
    - Safety annotation: skip annotation
    - Image generation/hosting: imageUrl becomes None
    - Nutrition analysis: keep the draft's reported values

    Args:
        coro: Awaitable coroutine to execute.
        operation_name: Description for logging (e.g., "Safety classification").
        log_level: Logging level ("debug", "warning", "error"). Default: "warning".
        default_return: Value to return on exception. Default: None.

    Returns:
        Result of coroutine if successful, default_return on exception.
    """
    try:
        return await coro
    except Exception as e:
        _log_error(operation_name, e, log_level)
        return default_return


def safe_execute_sync(
    func,
    operation_name: str,
    log_level: str = "warning",
    default_return=None,
):
    """Safely execute sync operation with consistent error logging.

    Synchronous version of safe_execute_async. Same behavior and patterns.

    Args:
        func: Callable to execute (no args).
        operation_name: Description for logging.
        log_level: Logging level ("debug", "warning", "error"). Default: "warning".
        default_return: Value to return on exception. Default: None.

    Returns:
        Result of func if successful, default_return on exception.
    """
    try:
        return func()
    except Exception as e:
        _log_error(operation_name, e, log_level)
        return default_return


def parse_json_payload(response_text: Optional[str]) -> Optional[dict[str, Any]]:
    """Parse a JSON object from an LLM response.

    Implements lenient JSON parsing to handle responses that wrap the object in
    explanatory text or markdown fences. Tries two strategies:
    1. Direct json.loads() on the full response
    2. Regex extraction of the outermost {...} block

    Args:
        response_text: Raw response text (may include non-JSON text).

    Returns:
        Parsed dict, or None if no JSON object could be decoded.
    """
    if not response_text or not response_text.strip():
        return None

    def _parse_json_direct():
        return json.loads(response_text)

    def _parse_json_regex():
        json_match = re.search(r"\{.*\}", response_text, re.DOTALL)
        if json_match:
            return json.loads(json_match.group())
        return None

    parsed = safe_execute_sync(
        _parse_json_direct,
        "Direct JSON parse",
        log_level="debug",
        default_return=None,
    )

    if not isinstance(parsed, dict):
        parsed = safe_execute_sync(
            _parse_json_regex,
            "Regex JSON extraction",
            log_level="debug",
            default_return=None,
        )

    if not isinstance(parsed, dict):
        logger.warning("Failed to parse JSON object from model response")
        return None

    return parsed

# orchestration/api_retry.py

import asyncio
import json
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

MAX_RETRIES = 3
GENERIC_ERROR_MESSAGE = "An unexpected error occurred."
RETRYABLE_MARKERS = ("503", "overloaded")
RETRYABLE_STATUS_CODES = (503,)

T = TypeVar("T")


@dataclass(frozen=True)
class ApiError:
    """Normalized view of a provider failure."""
    message: str
    retryable: bool
    status_code: Optional[int] = None


def extract_error_message(error) -> str:
    """
    Pull a human-readable message out of a raw provider error.

    The SDK may put a JSON document like {"error": {"message": "..."}} in the
    exception text; the nested message wins when present.
    """
    if not isinstance(error, BaseException):
        return GENERIC_ERROR_MESSAGE

    raw_message = str(error)
    try:
        parsed = json.loads(raw_message)
    except ValueError:
        parsed = None

    if isinstance(parsed, dict):
        nested = parsed.get("error")
        if isinstance(nested, dict):
            nested_message = nested.get("message")
            if isinstance(nested_message, str) and nested_message:
                return nested_message

    # google-genai APIError keeps the provider message on .message
    sdk_message = getattr(error, "message", None)
    if isinstance(sdk_message, str) and sdk_message.strip():
        return sdk_message

    return raw_message or GENERIC_ERROR_MESSAGE


def is_retryable_message(message: str) -> bool:
    lowered = (message or "").lower()
    return any(marker in lowered for marker in RETRYABLE_MARKERS)


def _status_code(error) -> Optional[int]:
    code = getattr(error, "code", None)
    try:
        return int(code) if code is not None else None
    except (TypeError, ValueError):
        return None


def classify_error(error) -> ApiError:
    message = extract_error_message(error)
    status_code = _status_code(error)
    retryable = is_retryable_message(message) or status_code in RETRYABLE_STATUS_CODES
    return ApiError(message=message, retryable=retryable, status_code=status_code)


def backoff_delay(attempt: int) -> float:
    """Seconds to wait after a failed 0-indexed attempt: 1-2s, 2-3s, 4-5s, ..."""
    return 2 ** attempt + random.random()


async def call_with_retry(
    api_call: Callable[[], Awaitable[T]],
    max_retries: int = MAX_RETRIES,
    logger: Optional[logging.Logger] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run an async API call, retrying only while the backend reports overload.

    At most max_retries attempts are made, one at a time. Non-retryable
    errors and the error of the final attempt are re-raised unchanged.
    """
    logger = logger or logging.getLogger(__name__)
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    for attempt in range(max_retries):
        try:
            return await api_call()
        except Exception as e:
            api_error = classify_error(e)
            if not api_error.retryable or attempt >= max_retries - 1:
                raise

            delay = backoff_delay(attempt)
            logger.warning(
                f"API call failed with retryable error: {api_error.message}. "
                f"Retrying in {delay:.1f}s... (Attempt {attempt + 1}/{max_retries})"
            )
            await sleep(delay)

    raise RuntimeError("API call failed after max retries.")

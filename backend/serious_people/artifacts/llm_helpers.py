"""Helpers for talking to Claude about a single artifact.

- strip_json_fences / parse_json_object: tolerate ```json fences and a short
  preamble before the object
- response_text: join the text blocks of a messages.create() response
- invoke_with_retry: messages.create() with tenacity backoff on transient errors
"""

import json
from typing import Any

import anthropic
import structlog
from anthropic._exceptions import OverloadedError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = structlog.get_logger(__name__)

# Errors worth another attempt; everything else fails the artifact immediately
TRANSIENT_ERRORS = (OverloadedError, anthropic.RateLimitError, anthropic.APIConnectionError)


def strip_json_fences(content: str) -> str:
    """Remove a markdown code fence wrapping the model output."""
    content = content.strip()
    if content.startswith("```"):
        first_newline = content.find("\n")
        content = content[first_newline + 1 :] if first_newline != -1 else ""
        if content.rstrip().endswith("```"):
            content = content.rstrip()[:-3]
    return content.strip()


def parse_json_object(content: str) -> Any:
    """Parse the model's JSON answer.

    Text before the first "{" (e.g. "Here is the artifact:") is dropped.

    Raises:
        json.JSONDecodeError: If no valid JSON remains
    """
    text = strip_json_fences(content)
    start, end = text.find("{"), text.rfind("}")
    if start > 0 and end > start:
        text = text[start : end + 1]
    return json.loads(text)


def response_text(response: Any) -> str:
    """Concatenate the text blocks of a Messages API response."""
    parts = [block.text for block in response.content if isinstance(getattr(block, "text", None), str)]
    return "".join(parts)


@retry(
    retry=retry_if_exception_type(TRANSIENT_ERRORS),
    stop=stop_after_attempt(4),
    wait=wait_exponential(multiplier=2, min=2, max=30),
    reraise=True,
    before_sleep=lambda rs: logger.warning(
        "claude_transient_error_retrying",
        attempt=rs.attempt_number,
        error_type=type(rs.outcome.exception()).__name__,
        sleep_seconds=rs.next_action.sleep,
    ),
)
async def invoke_with_retry(client: Any, model: str, system: str, messages: list[dict], max_tokens: int) -> str:
    """Call messages.create() and return the response text.

    Overload, rate limit and connection errors are retried up to 4 attempts;
    other API errors propagate on the first failure.
    """
    response = await client.messages.create(
        model=model,
        system=system,
        messages=messages,
        max_tokens=max_tokens,
    )
    return response_text(response)

"""
Shared helpers for LLM calls that must return JSON.

Models sometimes wrap JSON in markdown fences or add a sentence around it, so
parsing looks for a fenced block first and then for the outermost object or
array before giving up.
"""
import json
import logging
import re
from typing import Any, Optional

from app.core.exceptions import UpstreamError
from app.llm.provider import LLMProvider
from app.llm.router import get_model_for_feature

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_WHITESPACE = re.compile(r"\s+")


def sanitize_text(text: Optional[str]) -> str:
    """Strip control characters and collapse whitespace before text goes into a prompt."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", _CONTROL_CHARS.sub(" ", text)).strip()


def parse_json_content(text: str) -> Any:
    """
    Parse JSON out of a model reply.

    Raises:
        ValueError: If no JSON object or array can be recovered
    """
    if not text or not text.strip():
        raise ValueError("Empty response")

    fenced = _FENCED_JSON.search(text)
    candidate = fenced.group(1) if fenced else text.strip()

    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass

    # Fall back to the outermost {...} or [...] span
    for opener, closer in (("{", "}"), ("[", "]")):
        start, end = candidate.find(opener), candidate.rfind(closer)
        if start != -1 and end > start:
            try:
                return json.loads(candidate[start:end + 1])
            except json.JSONDecodeError:
                continue

    raise ValueError(f"No JSON found in response: {text[:100]}")


def request_json(
    llm: Optional[LLMProvider],
    feature: str,
    system_prompt: str,
    prompt: str,
    temperature: float = 0.7,
    max_tokens: int = 1000,
) -> Any:
    """
    Run one chat completion and return its parsed JSON content.

    Raises:
        UpstreamError: LLM not configured, call failed, or reply was not JSON
    """
    if llm is None:
        raise UpstreamError("AI service is not configured")

    try:
        response = llm.ask(
            system_prompt,
            prompt,
            model=get_model_for_feature(feature),
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except Exception as e:
        logger.error(f"LLM call for {feature} failed: {e}", exc_info=True)
        raise UpstreamError("AI service request failed") from e

    try:
        return parse_json_content(response.content)
    except ValueError as e:
        logger.warning(f"LLM reply for {feature} was not valid JSON: {e}")
        raise UpstreamError("AI service returned an invalid response") from e

"""
Model selection per feature, plus the shared provider dependency.
"""
import logging
from functools import lru_cache
from typing import Optional

from app.core.config import OPENAI_API_KEY, OPENAI_MODEL
from app.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

# Feature -> model mapping; anything missing uses OPENAI_MODEL
MODEL_ROUTING = {
    "answer_feedback": OPENAI_MODEL,
    "behavioral_questions": OPENAI_MODEL,
    "technical_topics": OPENAI_MODEL,
}


def get_model_for_feature(feature: str) -> str:
    """Get the model identifier to use for a feature."""
    return MODEL_ROUTING.get(feature, OPENAI_MODEL)


def is_model_available() -> bool:
    """Check if an LLM is available (OpenAI configured)."""
    return bool(OPENAI_API_KEY)


@lru_cache
def get_llm_provider() -> Optional[LLMProvider]:
    """
    Return the shared LLM provider, or None when no API key is configured.

    Callers treat None as "LLM unavailable" and fall back to their defaults.
    """
    if not is_model_available():
        logger.warning("OPENAI_API_KEY not set, LLM features will use fallbacks")
        return None

    from app.llm.openai_provider import OpenAIProvider
    return OpenAIProvider()

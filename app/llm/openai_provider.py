"""
OpenAI chat completions behind the LLMProvider interface.
"""
import logging
from typing import Optional

from openai import OpenAI, APIError

from app.core.config import OPENAI_API_KEY
from app.llm.provider import LLMProvider, LLMResponse, Message

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 1000


class OpenAIProvider(LLMProvider):

    def __init__(self, api_key: Optional[str] = None, timeout: float = 60.0):
        key = api_key or OPENAI_API_KEY
        if not key:
            raise ValueError("OPENAI_API_KEY not configured")
        self.client = OpenAI(api_key=key, timeout=timeout)
        logger.info("OpenAI client ready")

    def chat(
        self,
        messages: list[Message],
        model: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        try:
            completion = self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens or DEFAULT_MAX_TOKENS,
                **kwargs
            )
        except APIError as e:
            logger.error(f"OpenAI request for model={model} failed: {e}", exc_info=True)
            raise

        choice = completion.choices[0]
        usage = completion.usage
        return LLMResponse(
            content=choice.message.content or "",
            model=model,
            tokens_in=usage.prompt_tokens if usage else 0,
            tokens_out=usage.completion_tokens if usage else 0,
            metadata={"finish_reason": choice.finish_reason},
        )

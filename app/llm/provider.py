"""
Chat-completion interface used by feedback grading and question generation.

Services only ever send one system prompt plus one user prompt, so `ask`
builds that message pair and hands it to the provider. Tests swap in a fake
provider through the `get_llm_provider` dependency.
"""
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any
from dataclasses import dataclass, field

Message = Dict[str, str]


@dataclass
class LLMResponse:
    """Reply text plus token usage reported by the model."""
    content: str
    model: str = ""
    tokens_in: int = 0
    tokens_out: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)


class LLMProvider(ABC):

    @abstractmethod
    def chat(
        self,
        messages: list[Message],
        model: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """Run one completion over `messages` (dicts with role and content)."""

    def ask(
        self,
        system_prompt: str,
        prompt: str,
        model: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        return self.chat(
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )

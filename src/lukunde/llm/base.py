"""Base LLM client interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class LLMResponse:
    """Response from LLM."""

    content: list[Any]
    stop_reason: str
    usage: Optional[dict] = None

    @property
    def text(self) -> str:
        """Concatenated text of every text block in the response."""
        parts = []
        for block in self.content:
            text = getattr(block, "text", None)
            if text is None and isinstance(block, dict):
                text = block.get("text")
            if text:
                parts.append(text)
        return "".join(parts)


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    def create_message(
        self,
        messages: list[dict],
        system: str,
        max_tokens: int,
        model: str,
        tools: Optional[list[dict]] = None,
    ) -> LLMResponse:
        """Create a message with the LLM."""
        pass

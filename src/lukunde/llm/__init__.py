"""LLM client module."""

from typing import Optional

from ..config import settings
from .base import LLMClient, LLMResponse
from .anthropic_client import AnthropicClient
from .analyst import SheetAnalyst
from .suggestions import (
    ColumnSuggester,
    ColumnSuggestion,
    SuggestionPurpose,
    heuristic_class_column,
)


def create_llm_client() -> Optional[LLMClient]:
    """Build the configured client, or None when no API key is set."""
    if not settings.anthropic_api_key:
        return None
    return AnthropicClient(api_key=settings.anthropic_api_key)


__all__ = [
    "LLMClient",
    "LLMResponse",
    "AnthropicClient",
    "SheetAnalyst",
    "ColumnSuggester",
    "ColumnSuggestion",
    "SuggestionPurpose",
    "heuristic_class_column",
    "create_llm_client",
]

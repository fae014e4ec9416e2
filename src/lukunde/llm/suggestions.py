"""Suggesting which header holds the class ("Turma") of each student."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config import settings
from .base import LLMClient
from .prompts import CLASS_COLUMN_PROMPT, SUGGESTION_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class SuggestionPurpose(str, Enum):
    """Flow the suggestion pre-fills."""

    SPLIT = "split"
    VALIDATION = "validation"


_KEYWORDS = {
    SuggestionPurpose.SPLIT: ("turma", "classe", "serie"),
    SuggestionPurpose.VALIDATION: ("turma", "classe", "serie", "ano"),
}


@dataclass
class ColumnSuggestion:
    """A header proposed for user confirmation."""

    column: Optional[str]
    source: str  # "ai", "heuristic" or "none"


def heuristic_class_column(
    headers: list[str], purpose: SuggestionPurpose = SuggestionPurpose.SPLIT
) -> Optional[str]:
    """First header containing one of the class keywords, case-insensitively."""
    keywords = _KEYWORDS[SuggestionPurpose(purpose)]
    for header in headers:
        lowered = (header or "").lower()
        if lowered and any(keyword in lowered for keyword in keywords):
            return header
    return None


class ColumnSuggester:
    """
    Proposes the class column, first asking the LLM, then falling back to
    header keywords.

    The LLM call is bounded by a timeout. Errors, timeouts and "null"
    answers all count as no suggestion; a late answer is ignored.
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.llm_client = llm_client
        self.model = model or settings.suggestion_model
        self.max_tokens = max_tokens or settings.suggestion_max_tokens
        self.timeout_seconds = timeout_seconds or settings.suggestion_timeout_seconds

    async def ask_model(self, headers: list[str]) -> Optional[str]:
        if not self.llm_client:
            return None

        prompt = CLASS_COLUMN_PROMPT.format(headers=", ".join(headers))
        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(
                    self.llm_client.create_message,
                    messages=[{"role": "user", "content": prompt}],
                    system=SUGGESTION_SYSTEM_PROMPT,
                    max_tokens=self.max_tokens,
                    model=self.model,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Column suggestion timed out after {self.timeout_seconds}s")
            return None
        except Exception as e:
            logger.warning(f"Column suggestion failed: {e}")
            return None

        text = response.text.strip().strip('"').strip()
        if not text or text.lower() == "null":
            return None
        return text

    async def propose(
        self, headers: list[str], purpose: SuggestionPurpose = SuggestionPurpose.SPLIT
    ) -> ColumnSuggestion:
        """Return the column to pre-fill in the confirmation prompt."""
        suggested = await self.ask_model(headers)
        if suggested:
            logger.info(f"LLM suggested class column {suggested!r}")
            return ColumnSuggestion(column=suggested, source="ai")

        fallback = heuristic_class_column(headers, purpose)
        if fallback:
            return ColumnSuggestion(column=fallback, source="heuristic")
        return ColumnSuggestion(column=None, source="none")

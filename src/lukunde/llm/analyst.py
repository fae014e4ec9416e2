"""Free-form questions about a sheet, answered by the LLM."""

import asyncio
import csv
import io
import logging
from typing import Optional

from ..config import settings
from ..rules.cells import stringify
from ..sheets.models import SheetData
from .base import LLMClient
from .prompts import ANALYSIS_PROMPT, ANALYSIS_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "Erro: Chave de API não configurada."
EMPTY_ANSWER_MESSAGE = "Não foi possível gerar uma análise."
FAILURE_MESSAGE = "Desculpe, ocorreu um erro ao conectar com a IA."


class SheetAnalyst:
    """Answers questions about the active sheet from a CSV sample of it."""

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        sample_rows: Optional[int] = None,
    ):
        self.llm_client = llm_client
        self.model = model or settings.analysis_model
        self.max_tokens = max_tokens or settings.analysis_max_tokens
        self.sample_rows = sample_rows or settings.analysis_sample_rows

    def build_context(self, data: SheetData) -> str:
        """Header plus the first ``sample_rows`` data rows as CSV."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        for row in data[: self.sample_rows + 1]:
            writer.writerow([stringify(cell) for cell in row])
        return buffer.getvalue()

    async def analyze(self, data: SheetData, query: str) -> str:
        if not self.llm_client:
            return NOT_CONFIGURED_MESSAGE

        prompt = ANALYSIS_PROMPT.format(csv_context=self.build_context(data), query=query)
        try:
            response = await asyncio.to_thread(
                self.llm_client.create_message,
                messages=[{"role": "user", "content": prompt}],
                system=ANALYSIS_SYSTEM_PROMPT,
                max_tokens=self.max_tokens,
                model=self.model,
            )
        except Exception as e:
            logger.error(f"Sheet analysis failed: {e}")
            return FAILURE_MESSAGE

        return response.text.strip() or EMPTY_ANSWER_MESSAGE

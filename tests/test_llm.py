"""Tests for the AI-assisted column suggestion and sheet analysis."""

import time
from unittest.mock import Mock

import pytest

from lukunde.llm import (
    AnthropicClient,
    ColumnSuggester,
    LLMResponse,
    SheetAnalyst,
    SuggestionPurpose,
    heuristic_class_column,
)
from lukunde.llm.analyst import EMPTY_ANSWER_MESSAGE, FAILURE_MESSAGE, NOT_CONFIGURED_MESSAGE

HEADERS = ["Nome", "Turma", "Nota 1", "Nota 2"]


def _text_response(text: str) -> LLMResponse:
    return LLMResponse(content=[{"type": "text", "text": text}], stop_reason="end_turn")


class TestLLMResponse:
    """Test extracting text from responses."""

    def test_text_joins_blocks(self):
        response = LLMResponse(
            content=[Mock(text="Olá, "), {"type": "text", "text": "professor"}, {"type": "tool_use"}],
            stop_reason="end_turn",
        )
        assert response.text == "Olá, professor"


class TestHeuristicClassColumn:
    """Test keyword fallback."""

    def test_split_keywords(self):
        assert heuristic_class_column(HEADERS) == "Turma"
        assert heuristic_class_column(["Nome", "CLASSE"]) == "CLASSE"
        assert heuristic_class_column(["Nome", "Serie"]) == "Serie"

    def test_year_only_counts_for_validation(self):
        headers = ["Nome", "Ano letivo"]
        assert heuristic_class_column(headers, SuggestionPurpose.SPLIT) is None
        assert heuristic_class_column(headers, SuggestionPurpose.VALIDATION) == "Ano letivo"

    def test_no_match(self):
        assert heuristic_class_column(["Nome", "Nota 1", ""]) is None


class TestColumnSuggester:
    """Test the LLM-first suggestion with fallback."""

    @pytest.mark.asyncio
    async def test_model_answer_is_used(self, mock_llm_client):
        suggester = ColumnSuggester(mock_llm_client, model="test-model", max_tokens=20)
        suggestion = await suggester.propose(HEADERS)

        assert suggestion.column == "Turma"
        assert suggestion.source == "ai"
        kwargs = mock_llm_client.create_message.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert "Nome, Turma, Nota 1, Nota 2" in kwargs["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_quotes_stripped(self, mock_llm_client):
        mock_llm_client.create_message.return_value = _text_response(' "Turma" \n')
        assert await ColumnSuggester(mock_llm_client).ask_model(HEADERS) == "Turma"

    @pytest.mark.asyncio
    async def test_null_answer_falls_back(self, mock_llm_client):
        mock_llm_client.create_message.return_value = _text_response("null")
        suggestion = await ColumnSuggester(mock_llm_client).propose(HEADERS)
        assert (suggestion.column, suggestion.source) == ("Turma", "heuristic")

    @pytest.mark.asyncio
    async def test_error_falls_back(self, mock_llm_client):
        mock_llm_client.create_message.side_effect = RuntimeError("API down")
        suggestion = await ColumnSuggester(mock_llm_client).propose(["Nome", "Ano"], SuggestionPurpose.VALIDATION)
        assert (suggestion.column, suggestion.source) == ("Ano", "heuristic")

    @pytest.mark.asyncio
    async def test_timeout_falls_back(self, mock_llm_client):
        def slow(**kwargs):
            time.sleep(0.5)
            return _text_response("Nome")

        mock_llm_client.create_message.side_effect = slow
        suggester = ColumnSuggester(mock_llm_client, timeout_seconds=0.05)
        suggestion = await suggester.propose(HEADERS)
        assert (suggestion.column, suggestion.source) == ("Turma", "heuristic")

    @pytest.mark.asyncio
    async def test_without_client(self):
        suggestion = await ColumnSuggester().propose(["Nome", "Nota"])
        assert (suggestion.column, suggestion.source) == (None, "none")


class TestSheetAnalyst:
    """Test the analysis assistant."""

    def test_context_is_header_plus_sample(self):
        data = [["Nome", "Nota"]] + [[f"Aluno {i}", i] for i in range(10)]
        context = SheetAnalyst(sample_rows=3).build_context(data)
        assert context.splitlines() == ["Nome,Nota", "Aluno 0,0", "Aluno 1,1", "Aluno 2,2"]

    def test_context_quotes_commas(self):
        context = SheetAnalyst().build_context([["Nome", "Nota"], ["Ana", "7,5"]])
        assert context.splitlines()[1] == 'Ana,"7,5"'

    @pytest.mark.asyncio
    async def test_analyze(self, mock_llm_client):
        mock_llm_client.create_message.return_value = _text_response("  A média é 7,2.  ")
        answer = await SheetAnalyst(mock_llm_client).analyze([["Nome"], ["Ana"]], "Qual a média?")
        assert answer == "A média é 7,2."
        prompt = mock_llm_client.create_message.call_args.kwargs["messages"][0]["content"]
        assert "Qual a média?" in prompt
        assert "Nome\nAna" in prompt

    @pytest.mark.asyncio
    async def test_without_client(self):
        assert await SheetAnalyst().analyze([], "?") == NOT_CONFIGURED_MESSAGE

    @pytest.mark.asyncio
    async def test_error_message(self, mock_llm_client):
        mock_llm_client.create_message.side_effect = RuntimeError("boom")
        assert await SheetAnalyst(mock_llm_client).analyze([], "?") == FAILURE_MESSAGE

    @pytest.mark.asyncio
    async def test_empty_answer(self, mock_llm_client):
        mock_llm_client.create_message.return_value = _text_response("")
        assert await SheetAnalyst(mock_llm_client).analyze([], "?") == EMPTY_ANSWER_MESSAGE


class TestAnthropicClient:
    """Test the Anthropic adapter."""

    def test_create_message(self):
        client = AnthropicClient(api_key="test-key")
        raw = Mock()
        raw.content = [Mock(text="Turma")]
        raw.stop_reason = "end_turn"
        raw.usage = Mock(input_tokens=10, output_tokens=2)
        client.client = Mock()
        client.client.messages.create = Mock(return_value=raw)

        response = client.create_message(
            messages=[{"role": "user", "content": "oi"}], system="s", max_tokens=5, model="m"
        )

        assert response.text == "Turma"
        assert response.usage == {"input_tokens": 10, "output_tokens": 2}
        assert "tools" not in client.client.messages.create.call_args.kwargs

"""Unit tests for ContextExtractor -- LLM reply parsing and fail-closed behaviour."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from shadowsync.services.context_extractor import ContextExtractor
from shadowsync.utils.errors import LLMError


class TestContextExtractor:
    @pytest.mark.asyncio
    async def test_extracts_well_formed_reply(self, mock_llm_provider: MagicMock) -> None:
        result = await ContextExtractor(mock_llm_provider).extract("Meeting with Bob about launch")

        assert result is not None
        assert [e.name for e in result.entities] == ["Bob"]
        assert result.relationships[0].relation == "discusses"
        assert (result.vector.x, result.vector.y, result.vector.category) == (40, -20, "Work")
        assert result.summary.startswith("A meeting")

    @pytest.mark.asyncio
    async def test_requests_json_at_low_temperature(self, mock_llm_provider: MagicMock) -> None:
        await ContextExtractor(mock_llm_provider).extract("some text")

        kwargs = mock_llm_provider.complete.call_args.kwargs
        assert kwargs["json_mode"] is True
        assert kwargs["temperature"] == 0.1
        assert "some text" in kwargs["user_prompt"]

    @pytest.mark.asyncio
    async def test_strips_markdown_fences(
        self, mock_llm_provider: MagicMock, extraction_payload: dict[str, Any]
    ) -> None:
        mock_llm_provider.complete = AsyncMock(
            return_value=f"```json\n{json.dumps(extraction_payload)}\n```"
        )
        result = await ContextExtractor(mock_llm_provider).extract("text")
        assert result is not None
        assert result.entities[0].name == "Bob"

    @pytest.mark.asyncio
    async def test_ignores_surrounding_prose(
        self, mock_llm_provider: MagicMock, extraction_payload: dict[str, Any]
    ) -> None:
        mock_llm_provider.complete = AsyncMock(
            return_value=f"Here you go: {json.dumps(extraction_payload)} Hope it helps."
        )
        result = await ContextExtractor(mock_llm_provider).extract("text")
        assert result is not None

    @pytest.mark.asyncio
    async def test_partial_reply_gets_defaults(self, mock_llm_provider: MagicMock) -> None:
        mock_llm_provider.complete = AsyncMock(return_value='{"summary": "only a summary"}')
        result = await ContextExtractor(mock_llm_provider).extract("text")

        assert result is not None
        assert result.entities == []
        assert result.relationships == []
        assert result.vector.category == "General"

    @pytest.mark.asyncio
    async def test_accepts_vector_key(self, mock_llm_provider: MagicMock) -> None:
        mock_llm_provider.complete = AsyncMock(
            return_value='{"vector": {"x": 5, "y": 6, "category": "Home"}}'
        )
        result = await ContextExtractor(mock_llm_provider).extract("text")
        assert result is not None
        assert result.vector.category == "Home"

    @pytest.mark.asyncio
    async def test_unconfigured_returns_none_without_calling(
        self, unconfigured_llm_provider: MagicMock
    ) -> None:
        result = await ContextExtractor(unconfigured_llm_provider).extract("text")
        assert result is None
        unconfigured_llm_provider.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_provider_error_returns_none(self, mock_llm_provider: MagicMock) -> None:
        mock_llm_provider.complete = AsyncMock(side_effect=LLMError("down", provider_name="mock"))
        assert await ContextExtractor(mock_llm_provider).extract("text") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "reply",
        [
            "",
            "no json here",
            "{not valid json}",
            "[1, 2, 3]",
            '{"vectorCoordinates": {"x": "far away"}}',
        ],
    )
    async def test_unusable_reply_returns_none(
        self, mock_llm_provider: MagicMock, reply: str
    ) -> None:
        mock_llm_provider.complete = AsyncMock(return_value=reply)
        assert await ContextExtractor(mock_llm_provider).extract("text") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "failure",
        [
            AsyncMock(return_value=None),
            AsyncMock(side_effect=IndexError("list index out of range")),
        ],
    )
    async def test_unexpected_provider_failure_returns_none(
        self, mock_llm_provider: MagicMock, failure: AsyncMock
    ) -> None:
        mock_llm_provider.complete = failure
        assert await ContextExtractor(mock_llm_provider).extract("text") is None

    @pytest.mark.asyncio
    async def test_nested_nulls_are_normalised(self, mock_llm_provider: MagicMock) -> None:
        mock_llm_provider.complete = AsyncMock(
            return_value=json.dumps(
                {
                    "entities": [{"name": "Bob", "type": None}],
                    "relationships": [{"source": "Bob", "target": "Launch", "relation": None}],
                    "vectorCoordinates": {"x": 1, "y": 2, "category": None},
                    "summary": None,
                }
            )
        )

        result = await ContextExtractor(mock_llm_provider).extract("text")

        assert result is not None
        assert result.entities[0].type == ""
        assert result.relationships[0].relation == ""

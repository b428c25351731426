"""Testes do OpenAIGenerationService com AsyncOpenAI mockado."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from openai import APITimeoutError

from imobi_ai.ai.openai_client import OpenAIGenerationService
from imobi_ai.domain.enums import ChatRole
from imobi_ai.domain.errors import GenerationConfigError, GenerationServiceError
from imobi_ai.domain.models import ChatTurn


def _mock_client(content: str | None) -> MagicMock:
    client = MagicMock()
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    client.chat.completions.create = AsyncMock(return_value=response)
    return client


class TestConfiguration:
    @pytest.mark.asyncio
    async def test_missing_key_fails_fast(self):
        service = OpenAIGenerationService(api_key=None)

        with pytest.raises(GenerationConfigError):
            await service.generate([ChatTurn(ChatRole.USER, "Oi")], "sys")

    @pytest.mark.asyncio
    async def test_missing_key_fails_for_summarize(self):
        service = OpenAIGenerationService(api_key="")

        with pytest.raises(GenerationConfigError):
            await service.summarize("métricas")


class TestGenerate:
    @pytest.mark.asyncio
    async def test_maps_roles_and_system_instruction(self):
        client = _mock_client("Em qual região?")
        service = OpenAIGenerationService(client=client, model="gpt-test")

        reply = await service.generate(
            [ChatTurn(ChatRole.USER, "Oi"), ChatTurn(ChatRole.MODEL, "Olá")],
            "Seja gentil",
        )

        assert reply == "Em qual região?"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["messages"] == [
            {"role": "system", "content": "Seja gentil"},
            {"role": "user", "content": "Oi"},
            {"role": "assistant", "content": "Olá"},
        ]
        assert "response_format" not in kwargs

    @pytest.mark.asyncio
    async def test_empty_content_is_empty_string(self):
        service = OpenAIGenerationService(client=_mock_client(None))

        assert await service.generate([], "sys") == ""

    @pytest.mark.asyncio
    async def test_response_without_choices_wrapped(self):
        client = _mock_client("ignorado")
        client.chat.completions.create.return_value.choices = []
        service = OpenAIGenerationService(client=client)

        with pytest.raises(GenerationServiceError):
            await service.generate([ChatTurn(ChatRole.USER, "Oi")], "sys")

    @pytest.mark.asyncio
    async def test_timeout_wrapped(self):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(
            side_effect=APITimeoutError(request=httpx.Request("POST", "https://api.openai.com"))
        )
        service = OpenAIGenerationService(client=client)

        with pytest.raises(GenerationServiceError):
            await service.generate([ChatTurn(ChatRole.USER, "Oi")], "sys")


class TestStructuredCalls:
    @pytest.mark.asyncio
    async def test_extract_uses_json_mode(self):
        client = _mock_client('{"region": "Zona Sul", "missingFields": ["Entrada"]}')
        service = OpenAIGenerationService(client=client)

        profile = await service.extract("client: casa na zona sul")

        assert profile.region == "Zona Sul"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert "client: casa na zona sul" in kwargs["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_summarize_uses_insights_model(self):
        client = _mock_client('{"insights": [], "recommendations": ["a", "b", "c"]}')
        service = OpenAIGenerationService(client=client, insights_model="gpt-insights")

        result = await service.summarize("Total de conversas: 10")

        assert result.recommendations == ["a", "b", "c"]
        assert client.chat.completions.create.call_args.kwargs["model"] == "gpt-insights"

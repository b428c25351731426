"""Serviço de geração sobre a API OpenAI.

Fornece as três capacidades usadas pelo dashboard:
- generate: próxima resposta do assistente no chat
- extract: perfil estruturado do lead (JSON mode)
- summarize: insights e recomendações sobre métricas (JSON mode)

Sem credencial configurada, toda chamada falha imediatamente com
GenerationConfigError (não há retry).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from openai import APIError, APITimeoutError, AsyncOpenAI

from imobi_ai.ai import openai_parser, openai_prompts
from imobi_ai.domain.enums import ChatRole
from imobi_ai.domain.errors import GenerationConfigError, GenerationServiceError
from imobi_ai.domain.models import AnalyticsInsights, ChatTurn, LeadProfile
from imobi_ai.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

_ROLE_MAP: dict[ChatRole, str] = {
    ChatRole.USER: "user",
    ChatRole.MODEL: "assistant",
}


class OpenAIGenerationService:
    """Implementação de GenerationService usando ChatGPT.

    O cliente AsyncOpenAI é criado sob demanda, na primeira chamada com chave.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        insights_model: str = "gpt-4o",
        timeout_seconds: float = 30.0,
        max_retries: int = 2,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._insights_model = insights_model
        self._timeout = timeout_seconds
        self._max_retries = max_retries
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if self._client is not None:
            return self._client
        if not self._api_key:
            raise GenerationConfigError("OPENAI_API_KEY não configurado")
        self._client = AsyncOpenAI(
            api_key=self._api_key,
            timeout=self._timeout,
            max_retries=self._max_retries,
        )
        return self._client

    async def _complete(
        self,
        operation: str,
        model: str,
        messages: list[dict[str, str]],
        temperature: float,
        json_mode: bool = False,
    ) -> str:
        client = self._get_client()
        kwargs: dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await client.chat.completions.create(
                model=model,
                messages=messages,  # type: ignore[arg-type]
                temperature=temperature,
                **kwargs,
            )
        except (APIError, APITimeoutError) as e:
            logger.warning(
                f"{operation}_error",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            raise GenerationServiceError(f"Falha em {operation}: {type(e).__name__}") from e

        if not response.choices:
            logger.warning(f"{operation}_empty_choices")
            raise GenerationServiceError(f"Falha em {operation}: resposta sem choices")
        return response.choices[0].message.content or ""

    async def generate(self, history: Sequence[ChatTurn], system_instruction: str) -> str:
        """Gera resposta do assistente para o histórico (papéis user/model)."""
        messages = [{"role": "system", "content": system_instruction}]
        messages.extend({"role": _ROLE_MAP[turn.role], "content": turn.text} for turn in history)

        text = await self._complete("response_generation", self._model, messages, 0.7)
        logger.info(
            "response_generated",
            extra={"history_len": len(history), "reply_len": len(text)},
        )
        return text

    async def extract(self, conversation_text: str) -> LeadProfile:
        """Extrai LeadProfile da conversa serializada."""
        messages = [
            {"role": "system", "content": openai_prompts.get_lead_extraction_prompt()},
            {
                "role": "user",
                "content": openai_prompts.format_lead_extraction_input(conversation_text),
            },
        ]
        raw = await self._complete("lead_extraction", self._model, messages, 0.0, json_mode=True)
        profile = openai_parser.parse_lead_profile_response(raw)
        logger.info(
            "lead_profile_extracted",
            extra={"populated_fields": profile.populated_fields},
        )
        return profile

    async def summarize(self, metrics_text: str) -> AnalyticsInsights:
        """Gera insights e recomendações sobre as métricas informadas."""
        messages = [
            {"role": "system", "content": openai_prompts.get_insights_prompt()},
            {"role": "user", "content": openai_prompts.format_insights_input(metrics_text)},
        ]
        raw = await self._complete(
            "analytics_insights", self._insights_model, messages, 0.4, json_mode=True
        )
        return openai_parser.parse_insights_response(raw)

"""Porta para o serviço externo de geração (LLM)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from imobi_ai.domain.models import AnalyticsInsights, ChatTurn, LeadProfile


class GenerationService(Protocol):
    """Capacidades request/response do serviço de geração.

    Todas levantam GenerationConfigError se não houver credencial configurada.
    """

    async def generate(self, history: Sequence[ChatTurn], system_instruction: str) -> str:
        """Gera a próxima resposta do assistente para o histórico."""
        ...

    async def extract(self, conversation_text: str) -> LeadProfile:
        """Extrai o perfil estruturado do lead a partir da conversa."""
        ...

    async def summarize(self, metrics_text: str) -> AnalyticsInsights:
        """Gera insights e recomendações a partir de métricas."""
        ...

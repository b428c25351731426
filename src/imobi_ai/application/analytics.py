"""Painel de análise: indicadores estáticos e insights gerados por IA."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from imobi_ai.domain.errors import GenerationConfigError, GenerationServiceError
from imobi_ai.domain.models import Insight
from imobi_ai.domain.protocols.generation import GenerationService
from imobi_ai.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class KpiCard:
    title: str
    value: str
    trend: str
    trend_up: bool


@dataclass(frozen=True, slots=True)
class WeeklyLeads:
    day: str
    leads: int
    qualified: int


@dataclass(frozen=True, slots=True)
class StatusSlice:
    status: str
    count: int


# Valores de demonstração (sem agregação real)
KPI_CARDS: tuple[KpiCard, ...] = (
    KpiCard("Total de Conversas", "1,284", "+12.5%", True),
    KpiCard("Leads Qualificados", "432", "+8.2%", True),
    KpiCard("Taxa de Qualificação", "33.6%", "-2.4%", False),
    KpiCard("Tempo Médio Resp.", "1m 42s", "-15s", True),
)

WEEKLY_LEADS: tuple[WeeklyLeads, ...] = (
    WeeklyLeads("Seg", 40, 24),
    WeeklyLeads("Ter", 30, 13),
    WeeklyLeads("Qua", 20, 98),
    WeeklyLeads("Qui", 27, 39),
    WeeklyLeads("Sex", 18, 48),
    WeeklyLeads("Sáb", 23, 38),
    WeeklyLeads("Dom", 34, 43),
)

STATUS_DISTRIBUTION: tuple[StatusSlice, ...] = (
    StatusSlice("Novo", 400),
    StatusSlice("Qualificando", 300),
    StatusSlice("Qualificado", 300),
    StatusSlice("Atendimento", 200),
)

METRICS_SUMMARY = (
    "Total de conversas: 154. Novos leads: 42. Leads qualificados: 18. "
    "Taxa de handoff AI: 85%. Tempo médio de resposta: 2min. "
    "Principais objeções: Valor da entrada, Localização."
)


class AnalyticsView:
    """Estado do painel de análise."""

    kpis = KPI_CARDS
    weekly_leads = WEEKLY_LEADS
    status_distribution = STATUS_DISTRIBUTION

    def __init__(self, generation: GenerationService, metrics_summary: str = METRICS_SUMMARY) -> None:
        self._generation = generation
        self._metrics_summary = metrics_summary
        self.insights: list[Insight] = []
        self.recommendations: list[str] = []
        self.loading = False

    async def fetch_insights(self) -> bool:
        """Solicita insights sobre o resumo de métricas.

        Em falha, registra em log e mantém os insights anteriores.
        """
        if self.loading:
            return False
        self.loading = True
        try:
            result = await self._generation.summarize(self._metrics_summary)
        except (GenerationConfigError, GenerationServiceError) as e:
            logger.error("analytics_insights_failed", extra={"error_type": type(e).__name__})
            return False
        finally:
            self.loading = False

        self.insights = list(result.insights)
        self.recommendations = list(result.recommendations)
        logger.info(
            "analytics_insights_loaded",
            extra={"insights": len(self.insights), "recommendations": len(self.recommendations)},
        )
        return True

"""Montagem das telas do dashboard para um usuário autenticado."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from imobi_ai.ai.openai_client import OpenAIGenerationService
from imobi_ai.application.analytics import AnalyticsView
from imobi_ai.application.inbox import InboxView
from imobi_ai.application.pairing_api import HttpPairingApi, PairingApi
from imobi_ai.application.pairing_flow import PairingFlow
from imobi_ai.application.response_orchestrator import AIResponseOrchestrator
from imobi_ai.config.settings import Settings
from imobi_ai.domain.models import UserIdentity
from imobi_ai.domain.protocols.document_store import DocumentStore
from imobi_ai.domain.protocols.generation import GenerationService
from imobi_ai.infra.document_store import create_document_store
from imobi_ai.observability.logging import get_logger, short_id

logger: logging.Logger = get_logger(__name__)


def create_generation_service(settings: Settings) -> OpenAIGenerationService:
    return OpenAIGenerationService(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        insights_model=settings.openai_insights_model,
        timeout_seconds=settings.openai_timeout_seconds,
        max_retries=settings.openai_max_retries,
    )


@dataclass
class Dashboard:
    """Telas ativas de um usuário (inbox, conexões e análise)."""

    user: UserIdentity
    inbox: InboxView
    pairing: PairingFlow
    analytics: AnalyticsView
    orchestrator: AIResponseOrchestrator

    async def start(self) -> None:
        await self.inbox.start()
        await self.pairing.start()
        logger.info("dashboard_started", extra={"uid": short_id(self.user.uid)})

    async def close(self) -> None:
        await self.inbox.close()
        await self.pairing.close()
        logger.info("dashboard_closed", extra={"uid": short_id(self.user.uid)})


def build_dashboard(
    settings: Settings,
    user: UserIdentity,
    *,
    store: DocumentStore | None = None,
    generation: GenerationService | None = None,
    pairing_api: PairingApi | None = None,
) -> Dashboard:
    """Cria as telas com as dependências configuradas (ou injetadas)."""
    store = store or create_document_store(settings)
    generation = generation or create_generation_service(settings)
    pairing_api = pairing_api or HttpPairingApi.from_base_url(settings.pairing_api_base_url)

    orchestrator = AIResponseOrchestrator(
        store,
        generation,
        conversations_collection=settings.conversations_collection,
        messages_subcollection=settings.messages_subcollection,
        lead_profiles_collection=settings.lead_profiles_collection,
        delay_seconds=settings.ai_response_delay_seconds,
    )
    inbox = InboxView(
        store,
        orchestrator,
        conversations_collection=settings.conversations_collection,
        messages_subcollection=settings.messages_subcollection,
        lead_profiles_collection=settings.lead_profiles_collection,
    )
    pairing = PairingFlow(
        user.uid,
        store,
        pairing_api,
        connections_collection=settings.connections_collection,
        sessions_collection=settings.pairing_sessions_collection,
        max_connections=settings.max_connections_per_owner,
        countdown_interval=settings.pairing_countdown_interval_seconds,
        max_auto_reissues=settings.pairing_max_auto_reissues,
    )
    return Dashboard(
        user=user,
        inbox=inbox,
        pairing=pairing,
        analytics=AnalyticsView(generation),
        orchestrator=orchestrator,
    )

"""Orquestração da resposta automática da IA na conversa selecionada.

Fluxo por conversa:
1. Última mensagem é do cliente e não há geração em andamento
2. Aguarda o atraso "humano" (debounce; nova mensagem cancela)
3. Gera a resposta e grava a mensagem `ai`
4. Extrai o LeadProfile da conversa (sem a resposta recém-gerada)
   e sobrescreve o documento do perfil
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from imobi_ai.ai.openai_prompts import SYSTEM_INSTRUCTION, format_conversation_text
from imobi_ai.application.scheduling import DebouncedTask
from imobi_ai.domain.enums import ChatRole, Sender
from imobi_ai.domain.errors import (
    DocumentStoreError,
    GenerationConfigError,
    GenerationServiceError,
)
from imobi_ai.domain.models import ChatTurn, LeadProfile, Message
from imobi_ai.domain.protocols.document_store import SERVER_TIMESTAMP, DocumentStore
from imobi_ai.domain.protocols.generation import GenerationService
from imobi_ai.observability.logging import get_logger, short_id

logger: logging.Logger = get_logger(__name__)


def build_history(messages: Sequence[Message]) -> list[ChatTurn]:
    """Converte mensagens em turnos: cliente -> user, agente/IA -> model."""
    return [
        ChatTurn(
            role=ChatRole.USER if message.sender == Sender.CLIENT else ChatRole.MODEL,
            text=message.text,
        )
        for message in messages
    ]


class AIResponseOrchestrator:
    """Dispara e executa a resposta da IA para uma conversa."""

    def __init__(
        self,
        store: DocumentStore,
        generation: GenerationService,
        *,
        conversations_collection: str = "conversations",
        messages_subcollection: str = "messages",
        lead_profiles_collection: str = "leadProfiles",
        delay_seconds: float = 1.5,
        system_instruction: str = SYSTEM_INSTRUCTION,
    ) -> None:
        self._store = store
        self._generation = generation
        self._conversations_collection = conversations_collection
        self._messages_subcollection = messages_subcollection
        self._lead_profiles_collection = lead_profiles_collection
        self._delay = delay_seconds
        self._system_instruction = system_instruction
        self._in_flight: set[str] = set()
        self._pending: DebouncedTask | None = None

    def is_generating(self, conversation_id: str) -> bool:
        return conversation_id in self._in_flight

    def on_messages_changed(self, conversation_id: str, messages: Sequence[Message]) -> None:
        """Reavalia o gatilho a cada nova lista de mensagens."""
        self.cancel_pending()
        if not messages or messages[-1].sender != Sender.CLIENT:
            return
        if self.is_generating(conversation_id):
            return

        snapshot = list(messages)

        async def _fire() -> None:
            await self.respond(conversation_id, snapshot)

        self._pending = DebouncedTask(self._delay, _fire)
        self._pending.schedule()

    def cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()

    async def wait_pending(self) -> None:
        """Aguarda a última resposta agendada (usado em testes e no shutdown)."""
        if self._pending is not None:
            await self._pending.wait()

    async def respond(self, conversation_id: str, messages: Sequence[Message]) -> str | None:
        """Gera a resposta da IA e atualiza o perfil do lead.

        Retorna o texto gerado, ou None quando suprimido ou em caso de falha
        (falhas são registradas em log e não propagadas).
        """
        if not messages:
            return None
        if self.is_generating(conversation_id):
            logger.info(
                "ai_response_suppressed",
                extra={"conversation_id": short_id(conversation_id)},
            )
            return None

        self._in_flight.add(conversation_id)
        try:
            reply = await self._generation.generate(
                build_history(messages), self._system_instruction
            )
            await self._store.add(
                self._messages_path(conversation_id),
                {"text": reply, "sender": Sender.AI.value, "timestamp": SERVER_TIMESTAMP},
            )
            profile = await self._generation.extract(format_conversation_text(messages))
            await self._save_profile(conversation_id, profile)
        except GenerationConfigError as e:
            logger.error(
                "ai_response_not_configured",
                extra={"conversation_id": short_id(conversation_id), "error": str(e)},
            )
            return None
        except (GenerationServiceError, DocumentStoreError) as e:
            logger.error(
                "ai_response_failed",
                extra={
                    "conversation_id": short_id(conversation_id),
                    "error_type": type(e).__name__,
                },
            )
            return None
        finally:
            self._in_flight.discard(conversation_id)

        logger.info(
            "ai_response_completed",
            extra={
                "conversation_id": short_id(conversation_id),
                "history_len": len(messages),
                "missing_fields": len(profile.missing_fields),
            },
        )
        return reply

    async def _save_profile(self, conversation_id: str, profile: LeadProfile) -> None:
        # Sobrescrita completa: campos ausentes na extração são descartados
        await self._store.set(
            self._lead_profiles_collection, conversation_id, profile.to_document()
        )

    def _messages_path(self, conversation_id: str) -> str:
        return f"{self._conversations_collection}/{conversation_id}/{self._messages_subcollection}"

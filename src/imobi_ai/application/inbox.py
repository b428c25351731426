"""Inbox: lista de conversas, mensagens da selecionada e perfil do lead.

Assinaturas em tempo real:
- conversas ordenadas por `timestamp` decrescente
- mensagens da conversa selecionada, em ordem crescente
- documento do perfil do lead da conversa selecionada

Trocar de conversa encerra as assinaturas anteriores antes de abrir as novas.
"""

from __future__ import annotations

import logging
import random

from imobi_ai.application.response_orchestrator import AIResponseOrchestrator
from imobi_ai.domain.enums import LeadStatus, LeadTemperature, Sender
from imobi_ai.domain.errors import DocumentStoreError
from imobi_ai.domain.models import Conversation, LeadProfile, Message
from imobi_ai.domain.protocols.document_store import (
    SERVER_TIMESTAMP,
    DocumentSnapshot,
    DocumentStore,
    QuerySpec,
    Subscription,
)
from imobi_ai.observability.logging import get_logger, short_id

logger: logging.Logger = get_logger(__name__)

DEMO_LEAD_NAMES: tuple[str, ...] = (
    "João Silva",
    "Maria Oliveira",
    "Carlos Santos",
    "Ana Costa",
    "Pedro Rocha",
)

DEMO_LEAD_MESSAGES: tuple[str, ...] = (
    "Olá, vi um anúncio de um apartamento no centro e gostaria de saber mais.",
    "Oi, estou procurando uma casa com 3 quartos na região sul.",
    "Boa tarde! Qual o valor daquele sobrado que vocês postaram?",
    "Tenho interesse em investir em um imóvel comercial, vocês tem opções?",
    "Gostaria de fazer uma simulação de financiamento para um imóvel de 400 mil.",
)

INITIAL_MISSING_FIELDS: tuple[str, ...] = (
    "Região",
    "Tipo de Imóvel",
    "Quartos",
    "Orçamento",
    "Entrada",
)


class InboxView:
    """Estado da caixa de entrada de conversas."""

    def __init__(
        self,
        store: DocumentStore,
        orchestrator: AIResponseOrchestrator | None = None,
        *,
        conversations_collection: str = "conversations",
        messages_subcollection: str = "messages",
        lead_profiles_collection: str = "leadProfiles",
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._orchestrator = orchestrator
        self._conversations_collection = conversations_collection
        self._messages_subcollection = messages_subcollection
        self._lead_profiles_collection = lead_profiles_collection
        self._rng = rng or random.Random()

        self.conversations: list[Conversation] = []
        self.selected_id: str | None = None
        self.messages: list[Message] = []
        self.lead_profile: LeadProfile | None = None

        self._conversations_sub: Subscription | None = None
        self._messages_sub: Subscription | None = None
        self._profile_sub: Subscription | None = None

    async def start(self) -> None:
        spec = QuerySpec(
            collection=self._conversations_collection,
            order_by="timestamp",
            descending=True,
        )
        self._conversations_sub = self._store.subscribe_query(spec, self._on_conversations)

    async def close(self) -> None:
        self._release_selection()
        if self._conversations_sub is not None:
            self._conversations_sub.unsubscribe()
            self._conversations_sub = None
        if self._orchestrator is not None:
            self._orchestrator.cancel_pending()

    @property
    def selected_conversation(self) -> Conversation | None:
        return next((c for c in self.conversations if c.id == self.selected_id), None)

    @property
    def is_generating(self) -> bool:
        if self._orchestrator is None or self.selected_id is None:
            return False
        return self._orchestrator.is_generating(self.selected_id)

    def select(self, conversation_id: str) -> None:
        """Seleciona conversa e troca as assinaturas de mensagens e perfil."""
        if conversation_id == self.selected_id:
            return
        self._release_selection()
        if self._orchestrator is not None:
            self._orchestrator.cancel_pending()

        self.selected_id = conversation_id
        self.messages = []
        self.lead_profile = None

        spec = QuerySpec(
            collection=self._messages_path(conversation_id),
            order_by="timestamp",
        )
        self._messages_sub = self._store.subscribe_query(spec, self._on_messages)
        self._profile_sub = self._store.subscribe_document(
            self._lead_profiles_collection, conversation_id, self._on_profile
        )
        logger.debug("conversation_selected", extra={"conversation_id": short_id(conversation_id)})

    # ------------------------------------------------------------------
    # Ações
    # ------------------------------------------------------------------

    async def send_message(self, text: str) -> str | None:
        """Mensagem do corretor na conversa selecionada."""
        return await self._append(Sender.AGENT, text)

    async def simulate_client_message(self, text: str) -> str | None:
        """Mensagem do cliente (simulação) na conversa selecionada."""
        return await self._append(Sender.CLIENT, text)

    async def request_ai_response(self) -> str | None:
        """Geração manual da resposta da IA para a conversa selecionada."""
        if self._orchestrator is None or self.selected_id is None:
            return None
        return await self._orchestrator.respond(self.selected_id, list(self.messages))

    async def simulate_incoming_lead(self) -> str | None:
        """Cria conversa de demonstração com lead e mensagem aleatórios.

        Returns:
            id da conversa criada, ou None se a gravação falhar
        """
        name = self._rng.choice(DEMO_LEAD_NAMES)
        text = self._rng.choice(DEMO_LEAD_MESSAGES)

        conversation = Conversation(
            contact_name=name,
            last_message=text,
            lead_status=LeadStatus.NOVO,
            lead_temperature=LeadTemperature.MORNO,
            unread_count=1,
        )
        document = conversation.to_document()
        document["timestamp"] = SERVER_TIMESTAMP
        try:
            conversation_id = await self._store.add(self._conversations_collection, document)
        except DocumentStoreError as e:
            logger.error("demo_lead_create_failed", extra={"error_type": type(e).__name__})
            return None

        try:
            await self._store.add(
                self._messages_path(conversation_id),
                {"text": text, "sender": Sender.CLIENT.value, "timestamp": SERVER_TIMESTAMP},
            )
            await self._store.set(
                self._lead_profiles_collection,
                conversation_id,
                LeadProfile(name=name, missing_fields=list(INITIAL_MISSING_FIELDS)).to_document(),
            )
        except DocumentStoreError as e:
            # Conversa já existe; fica sem mensagem inicial ou perfil
            logger.error(
                "demo_lead_seed_failed",
                extra={
                    "conversation_id": short_id(conversation_id),
                    "error_type": type(e).__name__,
                },
            )
            return None
        logger.info("demo_lead_created", extra={"conversation_id": short_id(conversation_id)})
        return conversation_id

    async def _append(self, sender: Sender, text: str) -> str | None:
        conversation_id = self.selected_id
        if conversation_id is None or not text.strip():
            return None

        messages_path = self._messages_path(conversation_id)
        try:
            message_id = await self._store.add(
                messages_path,
                {"text": text, "sender": sender.value, "timestamp": SERVER_TIMESTAMP},
            )
        except DocumentStoreError as e:
            logger.error(
                "message_append_failed",
                extra={
                    "conversation_id": short_id(conversation_id),
                    "error_type": type(e).__name__,
                },
            )
            return None

        try:
            await self._store.update(
                self._conversations_collection,
                conversation_id,
                {"lastMessage": text, "timestamp": SERVER_TIMESTAMP},
            )
        except DocumentStoreError as e:
            logger.error(
                "conversation_summary_update_failed",
                extra={
                    "conversation_id": short_id(conversation_id),
                    "error_type": type(e).__name__,
                },
            )
            await self._discard_message(messages_path, message_id)
            return None
        return message_id

    async def _discard_message(self, messages_path: str, message_id: str) -> None:
        # Sem resumo atualizado a mensagem ficaria órfã
        try:
            await self._store.delete(messages_path, message_id)
        except DocumentStoreError as e:
            logger.error(
                "message_discard_failed",
                extra={"message_id": short_id(message_id), "error_type": type(e).__name__},
            )

    # ------------------------------------------------------------------
    # Callbacks de assinatura
    # ------------------------------------------------------------------

    def _on_conversations(self, snapshots: list[DocumentSnapshot]) -> None:
        self.conversations = [
            Conversation.from_document(snap.id, snap.to_dict()) for snap in snapshots
        ]
        if self.selected_id is None and self.conversations:
            first_id = self.conversations[0].id
            if first_id is not None:
                self.select(first_id)

    def _on_messages(self, snapshots: list[DocumentSnapshot]) -> None:
        self.messages = [Message.from_document(snap.id, snap.to_dict()) for snap in snapshots]
        if self._orchestrator is not None and self.selected_id is not None:
            self._orchestrator.on_messages_changed(self.selected_id, self.messages)

    def _on_profile(self, snapshot: DocumentSnapshot) -> None:
        self.lead_profile = (
            LeadProfile.from_document(None, snapshot.to_dict()) if snapshot.exists else None
        )

    # ------------------------------------------------------------------
    # Internos
    # ------------------------------------------------------------------

    def _release_selection(self) -> None:
        for sub in (self._messages_sub, self._profile_sub):
            if sub is not None:
                sub.unsubscribe()
        self._messages_sub = None
        self._profile_sub = None

    def _messages_path(self, conversation_id: str) -> str:
        return f"{self._conversations_collection}/{conversation_id}/{self._messages_subcollection}"

"""Protocolos de domínio (portas para infraestrutura externa)."""

from imobi_ai.domain.protocols.document_store import (
    SERVER_TIMESTAMP,
    DocumentSnapshot,
    DocumentStore,
    FieldFilter,
    QuerySpec,
    Subscription,
)
from imobi_ai.domain.protocols.generation import GenerationService
from imobi_ai.domain.protocols.pairing_session_store import PairingSessionStore

__all__ = [
    "SERVER_TIMESTAMP",
    "DocumentSnapshot",
    "DocumentStore",
    "FieldFilter",
    "GenerationService",
    "PairingSessionStore",
    "QuerySpec",
    "Subscription",
]

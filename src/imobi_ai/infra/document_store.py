"""Factory do DocumentStore conforme backend configurado."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from imobi_ai.infra.document_store_memory import InMemoryDocumentStore
from imobi_ai.observability.logging import get_logger

if TYPE_CHECKING:
    from imobi_ai.config.settings import Settings
    from imobi_ai.domain.protocols.document_store import DocumentStore

logger: logging.Logger = get_logger(__name__)


def create_document_store(settings: Settings, client: Any | None = None) -> DocumentStore:
    """Cria o DocumentStore do backend configurado.

    Args:
        settings: Settings da aplicação
        client: firestore.Client já criado (opcional, útil em testes)
    """
    backend = settings.document_store_backend.lower()

    if backend == "firestore":
        from imobi_ai.infra.document_store_firestore import FirestoreDocumentStore

        if client is None:
            from google.cloud import firestore

            client = firestore.Client(
                project=settings.firestore_project_id,
                database=settings.firestore_database_id,
            )
        logger.info("document_store_backend_selected", extra={"backend": "firestore"})
        return FirestoreDocumentStore(client)

    if backend != "memory":
        raise ValueError(f"DOCUMENT_STORE_BACKEND inválido: {backend}")

    logger.info("document_store_backend_selected", extra={"backend": "memory"})
    return InMemoryDocumentStore()

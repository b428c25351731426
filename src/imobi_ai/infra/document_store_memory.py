"""DocumentStore em memória (apenas dev/testes).

Reproduz o contrato do Firestore usado pelas telas:
- SERVER_TIMESTAMP vira um datetime estritamente crescente (ordem de escrita,
  não relógio do cliente)
- Consultas ordenadas excluem documentos sem o campo de ordenação
- Listeners são notificados de forma síncrona após cada escrita
"""

from __future__ import annotations

import copy
import itertools
import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from imobi_ai.domain.errors import DocumentNotFoundError
from imobi_ai.domain.protocols.document_store import (
    SERVER_TIMESTAMP,
    DocumentCallback,
    DocumentSnapshot,
    DocumentStore,
    QueryCallback,
    QuerySpec,
    Subscription,
)
from imobi_ai.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


class InMemoryDocumentStore(DocumentStore):
    """Armazenamento de documentos em memória (não usar em produção)."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._query_listeners: dict[int, tuple[QuerySpec, QueryCallback]] = {}
        self._document_listeners: dict[int, tuple[str, str, DocumentCallback]] = {}
        self._listener_ids = itertools.count(1)
        self._clock = clock or (lambda: datetime.now(tz=UTC))
        self._last_timestamp: datetime | None = None

    # ------------------------------------------------------------------
    # Escritas
    # ------------------------------------------------------------------

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex[:20]
        self._docs(collection)[doc_id] = self._resolve(data)
        self._notify(collection, doc_id)
        return doc_id

    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self._docs(collection)[doc_id] = self._resolve(data)
        self._notify(collection, doc_id)

    async def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        docs = self._docs(collection)
        if doc_id not in docs:
            logger.debug(
                "Update em documento inexistente (in-memory)",
                extra={"collection": collection},
            )
            raise DocumentNotFoundError(f"{collection}/{doc_id}")
        docs[doc_id].update(self._resolve(data))
        self._notify(collection, doc_id)

    async def delete(self, collection: str, doc_id: str) -> None:
        if self._docs(collection).pop(doc_id, None) is not None:
            self._notify(collection, doc_id)

    # ------------------------------------------------------------------
    # Leituras
    # ------------------------------------------------------------------

    async def get(self, collection: str, doc_id: str) -> DocumentSnapshot:
        return self._snapshot(collection, doc_id)

    async def query(self, spec: QuerySpec) -> list[DocumentSnapshot]:
        return self._run_query(spec)

    def subscribe_query(self, spec: QuerySpec, callback: QueryCallback) -> Subscription:
        listener_id = next(self._listener_ids)
        self._query_listeners[listener_id] = (spec, callback)
        callback(self._run_query(spec))
        return Subscription(lambda: self._query_listeners.pop(listener_id, None))

    def subscribe_document(
        self, collection: str, doc_id: str, callback: DocumentCallback
    ) -> Subscription:
        listener_id = next(self._listener_ids)
        self._document_listeners[listener_id] = (collection, doc_id, callback)
        callback(self._snapshot(collection, doc_id))
        return Subscription(lambda: self._document_listeners.pop(listener_id, None))

    @property
    def listener_count(self) -> int:
        """Quantidade de assinaturas ativas (útil para verificar teardown)."""
        return len(self._query_listeners) + len(self._document_listeners)

    # ------------------------------------------------------------------
    # Internos
    # ------------------------------------------------------------------

    def _docs(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(collection.strip("/"), {})

    def _server_timestamp(self) -> datetime:
        now = self._clock()
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    def _resolve(self, data: dict[str, Any]) -> dict[str, Any]:
        resolved = copy.deepcopy({k: v for k, v in data.items() if v is not SERVER_TIMESTAMP})
        sentinel_fields = [k for k, v in data.items() if v is SERVER_TIMESTAMP]
        if sentinel_fields:
            timestamp = self._server_timestamp()
            for key in sentinel_fields:
                resolved[key] = timestamp
        return resolved

    def _snapshot(self, collection: str, doc_id: str) -> DocumentSnapshot:
        data = self._docs(collection).get(doc_id)
        return DocumentSnapshot(id=doc_id, data=copy.deepcopy(data) if data is not None else None)

    def _run_query(self, spec: QuerySpec) -> list[DocumentSnapshot]:
        items = [
            (doc_id, data)
            for doc_id, data in self._docs(spec.collection).items()
            if all(f.matches(data) for f in spec.filters)
        ]
        if spec.order_by:
            items = [item for item in items if item[1].get(spec.order_by) is not None]
            items.sort(key=lambda item: item[1][spec.order_by], reverse=spec.descending)
        return [DocumentSnapshot(id=doc_id, data=copy.deepcopy(data)) for doc_id, data in items]

    def _notify(self, collection: str, doc_id: str) -> None:
        collection = collection.strip("/")
        for listener_id, (spec, callback) in list(self._query_listeners.items()):
            # Listener pode ter sido removido por um callback anterior
            if listener_id in self._query_listeners and spec.collection.strip("/") == collection:
                callback(self._run_query(spec))

        for listener_id, (coll, target_id, doc_callback) in list(
            self._document_listeners.items()
        ):
            if (
                listener_id in self._document_listeners
                and coll.strip("/") == collection
                and target_id == doc_id
            ):
                doc_callback(self._snapshot(collection, doc_id))

"""Implementação Firestore do DocumentStore.

Usa o client síncrono do Firestore; chamadas de I/O rodam em thread
(`asyncio.to_thread`) para não bloquear o event loop.

Listeners do Firestore (`on_snapshot`) disparam em thread própria do SDK;
os callbacks são reentregues no event loop que criou a assinatura.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from google.api_core.exceptions import GoogleAPICallError, NotFound
from google.cloud import firestore

from imobi_ai.domain.errors import DocumentNotFoundError, DocumentStoreError
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

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import (
        DocumentSnapshot as FirestoreSnapshot,
    )

logger: logging.Logger = get_logger(__name__)


def _to_firestore(data: dict[str, Any]) -> dict[str, Any]:
    return {k: (firestore.SERVER_TIMESTAMP if v is SERVER_TIMESTAMP else v) for k, v in data.items()}


def _from_firestore(snapshot: FirestoreSnapshot) -> DocumentSnapshot:
    if not snapshot.exists:
        return DocumentSnapshot(id=snapshot.id, data=None)
    return DocumentSnapshot(id=snapshot.id, data=snapshot.to_dict() or {})


class FirestoreDocumentStore(DocumentStore):
    """DocumentStore sobre o Firestore.

    Schema (coleções configuráveis em Settings):
    /conversations/{id}
      └── /messages/{id}
    /leadProfiles/{conversation_id}
    /whatsappConnections/{id}
    /whatsappConnectionSessions/{session_id}
    """

    def __init__(self, client: firestore.Client) -> None:
        self._client = client

    def _collection(self, collection: str) -> firestore.CollectionReference:
        return self._client.collection(collection.strip("/"))

    def _doc(self, collection: str, doc_id: str) -> firestore.DocumentReference:
        return self._collection(collection).document(doc_id)

    def _build_query(self, spec: QuerySpec) -> Any:
        query: Any = self._collection(spec.collection)
        for item in spec.filters:
            query = query.where(filter=firestore.FieldFilter(item.field, item.op, item.value))
        if spec.order_by:
            direction = (
                firestore.Query.DESCENDING if spec.descending else firestore.Query.ASCENDING
            )
            query = query.order_by(spec.order_by, direction=direction)
        return query

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        try:
            _, doc_ref = await asyncio.to_thread(
                self._collection(collection).add, _to_firestore(data)
            )
        except GoogleAPICallError as e:
            logger.error(
                "firestore_add_failed",
                extra={"collection": collection, "error": type(e).__name__},
            )
            raise DocumentStoreError(f"Falha ao criar documento em {collection}: {e}") from e
        return doc_ref.id

    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        try:
            await asyncio.to_thread(self._doc(collection, doc_id).set, _to_firestore(data))
        except GoogleAPICallError as e:
            logger.error(
                "firestore_set_failed",
                extra={"collection": collection, "error": type(e).__name__},
            )
            raise DocumentStoreError(f"Falha ao gravar {collection}/{doc_id}: {e}") from e

    async def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        try:
            await asyncio.to_thread(self._doc(collection, doc_id).update, _to_firestore(data))
        except NotFound as e:
            raise DocumentNotFoundError(f"{collection}/{doc_id}") from e
        except GoogleAPICallError as e:
            logger.error(
                "firestore_update_failed",
                extra={"collection": collection, "error": type(e).__name__},
            )
            raise DocumentStoreError(f"Falha ao atualizar {collection}/{doc_id}: {e}") from e

    async def delete(self, collection: str, doc_id: str) -> None:
        try:
            await asyncio.to_thread(self._doc(collection, doc_id).delete)
        except GoogleAPICallError as e:
            logger.error(
                "firestore_delete_failed",
                extra={"collection": collection, "error": type(e).__name__},
            )
            raise DocumentStoreError(f"Falha ao remover {collection}/{doc_id}: {e}") from e

    async def get(self, collection: str, doc_id: str) -> DocumentSnapshot:
        try:
            snapshot = await asyncio.to_thread(self._doc(collection, doc_id).get)
        except GoogleAPICallError as e:
            logger.error(
                "firestore_get_failed",
                extra={"collection": collection, "error": type(e).__name__},
            )
            raise DocumentStoreError(f"Falha ao ler {collection}/{doc_id}: {e}") from e
        return _from_firestore(snapshot)

    async def query(self, spec: QuerySpec) -> list[DocumentSnapshot]:
        query = self._build_query(spec)
        try:
            docs = await asyncio.to_thread(lambda: list(query.stream()))
        except GoogleAPICallError as e:
            logger.error(
                "firestore_query_failed",
                extra={"collection": spec.collection, "error": type(e).__name__},
            )
            raise DocumentStoreError(f"Falha ao consultar {spec.collection}: {e}") from e
        return [_from_firestore(doc) for doc in docs]

    def subscribe_query(self, spec: QuerySpec, callback: QueryCallback) -> Subscription:
        loop = asyncio.get_running_loop()
        subscription: Subscription

        def _deliver(snapshots: list[DocumentSnapshot]) -> None:
            if subscription.active:
                callback(snapshots)

        def _on_snapshot(docs: list[Any], _changes: Any, _read_time: Any) -> None:
            snapshots = [_from_firestore(doc) for doc in docs]
            loop.call_soon_threadsafe(_deliver, snapshots)

        watch = self._build_query(spec).on_snapshot(_on_snapshot)
        subscription = Subscription(watch.unsubscribe)
        return subscription

    def subscribe_document(
        self, collection: str, doc_id: str, callback: DocumentCallback
    ) -> Subscription:
        loop = asyncio.get_running_loop()
        subscription: Subscription

        def _deliver(snapshot: DocumentSnapshot) -> None:
            if subscription.active:
                callback(snapshot)

        def _on_snapshot(docs: list[Any], _changes: Any, _read_time: Any) -> None:
            for doc in docs:
                loop.call_soon_threadsafe(_deliver, _from_firestore(doc))

        watch = self._doc(collection, doc_id).on_snapshot(_on_snapshot)
        subscription = Subscription(watch.unsubscribe)
        return subscription

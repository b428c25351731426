"""Testes do DocumentStore Firestore (client mockado)."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest
from google.api_core.exceptions import InternalServerError, NotFound, ServiceUnavailable
from google.cloud import firestore

from imobi_ai.config.settings import Settings
from imobi_ai.domain.errors import DocumentNotFoundError, DocumentStoreError
from imobi_ai.domain.protocols.document_store import SERVER_TIMESTAMP, FieldFilter, QuerySpec
from imobi_ai.infra.document_store import create_document_store
from imobi_ai.infra.document_store_firestore import FirestoreDocumentStore
from imobi_ai.infra.document_store_memory import InMemoryDocumentStore


def _fs_snapshot(doc_id: str, data: dict | None) -> MagicMock:
    snapshot = MagicMock()
    snapshot.id = doc_id
    snapshot.exists = data is not None
    snapshot.to_dict.return_value = data
    return snapshot


class TestWrites:
    @pytest.mark.asyncio
    async def test_add_translates_server_timestamp(self):
        mock_client = MagicMock()
        doc_ref = MagicMock()
        doc_ref.id = "new-id"
        mock_collection = mock_client.collection.return_value
        mock_collection.add.return_value = (None, doc_ref)

        store = FirestoreDocumentStore(mock_client)
        doc_id = await store.add("/conversations/c1/messages", {"timestamp": SERVER_TIMESTAMP})

        assert doc_id == "new-id"
        mock_client.collection.assert_called_with("conversations/c1/messages")
        sent = mock_collection.add.call_args[0][0]
        assert sent["timestamp"] is firestore.SERVER_TIMESTAMP

    @pytest.mark.asyncio
    async def test_set_writes_document(self):
        mock_client = MagicMock()
        doc_ref = mock_client.collection.return_value.document.return_value

        store = FirestoreDocumentStore(mock_client)
        await store.set("leadProfiles", "c1", {"name": "Ana"})

        mock_client.collection.return_value.document.assert_called_with("c1")
        doc_ref.set.assert_called_once_with({"name": "Ana"})

    @pytest.mark.asyncio
    async def test_update_not_found(self):
        mock_client = MagicMock()
        doc_ref = mock_client.collection.return_value.document.return_value
        doc_ref.update.side_effect = NotFound("missing")

        store = FirestoreDocumentStore(mock_client)

        with pytest.raises(DocumentNotFoundError):
            await store.update("conversations", "c1", {"lastMessage": "x"})

    @pytest.mark.asyncio
    async def test_api_error_wrapped(self):
        mock_client = MagicMock()
        doc_ref = mock_client.collection.return_value.document.return_value
        doc_ref.set.side_effect = InternalServerError("boom")

        store = FirestoreDocumentStore(mock_client)

        with pytest.raises(DocumentStoreError):
            await store.set("conversations", "c1", {})


class TestReads:
    @pytest.mark.asyncio
    async def test_get_missing(self):
        mock_client = MagicMock()
        doc_ref = mock_client.collection.return_value.document.return_value
        doc_ref.get.return_value = _fs_snapshot("c1", None)

        store = FirestoreDocumentStore(mock_client)
        snapshot = await store.get("conversations", "c1")

        assert snapshot.exists is False

    @pytest.mark.asyncio
    async def test_query_applies_filters_and_order(self):
        mock_client = MagicMock()
        collection = mock_client.collection.return_value
        query = collection.where.return_value.order_by.return_value
        query.stream.return_value = [_fs_snapshot("w1", {"ownerUserId": "u1"})]

        store = FirestoreDocumentStore(mock_client)
        results = await store.query(
            QuerySpec(
                "whatsappConnections",
                filters=(FieldFilter("ownerUserId", "u1"),),
                order_by="connectedAt",
                descending=True,
            )
        )

        assert [r.id for r in results] == ["w1"]
        collection.where.return_value.order_by.assert_called_once_with(
            "connectedAt", direction=firestore.Query.DESCENDING
        )

    @pytest.mark.asyncio
    async def test_get_api_error_wrapped(self):
        mock_client = MagicMock()
        doc_ref = mock_client.collection.return_value.document.return_value
        doc_ref.get.side_effect = ServiceUnavailable("offline")

        store = FirestoreDocumentStore(mock_client)

        with pytest.raises(DocumentStoreError):
            await store.get("leadProfiles", "c1")

    @pytest.mark.asyncio
    async def test_query_api_error_wrapped(self):
        mock_client = MagicMock()
        mock_client.collection.return_value.stream.side_effect = ServiceUnavailable("offline")

        store = FirestoreDocumentStore(mock_client)

        with pytest.raises(DocumentStoreError):
            await store.query(QuerySpec("conversations"))


class TestSubscriptions:
    @pytest.mark.asyncio
    async def test_snapshots_delivered_on_loop_until_unsubscribe(self):
        mock_client = MagicMock()
        doc_ref = mock_client.collection.return_value.document.return_value
        watch = MagicMock()
        doc_ref.on_snapshot.return_value = watch

        received: list[bool] = []
        store = FirestoreDocumentStore(mock_client)
        subscription = store.subscribe_document(
            "whatsappConnectionSessions", "s1", lambda snap: received.append(snap.exists)
        )
        handler = doc_ref.on_snapshot.call_args[0][0]

        handler([_fs_snapshot("s1", {"status": "qr_ready"})], None, None)
        await asyncio.sleep(0)
        subscription.unsubscribe()
        handler([_fs_snapshot("s1", {"status": "paired"})], None, None)
        await asyncio.sleep(0)

        assert received == [True]
        watch.unsubscribe.assert_called_once()


class TestFactory:
    def test_memory_backend(self):
        store = create_document_store(Settings(document_store_backend="memory"))

        assert isinstance(store, InMemoryDocumentStore)

    def test_firestore_backend_with_injected_client(self):
        store = create_document_store(
            Settings(document_store_backend="firestore"), client=MagicMock()
        )

        assert isinstance(store, FirestoreDocumentStore)

    def test_invalid_backend(self):
        with pytest.raises(ValueError):
            create_document_store(Settings(document_store_backend="redis"))

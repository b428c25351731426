from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from imobi_ai.api.app import create_app
from imobi_ai.config.settings import get_settings
from imobi_ai.domain.errors import DocumentStoreError
from imobi_ai.domain.models import AnalyticsInsights, ChatTurn, Insight, LeadProfile
from imobi_ai.infra.document_store_memory import InMemoryDocumentStore


class FakeClock:
    """Relógio controlado manualmente."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 3, 2, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeGenerationService:
    """GenerationService determinístico que registra as chamadas."""

    def __init__(
        self,
        reply: str = "Olá! Em qual região você procura?",
        profile: LeadProfile | None = None,
        insights: AnalyticsInsights | None = None,
    ) -> None:
        self.reply = reply
        self.profile = profile or LeadProfile(
            property_type="Casa",
            bedrooms="3",
            missing_fields=["Orçamento", "Entrada"],
        )
        self.insights = insights or AnalyticsInsights(
            insights=[Insight(title="Entrada", description="Objeção mais comum")],
            recommendations=["Apresentar simulações de entrada"],
        )
        self.generate_calls: list[tuple[list[ChatTurn], str]] = []
        self.extract_calls: list[str] = []
        self.summarize_calls: list[str] = []
        self.error: Exception | None = None

    async def generate(self, history: Sequence[ChatTurn], system_instruction: str) -> str:
        if self.error is not None:
            raise self.error
        self.generate_calls.append((list(history), system_instruction))
        return self.reply

    async def extract(self, conversation_text: str) -> LeadProfile:
        self.extract_calls.append(conversation_text)
        return self.profile

    async def summarize(self, metrics_text: str) -> AnalyticsInsights:
        if self.error is not None:
            raise self.error
        self.summarize_calls.append(metrics_text)
        return self.insights


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("DOCUMENT_STORE_BACKEND", "memory")
    get_settings.cache_clear()
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client
    get_settings.cache_clear()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock: FakeClock) -> InMemoryDocumentStore:
    return InMemoryDocumentStore(clock=clock)


@pytest.fixture()
def generation() -> FakeGenerationService:
    return FakeGenerationService()


class FailingDocumentStore(InMemoryDocumentStore):
    """Store em memória cujas operações listadas em `fail_on` falham."""

    def __init__(self, clock: FakeClock) -> None:
        super().__init__(clock=clock)
        self.fail_on: set[str] = set()

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise DocumentStoreError("rede indisponível")

    async def add(self, collection, data):
        self._check("add")
        return await super().add(collection, data)

    async def set(self, collection, doc_id, data):
        self._check("set")
        await super().set(collection, doc_id, data)

    async def update(self, collection, doc_id, data):
        self._check("update")
        await super().update(collection, doc_id, data)

    async def delete(self, collection, doc_id):
        self._check("delete")
        await super().delete(collection, doc_id)


@pytest.fixture()
def failing_store(clock: FakeClock) -> FailingDocumentStore:
    return FailingDocumentStore(clock)

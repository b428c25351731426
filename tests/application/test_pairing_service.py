"""Testes do PairingService (lógica do endpoint de pareamento)."""

from __future__ import annotations

from datetime import timedelta

import pytest

from imobi_ai.application.pairing_service import PairingService, build_qr_payload
from imobi_ai.domain.enums import PairingStatus
from imobi_ai.domain.errors import PairingSessionNotFoundError
from imobi_ai.infra.pairing_session_store_memory import InMemoryPairingSessionStore


@pytest.fixture()
def session_store() -> InMemoryPairingSessionStore:
    return InMemoryPairingSessionStore()


@pytest.fixture()
def service(session_store, clock) -> PairingService:
    return PairingService(session_store, clock=clock)


class TestCreateSession:
    def test_expires_exactly_sixty_seconds_after_creation(self, service, clock):
        session = service.create_session("user-1")

        assert session.created_at == clock.now
        assert session.expires_at - session.created_at == timedelta(seconds=60)

    def test_initial_state(self, service, session_store):
        session = service.create_session("user-1", "Loja Centro")

        assert session.status == PairingStatus.WAITING_QR
        assert session.label == "Loja Centro"
        assert session.paired_at is None
        assert session.qr_payload.startswith("2@")
        assert session_store.get(session.id) is session

    def test_default_label(self, service):
        assert service.create_session("user-1").label == "Novo Dispositivo"

    def test_multiple_sessions_per_owner_allowed(self, service, session_store):
        first = service.create_session("user-1")
        second = service.create_session("user-1")

        assert first.id != second.id
        assert len(session_store) == 2

    def test_custom_ttl(self, session_store, clock):
        service = PairingService(session_store, ttl_seconds=5, clock=clock)

        session = service.create_session("user-1")

        assert session.expires_at == clock.now + timedelta(seconds=5)


class TestMarkPaired:
    def test_marks_paired_and_stamps_time(self, service, session_store, clock):
        session = service.create_session("user-1")
        clock.advance(10)

        paired = service.mark_paired(session.id)

        assert paired.status == PairingStatus.PAIRED
        assert paired.paired_at == clock.now
        assert session_store.get(session.id).status == PairingStatus.PAIRED

    def test_unknown_id_raises_and_mutates_nothing(self, service, session_store):
        session = service.create_session("user-1")

        with pytest.raises(PairingSessionNotFoundError) as exc_info:
            service.mark_paired("does-not-exist")

        assert str(exc_info.value) == "Session not found"
        assert len(session_store) == 1
        assert session_store.get(session.id).status == PairingStatus.WAITING_QR

    def test_second_call_overwrites_paired_at(self, service, clock):
        session = service.create_session("user-1")
        first = service.mark_paired(session.id)
        clock.advance(5)

        second = service.mark_paired(session.id)

        assert second.status == PairingStatus.PAIRED
        assert second.paired_at == first.paired_at + timedelta(seconds=5)

    def test_expired_session_can_still_be_paired(self, service, clock):
        session = service.create_session("user-1")
        clock.advance(120)

        assert service.mark_paired(session.id).status == PairingStatus.PAIRED


def test_qr_payload_format(clock):
    payload = build_qr_payload(clock.now)

    prefix, epoch_ms, suffix = payload.split("|")
    assert prefix.startswith("2@")
    assert int(epoch_ms) == int(clock.now.timestamp() * 1000)
    assert suffix

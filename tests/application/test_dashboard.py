"""Testes da montagem do dashboard."""

from __future__ import annotations

import pytest

from imobi_ai.application.dashboard import build_dashboard, create_generation_service
from imobi_ai.application.pairing_api import LocalPairingApi
from imobi_ai.application.pairing_flow import ADMIN_BYPASS_UID
from imobi_ai.application.pairing_service import PairingService
from imobi_ai.config.settings import Settings
from imobi_ai.domain.models import UserIdentity
from imobi_ai.infra.pairing_session_store_memory import InMemoryPairingSessionStore


def test_generation_service_from_settings():
    service = create_generation_service(Settings(openai_api_key=None))

    assert service._api_key is None


@pytest.mark.asyncio
async def test_admin_dashboard_starts_with_demo_connections(store, generation):
    user = UserIdentity(uid=ADMIN_BYPASS_UID, email="admin@system.local")
    dashboard = build_dashboard(
        Settings(),
        user,
        store=store,
        generation=generation,
        pairing_api=LocalPairingApi(PairingService(InMemoryPairingSessionStore())),
    )

    await dashboard.start()

    assert len(dashboard.pairing.connections) == 2
    assert dashboard.inbox.conversations == []

    await dashboard.close()
    assert store.listener_count == 0

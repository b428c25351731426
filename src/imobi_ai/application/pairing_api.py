"""Clientes do endpoint de pareamento usados pela tela de conexões.

- HttpPairingApi: chama o serviço HTTP (`/api/whatsapp/session`)
- LocalPairingApi: chama o PairingService no mesmo processo (dev/testes)
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from imobi_ai.application.pairing_service import PairingService
from imobi_ai.domain.errors import PairingApiError, PairingSessionNotFoundError
from imobi_ai.domain.models import PairingSession
from imobi_ai.observability.logging import get_logger, short_id

logger: logging.Logger = get_logger(__name__)


class PairingApi(Protocol):
    """Contrato do endpoint de pareamento visto pelo cliente."""

    async def create_session(self, owner_user_id: str, label: str | None) -> PairingSession:
        """Emite nova sessão para o dono."""
        ...

    async def simulate_pair(self, session_id: str) -> bool:
        """Confirma o pareamento; False se a sessão não existe no endpoint."""
        ...


class HttpPairingApi:
    """Cliente HTTP do endpoint de pareamento."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def from_base_url(cls, base_url: str, timeout: float = 10.0) -> HttpPairingApi:
        return cls(httpx.AsyncClient(base_url=base_url, timeout=timeout))

    async def create_session(self, owner_user_id: str, label: str | None) -> PairingSession:
        payload: dict[str, str] = {"userId": owner_user_id}
        if label:
            payload["label"] = label
        try:
            response = await self._client.post("/api/whatsapp/session", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(
                "pairing_api_create_failed",
                extra={"error_type": type(e).__name__},
            )
            raise PairingApiError("Falha ao criar sessão de pareamento") from e
        return PairingSession.model_validate(response.json())

    async def simulate_pair(self, session_id: str) -> bool:
        try:
            response = await self._client.post(
                f"/api/whatsapp/session/{session_id}/simulate-pair"
            )
            if response.status_code == httpx.codes.NOT_FOUND:
                return False
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(
                "pairing_api_simulate_failed",
                extra={"session_id": short_id(session_id), "error_type": type(e).__name__},
            )
            raise PairingApiError("Falha ao confirmar pareamento") from e
        return bool(response.json().get("success", False))

    async def aclose(self) -> None:
        await self._client.aclose()


class LocalPairingApi:
    """Adapter in-process sobre PairingService."""

    def __init__(self, service: PairingService) -> None:
        self._service = service

    async def create_session(self, owner_user_id: str, label: str | None) -> PairingSession:
        return self._service.create_session(owner_user_id, label)

    async def simulate_pair(self, session_id: str) -> bool:
        try:
            self._service.mark_paired(session_id)
        except PairingSessionNotFoundError:
            return False
        return True

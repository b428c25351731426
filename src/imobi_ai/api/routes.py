"""Rotas HTTP: healthcheck e pareamento WhatsApp simulado."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from imobi_ai.api.dependencies import get_pairing_service, get_settings
from imobi_ai.application.pairing_service import PairingService
from imobi_ai.config.settings import Settings
from imobi_ai.domain.errors import PairingSessionNotFoundError

router = APIRouter()


class CreateSessionRequest(BaseModel):
    """Corpo de `POST /api/whatsapp/session`."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str
    label: str | None = None


@router.get("/health")
def health(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    """Healthcheck simples."""
    return {"status": "ok", "service": settings.service_name, "version": settings.version}


@router.post("/api/whatsapp/session")
def create_pairing_session(
    body: CreateSessionRequest,
    service: PairingService = Depends(get_pairing_service),
) -> dict[str, Any]:
    """Emite nova sessão de pareamento (`waiting_qr`, validade de 60s)."""
    session = service.create_session(body.user_id, body.label)
    return session.model_dump(mode="json", by_alias=True)


@router.post("/api/whatsapp/session/{session_id}/simulate-pair", response_model=None)
def simulate_pair(
    session_id: str,
    service: PairingService = Depends(get_pairing_service),
) -> dict[str, bool] | JSONResponse:
    """Marca a sessão como pareada (sem checar dono nem expiração)."""
    try:
        service.mark_paired(session_id)
    except PairingSessionNotFoundError:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Session not found"},
        )
    return {"success": True}

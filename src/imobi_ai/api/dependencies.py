"""Dependências injetadas nas rotas."""

from __future__ import annotations

from fastapi import Request

from imobi_ai.application.pairing_service import PairingService
from imobi_ai.config.settings import Settings


def get_settings(request: Request) -> Settings:
    """Retorna settings da aplicação."""

    return request.app.state.settings


def get_pairing_service(request: Request) -> PairingService:
    """Retorna o serviço de pareamento (store em memória do processo)."""

    return request.app.state.pairing_service

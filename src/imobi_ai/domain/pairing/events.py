"""Eventos que disparam transições no fluxo de pareamento."""

from __future__ import annotations

from enum import StrEnum


class PairingEvent(StrEnum):
    """Eventos do fluxo de pareamento."""

    SESSION_REQUESTED = "SESSION_REQUESTED"
    """Usuário (ou re-emissão automática) pediu nova sessão."""

    SESSION_DOCUMENT_READY = "SESSION_DOCUMENT_READY"
    """Assinatura observou o documento da sessão com o QR."""

    REQUEST_FAILED = "REQUEST_FAILED"
    """Endpoint ou gravação do documento falhou."""

    COUNTDOWN_ELAPSED = "COUNTDOWN_ELAPSED"
    """Contagem regressiva chegou a zero."""

    SCAN_CONFIRMED = "SCAN_CONFIRMED"
    """Documento da sessão passou a `paired`."""

    CONNECTION_CREATED = "CONNECTION_CREATED"
    """Conexão materializada; sessão ativa descartada."""

    CANCELLED = "CANCELLED"
    """Usuário abandonou a sessão (sem expirar remotamente)."""

"""Estados do fluxo de pareamento WhatsApp (lado da tela de configurações).

- IDLE: nenhuma sessão ativa
- WAITING_QR / QR_READY: sessão em andamento
- PAIRED / EXPIRED: desfechos de uma sessão
"""

from __future__ import annotations

from enum import StrEnum


class PairingFlowState(StrEnum):
    """5 estados do fluxo de pareamento."""

    IDLE = "idle"
    """Nenhuma sessão ativa; aguardando pedido de nova conexão."""

    WAITING_QR = "waiting_qr"
    """Sessão solicitada ao endpoint; documento ainda não observado."""

    QR_READY = "qr_ready"
    """QR exibido, contagem regressiva em curso."""

    PAIRED = "paired"
    """Scan confirmado; conexão sendo materializada."""

    EXPIRED = "expired"
    """Validade esgotada; nova sessão é emitida automaticamente."""


ACTIVE_STATES = frozenset({PairingFlowState.WAITING_QR, PairingFlowState.QR_READY})
"""Estados com sessão em andamento (bloqueiam novo pedido manual)."""

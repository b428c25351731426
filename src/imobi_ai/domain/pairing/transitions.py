"""Tabela de transições do fluxo de pareamento.

- TRANSITIONS[(current_state, event)] = next_state
- Validação pura: sem side effects
"""

from __future__ import annotations

from imobi_ai.domain.pairing.events import PairingEvent
from imobi_ai.domain.pairing.states import PairingFlowState

TRANSITIONS: dict[tuple[PairingFlowState, PairingEvent], PairingFlowState] = {
    # === IDLE → ... ===
    (PairingFlowState.IDLE, PairingEvent.SESSION_REQUESTED): PairingFlowState.WAITING_QR,
    # === WAITING_QR → ... ===
    (
        PairingFlowState.WAITING_QR,
        PairingEvent.SESSION_DOCUMENT_READY,
    ): PairingFlowState.QR_READY,
    (PairingFlowState.WAITING_QR, PairingEvent.REQUEST_FAILED): PairingFlowState.IDLE,
    (PairingFlowState.WAITING_QR, PairingEvent.CANCELLED): PairingFlowState.IDLE,
    # === QR_READY → ... ===
    (PairingFlowState.QR_READY, PairingEvent.COUNTDOWN_ELAPSED): PairingFlowState.EXPIRED,
    (PairingFlowState.QR_READY, PairingEvent.SCAN_CONFIRMED): PairingFlowState.PAIRED,
    (PairingFlowState.QR_READY, PairingEvent.CANCELLED): PairingFlowState.IDLE,
    # Snapshot repetido do mesmo documento
    (
        PairingFlowState.QR_READY,
        PairingEvent.SESSION_DOCUMENT_READY,
    ): PairingFlowState.QR_READY,
    # === EXPIRED → ... (re-emissão) ===
    (PairingFlowState.EXPIRED, PairingEvent.SESSION_REQUESTED): PairingFlowState.WAITING_QR,
    (PairingFlowState.EXPIRED, PairingEvent.CANCELLED): PairingFlowState.IDLE,
    # === PAIRED → ... ===
    (PairingFlowState.PAIRED, PairingEvent.CONNECTION_CREATED): PairingFlowState.IDLE,
}


def validate_transition(
    current_state: PairingFlowState, event: PairingEvent
) -> tuple[bool, PairingFlowState | None, str]:
    """Valida se uma transição é permitida.

    Retorna:
    - (True, next_state, ""): transição válida
    - (False, None, motivo): transição inválida

    Nunca lança exceção; apenas valida.
    """
    key = (current_state, event)

    if key not in TRANSITIONS:
        return (
            False,
            None,
            f"No transition from {current_state} on event {event}",
        )

    return True, TRANSITIONS[key], ""

"""FSM do fluxo de pareamento WhatsApp."""

from imobi_ai.domain.pairing.events import PairingEvent
from imobi_ai.domain.pairing.states import ACTIVE_STATES, PairingFlowState
from imobi_ai.domain.pairing.transitions import TRANSITIONS, validate_transition

__all__ = [
    "ACTIVE_STATES",
    "PairingEvent",
    "PairingFlowState",
    "TRANSITIONS",
    "validate_transition",
]

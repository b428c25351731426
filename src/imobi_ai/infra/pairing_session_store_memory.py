"""Store de sessões de pareamento em memória (escopo do processo).

O mapa vive enquanto o processo vive e não é sincronizado: só é seguro com
um único worker atendendo requisições de forma cooperativa.
"""

from __future__ import annotations

import logging

from imobi_ai.domain.models import PairingSession
from imobi_ai.domain.protocols.pairing_session_store import PairingSessionStore
from imobi_ai.observability.logging import get_logger, short_id

logger: logging.Logger = get_logger(__name__)


class InMemoryPairingSessionStore(PairingSessionStore):
    """Mapa session_id → PairingSession (não usar com múltiplos workers)."""

    def __init__(self) -> None:
        self._sessions: dict[str, PairingSession] = {}

    def get(self, session_id: str) -> PairingSession | None:
        session = self._sessions.get(session_id)
        if session is None:
            logger.debug(
                "Pairing session not found (in-memory)",
                extra={"session_id": short_id(session_id)},
            )
        return session

    def put(self, session: PairingSession) -> None:
        self._sessions[session.id] = session
        logger.debug(
            "Pairing session saved (in-memory)",
            extra={"session_id": short_id(session.id), "status": session.status},
        )

    def delete(self, session_id: str) -> bool:
        if session_id in self._sessions:
            del self._sessions[session_id]
            logger.debug(
                "Pairing session deleted (in-memory)",
                extra={"session_id": short_id(session_id)},
            )
            return True
        return False

    def __len__(self) -> int:
        return len(self._sessions)

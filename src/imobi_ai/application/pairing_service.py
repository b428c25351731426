"""Lógica do endpoint de pareamento WhatsApp (simulado).

Duas operações:
- create_session: emite sessão `waiting_qr` com validade de 60s
- mark_paired: marca sessão existente como `paired`

O efeito é local ao store em memória; quem chama é responsável por atualizar
o documento persistido que a tela observa.
"""

from __future__ import annotations

import logging
import secrets
import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from imobi_ai.config.settings import PAIRING_SESSION_TTL_SECONDS
from imobi_ai.domain.enums import PairingStatus
from imobi_ai.domain.errors import PairingSessionNotFoundError
from imobi_ai.domain.models import DEFAULT_DEVICE_LABEL, PairingSession
from imobi_ai.domain.protocols.pairing_session_store import PairingSessionStore
from imobi_ai.observability.logging import get_logger, short_id

logger: logging.Logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def build_qr_payload(now: datetime) -> str:
    """Payload opaco no formato de QR do WhatsApp (`2@...`), apenas cosmético."""
    epoch_ms = int(now.timestamp() * 1000)
    return f"2@{uuid.uuid4()}|{epoch_ms}|{secrets.token_hex(3)}"


class PairingService:
    """Cria e confirma sessões de pareamento no store do processo."""

    def __init__(
        self,
        store: PairingSessionStore,
        ttl_seconds: int = PAIRING_SESSION_TTL_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    def create_session(self, owner_user_id: str, label: str | None = None) -> PairingSession:
        """Cria sessão nova (sem exclusividade por dono)."""
        now = self._clock()
        session = PairingSession(
            id=str(uuid.uuid4()),
            owner_user_id=owner_user_id,
            status=PairingStatus.WAITING_QR,
            qr_payload=build_qr_payload(now),
            label=label or DEFAULT_DEVICE_LABEL,
            created_at=now,
            expires_at=now + self._ttl,
        )
        self._store.put(session)
        logger.info(
            "pairing_session_created",
            extra={
                "session_id": short_id(session.id),
                "owner": short_id(owner_user_id),
                "ttl_seconds": int(self._ttl.total_seconds()),
            },
        )
        return session

    def mark_paired(self, session_id: str) -> PairingSession:
        """Marca sessão como pareada e carimba `paired_at`.

        Não verifica dono nem expiração. Chamadas repetidas sobrescrevem
        `paired_at`.

        Raises:
            PairingSessionNotFoundError: se o id não existe no store
        """
        session = self._store.get(session_id)
        if session is None:
            logger.warning(
                "pairing_session_not_found",
                extra={"session_id": short_id(session_id)},
            )
            raise PairingSessionNotFoundError(session_id)

        paired = session.model_copy(
            update={"status": PairingStatus.PAIRED, "paired_at": self._clock()}
        )
        self._store.put(paired)
        logger.info("pairing_session_paired", extra={"session_id": short_id(session_id)})
        return paired

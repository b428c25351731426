"""Fluxo de pareamento da tela de conexões WhatsApp.

Responsabilidades:
- Observar as conexões do dono e aplicar o limite por dono
- Solicitar sessão ao endpoint e gravar o documento observado pela tela
- Contagem regressiva do QR; ao zerar, marcar expirada e re-emitir
- Materializar a Connection quando a sessão vira `paired`

Transições validadas pela FSM em `domain.pairing`.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from imobi_ai.application.pairing_api import PairingApi
from imobi_ai.application.scheduling import PeriodicTicker
from imobi_ai.config.settings import MAX_CONNECTIONS_PER_OWNER
from imobi_ai.domain.enums import ConnectionStatus, PairingStatus
from imobi_ai.domain.errors import (
    ConnectionLimitError,
    DocumentStoreError,
    ManualEntryError,
    PairingApiError,
)
from imobi_ai.domain.models import Connection, PairingSession
from imobi_ai.domain.pairing import (
    ACTIVE_STATES,
    PairingEvent,
    PairingFlowState,
    validate_transition,
)
from imobi_ai.domain.protocols.document_store import (
    SERVER_TIMESTAMP,
    DocumentSnapshot,
    DocumentStore,
    FieldFilter,
    QuerySpec,
    Subscription,
)
from imobi_ai.observability.logging import get_logger, short_id

logger: logging.Logger = get_logger(__name__)

ADMIN_BYPASS_UID = "admin-bypass-id"

# Conexões de demonstração do usuário administrador
DEMO_CONNECTIONS: tuple[tuple[str, str], ...] = (
    ("Atendimento Principal", "+55 (11) 99876-5432"),
    ("Plantão de Vendas", "+55 (11) 91234-5678"),
)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def random_phone_number() -> str:
    """Número fictício no formato `+55 (11) 9XXXXXXXX`."""
    return f"+55 (11) 9{random.randint(0, 99_999_999):08d}"


class PairingFlow:
    """Estado e ações da tela de conexões de um dono."""

    def __init__(
        self,
        owner_user_id: str,
        store: DocumentStore,
        pairing_api: PairingApi,
        *,
        connections_collection: str = "whatsappConnections",
        sessions_collection: str = "whatsappConnectionSessions",
        max_connections: int = MAX_CONNECTIONS_PER_OWNER,
        countdown_interval: float = 1.0,
        max_auto_reissues: int | None = None,
        clock: Callable[[], datetime] = _utcnow,
        phone_factory: Callable[[], str] = random_phone_number,
    ) -> None:
        self._owner = owner_user_id
        self._store = store
        self._api = pairing_api
        self._connections_collection = connections_collection
        self._sessions_collection = sessions_collection
        self._max_connections = max_connections
        self._max_auto_reissues = max_auto_reissues
        self._clock = clock
        self._phone_factory = phone_factory

        self.state = PairingFlowState.IDLE
        self.active_session: PairingSession | None = None
        self.time_left = 0
        self.connections: list[Connection] = []
        self.is_generating = False
        self.auto_reissues = 0

        self._connections_sub: Subscription | None = None
        self._session_sub: Subscription | None = None
        self._background: set[asyncio.Task[Any]] = set()
        self._ticker = PeriodicTicker(
            countdown_interval,
            self.tick,
            should_continue=lambda: self.state in ACTIVE_STATES,
        )

    # ------------------------------------------------------------------
    # Ciclo de vida
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Assina as conexões do dono (semeia demo para o admin)."""
        spec = QuerySpec(
            collection=self._connections_collection,
            filters=(FieldFilter("ownerUserId", self._owner),),
        )
        self._connections_sub = self._store.subscribe_query(spec, self._on_connections)

        if self._owner == ADMIN_BYPASS_UID and not self.connections:
            await self._seed_demo_connections()

    async def close(self) -> None:
        await self._ticker.stop()
        self._release_session()
        if self._connections_sub is not None:
            self._connections_sub.unsubscribe()
            self._connections_sub = None
        for task in list(self._background):
            task.cancel()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
        self._background.clear()

    async def wait_background(self) -> None:
        """Aguarda tarefas disparadas por snapshots (ex.: criação da Connection)."""
        while self._background:
            await asyncio.gather(*list(self._background))

    @property
    def at_capacity(self) -> bool:
        return len(self.connections) >= self._max_connections

    # ------------------------------------------------------------------
    # Sessões
    # ------------------------------------------------------------------

    async def start_new_session(self) -> PairingSession | None:
        """Solicita nova sessão (ação do usuário).

        Raises:
            ConnectionLimitError: dono já tem o máximo de conexões
        """
        self.auto_reissues = 0
        return await self._request_session()

    async def _request_session(self) -> PairingSession | None:
        if self.at_capacity:
            logger.info(
                "connection_limit_reached",
                extra={"owner": short_id(self._owner), "limit": self._max_connections},
            )
            raise ConnectionLimitError(self._max_connections)

        if not self._apply(PairingEvent.SESSION_REQUESTED):
            return None

        self._release_session()
        self.active_session = None
        self.is_generating = True
        try:
            label = f"Conexão {len(self.connections) + 1}"
            session = await self._api.create_session(self._owner, label)
            document = session.model_copy(update={"status": PairingStatus.QR_READY}).to_document()
            document["createdAt"] = SERVER_TIMESTAMP
            await self._store.set(self._sessions_collection, session.id, document)
        except (PairingApiError, DocumentStoreError) as e:
            logger.error(
                "pairing_session_request_failed",
                extra={"owner": short_id(self._owner), "error_type": type(e).__name__},
            )
            self._apply(PairingEvent.REQUEST_FAILED)
            return None
        finally:
            self.is_generating = False

        if self.state != PairingFlowState.WAITING_QR:
            # Cancelada enquanto aguardava o endpoint
            return None

        self._session_sub = self._store.subscribe_document(
            self._sessions_collection, session.id, self._on_session_snapshot
        )
        return self.active_session

    async def tick(self) -> None:
        """Recalcula o tempo restante; ao zerar, expira e re-emite uma vez."""
        session = self.active_session
        if self.state != PairingFlowState.QR_READY or session is None:
            return

        self.time_left = session.remaining_seconds(self._clock())
        if self.time_left > 0:
            return

        # QR_READY -> EXPIRED impede uma segunda expiração da mesma sessão
        if not self._apply(PairingEvent.COUNTDOWN_ELAPSED):
            return
        await self._expire_and_reissue(session)

    async def _expire_and_reissue(self, session: PairingSession) -> None:
        try:
            await self._store.update(
                self._sessions_collection, session.id, {"status": PairingStatus.EXPIRED.value}
            )
        except DocumentStoreError as e:
            logger.warning(
                "pairing_session_expire_failed",
                extra={"session_id": short_id(session.id), "error_type": type(e).__name__},
            )
        self._release_session()
        logger.info("pairing_session_expired", extra={"session_id": short_id(session.id)})

        if self._max_auto_reissues is not None and self.auto_reissues >= self._max_auto_reissues:
            logger.info(
                "pairing_auto_reissue_exhausted",
                extra={"owner": short_id(self._owner), "reissues": self.auto_reissues},
            )
            return

        self.auto_reissues += 1
        try:
            await self._request_session()
        except ConnectionLimitError:
            # Permanece EXPIRED; o usuário decide o que fazer
            return

    async def simulate_scan(self) -> bool:
        """Simula a leitura do QR pelo celular."""
        session = self.active_session
        if session is None or self.state != PairingFlowState.QR_READY:
            return False

        try:
            found = await self._api.simulate_pair(session.id)
        except PairingApiError:
            return False
        if not found:
            logger.warning(
                "pairing_session_unknown_to_endpoint",
                extra={"session_id": short_id(session.id)},
            )

        try:
            await self._store.update(
                self._sessions_collection, session.id, {"status": PairingStatus.PAIRED.value}
            )
        except DocumentStoreError as e:
            logger.error(
                "pairing_session_mark_paired_failed",
                extra={"session_id": short_id(session.id), "error_type": type(e).__name__},
            )
            return False
        return True

    def cancel(self) -> None:
        """Descarta a sessão ativa (o documento remoto não é alterado)."""
        self._release_session()
        self.time_left = 0
        self._apply(PairingEvent.CANCELLED)

    # ------------------------------------------------------------------
    # Conexões
    # ------------------------------------------------------------------

    async def add_manual_connection(self, phone_number: str, label: str) -> str | None:
        """Cadastra conexão informada manualmente.

        Raises:
            ManualEntryError: número ou rótulo vazio
            ConnectionLimitError: dono já tem o máximo de conexões
        """
        missing = [
            name
            for name, value in (("phoneNumber", phone_number), ("label", label))
            if not value or not value.strip()
        ]
        if missing:
            raise ManualEntryError(missing)
        if self.at_capacity:
            raise ConnectionLimitError(self._max_connections)

        connection = Connection(
            owner_user_id=self._owner,
            label=label.strip(),
            phone_number=phone_number.strip(),
        )
        return await self._add_connection(connection)

    async def remove_connection(self, connection_id: str) -> bool:
        try:
            await self._store.delete(self._connections_collection, connection_id)
        except DocumentStoreError as e:
            logger.error(
                "connection_remove_failed",
                extra={"connection_id": short_id(connection_id), "error_type": type(e).__name__},
            )
            return False
        logger.info("connection_removed", extra={"connection_id": short_id(connection_id)})
        return True

    async def _add_connection(self, connection: Connection) -> str | None:
        document = connection.to_document()
        document["connectedAt"] = SERVER_TIMESTAMP
        try:
            connection_id = await self._store.add(self._connections_collection, document)
        except DocumentStoreError as e:
            logger.error(
                "connection_create_failed",
                extra={"owner": short_id(self._owner), "error_type": type(e).__name__},
            )
            return None
        logger.info(
            "connection_created",
            extra={"connection_id": short_id(connection_id), "owner": short_id(self._owner)},
        )
        return connection_id

    async def _seed_demo_connections(self) -> None:
        for label, phone in DEMO_CONNECTIONS:
            await self._add_connection(
                Connection(owner_user_id=self._owner, label=label, phone_number=phone)
            )

    async def _materialize_connection(self, session: PairingSession) -> None:
        self._release_session()
        await self._add_connection(
            Connection(
                owner_user_id=self._owner,
                status=ConnectionStatus.CONNECTED,
                label=session.label,
                phone_number=self._phone_factory(),
            )
        )
        self.active_session = None
        self.time_left = 0
        self._apply(PairingEvent.CONNECTION_CREATED)

    # ------------------------------------------------------------------
    # Callbacks de assinatura
    # ------------------------------------------------------------------

    def _on_connections(self, snapshots: list[DocumentSnapshot]) -> None:
        self.connections = [
            Connection.from_document(snap.id, snap.to_dict()) for snap in snapshots
        ]

    def _on_session_snapshot(self, snapshot: DocumentSnapshot) -> None:
        if not snapshot.exists:
            return
        session = PairingSession.from_document(snapshot.id, snapshot.to_dict())

        if session.status == PairingStatus.PAIRED:
            if self._apply(PairingEvent.SCAN_CONFIRMED):
                self.active_session = session
                self._spawn(self._materialize_connection(session))
            return

        if session.is_active:
            if self._apply(PairingEvent.SESSION_DOCUMENT_READY):
                self.active_session = session
                self.time_left = session.remaining_seconds(self._clock())
                self._ticker.start()
        elif self.state == PairingFlowState.EXPIRED:
            self.active_session = session

    # ------------------------------------------------------------------
    # Internos
    # ------------------------------------------------------------------

    def _apply(self, event: PairingEvent) -> bool:
        ok, next_state, reason = validate_transition(self.state, event)
        if not ok or next_state is None:
            logger.debug("pairing_transition_rejected", extra={"reason": reason})
            return False
        self.state = next_state
        return True

    def _release_session(self) -> None:
        if self._session_sub is not None:
            self._session_sub.unsubscribe()
            self._session_sub = None

    def _spawn(self, coro: Any) -> None:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

"""Protocolo de armazenamento das sessões de pareamento (get/put/delete por id)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from imobi_ai.domain.models import PairingSession


class PairingSessionStore(ABC):
    """Contrato mínimo para sessões efêmeras de pareamento."""

    @abstractmethod
    def get(self, session_id: str) -> PairingSession | None: ...

    @abstractmethod
    def put(self, session: PairingSession) -> None: ...

    @abstractmethod
    def delete(self, session_id: str) -> bool: ...

"""Contrato do document store (coleções, documentos e assinaturas em tempo real).

Caminhos de coleção seguem o formato do Firestore:
`conversations` ou `conversations/{id}/messages`.

Assinaturas:
- O callback recebe o snapshot completo (lista ordenada ou documento único)
  a cada mudança, começando pelo estado atual no momento da assinatura.
- `Subscription.unsubscribe()` é determinístico e idempotente: após o retorno,
  nenhum callback adicional é entregue.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


class _ServerTimestamp:
    """Sentinela: o store atribui o timestamp (chave de ordenação do servidor)."""

    _instance: _ServerTimestamp | None = None

    def __new__(cls) -> _ServerTimestamp:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass(frozen=True, slots=True)
class DocumentSnapshot:
    """Estado de um documento num instante."""

    id: str
    data: dict[str, Any] | None = None

    @property
    def exists(self) -> bool:
        return self.data is not None

    def to_dict(self) -> dict[str, Any]:
        return dict(self.data or {})


@dataclass(frozen=True, slots=True)
class FieldFilter:
    """Filtro de igualdade (único operador usado pelas telas)."""

    field: str
    value: Any
    op: str = "=="

    def __post_init__(self) -> None:
        if self.op != "==":
            raise ValueError(f"Operador não suportado: {self.op}")

    def matches(self, data: dict[str, Any]) -> bool:
        return data.get(self.field) == self.value


@dataclass(frozen=True, slots=True)
class QuerySpec:
    """Consulta ordenada sobre uma coleção."""

    collection: str
    filters: tuple[FieldFilter, ...] = field(default_factory=tuple)
    order_by: str | None = None
    descending: bool = False


QueryCallback = Callable[[list[DocumentSnapshot]], None]
DocumentCallback = Callable[[DocumentSnapshot], None]


class Subscription:
    """Handle de uma assinatura ativa."""

    def __init__(self, on_unsubscribe: Callable[[], None]) -> None:
        self._on_unsubscribe = on_unsubscribe
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._on_unsubscribe()


class DocumentStore(ABC):
    """Porta de acesso ao banco de documentos externo."""

    @abstractmethod
    async def add(self, collection: str, data: dict[str, Any]) -> str:
        """Cria documento com id gerado; retorna o id."""

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Cria ou sobrescreve documento inteiro."""

    @abstractmethod
    async def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Atualiza campos de documento existente.

        Raises:
            DocumentNotFoundError: se o documento não existe
        """

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Remove documento (no-op se não existir)."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> DocumentSnapshot:
        """Lê documento (snapshot com `exists=False` se ausente)."""

    @abstractmethod
    async def query(self, spec: QuerySpec) -> list[DocumentSnapshot]:
        """Executa consulta ordenada uma vez."""

    @abstractmethod
    def subscribe_query(self, spec: QuerySpec, callback: QueryCallback) -> Subscription:
        """Assina mudanças no resultado de uma consulta."""

    @abstractmethod
    def subscribe_document(
        self, collection: str, doc_id: str, callback: DocumentCallback
    ) -> Subscription:
        """Assina mudanças de um documento."""

"""Camada de infraestrutura: adapters para serviços externos.

Este módulo exporta:

- Document store: InMemoryDocumentStore, create_document_store
- Pareamento: InMemoryPairingSessionStore

O adapter Firestore (`document_store_firestore`) é importado sob demanda
para não exigir credenciais GCP em dev/testes.

Conforme regras do projeto:
- Infraestrutura não decide regra de negócio
- Logs estruturados sem conteúdo de conversas
"""

from imobi_ai.infra.document_store import create_document_store
from imobi_ai.infra.document_store_memory import InMemoryDocumentStore
from imobi_ai.infra.pairing_session_store_memory import InMemoryPairingSessionStore

__all__ = [
    "InMemoryDocumentStore",
    "InMemoryPairingSessionStore",
    "create_document_store",
]

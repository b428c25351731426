"""Erros de domínio do imobi_ai."""

from __future__ import annotations


class PairingSessionNotFoundError(LookupError):
    """Sessão de pareamento inexistente no store em memória."""

    def __init__(self, session_id: str) -> None:
        super().__init__("Session not found")
        self.session_id = session_id


class ConnectionLimitError(Exception):
    """Dono já atingiu o limite de conexões WhatsApp."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"Limite de {limit} conexões atingido.")
        self.limit = limit


class ManualEntryError(ValueError):
    """Campos obrigatórios vazios na adição manual de conexão."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__("Por favor, preencha todos os campos.")
        self.missing = missing


class GenerationConfigError(RuntimeError):
    """Credencial do serviço de geração ausente."""


class GenerationServiceError(Exception):
    """Falha de rede ou resposta inválida do serviço de geração."""


class DocumentStoreError(Exception):
    """Erro ao ler ou gravar no document store."""


class DocumentNotFoundError(DocumentStoreError):
    """Update em documento inexistente."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Documento não encontrado: {path}")
        self.path = path


class InvalidCredentialsError(Exception):
    """Credenciais de login inválidas."""

    def __init__(self) -> None:
        super().__init__("Credenciais inválidas. Tente novamente.")


class PairingApiError(Exception):
    """Falha de transporte ao chamar o endpoint de pareamento."""

"""Configurações da aplicação via variáveis de ambiente.

Todas as configurações são carregadas de env vars (ou arquivo .env em dev).
Nunca hardcode secrets ou valores sensíveis.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

from imobi_ai.observability.logging import get_logger

# -----------------------------------------------------------------------------
# Constantes do fluxo de pareamento WhatsApp (simulado)
# -----------------------------------------------------------------------------
PAIRING_SESSION_TTL_SECONDS: int = 60
MAX_CONNECTIONS_PER_OWNER: int = 10


class Settings(BaseSettings):
    """Configurações lidas do ambiente."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
    )

    # Aplicação
    service_name: str = "imobi_ai"
    version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"

    # OpenAI / IA (geração de resposta, extração de lead, insights)
    openai_api_key: str | None = None  # Chave da API OpenAI
    openai_model: str = "gpt-4o-mini"  # Chat e extração (baixa latência)
    openai_insights_model: str = "gpt-4o"  # Análise de métricas
    openai_timeout_seconds: float = 30.0
    openai_max_retries: int = 2

    # Armazenamento de documentos
    document_store_backend: str = "memory"  # memory | firestore
    firestore_project_id: str | None = None
    firestore_database_id: str = "(default)"
    conversations_collection: str = "conversations"
    messages_subcollection: str = "messages"
    lead_profiles_collection: str = "leadProfiles"
    connections_collection: str = "whatsappConnections"
    pairing_sessions_collection: str = "whatsappConnectionSessions"

    # Pareamento WhatsApp (simulado)
    pairing_session_ttl_seconds: int = PAIRING_SESSION_TTL_SECONDS
    pairing_countdown_interval_seconds: float = 1.0
    pairing_max_auto_reissues: int | None = None  # None = re-emissão sem limite
    pairing_api_base_url: str = "http://localhost:3000"
    max_connections_per_owner: int = MAX_CONNECTIONS_PER_OWNER

    # Orquestrador de resposta
    ai_response_delay_seconds: float = 1.5  # Latência "humana" antes de responder

    # Autenticação (acesso administrativo de desenvolvimento)
    admin_username: str = "admin"
    admin_password: str | None = None
    admin_email: str = "admin@system.local"

    # Observabilidade
    log_format: str = "json"  # json | text
    correlation_id_header: str = "X-Correlation-ID"

    def validate_openai_config(self) -> list[str]:
        """Valida configuração de OpenAI.

        Em staging/production a chave é obrigatória. Em dev a ausência só é
        detectada no momento da chamada (GenerationConfigError).
        """
        errors: list[str] = []
        if (self.is_staging or self.is_production) and not self.openai_api_key:
            errors.append("OPENAI_API_KEY obrigatório em staging/production")
        if self.openai_timeout_seconds <= 0:
            errors.append("OPENAI_TIMEOUT_SECONDS deve ser > 0")
        return errors

    def validate_document_store_config(self) -> list[str]:
        """Valida backend do document store por ambiente.

        Em staging/prod, memory é proibido (estado some a cada deploy).
        """
        errors: list[str] = []
        backend = self.document_store_backend.lower()

        valid_backends = {"memory", "firestore"}
        if backend not in valid_backends:
            errors.append(
                f"DOCUMENT_STORE_BACKEND '{backend}' inválido. Valores válidos: {valid_backends}"
            )

        if backend == "memory" and (self.is_staging or self.is_production):
            errors.append(
                "DOCUMENT_STORE_BACKEND=memory é proibido em staging/production. "
                "Use 'firestore'."
            )

        return errors

    def validate_pairing_config(self) -> list[str]:
        """Valida parâmetros do fluxo de pareamento."""
        errors: list[str] = []
        if self.pairing_session_ttl_seconds <= 0:
            errors.append("PAIRING_SESSION_TTL_SECONDS deve ser > 0")
        if self.pairing_countdown_interval_seconds <= 0:
            errors.append("PAIRING_COUNTDOWN_INTERVAL_SECONDS deve ser > 0")
        if self.pairing_max_auto_reissues is not None and self.pairing_max_auto_reissues < 0:
            errors.append("PAIRING_MAX_AUTO_REISSUES deve ser >= 0")
        if self.max_connections_per_owner < 1:
            errors.append("MAX_CONNECTIONS_PER_OWNER deve ser >= 1")
        if self.ai_response_delay_seconds < 0:
            errors.append("AI_RESPONSE_DELAY_SECONDS deve ser >= 0")
        return errors

    @property
    def is_production(self) -> bool:
        """Retorna True se ambiente é produção."""
        return self.environment.lower() in ("production", "prod")

    @property
    def is_staging(self) -> bool:
        """Retorna True se ambiente é staging."""
        return self.environment.lower() in ("staging", "stage")

    @property
    def is_development(self) -> bool:
        """Retorna True se ambiente é desenvolvimento."""
        return self.environment.lower() in ("development", "dev", "local")

    def model_post_init(self, __context: Any) -> None:
        """Registra o ambiente carregado (sem expor secrets)."""
        logger: logging.Logger = get_logger(__name__)
        logger.debug(
            "Configuração carregada",
            extra={
                "environment": self.environment,
                "document_store_backend": self.document_store_backend,
                "openai_configured": bool(self.openai_api_key),
            },
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Retorna uma instância cacheada de Settings.

    A cache garante que mesmo múltiplas injeções não criam novos objetos.
    """
    return Settings()

"""Fábrica da aplicação FastAPI."""

from __future__ import annotations

from fastapi import FastAPI

from imobi_ai.api.routes import router
from imobi_ai.application.pairing_service import PairingService
from imobi_ai.config.settings import Settings, get_settings
from imobi_ai.infra.pairing_session_store_memory import InMemoryPairingSessionStore
from imobi_ai.observability.logging import configure_logging, get_logger
from imobi_ai.observability.middleware import CorrelationIdMiddleware

logger = get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Cria a aplicação FastAPI."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.service_name, settings.log_format)

    validation_errors: list[str] = []
    validation_errors.extend(settings.validate_openai_config())
    validation_errors.extend(settings.validate_document_store_config())
    validation_errors.extend(settings.validate_pairing_config())

    if validation_errors:
        error_msg = "; ".join(validation_errors)
        raise ValueError(f"Configuração inválida: {error_msg}")

    app = FastAPI(title=settings.service_name, version=settings.version)
    app.add_middleware(CorrelationIdMiddleware, header_name=settings.correlation_id_header)
    app.include_router(router)

    app.state.settings = settings
    # Sessões vivem só no processo; reiniciar descarta todas
    app.state.pairing_session_store = InMemoryPairingSessionStore()
    app.state.pairing_service = PairingService(
        app.state.pairing_session_store,
        ttl_seconds=settings.pairing_session_ttl_seconds,
    )

    logger.info(
        "app_created",
        extra={"environment": settings.environment, "version": settings.version},
    )
    return app


# Instância padrão para uvicorn (`uvicorn imobi_ai.api.app:app`)
app = create_app()

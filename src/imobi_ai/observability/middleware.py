"""Middleware de correlação e log de acesso da API de pareamento."""

from __future__ import annotations

import logging
import re
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# logging.py importa este módulo; get_logger daqui seria import circular
logger = logging.getLogger(__name__)

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# Id vindo do cliente vai direto para os logs
_VALID_CORRELATION_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def get_correlation_id() -> str:
    """Retorna o correlation_id corrente (ou vazio)."""

    return _correlation_id.get()


def resolve_correlation_id(incoming: str | None) -> str:
    """Reaproveita o id recebido se for seguro para log; senão gera um novo."""
    if incoming and _VALID_CORRELATION_ID.match(incoming):
        return incoming
    return uuid.uuid4().hex


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Propaga correlation_id e registra método, rota, status e duração."""

    def __init__(self, app, header_name: str = "X-Correlation-ID") -> None:  # type: ignore[no-untyped-def]
        super().__init__(app)
        self._header_name = header_name.lower()

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        correlation_id = resolve_correlation_id(request.headers.get(self._header_name))
        token = _correlation_id.set(correlation_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            logger.info(
                "request_completed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 1),
                },
            )
        finally:
            _correlation_id.reset(token)

        response.headers[self._header_name] = correlation_id
        return response

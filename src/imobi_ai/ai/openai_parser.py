"""Parsing das respostas JSON da OpenAI para contratos de domínio."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from imobi_ai.domain.errors import GenerationServiceError
from imobi_ai.domain.models import AnalyticsInsights, LeadProfile
from imobi_ai.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)


def _load_json_object(raw: str | None) -> dict[str, Any]:
    """Extrai o objeto JSON da resposta (aceita cercas ```json).

    Resposta vazia equivale a `{}`.
    """
    text = _FENCE_PATTERN.sub("", (raw or "").strip()).strip()
    if not text:
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("openai_json_parse_error", extra={"error": str(e)})
        raise GenerationServiceError("Resposta do modelo não é JSON válido") from e
    if not isinstance(data, dict):
        raise GenerationServiceError("Resposta do modelo não é um objeto JSON")
    return data


def parse_lead_profile_response(raw: str | None) -> LeadProfile:
    """Converte a resposta de extração em LeadProfile."""
    data = _load_json_object(raw)
    try:
        return LeadProfile.model_validate(data)
    except ValidationError as e:
        logger.warning("lead_profile_schema_mismatch", extra={"errors": e.error_count()})
        raise GenerationServiceError("Extração fora do schema de LeadProfile") from e


def parse_insights_response(raw: str | None) -> AnalyticsInsights:
    """Converte a resposta de análise em AnalyticsInsights."""
    data = _load_json_object(raw)
    try:
        return AnalyticsInsights.model_validate(data)
    except ValidationError as e:
        logger.warning("insights_schema_mismatch", extra={"errors": e.error_count()})
        raise GenerationServiceError("Insights fora do schema esperado") from e

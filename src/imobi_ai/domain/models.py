"""Modelos de domínio persistidos no document store.

Os campos são declarados em snake_case e gravados em camelCase (alias),
mantendo o formato dos documentos já existentes nas coleções.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from imobi_ai.domain.enums import (
    ChatRole,
    ConnectionStatus,
    LeadStatus,
    LeadTemperature,
    PairingStatus,
    Sender,
)

DEFAULT_DEVICE_LABEL = "Novo Dispositivo"


class DocumentModel(BaseModel):
    """Base para entidades que vivem em documentos (id = id do documento)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict[str, Any]:
        """Serializa para gravação (sem id, sem campos vazios)."""
        return self.model_dump(by_alias=True, exclude={"id"}, exclude_none=True)

    @classmethod
    def from_document(cls, doc_id: str | None, data: dict[str, Any]) -> Self:
        """Reconstrói a entidade a partir do id e dos dados do documento."""
        payload = dict(data)
        if doc_id is not None and "id" in cls.model_fields:
            payload["id"] = doc_id
        return cls.model_validate(payload)


class PairingSession(DocumentModel):
    """Tentativa de vinculação de dispositivo com validade limitada."""

    id: str
    owner_user_id: str
    status: PairingStatus = PairingStatus.WAITING_QR
    qr_payload: str
    label: str = DEFAULT_DEVICE_LABEL
    created_at: datetime
    expires_at: datetime
    paired_at: datetime | None = None

    def remaining_seconds(self, now: datetime) -> int:
        """Segundos inteiros restantes até expirar (nunca negativo)."""
        delta = (self.expires_at - now).total_seconds()
        return max(0, math.floor(delta))

    @property
    def is_active(self) -> bool:
        """True enquanto a sessão não atingiu estado terminal."""
        return self.status in (PairingStatus.WAITING_QR, PairingStatus.QR_READY)


class Connection(DocumentModel):
    """Número WhatsApp conectado a um dono."""

    id: str | None = None
    owner_user_id: str
    status: ConnectionStatus = ConnectionStatus.CONNECTED
    label: str
    phone_number: str
    connected_at: datetime | None = None


class Conversation(DocumentModel):
    """Conversa com um lead (campos de resumo denormalizados)."""

    id: str | None = None
    contact_name: str
    last_message: str = ""
    timestamp: datetime | None = None
    lead_status: LeadStatus = LeadStatus.NOVO
    lead_temperature: LeadTemperature = LeadTemperature.MORNO
    unread_count: int = 0


class Message(DocumentModel):
    """Mensagem append-only de uma conversa."""

    id: str | None = None
    text: str
    sender: Sender
    timestamp: datetime | None = None


class LeadProfile(DocumentModel):
    """Perfil estruturado do lead, extraído por IA.

    Todos os campos são opcionais. Cada extração sobrescreve o documento
    inteiro (não há merge campo a campo).
    """

    name: str | None = None
    region: str | None = None
    property_type: str | None = None
    bedrooms: str | None = None
    budget_range: str | None = None
    payment_type: str | None = None
    income_estimate: str | None = None
    down_payment: str | None = None
    purchase_timeline: str | None = None
    missing_fields: list[str] = Field(default_factory=list)

    @field_validator(
        "name",
        "region",
        "property_type",
        "bedrooms",
        "budget_range",
        "payment_type",
        "income_estimate",
        "down_payment",
        "purchase_timeline",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        # O LLM às vezes devolve números ("bedrooms": 3) ou string vazia
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("missing_fields", mode="before")
    @classmethod
    def _coerce_missing(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        elif not isinstance(value, (list, tuple)):
            return []
        return [str(item).strip() for item in value if str(item).strip()]

    @property
    def populated_fields(self) -> list[str]:
        """Nomes (snake_case) dos campos preenchidos."""
        data = self.model_dump(exclude={"missing_fields"}, exclude_none=True)
        return list(data)


class UserIdentity(BaseModel):
    """Identidade retornada pelo provedor de autenticação."""

    uid: str
    email: str
    display_name: str | None = None
    role: str | None = None


class Insight(BaseModel):
    """Insight comportamental gerado sobre as métricas."""

    title: str = ""
    description: str = ""


class AnalyticsInsights(BaseModel):
    """Resultado da análise de métricas pelo serviço de geração."""

    insights: list[Insight] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ChatTurn:
    """Uma entrada do histórico enviado ao serviço de geração."""

    role: ChatRole
    text: str

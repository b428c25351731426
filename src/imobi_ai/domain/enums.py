"""Enums de domínio: status de pareamento, conexões e leads."""

from __future__ import annotations

from enum import StrEnum


class PairingStatus(StrEnum):
    """Status persistido de uma sessão de pareamento WhatsApp."""

    WAITING_QR = "waiting_qr"
    QR_READY = "qr_ready"
    PAIRED = "paired"
    EXPIRED = "expired"


class ConnectionStatus(StrEnum):
    """Status de uma conexão WhatsApp materializada."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    EXPIRED = "expired"


class LeadStatus(StrEnum):
    """Etapa do lead no funil de atendimento."""

    NOVO = "Novo"
    QUALIFICANDO = "Qualificando"
    QUALIFICADO = "Qualificado"
    EM_ATENDIMENTO = "Em atendimento"
    FINALIZADO = "Finalizado"


class LeadTemperature(StrEnum):
    """Temperatura (propensão de compra) do lead."""

    FRIO = "Frio"
    MORNO = "Morno"
    QUENTE = "Quente"


class Sender(StrEnum):
    """Autor de uma mensagem da conversa."""

    CLIENT = "client"
    AGENT = "agent"
    AI = "ai"


class ChatRole(StrEnum):
    """Papel no histórico enviado ao serviço de geração."""

    USER = "user"
    MODEL = "model"

"""Configurações centralizadas do imobi_ai.

Este módulo exporta:
- Settings: classe de configuração via variáveis de ambiente
- get_settings: função cacheada para obter instância única
- Constantes do pareamento (TTL da sessão, limite de conexões)

Uso típico:
    from imobi_ai.config import get_settings
"""

from imobi_ai.config.settings import (
    MAX_CONNECTIONS_PER_OWNER,
    PAIRING_SESSION_TTL_SECONDS,
    Settings,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "PAIRING_SESSION_TTL_SECONDS",
    "MAX_CONNECTIONS_PER_OWNER",
]

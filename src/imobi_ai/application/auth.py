"""Login do dashboard.

O provedor de identidade é externo (AuthProvider). Este módulo cuida apenas
do mapeamento do usuário `admin` e do acesso administrativo local, habilitado
somente quando ADMIN_PASSWORD está configurado.
"""

from __future__ import annotations

import logging
from typing import Protocol

from imobi_ai.application.pairing_flow import ADMIN_BYPASS_UID
from imobi_ai.domain.errors import InvalidCredentialsError
from imobi_ai.domain.models import UserIdentity
from imobi_ai.observability.logging import get_logger, short_id

logger: logging.Logger = get_logger(__name__)


class AuthProvider(Protocol):
    """Provedor de autenticação por e-mail e senha."""

    async def sign_in(self, email: str, password: str) -> UserIdentity:
        """Autentica; lança InvalidCredentialsError se recusado."""
        ...

    async def sign_out(self) -> None:
        ...


class StaticAuthProvider:
    """Provedor com contas fixas em memória (dev/testes)."""

    def __init__(self, accounts: dict[str, tuple[str, UserIdentity]] | None = None) -> None:
        self._accounts = dict(accounts or {})

    def register(self, password: str, user: UserIdentity) -> None:
        self._accounts[user.email.lower()] = (password, user)

    async def sign_in(self, email: str, password: str) -> UserIdentity:
        entry = self._accounts.get(email.lower())
        if entry is None or entry[0] != password:
            raise InvalidCredentialsError()
        return entry[1]

    async def sign_out(self) -> None:
        return None


class AuthService:
    """Sessão de login do dashboard."""

    def __init__(
        self,
        provider: AuthProvider,
        *,
        admin_username: str = "admin",
        admin_password: str | None = None,
        admin_email: str = "admin@system.local",
    ) -> None:
        self._provider = provider
        self._admin_username = admin_username.lower()
        self._admin_password = admin_password
        self._admin_email = admin_email
        self.current_user: UserIdentity | None = None

    async def sign_in(self, username: str, password: str) -> UserIdentity:
        """Autentica pelo usuário ou e-mail.

        Raises:
            InvalidCredentialsError: credenciais recusadas pelo provedor
        """
        login = username.strip().lower()

        if login == self._admin_username and self._is_admin_password(password):
            self.current_user = UserIdentity(
                uid=ADMIN_BYPASS_UID,
                email=self._admin_email,
                display_name="Administrador",
                role="super_admin",
            )
            logger.info("admin_login")
            return self.current_user

        email = self._admin_email if login == self._admin_username else username.strip()
        try:
            user = await self._provider.sign_in(email, password)
        except InvalidCredentialsError:
            logger.warning("login_rejected")
            raise

        self.current_user = user
        logger.info("login_succeeded", extra={"uid": short_id(user.uid)})
        return user

    async def sign_out(self) -> None:
        if self.current_user is not None and self.current_user.uid != ADMIN_BYPASS_UID:
            await self._provider.sign_out()
        self.current_user = None

    def _is_admin_password(self, password: str) -> bool:
        return bool(self._admin_password) and password == self._admin_password

"""Agendamento de tarefas assíncronas canceláveis."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from imobi_ai.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


class DebouncedTask:
    """Executa um callback após `delay` segundos, cancelável até disparar.

    Reagendar cancela a execução pendente. Depois que o atraso termina o
    callback segue até o fim, mesmo que `cancel()` seja chamado.
    """

    def __init__(self, delay: float, callback: Callable[[], Awaitable[object]]) -> None:
        self._delay = delay
        self._callback = callback
        self._pending: asyncio.Task[None] | None = None
        self._last: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def schedule(self) -> None:
        self.cancel()
        self._pending = asyncio.create_task(self._run())
        self._last = self._pending

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def wait(self) -> None:
        """Aguarda a última execução agendada (cancelada conta como concluída)."""
        if self._last is None:
            return
        with contextlib.suppress(asyncio.CancelledError):
            await self._last

    async def _run(self) -> None:
        await asyncio.sleep(self._delay)
        self._pending = None
        try:
            await self._callback()
        except Exception as e:
            # Ninguém aguarda a task; sem isto o erro só aparece no GC
            logger.exception("debounced_callback_error", extra={"error_type": type(e).__name__})


class PeriodicTicker:
    """Chama `callback` a cada `interval` segundos até ser parado.

    O laço também termina quando `should_continue()` retorna False.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], Awaitable[object]],
        should_continue: Callable[[], bool] = lambda: True,
    ) -> None:
        self._interval = interval
        self._callback = callback
        self._should_continue = should_continue
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            if not self._should_continue():
                logger.debug("ticker_stopped")
                return
            await self._callback()

"""Graceful shutdown for the canvas sync server."""

import asyncio
import logging
import signal
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Closable(Protocol):
    async def close(self, code: int = 1000, reason: str | None = None) -> None: ...


@dataclass
class ShutdownManager:
    """Coordinates graceful shutdown.

    Handles:
    - Signal registration (SIGTERM, SIGINT) outside dev mode
    - Rejecting new connections once shutdown starts
    - Closing live WebSocket connections with code 1001
    - Cleanup callbacks
    """

    drain_timeout: float = 5.0  # Max time for WebSocket drain

    _shutdown_event: asyncio.Event = field(default_factory=asyncio.Event)
    _connections: set[Closable] = field(default_factory=set)
    _cleanup_callbacks: list[Callable[[], Coroutine[Any, Any, None]]] = field(default_factory=list)
    _signal_task: asyncio.Task[None] | None = field(default=None)

    def reset(self) -> None:
        """Return to the running state. Called at startup so the singleton survives restarts."""
        self._shutdown_event.clear()
        self._connections.clear()
        self._cleanup_callbacks.clear()

    def register_connection(self, conn: Closable) -> None:
        self._connections.add(conn)

    def unregister_connection(self, conn: Closable) -> None:
        self._connections.discard(conn)

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def add_cleanup_callback(self, callback: Callable[[], Coroutine[Any, Any, None]]) -> None:
        self._cleanup_callbacks.append(callback)

    @property
    def is_shutting_down(self) -> bool:
        return self._shutdown_event.is_set()

    def install_signal_handlers(self) -> None:
        """Install SIGTERM and SIGINT handlers."""
        loop = asyncio.get_running_loop()

        def make_handler(sig: signal.Signals) -> Callable[[], None]:
            def handler() -> None:
                self._signal_task = asyncio.create_task(self._handle_signal(sig))

            return handler

        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, make_handler(sig))
        logger.info("Signal handlers installed for SIGTERM and SIGINT")

    async def _handle_signal(self, sig: signal.Signals) -> None:
        """Only flags shutdown; uvicorn exits the lifespan, which calls shutdown()."""
        logger.info(f"Received signal {sig.name}, initiating graceful shutdown")
        self._shutdown_event.set()

    async def drain_connections(self) -> None:
        """Close every registered WebSocket connection."""
        connections_to_close = list(self._connections)
        if not connections_to_close:
            logger.info("No WebSocket connections to drain")
            return

        logger.info(f"Draining {len(connections_to_close)} WebSocket connection(s)")
        try:
            await asyncio.wait_for(
                asyncio.gather(
                    *(self._close_connection(conn) for conn in connections_to_close),
                    return_exceptions=True,
                ),
                timeout=self.drain_timeout,
            )
            logger.info("All WebSocket connections closed")
        except TimeoutError:
            logger.warning(f"WebSocket drain timed out after {self.drain_timeout}s")

    async def _close_connection(self, conn: Closable) -> None:
        try:
            await conn.close(code=1001, reason="Server shutting down")
        except Exception as e:
            logger.debug(f"Error closing WebSocket: {e}")
        finally:
            self.unregister_connection(conn)

    async def run_cleanup_callbacks(self) -> None:
        if not self._cleanup_callbacks:
            return

        logger.info(f"Running {len(self._cleanup_callbacks)} cleanup callback(s)")
        for callback in self._cleanup_callbacks:
            try:
                await callback()
            except Exception as e:
                logger.error(f"Cleanup callback failed: {e}")

    async def shutdown(self) -> None:
        """Flag shutdown, drain connections, then run cleanup callbacks."""
        logger.info("=== Graceful shutdown started ===")
        self._shutdown_event.set()
        await self.drain_connections()
        await self.run_cleanup_callbacks()
        logger.info("=== Graceful shutdown completed ===")


# Singleton instance
shutdown_manager = ShutdownManager()

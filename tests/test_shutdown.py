"""Tests for graceful shutdown."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from canvas_sync.shutdown import ShutdownManager


def make_conn() -> MagicMock:
    conn = MagicMock()
    conn.close = AsyncMock()
    return conn


class TestShutdownManager:
    @pytest.mark.asyncio
    async def test_shutdown_closes_connections_with_going_away(self) -> None:
        manager = ShutdownManager()
        conn = make_conn()
        manager.register_connection(conn)

        await manager.shutdown()

        conn.close.assert_awaited_once_with(code=1001, reason="Server shutting down")
        assert manager.connection_count == 0
        assert manager.is_shutting_down

    @pytest.mark.asyncio
    async def test_close_failure_does_not_stop_drain(self) -> None:
        manager = ShutdownManager()
        bad, good = make_conn(), make_conn()
        bad.close.side_effect = RuntimeError("already closed")
        manager.register_connection(bad)
        manager.register_connection(good)

        await manager.drain_connections()

        good.close.assert_awaited_once()
        assert manager.connection_count == 0

    @pytest.mark.asyncio
    async def test_drain_timeout(self) -> None:
        manager = ShutdownManager(drain_timeout=0.01)
        conn = MagicMock()

        async def hang(**_kwargs: object) -> None:
            await asyncio.sleep(1)

        conn.close = hang
        manager.register_connection(conn)

        await manager.drain_connections()  # Returns instead of hanging

    @pytest.mark.asyncio
    async def test_cleanup_callbacks_run_after_failures(self) -> None:
        manager = ShutdownManager()
        failing = AsyncMock(side_effect=RuntimeError("boom"))
        ok = AsyncMock()
        manager.add_cleanup_callback(failing)
        manager.add_cleanup_callback(ok)

        await manager.shutdown()

        failing.assert_awaited_once()
        ok.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reset_returns_to_running(self) -> None:
        manager = ShutdownManager()
        manager.register_connection(make_conn())
        manager.add_cleanup_callback(AsyncMock())
        await manager.shutdown()

        manager.reset()

        assert not manager.is_shutting_down
        assert manager.connection_count == 0

    def test_unregister_unknown_is_noop(self) -> None:
        manager = ShutdownManager()
        manager.unregister_connection(make_conn())
        assert manager.connection_count == 0

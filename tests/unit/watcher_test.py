"""Tests for the watchfiles watcher adapter."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from watchfiles import Change

from saga_locations.watcher.watchfiles_adapter import SourceFilter, SourceWatcher


class TestSourceFilter:
    def test_accepts_added_and_modified_sources(self) -> None:
        source_filter = SourceFilter()
        assert source_filter(Change.added, "/project/src/saga.js") is True
        assert source_filter(Change.modified, "/project/src/root.tsx") is True

    def test_rejects_deleted_files(self) -> None:
        assert SourceFilter()(Change.deleted, "/project/src/saga.js") is False

    def test_rejects_unsupported_files(self) -> None:
        source_filter = SourceFilter()
        assert source_filter(Change.modified, "/project/src/saga.js.map") is False
        assert source_filter(Change.modified, "/project/README.md") is False

    def test_rejects_node_modules(self) -> None:
        assert SourceFilter()(Change.modified, "/project/node_modules/redux-saga/index.js") is False

    def test_rejects_ignored_paths(self, tmp_path: Path) -> None:
        out_dir = tmp_path / "src" / "build"
        source_filter = SourceFilter(ignore_paths=[out_dir])
        assert source_filter(Change.added, str(out_dir / "saga.js")) is False
        assert source_filter(Change.added, str(tmp_path / "src" / "saga.js")) is True


class TestSourceWatcher:
    @pytest.mark.asyncio
    async def test_start_creates_task(self) -> None:
        watcher = SourceWatcher("/tmp", AsyncMock())

        with patch("saga_locations.watcher.watchfiles_adapter.awatch") as mock_awatch:
            mock_awatch.return_value = _empty_async_iter()
            await watcher.start()
            assert watcher._task is not None
            await watcher.stop()
            assert watcher._task is None

    @pytest.mark.asyncio
    async def test_awatch_receives_source_filter(self, tmp_path: Path) -> None:
        watcher = SourceWatcher(tmp_path, AsyncMock(), ignore_paths=[tmp_path / "build"])

        with patch("saga_locations.watcher.watchfiles_adapter.awatch") as mock_awatch:
            mock_awatch.return_value = _empty_async_iter()
            await watcher.start()
            await asyncio.sleep(0)
            await watcher.stop()

        source_filter = mock_awatch.call_args.kwargs["watch_filter"]
        assert isinstance(source_filter, SourceFilter)
        assert source_filter(Change.added, str(tmp_path / "build" / "saga.js")) is False
        assert source_filter(Change.added, str(tmp_path / "saga.js")) is True

    @pytest.mark.asyncio
    async def test_stop_without_start_is_noop(self) -> None:
        watcher = SourceWatcher("/tmp", AsyncMock())
        await watcher.stop()

    @pytest.mark.asyncio
    async def test_double_start_is_noop(self) -> None:
        watcher = SourceWatcher("/tmp", AsyncMock())

        with patch("saga_locations.watcher.watchfiles_adapter.awatch") as mock_awatch:
            mock_awatch.return_value = _empty_async_iter()
            await watcher.start()
            task1 = watcher._task
            await watcher.start()
            assert watcher._task is task1
            await watcher.stop()

    @pytest.mark.asyncio
    async def test_callback_receives_changed_sources(self) -> None:
        callback = AsyncMock()
        watcher = SourceWatcher("/tmp", callback)

        changes = {(1, "/tmp/saga.js"), (2, "/tmp/readme.md"), (2, "/tmp/root.tsx"), (3, "/tmp/old.js")}

        with patch("saga_locations.watcher.watchfiles_adapter.awatch") as mock_awatch:
            mock_awatch.return_value = _single_change_iter(changes)
            await watcher.start()
            await asyncio.sleep(0.05)
            await watcher.stop()

        callback.assert_called_once()
        paths = callback.call_args[0][0]
        assert paths == {Path("/tmp/saga.js"), Path("/tmp/root.tsx")}

    @pytest.mark.asyncio
    async def test_callback_not_called_for_unsupported_only(self) -> None:
        callback = AsyncMock()
        watcher = SourceWatcher("/tmp", callback)

        changes = {(1, "/tmp/saga.js.map"), (2, "/tmp/Makefile")}

        with patch("saga_locations.watcher.watchfiles_adapter.awatch") as mock_awatch:
            mock_awatch.return_value = _single_change_iter(changes)
            await watcher.start()
            await asyncio.sleep(0.05)
            await watcher.stop()

        callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_callback_errors_do_not_stop_watching(self) -> None:
        callback = AsyncMock(side_effect=RuntimeError("boom"))
        watcher = SourceWatcher("/tmp", callback)

        with patch("saga_locations.watcher.watchfiles_adapter.awatch") as mock_awatch:
            mock_awatch.return_value = _single_change_iter({(2, "/tmp/saga.js")})
            await watcher.start()
            await asyncio.sleep(0.05)
            assert watcher._task is not None
            assert not watcher._task.done()
            await watcher.stop()

        callback.assert_called_once()


async def _empty_async_iter() -> AsyncIterator[Any]:
    """Async iterator that never yields, just blocks until cancelled."""
    try:
        await asyncio.sleep(3600)
    except asyncio.CancelledError:
        return
    yield  # make it an async generator  # pragma: no cover


async def _single_change_iter(changes: set[tuple[int, str]]) -> AsyncIterator[set[tuple[int, str]]]:
    """Async iterator that yields one set of changes then blocks."""
    yield changes
    try:
        await asyncio.sleep(3600)
    except asyncio.CancelledError:
        return

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Coroutine, Sequence
from pathlib import Path
from typing import Any

from watchfiles import Change, DefaultFilter, awatch

from saga_locations.core.languages import is_supported_path

logger = logging.getLogger(__name__)


class SourceFilter(DefaultFilter):
    """Accept added or modified JavaScript/TypeScript files.

    On top of watchfiles' defaults (``node_modules``, ``.git``, ...) anything
    below ``ignore_paths`` is dropped, which keeps an output directory nested in
    the watched tree from feeding its own results back in.
    """

    def __init__(self, ignore_paths: Sequence[str | Path] = ()) -> None:
        super().__init__(ignore_paths=[Path(p).resolve() for p in ignore_paths])

    def __call__(self, change: Change, path: str) -> bool:
        if change == Change.deleted or not is_supported_path(Path(path)):
            return False
        return super().__call__(change, str(Path(path).resolve()))


class SourceWatcher:
    """Watch a directory for source changes and hand the changed paths to a callback."""

    def __init__(
        self,
        directory: str | Path,
        on_change: Callable[[set[Path]], Coroutine[Any, Any, None]],
        ignore_paths: Sequence[str | Path] = (),
    ) -> None:
        self._directory = Path(directory)
        self._on_change = on_change
        self._filter = SourceFilter(ignore_paths)
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._watch())
        logger.info("Watching %s", self._directory)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Stopped watching %s", self._directory)

    async def wait(self) -> None:
        if self._task is not None:
            await self._task

    async def _watch(self) -> None:
        async for changes in awatch(self._directory, watch_filter=self._filter):
            paths = {Path(p) for change, p in changes if self._filter(change, p)}
            if not paths:
                continue
            logger.info("Re-annotating %d changed file(s)", len(paths))
            try:
                await self._on_change(paths)
            except Exception:
                logger.exception("Error while re-annotating changed files")

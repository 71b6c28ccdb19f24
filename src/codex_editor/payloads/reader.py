"""
Background file reads.

Dropped files are read as asyncio tasks; each completion calls back into the
editor once. When no event loop is running the read happens inline.
"""

import asyncio
import logging
from typing import Callable, Optional, Set

from .transfer import FileBlob

logger = logging.getLogger(__name__)


class BackgroundReader:
    """Reads file blobs as ``data:`` URLs and hands each result to a callback."""

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()
        self.completed = 0
        self.failed = 0

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def read(self, blob: FileBlob, on_load: Callable[[str], None]) -> Optional[asyncio.Task]:
        """
        Start reading ``blob``; ``on_load`` receives the data URL when done.

        Returns the task, or None when the read completed inline.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is None:
            asyncio.run(self._read(blob, on_load))
            return None

        task = loop.create_task(self._read(blob, on_load))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _read(self, blob: FileBlob, on_load: Callable[[str], None]) -> None:
        try:
            url = await blob.read_data_url()
        except OSError as e:
            self.failed += 1
            logger.error(f"Failed to read {blob.name}: {e}")
            return

        self.completed += 1
        logger.debug(f"Read {blob.name} ({blob.type})")
        on_load(url)

    async def wait_all(self) -> None:
        """Wait until every started read has delivered its result."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

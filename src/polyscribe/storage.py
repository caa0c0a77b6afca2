"""Reading audio files from disk."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class FileStorage:
    """Reads audio files without blocking the event loop.

    Errors (missing file, permissions) propagate to the caller.
    """

    async def read_binary(self, path: Path) -> bytes:
        data = await asyncio.to_thread(Path(path).read_bytes)
        logger.debug("Read %d bytes from %s", len(data), path)
        return data

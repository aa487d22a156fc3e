"""Read access to images stored beneath the configured images root."""

from __future__ import annotations

import logging
from pathlib import Path

from starlette.concurrency import run_in_threadpool

from ..errors import SourceUnreadable

LOGGER = logging.getLogger(__name__)


class LocalImageStore:
    def __init__(self, root: Path):
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, name: str) -> Path:
        """Return the absolute path for ``name``, refusing anything outside the root."""

        try:
            candidate = (self._root / name).resolve()
        except (OSError, ValueError) as exc:
            raise SourceUnreadable() from exc
        if candidate == self._root or not candidate.is_relative_to(self._root):
            LOGGER.warning("Refusing image name outside images root: %r", name)
            raise SourceUnreadable()
        return candidate

    async def read(self, name: str) -> bytes:
        path = self.resolve(name)
        try:
            return await run_in_threadpool(path.read_bytes)
        except OSError as exc:
            LOGGER.info("Unable to read local image %s: %s", path, exc)
            raise SourceUnreadable() from exc

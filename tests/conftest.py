"""Shared fixtures for the rasterwire test-suite."""

from __future__ import annotations

import io
from pathlib import Path
from typing import AsyncIterator, Callable, Iterable, List

import httpx
import pytest
from PIL import Image

from rasterwire.services.converter import ConversionService
from rasterwire.services.fetcher import BoundedFetcher
from rasterwire.services.local_store import LocalImageStore

RED = (255, 0, 0)
CORNERS = {
    (0, 0): (255, 0, 0),
    (1, 0): (0, 255, 0),
    (0, 1): (0, 0, 255),
    (1, 1): (255, 255, 0),
}


def png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def solid_png(size=(4, 4), color=RED, mode="RGB") -> bytes:
    if mode == "RGBA":
        color = (*color, 128)
    return png_bytes(Image.new(mode, size, color))


def corners_png() -> bytes:
    image = Image.new("RGB", (2, 2))
    for xy, color in CORNERS.items():
        image.putpixel(xy, color)
    return png_bytes(image)


class ChunkStream(httpx.AsyncByteStream):
    """Async body that records how many chunks the client pulled."""

    def __init__(self, chunks: Iterable[bytes]):
        self._chunks = list(chunks)
        self.pulled: List[bytes] = []

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            self.pulled.append(chunk)
            yield chunk


@pytest.fixture
def images_root(tmp_path: Path) -> Path:
    root = tmp_path / "images"
    root.mkdir()
    (root / "red.png").write_bytes(solid_png())
    (root / "corners.png").write_bytes(corners_png())
    (root / "notes.txt").write_text("definitely not an image", encoding="utf-8")
    (tmp_path / "secret.png").write_bytes(solid_png())
    return root


@pytest.fixture
def make_service(images_root: Path) -> Callable[..., ConversionService]:
    """Build a service whose remote fetches are answered by ``handler``."""

    def _make(handler=None, max_bytes: int = 16 * 1024 * 1024, **kwargs) -> ConversionService:
        if handler is None:
            handler = lambda request: httpx.Response(404)  # noqa: E731
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return ConversionService(
            store=LocalImageStore(images_root),
            fetcher=BoundedFetcher(client, max_bytes=max_bytes),
            **kwargs,
        )

    return _make

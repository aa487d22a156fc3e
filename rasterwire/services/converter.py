"""Conversion service: obtain image bytes, decode them and encode the wire payload."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import unquote, urlparse

from pydantic import ValidationError

from ..config import DEFAULT_DIMENSION
from ..errors import InvalidDimensions, InvalidSource
from ..schemas import ImageSource, LocalSource, RemoteSource, TargetDimensions
from ..utils.image import decode_image, encode_raster
from .fetcher import BoundedFetcher
from .local_store import LocalImageStore

LOGGER = logging.getLogger(__name__)

_ALLOWED_SCHEMES = {"http", "https"}


def decode_remote_url(url_percent_encoded: str) -> str:
    """Percent-decode a URL and check that it is an absolute http(s) URL."""

    try:
        url = unquote(url_percent_encoded, encoding="utf-8", errors="strict")
        parsed = urlparse(url)
    except (UnicodeDecodeError, ValueError) as exc:
        raise InvalidSource() from exc

    if parsed.scheme.lower() not in _ALLOWED_SCHEMES or not parsed.netloc:
        raise InvalidSource()
    return url


class ConversionService:
    """Stateless pipeline turning an ``ImageSource`` into a wire payload.

    Every failure surfaces as a single ``ConversionError``; nothing is retried
    and no partial payload is ever produced.
    """

    def __init__(
        self,
        store: LocalImageStore,
        fetcher: BoundedFetcher,
        *,
        max_dimension: Optional[int] = None,
        default_width: int = DEFAULT_DIMENSION,
        default_height: int = DEFAULT_DIMENSION,
    ):
        self._store = store
        self._fetcher = fetcher
        self._max_dimension = max_dimension
        self._default_width = default_width
        self._default_height = default_height

    @property
    def store(self) -> LocalImageStore:
        return self._store

    def dimensions(self, width: Optional[int] = None, height: Optional[int] = None) -> TargetDimensions:
        """Build target dimensions, filling omitted values with the defaults."""

        try:
            dims = TargetDimensions(
                width=self._default_width if width is None else width,
                height=self._default_height if height is None else height,
            )
        except ValidationError as exc:
            raise InvalidDimensions(f"Invalid dimensions {width}x{height}") from exc

        if self._max_dimension is not None and max(dims.width, dims.height) > self._max_dimension:
            raise InvalidDimensions()
        return dims

    async def _obtain(self, source: ImageSource) -> bytes:
        if isinstance(source, LocalSource):
            return await self._store.read(source.identifier)
        if isinstance(source, RemoteSource):
            return await self._fetcher.fetch(source.url)
        raise TypeError(f"Unsupported image source: {source!r}")

    async def convert(self, source: ImageSource, dims: TargetDimensions) -> bytes:
        """Run the full pipeline for ``source`` at ``dims``."""

        data = await self._obtain(source)
        raster = decode_image(data)
        LOGGER.debug(
            "Decoded %s: %dx%d -> %dx%d",
            source,
            raster.width,
            raster.height,
            dims.width,
            dims.height,
        )
        return encode_raster(raster, dims.width, dims.height)

    async def get_local_image(
        self, name: str, width: Optional[int] = None, height: Optional[int] = None
    ) -> bytes:
        dims = self.dimensions(width, height)
        return await self.convert(LocalSource(name), dims)

    async def get_remote_image(
        self, url_percent_encoded: str, width: Optional[int] = None, height: Optional[int] = None
    ) -> bytes:
        dims = self.dimensions(width, height)
        url = decode_remote_url(url_percent_encoded)
        return await self.convert(RemoteSource(url), dims)

"""Bounded remote fetcher used for the remote image path."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..config import MAX_DOWNLOAD_BYTES
from ..errors import InvalidSource, SourceTooLarge, UpstreamTimeout, UpstreamTransportError

LOGGER = logging.getLogger(__name__)


def _parse_length(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        length = int(value)
    except ValueError:
        return None
    return length if length >= 0 else None


class BoundedFetcher:
    """Streams a remote response body into memory under a hard byte cap.

    A declared ``Content-Length`` above the cap is rejected before the body is
    touched. A body of unknown length that overruns the cap is truncated to
    exactly ``max_bytes``: the remaining chunks are drained and discarded, and
    the caller receives the truncated prefix.
    """

    def __init__(self, client: httpx.AsyncClient, max_bytes: int = MAX_DOWNLOAD_BYTES):
        self._client = client
        self._max_bytes = max_bytes

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    async def fetch(self, url: str) -> bytes:
        """Download ``url`` and return at most ``max_bytes`` of its body."""

        try:
            async with self._client.stream("GET", url) as response:
                response.raise_for_status()

                declared = _parse_length(response.headers.get("Content-Length"))
                if declared is not None and declared > self._max_bytes:
                    LOGGER.info(
                        "Rejecting %s: declared length %d exceeds cap %d",
                        url,
                        declared,
                        self._max_bytes,
                    )
                    raise SourceTooLarge()

                buffer = bytearray()
                discarded = 0
                async for chunk in response.aiter_bytes():
                    remaining = self._max_bytes - len(buffer)
                    if remaining > 0:
                        buffer += chunk[:remaining]
                        discarded += max(len(chunk) - remaining, 0)
                    else:
                        discarded += len(chunk)
        except httpx.InvalidURL as exc:
            raise InvalidSource() from exc
        except httpx.UnsupportedProtocol as exc:
            raise InvalidSource() from exc
        except httpx.TimeoutException as exc:
            LOGGER.warning("Timed out fetching %s: %s", url, exc)
            raise UpstreamTimeout() from exc
        except httpx.HTTPError as exc:
            raise UpstreamTransportError(exc) from exc

        if discarded:
            LOGGER.warning(
                "Truncated body of %s to %d bytes (%d bytes discarded)",
                url,
                len(buffer),
                discarded,
            )
        LOGGER.debug("Fetched %d bytes from %s", len(buffer), url)
        return bytes(buffer)

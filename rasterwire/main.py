"""FastAPI application exposing the rasterwire image endpoints."""

from __future__ import annotations

import logging
from typing import Annotated, Optional

import httpx
from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response

from .config import settings
from .errors import ConversionError, ErrorCategory, UpstreamTransportError
from .schemas import UINT32_MAX, HealthResponse
from .services.converter import ConversionService
from .services.fetcher import BoundedFetcher
from .services.local_store import LocalImageStore
from .utils.timing import Elapsed, record_elapsed

LOGGER = logging.getLogger(__name__)

PAYLOAD_MEDIA_TYPE = "application/octet-stream"
_REMOTE_PREFIX = b"/custom/"

STATUS_BY_CATEGORY = {
    ErrorCategory.BAD_INPUT: 400,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.TOO_LARGE: 413,
    ErrorCategory.UPSTREAM_TIMEOUT: 504,
    ErrorCategory.INTERNAL: 500,
}

app = FastAPI(
    title="rasterwire",
    version="1.0.0",
    description="Serves local and remote images as fixed-size RGB pixel arrays.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allow_origins),
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


_HTTP_CLIENT: httpx.AsyncClient | None = None
_CONVERTER: ConversionService | None = None


def get_converter() -> ConversionService:
    global _HTTP_CLIENT, _CONVERTER
    if _CONVERTER is None:
        LOGGER.info("Initialising conversion service with images root %s", settings.images_root)
        _HTTP_CLIENT = httpx.AsyncClient(
            timeout=settings.fetch_timeout_seconds,
            follow_redirects=True,
        )
        _CONVERTER = ConversionService(
            store=LocalImageStore(settings.images_root),
            fetcher=BoundedFetcher(_HTTP_CLIENT, max_bytes=settings.max_download_bytes),
            max_dimension=settings.max_dimension,
            default_width=settings.default_width,
            default_height=settings.default_height,
        )
    return _CONVERTER


Converter = Annotated[ConversionService, Depends(get_converter)]
Width = Annotated[Optional[int], Query(ge=0, le=UINT32_MAX, description="Output width in pixels.")]
Height = Annotated[Optional[int], Query(ge=0, le=UINT32_MAX, description="Output height in pixels.")]


@app.exception_handler(ConversionError)
async def conversion_error_handler(request: Request, exc: ConversionError) -> PlainTextResponse:
    """Render a categorised pipeline failure as a plain-text response."""

    status_code = STATUS_BY_CATEGORY[exc.category]
    if isinstance(exc, UpstreamTransportError):
        LOGGER.error("Internal error while serving %s: %r", request.url.path, exc.cause)
    else:
        LOGGER.info("Rejected %s with %d: %s", request.url.path, status_code, exc.message)
    return PlainTextResponse(exc.message, status_code=status_code)


def _payload_response(payload: bytes, elapsed: Elapsed) -> Response:
    return Response(
        content=payload,
        media_type=PAYLOAD_MEDIA_TYPE,
        headers={"X-Conversion-Ms": elapsed.header_value()},
    )


def _raw_remote_segment(request: Request, fallback: str) -> str:
    """Return the still percent-encoded URL segment of a ``/custom/`` request."""

    raw_path = request.scope.get("raw_path")
    if not raw_path:
        return fallback
    raw_path = raw_path.split(b"?", 1)[0]
    if not raw_path.startswith(_REMOTE_PREFIX):
        return fallback
    return raw_path[len(_REMOTE_PREFIX):].decode("latin-1")


@app.get("/health", response_model=HealthResponse, tags=["Operations"])
def health_check(converter: Converter) -> HealthResponse:
    """Expose service readiness information."""

    return HealthResponse(status="ok", images_root_available=converter.store.root.is_dir())


@app.get("/image/{name}", response_class=Response, tags=["Images"])
async def local_image(name: str, converter: Converter, width: Width = None, height: Height = None) -> Response:
    """Encode an image stored beneath the images root."""

    with record_elapsed() as elapsed:
        payload = await converter.get_local_image(name, width, height)
    LOGGER.info("Served local image %s (%d bytes) in %.1f ms", name, len(payload), elapsed.ms)
    return _payload_response(payload, elapsed)


@app.get("/custom/{url:path}", response_class=Response, tags=["Images"])
async def remote_image(
    url: str, request: Request, converter: Converter, width: Width = None, height: Height = None
) -> Response:
    """Fetch an image from a percent-encoded remote URL and encode it."""

    encoded_url = _raw_remote_segment(request, url)
    with record_elapsed() as elapsed:
        payload = await converter.get_remote_image(encoded_url, width, height)
    LOGGER.info("Served remote image (%d bytes) in %.1f ms", len(payload), elapsed.ms)
    return _payload_response(payload, elapsed)


@app.on_event("startup")
def check_images_root() -> None:
    """Warn early when the images root is missing."""

    converter = get_converter()
    if not converter.store.root.is_dir():
        LOGGER.warning("Images root %s does not exist; local images will not resolve", converter.store.root)


@app.on_event("shutdown")
async def close_http_client() -> None:
    global _HTTP_CLIENT, _CONVERTER
    if _HTTP_CLIENT is not None:
        await _HTTP_CLIENT.aclose()
    _HTTP_CLIENT = None
    _CONVERTER = None

"""Pydantic schemas and value types shared across the rasterwire service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

from .config import DEFAULT_DIMENSION

UINT32_MAX = 2**32 - 1


@dataclass(frozen=True)
class LocalSource:
    """An image name resolved beneath the images root."""

    identifier: str


@dataclass(frozen=True)
class RemoteSource:
    """A percent-decoded absolute http(s) URL."""

    url: str


ImageSource = Union[LocalSource, RemoteSource]


class TargetDimensions(BaseModel):
    """Requested output resolution; aspect ratio is not preserved."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(DEFAULT_DIMENSION, ge=0, le=UINT32_MAX, description="Output width in pixels.")
    height: int = Field(DEFAULT_DIMENSION, ge=0, le=UINT32_MAX, description="Output height in pixels.")


class HealthResponse(BaseModel):
    """Simple health response for uptime checks."""

    status: str = Field(..., description="Overall service status indicator.")
    images_root_available: bool = Field(
        ..., description="Whether the configured images root exists and is a directory."
    )

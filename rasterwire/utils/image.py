"""Helpers for decoding images and serialising them to the wire pixel format.

The wire format is an ASCII ``"{width}x{height};"`` header followed by
``width * height * 3`` bytes of row-major RGB data.
"""

from __future__ import annotations

import io
from dataclasses import dataclass

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..errors import SourceUndecodable

_DECODE_ERRORS = (
    UnidentifiedImageError,
    Image.DecompressionBombError,
    OSError,
    ValueError,
    SyntaxError,
)


@dataclass(frozen=True)
class RasterImage:
    """Decoded 8-bit RGB pixel grid of shape ``(height, width, 3)``."""

    pixels: np.ndarray

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


def decode_image(data: bytes) -> RasterImage:
    """Decode raw image bytes into an RGB raster.

    Alpha and any extra channels are dropped. Raises ``SourceUndecodable``
    when Pillow cannot parse the data or the image has no pixels.
    """

    try:
        with Image.open(io.BytesIO(data)) as img:
            if img.mode != "RGB":
                img = img.convert("RGB")
            array = np.asarray(img, dtype=np.uint8)
    except _DECODE_ERRORS as exc:
        raise SourceUndecodable() from exc

    if array.ndim != 3 or array.shape[0] == 0 or array.shape[1] == 0:
        raise SourceUndecodable()
    return RasterImage(pixels=array)


def _nearest_indices(source: int, target: int) -> np.ndarray:
    # Centre of destination pixel i maps to floor((i + 0.5) * source / target).
    steps = np.arange(target, dtype=np.int64)
    return ((2 * steps + 1) * source) // (2 * target)


def resize_nearest(raster: RasterImage, width: int, height: int) -> np.ndarray:
    """Resize to exactly ``(width, height)`` by nearest-neighbour sampling."""

    if width < 0 or height < 0:
        raise ValueError(f"Target dimensions must be non-negative, got {width}x{height}")

    rows = _nearest_indices(raster.height, height)
    cols = _nearest_indices(raster.width, width)
    return raster.pixels[rows[:, np.newaxis], cols[np.newaxis, :], :3]


def encode_raster(raster: RasterImage, width: int, height: int) -> bytes:
    """Serialise ``raster`` resized to ``width`` x ``height`` in the wire format."""

    resized = resize_nearest(raster, width, height)
    header = f"{width}x{height};".encode("ascii")
    return header + np.ascontiguousarray(resized, dtype=np.uint8).tobytes()

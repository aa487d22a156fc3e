"""Tests for raster decoding, nearest-neighbour resampling and wire encoding."""

import io

import numpy as np
import pytest
from PIL import Image

from rasterwire.errors import SourceUndecodable
from rasterwire.utils.image import RasterImage, decode_image, encode_raster, resize_nearest

from conftest import CORNERS, corners_png, png_bytes, solid_png


def _raster(width, height, fill=(10, 20, 30)):
    pixels = np.empty((height, width, 3), dtype=np.uint8)
    pixels[:, :] = fill
    return RasterImage(pixels=pixels)


class TestDecodeImage:

    def test_decodes_png_dimensions(self):
        raster = decode_image(solid_png(size=(5, 3)))

        assert (raster.width, raster.height) == (5, 3)
        assert raster.pixels.dtype == np.uint8
        assert raster.pixels.shape == (3, 5, 3)

    def test_drops_alpha_channel(self):
        raster = decode_image(solid_png(mode="RGBA"))

        assert raster.pixels.shape[2] == 3
        assert tuple(raster.pixels[0, 0]) == (255, 0, 0)

    def test_palette_image_is_converted_to_rgb(self):
        image = Image.new("RGB", (3, 3), (0, 128, 255)).convert("P", palette=Image.Palette.ADAPTIVE)
        raster = decode_image(png_bytes(image))

        assert tuple(raster.pixels[1, 1]) == (0, 128, 255)

    def test_decodes_other_formats(self):
        for fmt in ("JPEG", "GIF", "BMP"):
            buffer = io.BytesIO()
            Image.new("RGB", (6, 4), (200, 200, 200)).save(buffer, format=fmt)
            raster = decode_image(buffer.getvalue())
            assert (raster.width, raster.height) == (6, 4)

    def test_garbage_is_undecodable(self):
        with pytest.raises(SourceUndecodable):
            decode_image(b"definitely not an image")

    def test_empty_buffer_is_undecodable(self):
        with pytest.raises(SourceUndecodable):
            decode_image(b"")

    def test_truncated_png_is_undecodable(self):
        data = solid_png(size=(64, 64))

        with pytest.raises(SourceUndecodable):
            decode_image(data[: len(data) // 2])


class TestResizeNearest:

    def test_two_by_two_to_one_by_one_picks_bottom_right(self):
        raster = decode_image(corners_png())

        resized = resize_nearest(raster, 1, 1)

        assert tuple(resized[0, 0]) == CORNERS[(1, 1)]

    def test_identity_resize_keeps_pixels(self):
        raster = decode_image(corners_png())

        resized = resize_nearest(raster, 2, 2)

        assert np.array_equal(resized, raster.pixels)

    def test_upscale_repeats_source_pixels(self):
        raster = decode_image(corners_png())

        resized = resize_nearest(raster, 4, 4)

        assert tuple(resized[0, 0]) == CORNERS[(0, 0)]
        assert tuple(resized[0, 3]) == CORNERS[(1, 0)]
        assert tuple(resized[3, 0]) == CORNERS[(0, 1)]
        assert tuple(resized[3, 3]) == CORNERS[(1, 1)]

    def test_aspect_ratio_is_not_preserved(self):
        resized = resize_nearest(_raster(10, 10), 7, 2)

        assert resized.shape == (2, 7, 3)

    def test_negative_dimensions_are_rejected(self):
        with pytest.raises(ValueError):
            resize_nearest(_raster(2, 2), -1, 2)


class TestEncodeRaster:

    @pytest.mark.parametrize("width,height", [(0, 0), (0, 5), (5, 0), (1, 1), (3, 7), (512, 512)])
    def test_payload_length(self, width, height):
        payload = encode_raster(_raster(4, 3), width, height)

        header = f"{width}x{height};".encode("ascii")
        assert payload.startswith(header)
        assert len(payload) == len(header) + width * height * 3

    def test_zero_dimension_has_no_pixel_bytes(self):
        assert encode_raster(_raster(4, 4), 0, 9) == b"0x9;"

    def test_solid_red_four_by_four_to_two_by_two(self):
        raster = decode_image(solid_png(size=(4, 4)))

        assert encode_raster(raster, 2, 2) == b"2x2;" + bytes([255, 0, 0]) * 4

    def test_pixels_are_row_major_rgb(self):
        raster = decode_image(corners_png())

        payload = encode_raster(raster, 2, 2)

        expected = b"".join(bytes(CORNERS[xy]) for xy in [(0, 0), (1, 0), (0, 1), (1, 1)])
        assert payload == b"2x2;" + expected

    def test_encoding_is_deterministic(self):
        raster = decode_image(corners_png())

        assert encode_raster(raster, 5, 3) == encode_raster(raster, 5, 3)

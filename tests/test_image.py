"""Tests for image buffers, loading and downsampling."""

import io

import numpy as np
import pytest
from PIL import Image

from dominantcolors.core.errors import InvalidImage, UnsupportedFormat
from dominantcolors.core.options import Quality
from dominantcolors.image.buffer import ImageBuffer, as_image_buffer
from dominantcolors.image.downsampler import Downsampler, fit_to_budget, target_size
from dominantcolors.image.processor import ImageProcessor


class TestImageBuffer:
    """Test buffer construction and validation."""

    def test_from_rgb_array(self):
        pixels = np.zeros((2, 3, 3), dtype=np.uint8)
        pixels[1, 2] = (10, 20, 30)

        buffer = ImageBuffer.from_array(pixels)

        assert buffer.size == (3, 2)
        assert not buffer.has_alpha
        assert buffer.pixel(2, 1) == (10, 20, 30)
        assert buffer.pixels_per_unit == 72.0

    def test_float_array_is_scaled(self):
        buffer = ImageBuffer.from_array(np.full((1, 1, 3), 1.0))
        assert buffer.pixel(0, 0) == (255, 255, 255)

    @pytest.mark.parametrize(
        "array",
        [None, np.zeros((0, 4, 3), dtype=np.uint8), np.zeros((4, 0, 4), dtype=np.uint8)],
    )
    def test_missing_or_empty_image_is_invalid(self, array):
        with pytest.raises(InvalidImage):
            ImageBuffer.from_array(array)

    @pytest.mark.parametrize(
        "array",
        [
            np.zeros((4, 4), dtype=np.uint8),
            np.zeros((4, 4, 2), dtype=np.uint8),
            np.full((2, 2, 3), 300, dtype=np.int32),
            np.array([[["a", "b", "c"]]]),
        ],
    )
    def test_non_rgb_data_is_unsupported(self, array):
        with pytest.raises(UnsupportedFormat):
            ImageBuffer.from_array(array)

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            ImageBuffer.from_array(None)

    def test_from_pil_converts_grayscale(self):
        image = Image.new("L", (4, 2), color=128)

        buffer = as_image_buffer(image)

        assert buffer.pixels.shape == (2, 4, 3)
        assert buffer.pixel(0, 0) == (128, 128, 128)

    def test_from_pil_keeps_alpha(self):
        image = Image.new("RGBA", (2, 2), color=(255, 0, 0, 0))
        assert as_image_buffer(image).has_alpha


class TestTargetSize:
    """Test the quality pixel budgets."""

    def test_small_image_is_untouched(self):
        assert target_size(100, 100, Quality.FAIR) == (100, 100)

    def test_best_keeps_native_resolution(self):
        assert target_size(5000, 5000, Quality.BEST) == (5000, 5000)

    @pytest.mark.parametrize(
        "width, height, quality, expected",
        [
            (100, 100, Quality.FAST, (31, 31)),
            (200, 50, Quality.FAST, (63, 15)),
            (1000, 500, Quality.FAIR, (141, 70)),
            (4000, 3000, Quality.HIGH, (365, 273)),
        ],
    )
    def test_preserves_aspect_ratio_within_budget(self, width, height, quality, expected):
        new_width, new_height = target_size(width, height, quality)

        assert (new_width, new_height) == expected
        assert new_width * new_height <= quality.pixel_budget

    def test_extreme_aspect_ratio_stays_within_budget(self):
        assert fit_to_budget(10000, 1, 1000) == (1000, 1)
        width, height = fit_to_budget(1, 50000, 1000)
        assert width == 1 and height <= 1000


class TestDownsampler:
    """Test area-average downsampling."""

    def setup_method(self):
        """Set up test fixtures."""
        self.downsampler = Downsampler("cpu")

    def test_uniform_image_keeps_its_color(self):
        buffer = ImageBuffer(np.full((200, 200, 3), (200, 30, 90), dtype=np.uint8), 300.0)

        result = self.downsampler.downsample(buffer, Quality.FAST)

        assert result.width * result.height <= Quality.FAST.pixel_budget
        assert np.all(result.pixels == (200, 30, 90))
        assert result.pixels_per_unit == pytest.approx(300.0 * result.width / 200)

    def test_within_budget_returns_same_buffer(self):
        buffer = ImageBuffer(np.zeros((10, 10, 3), dtype=np.uint8))
        assert self.downsampler.downsample(buffer, Quality.FAST) is buffer

    def test_transparent_pixels_do_not_bleed(self):
        """
        Given an image that is half fully transparent green and half opaque red
        When it is downsampled
        Then every visible pixel is pure red
        """
        pixels = np.zeros((100, 100, 4), dtype=np.uint8)
        pixels[:, :50] = (0, 255, 0, 0)
        pixels[:, 50:] = (255, 0, 0, 255)

        result = self.downsampler.downsample(ImageBuffer(pixels), Quality.FAST)

        visible = result.pixels[result.pixels[..., 3] > 0]
        assert len(visible) > 0
        assert np.all(visible[:, :3] == (255, 0, 0))


class TestImageProcessor:
    """Test loading images from files and bytes."""

    def setup_method(self):
        """Set up test fixtures."""
        self.processor = ImageProcessor(device="cpu")

    def test_load_png(self, tmp_path):
        path = tmp_path / "red.png"
        Image.new("RGB", (8, 4), color=(255, 0, 0)).save(path, dpi=(150, 150))

        buffer = self.processor.load_image(path)

        assert buffer.size == (8, 4)
        assert buffer.pixel(3, 3) == (255, 0, 0)
        assert buffer.pixels_per_unit == pytest.approx(150.0, abs=0.5)

    def test_load_with_quality_downsamples(self, tmp_path):
        path = tmp_path / "big.png"
        Image.new("RGB", (100, 100), color=(0, 0, 255)).save(path)

        buffer = self.processor.load_image(path, quality=Quality.FAST)

        assert buffer.size == (31, 31)

    def test_load_bytes(self):
        data = io.BytesIO()
        Image.new("RGBA", (3, 3), color=(1, 2, 3, 255)).save(data, format="PNG")

        buffer = self.processor.load_image_bytes(data.getvalue())

        assert buffer.has_alpha
        assert buffer.pixel(1, 1) == (1, 2, 3, 255)

    def test_non_image_file_is_unsupported(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("not an image")

        with pytest.raises(UnsupportedFormat):
            self.processor.load_image(path)

    def test_image_info(self, tmp_path):
        path = tmp_path / "gray.png"
        Image.new("L", (5, 7)).save(path)

        assert self.processor.image_info(path) == ((5, 7), "L")

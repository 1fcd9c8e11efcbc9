"""
Tests for the color adjuster pipeline
"""

import itertools

import numpy as np

from panowarp.models.color_adjustments import ColorAdjustments
from panowarp.models.image import Image
from panowarp.pipeline.color_adjuster import adjust_gallery, process_image


class TestProcessImage:
    """brightness → contrast → saturation → temperature"""

    def test_brighten_then_neutral_contrast(self, flat_rgb_image):
        out = process_image(flat_rgb_image, brightness=20, contrast=1.0)
        for y in range(4):
            for x in range(4):
                if (x, y) == (2, 1):
                    assert out.pixel(x, y) == (220, 30, 30)
                else:
                    assert out.pixel(x, y) == (30, 40, 50)

    def test_neutral_settings_return_new_equal_image(self, flat_rgb_image):
        out = process_image(flat_rgb_image)
        assert out == flat_rgb_image
        assert out is not flat_rgb_image
        assert not np.shares_memory(out.pixels, flat_rgb_image.pixels)

    def test_brightness_applied_before_contrast(self):
        img = Image(np.full((1, 1, 3), 100, dtype=np.uint8))
        out = process_image(img, brightness=50, contrast=2.0)
        # (100 + 50) → 128 + 22*2 = 172; the other order would give 122
        assert out.pixel(0, 0) == (172, 172, 172)

    def test_temperature_applied_after_saturation(self):
        img = Image(np.array([[[200, 10, 10]]], dtype=np.uint8))
        out = process_image(img, saturation=0.0, temperature=40)
        # luma 66.81 → (66, 66, 66), then warmed
        assert out.pixel(0, 0) == (106, 66, 26)

    def test_single_channel_input(self, gray_image):
        out = process_image(gray_image, brightness=10, saturation=0.0, temperature=30)
        expected = np.clip(gray_image.pixels.astype(int) + 10, 0, 255)
        assert np.array_equal(out.pixels, expected)

    def test_input_untouched(self, random_rgb_image):
        before = random_rgb_image.pixels.copy()
        process_image(random_rgb_image, brightness=-30, contrast=1.4, saturation=1.8, temperature=12)
        assert np.array_equal(random_rgb_image.pixels, before)


class TestColorAdjustments:
    """Value object behaviour"""

    def test_identity(self):
        assert ColorAdjustments().is_identity()
        assert not ColorAdjustments(temperature=1).is_identity()

    def test_adjust_gallery(self, flat_rgb_image, random_rgb_image):
        adjustments = ColorAdjustments(brightness=20)
        out = list(adjust_gallery([flat_rgb_image, random_rgb_image], adjustments))
        assert len(out) == 2
        assert out[0] == process_image(flat_rgb_image, brightness=20)
        assert out[1] == process_image(random_rgb_image, brightness=20)

    def test_adjust_gallery_is_lazy(self, flat_rgb_image):
        """An endless gallery still yields its first image"""
        out = adjust_gallery(itertools.repeat(flat_rgb_image), ColorAdjustments(brightness=20))
        assert next(out).pixel(0, 0) == (30, 40, 50)

"""
Pytest configuration and fixtures for panowarp tests
"""

import numpy as np
import pytest

from panowarp.models.image import Image
from panowarp.services.pixel_transform_service import PixelTransformService


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def flat_rgb_image():
    """4x4 RGB image, all (10, 20, 30) except one (200, 10, 10) pixel at (2, 1)"""
    pixels = np.empty((4, 4, 3), dtype=np.uint8)
    pixels[:, :] = (10, 20, 30)
    pixels[1, 2] = (200, 10, 10)
    return Image(pixels)


@pytest.fixture
def random_rgb_image(rng):
    """Random 24x32 RGB image"""
    return Image(rng.integers(0, 256, size=(24, 32, 3), dtype=np.uint8))


@pytest.fixture
def random_rgba_image(rng):
    """Random 12x10 RGBA image"""
    return Image(rng.integers(0, 256, size=(12, 10, 4), dtype=np.uint8))


@pytest.fixture
def gray_image(rng):
    """Random 8x6 single-channel image"""
    return Image(rng.integers(0, 256, size=(8, 6, 1), dtype=np.uint8))


@pytest.fixture
def transform_service():
    return PixelTransformService(workers=2)


@pytest.fixture
def coordinate_image():
    """20x10 RGB panorama whose R = 10*x and G = 10*y, so a pixel names its source"""
    pixels = np.zeros((10, 20, 3), dtype=np.uint8)
    xs = np.arange(20, dtype=np.uint8) * 10
    ys = np.arange(10, dtype=np.uint8) * 10
    pixels[:, :, 0] = xs[np.newaxis, :]
    pixels[:, :, 1] = ys[:, np.newaxis]
    return Image(pixels)

"""
Color Adjuster Pipeline
Applies the fixed tone chain brightness → contrast → saturation → temperature.
"""

import logging
from typing import Iterable, Iterator

from ..models.color_adjustments import ColorAdjustments
from ..models.image import Image
from ..services.pixel_transform_service import PixelTransformService

logger = logging.getLogger(__name__)


def process_image(
    img: Image,
    brightness: int = 0,
    contrast: float = 1.0,
    saturation: float = 1.0,
    temperature: int = 0,
    *,
    transform_service: PixelTransformService = PixelTransformService(),
) -> Image:
    """
    Run the four tone adjustments in order, each stage consuming the
    previous stage's output.

    Args:
        img: Source image (left untouched)
        brightness: Offset added to every sample
        contrast: Gain around mid-gray 128 (1.0 = unchanged)
        saturation: 0.0 = luma only, 1.0 = unchanged
        temperature: Positive warms (R up, B down), negative cools
        transform_service: Service doing the per-pixel work

    Returns:
        Image: A new image, even when every stage is neutral
    """
    adjustments = ColorAdjustments(
        brightness=brightness,
        contrast=contrast,
        saturation=saturation,
        temperature=temperature,
    )
    return adjustments.apply(img, transform_service)


def adjust_gallery(
    gallery: Iterable[Image],
    adjustments: ColorAdjustments,
    *,
    transform_service: PixelTransformService = PixelTransformService(),
) -> Iterator[Image]:
    """
    Apply the same adjustments to every image of *gallery*.
    Yields new Image objects one at a time; the inputs are left as they were.
    """
    count = 0
    for count, img in enumerate(gallery, 1):
        logger.debug("Adjusting image %d (%s)", count, img.path)
        yield adjustments.apply(img, transform_service)
    logger.info("Adjusted %d images with %s", count, adjustments)

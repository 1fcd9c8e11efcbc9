from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from ..models.image import Image
from ..utils.parallel import run_row_bands

logger = logging.getLogger(__name__)

# ITU-R BT.601 luma weights.
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)

EDITED_SUFFIX = "_edited"


class PixelTransformService:
    """
    Per-pixel and small-kernel color operations.

    *   Every method reads one Image and returns a *new* Image of the same
        width / height / channels. Inputs are never written to.
    *   Operations that need RGB (grayscale, saturation, temperature) return
        an unchanged copy for 1-channel images instead of raising; so does
        blur with radius <= 0.
    """

    def __init__(self, workers: Optional[int] = None):
        self.workers = workers

    # ─── Public API ────────────────────────────────────────────────
    def apply_grayscale(self, img: Image) -> Image:
        if img.channels < 3:
            return img.copy()

        out = img.pixels.copy()
        luma = self._luma(img.pixels).astype(np.uint8)
        out[:, :, 0] = luma
        out[:, :, 1] = luma
        out[:, :, 2] = luma
        return self._derive(img, out)

    def apply_blur(self, img: Image, radius: int) -> Image:
        """
        Box blur over the (2r+1)^2 window with edge-clamped borders.
        Each sample is the truncated integer mean of its window.
        """
        if radius <= 0:
            return img.copy()

        h, w, _ = img.shape
        k = 2 * radius + 1
        area = k * k

        padded = np.pad(img.pixels.astype(np.int64),
                        ((radius, radius), (radius, radius), (0, 0)), mode="edge")
        # Summed-area table with a leading zero row/column.
        sat = np.zeros((padded.shape[0] + 1, padded.shape[1] + 1, padded.shape[2]),
                       dtype=np.int64)
        sat[1:, 1:] = padded.cumsum(axis=0).cumsum(axis=1)

        out = np.empty_like(img.pixels)

        def _blur_rows(lo: int, hi: int) -> None:
            window = (sat[lo + k:hi + k, k:k + w]
                      - sat[lo:hi, k:k + w]
                      - sat[lo + k:hi + k, 0:w]
                      + sat[lo:hi, 0:w])
            out[lo:hi] = (window // area).astype(np.uint8)

        run_row_bands(h, _blur_rows, workers=self.workers, desc="blur")
        logger.debug("Blurred %dx%d image with radius %d", w, h, radius)
        return self._derive(img, out)

    def apply_invert(self, img: Image) -> Image:
        return self._derive(img, 255 - img.pixels)

    def apply_brightness(self, img: Image, brightness: int) -> Image:
        adjusted = img.pixels.astype(np.int32) + int(brightness)
        return self._derive(img, np.clip(adjusted, 0, 255).astype(np.uint8))

    def apply_contrast(self, img: Image, contrast: float) -> Image:
        adjusted = 128.0 + (img.pixels.astype(np.float64) - 128.0) * contrast
        return self._derive(img, np.clip(adjusted, 0.0, 255.0).astype(np.uint8))

    def apply_saturation(self, img: Image, saturation: float) -> Image:
        """
        Blend each RGB channel with the pixel's luma.
        saturation 0 → gray, 1 → unchanged, >1 → boosted. Alpha is untouched.
        """
        if img.channels < 3:
            return img.copy()

        # Same as normalising to [0,1], clamping and scaling back by 255, but
        # kept in sample units so that v/255*255 rounding cannot lose a level.
        rgb = img.pixels[:, :, :3].astype(np.float64)
        gray = self._luma(img.pixels)[:, :, np.newaxis]
        # Lerp form: saturation 1.0 and 0.0 are exact.
        blended = rgb * saturation + gray * (1.0 - saturation)

        out = img.pixels.copy()
        out[:, :, :3] = np.clip(blended, 0.0, 255.0).astype(np.uint8)
        return self._derive(img, out)

    def apply_temperature(self, img: Image, temperature: int) -> Image:
        """Warm (temperature > 0) pushes red up and blue down; cool does the opposite."""
        if img.channels < 3:
            return img.copy()

        out = img.pixels.copy()
        t = int(temperature)
        out[:, :, 0] = np.clip(img.pixels[:, :, 0].astype(np.int32) + t, 0, 255)
        out[:, :, 2] = np.clip(img.pixels[:, :, 2].astype(np.int32) - t, 0, 255)
        return self._derive(img, out)

    # ─── Internal helpers ──────────────────────────────────────────
    @staticmethod
    def _luma(pixels: np.ndarray) -> np.ndarray:
        # Summed term by term, R first; a dot product may reorder the adds
        # and land just below an exact integer before truncation.
        rgb = pixels.astype(np.float64)
        wr, wg, wb = LUMA_WEIGHTS
        return wr * rgb[:, :, 0] + wg * rgb[:, :, 1] + wb * rgb[:, :, 2]

    @staticmethod
    def _derive(img: Image, pixels: np.ndarray) -> Image:
        """Wrap result pixels in a new Image with an `_edited` path, if any."""
        path = img.path
        if path is not None and not path.stem.endswith(EDITED_SUFFIX):
            path = path.with_stem(path.stem + EDITED_SUFFIX)
        return Image(pixels=np.ascontiguousarray(pixels, dtype=np.uint8), path=path)

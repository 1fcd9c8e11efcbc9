from __future__ import annotations

import logging
import os

import numpy as np
from dotenv import load_dotenv

from ..exceptions import PreconditionError
from ..models.image import Image
from ..models.warp_geometry import WarpGeometry

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Mask luminance weights (slightly different rounding from the BT.601 luma
# used by the color transforms).
MASK_LUMA_WEIGHTS = np.array([0.2989, 0.5870, 0.1140], dtype=np.float64)


class ImportanceMapService:
    """
    Builds the per-vertex weight field that tells the mesh warp which
    regions are salient.

    *   A vertex whose nearest mask pixel is bright (luminance > threshold)
        gets `salient_weight`, every other vertex gets `base_weight`.
    *   One 5-point smoothing pass then softens the edges of salient areas.
    """

    def __init__(self,
                 threshold: float = None,
                 salient_weight: float = None,
                 base_weight: float = None):
        self.threshold = threshold if threshold is not None else float(
            os.getenv("IMPORTANCE_LUMA_THRESHOLD", "128"))
        self.salient_weight = salient_weight if salient_weight is not None else float(
            os.getenv("IMPORTANCE_SALIENT_WEIGHT", "1.2"))
        self.base_weight = base_weight if base_weight is not None else float(
            os.getenv("IMPORTANCE_BASE_WEIGHT", "1.0"))

    # ─── Public API ────────────────────────────────────────────────
    def build(self, mask: Image, geometry: WarpGeometry) -> np.ndarray:
        """
        Args
        ----
        mask     : Image with the panorama's width / height and >= 3 channels
        geometry : grid and canvas sizes of the warp

        Returns
        -------
        weights : np.ndarray  (grid_rows+1, grid_cols+1)  float64
        """
        self.validate_mask(mask, geometry.src_width, geometry.src_height)
        weights = self.sample_mask(mask, geometry)
        smoothed = self.smooth(weights)
        logger.debug("Importance map %s: %d salient vertices before smoothing",
                     smoothed.shape, int((weights > self.base_weight).sum()))
        return smoothed

    @staticmethod
    def validate_mask(mask: Image, width: int, height: int) -> None:
        if mask.width != width or mask.height != height:
            raise PreconditionError(
                f"Mask size {mask.width}x{mask.height} does not match "
                f"panorama size {width}x{height}")
        if mask.channels < 3:
            raise PreconditionError(
                f"Mask needs at least 3 channels for luminance, got {mask.channels}")

    def sample_mask(self, mask: Image, geometry: WarpGeometry) -> np.ndarray:
        """Threshold the mask luminance at every grid vertex (no smoothing)."""
        vertices = geometry.vertex_positions()

        # Target canvas → mask space, nearest pixel by truncation.
        mask_x = (vertices[:, :, 0] * mask.width / geometry.out_width).astype(np.int64)
        mask_y = (vertices[:, :, 1] * mask.height / geometry.out_height).astype(np.int64)
        inside = ((mask_x >= 0) & (mask_x < mask.width)
                  & (mask_y >= 0) & (mask_y < mask.height))

        weights = np.full(geometry.vertex_shape, self.base_weight, dtype=np.float64)
        rgb = mask.pixels[mask_y[inside], mask_x[inside], :3].astype(np.float64)
        wr, wg, wb = MASK_LUMA_WEIGHTS
        luminance = wr * rgb[:, 0] + wg * rgb[:, 1] + wb * rgb[:, 2]
        weights[inside] = np.where(luminance > self.threshold,
                                   self.salient_weight, self.base_weight)
        return weights

    @staticmethod
    def smooth(weights: np.ndarray) -> np.ndarray:
        """
        Average every interior vertex with its four axis neighbours.

        All reads come from the unsmoothed input, so the result does not
        depend on visiting order. Border vertices are copied unchanged.
        """
        out = weights.copy()
        if weights.shape[0] < 3 or weights.shape[1] < 3:
            return out
        out[1:-1, 1:-1] = (weights[1:-1, 1:-1]
                           + weights[:-2, 1:-1]
                           + weights[2:, 1:-1]
                           + weights[1:-1, :-2]
                           + weights[1:-1, 2:]) / 5.0
        return out

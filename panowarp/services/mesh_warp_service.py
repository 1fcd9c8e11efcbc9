from __future__ import annotations

import logging
import os
from typing import Optional, Union

import numpy as np
from dotenv import load_dotenv

from ..models.image import Image
from ..models.warp_geometry import WarpGeometry
from ..utils.parallel import run_row_bands
from .importance_map_service import ImportanceMapService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

MIN_RADIUS = 0.01
MAX_RADIUS = 0.5
SCALE_EPS = 0.01


def warp_scale(r: Union[float, np.ndarray],
               importance: Union[float, np.ndarray] = 1.0) -> Union[float, np.ndarray]:
    """
    Radial displacement factor ln(1 + r) / (r + eps), times importance.

    r is the normalised distance from the panorama centre and is clamped to
    [MIN_RADIUS, MAX_RADIUS] first. The factor is always positive, so
    importance only stretches the displacement, never flips it.
    """
    r = np.clip(r, MIN_RADIUS, MAX_RADIUS)
    return np.log1p(r) / (r + SCALE_EPS) * importance


class MeshWarpService:
    """
    Importance-weighted mesh warp of a wide panorama onto a fixed-aspect canvas.

    *   The target canvas (source height, width = height * aspect) is covered
        by a grid_rows x grid_cols mesh.
    *   Each mesh vertex is mapped back into the panorama with a radial,
        log-attenuated scale (see warp_scale) weighted by the importance map.
    *   Every output pixel bilinearly interpolates its cell's four warped
        corners and copies the nearest source pixel at that position.
    """

    def __init__(self,
                 grid_rows: int = None,
                 grid_cols: int = None,
                 aspect_ratio: float = None,
                 workers: Optional[int] = None,
                 importance_service: ImportanceMapService = None):
        self.grid_rows = grid_rows if grid_rows is not None else int(os.getenv("WARP_GRID_ROWS", "100"))
        self.grid_cols = grid_cols if grid_cols is not None else int(os.getenv("WARP_GRID_COLS", "100"))
        self.aspect_ratio = aspect_ratio if aspect_ratio is not None else float(
            os.getenv("WARP_ASPECT_RATIO", "9.0"))
        self.workers = workers
        self.importance_service = importance_service or ImportanceMapService()

    # ─── Public API ────────────────────────────────────────────────
    def apply_projection(self, panorama: Image, mask: Image) -> Image:
        """
        Dewarp `panorama` guided by `mask` (bright = important).

        Raises:
            PreconditionError: if the mask size differs from the panorama's,
                or the canvas is too small to give every grid cell a
                non-zero size.
        """
        geometry = self.geometry_for(panorama)
        importance = self.importance_service.build(mask, geometry)
        warped = self.warp_vertices(geometry, importance)
        out = self.resample(panorama, warped, geometry)

        logger.info("Projected %dx%d panorama to %dx%d (%dx%d grid, cell %dx%d)",
                    panorama.width, panorama.height, out.width, out.height,
                    geometry.grid_rows, geometry.grid_cols,
                    geometry.cell_w, geometry.cell_h)
        return out

    def geometry_for(self, panorama: Image) -> WarpGeometry:
        return WarpGeometry.for_panorama(
            panorama.width, panorama.height,
            self.grid_rows, self.grid_cols, self.aspect_ratio)

    @staticmethod
    def warp_vertices(geometry: WarpGeometry, importance: np.ndarray) -> np.ndarray:
        """
        Args
        ----
        geometry   : canvas / grid sizes
        importance : (rows+1, cols+1) weights from ImportanceMapService

        Returns
        -------
        warped : np.ndarray  (rows+1, cols+1, 2)  float64  source-space (x, y),
                 clamped into [0, W-1] x [0, H-1]
        """
        if importance.shape != geometry.vertex_shape:
            raise ValueError(
                f"Importance map shape {importance.shape} does not match "
                f"grid vertices {geometry.vertex_shape}")

        w, h = geometry.src_width, geometry.src_height
        cx, cy = w / 2.0, h / 2.0

        vertices = geometry.vertex_positions()
        xs = vertices[:, :, 0] * (w / geometry.out_width)
        ys = vertices[:, :, 1]

        dx = (xs - cx) / w
        dy = (ys - cy) / h
        scale = warp_scale(np.sqrt(dx * dx + dy * dy), importance)

        warped = np.empty_like(vertices)
        warped[:, :, 0] = np.clip(cx + scale * dx * w, 0, w - 1)
        warped[:, :, 1] = np.clip(cy + scale * dy * h, 0, h - 1)
        return warped

    def resample(self, panorama: Image, warped: np.ndarray, geometry: WarpGeometry) -> Image:
        """
        Fill the target canvas cell by cell from the warped mesh.

        Pixels beyond the last full cell (canvas size not a multiple of the
        grid) belong to the last cell with their cell fraction clamped to 1.
        """
        src = panorama.pixels
        src_w, src_h = geometry.src_width, geometry.src_height
        out_w, out_h = geometry.out_width, geometry.out_height
        out = np.zeros((out_h, out_w, panorama.channels), dtype=np.uint8)

        # Column lookups are shared by every band.
        px = np.arange(out_w)
        col = np.minimum(px // geometry.cell_w, geometry.grid_cols - 1)
        ax = np.clip((px - col * geometry.cell_w) / geometry.cell_w, 0.0, 1.0)
        ax = ax[np.newaxis, :, np.newaxis]

        def _resample_rows(lo: int, hi: int) -> None:
            py = np.arange(lo, hi)
            row = np.minimum(py // geometry.cell_h, geometry.grid_rows - 1)
            ay = np.clip((py - row * geometry.cell_h) / geometry.cell_h, 0.0, 1.0)
            ay = ay[:, np.newaxis, np.newaxis]

            r0, c0 = row[:, np.newaxis], col[np.newaxis, :]
            top_left = warped[r0, c0]
            top_right = warped[r0, c0 + 1]
            bottom_left = warped[r0 + 1, c0]
            bottom_right = warped[r0 + 1, c0 + 1]

            pos = ((1 - ax) * (1 - ay) * top_left
                   + ax * (1 - ay) * top_right
                   + (1 - ax) * ay * bottom_left
                   + ax * ay * bottom_right)

            sx = np.clip(pos[:, :, 0], 0, src_w - 1).astype(np.int64)
            sy = np.clip(pos[:, :, 1], 0, src_h - 1).astype(np.int64)
            out[lo:hi] = src[sy, sx]

        run_row_bands(out_h, _resample_rows, workers=self.workers, desc="warp")

        path = panorama.path.with_stem(panorama.path.stem + "_projected") if panorama.path else None
        return Image(pixels=out, path=path)

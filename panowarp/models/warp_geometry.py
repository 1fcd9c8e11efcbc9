from __future__ import annotations
from dataclasses import dataclass
import math
import numpy as np

from ..exceptions import PreconditionError


@dataclass(frozen=True)
class WarpGeometry:
    """
    Sizes shared by the importance map and the mesh warp for one panorama.

    The target canvas keeps the source height and gets width
    round(height * aspect_ratio); it is split into grid_rows x grid_cols
    cells of integer size cell_w x cell_h.
    """
    src_width: int
    src_height: int
    out_width: int
    out_height: int
    grid_rows: int
    grid_cols: int
    cell_w: int
    cell_h: int

    @classmethod
    def for_panorama(
        cls,
        width: int,
        height: int,
        grid_rows: int,
        grid_cols: int,
        aspect_ratio: float,
    ) -> WarpGeometry:
        if grid_rows <= 0 or grid_cols <= 0:
            raise PreconditionError(f"Grid must be at least 1x1, got {grid_rows}x{grid_cols}")
        if aspect_ratio <= 0:
            raise PreconditionError(f"Aspect ratio must be positive, got {aspect_ratio}")

        out_height = height
        out_width = int(math.floor(out_height * aspect_ratio + 0.5))  # half rounds up
        cell_w = out_width // grid_cols
        cell_h = out_height // grid_rows
        if cell_w == 0 or cell_h == 0:
            raise PreconditionError(
                f"Degenerate grid cell {cell_w}x{cell_h}: target canvas "
                f"{out_width}x{out_height} is too small for a "
                f"{grid_rows}x{grid_cols} grid")

        return cls(
            src_width=width,
            src_height=height,
            out_width=out_width,
            out_height=out_height,
            grid_rows=grid_rows,
            grid_cols=grid_cols,
            cell_w=cell_w,
            cell_h=cell_h,
        )

    @property
    def vertex_shape(self):
        return self.grid_rows + 1, self.grid_cols + 1

    def vertex_positions(self) -> np.ndarray:
        """
        Undeformed cell corners in target space.

        Returns
        -------
        grid : np.ndarray  (rows+1, cols+1, 2)  float64  (x, y)
        """
        cols = np.arange(self.grid_cols + 1, dtype=np.float64) * self.cell_w
        rows = np.arange(self.grid_rows + 1, dtype=np.float64) * self.cell_h
        xx, yy = np.meshgrid(cols, rows)
        return np.stack([xx, yy], axis=-1)

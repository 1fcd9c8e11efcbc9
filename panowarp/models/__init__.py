from .color_adjustments import ColorAdjustments
from .image import Image
from .warp_geometry import WarpGeometry

__all__ = ["Image", "ColorAdjustments", "WarpGeometry"]

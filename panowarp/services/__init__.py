from .image_service import ImageService
from .importance_map_service import ImportanceMapService
from .mesh_warp_service import MeshWarpService, warp_scale
from .pixel_transform_service import PixelTransformService

__all__ = [
    "ImageService",
    "ImportanceMapService",
    "MeshWarpService",
    "PixelTransformService",
    "warp_scale",
]

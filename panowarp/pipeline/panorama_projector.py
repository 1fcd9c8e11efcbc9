"""
Panorama Projector Pipeline
Loads a panorama and its importance mask, dewarps the panorama onto the
fixed-aspect canvas and saves the result.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Union

from dotenv import load_dotenv

from ..models.image import Image
from ..services.image_service import ImageService
from ..services.mesh_warp_service import MeshWarpService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

MASK_PATH = os.getenv("WARP_MASK_PATH", "data/mask.jpg")
OUTPUT_DIR = os.getenv("OUTPUT_DIR_PATH", "data/output")
OUTPUT_EXT = os.getenv("OUTPUT_IMG_EXT", ".jpg")


def project_panorama(
    panorama: Image,
    mask: Image,
    *,
    warp_service: MeshWarpService = None,
) -> Image:
    """
    In-memory dewarp of *panorama* guided by *mask*.

    Raises:
        PreconditionError: mask and panorama sizes differ, or the panorama
            is too small for the warp grid.
    """
    warp_service = warp_service or MeshWarpService()
    return warp_service.apply_projection(panorama, mask)


def project_panorama_file(
    panorama_path: Union[str, Path],
    mask_path: Union[str, Path] = None,
    *,
    output_dir: Union[str, Path] = OUTPUT_DIR,
    ext: str = OUTPUT_EXT,
    quality: int = None,
    image_service: ImageService = None,
    warp_service: MeshWarpService = None,
) -> Path:
    """
    Load → warp → save.

    Args:
        panorama_path: Wide source panorama
        mask_path: Importance mask with the panorama's size (defaults to WARP_MASK_PATH)
        output_dir: Directory for the projected image
        ext: File extension (format) of the projected image
        quality: Encoder quality 1..100
        image_service: Service for image I/O
        warp_service: Service doing the mesh warp

    Returns:
        Path: Where the projected image was written
    """
    image_service = image_service or ImageService()
    mask_path = Path(mask_path or MASK_PATH)

    panorama = image_service.load(panorama_path)
    mask = image_service.load(mask_path)

    projected = project_panorama(panorama, mask, warp_service=warp_service)

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    out_path = output_dir / f"projected_{uuid.uuid1().hex}{ext}"
    return image_service.save(projected, out_path, quality)

from __future__ import annotations
from pathlib import Path
from typing import Union, Iterable, List, Iterator
import logging
import os

import numpy as np
import cv2
from PIL import Image as PILImage
from dotenv import load_dotenv

from ..exceptions import ImageIOError
from ..models.image import Image

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

JPEG_EXTS = {".jpg", ".jpeg"}


class ImageRepository:
    """
    Handles file I/O for Image entities.
    OpenCV decodes, Pillow encodes. Pixels are RGB / RGBA / gray in memory.
    """
    def __init__(self):
        exts = os.getenv("VALID_IMAGE_EXTENSIONS", ".jpg,.jpeg,.png,.bmp")
        self.VALID_EXTS = {ext.strip().lower() for ext in exts.split(",") if ext.strip()}
        self.default_quality = int(os.getenv("JPEG_QUALITY", "90"))

    @staticmethod
    def create_image(pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        if path is None:
            return Image(pixels)
        return Image(pixels=pixels, path=Path(path))

    @staticmethod
    def load(path: Union[str, Path]) -> Image:
        path = Path(path)
        arr = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if arr is None:
            raise ImageIOError(f"Failed to load image: {path}")

        if arr.dtype != np.uint8:
            # 16-bit PNG / TIFF → keep the top 8 bits.
            arr = (arr >> 8).astype(np.uint8) if arr.dtype == np.uint16 else arr.astype(np.uint8)
        if arr.ndim == 3 and arr.shape[2] == 3:
            arr = cv2.cvtColor(arr, cv2.COLOR_BGR2RGB)
        elif arr.ndim == 3 and arr.shape[2] == 4:
            arr = cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA)

        img = Image(pixels=arr, path=path)
        logger.debug("Loaded %s: %dx%d, %d channels", path, img.width, img.height, img.channels)
        return img

    def save(self, image: Image, path: Union[str, Path] = None, quality: int = None) -> Path:
        """
        Encode `image` to `path` (or image.path). Format follows the suffix.

        Raises:
            ValueError: quality outside 1..100, or no path at all.
            ImageIOError: the encoder failed.
        """
        quality = self.default_quality if quality is None else quality
        if not 1 <= quality <= 100:
            raise ValueError(f"JPEG quality must be in 1..100, got {quality}")
        path = Path(path) if path is not None else image.path
        if path is None:
            raise ValueError("Image has no path; pass one explicitly")

        pixels = image.pixels
        if image.channels == 1:
            pixels = pixels[:, :, 0]
        elif image.channels == 4 and path.suffix.lower() in JPEG_EXTS:
            pixels = pixels[:, :, :3]  # JPEG has no alpha plane

        try:
            PILImage.fromarray(np.ascontiguousarray(pixels)).save(path, quality=quality)
        except (OSError, ValueError, KeyError) as err:
            raise ImageIOError(f"Failed to save image as {path}: {err}") from err

        logger.info("Image saved as %s with quality %d.", path, quality)
        return path

    def iter_dir(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
    ) -> Iterator[Image]:
        """
        Yield Image objects one at a time.  Nothing accumulates in memory.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise NotADirectoryError(folder)

        allowed = {e.lower() for e in (exts or self.VALID_EXTS)}
        pattern = "**/*" if recursive else "*"

        for p in sorted(folder.glob(pattern)):
            if p.suffix.lower() not in allowed or not p.is_file():
                logger.debug("Skipping %s", p)
                continue
            try:
                yield self.load(p)
            except ImageIOError as err:
                logger.warning("Skipping %s: %s", p.name, err)

    def load_dir(
        self, folder: Union[str, Path], *, recursive=False, exts=None
    ) -> List[Image]:
        """
        Helper that returns a list, but internally streams.
        """
        return list(self.iter_dir(folder, recursive=recursive, exts=exts))

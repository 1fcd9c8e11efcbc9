from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Union, Iterator
import logging

import numpy as np

from ..models.image import Image
from ..repositories.image_repository import ImageRepository

logger = logging.getLogger(__name__)


class ImageService:
    """I/O helpers.  No pixel math here."""
    def __init__(self, image_repository: ImageRepository = None):
        self.image_repository = image_repository or ImageRepository()

    def create_image(self, pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        return self.image_repository.create_image(pixels, path)

    def load(self, path: str | Path) -> Image:
        """Load a single image from disk into an Image object."""
        img = self.image_repository.load(path)
        logger.info(self.describe(img))
        return img

    def stream_gallery(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
    ) -> Iterator[Image]:
        """
        Yield images lazily instead of returning a gigantic list.
        """
        return self.image_repository.iter_dir(folder,
                                              recursive=recursive,
                                              exts=exts)

    def save(self, image: Image, path: Union[str, Path] = None, quality: int = None) -> Path:
        """
        Business-level method to save the image to a specific path.
        Falls back to image.path when no path is given.
        """
        return self.image_repository.save(image, path, quality)

    def save_gallery(self, gallery: Iterable[Image], quality: int = None) -> List[Path]:
        return [self.save(img, quality=quality) for img in gallery]

    @staticmethod
    def describe(img: Image) -> str:
        name = img.path.name if img.path else "<memory>"
        return f"Loaded image {name}: {img.width}x{img.height}, {img.channels} channels."

"""
panowarp - pixel color adjustments and importance-weighted panorama dewarping.
"""

from .exceptions import (
    BoundsError,
    ConstructionError,
    ImageIOError,
    PanowarpError,
    PreconditionError,
)
from .models.image import Image

__all__ = [
    "Image",
    "PanowarpError",
    "ConstructionError",
    "ImageIOError",
    "BoundsError",
    "PreconditionError",
]

__version__ = "1.0.0"

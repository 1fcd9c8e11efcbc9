from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence, Tuple, Union
import numpy as np

from ..exceptions import BoundsError, ConstructionError

VALID_CHANNELS = (1, 3, 4)


@dataclass(eq=False)
class Image:
    """
    Value object: 8-bit pixels (+ optional source path for bookkeeping).

    `pixels` has shape (H, W, C), dtype uint8, C-contiguous, so its memory
    is the row-major, channel-interleaved layout where pixel (x, y) lives at
    data[(y*W + x)*C : +C]. Channels are RGB / RGBA order, or a single
    gray channel.
    """
    pixels: np.ndarray  # Shape (H, W, C), dtype uint8.
    path: Path | None = field(default=None, compare=False)  # Source of the image.

    def __post_init__(self):
        pixels = np.asarray(self.pixels)
        if pixels.ndim == 2:
            pixels = pixels[:, :, np.newaxis]
        if pixels.ndim != 3:
            raise ConstructionError(
                f"Pixel array must be (H, W, C), got shape {pixels.shape}")
        h, w, c = pixels.shape
        _check_dimensions(w, h, c)
        if pixels.dtype != np.uint8:
            raise ConstructionError(f"Pixel array must be uint8, got {pixels.dtype}")
        self.pixels = np.ascontiguousarray(pixels)
        if self.path is not None:
            self.path = Path(self.path)

    # ─── Construction ───────────────────────────────────────────────
    @classmethod
    def blank(cls, width: int, height: int, channels: int) -> Image:
        """Zero-filled image of the given size."""
        _check_dimensions(width, height, channels)
        return cls(np.zeros((height, width, channels), dtype=np.uint8))

    @classmethod
    def from_buffer(
        cls,
        buffer: Union[bytes, bytearray, Sequence[int], np.ndarray],
        width: int,
        height: int,
        channels: int,
    ) -> Image:
        """
        Copy a flat, row-major, channel-interleaved sample buffer into a new Image.

        Raises:
            ConstructionError: if the dimensions are invalid or
                len(buffer) != width * height * channels, or the samples
                are not integers in [0, 255].
        """
        _check_dimensions(width, height, channels)
        if isinstance(buffer, (bytes, bytearray)):
            flat = np.frombuffer(buffer, dtype=np.uint8)
        else:
            flat = np.asarray(buffer).reshape(-1)
        expected = width * height * channels
        if flat.size != expected:
            raise ConstructionError(
                f"Raw data size {flat.size} does not match dimensions "
                f"{width}x{height}x{channels} ({expected})")
        if flat.dtype != np.uint8:
            if not np.issubdtype(flat.dtype, np.integer):
                raise ConstructionError(f"Raw samples must be integers, got dtype {flat.dtype}")
            if flat.size and (flat.min() < 0 or flat.max() > 255):
                raise ConstructionError("Raw samples must lie in [0, 255]")
            flat = flat.astype(np.uint8)
        return cls(flat.reshape(height, width, channels).copy())

    def copy(self) -> Image:
        return Image(pixels=self.pixels.copy(), path=self.path)

    # ─── Basic info ─────────────────────────────────────────────────
    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def channels(self) -> int:
        return self.pixels.shape[2]

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self.pixels.shape

    @property
    def data(self) -> np.ndarray:
        """Flat read-only view of the samples (writes raise ValueError)."""
        view = self.pixels.reshape(-1)
        view.flags.writeable = False
        return view

    # ─── Pixel access ───────────────────────────────────────────────
    def at(self, x: int, y: int, channel: int) -> int:
        self._check_bounds(x, y, channel)
        return int(self.pixels[y, x, channel])

    def put(self, x: int, y: int, channel: int, value: int) -> None:
        """Write one sample. Only meant for images still being built."""
        self._check_bounds(x, y, channel)
        if not 0 <= value <= 255:
            raise ValueError(f"Sample value {value} outside [0, 255]")
        self.pixels[y, x, channel] = value

    def pixel(self, x: int, y: int) -> Tuple[int, ...]:
        """All channel values of pixel (x, y)."""
        self._check_bounds(x, y, 0)
        return tuple(int(v) for v in self.pixels[y, x])

    def _check_bounds(self, x: int, y: int, channel: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height
                and 0 <= channel < self.channels):
            raise BoundsError(
                f"Pixel access ({x}, {y}, {channel}) out of bounds for "
                f"{self.width}x{self.height}x{self.channels} image")

    def __eq__(self, other) -> bool:
        if not isinstance(other, Image):
            return NotImplemented
        return (self.pixels.shape == other.pixels.shape
                and bool(np.array_equal(self.pixels, other.pixels)))

    __hash__ = None

    def __repr__(self) -> str:
        return (f"Image(width={self.width}, height={self.height}, "
                f"channels={self.channels}, path={self.path!r})")


def _check_dimensions(width: int, height: int, channels: int) -> None:
    if width <= 0 or height <= 0 or channels not in VALID_CHANNELS:
        raise ConstructionError(
            f"Invalid image dimensions or channels: {width}x{height}x{channels}")

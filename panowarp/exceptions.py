"""
Error types raised by panowarp.

Each error also derives from the closest builtin so callers that only
know about ValueError / OSError / IndexError keep working.
"""


class PanowarpError(Exception):
    """Base class for every error raised by this package."""
    pass


class ConstructionError(PanowarpError, ValueError):
    """Raised when an Image cannot be built from the given dimensions or buffer."""
    pass


class ImageIOError(PanowarpError, OSError):
    """Raised when an image file cannot be decoded or encoded."""
    pass


class BoundsError(PanowarpError, IndexError):
    """Raised on pixel access outside [0,width) x [0,height) x [0,channels)."""
    pass


class PreconditionError(PanowarpError, ValueError):
    """Raised when warp inputs are inconsistent (mask size, degenerate grid)."""
    pass

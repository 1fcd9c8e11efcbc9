from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .image import Image

if TYPE_CHECKING:
    from ..services.pixel_transform_service import PixelTransformService


@dataclass(frozen=True)
class ColorAdjustments:
    """
    Value-object holding the four tone/color knobs applied by process_image.
    Defaults are the neutral settings (no change).
    """
    brightness: int = 0           # added to every sample, [-255, +255]
    contrast: float = 1.0         # gain around mid-gray 128
    saturation: float = 1.0       # 0 → luma only, 1 → unchanged
    temperature: int = 0          # +warm (R up, B down) / -cool

    def is_identity(self) -> bool:
        return (self.brightness == 0 and self.contrast == 1.0
                and self.saturation == 1.0 and self.temperature == 0)

    # ── Apply in the fixed order brightness → contrast → saturation → temperature
    def apply(self, img: Image, service: "PixelTransformService") -> Image:
        out = service.apply_brightness(img, self.brightness)
        out = service.apply_contrast(out, self.contrast)
        out = service.apply_saturation(out, self.saturation)
        return service.apply_temperature(out, self.temperature)

from __future__ import annotations
from dataclasses import dataclass
import math


@dataclass(frozen=True)
class PixelRect:
    """Integer crop bounds (x, y, width, height) inside an image."""
    x: int
    y: int
    width: int
    height: int

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class Region:
    """
    Named rectangle in fractions (0.0 - 1.0) of the image size.
    """
    name: str
    x: float
    y: float
    w: float
    h: float

    def resolve(self, img_width: int, img_height: int) -> PixelRect:
        return PixelRect(
            x=math.floor(self.x * img_width),
            y=math.floor(self.y * img_height),
            width=math.floor(self.w * img_width),
            height=math.floor(self.h * img_height),
        )


# Coarse search order: most common QR placements first, whole image last.
SEARCH_REGIONS: tuple[Region, ...] = (
    Region("right-bottom", 0.5, 0.5, 0.5, 0.5),
    Region("right-top", 0.5, 0.0, 0.5, 0.5),
    Region("left-bottom", 0.0, 0.5, 0.5, 0.5),
    Region("left-top", 0.0, 0.0, 0.5, 0.5),
    Region("center", 0.25, 0.25, 0.5, 0.5),
    Region("whole image", 0.0, 0.0, 1.0, 1.0),
)

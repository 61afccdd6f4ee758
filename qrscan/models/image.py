from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import numpy as np


@dataclass(frozen=True)
class Image:
    """
    Simple data object: RGBA or single-channel pixels (+ optional source path).
    Never modified after construction; transforms build a new Image.
    """
    pixels: np.ndarray # Shape (H, W, 4) RGBA or (H, W) intensity, dtype uint8.
    path: Path | None = None # Source of the image.

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0]) if self.pixels.ndim >= 2 else 0

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1]) if self.pixels.ndim >= 2 else 0

    @property
    def channels(self) -> int:
        return 1 if self.pixels.ndim == 2 else int(self.pixels.shape[2])

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

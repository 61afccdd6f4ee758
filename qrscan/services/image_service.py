from __future__ import annotations
from pathlib import Path
from typing import Iterable, List, Union
import math

import cv2

from ..models.image import Image
from ..models.region import PixelRect
from ..repositories.image_repository import ImageRepository


class ImageService:
    """Acquisition and geometry helpers.  No enhancement logic, no decoding."""
    def __init__(self, image_repository: ImageRepository | None = None):
        self.image_repository = image_repository or ImageRepository()

    def load(self, path: str | Path) -> Image:
        """Load a single image from disk into an RGBA Image object."""
        return self.image_repository.load(path)

    def load_bytes(self, data: bytes, source: str = "<bytes>") -> Image:
        return self.image_repository.load_bytes(data, source=source)

    def load_url(self, url: str) -> Image:
        return self.image_repository.load_url(url)

    def list_gallery(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
    ) -> List[Path]:
        return self.image_repository.list_dir(folder, recursive=recursive, exts=exts)

    @staticmethod
    def to_rgba(img: Image) -> Image:
        """Return an RGBA view of any 1-, 3- or 4-channel image."""
        px = img.pixels
        if px.ndim == 2:
            rgba = cv2.cvtColor(px, cv2.COLOR_GRAY2RGBA)
        elif px.shape[2] == 3:
            rgba = cv2.cvtColor(px, cv2.COLOR_RGB2RGBA)
        else:
            return img
        return Image(pixels=rgba, path=img.path)

    def crop(self, img: Image, rect: PixelRect) -> Image:
        """
        Copy the pixels inside `rect`, clipped to the image bounds.
        """
        bound_l = max(0, rect.x)
        bound_t = max(0, rect.y)
        bound_r = min(img.width, rect.x + rect.width)
        bound_b = min(img.height, rect.y + rect.height)

        if bound_l >= bound_r or bound_t >= bound_b:
            raise ValueError(
                f"Invalid crop bounds ({bound_l},{bound_t},{bound_r},{bound_b}) "
                f"for {img.width}x{img.height} image"
            )

        return Image(pixels=img.pixels[bound_t:bound_b, bound_l:bound_r].copy())

    @staticmethod
    def scaled_size(img: Image, scale: float) -> tuple[int, int]:
        return math.floor(img.width * scale), math.floor(img.height * scale)

    def resize(self, img: Image, scale: float) -> Image:
        """
        Resample the whole image by `scale`; bilinear when enlarging,
        area averaging when shrinking.
        """
        width, height = self.scaled_size(img, scale)
        if width <= 0 or height <= 0:
            raise ValueError(f"Scale {scale} collapses {img.width}x{img.height} image")

        interpolation = cv2.INTER_LINEAR if scale >= 1.0 else cv2.INTER_AREA
        pixels = cv2.resize(img.pixels, (width, height), interpolation=interpolation)
        return Image(pixels=pixels)

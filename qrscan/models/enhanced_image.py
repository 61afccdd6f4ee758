from __future__ import annotations
from dataclasses import dataclass
from .image import Image


@dataclass(frozen=True)
class EnhancedImage:
    """
    One binarised candidate produced by an enhancement recipe.
    Used as decoder input; `recipe` becomes provenance on success.
    """
    image: Image  # RGBA rendition of a 0/255 buffer
    recipe: str   # "method1" .. "method4"

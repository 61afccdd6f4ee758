"""
Synthetic images and mock decoders shared by the test modules.
"""
from __future__ import annotations

import io

import numpy as np
from PIL import Image as PILImage

from qrscan.models.decoded_symbol import DecodedSymbol, Point, SymbolLocation
from qrscan.models.image import Image
from qrscan.models.qr_decoder import InversionMode


def rgba_from_gray(gray: np.ndarray) -> Image:
    gray = np.asarray(gray, dtype=np.uint8)
    rgba = np.empty(gray.shape + (4,), dtype=np.uint8)
    rgba[..., :3] = gray[..., None]
    rgba[..., 3] = 255
    return Image(pixels=rgba)


def white_with_black_square(width: int, height: int, x0: int, y0: int, x1: int, y1: int) -> Image:
    """White canvas with a solid black block covering [x0, x1) x [y0, y1)."""
    gray = np.full((height, width), 255, dtype=np.uint8)
    gray[y0:y1, x0:x1] = 0
    return rgba_from_gray(gray)


def png_bytes(image: Image) -> bytes:
    buf = io.BytesIO()
    PILImage.fromarray(image.pixels).save(buf, format="PNG")
    return buf.getvalue()


def uneven_checkerboard(width: int = 400, height: int = 400, cell: int = 5, depth: int = 60):
    """
    Checkerboard whose dark cells sit `depth` below a strong left-to-right
    lighting ramp. Returns (image, dark_mask).
    """
    xs = np.arange(width)
    ys = np.arange(height)
    background = 70.0 + 160.0 * xs / (width - 1)
    dark_mask = ((ys[:, None] // cell) + (xs[None, :] // cell)) % 2 == 1
    gray = np.broadcast_to(background, (height, width)).copy()
    gray[dark_mask] -= depth
    gray = np.clip(np.rint(gray), 0, 255).astype(np.uint8)
    return rgba_from_gray(gray), dark_mask


class NeverDecoder:
    """Counts calls and never finds anything."""

    def __init__(self):
        self.calls = []

    def __call__(self, pixels, width, height, inversion=InversionMode.ATTEMPT_BOTH):
        self.calls.append((width, height, inversion))
        return None


class BlackBoxDecoder:
    """
    "Finds" a symbol whenever the buffer has black pixels and reports the
    black bounding box as its corners, in buffer-local coordinates.
    """

    def __init__(self, text: str = "MOCK-QR"):
        self.text = text
        self.calls = []

    def __call__(self, pixels, width, height, inversion=InversionMode.ATTEMPT_BOTH):
        self.calls.append((width, height, inversion))
        ys, xs = np.nonzero(pixels[..., 0] == 0)
        if xs.size == 0:
            return None
        x0, x1 = float(xs.min()), float(xs.max())
        y0, y1 = float(ys.min()), float(ys.max())
        location = SymbolLocation(
            top_left=Point(x0, y0),
            top_right=Point(x1, y0),
            bottom_left=Point(x0, y1),
            bottom_right=Point(x1, y1),
        )
        return DecodedSymbol(text=self.text, location=location)


class PatternDecoder:
    """
    Succeeds only on full-size buffers whose black pixels reproduce
    `dark_mask` almost exactly.
    """

    def __init__(self, dark_mask: np.ndarray, min_agreement: float = 0.95):
        self.dark_mask = dark_mask
        self.min_agreement = min_agreement
        self.calls = []

    def __call__(self, pixels, width, height, inversion=InversionMode.ATTEMPT_BOTH):
        self.calls.append((width, height, inversion))
        if (height, width) != self.dark_mask.shape:
            return None
        agreement = float(np.mean((pixels[..., 0] == 0) == self.dark_mask))
        if agreement < self.min_agreement:
            return None
        return DecodedSymbol(text="PATTERN")

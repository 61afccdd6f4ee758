"""
Image enhancement recipes that turn a colour photo crop into binary
candidates for the QR decoder.

All functions are pure: they read their input array and return a new one.
"""
from __future__ import annotations

from typing import Callable, Iterator, List
import logging
import math

import cv2
import numpy as np

from ..models.enhanced_image import EnhancedImage
from ..models.image import Image

logger = logging.getLogger(__name__)

# --- Constants for Processing ---
LUMA_WEIGHTS = (0.299, 0.587, 0.114)
# Below this pixel count the adaptive threshold uses a centred sliding window,
# above it one mean per non-overlapping tile.
ADAPTIVE_SLIDING_LIMIT = 50_000
ADAPTIVE_BLOCK_SIZE = 15
ADAPTIVE_C = 10
STRETCH_MIN_PERCENT = 2
STRETCH_MAX_PERCENT = 98
SHARPEN_KERNEL = np.array([
    [ 0, -1,  0],
    [-1,  5, -1],
    [ 0, -1,  0],
], dtype=np.float32)

RECIPE_NAMES = ("method1", "method2", "method3", "method4")


def _round_half_up(values: np.ndarray) -> np.ndarray:
    return np.floor(values + 0.5)


def _as_2d(gray: np.ndarray, width: int, height: int) -> np.ndarray:
    return np.asarray(gray, dtype=np.uint8).reshape(height, width)


class ImageEnhancementService:
    """
    Stateless pixel transforms plus the four fixed enhancement recipes.

    Recipe order is also trial order: the earlier a recipe, the more often it
    was the one that made a photo decodable.
    """

    # ─── Pixel transforms ──────────────────────────────────────────
    @staticmethod
    def grayscale(image: Image) -> np.ndarray:
        """
        Luma-weighted intensity, rounded to the nearest integer.

        Returns an (H, W) uint8 array; a zero-area image gives an empty array.
        """
        px = image.pixels
        if image.is_empty:
            return np.zeros((max(image.height, 0), max(image.width, 0)), dtype=np.uint8)
        if px.ndim == 2:
            return px.astype(np.uint8, copy=True)

        rgb = px[..., :3].astype(np.float64)
        wr, wg, wb = LUMA_WEIGHTS
        luma = wr * rgb[..., 0] + wg * rgb[..., 1] + wb * rgb[..., 2]
        return np.clip(_round_half_up(luma), 0, 255).astype(np.uint8)

    @staticmethod
    def otsu_threshold(gray: np.ndarray) -> int:
        """
        Global threshold maximising between-class variance over all 256 splits.

        Splits are scanned in ascending order and the first maximum wins.
        Empty or single-valued input gives 0.
        """
        flat = np.asarray(gray, dtype=np.uint8).ravel()
        total = flat.size
        if total == 0:
            return 0

        hist = np.bincount(flat, minlength=256).astype(np.float64)
        levels = np.arange(256, dtype=np.float64)

        w_b = np.cumsum(hist)
        w_f = total - w_b
        sum_b = np.cumsum(levels * hist)
        sum_all = sum_b[-1]

        valid = (w_b > 0) & (w_f > 0)
        with np.errstate(divide="ignore", invalid="ignore"):
            m_b = sum_b / w_b
            m_f = (sum_all - sum_b) / w_f
            variance = w_b * w_f * (m_b - m_f) ** 2
        variance = np.where(valid, variance, 0.0)

        best = int(np.argmax(variance))
        return best if variance[best] > 0 else 0

    @staticmethod
    def binarize(gray: np.ndarray, threshold: int) -> np.ndarray:
        """255 where intensity is strictly above `threshold`, else 0."""
        return np.where(np.asarray(gray) > threshold, 255, 0).astype(np.uint8)

    @staticmethod
    def adaptive_threshold(
        gray: np.ndarray,
        width: int,
        height: int,
        block_size: int = ADAPTIVE_BLOCK_SIZE,
        c: float = ADAPTIVE_C,
    ) -> np.ndarray:
        """
        Local mean thresholding: white where value > (neighbourhood mean - c).

        Small images (< 50,000 px) use a `block_size` window centred on each
        pixel, shrunk at the borders. Larger images use one mean per
        non-overlapping `block_size` x `block_size` tile.
        """
        if block_size <= 0:
            raise ValueError(f"block_size must be positive, got {block_size}")
        if width <= 0 or height <= 0:
            return np.zeros((max(height, 0), max(width, 0)), dtype=np.uint8)

        g = _as_2d(gray, width, height)
        integral = np.zeros((height + 1, width + 1), dtype=np.int64)
        integral[1:, 1:] = g.astype(np.int64).cumsum(axis=0).cumsum(axis=1)

        ys = np.arange(height)
        xs = np.arange(width)
        if width * height < ADAPTIVE_SLIDING_LIMIT:
            half = block_size // 2
            y0 = np.clip(ys - half, 0, height)
            y1 = np.clip(ys + half + 1, 0, height)
            x0 = np.clip(xs - half, 0, width)
            x1 = np.clip(xs + half + 1, 0, width)
        else:
            y0 = (ys // block_size) * block_size
            y1 = np.minimum(y0 + block_size, height)
            x0 = (xs // block_size) * block_size
            x1 = np.minimum(x0 + block_size, width)

        sums = (
            integral[np.ix_(y1, x1)]
            - integral[np.ix_(y0, x1)]
            - integral[np.ix_(y1, x0)]
            + integral[np.ix_(y0, x0)]
        )
        counts = np.outer(y1 - y0, x1 - x0)
        mean = sums / counts

        return np.where(g > mean - c, 255, 0).astype(np.uint8)

    @staticmethod
    def sharpen(gray: np.ndarray, width: int, height: int) -> np.ndarray:
        """
        3x3 Laplacian sharpen of interior pixels, clamped to [0, 255].
        The outermost rows and columns are copied unchanged.
        """
        if width <= 0 or height <= 0:
            return np.zeros((max(height, 0), max(width, 0)), dtype=np.uint8)

        g = _as_2d(gray, width, height)
        result = g.copy()
        if width < 3 or height < 3:
            return result

        filtered = cv2.filter2D(g.astype(np.float32), cv2.CV_32F, SHARPEN_KERNEL)
        result[1:-1, 1:-1] = np.clip(filtered[1:-1, 1:-1], 0, 255).astype(np.uint8)
        return result

    @staticmethod
    def contrast_stretch(
        gray: np.ndarray,
        min_percent: float = STRETCH_MIN_PERCENT,
        max_percent: float = STRETCH_MAX_PERCENT,
    ) -> np.ndarray:
        """
        Linear remap so the `min_percent` percentile goes to 0 and the
        `max_percent` percentile to 255. Percentiles are floor-indexed into the
        sorted values. A flat (or empty) image is returned as is.
        """
        gray = np.asarray(gray, dtype=np.uint8)
        n = gray.size
        if n == 0:
            return gray

        ordered = np.sort(gray, axis=None)
        low = int(ordered[min(math.floor(n * min_percent / 100), n - 1)])
        high = int(ordered[min(math.floor(n * max_percent / 100), n - 1)])
        if high == low:
            return gray

        stretched = (gray.astype(np.float64) - low) / (high - low) * 255
        return np.clip(_round_half_up(stretched), 0, 255).astype(np.uint8)

    @staticmethod
    def gray_to_rgba(gray: np.ndarray, width: int, height: int) -> Image:
        """Replicate intensity into R, G and B with an opaque alpha channel."""
        g = _as_2d(gray, width, height)
        rgba = np.empty((height, width, 4), dtype=np.uint8)
        rgba[..., :3] = g[..., None]
        rgba[..., 3] = 255
        return Image(pixels=rgba)

    # ─── Recipes ───────────────────────────────────────────────────
    def _recipes(self, gray: np.ndarray, width: int, height: int) -> List[Callable[[], np.ndarray]]:
        return [
            # contrast stretch + Otsu: best all-rounder for uneven lighting
            lambda: self._otsu_binarize(self.contrast_stretch(gray)),
            # local threshold: strong lighting gradients
            lambda: self.adaptive_threshold(gray, width, height, ADAPTIVE_BLOCK_SIZE, ADAPTIVE_C),
            # sharpen + Otsu: blurry captures
            lambda: self._otsu_binarize(self.sharpen(gray, width, height)),
            # plain Otsu: clean images
            lambda: self._otsu_binarize(gray),
        ]

    def _otsu_binarize(self, gray: np.ndarray) -> np.ndarray:
        return self.binarize(gray, self.otsu_threshold(gray))

    def iter_recipes(self, image: Image) -> Iterator[EnhancedImage]:
        """
        Yield the four recipe outputs in trial order, computing each only
        when the caller asks for it. Nothing is yielded for a zero-area image.
        """
        if image.is_empty:
            return
        gray = self.grayscale(image)
        width, height = image.width, image.height

        for name, recipe in zip(RECIPE_NAMES, self._recipes(gray, width, height)):
            binary = recipe()
            if binary.size == 0:
                logger.debug(f"Recipe {name} produced an empty buffer, skipped")
                continue
            yield EnhancedImage(image=self.gray_to_rgba(binary, width, height), recipe=name)

    def preprocess_image(self, image: Image) -> List[EnhancedImage]:
        """
        All four binary candidates for `image`, in trial order:
        method1 stretch+Otsu, method2 adaptive, method3 sharpen+Otsu, method4 Otsu.
        """
        return list(self.iter_recipes(image))

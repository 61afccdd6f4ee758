"""
Region search: decides where in a photo, and at what scale, to look for a
QR code, and maps whatever the decoder finds back to original pixels.

Search order (first success wins):
    A. fine sliding window over the bottom-right quadrant
    B. coarse named regions (quadrants, centre, whole image)
    C. whole image resampled at 1.5x, 2x, 0.75x, 0.5x
"""
from __future__ import annotations

from typing import Iterator, Optional, Tuple
import logging
import math

from ..exceptions import DecoderUnavailableError
from ..models.decoded_symbol import DecodedSymbol
from ..models.image import Image
from ..models.qr_decoder import InversionMode, QRDecoder
from ..models.region import SEARCH_REGIONS, PixelRect
from ..models.scan_outcome import ScanOutcome, ScanStatus
from .image_service import ImageService
from .qr_decoding_service import QRDecodingService

logger = logging.getLogger(__name__)

# Phase A geometry, as fractions of the image size.
WINDOW_FRACTION = 0.25
STEP_FRACTION = 0.15
SCAN_LIMIT_FRACTION = 0.5  # window never moves above/left of the centre
SLIDING_WINDOW_NAME = "bottom-right sliding window"

# Phase C: enlargements first, then reductions.
SCALES = (1.5, 2.0, 0.75, 0.5)
MIN_SCALED_DIMENSION = 100  # decoder is unreliable below this


class _CountingDecoder:
    """Wraps a decoder to count calls made during one search."""

    def __init__(self, decoder: QRDecoder):
        self.decoder = decoder
        self.calls = 0

    def __call__(self, pixels, width, height, inversion=InversionMode.ATTEMPT_BOTH):
        self.calls += 1
        return self.decoder(pixels, width, height, inversion)


class RegionSearchService:
    """
    Single-threaded, deterministic QR search over crops and rescalings.

    The decoder is injected; None means no decoder is available, which is
    reported as ScanStatus.DECODER_UNAVAILABLE rather than as a miss.
    """

    def __init__(
        self,
        decoder: QRDecoder | None,
        image_service: ImageService | None = None,
        decoding_service: QRDecodingService | None = None,
    ):
        self.decoder = decoder
        self.image_service = image_service or ImageService()
        self.decoding_service = decoding_service or QRDecodingService()

    # ─── Candidate generation ──────────────────────────────────────
    @staticmethod
    def sliding_windows(img_width: int, img_height: int) -> Iterator[PixelRect]:
        """
        Phase A windows, from the bottom-right corner backwards (x first,
        then y) until the window's top-left would cross the image centre.
        """
        win_w = math.floor(img_width * WINDOW_FRACTION)
        win_h = math.floor(img_height * WINDOW_FRACTION)
        step_x = math.floor(img_width * STEP_FRACTION)
        step_y = math.floor(img_height * STEP_FRACTION)
        start_x = math.floor(img_width * SCAN_LIMIT_FRACTION)
        start_y = math.floor(img_height * SCAN_LIMIT_FRACTION)

        if step_x <= 0 or step_y <= 0:
            # Image too small for a fine scan; the coarse regions still cover it.
            return

        y = img_height - win_h
        while y >= start_y:
            x = img_width - win_w
            while x >= start_x:
                width = min(win_w, img_width - x)
                height = min(win_h, img_height - y)
                if width > 0 and height > 0:
                    yield PixelRect(x, y, width, height)
                x -= step_x
            y -= step_y

    @staticmethod
    def named_regions(img_width: int, img_height: int) -> Iterator[Tuple[str, PixelRect]]:
        for region in SEARCH_REGIONS:
            yield region.name, region.resolve(img_width, img_height)

    @staticmethod
    def candidate_scales(img_width: int, img_height: int) -> Iterator[float]:
        for scale in SCALES:
            if (math.floor(img_width * scale) < MIN_SCALED_DIMENSION
                    or math.floor(img_height * scale) < MIN_SCALED_DIMENSION):
                continue
            yield scale

    # ─── Phases ────────────────────────────────────────────────────
    def _try_rect(
        self, image: Image, rect: PixelRect, name: str, decoder: QRDecoder
    ) -> Optional[DecodedSymbol]:
        if rect.is_empty:
            return None
        crop = self.image_service.crop(image, rect)
        logger.debug(f"Trying {name} at ({rect.x},{rect.y}) {rect.width}x{rect.height}")
        symbol = self.decoding_service.try_decode(crop, decoder)
        if symbol is None:
            return None
        # Decoder corners are local to the crop.
        return symbol.translated(rect.x, rect.y).with_provenance(region_name=name)

    def scan_regions(self, image: Image, decoder: QRDecoder | None = None) -> Optional[DecodedSymbol]:
        """Phases A and B."""
        decoder = decoder if decoder is not None else self.decoder

        for rect in self.sliding_windows(image.width, image.height):
            symbol = self._try_rect(image, rect, SLIDING_WINDOW_NAME, decoder)
            if symbol is not None:
                return symbol

        for name, rect in self.named_regions(image.width, image.height):
            symbol = self._try_rect(image, rect, name, decoder)
            if symbol is not None:
                return symbol

        return None

    def scan_multi_scale(self, image: Image, decoder: QRDecoder | None = None) -> Optional[DecodedSymbol]:
        """Phase C."""
        decoder = decoder if decoder is not None else self.decoder

        for scale in self.candidate_scales(image.width, image.height):
            scaled = self.image_service.resize(image, scale)
            logger.debug(f"Trying whole image at scale {scale} ({scaled.width}x{scaled.height})")
            symbol = self.decoding_service.try_decode(scaled, decoder)
            # A scaled hit without corners cannot be mapped back; try the next scale.
            if symbol is not None and symbol.location is not None:
                return symbol.scaled(1.0 / scale).with_provenance(scale=scale)

        return None

    # ─── Public API ────────────────────────────────────────────────
    def search(self, image: Image) -> ScanOutcome:
        """
        Run phases A, B and C in order and return the first hit.

        Raises ValueError for a missing or zero-area image; never raises for
        "no QR code in this image".
        """
        if image is None:
            raise ValueError("search() needs an image")
        if image.is_empty:
            raise ValueError(f"Cannot search a {image.width}x{image.height} image")

        rgba = self.image_service.to_rgba(image)
        if self.decoder is None:
            return self._unavailable("No QR decoder was provided", attempts=0)

        counting = _CountingDecoder(self.decoder)
        try:
            symbol = self.scan_regions(rgba, counting)
            if symbol is None:
                symbol = self.scan_multi_scale(rgba, counting)
        except DecoderUnavailableError as err:
            return self._unavailable(str(err), attempts=counting.calls)

        if symbol is None:
            logger.info(
                f"No QR code in {rgba.width}x{rgba.height} image after {counting.calls} decode attempts"
            )
            return ScanOutcome(status=ScanStatus.NOT_FOUND, attempts=counting.calls)

        logger.info(
            f"QR code found (region={symbol.region_name}, recipe={symbol.recipe}, "
            f"scale={symbol.scale}) after {counting.calls} decode attempts"
        )
        return ScanOutcome(status=ScanStatus.FOUND, symbol=symbol, attempts=counting.calls)

    @staticmethod
    def _unavailable(reason: str, attempts: int) -> ScanOutcome:
        logger.error(f"QR decoder unavailable, search aborted: {reason}")
        return ScanOutcome(
            status=ScanStatus.DECODER_UNAVAILABLE,
            attempts=attempts,
            diagnostic=reason,
        )

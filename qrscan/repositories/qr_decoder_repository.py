from __future__ import annotations
from typing import Optional

import cv2
import numpy as np

from ..models.decoded_symbol import DecodedSymbol, Point, SymbolLocation
from ..models.qr_decoder import InversionMode
from ..models.qr_decoder_engine import QRDecoderEngine


class OpenCVQRDecoder:
    """
    Default QRDecoder backed by QRDecoderEngine.

    The engine is created on first call, so a missing OpenCV QR module shows up
    as DecoderUnavailableError at decode time rather than at import.
    """

    FORMAT = "QR Code"

    def __init__(self):
        self._engine: QRDecoderEngine | None = None

    @property
    def engine(self) -> QRDecoderEngine:
        if self._engine is None:
            self._engine = QRDecoderEngine()  # Singleton is handled inside
        return self._engine

    @staticmethod
    def _to_gray(pixels: np.ndarray) -> np.ndarray:
        if pixels.ndim == 2:
            return pixels
        if pixels.shape[2] == 4:
            return cv2.cvtColor(pixels, cv2.COLOR_RGBA2GRAY)
        return cv2.cvtColor(pixels, cv2.COLOR_RGB2GRAY)

    @staticmethod
    def _location(corners: np.ndarray | None) -> SymbolLocation | None:
        if corners is None or len(corners) != 4:
            return None
        tl, tr, br, bl = (Point(float(x), float(y)) for x, y in corners)
        return SymbolLocation(top_left=tl, top_right=tr, bottom_left=bl, bottom_right=br)

    def __call__(
        self,
        pixels: np.ndarray,
        width: int,
        height: int,
        inversion: InversionMode = InversionMode.ATTEMPT_BOTH,
    ) -> Optional[DecodedSymbol]:
        gray = self._to_gray(pixels[:height, :width])

        variants = []
        if inversion is not InversionMode.ONLY_INVERT:
            variants.append(gray)
        if inversion is not InversionMode.DONT_INVERT:
            variants.append(255 - gray)

        for variant in variants:
            text, corners = self.engine.detect(variant)
            if text:
                return DecodedSymbol(text=text, format=self.FORMAT, location=self._location(corners))
        return None

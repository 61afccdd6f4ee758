# models/qr_decoder_engine.py
"""
Singleton wrapper around OpenCV's QR code detector.

• Builds the cv2.QRCodeDetector once per Python process.
• Exposes .detect(gray)  →  (text, corners) with corners (4, 2) float32 or None.
"""
from __future__ import annotations
import logging
import cv2
import numpy as np

from ..exceptions import DecoderUnavailableError

logger = logging.getLogger(__name__)


class QRDecoderEngine:
    _instance: "QRDecoderEngine" | None = None

    def __new__(cls):
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._init_runtime()
            cls._instance = instance
        return cls._instance

    # --------------------------------------------------
    def _init_runtime(self) -> None:
        detector_cls = getattr(cv2, "QRCodeDetector", None)
        if detector_cls is None:
            raise DecoderUnavailableError(
                f"OpenCV {cv2.__version__} was built without QR code support"
            )
        self._detector = detector_cls()
        logger.info(f"QR decoder engine ready (OpenCV {cv2.__version__})")

    # --------------------------------------------------
    def detect(self, gray: np.ndarray) -> tuple[str, np.ndarray | None]:
        """
        Args
        ----
        gray : np.ndarray  (H, W)  uint8

        Returns
        -------
        text : str  empty when nothing was decoded
        corners : np.ndarray  (4, 2)  TL, TR, BR, BL  or None
        """
        try:
            text, points, _ = self._detector.detectAndDecode(gray)
        except cv2.error as err:
            # OpenCV raises on degenerate finder-pattern geometry; treat as a miss.
            logger.debug(f"cv2.QRCodeDetector failed on {gray.shape}: {err}")
            return "", None
        if points is None:
            return text or "", None
        return text or "", np.asarray(points, dtype=np.float32).reshape(-1, 2)

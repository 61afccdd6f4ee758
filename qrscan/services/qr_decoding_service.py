from __future__ import annotations
from typing import Optional
import logging

from ..exceptions import DecoderUnavailableError
from ..models.decoded_symbol import DecodedSymbol
from ..models.image import Image
from ..models.qr_decoder import InversionMode, QRDecoder
from .image_enhancement_service import ImageEnhancementService

logger = logging.getLogger(__name__)


class QRDecodingService:
    """
    Runs one image through every enhancement recipe and asks the decoder
    about each result, stopping at the first hit.
    """

    def __init__(self, enhancement_service: ImageEnhancementService | None = None):
        self.enhancement_service = enhancement_service or ImageEnhancementService()

    def try_decode(self, image: Image, decoder: QRDecoder | None) -> Optional[DecodedSymbol]:
        """
        Returns the first decoded symbol (tagged with its recipe) or None.

        Raises DecoderUnavailableError when there is no decoder to call.
        """
        if decoder is None:
            raise DecoderUnavailableError("No QR decoder was provided")
        if image.is_empty:
            return None

        for candidate in self.enhancement_service.iter_recipes(image):
            cand_img = candidate.image
            if cand_img.is_empty:
                continue
            symbol = decoder(cand_img.pixels, cand_img.width, cand_img.height, InversionMode.ATTEMPT_BOTH)
            if symbol is not None:
                logger.debug(f"Decoded {cand_img.width}x{cand_img.height} buffer with {candidate.recipe}")
                return symbol.with_provenance(recipe=candidate.recipe)
        return None

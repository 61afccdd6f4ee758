from __future__ import annotations
from enum import Enum
from typing import Optional, Protocol

import numpy as np

from .decoded_symbol import DecodedSymbol


class InversionMode(Enum):
    """Which polarities the decoder should try in a single call."""
    DONT_INVERT = "dontInvert"
    ONLY_INVERT = "onlyInvert"
    ATTEMPT_BOTH = "attemptBoth"


class QRDecoder(Protocol):
    """
    Decoder capability consumed by the search.

    Takes an RGBA uint8 array (H, W, 4) with its dimensions and returns the
    decoded symbol, corners in the coordinate space of that array, or None.
    Implementations raise DecoderUnavailableError when they cannot run at all.
    """

    def __call__(
        self,
        pixels: np.ndarray,
        width: int,
        height: int,
        inversion: InversionMode = InversionMode.ATTEMPT_BOTH,
    ) -> Optional[DecodedSymbol]:
        ...

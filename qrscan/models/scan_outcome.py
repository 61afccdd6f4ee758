from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from .decoded_symbol import DecodedSymbol


class ScanStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    DECODER_UNAVAILABLE = "decoder_unavailable"


@dataclass(frozen=True)
class ScanOutcome:
    """
    What a search returns. Not-found is a normal outcome, never an exception;
    DECODER_UNAVAILABLE also carries no symbol but keeps a diagnostic.
    """
    status: ScanStatus
    symbol: DecodedSymbol | None = None
    attempts: int = 0               # decoder calls made
    diagnostic: str | None = None

    @property
    def found(self) -> bool:
        return self.status is ScanStatus.FOUND and self.symbol is not None

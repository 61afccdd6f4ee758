"""
QR Scanner Pipeline
Caller-facing entrypoints: acquire an image, run the region search, and
turn the outcome into something a UI or API can print.

Load failures raise ImageLoadError; "no QR code" is a normal ScanOutcome.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Union
import logging

from ..models.image import Image
from ..models.scan_outcome import ScanOutcome, ScanStatus
from ..repositories.qr_decoder_repository import OpenCVQRDecoder
from ..services.image_service import ImageService
from ..services.region_search_service import RegionSearchService

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "QR Code"


def default_search_service() -> RegionSearchService:
    """Region search wired to the bundled OpenCV decoder."""
    return RegionSearchService(decoder=OpenCVQRDecoder())


def scan_image(
    image: Image,
    *,
    search_service: RegionSearchService | None = None,
) -> ScanOutcome:
    """
    Search an in-memory image for a QR code.

    Args:
        image: Source pixels (RGBA, RGB or grayscale)
        search_service: Search to run; defaults to the OpenCV-backed one

    Returns:
        ScanOutcome; corners (if any) are in `image`'s pixel space
    """
    search_service = search_service or default_search_service()
    return search_service.search(image)


def scan_file(
    path: Union[str, Path],
    *,
    image_service: ImageService | None = None,
    search_service: RegionSearchService | None = None,
) -> ScanOutcome:
    image_service = image_service or ImageService()
    image = image_service.load(path)
    logger.info(f"Scanning {path} ({image.width}x{image.height})")
    return scan_image(image, search_service=search_service)


def scan_bytes(
    data: bytes,
    *,
    source: str = "<upload>",
    image_service: ImageService | None = None,
    search_service: RegionSearchService | None = None,
) -> ScanOutcome:
    image_service = image_service or ImageService()
    image = image_service.load_bytes(data, source=source)
    logger.info(f"Scanning {source} ({image.width}x{image.height})")
    return scan_image(image, search_service=search_service)


def scan_url(
    url: str,
    *,
    image_service: ImageService | None = None,
    search_service: RegionSearchService | None = None,
) -> ScanOutcome:
    if not url:
        raise ValueError("Image URL is empty")
    image_service = image_service or ImageService()
    image = image_service.load_url(url)
    logger.info(f"Scanning {url} ({image.width}x{image.height})")
    return scan_image(image, search_service=search_service)


def describe_method(outcome: ScanOutcome) -> str | None:
    """Human-readable name of the search step that found the code."""
    symbol = outcome.symbol
    if not outcome.found:
        return None
    if symbol.scale is not None:
        return f"multi-scale scan (scale: {symbol.scale:g})"
    return f"region scan ({symbol.region_name or 'unknown region'})"


def describe(outcome: ScanOutcome) -> Dict[str, Any]:
    """
    Presentation-ready summary of a scan outcome.

    `kind` is "success", "info" (nothing found) or "error" (no decoder).
    """
    if outcome.found:
        symbol = outcome.symbol
        method = describe_method(outcome)
        return {
            "found": True,
            "status": outcome.status.value,
            "kind": "success",
            "message": f"Decoded successfully via {method} ({symbol.recipe})",
            "method": method,
            "recipe": symbol.recipe,
            "region": symbol.region_name,
            "scale": symbol.scale,
            "text": symbol.text,
            "format": symbol.format or DEFAULT_FORMAT,
            "corners": symbol.location.to_dict() if symbol.location else None,
            "attempts": outcome.attempts,
        }

    if outcome.status is ScanStatus.DECODER_UNAVAILABLE:
        kind = "error"
        message = f"QR decoder unavailable: {outcome.diagnostic}"
    else:
        kind = "info"
        message = "No QR code detected. Tried region scan and multi-scale scan."

    return {
        "found": False,
        "status": outcome.status.value,
        "kind": kind,
        "message": message,
        "attempts": outcome.attempts,
    }

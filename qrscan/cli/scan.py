"""
Command-line QR scanner.

    qrscan photo.jpg
    qrscan ./photos --recursive --json
    qrscan https://example.com/poster.png

Exit status: 0 every source decoded, 1 at least one had no QR code (or no
decoder), 2 at least one source could not be loaded.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Sequence

from tqdm import tqdm

from ..config import LOG_DATEFMT, LOG_FORMAT, log_level
from ..exceptions import ImageLoadError
from ..pipeline.qr_scanner import default_search_service, describe, scan_file, scan_url
from ..services.image_service import ImageService
from ..services.region_search_service import RegionSearchService

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_LOAD_ERROR = 2


def _is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qrscan",
        description="Find and decode a QR code in photographs.",
    )
    parser.add_argument("sources", nargs="+", help="Image files, directories or http(s) URLs")
    parser.add_argument("-r", "--recursive", action="store_true", help="Descend into subdirectories")
    parser.add_argument("--json", action="store_true", help="Print one JSON object per source")
    return parser


def scan_source(
    source: str,
    image_service: ImageService,
    search_service: RegionSearchService,
) -> Dict:
    """Scan one file or URL and return its printable summary."""
    try:
        if _is_url(source):
            outcome = scan_url(source, image_service=image_service, search_service=search_service)
        else:
            outcome = scan_file(source, image_service=image_service, search_service=search_service)
    except ImageLoadError as err:
        logger.error(f"Could not load {source}: {err}")
        return {"source": source, "found": False, "status": "load_error", "kind": "error",
                "message": str(err)}

    summary = describe(outcome)
    summary["source"] = source
    return summary


def expand_sources(sources: Sequence[str], image_service: ImageService, recursive: bool) -> List[str]:
    expanded: List[str] = []
    for source in sources:
        if not _is_url(source) and Path(source).is_dir():
            paths = image_service.list_gallery(source, recursive=recursive)
            if not paths:
                logger.warning(f"No images found in {source}")
            expanded.extend(str(p) for p in paths)
        else:
            expanded.append(source)
    return expanded


def _print_summary(summary: Dict, as_json: bool) -> None:
    if as_json:
        print(json.dumps(summary, ensure_ascii=False))
        return
    if summary.get("found"):
        print(f"{summary['source']}: {summary['text']}")
        print(f"    {summary['message']}")
    else:
        print(f"{summary['source']}: {summary['message']}")


def main(argv: Sequence[str] | None = None) -> int:
    logging.basicConfig(level=log_level(), format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    args = build_parser().parse_args(argv)

    image_service = ImageService()
    search_service = default_search_service()
    sources = expand_sources(args.sources, image_service, args.recursive)

    exit_code = EXIT_OK
    progress = tqdm(sources, desc="scan", ncols=70, disable=len(sources) < 2, file=sys.stderr)
    for source in progress:
        summary = scan_source(source, image_service, search_service)
        _print_summary(summary, args.json)
        if summary["status"] == "load_error":
            exit_code = EXIT_LOAD_ERROR
        elif not summary["found"] and exit_code == EXIT_OK:
            exit_code = EXIT_NOT_FOUND

    return exit_code


if __name__ == "__main__":
    sys.exit(main())

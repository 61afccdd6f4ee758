"""
QR Region Scanner

Finds and decodes a QR code inside an arbitrary photograph by searching
likely sub-regions and scales, and cleaning up each candidate with a fixed
set of binarisation recipes before handing it to a QR decoder.

Usage:
    from qrscan.pipeline.qr_scanner import scan_file

    outcome = scan_file("photo.jpg")
    if outcome.found:
        print(outcome.symbol.text, outcome.symbol.region_name)
"""

__version__ = "1.0.0"

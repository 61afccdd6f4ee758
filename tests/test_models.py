"""
Tests for the value objects.
"""
import dataclasses

import numpy as np
import pytest

from qrscan.models.decoded_symbol import DecodedSymbol, Point, SymbolLocation
from qrscan.models.image import Image
from qrscan.models.region import SEARCH_REGIONS, PixelRect, Region
from qrscan.models.scan_outcome import ScanOutcome, ScanStatus


def _location():
    return SymbolLocation(
        top_left=Point(10, 20),
        top_right=Point(30, 20),
        bottom_left=Point(10, 40),
        bottom_right=Point(30, 40),
    )


class TestImage:

    def test_dimensions(self):
        img = Image(pixels=np.zeros((3, 5, 4), dtype=np.uint8))
        assert (img.width, img.height, img.channels) == (5, 3, 4)
        assert not img.is_empty

    def test_gray_channels(self):
        assert Image(pixels=np.zeros((2, 2), dtype=np.uint8)).channels == 1

    def test_empty(self):
        assert Image(pixels=np.zeros((0, 4, 4), dtype=np.uint8)).is_empty

    def test_frozen(self):
        img = Image(pixels=np.zeros((1, 1, 4), dtype=np.uint8))
        with pytest.raises(dataclasses.FrozenInstanceError):
            img.pixels = None


class TestRegion:

    def test_resolve_floors(self):
        rect = Region("r", 0.25, 0.5, 0.5, 0.25).resolve(99, 33)
        assert rect == PixelRect(24, 16, 49, 8)

    def test_catalog_order(self):
        assert [r.name for r in SEARCH_REGIONS] == [
            "right-bottom", "right-top", "left-bottom", "left-top", "center", "whole image",
        ]

    def test_empty_rect(self):
        assert PixelRect(0, 0, 0, 10).is_empty
        assert not PixelRect(0, 0, 1, 1).is_empty


class TestDecodedSymbol:

    def test_translated_returns_new_record(self):
        symbol = DecodedSymbol(text="hi", location=_location())
        moved = symbol.translated(5, 7)
        assert moved is not symbol
        assert symbol.location.top_left == Point(10, 20)
        assert moved.location.top_left == Point(15, 27)
        assert moved.location.bottom_right == Point(35, 47)

    def test_scaled(self):
        symbol = DecodedSymbol(text="hi", location=_location())
        assert symbol.scaled(0.5).location.bottom_left == Point(5, 20)

    def test_without_location_is_untouched(self):
        symbol = DecodedSymbol(text="hi")
        assert symbol.translated(3, 3) is symbol
        assert symbol.scaled(2) is symbol

    def test_with_provenance(self):
        symbol = DecodedSymbol(text="hi").with_provenance(region_name="center", recipe="method2")
        assert (symbol.region_name, symbol.recipe, symbol.scale) == ("center", "method2", None)

    def test_to_dict(self):
        data = DecodedSymbol(text="hi", location=_location(), scale=2.0).to_dict()
        assert data["text"] == "hi"
        assert data["format"] == "QR Code"
        assert data["location"]["top_right"] == {"x": 30, "y": 20}
        assert data["scale"] == 2.0


class TestScanOutcome:

    def test_found_requires_symbol(self):
        assert ScanOutcome(status=ScanStatus.FOUND, symbol=DecodedSymbol(text="x")).found
        assert not ScanOutcome(status=ScanStatus.NOT_FOUND).found
        assert not ScanOutcome(status=ScanStatus.DECODER_UNAVAILABLE, diagnostic="gone").found

"""
Tests for image acquisition and geometry helpers.
"""
import numpy as np
import pytest
import requests

from qrscan.exceptions import ImageLoadError
from qrscan.models.image import Image
from qrscan.models.region import PixelRect
from qrscan.repositories import image_repository
from qrscan.repositories.image_repository import ImageRepository

from helpers import png_bytes, white_with_black_square


class _FakeResponse:

    def __init__(self, payload: bytes, status: int = 200):
        self.payload = payload
        self.status = status
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.payload), chunk_size):
            yield self.payload[i:i + chunk_size]


class TestImageRepository:

    def setup_method(self):
        self.repo = ImageRepository()
        self.image = white_with_black_square(40, 30, 10, 10, 20, 20)

    def test_load_png_as_rgba(self, tmp_path):
        path = tmp_path / "code.png"
        path.write_bytes(png_bytes(self.image))
        loaded = self.repo.load(path)
        assert loaded.pixels.shape == (30, 40, 4)
        assert loaded.path == path
        assert loaded.pixels[15, 15, 0] == 0
        assert loaded.pixels[0, 0, 0] == 255

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ImageLoadError):
            self.repo.load(tmp_path / "missing.png")

    def test_load_corrupt_file(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"definitely not an image")
        with pytest.raises(ImageLoadError):
            self.repo.load(path)

    def test_load_bytes(self):
        loaded = self.repo.load_bytes(png_bytes(self.image))
        assert np.array_equal(loaded.pixels, self.image.pixels)

    def test_load_empty_bytes(self):
        with pytest.raises(ImageLoadError):
            self.repo.load_bytes(b"")

    def test_load_url(self, monkeypatch):
        payload = png_bytes(self.image)
        seen = {}

        def fake_get(url, timeout, stream):
            seen["url"] = url
            seen["response"] = _FakeResponse(payload)
            return seen["response"]

        monkeypatch.setattr(image_repository.requests, "get", fake_get)
        loaded = self.repo.load_url("https://example.com/code.png")
        assert loaded.pixels.shape == (30, 40, 4)
        assert seen["url"] == "https://example.com/code.png"
        assert seen["response"].closed

    def test_load_url_network_error(self, monkeypatch):
        def fake_get(url, timeout, stream):
            raise requests.ConnectionError("unreachable")

        monkeypatch.setattr(image_repository.requests, "get", fake_get)
        with pytest.raises(ImageLoadError):
            self.repo.load_url("https://example.com/code.png")

    def test_load_url_http_error(self, monkeypatch):
        monkeypatch.setattr(image_repository.requests, "get",
                            lambda url, timeout, stream: _FakeResponse(b"", status=404))
        with pytest.raises(ImageLoadError):
            self.repo.load_url("https://example.com/missing.png")

    def test_load_url_too_large(self, monkeypatch):
        monkeypatch.setenv("MAX_URL_IMAGE_MB", "0")
        monkeypatch.setattr(image_repository.requests, "get",
                            lambda url, timeout, stream: _FakeResponse(png_bytes(self.image)))
        with pytest.raises(ImageLoadError):
            self.repo.load_url("https://example.com/big.png")

    def test_list_dir_filters_extensions(self, tmp_path):
        (tmp_path / "a.png").write_bytes(png_bytes(self.image))
        (tmp_path / "b.JPG").write_bytes(b"x")
        (tmp_path / "notes.txt").write_text("no")
        sub = tmp_path / "sub"
        sub.mkdir()
        (sub / "c.png").write_bytes(png_bytes(self.image))

        assert [p.name for p in self.repo.list_dir(tmp_path)] == ["a.png", "b.JPG"]
        assert len(self.repo.list_dir(tmp_path, recursive=True)) == 3


class TestImageService:

    def test_crop_copies_pixels(self, image_service):
        image = white_with_black_square(40, 30, 10, 10, 20, 20)
        crop = image_service.crop(image, PixelRect(5, 5, 10, 10))
        assert crop.pixels.shape == (10, 10, 4)
        crop.pixels[...] = 7
        assert image.pixels[5, 5, 0] == 255

    def test_crop_clips_to_bounds(self, image_service):
        image = white_with_black_square(40, 30, 10, 10, 20, 20)
        crop = image_service.crop(image, PixelRect(30, 20, 50, 50))
        assert (crop.width, crop.height) == (10, 10)

    def test_crop_empty_rejected(self, image_service):
        image = white_with_black_square(40, 30, 10, 10, 20, 20)
        with pytest.raises(ValueError):
            image_service.crop(image, PixelRect(10, 10, 0, 5))

    def test_resize(self, image_service):
        image = white_with_black_square(200, 100, 10, 10, 20, 20)
        assert image_service.resize(image, 1.5).pixels.shape == (150, 300, 4)
        assert image_service.resize(image, 0.75).pixels.shape == (75, 150, 4)

    def test_to_rgba(self, image_service):
        gray = Image(pixels=np.full((4, 5), 9, dtype=np.uint8))
        rgba = image_service.to_rgba(gray)
        assert rgba.pixels.shape == (4, 5, 4)
        assert (rgba.pixels[..., 3] == 255).all()
        rgb = Image(pixels=np.zeros((4, 5, 3), dtype=np.uint8))
        assert image_service.to_rgba(rgb).channels == 4


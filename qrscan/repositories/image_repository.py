from __future__ import annotations
from pathlib import Path
from typing import Iterable, List, Union
import io
import signal
import threading

import cv2
import numpy as np
import requests
from PIL import Image as PILImage, UnidentifiedImageError

from ..config import (
    image_load_timeout,
    max_url_image_bytes,
    url_fetch_timeout,
    valid_image_extensions,
)
from ..exceptions import ImageLoadError
from ..models.image import Image


class ImageRepository:
    """
    Handles image acquisition (disk, raw bytes, HTTP) into RGBA Image entities.
    Every failure surfaces as ImageLoadError.
    """
    def __init__(self):
        self.VALID_EXTS = valid_image_extensions()

    @staticmethod
    def _checked(pixels: np.ndarray, source: str) -> np.ndarray:
        if pixels.ndim < 2 or pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise ImageLoadError(f"Image has zero width or height: {source}")
        return pixels

    @staticmethod
    def _pil_to_rgba(pil_img: PILImage.Image) -> np.ndarray:
        if pil_img.mode != "RGBA":
            pil_img = pil_img.convert("RGBA")
        return np.ascontiguousarray(np.array(pil_img, dtype=np.uint8))

    @staticmethod
    def _read_with_timeout(path: Path, timeout: int) -> np.ndarray | None:
        # SIGALRM is only available on POSIX and only from the main thread.
        if not hasattr(signal, "SIGALRM") or threading.current_thread() is not threading.main_thread():
            return cv2.imread(str(path), cv2.IMREAD_COLOR)

        def _handler(signum, frame):
            raise TimeoutError(f"cv2.imread timed-out after {timeout}s: {path}")

        previous = signal.signal(signal.SIGALRM, _handler)
        signal.alarm(timeout)
        try:
            return cv2.imread(str(path), cv2.IMREAD_COLOR)
        finally:
            signal.alarm(0)  # always disarm
            signal.signal(signal.SIGALRM, previous)

    def load(self, path: Union[str, Path]) -> Image:
        path = Path(path)
        if not path.is_file():
            raise ImageLoadError(f"Image not found: {path}")

        try:
            arr_bgr = self._read_with_timeout(path, image_load_timeout())
        except TimeoutError as err:
            raise ImageLoadError(str(err)) from err

        if arr_bgr is not None:
            pixels = cv2.cvtColor(arr_bgr, cv2.COLOR_BGR2RGBA)
            return Image(pixels=self._checked(pixels, str(path)), path=path)

        # cv2 has no GIF reader; let Pillow try before giving up.
        try:
            with PILImage.open(path) as pil_img:
                pixels = self._pil_to_rgba(pil_img)
        except (UnidentifiedImageError, OSError) as err:
            raise ImageLoadError(f"Image unreadable: {path} ({err})") from err
        return Image(pixels=self._checked(pixels, str(path)), path=path)

    def load_bytes(self, data: bytes, source: str = "<bytes>") -> Image:
        if not data:
            raise ImageLoadError(f"No image data received from {source}")
        try:
            with PILImage.open(io.BytesIO(data)) as pil_img:
                pil_img.load()
                pixels = self._pil_to_rgba(pil_img)
        except (UnidentifiedImageError, OSError) as err:
            raise ImageLoadError(f"Not a readable image: {source} ({err})") from err
        return Image(pixels=self._checked(pixels, source))

    def load_url(self, url: str) -> Image:
        limit = max_url_image_bytes()
        try:
            with requests.get(url, timeout=url_fetch_timeout(), stream=True) as response:
                response.raise_for_status()
                chunks = []
                received = 0
                for chunk in response.iter_content(chunk_size=64 * 1024):
                    received += len(chunk)
                    if received > limit:
                        raise ImageLoadError(f"Remote image exceeds {limit} bytes: {url}")
                    chunks.append(chunk)
        except requests.RequestException as err:
            raise ImageLoadError(f"Failed to fetch image from {url}: {err}") from err
        return self.load_bytes(b"".join(chunks), source=url)

    def list_dir(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
    ) -> List[Path]:
        folder = Path(folder)
        if not folder.is_dir():
            raise NotADirectoryError(folder)

        allowed = {e.lower() for e in (exts or self.VALID_EXTS)}
        pattern = "**/*" if recursive else "*"
        return sorted(
            p for p in folder.glob(pattern)
            if p.is_file() and p.suffix.lower() in allowed
        )

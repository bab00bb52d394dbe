"""Pytest configuration: expose src/ for imports and provide tile fakes."""

import os
import sys
from typing import Dict, List, Optional, Tuple

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from tilelayer.interfaces.map_host import IImageFactory  # noqa: E402
from tilelayer.models.tile_image import TileImage  # noqa: E402
from tilelayer.services.tile_fetch_service import TileFetchService  # noqa: E402


class RecordingImageFactory(IImageFactory):
    """Image factory that records loads and lets tests complete them by hand"""

    def __init__(self):
        self.requests: List[Tuple[TileImage, str, Optional[str]]] = []
        self.removed: List[TileImage] = []

    def create_image(self) -> TileImage:
        return TileImage(loader=self)

    def remove(self, image: TileImage) -> None:
        image.parent = None
        self.removed.append(image)

    def enqueue(self, image: TileImage, src: str) -> None:
        self.requests.append((image, src, image.cross_origin))

    def srcs(self) -> List[str]:
        return [src for _, src, _ in self.requests]

    def succeed(self, image: TileImage, src: str, data: bytes = b"tile") -> None:
        """Deliver a load completion for the fetch of src"""
        if image.src == src:
            image.dispatch_load(data)

    def fail(self, image: TileImage, src: str, error: Optional[Exception] = None) -> None:
        """Deliver a load failure for the fetch of src"""
        if image.src == src:
            image.dispatch_error(error or Exception(f"failed {src}"))


class DummyResponse:
    def __init__(self, status_code: int, content: bytes):
        self.status_code = status_code
        self.content = content

    def raise_for_status(self):
        if not (200 <= self.status_code < 300):
            raise Exception(f"HTTP {self.status_code}")


class DummySession:
    def __init__(self, url_to_payload: Dict[str, bytes]):
        self.url_to_payload = url_to_payload
        self.requested: List[str] = []
        self.headers_seen: List[Dict[str, str]] = []

    def get(self, url, headers=None, timeout=None):
        self.requested.append(url)
        self.headers_seen.append(headers or {})
        payload = self.url_to_payload.get(url)
        if payload is None:
            return DummyResponse(404, b"")
        return DummyResponse(200, payload)


@pytest.fixture
def image_factory() -> RecordingImageFactory:
    return RecordingImageFactory()


@pytest.fixture
def make_fetch_service():
    """Build a TileFetchService whose HTTP session serves url_to_payload"""
    def factory(url_to_payload: Dict[str, bytes]):
        session = DummySession(url_to_payload)
        return TileFetchService(retry_attempts=1, timeout=5, session=session), session
    return factory

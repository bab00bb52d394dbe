from typing import Any, Callable, Optional

from tilelayer.models.geometry import TileCoordinate

# 1x1 transparent GIF; assigning it stops a pending fetch without triggering a new one
EMPTY_IMAGE_URL = 'data:image/gif;base64,R0lGODlhAQABAAD/ACwAAAAAAQABAAACADs='

PENDING = 'pending'
LOADED = 'loaded'
ERRORED = 'errored'


class TileImage:
    """Image-like resource issued for one tile.

    Mirrors the parts of a browser image element the tile layer relies on:
    assigning `src` starts a load through the owning loader, and the loader
    later calls `onload` or `onerror` on the same thread.
    """

    def __init__(self, loader: Any = None):
        self._loader = loader
        self._src = ''
        self.alt: Optional[str] = None
        self.cross_origin: Optional[str] = None
        self.onload: Optional[Callable[[], None]] = None
        self.onerror: Optional[Callable[[Exception], None]] = None
        self.complete = True
        self.state = PENDING
        self.data: Optional[bytes] = None
        self.parent: Any = None
        self.coords: Optional[TileCoordinate] = None

    @property
    def src(self) -> str:
        return self._src

    @src.setter
    def src(self, value: str) -> None:
        self._src = value
        self.complete = False
        if self._loader is not None:
            self._loader.enqueue(self, value)

    def dispatch_load(self, data: Optional[bytes] = None) -> None:
        """Mark loaded and notify the load handler, if still attached"""
        self.data = data
        self.complete = True
        self.state = LOADED
        if self.onload is not None:
            self.onload()

    def dispatch_error(self, error: Exception) -> None:
        """Mark errored and notify the error handler, if still attached"""
        self.complete = True
        self.state = ERRORED
        if self.onerror is not None:
            self.onerror(error)

    def __repr__(self) -> str:
        return f"TileImage(coords={self.coords}, src='{self._src}', state={self.state})"

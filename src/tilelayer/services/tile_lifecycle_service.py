"""
Tile load/error lifecycle.

Every tile image gets a load handler and an error handler that report to the
grid layer's completion callback exactly once. Failed tiles can be re-pointed
at a fallback image; tiles still in flight when a layer goes away have their
fetch abandoned and their handlers detached.
"""

import logging
from typing import Callable, Iterable, Optional

from tilelayer.interfaces.map_host import IImageFactory
from tilelayer.models.geometry import TileCoordinate
from tilelayer.models.layer_config import LayerConfig
from tilelayer.models.tile_image import EMPTY_IMAGE_URL, TileImage

logger = logging.getLogger(__name__)

DoneCallback = Callable[[Optional[Exception], TileImage], None]


class TileLifecycleController:
    """Binds tile images to their completion callback"""

    def __init__(self, config: LayerConfig, image_factory: IImageFactory):
        self.config = config
        self.image_factory = image_factory

    def create_tile(self, coords: TileCoordinate, done: DoneCallback, url: str) -> TileImage:
        tile = self.image_factory.create_image()
        tile.coords = coords

        tile.onload = lambda: self._tile_on_load(done, tile)
        tile.onerror = lambda error: self._tile_on_error(done, tile, error)

        # Must precede src: the fetch starts on assignment
        if self.config.cross_origin:
            tile.cross_origin = ''

        # Keeps assistive technology from reading out the URL
        tile.alt = ''

        tile.src = url

        return tile

    def _tile_on_load(self, done: DoneCallback, tile: TileImage) -> None:
        done(None, tile)

    def _tile_on_error(self, done: DoneCallback, tile: TileImage, error: Exception) -> None:
        error_url = self.config.error_tile_url
        if error_url:
            # One fallback attempt; its own outcome is not reported again
            tile.onload = None
            tile.onerror = lambda fallback_error: self._fallback_on_error(tile, fallback_error)
            tile.src = error_url
        done(error, tile)

    def _fallback_on_error(self, tile: TileImage, error: Exception) -> None:
        logger.warning(f"Error tile {self.config.error_tile_url} failed for {tile.coords}: {error}")

    def abort_loading(self, tiles: Iterable[TileImage]) -> None:
        """Stop all tiles still loading; safe to repeat"""
        for tile in tiles:
            tile.onload = None
            tile.onerror = None

            if not tile.complete:
                tile.src = EMPTY_IMAGE_URL
                self.image_factory.remove(tile)

    def on_tile_remove(self, tile: TileImage) -> None:
        """Detach the load handler of a tile leaving the visible set.

        The error handler stays attached so an error fallback already under
        way can still finish.
        """
        tile.onload = None

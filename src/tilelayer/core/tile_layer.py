"""
Standard xyz-numbered tile layer.

Example:
    >>> from tilelayer.core.map_state import MapState
    >>> from tilelayer.core.tile_layer import TileLayer
    >>> from tilelayer.models.geometry import LatLng
    >>> layer = TileLayer('https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png')
    >>> map_state = MapState(center=LatLng(41.0, 29.0), zoom=10)
    >>> map_state.add_layer(layer)
    >>> layer.image_factory.process_pending()
"""

import logging
from typing import Any, Dict, Optional, Union

from tilelayer.core.grid_layer import GridLayer
from tilelayer.infrastructure.platform import Platform
from tilelayer.interfaces.map_host import IImageFactory
from tilelayer.models.geometry import TileCoordinate
from tilelayer.models.layer_config import LayerConfig
from tilelayer.models.tile_image import TileImage
from tilelayer.services.crs_override import DEFAULT_OPERATIONS, CrsOverrideTransaction
from tilelayer.services.tile_fetch_service import TileFetchService
from tilelayer.services.tile_lifecycle_service import DoneCallback, TileLifecycleController
from tilelayer.services.url_resolver import UrlResolver

logger = logging.getLogger(__name__)


class TileLayer(GridLayer):
    """Tile layer loading images from a URL template"""

    def __init__(self, url: str, options: Union[LayerConfig, Dict[str, Any], None] = None,
                 platform: Optional[Platform] = None, image_factory: Optional[IImageFactory] = None):
        platform = platform or Platform()
        config = options if isinstance(options, LayerConfig) else LayerConfig.from_options(options)
        config = config.apply_retina(platform.retina)
        super().__init__(config)

        self._url = url
        self.platform = platform
        self.image_factory = image_factory or TileFetchService()
        self.url_resolver = UrlResolver(config, platform)
        self.lifecycle = TileLifecycleController(config, self.image_factory)
        self.crs_transaction: Optional[CrsOverrideTransaction] = None

        if config.crs is not None:
            self._support_crs()

        # Android keeps firing load for evicted tiles
        if not platform.android:
            self.on('tileunload', self._on_tile_remove)

    def set_url(self, url: str, no_redraw: bool = False) -> 'TileLayer':
        self._url = url

        if not no_redraw:
            self.redraw()
        return self

    def get_url(self) -> str:
        return self._url

    def create_tile(self, coords: TileCoordinate, done: DoneCallback) -> TileImage:
        return self.lifecycle.create_tile(coords, done, self.get_tile_url(coords))

    def get_tile_url(self, coords: TileCoordinate) -> str:
        tile_zoom = self._tile_zoom if self._tile_zoom is not None else coords.z
        return self.url_resolver.resolve_url(self._url, coords, tile_zoom, self._global_tile_range)

    def _get_tile_size(self) -> int:
        if self._map is None or self._tile_zoom is None:
            return self.config.tile_size
        return self.url_resolver.tile_size(self._tile_zoom, self._map.get_zoom_scale)

    def _on_tile_remove(self, event: Dict[str, Any]) -> None:
        self.lifecycle.on_tile_remove(event['tile'])

    def _detach(self, tile: TileImage) -> None:
        self.image_factory.remove(tile)

    def _abort_loading(self) -> None:
        """Stop loading every tile of this layer still in flight"""
        self.lifecycle.abort_loading(self.get_tiles())

    def _support_crs(self) -> None:
        self.crs_transaction = CrsOverrideTransaction(self.config.crs, lambda: self._map)
        self.crs_transaction.install(self, DEFAULT_OPERATIONS)
        logger.debug(f"Layer {self._url} renders in {self.config.crs.code}")

    def __repr__(self) -> str:
        return f"TileLayer(url='{self._url}')"


def tile_layer(url: str, options: Optional[Dict[str, Any]] = None, **kwargs) -> TileLayer:
    return TileLayer(url, options, **kwargs)

"""
Tile URL derivation.

Turns a tile coordinate into the URL of its image: retina suffix, subdomain
shard, TMS row flip, effective zoom (reversal, offset, native clamp) and
template substitution. Also decides the rendered tile size when tiles are
overscaled beyond the native zoom.
"""

import logging
from typing import Any, Callable, Dict, Optional

from tilelayer.infrastructure.platform import Platform
from tilelayer.models.geometry import Bounds, TileCoordinate, round_half_up
from tilelayer.models.layer_config import LayerConfig
from tilelayer.utils.template_utils import TemplateUtils

logger = logging.getLogger(__name__)


class UrlResolver:
    """Resolve tile URLs for one layer configuration"""

    def __init__(self, config: LayerConfig, platform: Optional[Platform] = None):
        self.config = config
        self.platform = platform or Platform()

    def resolve_url(self, template: str, coords: TileCoordinate, tile_zoom: int,
                    global_tile_range: Optional[Bounds] = None) -> str:
        """Build the URL for coords at the layer's current tile zoom"""
        data: Dict[str, Any] = {
            'r': self.retina_suffix(),
            's': self.get_subdomain(coords),
            'x': coords.x,
            'y': self.get_row(coords, global_tile_range),
            'z': self.get_zoom_for_url(tile_zoom),
        }
        # Layer options win over computed values, as in the template contract
        data.update(self.config.template_values())
        return TemplateUtils.render(template, data)

    def retina_suffix(self) -> str:
        config = self.config
        if config.detect_retina and self.platform.retina and config.max_zoom > 0:
            return '@2x'
        return ''

    def get_subdomain(self, coords: TileCoordinate) -> str:
        """Same coordinate always maps to the same shard"""
        subdomains = self.config.subdomains
        index = abs(coords.x + coords.y) % len(subdomains)
        return subdomains[index]

    def get_row(self, coords: TileCoordinate, global_tile_range: Optional[Bounds]) -> int:
        if not self.config.tms:
            return coords.y
        if global_tile_range is None:
            # Without a known world extent assume the square pyramid of this zoom
            max_y = (1 << max(coords.z, 0)) - 1
            logger.debug(f"No global tile range for TMS flip of {coords}, assuming max y {max_y}")
        else:
            max_y = int(global_tile_range.max.y)
        return max_y - coords.y

    def get_zoom_for_url(self, tile_zoom: int) -> int:
        """Effective zoom substituted for {z}; never cached.

        A max_native_zoom of 0 clamps too: the option counts as set whenever
        it is not None, as in tile_size(). Leaflet tests it for truthiness here
        and so skips the clamp at 0.
        """
        config = self.config
        zoom = tile_zoom

        if config.zoom_reverse:
            zoom = config.max_zoom - zoom

        zoom += config.zoom_offset

        if config.max_native_zoom is not None:
            return min(zoom, config.max_native_zoom)
        return zoom

    def tile_size(self, tile_zoom: int, get_zoom_scale: Callable[[float, float], float]) -> int:
        """Rendered tile size, grown when overscaling past max_native_zoom.

        Args:
            tile_zoom: Zoom level the grid is rendered at
            get_zoom_scale: Map collaborator, scale factor from the second
                zoom argument to the first
        """
        config = self.config
        zoom = tile_zoom + config.zoom_offset
        native = config.max_native_zoom

        if native is not None and zoom > native:
            return round_half_up(config.tile_size / get_zoom_scale(native, zoom))
        return config.tile_size

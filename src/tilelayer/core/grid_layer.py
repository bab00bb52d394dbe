import functools
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from shapely.geometry import box
from shapely.prepared import prep

from tilelayer.core.events import Evented
from tilelayer.models.geometry import Bounds, Point, TileCoordinate, round_half_up
from tilelayer.models.layer_config import LayerConfig
from tilelayer.models.tile_image import TileImage

logger = logging.getLogger(__name__)


@dataclass
class TileRecord:
    """Data model for one tile held by the grid"""
    el: TileImage
    coords: TileCoordinate
    loaded: bool = False
    error: Optional[Exception] = None


class GridLayer(Evented):
    """Keeps the set of tiles covering the map view.

    Subclasses provide create_tile(); the grid decides which coordinates are
    needed, asks for their tiles and tracks completion. Events fired:
    tileloadstart, tileload, tileerror, tileunload, load.
    """

    def __init__(self, config: LayerConfig):
        super().__init__()
        self.config = config
        self._map = None
        self._tiles: Dict[str, TileRecord] = {}
        self._tile_zoom: Optional[int] = None
        self._global_tile_range: Optional[Bounds] = None
        self._bounds_area = prep(box(*config.bounds)) if config.bounds is not None else None

    def on_add(self, map_state) -> None:
        self._map = map_state
        self._reset()

    def on_remove(self, map_state) -> None:
        self._abort_loading()
        self._remove_all_tiles()
        self._map = None
        self._tile_zoom = None
        self._global_tile_range = None

    def redraw(self) -> 'GridLayer':
        if self._map is not None:
            self._remove_all_tiles()
            self._update()
        return self

    def create_tile(self, coords: TileCoordinate, done) -> TileImage:
        raise NotImplementedError

    def get_tiles(self) -> List[TileImage]:
        return [record.el for record in self._tiles.values()]

    def is_loading(self) -> bool:
        return any(not record.loaded for record in self._tiles.values())

    def _reset(self) -> None:
        """Recompute tile zoom and grid extent for the current map view"""
        tile_zoom: Optional[int] = round_half_up(self._map.get_zoom())
        if tile_zoom > self.config.max_zoom or tile_zoom < self.config.min_zoom:
            tile_zoom = None

        if tile_zoom != self._tile_zoom:
            self._abort_loading()
            self._remove_all_tiles()
            self._tile_zoom = tile_zoom

        self._reset_grid()
        self._update()

    def _reset_grid(self) -> None:
        if self._tile_zoom is None:
            self._global_tile_range = None
            return
        world = self._map.crs.projected_bounds(self._tile_zoom)
        self._global_tile_range = self._px_bounds_to_tile_range(world) if world is not None else None

    def _update(self) -> None:
        """Add tiles entering the view, unload tiles that left it"""
        if self._map is None or self._tile_zoom is None:
            return
        # View not set yet; the first set_view resets every layer
        if self._map.pixel_origin is None:
            return

        tile_range = self._px_bounds_to_tile_range(self._map.get_pixel_bounds())
        wanted = set()
        queue: List[TileCoordinate] = []

        for y in range(int(tile_range.min.y), int(tile_range.max.y) + 1):
            for x in range(int(tile_range.min.x), int(tile_range.max.x) + 1):
                coords = TileCoordinate(x, y, self._tile_zoom)
                if not self._is_valid_tile(coords):
                    continue
                key = coords.key()
                wanted.add(key)
                if key not in self._tiles:
                    queue.append(coords)

        for key in list(self._tiles):
            if key not in wanted:
                self._remove_tile(key)

        for coords in queue:
            self._add_tile(coords)

    def _is_valid_tile(self, coords: TileCoordinate) -> bool:
        world = self._global_tile_range
        if world is not None and not self._map.crs.infinite:
            if not world.contains(coords.to_point()):
                return False

        if self._bounds_area is None:
            return True
        return self._bounds_area.intersects(self._tile_geo_box(coords))

    def _tile_geo_box(self, coords: TileCoordinate):
        crs = self._map.crs
        size = self._get_tile_size()
        nw = crs.point_to_lat_lng(coords.to_point().multiply_by(size), coords.z)
        se = crs.point_to_lat_lng(coords.to_point().add(Point(1, 1)).multiply_by(size), coords.z)
        return box(min(nw.lng, se.lng), min(nw.lat, se.lat), max(nw.lng, se.lng), max(nw.lat, se.lat))

    def _px_bounds_to_tile_range(self, bounds: Bounds) -> Bounds:
        size = self._get_tile_size()
        return Bounds(bounds.min.divide_by(size).floor(),
                      bounds.max.divide_by(size).ceil().subtract(Point(1, 1)))

    def _get_tile_size(self) -> int:
        return self.config.tile_size

    def _add_tile(self, coords: TileCoordinate) -> None:
        tile = self.create_tile(coords, functools.partial(self._tile_ready, coords))
        tile.parent = self
        self._tiles[coords.key()] = TileRecord(el=tile, coords=coords)
        self.fire('tileloadstart', tile=tile, coords=coords)

    def _tile_ready(self, coords: TileCoordinate, error: Optional[Exception], tile: TileImage) -> None:
        record = self._tiles.get(coords.key())
        if record is None or record.el is not tile:
            return

        record.loaded = True
        record.error = error
        if error is not None:
            self.fire('tileerror', error=error, tile=tile, coords=coords)
        else:
            self.fire('tileload', tile=tile, coords=coords)

        if not self.is_loading():
            self.fire('load')

    def _remove_tile(self, key: str) -> None:
        record = self._tiles.pop(key, None)
        if record is None:
            return
        self._detach(record.el)
        self.fire('tileunload', tile=record.el, coords=record.coords)

    def _remove_all_tiles(self) -> None:
        for key in list(self._tiles):
            self._remove_tile(key)

    def _detach(self, tile: TileImage) -> None:
        tile.parent = None

    def _abort_loading(self) -> None:
        pass

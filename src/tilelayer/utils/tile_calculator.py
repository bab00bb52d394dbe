import math
from typing import List, Optional, Tuple

from tilelayer.geo.crs import EPSG3857, Crs
from tilelayer.models.geometry import Bounds, LatLng, Point, TileCoordinate


class TileCalculator:
    """Utility class for tile coordinate calculations"""

    @staticmethod
    def deg2num(lat_deg: float, lon_deg: float, zoom: int,
                crs: Crs = EPSG3857, tile_size: int = 256) -> Tuple[int, int]:
        """Convert lat/lon to the tile containing it"""
        point = crs.lat_lng_to_point(LatLng(lat_deg, lon_deg), zoom)
        return int(math.floor(point.x / tile_size)), int(math.floor(point.y / tile_size))

    @staticmethod
    def global_tile_range(crs: Crs, zoom: int, tile_size: int = 256) -> Optional[Bounds]:
        """Range of tile indices covering the whole world, None for infinite CRSes"""
        world = crs.projected_bounds(zoom)
        if world is None:
            return None
        return Bounds(world.min.divide_by(tile_size).floor(),
                      world.max.divide_by(tile_size).ceil().subtract(Point(1, 1)))

    @staticmethod
    def get_tiles_for_bbox(bbox: List[float], min_zoom: int, max_zoom: int,
                           crs: Crs = EPSG3857, tile_size: int = 256) -> List[TileCoordinate]:
        """Get all tile coordinates for given bbox [min_lon, min_lat, max_lon, max_lat] and zoom range"""
        tiles = []
        min_lon, min_lat, max_lon, max_lat = bbox

        for zoom in range(min_zoom, max_zoom + 1):
            x1, y1 = TileCalculator.deg2num(min_lat, min_lon, zoom, crs, tile_size)
            x2, y2 = TileCalculator.deg2num(max_lat, max_lon, zoom, crs, tile_size)
            min_x, max_x = min(x1, x2), max(x1, x2)
            min_y, max_y = min(y1, y2), max(y1, y2)

            world = TileCalculator.global_tile_range(crs, zoom, tile_size)
            if world is not None:
                # A bbox touching the world edge lands one tile past the last one
                min_x = max(min_x, int(world.min.x))
                min_y = max(min_y, int(world.min.y))
                max_x = min(max_x, int(world.max.x))
                max_y = min(max_y, int(world.max.y))

            for x in range(min_x, max_x + 1):
                for y in range(min_y, max_y + 1):
                    tiles.append(TileCoordinate(x, y, zoom))

        return tiles

    @staticmethod
    def calculate_tile_count(bbox: List[float], min_zoom: int, max_zoom: int,
                             crs: Crs = EPSG3857, tile_size: int = 256) -> int:
        """Calculate total number of tiles for given bbox and zoom range"""
        return len(TileCalculator.get_tiles_for_bbox(bbox, min_zoom, max_zoom, crs, tile_size))

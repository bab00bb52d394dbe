import logging
from typing import Any, List, Optional

from tilelayer.core.events import Evented
from tilelayer.geo.crs import EPSG3857, Crs
from tilelayer.interfaces.map_host import IMapHost
from tilelayer.models.geometry import Bounds, LatLng, Point

logger = logging.getLogger(__name__)


class MapState(Evented, IMapHost):
    """Host map: view state, CRS and the pixel anchors layers draw against.

    `initial_top_left_point` is the top-left pixel of the view at the last
    reset, `pixel_origin` the current top-left pixel (moves with panning).
    Both are in pixel space of `crs` at the current zoom.
    """

    def __init__(self, crs: Crs = EPSG3857, size: Point = Point(512, 512),
                 center: Optional[LatLng] = None, zoom: int = 0):
        super().__init__()
        self.crs = crs
        self.size = size
        self.zoom = zoom
        self.center = center
        self.initial_top_left_point: Optional[Point] = None
        self.pixel_origin: Optional[Point] = None
        self._layers: List[Any] = []

        if center is not None:
            self.set_view(center, zoom)

    def get_zoom(self) -> float:
        return self.zoom

    def get_zoom_scale(self, to_zoom: float, from_zoom: Optional[float] = None) -> float:
        if from_zoom is None:
            from_zoom = self.zoom
        return self.crs.scale(to_zoom) / self.crs.scale(from_zoom)

    def project(self, latlng: LatLng, zoom: Optional[float] = None) -> Point:
        return self.crs.lat_lng_to_point(latlng, self.zoom if zoom is None else zoom)

    def unproject(self, point: Point, zoom: Optional[float] = None) -> LatLng:
        return self.crs.point_to_lat_lng(point, self.zoom if zoom is None else zoom)

    def get_pixel_bounds(self) -> Bounds:
        if self.pixel_origin is None:
            raise RuntimeError("Set map center and zoom first.")
        return Bounds(self.pixel_origin, self.pixel_origin.add(self.size))

    def set_view(self, center: LatLng, zoom: int) -> 'MapState':
        """Reset the view: recompute both anchors and reset every layer"""
        self.center = center
        self.zoom = zoom
        top_left = self.project(center).subtract(self.size.divide_by(2)).round()
        self.initial_top_left_point = top_left
        self.pixel_origin = top_left

        self.fire('viewreset')
        for layer in list(self._layers):
            layer._reset()
        return self

    def pan_by(self, offset: Point) -> 'MapState':
        """Move the view by a pixel offset and update every layer"""
        if self.pixel_origin is None:
            raise RuntimeError("Set map center and zoom first.")
        self.pixel_origin = self.pixel_origin.add(offset).round()
        self.center = self.unproject(self.pixel_origin.add(self.size.divide_by(2)))

        self.fire('moveend')
        for layer in list(self._layers):
            layer._update()
        return self

    def add_layer(self, layer: Any) -> 'MapState':
        if layer in self._layers:
            return self
        self._layers.append(layer)
        layer.on_add(self)
        self.fire('layeradd', layer=layer)
        return self

    def remove_layer(self, layer: Any) -> 'MapState':
        if layer not in self._layers:
            return self
        self._layers.remove(layer)
        layer.on_remove(self)
        self.fire('layerremove', layer=layer)
        return self

    def has_layer(self, layer: Any) -> bool:
        return layer in self._layers

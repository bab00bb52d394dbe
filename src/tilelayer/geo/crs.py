"""
Coordinate reference systems used by maps and tile layers.

A Crs maps geographic positions to pixel space at a given zoom level in two
steps: a projection (geographic -> projected plane, done with pyproj where a
real projection is involved) followed by an affine transformation scaled by
the zoom level.

Example:
    >>> from tilelayer.geo.crs import EPSG3857
    >>> from tilelayer.models.geometry import LatLng
    >>> EPSG3857.lat_lng_to_point(LatLng(0, 0), 0).round()
    Point(x=128, y=128)
"""

import logging
import math
from typing import Dict, Optional, Tuple

from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError

from tilelayer.exceptions.tile_layer_exceptions import ValidationError
from tilelayer.interfaces.projection import IProjection
from tilelayer.models.geometry import Bounds, LatLng, Point

logger = logging.getLogger(__name__)

EARTH_RADIUS = 6378137.0
MERCATOR_EXTENT = math.pi * EARTH_RADIUS
SPHERICAL_MERCATOR_MAX_LAT = 85.0511287798
WORLD_MERCATOR_MAX_LAT = 85.0840591556


class Transformation:
    """Affine transformation (a*x + b, c*y + d) applied after projection"""

    def __init__(self, a: float, b: float, c: float, d: float):
        self.a = a
        self.b = b
        self.c = c
        self.d = d

    def transform(self, point: Point, scale: float = 1.0) -> Point:
        return Point(scale * (self.a * point.x + self.b),
                     scale * (self.c * point.y + self.d))

    def untransform(self, point: Point, scale: float = 1.0) -> Point:
        return Point((point.x / scale - self.b) / self.a,
                     (point.y / scale - self.d) / self.c)

    def __repr__(self) -> str:
        return f"Transformation({self.a}, {self.b}, {self.c}, {self.d})"


class LonLatProjection(IProjection):
    """Equirectangular identity projection (x = lng, y = lat)"""

    def __init__(self, bounds: Optional[Bounds] = None):
        self.bounds = bounds or Bounds(Point(-180, -90), Point(180, 90))

    def project(self, latlng: LatLng) -> Point:
        return Point(latlng.lng, latlng.lat)

    def unproject(self, point: Point) -> LatLng:
        return LatLng(point.y, point.x)

    def get_bounds(self) -> Bounds:
        return self.bounds


class PyprojProjection(IProjection):
    """Projection from WGS84 to an arbitrary CRS backed by pyproj"""

    def __init__(self, code: str, bounds: Bounds, max_latitude: Optional[float] = None):
        self.code = code
        self.bounds = bounds
        self.max_latitude = max_latitude
        self._forward = Transformer.from_crs('EPSG:4326', code, always_xy=True)
        self._inverse = Transformer.from_crs(code, 'EPSG:4326', always_xy=True)

    def project(self, latlng: LatLng) -> Point:
        lat = latlng.lat
        # Mercator variants diverge at the poles
        if self.max_latitude is not None:
            lat = max(min(lat, self.max_latitude), -self.max_latitude)
        x, y = self._forward.transform(latlng.lng, lat)
        return Point(x, y)

    def unproject(self, point: Point) -> LatLng:
        lng, lat = self._inverse.transform(point.x, point.y)
        return LatLng(lat, lng)

    def get_bounds(self) -> Bounds:
        return self.bounds


class Crs:
    """Coordinate reference system: projection plus zoom-scaled transformation"""

    def __init__(self, code: str, projection: IProjection, transformation: Transformation,
                 infinite: bool = False, scale_base: float = 256.0):
        self.code = code
        self.projection = projection
        self.transformation = transformation
        self.infinite = infinite
        self.scale_base = scale_base

    def lat_lng_to_point(self, latlng: LatLng, zoom: float) -> Point:
        """Convert a geographic position to pixel coordinates at zoom"""
        projected = self.projection.project(latlng)
        return self.transformation.transform(projected, self.scale(zoom))

    def point_to_lat_lng(self, point: Point, zoom: float) -> LatLng:
        """Convert pixel coordinates at zoom back to a geographic position"""
        untransformed = self.transformation.untransform(point, self.scale(zoom))
        return self.projection.unproject(untransformed)

    def project(self, latlng: LatLng) -> Point:
        return self.projection.project(latlng)

    def unproject(self, point: Point) -> LatLng:
        return self.projection.unproject(point)

    def scale(self, zoom: float) -> float:
        return self.scale_base * math.pow(2, zoom)

    def zoom(self, scale: float) -> float:
        return math.log(scale / self.scale_base, 2)

    def projected_bounds(self, zoom: float) -> Optional[Bounds]:
        """Pixel bounds of the whole world at zoom, None for infinite CRSes"""
        if self.infinite:
            return None
        bounds = self.projection.get_bounds()
        scale = self.scale(zoom)
        return Bounds.from_points(self.transformation.transform(bounds.min, scale),
                                  self.transformation.transform(bounds.max, scale))

    @classmethod
    def from_epsg(cls, code: str, bounds: Tuple[float, float, float, float],
                  max_latitude: Optional[float] = None) -> 'Crs':
        """Build a CRS whose zoom 0 maps the projected bounds width onto one unit.

        Args:
            code: Any authority string pyproj understands, e.g. 'EPSG:3035'
            bounds: Projected extent (min_x, min_y, max_x, max_y); the tile
                origin is the top-left corner (min_x, max_y)
            max_latitude: Optional latitude clamp applied before projecting
        """
        min_x, min_y, max_x, max_y = bounds
        if max_x <= min_x or max_y <= min_y:
            raise ValidationError(f"Invalid projected bounds for {code}: {bounds}")
        unit = 1.0 / (max_x - min_x)
        projection = PyprojProjection(code, Bounds(Point(min_x, min_y), Point(max_x, max_y)),
                                      max_latitude=max_latitude)
        return cls(code, projection, Transformation(unit, -min_x * unit, -unit, max_y * unit))

    def __repr__(self) -> str:
        return f"Crs(code='{self.code}')"


_MERCATOR_SCALE = 0.5 / MERCATOR_EXTENT
_MERCATOR_BOUNDS = Bounds(Point(-MERCATOR_EXTENT, -MERCATOR_EXTENT),
                          Point(MERCATOR_EXTENT, MERCATOR_EXTENT))

EPSG3857 = Crs(
    'EPSG:3857',
    PyprojProjection('EPSG:3857', _MERCATOR_BOUNDS, max_latitude=SPHERICAL_MERCATOR_MAX_LAT),
    Transformation(_MERCATOR_SCALE, 0.5, -_MERCATOR_SCALE, 0.5),
)

EPSG3395 = Crs(
    'EPSG:3395',
    PyprojProjection('EPSG:3395', _MERCATOR_BOUNDS, max_latitude=WORLD_MERCATOR_MAX_LAT),
    Transformation(_MERCATOR_SCALE, 0.5, -_MERCATOR_SCALE, 0.5),
)

EPSG4326 = Crs(
    'EPSG:4326',
    LonLatProjection(),
    Transformation(1 / 180, 1, -1 / 180, 0.5),
)

SIMPLE = Crs(
    'Simple',
    LonLatProjection(),
    Transformation(1, 0, -1, 0),
    infinite=True,
    scale_base=1.0,
)

_REGISTRY: Dict[str, Crs] = {
    'EPSG:3857': EPSG3857,
    'EPSG:900913': EPSG3857,
    'EPSG:3395': EPSG3395,
    'EPSG:4326': EPSG4326,
    'SIMPLE': SIMPLE,
}


def get_crs(code: str) -> Crs:
    """Resolve a CRS by code.

    Well-known codes come from the registry. Anything else is looked up with
    pyproj and its area of use becomes the projected bounds; the result is
    registered so repeated lookups return the same object.
    """
    key = code.strip().upper()
    if key in _REGISTRY:
        return _REGISTRY[key]

    try:
        definition = CRS.from_user_input(code)
    except CRSError as e:
        raise ValidationError(f"Unknown CRS '{code}': {e}")

    area = definition.area_of_use
    if area is None:
        raise ValidationError(f"CRS '{code}' has no area of use to derive bounds from")

    to_projected = Transformer.from_crs('EPSG:4326', definition, always_xy=True)
    bounds = to_projected.transform_bounds(*area.bounds)
    logger.debug(f"Derived bounds {bounds} for {code} from area of use '{area.name}'")

    crs = Crs.from_epsg(code, bounds)
    _REGISTRY[key] = crs
    return crs

"""
Per-layer CRS override for map geometry recomputation.

A layer may declare a CRS different from the map's. The grid operations that
derive tile geometry from the map (`_reset`, `_update`) are wrapped so that for
the duration of one top-level call the map uses the layer's CRS and its cached
reference points are expressed in that CRS's pixel space. Everything is put
back when the call returns or raises.

Grid operations call each other (a reset triggers an update); only the
outermost call swaps, nested calls run against the already swapped state.

Example:
    >>> transaction = CrsOverrideTransaction(EPSG4326, lambda: layer._map)
    >>> transaction.install(layer, ('_reset', '_update'))
    >>> layer._reset()   # runs with map.crs == EPSG4326, then restores
"""

import logging
from dataclasses import dataclass, fields
from typing import Any, Callable, Optional, Sequence

from tilelayer.exceptions.tile_layer_exceptions import ConfigurationError
from tilelayer.geo.crs import Crs
from tilelayer.models.geometry import Point

logger = logging.getLogger(__name__)

DEFAULT_OPERATIONS = ('_reset', '_update')
DEFAULT_REFERENCE_POINTS = ('initial_top_left_point', 'pixel_origin')


@dataclass
class ReferencePoints:
    """Cached pixel anchors of a map, as swapped by the override"""
    initial_top_left_point: Optional[Point] = None
    pixel_origin: Optional[Point] = None

    @classmethod
    def field_names(cls) -> Sequence[str]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def capture(cls, map_state: Any, names: Sequence[str]) -> 'ReferencePoints':
        """Save the named points currently held by the map"""
        points = cls()
        for name in names:
            setattr(points, name, getattr(map_state, name, None))
        return points

    def converted(self, names: Sequence[str], from_crs: Crs, to_crs: Crs, zoom: float) -> 'ReferencePoints':
        """Same geographic anchors, in to_crs pixel space, rounded to whole pixels"""
        points = ReferencePoints()
        for name in names:
            value = getattr(self, name)
            if value is not None:
                latlng = from_crs.point_to_lat_lng(value, zoom)
                value = to_crs.lat_lng_to_point(latlng, zoom).round()
            setattr(points, name, value)
        return points

    def apply(self, map_state: Any, names: Sequence[str]) -> None:
        """Write the named points back onto the map"""
        for name in names:
            setattr(map_state, name, getattr(self, name))


class CrsOverrideTransaction:
    """Swap state shared by all operations wrapped for one layer"""

    def __init__(self, layer_crs: Crs, map_resolver: Callable[[], Any],
                 reference_point_names: Sequence[str] = DEFAULT_REFERENCE_POINTS):
        unknown = set(reference_point_names) - set(ReferencePoints.field_names())
        if unknown:
            raise ConfigurationError(f"Unknown reference points: {sorted(unknown)}")

        self.layer_crs = layer_crs
        self.map_resolver = map_resolver
        self.reference_point_names = tuple(reference_point_names)
        self.depth = 0

    @property
    def running(self) -> bool:
        return self.depth > 0

    def install(self, target: Any, operation_names: Sequence[str] = DEFAULT_OPERATIONS) -> None:
        """Wrap each named operation present on target"""
        for name in operation_names:
            original = getattr(target, name, None)
            if original is None:
                continue
            if isinstance(original, GuardedOperation):
                logger.debug(f"{name} already guarded on {target!r}")
                continue
            setattr(target, name, GuardedOperation(name, original, self))

    def run(self, operation: Callable, *args, **kwargs):
        if self.running:
            return operation(*args, **kwargs)

        map_state = self.map_resolver()
        saved: Optional[ReferencePoints] = None
        saved_crs: Optional[Crs] = None

        if map_state is not None and map_state.crs is not self.layer_crs:
            names = self.reference_point_names
            zoom = map_state.get_zoom()
            saved_crs = map_state.crs
            saved = ReferencePoints.capture(map_state, names)
            swapped = saved.converted(names, saved_crs, self.layer_crs, zoom)
            swapped.apply(map_state, names)
            map_state.crs = self.layer_crs
            logger.debug(f"Running {getattr(operation, '__name__', operation)} "
                         f"in {self.layer_crs.code} instead of {saved_crs.code}")

        self.depth += 1
        try:
            return operation(*args, **kwargs)
        finally:
            self.depth -= 1
            if saved is not None:
                saved.apply(map_state, self.reference_point_names)
                map_state.crs = saved_crs


class GuardedOperation:
    """Callable standing in for one map geometry operation"""

    def __init__(self, name: str, original: Callable, transaction: CrsOverrideTransaction):
        self.__name__ = name
        self.original = original
        self.transaction = transaction

    def __call__(self, *args, **kwargs):
        return self.transaction.run(self.original, *args, **kwargs)

    def __repr__(self) -> str:
        return f"GuardedOperation({self.__name__}, crs={self.transaction.layer_crs.code})"

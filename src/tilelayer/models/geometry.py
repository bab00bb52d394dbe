import math
from dataclasses import dataclass


def round_half_up(value: float) -> int:
    """Round like JavaScript Math.round (halves go towards +infinity)"""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class Point:
    """Data model for a pixel or projected plane point"""
    x: float
    y: float

    def add(self, other: 'Point') -> 'Point':
        return Point(self.x + other.x, self.y + other.y)

    def subtract(self, other: 'Point') -> 'Point':
        return Point(self.x - other.x, self.y - other.y)

    def multiply_by(self, factor: float) -> 'Point':
        return Point(self.x * factor, self.y * factor)

    def divide_by(self, factor: float) -> 'Point':
        return Point(self.x / factor, self.y / factor)

    def round(self) -> 'Point':
        """Round both axes to whole pixels"""
        return Point(round_half_up(self.x), round_half_up(self.y))

    def floor(self) -> 'Point':
        return Point(math.floor(self.x), math.floor(self.y))

    def ceil(self) -> 'Point':
        return Point(math.ceil(self.x), math.ceil(self.y))


@dataclass(frozen=True)
class Bounds:
    """Data model for an axis-aligned rectangle of points"""
    min: Point
    max: Point

    @classmethod
    def from_points(cls, a: Point, b: Point) -> 'Bounds':
        """Build bounds from two arbitrary corners"""
        return cls(Point(min(a.x, b.x), min(a.y, b.y)),
                   Point(max(a.x, b.x), max(a.y, b.y)))

    def contains(self, point: Point) -> bool:
        return (self.min.x <= point.x <= self.max.x and
                self.min.y <= point.y <= self.max.y)

    def get_size(self) -> Point:
        return self.max.subtract(self.min)


@dataclass(frozen=True)
class LatLng:
    """Data model for a geographic position in degrees"""
    lat: float
    lng: float


@dataclass(frozen=True)
class TileCoordinate:
    """Data model for one tile address in the pyramid"""
    x: int
    y: int
    z: int

    def key(self) -> str:
        """Registry key used by the grid layer"""
        return f"{self.x}:{self.y}:{self.z}"

    def to_point(self) -> Point:
        return Point(self.x, self.y)

    @classmethod
    def from_key(cls, key: str) -> 'TileCoordinate':
        x, y, z = (int(part) for part in key.split(':'))
        return cls(x, y, z)

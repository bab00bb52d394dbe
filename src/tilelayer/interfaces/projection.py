from abc import ABC, abstractmethod

from tilelayer.models.geometry import Bounds, LatLng, Point


class IProjection(ABC):
    """Interface for geographic to plane projections"""
    
    @abstractmethod
    def project(self, latlng: LatLng) -> Point:
        """Project a geographic position onto the plane"""
        pass
    
    @abstractmethod
    def unproject(self, point: Point) -> LatLng:
        """Inverse of project"""
        pass
    
    @abstractmethod
    def get_bounds(self) -> Bounds:
        """Get projected extent of the world"""
        pass

from abc import ABC, abstractmethod
from typing import Optional

from tilelayer.models.geometry import Bounds


class IMapHost(ABC):
    """Interface for the map a tile layer is added to"""

    @abstractmethod
    def get_zoom(self) -> float:
        """Get current map zoom"""
        pass

    @abstractmethod
    def get_zoom_scale(self, to_zoom: float, from_zoom: Optional[float] = None) -> float:
        """Get linear scale factor between two zoom levels"""
        pass

    @abstractmethod
    def get_pixel_bounds(self) -> Bounds:
        """Get visible area in pixel coordinates of the current zoom"""
        pass


class IImageFactory(ABC):
    """Interface for creating and detaching tile images"""

    @abstractmethod
    def create_image(self):
        """Create a new, empty tile image"""
        pass

    @abstractmethod
    def remove(self, image) -> None:
        """Detach an image from the render tree"""
        pass

    @abstractmethod
    def enqueue(self, image, src: str) -> None:
        """Start loading src into image; completion is dispatched later"""
        pass

"""Display and platform capability detection"""
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Platform:
    """Capabilities of the display tiles are rendered for"""
    device_pixel_ratio: float = 1.0
    android: bool = False

    @property
    def retina(self) -> bool:
        """High-density display (more than one device pixel per CSS pixel)"""
        return self.device_pixel_ratio > 1

    @classmethod
    def from_environment(cls) -> 'Platform':
        """Read TILELAYER_PIXEL_RATIO / TILELAYER_ANDROID, defaulting to a standard display"""
        try:
            ratio = float(os.environ.get('TILELAYER_PIXEL_RATIO', '1'))
        except ValueError:
            ratio = 1.0
        android = os.environ.get('TILELAYER_ANDROID', '').lower() in ('1', 'true', 'yes')
        return cls(device_pixel_ratio=ratio, android=android)

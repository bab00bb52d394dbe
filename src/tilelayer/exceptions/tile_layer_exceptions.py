class TileLayerException(Exception):
    """Base exception for tile layer"""
    pass


class ConfigurationError(TileLayerException):
    """Configuration related errors"""
    pass


class ValidationError(TileLayerException):
    """Validation related errors"""
    pass


class TileLoadError(TileLayerException):
    """Tile image could not be fetched or decoded"""

    def __init__(self, message: str, url: str = ''):
        super().__init__(message)
        self.url = url

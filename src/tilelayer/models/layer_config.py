import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from tilelayer.exceptions.tile_layer_exceptions import ValidationError
from tilelayer.geo.crs import Crs, get_crs

# Option names as accepted in layer definitions -> LayerConfig field names
OPTION_FIELDS = {
    'tileSize': 'tile_size',
    'minZoom': 'min_zoom',
    'maxZoom': 'max_zoom',
    'maxNativeZoom': 'max_native_zoom',
    'zoomOffset': 'zoom_offset',
    'zoomReverse': 'zoom_reverse',
    'tms': 'tms',
    'detectRetina': 'detect_retina',
    'subdomains': 'subdomains',
    'errorTileUrl': 'error_tile_url',
    'crossOrigin': 'cross_origin',
    'crs': 'crs',
    'bounds': 'bounds',
}


@dataclass(frozen=True)
class LayerConfig:
    """Data model for tile layer configuration.

    Built once per layer; retina adjustment is applied through apply_retina()
    which is safe to call more than once.
    """
    tile_size: int = 256
    min_zoom: int = 0
    max_zoom: int = 18
    max_native_zoom: Optional[int] = None
    zoom_offset: int = 0
    zoom_reverse: bool = False
    tms: bool = False
    detect_retina: bool = False
    subdomains: Tuple[str, ...] = ('a', 'b', 'c')
    error_tile_url: str = ''
    cross_origin: bool = False
    crs: Optional[Crs] = None
    bounds: Optional[Tuple[float, float, float, float]] = None  # [min_lon, min_lat, max_lon, max_lat]
    extra: Dict[str, Any] = field(default_factory=dict)
    retina_applied: bool = False

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Reject configurations that would only fail later, at request time"""
        if not self.subdomains:
            raise ValidationError("subdomains must contain at least one entry")
        if any(not isinstance(s, str) for s in self.subdomains):
            raise ValidationError("subdomains must be strings")
        if self.tile_size <= 0:
            raise ValidationError(f"tileSize must be positive, got {self.tile_size}")
        if self.min_zoom > self.max_zoom and not self.retina_applied:
            raise ValidationError(f"minZoom {self.min_zoom} is greater than maxZoom {self.max_zoom}")
        if self.bounds is not None and len(self.bounds) != 4:
            raise ValidationError("bounds must be [min_lon, min_lat, max_lon, max_lat]")

    @classmethod
    def from_options(cls, options: Optional[Dict[str, Any]] = None) -> 'LayerConfig':
        """Build a config from an option mapping.

        camelCase and snake_case keys are both accepted. Keys that are not
        recognised options are kept in `extra` and become template values.
        """
        values: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        known = set(OPTION_FIELDS.values())

        for key, value in (options or {}).items():
            name = OPTION_FIELDS.get(key, key)
            if name in known:
                values[name] = value
            else:
                extra[key] = value

        if 'subdomains' in values:
            values['subdomains'] = cls._normalize_subdomains(values['subdomains'])
        if isinstance(values.get('crs'), str):
            values['crs'] = get_crs(values['crs'])
        if values.get('bounds') is not None:
            values['bounds'] = tuple(float(v) for v in values['bounds'])
        for name in ('tile_size', 'min_zoom', 'max_zoom', 'zoom_offset'):
            if name in values:
                values[name] = int(values[name])
        if values.get('max_native_zoom') is not None:
            values['max_native_zoom'] = int(values['max_native_zoom'])
        if values.get('error_tile_url') is None:
            values.pop('error_tile_url', None)

        return cls(extra=extra, **values)

    @staticmethod
    def _normalize_subdomains(subdomains: Union[str, Sequence[str], None]) -> Tuple[str, ...]:
        # A string is a list of single-character shards, e.g. 'abc'
        if subdomains is None:
            return ()
        return tuple(subdomains)

    def apply_retina(self, retina: bool) -> 'LayerConfig':
        """Adjust tile size and zoom range for high-density displays.

        Tiles are requested one zoom level deeper at half the size. The
        adjustment is recorded in `retina_applied`, so a second call returns
        the config unchanged.
        """
        if self.retina_applied or not (self.detect_retina and retina and self.max_zoom > 0):
            return self
        return replace(
            self,
            tile_size=int(math.floor(self.tile_size / 2)),
            zoom_offset=self.zoom_offset + 1,
            min_zoom=max(0, self.min_zoom),
            max_zoom=self.max_zoom - 1,
            retina_applied=True,
        )

    def template_values(self) -> Dict[str, Any]:
        """Extra values available to URL templates"""
        return dict(self.extra)

    def to_options(self) -> Dict[str, Any]:
        """Inverse of from_options, with the CRS reduced to its code"""
        options: Dict[str, Any] = {}
        for option, name in OPTION_FIELDS.items():
            value = getattr(self, name)
            if name == 'crs':
                value = value.code if value is not None else None
            elif name in ('subdomains', 'bounds') and value is not None:
                value = list(value)
            options[option] = value
        options.update(self.extra)
        return options


@dataclass
class LayerDefinition:
    """Data model for a named layer loaded from configuration"""
    name: str
    url: str
    config: LayerConfig
    description: str = ""

    def get_name(self) -> str:
        """Get layer name"""
        return self.name

    def get_url(self) -> str:
        """Get URL template"""
        return self.url

    def get_zoom_range(self) -> Tuple[int, int]:
        """Get zoom range"""
        return (self.config.min_zoom, self.config.max_zoom)

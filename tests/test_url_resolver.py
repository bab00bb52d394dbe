#!/usr/bin/env python3
"""
Tests for tile URL derivation
"""

import logging

from tilelayer.infrastructure.platform import Platform
from tilelayer.models.geometry import Bounds, Point, TileCoordinate
from tilelayer.models.layer_config import LayerConfig
from tilelayer.services.url_resolver import UrlResolver
from tilelayer.utils.template_utils import TemplateUtils

OSM_URL = 'https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png'


def resolver(platform=None, **options) -> UrlResolver:
    return UrlResolver(LayerConfig.from_options(options), platform)


class TestSubdomains:
    """Shard selection"""

    def test_shard_from_coordinate_sum(self):
        r = resolver(subdomains='abc')
        assert r.get_subdomain(TileCoordinate(1, 1, 5)) == 'c'
        assert r.get_subdomain(TileCoordinate(2, 1, 5)) == 'a'
        assert r.get_subdomain(TileCoordinate(2, 2, 5)) == 'b'

    def test_negative_coordinates_use_absolute_sum(self):
        r = resolver(subdomains=['t0', 't1', 't2', 't3'])
        assert r.get_subdomain(TileCoordinate(-7, 2, 3)) == 't1'

    def test_same_coordinate_same_shard(self):
        r = resolver()
        coords = TileCoordinate(12, 40, 7)
        shards = {r.get_subdomain(coords) for _ in range(5)}
        assert len(shards) == 1

    def test_shard_independent_of_zoom(self):
        r = resolver()
        assert r.get_subdomain(TileCoordinate(3, 4, 2)) == r.get_subdomain(TileCoordinate(3, 4, 15))


class TestRowAndZoom:
    """TMS row flip and effective zoom"""

    def test_tms_flips_row_against_global_range(self):
        r = resolver(tms=True)
        world = Bounds(Point(0, 0), Point(7, 7))
        assert r.get_row(TileCoordinate(4, 2, 3), world) == 5

    def test_tms_without_range_assumes_square_pyramid(self):
        r = resolver(tms=True)
        assert r.get_row(TileCoordinate(4, 2, 3), None) == 5

    def test_row_unchanged_without_tms(self):
        r = resolver()
        assert r.get_row(TileCoordinate(4, 2, 3), Bounds(Point(0, 0), Point(7, 7))) == 2

    def test_zoom_reverse(self):
        r = resolver(maxZoom=10, zoomReverse=True)
        assert r.get_zoom_for_url(3) == 7

    def test_zoom_reverse_then_offset(self):
        r = resolver(maxZoom=10, zoomReverse=True, zoomOffset=1)
        assert r.get_zoom_for_url(3) == 8

    def test_zoom_clamped_to_native(self):
        r = resolver(maxNativeZoom=5)
        assert r.get_zoom_for_url(8) == 5
        assert r.get_zoom_for_url(4) == 4

    def test_native_zoom_zero_is_honoured(self):
        r = resolver(maxNativeZoom=0)
        assert r.get_zoom_for_url(3) == 0

    def test_zoom_recomputed_on_every_call(self):
        r = resolver(zoomOffset=2)
        assert [r.get_zoom_for_url(z) for z in (1, 2, 1)] == [3, 4, 3]


class TestTileSize:
    """Rendered size when overscaling"""

    @staticmethod
    def zoom_scale(to_zoom, from_zoom):
        return 2 ** (to_zoom - from_zoom)

    def test_overscaled_size(self):
        r = resolver(maxNativeZoom=5)
        assert r.tile_size(8, self.zoom_scale) == 2048

    def test_native_size_within_native_range(self):
        r = resolver(maxNativeZoom=5)
        assert r.tile_size(5, self.zoom_scale) == 256

    def test_offset_counts_towards_native_limit(self):
        r = resolver(maxNativeZoom=5, zoomOffset=1)
        assert r.tile_size(5, self.zoom_scale) == 512

    def test_no_native_limit(self):
        r = resolver(tileSize=512)
        assert r.tile_size(20, self.zoom_scale) == 512


class TestResolveUrl:
    """End-to-end URL rendering"""

    def test_standard_template(self):
        r = resolver()
        assert r.resolve_url(OSM_URL, TileCoordinate(3, 5, 4), 4) == 'https://c.tile.openstreetmap.org/4/3/5.png'

    def test_retina_suffix_on_high_density_display(self):
        r = resolver(Platform(device_pixel_ratio=2), detectRetina=True)
        url = r.resolve_url('https://tiles.example.com/{z}/{x}/{y}{r}.png', TileCoordinate(1, 2, 3), 3)
        assert url == 'https://tiles.example.com/3/1/2@2x.png'

    def test_no_retina_suffix_on_standard_display(self):
        r = resolver(Platform(device_pixel_ratio=1), detectRetina=True)
        assert r.retina_suffix() == ''

    def test_no_retina_suffix_without_detection(self):
        r = resolver(Platform(device_pixel_ratio=2))
        assert r.retina_suffix() == ''

    def test_extra_options_fill_template(self):
        r = resolver(apikey='secret', style='dark')
        url = r.resolve_url('https://tiles.example.com/{style}/{z}/{x}/{y}.png?key={apikey}',
                            TileCoordinate(0, 0, 0), 0)
        assert url == 'https://tiles.example.com/dark/0/0/0.png?key=secret'

    def test_extra_options_override_computed_values(self):
        r = resolver(s='static')
        assert r.resolve_url('https://{s}.example.com/{z}', TileCoordinate(1, 1, 1), 1) == \
            'https://static.example.com/1'

    def test_tms_url_uses_global_range(self):
        r = resolver(tms=True)
        world = Bounds(Point(0, 0), Point(15, 15))
        assert r.resolve_url('{z}/{x}/{y}', TileCoordinate(2, 3, 4), 4, world) == '4/2/12'

    def test_unknown_placeholder_renders_empty(self, caplog):
        r = resolver()
        with caplog.at_level(logging.WARNING):
            url = r.resolve_url('https://example.com/{z}/{x}/{y}.png?t={token}', TileCoordinate(1, 1, 1), 1)
        assert url == 'https://example.com/1/1/1.png?t='
        assert 'token' in caplog.text


class TestTemplateUtils:
    """Placeholder substitution"""

    def test_whitespace_inside_braces(self):
        assert TemplateUtils.render('{ z }/{x}', {'z': 3, 'x': 4}) == '3/4'

    def test_callable_value_receives_data(self):
        data = {'z': 3, 'double': lambda d: d['z'] * 2}
        assert TemplateUtils.render('{double}', data) == '6'

    def test_placeholders_in_order(self):
        assert TemplateUtils.placeholders(OSM_URL) == ['s', 'z', 'x', 'y']

    def test_none_value_renders_empty(self):
        assert TemplateUtils.render('a{v}b', {'v': None}) == 'ab'

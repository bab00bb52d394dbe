#!/usr/bin/env python3
"""
Tests for LayerConfig option handling
"""

import pytest

from tilelayer.exceptions.tile_layer_exceptions import ValidationError
from tilelayer.geo.crs import EPSG4326
from tilelayer.models.layer_config import LayerConfig


class TestLayerConfig:
    """Test cases for LayerConfig"""

    def test_defaults(self):
        config = LayerConfig()
        assert config.tile_size == 256
        assert config.subdomains == ('a', 'b', 'c')
        assert config.max_native_zoom is None
        assert config.error_tile_url == ''
        assert config.crs is None

    def test_camel_and_snake_case_options(self):
        camel = LayerConfig.from_options({'maxZoom': 12, 'tileSize': 512, 'zoomOffset': -1})
        snake = LayerConfig.from_options({'max_zoom': 12, 'tile_size': 512, 'zoom_offset': -1})
        assert camel == snake
        assert camel.max_zoom == 12
        assert camel.tile_size == 512

    def test_subdomain_string_is_split_into_characters(self):
        config = LayerConfig.from_options({'subdomains': '1234'})
        assert config.subdomains == ('1', '2', '3', '4')

    @pytest.mark.parametrize('subdomains', ['', []])
    def test_empty_subdomains_rejected(self, subdomains):
        with pytest.raises(ValidationError):
            LayerConfig.from_options({'subdomains': subdomains})

    def test_non_positive_tile_size_rejected(self):
        with pytest.raises(ValidationError):
            LayerConfig.from_options({'tileSize': 0})

    def test_inverted_zoom_range_rejected(self):
        with pytest.raises(ValidationError):
            LayerConfig.from_options({'minZoom': 10, 'maxZoom': 5})

    def test_bounds_need_four_values(self):
        with pytest.raises(ValidationError):
            LayerConfig.from_options({'bounds': [0, 0, 10]})

    def test_crs_code_resolved(self):
        config = LayerConfig.from_options({'crs': 'EPSG:4326'})
        assert config.crs is EPSG4326

    def test_unknown_options_become_template_values(self):
        config = LayerConfig.from_options({'apikey': 'k', 'maxZoom': 10})
        assert config.extra == {'apikey': 'k'}

        values = config.template_values()
        values['apikey'] = 'changed'
        assert config.template_values() == {'apikey': 'k'}

    def test_null_error_tile_url_means_none(self):
        assert LayerConfig.from_options({'errorTileUrl': None}).error_tile_url == ''

    def test_to_options_reports_crs_code(self):
        options = LayerConfig.from_options({'crs': 'EPSG:4326', 'style': 'x'}).to_options()
        assert options['crs'] == 'EPSG:4326'
        assert options['subdomains'] == ['a', 'b', 'c']
        assert options['style'] == 'x'


class TestRetinaAdjustment:
    """Retina adjustment of tile size and zoom range"""

    def test_adjusts_size_and_zoom(self):
        config = LayerConfig.from_options({'detectRetina': True, 'maxZoom': 18, 'minZoom': 2})
        adjusted = config.apply_retina(True)
        assert adjusted.tile_size == 128
        assert adjusted.zoom_offset == 1
        assert adjusted.max_zoom == 17
        assert adjusted.min_zoom == 2
        assert adjusted.retina_applied

    def test_applied_once(self):
        config = LayerConfig.from_options({'detectRetina': True})
        once = config.apply_retina(True)
        assert once.apply_retina(True) is once

    def test_odd_tile_size_floored(self):
        config = LayerConfig.from_options({'detectRetina': True, 'tileSize': 255})
        assert config.apply_retina(True).tile_size == 127

    def test_min_zoom_floored_at_zero(self):
        config = LayerConfig.from_options({'detectRetina': True, 'minZoom': -2})
        assert config.apply_retina(True).min_zoom == 0

    def test_single_level_pyramid_may_invert(self):
        config = LayerConfig.from_options({'detectRetina': True, 'minZoom': 1, 'maxZoom': 1})
        adjusted = config.apply_retina(True)
        assert adjusted.max_zoom == 0
        assert adjusted.min_zoom == 1

    def test_no_adjustment_on_standard_display(self):
        config = LayerConfig.from_options({'detectRetina': True})
        assert config.apply_retina(False) is config

    def test_no_adjustment_without_detection(self):
        config = LayerConfig()
        assert config.apply_retina(True) is config

    def test_no_adjustment_at_max_zoom_zero(self):
        config = LayerConfig.from_options({'detectRetina': True, 'maxZoom': 0})
        assert config.apply_retina(True) is config

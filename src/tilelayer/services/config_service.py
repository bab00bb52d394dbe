import json
import logging
import os
from typing import Dict, Any, List

from tilelayer.exceptions.tile_layer_exceptions import ConfigurationError, TileLayerException, ValidationError
from tilelayer.interfaces.config_loader import IConfigLoader
from tilelayer.models.layer_config import LayerConfig, LayerDefinition
from tilelayer.utils.template_utils import TemplateUtils

logger = logging.getLogger(__name__)

BUILTIN_PLACEHOLDERS = {'s', 'x', 'y', 'z', 'r'}


class ConfigService(IConfigLoader):
    """Service for loading and validating tile layer configuration"""

    def load_config(self, config_path: str) -> Dict[str, Any]:
        """Load configuration from JSON file"""
        try:
            if not os.path.exists(config_path):
                raise ConfigurationError(f"Config file {config_path} not found!")

            with open(config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)

            self.validate_config(config)

            return self._process_config(config)

        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {config_path}: {e}")
        except TileLayerException:
            raise
        except Exception as e:
            raise ConfigurationError(f"Error loading config: {e}")

    def validate_config(self, config: Dict[str, Any]) -> bool:
        """Validate configuration structure"""
        if not isinstance(config, dict):
            raise ValidationError("configuration must be a JSON object")

        if 'layers' not in config:
            raise ValidationError("Missing required key: layers")

        if not isinstance(config['layers'], list):
            raise ValidationError("layers must be a list")

        seen = set()
        for index, layer in enumerate(config['layers']):
            if not isinstance(layer, dict):
                raise ValidationError(f"layers[{index}] must be an object")
            for key in ('name', 'url'):
                if key not in layer:
                    raise ValidationError(f"layers[{index}] is missing required key: {key}")
            if layer['name'] in seen:
                raise ValidationError(f"Duplicate layer name: {layer['name']}")
            seen.add(layer['name'])
            if not isinstance(layer.get('options', {}), dict):
                raise ValidationError(f"layers[{index}].options must be an object")

        if 'logging' in config and not isinstance(config['logging'], dict):
            raise ValidationError("logging must be an object")

        return True

    def _process_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Convert layer entries to LayerDefinition objects"""
        layer_defs = {}

        for layer_data in config['layers']:
            layer_defs[layer_data['name']] = self.build_definition(layer_data)

        config['layer_defs'] = layer_defs
        return config

    def build_definition(self, layer_data: Dict[str, Any]) -> LayerDefinition:
        """Build one layer definition, warning about placeholders nothing will fill"""
        options = layer_data.get('options', {})
        layer_config = LayerConfig.from_options(options)

        available = BUILTIN_PLACEHOLDERS | set(layer_config.extra)
        for placeholder in TemplateUtils.placeholders(layer_data['url']):
            if placeholder not in available:
                logger.warning(f"Layer '{layer_data['name']}': placeholder {{{placeholder}}} has no value "
                               f"and will render empty")

        return LayerDefinition(
            name=layer_data['name'],
            url=layer_data['url'],
            config=layer_config,
            description=layer_data.get('description', '')
        )

    def get_layers(self, config: Dict[str, Any]) -> List[LayerDefinition]:
        """Get all layer definitions in file order"""
        return list(config.get('layer_defs', {}).values())

    def get_layer(self, config: Dict[str, Any], layer_name: str) -> LayerDefinition:
        """Get layer definition by name"""
        layer_defs = config.get('layer_defs', {})
        if layer_name not in layer_defs:
            raise ConfigurationError(f"Layer '{layer_name}' not found")
        return layer_defs[layer_name]

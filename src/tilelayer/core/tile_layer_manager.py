import argparse
import json
import logging
from typing import Any, Dict, List, Optional

from tilelayer.core.tile_layer import TileLayer
from tilelayer.geo.crs import EPSG3857
from tilelayer.infrastructure.platform import Platform
from tilelayer.models.geometry import TileCoordinate
from tilelayer.models.layer_config import LayerDefinition
from tilelayer.models.tile_image import TileImage
from tilelayer.services.config_service import ConfigService
from tilelayer.services.tile_fetch_service import TileFetchService
from tilelayer.utils.file_utils import FileUtils
from tilelayer.utils.tile_calculator import TileCalculator

logger = logging.getLogger(__name__)


class TileLayerManager:
    """Resolves and fetches tiles of configured layers from the command line"""

    def __init__(self, config_path: str = "layers.json", platform: Optional[Platform] = None,
                 fetch_service: Optional[TileFetchService] = None):
        self.config_service = ConfigService()
        self.config = self.config_service.load_config(config_path)
        self.platform = platform or Platform.from_environment()
        self.fetch_service = fetch_service or TileFetchService()

    def list_layers(self) -> None:
        """List configured layers"""
        print("Available layers:")
        for definition in self.config_service.get_layers(self.config):
            min_zoom, max_zoom = definition.get_zoom_range()
            crs = definition.config.crs.code if definition.config.crs else 'map default'
            description = definition.description or 'No description'
            print(f"  {definition.get_name()}: {description}")
            print(f"      URL: {definition.get_url()}")
            print(f"      Zoom: {min_zoom}-{max_zoom}  CRS: {crs}")

    def show_layer(self, layer_name: str) -> None:
        """Print the effective options of one layer as JSON"""
        definition = self.config_service.get_layer(self.config, layer_name)
        print(json.dumps({'name': definition.name, 'url': definition.url,
                          'options': definition.config.to_options()}, indent=2, default=str))

    def create_layer(self, definition: LayerDefinition) -> TileLayer:
        return TileLayer(definition.url, definition.config, platform=self.platform,
                         image_factory=self.fetch_service)

    def resolve_urls(self, layer_name: str, bbox: List[float], min_zoom: int,
                     max_zoom: int) -> List[Dict[str, Any]]:
        """Tile coordinates covering bbox with the URL each one resolves to"""
        definition = self.config_service.get_layer(self.config, layer_name)
        layer = self.create_layer(definition)
        crs = layer.config.crs or EPSG3857

        def zoom_scale(to_zoom: float, from_zoom: float) -> float:
            return crs.scale(to_zoom) / crs.scale(from_zoom)

        results = []
        for zoom in range(min_zoom, max_zoom + 1):
            # Past maxNativeZoom tiles grow, so the grid is coarser than the zoom suggests
            tile_size = layer.url_resolver.tile_size(zoom, zoom_scale)
            world = TileCalculator.global_tile_range(crs, zoom, tile_size)
            for coords in TileCalculator.get_tiles_for_bbox(bbox, zoom, zoom, crs, tile_size):
                url = layer.url_resolver.resolve_url(layer.get_url(), coords, zoom, world)
                results.append({'coords': coords, 'url': url})
        return results

    def fetch_bbox(self, layer_name: str, bbox: List[float], min_zoom: int, max_zoom: int,
                   output_dir: Optional[str] = None) -> Dict[str, Any]:
        """Load every tile covering bbox through the tile lifecycle"""
        definition = self.config_service.get_layer(self.config, layer_name)
        layer = self.create_layer(definition)
        results = {
            'total': 0,
            'loaded': 0,
            'failed': 0,
            'errors': []
        }

        def done(error: Optional[Exception], tile: TileImage) -> None:
            if error is not None:
                results['failed'] += 1
                results['errors'].append(str(error))
                return
            results['loaded'] += 1
            if output_dir is not None and tile.data:
                self._write_tile(output_dir, layer_name, tile.coords, tile.src, tile.data)

        for entry in self.resolve_urls(layer_name, bbox, min_zoom, max_zoom):
            results['total'] += 1
            layer.lifecycle.create_tile(entry['coords'], done, entry['url'])

        self.fetch_service.process_pending()
        logger.info(f"Layer {layer_name}: {results['loaded']}/{results['total']} tiles loaded")
        return results

    @staticmethod
    def _write_tile(output_dir: str, layer_name: str, coords: TileCoordinate, url: str, data: bytes) -> None:
        extension = FileUtils.guess_extension(url)
        tile_path = FileUtils.get_tile_path(output_dir, layer_name, coords.z, coords.x, coords.y, extension)
        with open(tile_path, 'wb') as f:
            f.write(data)

    def run_from_command_line(self, argv: Optional[List[str]] = None) -> None:
        """Run tile layer command-line interface"""
        parser = argparse.ArgumentParser(
            description='Resolve and fetch tile URLs of configured tile layers.',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=(
                'Examples:\n\n'
                '1) List configured layers:\n'
                '   tilelayer --list-layers\n\n'
                '2) Print tile URLs for a BBOX (lon/lat order):\n'
                '   tilelayer --layer osm --bbox 28.5 40.8 29.5 41.2 --min-zoom 10 --max-zoom 11\n\n'
                '3) Fetch them and store under ./tiles/<layer>/<z>/<x>/<y>.<ext>:\n'
                '   tilelayer --layer osm --bbox 28.5 40.8 29.5 41.2 --min-zoom 10 --fetch --output tiles'
            )
        )
        parser.add_argument('--config', default='layers.json', help='Layer configuration file (default: layers.json)')
        parser.add_argument('--layer', help='Layer name from the configuration')
        parser.add_argument('--list-layers', action='store_true', help='List configured layers')
        parser.add_argument('--show', action='store_true', help='Print effective options of --layer')
        parser.add_argument('--bbox', nargs=4, type=float, metavar=('min_lon', 'min_lat', 'max_lon', 'max_lat'),
                            help='Area to resolve tiles for (lon/lat)')
        parser.add_argument('--min-zoom', type=int, default=10, help='Minimum zoom level (default: 10)')
        parser.add_argument('--max-zoom', type=int, help='Maximum zoom level (default: --min-zoom)')
        parser.add_argument('--fetch', action='store_true', help='Fetch the tiles instead of printing URLs')
        parser.add_argument('--output', help='Directory to store fetched tiles in')

        args = parser.parse_args(argv)

        if args.list_layers:
            self.list_layers()
            return

        if not args.layer:
            print("Please provide --layer, or use --list-layers to see configured layers!")
            return

        if args.show:
            self.show_layer(args.layer)
            return

        if not args.bbox:
            print("Please provide --bbox min_lon min_lat max_lon max_lat")
            return

        max_zoom = args.max_zoom if args.max_zoom is not None else args.min_zoom

        if args.fetch:
            result = self.fetch_bbox(args.layer, args.bbox, args.min_zoom, max_zoom, args.output)
            print(f"Loaded {result['loaded']} of {result['total']} tiles, {result['failed']} failed")
            for error in result['errors'][:10]:
                print(f"  {error}")
            return

        for entry in self.resolve_urls(args.layer, args.bbox, args.min_zoom, max_zoom):
            coords = entry['coords']
            print(f"{coords.z}/{coords.x}/{coords.y}\t{entry['url']}")

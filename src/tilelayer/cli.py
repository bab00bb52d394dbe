#!/usr/bin/env python3
"""
Tile Layer - command line entry point
Resolves tile URLs of configured layers and optionally fetches them
"""

import argparse
import sys
import logging

from tilelayer.core.tile_layer_manager import TileLayerManager
from tilelayer.exceptions.tile_layer_exceptions import TileLayerException
from tilelayer.infrastructure.logging import LoggingManager


def parse_config_path(argv):
    """Config file named on the command line; full parsing happens in the manager"""
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument('--config', default='layers.json')
    args, _ = parser.parse_known_args(argv)
    return args.config


def main():
    """Main entry point for the tile layer command line"""
    try:
        config_path = parse_config_path(sys.argv[1:])
        
        manager = TileLayerManager(config_path)
        LoggingManager.setup_logging(manager.config)
        logger = logging.getLogger(__name__)
        logger.debug(f"Loaded {len(manager.config['layer_defs'])} layers from {config_path}")
        
        manager.run_from_command_line()
        
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        sys.exit(1)
    except TileLayerException as e:
        print(f"\nError: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"\nUnexpected error: {e}")
        print("Please check your configuration and try again.")
        sys.exit(1)


if __name__ == "__main__":
    main()

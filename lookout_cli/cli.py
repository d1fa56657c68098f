"""
Lookout CLI - Main entry point.

Every command prints JSON to stdout; errors go to stderr with exit code 1.
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from lookout_aoi.config import LookoutConfig
from lookout_aoi.datasets import load_events
from lookout_aoi.registry import AOIRegistry, load_aois
from lookout_aoi.clustering import initialize_clustering
from lookout_aoi.policies import validate_poi
from lookout_aoi.logging import LogEvent, create_logger


def load_config(config_path: Optional[str]) -> LookoutConfig:
    """Config from YAML, or defaults when no path is given."""
    if config_path is None:
        return LookoutConfig()
    return LookoutConfig.from_yaml(config_path)


def run_analyze(dataset_path: str, aois_path: str, config: LookoutConfig, level: int) -> Dict[str, Any]:
    """Validate the AOIs, then report containment per AOI and the summary."""
    dataset = load_events(dataset_path, logger=create_logger("datasets", level))
    locations = dataset.all_locations()

    registry = AOIRegistry(config=config, logger=create_logger("registry", level))
    rejected: List[Dict[str, str]] = []
    for shape in load_aois(aois_path):
        error = registry.submit(shape)
        if error is not None:
            rejected.append({'id': shape.id, 'error': error})

    analyses = registry.analyze(locations)
    return {
        'analyses': [analysis.to_dict() for analysis in analyses],
        'summary': registry.summary(locations).to_dict(),
        'rejected': rejected,
    }


def run_clusters(dataset_path: str, bbox: List[float], zoom: float, config: LookoutConfig, level: int) -> Dict[str, Any]:
    """Cluster features for a viewport as a GeoJSON FeatureCollection."""
    dataset = load_events(dataset_path, logger=create_logger("datasets", level))
    index = initialize_clustering(
        dataset.all_locations(),
        config=config.clustering,
        logger=create_logger("clustering", level),
    )
    features = index.get_clusters(tuple(bbox), zoom)
    return {
        'type': 'FeatureCollection',
        'features': [feature.to_geojson() for feature in features],
    }


def run_validate_poi(lng: float, lat: float, name: str, config: LookoutConfig) -> Dict[str, Any]:
    result = validate_poi(
        (lng, lat),
        name,
        name_max_length=config.poi.name_max_length,
        precision=config.poi.coordinate_precision,
    )
    return {
        'valid': result.valid,
        'coordinates': list(result.coordinates) if result.coordinates else None,
        'error': result.error,
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lookout-cli",
        description="Lookout CLI - AOI analysis and point clustering",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Containment per AOI + summary
  lookout-cli analyze data/sample_events.yaml config/aois.yaml

  # Cluster markers for a viewport
  lookout-cli clusters data/sample_events.yaml --bbox -0.13 51.51 -0.12 51.52 --zoom 12

  # Validate POI coordinates and name
  lookout-cli validate-poi -0.1276 51.5074 --name "Trafalgar Square"

  # Custom thresholds
  lookout-cli --config config/lookout.yaml analyze data/sample_events.yaml config/aois.yaml
"""
    )

    # Global arguments
    parser.add_argument(
        "--config",
        default=None,
        help="LookoutConfig YAML (default: built-in thresholds)"
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    analyze = subparsers.add_parser('analyze', help='Count dataset locations inside each AOI')
    analyze.add_argument('dataset', help='Path to events dataset (YAML or JSON)')
    analyze.add_argument('aois', help='Path to AOI YAML')

    clusters = subparsers.add_parser('clusters', help='Cluster dataset locations for a viewport')
    clusters.add_argument('dataset', help='Path to events dataset (YAML or JSON)')
    clusters.add_argument(
        '--bbox',
        nargs=4,
        type=float,
        required=True,
        metavar=('WEST', 'SOUTH', 'EAST', 'NORTH'),
        help='Viewport bounding box in degrees'
    )
    clusters.add_argument('--zoom', type=float, required=True, help='Map zoom level')

    validate = subparsers.add_parser('validate-poi', help='Validate POI coordinates and name')
    validate.add_argument('lng', type=float, help='Longitude')
    validate.add_argument('lat', type=float, help='Latitude')
    validate.add_argument('--name', default='', help='POI name')

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logger = create_logger("cli", logging.WARNING)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.error(
            event=LogEvent.CONFIG_ERROR,
            message="Failed to load config",
            metadata={'path': args.config, 'error': str(e)},
        )
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    level = getattr(logging, config.log_level.upper())

    # Execute command
    try:
        if args.command == 'analyze':
            output = run_analyze(args.dataset, args.aois, config, level)

        elif args.command == 'clusters':
            output = run_clusters(args.dataset, args.bbox, args.zoom, config, level)

        elif args.command == 'validate-poi':
            output = run_validate_poi(args.lng, args.lat, args.name, config)

        print(json.dumps(output, indent=2, default=str))

    except Exception as e:
        logger.error(
            event=LogEvent.COMMAND_ERROR,
            message=f"{args.command} failed",
            metadata={'error': str(e)},
        )
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()

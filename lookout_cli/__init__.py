"""
Lookout CLI - Command-line interface over the lookout_aoi library.

Runs containment analysis, cluster queries and POI validation against
dataset and AOI files without writing Python.

Usage:
    lookout-cli analyze data/sample_events.yaml config/aois.yaml
    lookout-cli clusters data/sample_events.yaml --bbox -0.13 51.51 -0.12 51.52 --zoom 12
    lookout-cli validate-poi -0.1276 51.5074 --name "Trafalgar Square"
"""

__version__ = "1.0.0"

"""
PPO Downloader - Retrieve plant phenology data from the PPO data portal.

The Global Plant Phenology Data Portal (http://plantphenology.org/) aggregates
phenology observations from USA-NPN, NEON and PEP725. This package builds
download queries from simple filters and returns the results as pandas
DataFrames, with a CLI for exporting them to CSV, Excel or GeoJSON.

Features:
- Filter by genus, specific epithet and Plant Phenology Ontology stage
- Filter by year range, day-of-year range and bounding box
- Export to CSV, Excel, or GeoJSON formats

Example CLI usage:
    ppo-data --genus Quercus --from-year 1979 --to-year 2004 -o quercus.csv
    ppo-data --bbox 44,-124,46,-122 --from-day 1 --to-day 60 --format geojson

Example Python usage:
    from ppo_downloader import ppo_data

    df = ppo_data(genus="Quercus", from_year=1979, to_year=2004)
"""

__version__ = "1.0.0"

from ppo_downloader.api import PPOClient, decode_response, ppo_data
from ppo_downloader.errors import DecodeError, PPOError, TransportError, ValidationError
from ppo_downloader.query import (
    BoundingBox,
    FilterSet,
    QueryBuilder,
    QueryClause,
    build_query_url,
)
from ppo_downloader.config import Config

__all__ = [
    "PPOClient",
    "ppo_data",
    "decode_response",
    "PPOError",
    "ValidationError",
    "TransportError",
    "DecodeError",
    "FilterSet",
    "BoundingBox",
    "QueryBuilder",
    "QueryClause",
    "build_query_url",
    "Config",
    "__version__",
]

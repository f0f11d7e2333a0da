"""
GeoJSON exporter for PPO phenology data.

Exports observations as a GeoJSON FeatureCollection, suitable for QGIS,
ArcGIS or web maps like Leaflet.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import geojson
import pandas as pd
from geojson import Feature, FeatureCollection, Point

from ppo_downloader.utils import get_logger


class GeoJSONExporter:
    """
    Export a result table to GeoJSON format.

    Creates a FeatureCollection with Point geometry for each row.
    Rows without coordinates are skipped.

    Example:
        exporter = GeoJSONExporter()
        exporter.export(df, "output.geojson")
    """

    FILE_EXTENSION = ".geojson"

    def __init__(
        self,
        latitude_column: str = "latitude",
        longitude_column: str = "longitude",
    ):
        """
        Initialize the exporter.

        Args:
            latitude_column: Column holding decimal latitude
            longitude_column: Column holding decimal longitude
        """
        self.latitude_column = latitude_column
        self.longitude_column = longitude_column
        self.logger = get_logger()

    def export(
        self,
        df: pd.DataFrame,
        output_path: str | Path,
        **kwargs,  # Accept extra args for compatibility
    ) -> Path:
        """
        Export a DataFrame to a GeoJSON file.

        Args:
            df: Result table
            output_path: Output file path

        Returns:
            Path to the created file
        """
        output_path = Path(output_path)

        # Ensure .geojson extension
        if output_path.suffix.lower() not in (".geojson", ".json"):
            output_path = output_path.with_suffix(".geojson")

        self.logger.info(f"Exporting {len(df):,} records to GeoJSON...")

        feature_collection = self.to_feature_collection(df)

        with open(output_path, "w", encoding="utf-8") as f:
            f.write(geojson.dumps(feature_collection, indent=2))

        self.logger.info(f"GeoJSON file saved: {output_path}")
        return output_path

    def to_feature_collection(self, df: pd.DataFrame) -> FeatureCollection:
        """
        Build a FeatureCollection from a DataFrame.

        Raises:
            KeyError: If the coordinate columns are missing
        """
        for column in (self.latitude_column, self.longitude_column):
            if column not in df.columns:
                raise KeyError(f"Missing coordinate column: {column}")

        features = []
        skipped = 0

        for idx, row in enumerate(df.to_dict(orient="records")):
            lat = row.pop(self.latitude_column)
            lng = row.pop(self.longitude_column)

            if pd.isna(lat) or pd.isna(lng):
                skipped += 1
                continue

            features.append(
                Feature(
                    geometry=Point((float(lng), float(lat))),
                    properties=self._clean_properties(row),
                    id=idx,
                )
            )

        if skipped > 0:
            self.logger.warning(f"Skipped {skipped} records without coordinates")

        return FeatureCollection(features)

    @staticmethod
    def _clean_properties(row: dict[str, Any]) -> dict[str, Any]:
        """Replace NaN with None and numpy scalars with Python values."""
        props = {}
        for key, value in row.items():
            if pd.isna(value):
                value = None
            elif hasattr(value, "item"):
                value = value.item()
            props[str(key)] = value
        return props

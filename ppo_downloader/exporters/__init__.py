"""
Export modules for PPO phenology data.

This package provides exporters for various file formats:
- CSV (.csv) for universal compatibility
- Excel (.xlsx) with conditional formatting
- GeoJSON (.geojson) for GIS applications
"""

from ppo_downloader.exporters.excel import ExcelExporter
from ppo_downloader.exporters.csv import CSVExporter
from ppo_downloader.exporters.geojson import GeoJSONExporter

__all__ = ["ExcelExporter", "CSVExporter", "GeoJSONExporter", "get_exporter"]


def get_exporter(format_name: str):
    """
    Get the appropriate exporter for a format name.

    Args:
        format_name: Format name (csv, excel, geojson)

    Returns:
        Exporter class

    Raises:
        ValueError: If format is not supported
    """
    exporters = {
        "excel": ExcelExporter,
        "xlsx": ExcelExporter,
        "csv": CSVExporter,
        "geojson": GeoJSONExporter,
        "json": GeoJSONExporter,
    }

    format_lower = str(format_name).strip().lower()
    if format_lower not in exporters:
        supported = ", ".join(sorted(exporters.keys()))
        raise ValueError(
            f"Unsupported format: {format_name}. Supported formats: {supported}"
        )

    return exporters[format_lower]
